from datetime import datetime
from configs import db


class Activity(db.Model):
    __tablename__ = "activity"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    type = db.Column(db.String(40), nullable=False)  # stock_added/return/transfer/...
    message = db.Column(db.Text, nullable=False)
    branch = db.Column(db.String(100), index=True)
    occurred_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    real_date = db.Column(db.Date)
    details = db.Column("metadata", db.JSON)
