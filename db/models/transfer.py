from datetime import datetime
from configs import db
from db.models.item import ItemType


class Transfer(db.Model):
    __tablename__ = "transfer"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    transfer_id = db.Column(db.String(48), unique=True, nullable=False)
    transfer_date = db.Column(db.Date, nullable=False, index=True)
    sender_branch = db.Column(db.String(100), nullable=False)
    receiver_branch = db.Column(db.String(100), nullable=False)
    item_type = db.Column(db.Enum(ItemType), nullable=False)
    items = db.Column(db.JSON, nullable=False, default=list)  # [{itemCode, quantity}]
    processed_by = db.Column(db.String(120))
    processed_at = db.Column(db.DateTime, default=datetime.utcnow)
