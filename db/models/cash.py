import enum
from datetime import datetime
from configs import db


class CashStatus(enum.Enum):
    MATCH = "Match"
    OVERAGE = "Overage"
    SHORTAGE = "Shortage"


class CashEntry(db.Model):
    __tablename__ = "cash_entry"
    __table_args__ = (
        db.UniqueConstraint("entry_date", "branch", name="uq_cash_entry_day"),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    entry_date = db.Column(db.Date, nullable=False, index=True)
    branch = db.Column(db.String(100), nullable=False)
    expected = db.Column(db.Numeric(18, 2), nullable=False)
    actual = db.Column(db.Numeric(18, 2), nullable=False)
    actual_cash = db.Column(db.Numeric(18, 2), nullable=False)
    card_payment = db.Column(db.Numeric(18, 2), nullable=False, default=0)
    difference = db.Column(db.Numeric(18, 2), nullable=False)
    status = db.Column(db.Enum(CashStatus), nullable=False)
    operator_id = db.Column(db.String(64))
    operator_name = db.Column(db.String(120))
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
