# db/models/machine.py
import enum
from datetime import datetime
from configs import db


class MachineBatchStatus(enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class MachineBatch(db.Model):
    __tablename__ = "machine_batch"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    batch_id = db.Column(db.String(40), unique=True, nullable=False, index=True)
    machine_code = db.Column(db.String(32), db.ForeignKey("item.code"), nullable=False)
    branch = db.Column(db.String(100), nullable=False)
    start_value = db.Column(db.Integer, nullable=False)
    end_value = db.Column(db.Integer)
    batch_date = db.Column(db.Date, nullable=False)
    status = db.Column(
        db.Enum(MachineBatchStatus), default=MachineBatchStatus.ACTIVE, nullable=False
    )
    started_at = db.Column(db.DateTime, default=datetime.utcnow)
    ended_at = db.Column(db.DateTime)

    machine = db.relationship("Item")


class MachineSale(db.Model):
    __tablename__ = "machine_sale"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    batch_id = db.Column(db.String(40), db.ForeignKey("machine_batch.batch_id"))
    machine_code = db.Column(db.String(32), nullable=False)
    machine_name = db.Column(db.String(255))
    sale_date = db.Column(db.Date, nullable=False, index=True)
    branch = db.Column(db.String(100), nullable=False)
    start_value = db.Column(db.Integer, nullable=False)
    end_value = db.Column(db.Integer, nullable=False)
    sold_qty = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(18, 2), nullable=False)
    total_cash = db.Column(db.Numeric(18, 2), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
