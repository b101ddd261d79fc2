# db/models/grocery.py
from datetime import datetime
from configs import db


class GroceryBatch(db.Model):
    __tablename__ = "grocery_batch"
    __table_args__ = (
        db.CheckConstraint("remaining >= 0", name="ck_grocery_remaining_min"),
        db.CheckConstraint("remaining <= quantity", name="ck_grocery_remaining_max"),
        db.Index("ix_grocery_batch_fifo", "item_code", "branch", "expiry_date", "added_date"),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    batch_id = db.Column(db.String(40), unique=True, nullable=False)
    item_code = db.Column(db.String(32), db.ForeignKey("item.code"), nullable=False)
    branch = db.Column(db.String(100), nullable=False)
    quantity = db.Column(db.Numeric(18, 3), nullable=False)  # original lot size, never changes
    remaining = db.Column(db.Numeric(18, 3), nullable=False)
    expiry_date = db.Column(db.Date, nullable=False)
    added_date = db.Column(db.Date, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    item = db.relationship("Item")


class GrocerySale(db.Model):
    __tablename__ = "grocery_sale"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    item_code = db.Column(db.String(32), nullable=False)
    item_name = db.Column(db.String(255))
    branch = db.Column(db.String(100), nullable=False)
    sale_date = db.Column(db.Date, nullable=False, index=True)
    sold_qty = db.Column(db.Numeric(18, 3), nullable=False)
    total_cash = db.Column(db.Numeric(18, 2), nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class GroceryReturn(db.Model):
    __tablename__ = "grocery_return"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    item_code = db.Column(db.String(32), nullable=False)
    item_name = db.Column(db.String(255))
    branch = db.Column(db.String(100), nullable=False)
    return_date = db.Column(db.Date, nullable=False, index=True)
    returned_qty = db.Column(db.Numeric(18, 3), nullable=False)
    reason = db.Column(db.String(100), default="waste")
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
