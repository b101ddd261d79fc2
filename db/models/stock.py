# db/models/stock.py
from datetime import datetime
from configs import db
from db.models.item import ItemType


class StockEntry(db.Model):
    """One row per (date, branch, item) for unit-counted items."""

    __tablename__ = "stock_entry"
    __table_args__ = (
        db.UniqueConstraint("stock_date", "branch", "item_code", name="uq_stock_entry_day"),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    stock_date = db.Column(db.Date, nullable=False, index=True)
    branch = db.Column(db.String(100), nullable=False, index=True)
    item_code = db.Column(db.String(32), db.ForeignKey("item.code"), nullable=False)
    added = db.Column(db.Integer, nullable=False, default=0)
    returned = db.Column(db.Integer, nullable=False, default=0)
    transferred = db.Column(db.Integer, nullable=False, default=0)
    sold = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow)

    item = db.relationship("Item")

    @property
    def available(self) -> int:
        return max(0, (self.added or 0) - (self.returned or 0) - (self.transferred or 0))

    def recompute_sold(self) -> None:
        self.sold = (self.added or 0) - (self.returned or 0) - (self.transferred or 0)


class FinishedBatch(db.Model):
    """Existence of a row locks (date, branch, item type) against further writes."""

    __tablename__ = "finished_batch"
    __table_args__ = (
        db.UniqueConstraint(
            "finish_date", "branch", "item_type", name="uq_finished_batch_scope"
        ),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    finish_date = db.Column(db.Date, nullable=False)
    branch = db.Column(db.String(100), nullable=False)
    item_type = db.Column(db.Enum(ItemType), nullable=False, default=ItemType.NORMAL)
    finished_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
