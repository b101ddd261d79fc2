# db/models/item.py
import enum
from datetime import datetime
from configs import db


class ItemType(enum.Enum):
    NORMAL = "Normal Item"  # counted units, daily stock sheet
    GROCERY = "Grocery Item"  # expiry-dated lots, by weight or count
    MACHINE = "Machine"  # coffee machines, sold by meter reading

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        s = (value or "").strip().lower()
        for t in cls:
            if s in (t.value.lower(), t.name.lower()):
                return t
        return None


class Item(db.Model):
    __tablename__ = "item"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    code = db.Column(db.String(32), unique=True, nullable=False, index=True)
    item_type = db.Column(db.Enum(ItemType), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(100), nullable=False)
    subcategory = db.Column(db.String(100))
    price = db.Column(db.Numeric(18, 2), nullable=False, default=0)
    description = db.Column(db.Text)
    sold_by_weight = db.Column(db.Boolean, default=False, nullable=False)
    notify_expiry = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __str__(self):
        return f"{self.name} ({self.code})"
