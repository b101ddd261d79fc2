# dao/item.py
import logging
import secrets
import string
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from configs import db
from dao.errors import DuplicateEntryError, InUseError, NotFoundError, ValidationError
from db.models.grocery import GroceryBatch, GroceryReturn, GrocerySale
from db.models.item import Item, ItemType
from db.models.machine import MachineBatch, MachineSale
from db.models.stock import StockEntry

logger = logging.getLogger(__name__)

_CODE_ALPHABET = string.ascii_uppercase + string.digits
MACHINE_CATEGORY = "Machine"
MACHINE_SUBCATEGORY = "Coffee Machine"


class ItemInUseError(InUseError):
    pass


def generate_code() -> str:
    while True:
        code = "ITEM" + "".join(secrets.choice(_CODE_ALPHABET) for _ in range(9))
        if not Item.query.filter_by(code=code).first():
            return code


def _to_price(v) -> Decimal:
    try:
        price = Decimal(str(v))
    except (InvalidOperation, TypeError):
        raise ValidationError("Price must be a number")
    if not price.is_finite() or price <= 0:
        raise ValidationError("Price must be greater than 0")
    return price.quantize(Decimal("0.01"))


def _machine_name_taken(name: str, exclude_code: Optional[str] = None) -> bool:
    q = Item.query.filter(
        func.lower(Item.name) == name.strip().lower(),
        Item.item_type == ItemType.MACHINE,
    )
    if exclude_code:
        q = q.filter(Item.code != exclude_code)
    return q.first() is not None


def item_in_use(code: str) -> bool:
    checks = (
        db.session.query(StockEntry.id).filter_by(item_code=code),
        db.session.query(GroceryBatch.id).filter_by(item_code=code),
        db.session.query(GrocerySale.id).filter_by(item_code=code),
        db.session.query(GroceryReturn.id).filter_by(item_code=code),
        db.session.query(MachineBatch.id).filter_by(machine_code=code),
        db.session.query(MachineSale.id).filter_by(machine_code=code),
    )
    return any(q.limit(1).first() is not None for q in checks)


def list_items(item_type: Optional[ItemType] = None) -> List[Item]:
    q = Item.query
    if item_type:
        q = q.filter(Item.item_type == item_type)
    return q.order_by(Item.item_type, Item.name).all()


def get_item(code: str) -> Optional[Item]:
    return Item.query.filter_by(code=code).one_or_none()


def require_item(code: str, item_type: Optional[ItemType] = None) -> Item:
    it = get_item(code)
    if not it:
        raise NotFoundError(f"Item {code} not found", itemCode=code)
    if item_type and it.item_type != item_type:
        raise ValidationError(
            f"Item {code} is a {it.item_type.value}, expected {item_type.value}",
            itemCode=code,
        )
    return it


def create_item(
    item_type,
    name: str,
    category: Optional[str],
    price,
    subcategory: Optional[str] = None,
    description: Optional[str] = None,
    sold_by_weight: bool = False,
    notify_expiry: bool = True,
) -> Item:
    t = ItemType.parse(item_type)
    if not t or not (name or "").strip() or price in (None, ""):
        raise ValidationError("Required fields missing")
    if t == ItemType.MACHINE:
        if _machine_name_taken(name):
            raise DuplicateEntryError("Machine with this name already exists")
        category, subcategory = MACHINE_CATEGORY, MACHINE_SUBCATEGORY
    elif not (category or "").strip():
        raise ValidationError("Category is required")

    it = Item(
        code=generate_code(),
        item_type=t,
        name=name.strip(),
        category=category.strip(),
        subcategory=subcategory or None,
        price=_to_price(price),
        description=description or None,
        sold_by_weight=bool(sold_by_weight) and t == ItemType.GROCERY,
        notify_expiry=bool(notify_expiry),
    )
    db.session.add(it)
    _commit()
    logger.info("item created: %s %s", it.code, it.name)
    return it


def update_item(code: str, **fields) -> Item:
    it = require_item(code)
    name = (fields.get("name") or "").strip()
    if not name or fields.get("price") in (None, ""):
        raise ValidationError("Required fields missing")

    if it.item_type == ItemType.MACHINE:
        if _machine_name_taken(name, exclude_code=code):
            raise DuplicateEntryError("Machine with this name already exists")
        fields["category"], fields["subcategory"] = MACHINE_CATEGORY, MACHINE_SUBCATEGORY
    elif not (fields.get("category") or "").strip():
        raise ValidationError("Category is required")
    by_weight = bool(it.sold_by_weight)
    if "sold_by_weight" in fields:
        by_weight = bool(fields["sold_by_weight"]) and it.item_type == ItemType.GROCERY
        # lots were sized under the old unit
        if by_weight != bool(it.sold_by_weight) and item_in_use(code):
            raise ItemInUseError("Item has stock records, its unit cannot be changed.")

    it.name = name
    it.category = fields["category"].strip()
    it.subcategory = fields.get("subcategory") or None
    it.price = _to_price(fields["price"])
    it.description = fields.get("description") or None
    it.sold_by_weight = by_weight
    if "notify_expiry" in fields:
        it.notify_expiry = bool(fields["notify_expiry"])
    _commit()
    return it


def delete_item(code: str) -> None:
    it = require_item(code)
    if item_in_use(code):
        raise ItemInUseError("Item has stock records, it cannot be deleted.")
    db.session.delete(it)
    _commit()


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
