# dao/grocery.py
"""Grocery lots with expiry dates.

Every intake is its own lot (never merged) so expiry can be tracked. Lots are
consumed earliest-expiry first on returns and transfers. A counted
"new remaining" figure is spread back over the lots in proportion to what
they hold, and the difference is booked as a sale. Lots are never deleted,
even when empty.
"""
import logging
import uuid
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from configs import db
from dao import allocation, batch_lock
from dao.activity import log_activity
from dao.branch import require_branch
from dao.errors import InsufficientStockError, InvalidQuantityError, ValidationError
from dao.filters import apply_filters, branch_is, date_from as _from, date_is, date_to as _to, equals
from dao.item import require_item
from db.models.grocery import GroceryBatch, GroceryReturn, GrocerySale
from db.models.item import Item, ItemType
from utils.payload import RemainingUpdate

logger = logging.getLogger(__name__)

MONEY_STEP = Decimal("0.01")
DEFAULT_RETURN_REASON = "waste"


def _dec(x) -> Decimal:
    return Decimal(str(x or 0))


def new_batch_id() -> str:
    return "B" + uuid.uuid4().hex[:20].upper()


def _check_lot_quantity(item: Item, quantity: Decimal, field: str = "quantity") -> Decimal:
    if quantity <= 0:
        raise InvalidQuantityError(f"{field} must be greater than 0", itemCode=item.code)
    if not item.sold_by_weight and quantity != quantity.to_integral_value():
        raise InvalidQuantityError(
            f"{item.name} is sold by count, {field} must be a whole number",
            itemCode=item.code,
        )
    return allocation.q3(quantity)


# ---------- queries ----------
def fifo_batches(item_code: str, branch: str, for_update: bool = False) -> List[GroceryBatch]:
    q = GroceryBatch.query.filter_by(item_code=item_code, branch=branch).order_by(
        GroceryBatch.expiry_date.asc(), GroceryBatch.added_date.asc(), GroceryBatch.id.asc()
    )
    if for_update:
        q = q.with_for_update()
    return q.all()


def list_batches(
    branch: Optional[str] = None, item_code: Optional[str] = None, day: Optional[date] = None
) -> List[GroceryBatch]:
    q = apply_filters(
        GroceryBatch.query,
        branch_is(GroceryBatch.branch, branch),
        equals(GroceryBatch.item_code, item_code),
        date_is(GroceryBatch.added_date, day),
    )
    return q.order_by(GroceryBatch.added_date.desc(), GroceryBatch.expiry_date.asc()).all()


def get_available_stock(item_code: str, branch: str) -> Decimal:
    """Total Stock shown to operators: sum of remaining, not of original lot sizes."""
    total = (
        db.session.query(func.coalesce(func.sum(GroceryBatch.remaining), 0))
        .filter(GroceryBatch.item_code == item_code, GroceryBatch.branch == branch)
        .scalar()
    )
    return allocation.q3(total)


def check_finished(day: date, branch: str) -> bool:
    return batch_lock.is_finished(day, branch, ItemType.GROCERY)


def list_sales(branch=None, day=None, date_from=None, date_to=None) -> List[GrocerySale]:
    q = apply_filters(
        GrocerySale.query,
        branch_is(GrocerySale.branch, branch),
        date_is(GrocerySale.sale_date, day),
        _from(GrocerySale.sale_date, date_from),
        _to(GrocerySale.sale_date, date_to),
    )
    return q.order_by(GrocerySale.sale_date.desc(), GrocerySale.created_at.desc()).all()


def list_returns(branch=None, day=None, date_from=None, date_to=None) -> List[GroceryReturn]:
    q = apply_filters(
        GroceryReturn.query,
        branch_is(GroceryReturn.branch, branch),
        date_is(GroceryReturn.return_date, day),
        _from(GroceryReturn.return_date, date_from),
        _to(GroceryReturn.return_date, date_to),
    )
    return q.order_by(GroceryReturn.return_date.desc(), GroceryReturn.id.desc()).all()


def expiring_batches(days: int, branch: Optional[str] = None, today: Optional[date] = None):
    """Non-empty lots expiring between today and today + days, soonest first."""
    today = today or date.today()
    q = (
        GroceryBatch.query.join(Item, Item.code == GroceryBatch.item_code)
        .filter(
            GroceryBatch.remaining > 0,
            GroceryBatch.expiry_date >= today,
            GroceryBatch.expiry_date <= today + timedelta(days=days),
            Item.item_type == ItemType.GROCERY,
            Item.notify_expiry.is_(True),
        )
    )
    q = apply_filters(q, branch_is(GroceryBatch.branch, branch))
    return q.order_by(GroceryBatch.expiry_date.asc(), GroceryBatch.id.asc()).all()


# ---------- mutations ----------
def create_lot(item_code, branch, quantity: Decimal, expiry_date: date, added_date: date) -> GroceryBatch:
    lot = GroceryBatch(
        batch_id=new_batch_id(),
        item_code=item_code,
        branch=branch,
        quantity=quantity,
        remaining=quantity,
        expiry_date=expiry_date,
        added_date=added_date,
    )
    db.session.add(lot)
    return lot


def add_batch(
    item_code: str,
    branch: str,
    quantity,
    expiry_date: date,
    added_date: Optional[date] = None,
) -> GroceryBatch:
    added_date = added_date or date.today()
    require_branch(branch)
    item = require_item(item_code, ItemType.GROCERY)
    qty = _check_lot_quantity(item, _dec(quantity))
    batch_lock.ensure_open(added_date, branch, ItemType.GROCERY)

    lot = create_lot(item_code, branch, qty, expiry_date, added_date)
    log_activity(
        "grocery_stock_added",
        f"{qty} {item.name} added to {branch}",
        branch,
        {"itemCode": item_code, "quantity": float(qty), "expiryDate": expiry_date.isoformat()},
        real_date=added_date,
    )
    _commit()
    logger.info("grocery lot %s: %s x %s at %s", lot.batch_id, item_code, qty, branch)
    return lot


def consume_fifo(item_code: str, branch: str, quantity: Decimal) -> List[tuple]:
    """Take ``quantity`` from the lots, earliest expiry first.

    Availability is checked before any lot changes. Returns (lot, taken) pairs
    for the lots that were touched.
    """
    lots = [b for b in fifo_batches(item_code, branch, for_update=True) if _dec(b.remaining) > 0]
    try:
        takes = allocation.fifo_take([b.remaining for b in lots], quantity)
    except InsufficientStockError as e:
        raise InsufficientStockError(
            f"Cannot take {quantity}. Only {e.data.get('available')} available for item {item_code}",
            itemCode=item_code,
            **e.data,
        )
    touched = []
    for lot, take in zip(lots, takes):
        if take > 0:
            lot.remaining = allocation.q3(_dec(lot.remaining) - take)
            touched.append((lot, take))
    return touched


def record_return(
    item_code: str,
    branch: str,
    quantity,
    reason: Optional[str] = None,
    day: Optional[date] = None,
    item_name: Optional[str] = None,
) -> GroceryReturn:
    """Waste/return. Not blocked by a finished grocery batch (post-close disposal)."""
    day = day or date.today()
    require_branch(branch)
    item = require_item(item_code, ItemType.GROCERY)
    qty = _check_lot_quantity(item, _dec(quantity), "returnedQty")

    consume_fifo(item_code, branch, qty)
    ret = GroceryReturn(
        item_code=item_code,
        item_name=item_name or item.name,
        branch=branch,
        return_date=day,
        returned_qty=qty,
        reason=reason or DEFAULT_RETURN_REASON,
    )
    db.session.add(ret)
    log_activity(
        "grocery_return",
        f"{qty} {item.name} returned at {branch} ({ret.reason})",
        branch,
        {"itemCode": item_code, "quantity": float(qty), "date": day.isoformat()},
        real_date=day,
    )
    _commit()
    return ret


def record_sale(item_code, branch, day: date, sold_qty, total_cash=None, item_name=None) -> GrocerySale:
    """Append a sale fact without touching the lots."""
    require_branch(branch)
    item = require_item(item_code, ItemType.GROCERY)
    qty = _check_lot_quantity(item, _dec(sold_qty), "soldQty")
    cash = _dec(total_cash) if total_cash not in (None, "") else qty * _dec(item.price)
    sale = GrocerySale(
        item_code=item_code,
        item_name=item_name or item.name,
        branch=branch,
        sale_date=day,
        sold_qty=qty,
        total_cash=cash.quantize(MONEY_STEP),
    )
    db.session.add(sale)
    _commit()
    return sale


def _plan_update(branch: str, upd: RemainingUpdate) -> dict:
    item = require_item(upd.item_code, ItemType.GROCERY)
    lots = fifo_batches(upd.item_code, branch, for_update=True)
    currents = [allocation.q3(b.remaining) for b in lots]
    total = sum(currents, Decimal("0"))

    target = _dec(upd.new_remaining)
    if target < 0:
        raise InvalidQuantityError(
            f"New remaining for {item.name} cannot be negative", itemCode=item.code
        )
    if not item.sold_by_weight:
        target = target.quantize(Decimal("1"), rounding="ROUND_HALF_UP")
    target = allocation.q3(target)
    if target > total:
        raise InvalidQuantityError(
            f"New remaining ({target}) cannot be greater than current stock ({total})",
            itemCode=item.code,
            newRemaining=str(target),
            totalRemaining=str(total),
        )
    return {
        "item": item,
        "lots": lots,
        "target": target,
        "sold": total - target,
        "allocs": allocation.allocate(currents, target, item.sold_by_weight),
    }


def update_remaining(branch: str, updates: List[RemainingUpdate], day: Optional[date] = None) -> List[GrocerySale]:
    """Set the counted remaining per item; the shortfall becomes a sale.

    Every update is validated and allocated before the first lot is written.
    """
    day = day or date.today()
    require_branch(branch)
    if not updates:
        raise ValidationError("updates must be a non-empty list")
    codes = [u.item_code for u in updates]
    if len(set(codes)) != len(codes):
        raise ValidationError("Each item may appear only once in updates")
    batch_lock.ensure_open(day, branch, ItemType.GROCERY)

    plans = [_plan_update(branch, u) for u in updates]

    sales = []
    for plan in plans:
        item = plan["item"]
        for lot, alloc in zip(plan["lots"], plan["allocs"]):
            lot.remaining = alloc
        if plan["sold"] > 0:
            sale = GrocerySale(
                item_code=item.code,
                item_name=item.name,
                branch=branch,
                sale_date=day,
                sold_qty=plan["sold"],
                total_cash=(plan["sold"] * _dec(item.price)).quantize(MONEY_STEP),
            )
            db.session.add(sale)
            sales.append(sale)
            log_activity(
                "grocery_sale",
                f"{plan['sold']} {item.name} sold at {branch}",
                branch,
                {"itemCode": item.code, "soldQty": float(plan["sold"]), "date": day.isoformat()},
                real_date=day,
            )
    _commit()
    logger.info("grocery remaining updated at %s: %d item(s), %d sale(s)", branch, len(plans), len(sales))
    return sales


def finish_batch(day: date, branch: str) -> dict:
    require_branch(branch)
    flag = batch_lock.mark_finished(day, branch, ItemType.GROCERY)
    total = (
        db.session.query(func.coalesce(func.sum(GrocerySale.total_cash), 0))
        .filter(GrocerySale.branch == branch, GrocerySale.sale_date == day)
        .scalar()
    )
    total = _dec(total).quantize(MONEY_STEP)
    log_activity(
        "grocery_batch_finished",
        f"Grocery batch finished at {branch}: Total Sales {total:.2f}",
        branch,
        {"date": day.isoformat(), "totalSales": float(total)},
        real_date=day,
        occurred_at=flag.finished_at,
    )
    _commit()
    return {"finishedAt": flag.finished_at, "totalSales": total}


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
