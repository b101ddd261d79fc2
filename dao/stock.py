# dao/stock.py
"""Daily stock sheet for unit-counted ("Normal Item") goods.

Counters per (date, branch, item) only grow: ``added`` through stock intake
and incoming transfers, ``returned`` through returns, ``transferred`` through
outgoing transfers. ``sold`` is derived and becomes final when the batch is
finished. Invariant: returned + transferred <= added.
"""
import logging
from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from configs import db
from dao import batch_lock
from dao.activity import log_activity
from dao.branch import require_branch
from dao.errors import InsufficientStockError, InvalidQuantityError
from dao.item import require_item
from db.models.item import Item, ItemType
from db.models.stock import FinishedBatch, StockEntry
from utils.payload import StockLine

logger = logging.getLogger(__name__)


# ---------- queries ----------
def get_stocks(
    day: date, branch: str, item_type: Optional[ItemType] = None
) -> Tuple[List[StockEntry], Optional[FinishedBatch]]:
    """Rows of the sheet plus the Normal Item finish flag (None when open)."""
    q = (
        StockEntry.query.join(Item, Item.code == StockEntry.item_code)
        .filter(StockEntry.stock_date == day, StockEntry.branch == branch)
    )
    if item_type:
        q = q.filter(Item.item_type == item_type)
    rows = q.order_by(Item.name.asc()).all()
    return rows, batch_lock.get_flag(day, branch, ItemType.NORMAL)


def get_batch_status(day: date, branch: str) -> bool:
    return batch_lock.is_finished(day, branch, ItemType.NORMAL)


def get_entry(day: date, branch: str, item_code: str, for_update: bool = False) -> Optional[StockEntry]:
    q = StockEntry.query.filter_by(stock_date=day, branch=branch, item_code=item_code)
    if for_update:
        q = q.with_for_update()
    return q.one_or_none()


# ---------- helpers ----------
def _merge_lines(lines: Iterable[StockLine]) -> Dict[str, int]:
    """Sum quantities per item code, keeping first-seen order."""
    merged: Dict[str, int] = defaultdict(int)
    for ln in lines:
        if ln.quantity <= 0:
            raise InvalidQuantityError(
                f"Quantity for item {ln.item_code} must be greater than 0",
                itemCode=ln.item_code,
            )
        merged[ln.item_code] += int(ln.quantity)
    return merged


def item_names(codes: Iterable[str]) -> Dict[str, str]:
    codes = list(codes)
    if not codes:
        return {}
    return {
        code: name
        for code, name in db.session.query(Item.code, Item.name).filter(Item.code.in_(codes))
    }


def bump_added(day: date, branch: str, item_code: str, quantity: int) -> StockEntry:
    """Upsert: create the row with added=quantity or grow ``added``."""
    entry = get_entry(day, branch, item_code, for_update=True)
    now = datetime.utcnow()
    if entry is None:
        entry = StockEntry(
            stock_date=day,
            branch=branch,
            item_code=item_code,
            added=quantity,
            returned=0,
            transferred=0,
            sold=0,
            created_at=now,
            updated_at=now,
        )
        db.session.add(entry)
    else:
        entry.added = (entry.added or 0) + quantity
        entry.updated_at = now
    return entry


def check_available(day: date, branch: str, wanted: Dict[str, int], verb: str) -> Dict[str, StockEntry]:
    """Lock the rows and make sure each item has ``wanted`` units available."""
    entries = {}
    for code, qty in wanted.items():
        entry = get_entry(day, branch, code, for_update=True)
        available = entry.available if entry else 0
        if qty > available:
            raise InsufficientStockError(
                f"Cannot {verb} {qty}. Only {available} available for item {code}",
                itemCode=code,
                requested=qty,
                available=available,
            )
        entries[code] = entry
    return entries


# ---------- mutations ----------
def add_stocks(day: date, branch: str, lines: List[StockLine]) -> List[StockEntry]:
    merged = _merge_lines(lines)
    require_branch(branch)
    for code in merged:
        require_item(code, ItemType.NORMAL)
    batch_lock.ensure_open(day, branch, ItemType.NORMAL)

    names = item_names(merged)
    entries = []
    for code, qty in merged.items():
        entries.append(bump_added(day, branch, code, qty))
        log_activity(
            "stock_added",
            f"{qty} {names.get(code, code)} added to {branch}",
            branch,
            {"itemCode": code, "quantity": qty, "date": day.isoformat()},
        )
    _commit()
    logger.info("stock added %s/%s: %s", branch, day, dict(merged))
    return entries


def add_stock(day: date, branch: str, item_code: str, quantity: int) -> StockEntry:
    return add_stocks(day, branch, [StockLine(item_code, quantity)])[0]


def record_returns(day: date, branch: str, lines: List[StockLine]) -> List[StockEntry]:
    """All lines are checked against availability before any counter moves."""
    merged = _merge_lines(lines)
    require_branch(branch)
    batch_lock.ensure_open(day, branch, ItemType.NORMAL)
    entries = check_available(day, branch, merged, "return")

    names = item_names(merged)
    now = datetime.utcnow()
    for code, qty in merged.items():
        entry = entries[code]
        entry.returned = (entry.returned or 0) + qty
        entry.recompute_sold()
        entry.updated_at = now
        log_activity(
            "return",
            f"{qty} {names.get(code, code)} returned at {branch}",
            branch,
            {"itemCode": code, "quantity": qty, "date": day.isoformat()},
        )
    _commit()
    logger.info("stock returned %s/%s: %s", branch, day, dict(merged))
    return list(entries.values())


def record_return(day: date, branch: str, item_code: str, quantity: int) -> StockEntry:
    return record_returns(day, branch, [StockLine(item_code, quantity)])[0]


def finish_batch(day: date, branch: str) -> dict:
    """Lock the Normal Item sheet and settle ``sold`` on every row."""
    require_branch(branch)
    flag = batch_lock.mark_finished(day, branch, ItemType.NORMAL)

    rows = (
        StockEntry.query.filter_by(stock_date=day, branch=branch).with_for_update().all()
    )
    total_revenue = Decimal("0")
    for row in rows:
        row.recompute_sold()
        price = Decimal(str(row.item.price or 0)) if row.item else Decimal("0")
        total_revenue += max(0, row.sold) * price
    total_revenue = total_revenue.quantize(Decimal("0.01"))

    if total_revenue > 0:
        log_activity(
            "batch_finished_sale",
            f"Batch finished at {branch}: Total Revenue {total_revenue:.2f}",
            branch,
            {"date": day.isoformat(), "branch": branch, "totalRevenue": float(total_revenue)},
            occurred_at=flag.finished_at,
        )
    _commit()
    return {"finishedAt": flag.finished_at, "totalRevenue": total_revenue}


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
