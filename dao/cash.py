# dao/cash.py
"""End-of-day cash reconciliation per branch."""
import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from configs import db
from dao.activity import log_activity
from dao.branch import require_branch
from dao.errors import DuplicateEntryError, ValidationError
from dao.filters import apply_filters, branch_is, date_from as _from, date_is, date_to as _to
from db.models.cash import CashEntry, CashStatus
from db.models.grocery import GrocerySale
from db.models.item import Item, ItemType
from db.models.machine import MachineSale
from db.models.stock import FinishedBatch, StockEntry

logger = logging.getLogger(__name__)

MONEY_STEP = Decimal("0.01")


def _money(v, field: str) -> Decimal:
    if v in (None, ""):
        return Decimal("0.00")
    try:
        d = Decimal(str(v))
    except (InvalidOperation, TypeError):
        raise ValidationError(f"{field} must be a number", field=field)
    if not d.is_finite() or d < 0:
        raise ValidationError(f"{field} must be zero or more", field=field)
    return d.quantize(MONEY_STEP)


def _sum_sales(model, day: date, branch: str) -> Decimal:
    total = (
        db.session.query(func.coalesce(func.sum(model.total_cash), 0))
        .filter(model.sale_date == day, model.branch == branch)
        .scalar()
    )
    return Decimal(str(total or 0))


def expected_cash(branch: str, day: date) -> Decimal:
    """Finished normal-item sales + grocery sales + machine sales for the day."""
    rows = (
        db.session.query(StockEntry, Item.price)
        .join(Item, Item.code == StockEntry.item_code)
        .join(
            FinishedBatch,
            (FinishedBatch.finish_date == StockEntry.stock_date)
            & (FinishedBatch.branch == StockEntry.branch)
            & (FinishedBatch.item_type == ItemType.NORMAL),
        )
        .filter(
            StockEntry.stock_date == day,
            StockEntry.branch == branch,
            Item.item_type == ItemType.NORMAL,
        )
        .all()
    )
    expected = sum(
        (entry.available * Decimal(str(price or 0)) for entry, price in rows), Decimal("0")
    )
    expected += _sum_sales(GrocerySale, day, branch)
    expected += _sum_sales(MachineSale, day, branch)
    return expected.quantize(MONEY_STEP)


def status_for(difference: Decimal) -> CashStatus:
    if difference == 0:
        return CashStatus.MATCH
    return CashStatus.OVERAGE if difference > 0 else CashStatus.SHORTAGE


def get_entry(branch: str, day: date) -> Optional[CashEntry]:
    return CashEntry.query.filter_by(entry_date=day, branch=branch).one_or_none()


def create_entry(
    branch: str,
    day: date,
    actual_cash,
    card_payment=None,
    notes: Optional[str] = None,
    operator_id: Optional[str] = None,
    operator_name: Optional[str] = None,
) -> CashEntry:
    require_branch(branch)
    if actual_cash in (None, ""):
        raise ValidationError("actualCash is required", field="actualCash")
    cash = _money(actual_cash, "actualCash")
    card = _money(card_payment, "cardPayment")
    if get_entry(branch, day):
        raise DuplicateEntryError(
            "Cash entry already exists for this date and branch", branch=branch, date=day.isoformat()
        )

    expected = expected_cash(branch, day)
    if expected <= 0:
        raise ValidationError("No sales recorded for this branch and date", branch=branch, date=day.isoformat())

    actual = cash + card
    difference = actual - expected
    entry = CashEntry(
        entry_date=day,
        branch=branch,
        expected=expected,
        actual=actual,
        actual_cash=cash,
        card_payment=card,
        difference=difference,
        status=status_for(difference),
        operator_id=operator_id or None,
        operator_name=operator_name or None,
        notes=notes or None,
    )
    db.session.add(entry)
    log_activity(
        "cash_entry",
        f"Cash entry for {branch}: {entry.status.value} ({difference:+.2f})",
        branch,
        {"date": day.isoformat(), "expected": float(expected), "actual": float(actual)},
        real_date=day,
    )
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise DuplicateEntryError(
            "Cash entry already exists for this date and branch", branch=branch, date=day.isoformat()
        )
    except SQLAlchemyError:
        db.session.rollback()
        raise
    logger.info("cash entry %s/%s: %s", branch, day, entry.status.value)
    return entry


def list_entries(branch=None, day=None, date_from=None, date_to=None) -> List[CashEntry]:
    q = apply_filters(
        CashEntry.query,
        branch_is(CashEntry.branch, branch),
        date_is(CashEntry.entry_date, day),
        _from(CashEntry.entry_date, date_from),
        _to(CashEntry.entry_date, date_to),
    )
    return q.order_by(CashEntry.entry_date.desc(), CashEntry.created_at.desc()).all()
