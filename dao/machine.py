# dao/machine.py
"""Meter-reading batches for vending/coffee machines.

A batch is opened with the meter's start value and closed with its end value;
the difference is the number of units sold at the machine's item price.
"""
import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from configs import db
from dao.activity import log_activity
from dao.branch import require_branch
from dao.errors import (
    AlreadyFinishedError,
    DuplicateEntryError,
    InvalidQuantityError,
    NotFoundError,
    ValidationError,
)
from dao.filters import apply_filters, branch_is, date_from as _from, date_is, date_to as _to, equals
from dao.item import require_item
from db.models.item import ItemType
from db.models.machine import MachineBatch, MachineBatchStatus, MachineSale

logger = logging.getLogger(__name__)


def _meter_value(v, field: str) -> int:
    if v is None or v == "":
        raise ValidationError(f"{field} is required", field=field)
    try:
        d = Decimal(str(v))
    except ArithmeticError:
        raise ValidationError(f"{field} must be a number", field=field)
    if not d.is_finite() or d != d.to_integral_value():
        raise InvalidQuantityError(f"{field} must be a whole number", field=field)
    if d < 0:
        raise InvalidQuantityError(f"{field} cannot be negative", field=field)
    return int(d)


def _parse_status(status) -> Optional[MachineBatchStatus]:
    if not status:
        return None
    try:
        return MachineBatchStatus(str(status).lower())
    except ValueError:
        raise ValidationError(f"Unknown batch status: {status}", status=status)


def list_batches(branch=None, day=None, status=None, machine_code=None) -> List[MachineBatch]:
    q = apply_filters(
        MachineBatch.query,
        branch_is(MachineBatch.branch, branch),
        date_is(MachineBatch.batch_date, day),
        equals(MachineBatch.status, _parse_status(status)),
        equals(MachineBatch.machine_code, machine_code),
    )
    return q.order_by(MachineBatch.started_at.desc(), MachineBatch.id.desc()).all()


def get_batch(batch_id: str, for_update: bool = False) -> Optional[MachineBatch]:
    q = MachineBatch.query.filter_by(batch_id=batch_id)
    if for_update:
        q = q.with_for_update()
    return q.one_or_none()


def active_batch(machine_code: str, branch: str) -> Optional[MachineBatch]:
    return MachineBatch.query.filter_by(
        machine_code=machine_code, branch=branch, status=MachineBatchStatus.ACTIVE
    ).first()


def start_batch(machine_code: str, branch: str, start_value, day: date) -> MachineBatch:
    require_branch(branch)
    machine = require_item(machine_code, ItemType.MACHINE)
    start = _meter_value(start_value, "startValue")
    if active_batch(machine_code, branch):
        raise DuplicateEntryError(
            "Active batch already exists for this machine and branch",
            machineCode=machine_code,
            branch=branch,
        )
    batch = MachineBatch(
        batch_id="M" + uuid.uuid4().hex[:20].upper(),
        machine_code=machine_code,
        branch=branch,
        start_value=start,
        batch_date=day,
        status=MachineBatchStatus.ACTIVE,
        started_at=datetime.utcnow(),
    )
    db.session.add(batch)
    log_activity(
        "machine_batch_started",
        f"{machine.name} batch started at {branch} (start {start})",
        branch,
        {"batchId": batch.batch_id, "machineCode": machine_code, "startValue": start},
        real_date=day,
    )
    _commit()
    logger.info("machine batch %s started: %s at %s", batch.batch_id, machine_code, branch)
    return batch


def update_batch(
    batch_id: str,
    start_value,
    day: Optional[date] = None,
    branch: Optional[str] = None,
    machine_code: Optional[str] = None,
) -> MachineBatch:
    """Correct the start reading (and date) of a batch that is still running."""
    batch = get_batch(batch_id, for_update=True)
    if not batch or batch.status != MachineBatchStatus.ACTIVE:
        raise NotFoundError("Active batch not found", batchId=batch_id)
    if branch and batch.branch != branch:
        raise ValidationError("Batch does not belong to the specified branch", batchId=batch_id)
    if machine_code and batch.machine_code != machine_code:
        raise ValidationError("Batch does not belong to the specified machine", batchId=batch_id)

    batch.start_value = _meter_value(start_value, "startValue")
    if day:
        batch.batch_date = day
    _commit()
    return batch


def finish_batch(batch_id: str, end_value) -> MachineSale:
    batch = get_batch(batch_id, for_update=True)
    if not batch:
        raise NotFoundError("Batch not found", batchId=batch_id)
    if batch.status == MachineBatchStatus.COMPLETED:
        raise AlreadyFinishedError("Batch is already completed", batchId=batch_id)

    end = _meter_value(end_value, "endValue")
    if end < batch.start_value:
        raise InvalidQuantityError(
            "End value cannot be less than start value",
            startValue=batch.start_value,
            endValue=end,
        )
    machine = require_item(batch.machine_code)
    price = Decimal(str(machine.price or 0))
    sold = end - batch.start_value

    batch.end_value = end
    batch.status = MachineBatchStatus.COMPLETED
    batch.ended_at = datetime.utcnow()

    sale = MachineSale(
        batch_id=batch.batch_id,
        machine_code=batch.machine_code,
        machine_name=machine.name,
        sale_date=batch.batch_date,
        branch=batch.branch,
        start_value=batch.start_value,
        end_value=end,
        sold_qty=sold,
        unit_price=price,
        total_cash=(sold * price).quantize(Decimal("0.01")),
    )
    db.session.add(sale)
    log_activity(
        "machine_sale",
        f"{machine.name} sold {sold} at {batch.branch}",
        batch.branch,
        {"batchId": batch.batch_id, "soldQty": sold, "totalCash": float(sale.total_cash)},
        real_date=batch.batch_date,
    )
    _commit()
    logger.info("machine batch %s completed: sold %d", batch.batch_id, sold)
    return sale


def list_sales(branch=None, day=None, date_from=None, date_to=None) -> List[MachineSale]:
    q = apply_filters(
        MachineSale.query,
        branch_is(MachineSale.branch, branch),
        date_is(MachineSale.sale_date, day),
        _from(MachineSale.sale_date, date_from),
        _to(MachineSale.sale_date, date_to),
    )
    return q.order_by(MachineSale.sale_date.desc(), MachineSale.created_at.desc()).all()


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
