# dao/batch_lock.py
"""Finish/lock flags per (date, branch, item type).

A scope is either open or finished. Finishing is one-way: there is no unlock,
and every mutating ledger call asks ``ensure_open`` first.
"""
import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError

from configs import db
from dao.errors import AlreadyFinishedError, BatchLockedError
from db.models.item import ItemType
from db.models.stock import FinishedBatch

logger = logging.getLogger(__name__)


def get_flag(day: date, branch: str, item_type: ItemType) -> Optional[FinishedBatch]:
    return FinishedBatch.query.filter_by(
        finish_date=day, branch=branch, item_type=item_type
    ).one_or_none()


def is_finished(day: date, branch: str, item_type: ItemType) -> bool:
    return get_flag(day, branch, item_type) is not None


def ensure_open(day: date, branch: str, item_type: ItemType) -> None:
    if is_finished(day, branch, item_type):
        raise BatchLockedError(
            f"Batch is already finished for {branch} on {day.isoformat()}",
            branch=branch,
            date=day.isoformat(),
            itemType=item_type.value,
        )


def mark_finished(day: date, branch: str, item_type: ItemType) -> FinishedBatch:
    """Insert the flag. Flushes but does not commit; the caller owns the transaction."""
    if is_finished(day, branch, item_type):
        raise AlreadyFinishedError(
            f"Batch for {branch} on {day.isoformat()} is already finished",
            branch=branch,
            date=day.isoformat(),
            itemType=item_type.value,
        )
    flag = FinishedBatch(
        finish_date=day, branch=branch, item_type=item_type, finished_at=datetime.utcnow()
    )
    db.session.add(flag)
    try:
        db.session.flush()
    except IntegrityError:
        # another request inserted the same scope between our check and flush
        db.session.rollback()
        raise AlreadyFinishedError(
            f"Batch for {branch} on {day.isoformat()} is already finished",
            branch=branch,
            date=day.isoformat(),
            itemType=item_type.value,
        )
    logger.info("finished %s batch %s/%s", item_type.value, branch, day)
    return flag
