# dao/activity.py
import logging
from datetime import date, datetime, time
from typing import List, Optional

from configs import db
from dao.filters import apply_filters, branch_is, date_from as _from, date_to as _to
from db.models.activity import Activity

logger = logging.getLogger(__name__)


def log_activity(
    type_: str,
    message: str,
    branch: Optional[str] = None,
    details: Optional[dict] = None,
    real_date: Optional[date] = None,
    occurred_at: Optional[datetime] = None,
) -> Activity:
    """Add an activity row to the current transaction (committed with the mutation)."""
    act = Activity(
        type=type_,
        message=message,
        branch=branch,
        details=details,
        real_date=real_date,
        occurred_at=occurred_at or datetime.utcnow(),
    )
    db.session.add(act)
    logger.debug("activity %s: %s", type_, message)
    return act


def list_activities(
    branch: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    limit: int = 100,
) -> List[Activity]:
    q = Activity.query
    q = apply_filters(
        q,
        branch_is(Activity.branch, branch),
        _from(Activity.occurred_at, datetime.combine(date_from, time.min) if date_from else None),
        _to(Activity.occurred_at, datetime.combine(date_to, time.max) if date_to else None),
    )
    return q.order_by(Activity.occurred_at.desc(), Activity.id.desc()).limit(limit).all()
