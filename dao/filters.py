# dao/filters.py
"""Optional query filters.

Every builder returns a SQLAlchemy expression, or ``None`` when the filter was
not requested, so list endpoints compose them with ``apply_filters``.
"""
from datetime import date
from typing import Optional

ALL_BRANCHES = "All Branches"


def branch_is(column, branch: Optional[str]):
    if not branch or branch == ALL_BRANCHES:
        return None
    return column == branch


def equals(column, value):
    if value is None or value == "":
        return None
    return column == value


def date_is(column, day: Optional[date]):
    return None if day is None else column == day


def date_from(column, day: Optional[date]):
    return None if day is None else column >= day


def date_to(column, day: Optional[date]):
    return None if day is None else column <= day


def apply_filters(query, *predicates):
    for p in predicates:
        if p is not None:
            query = query.filter(p)
    return query
