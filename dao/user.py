import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from configs import db
from dao.errors import (
    AccessDeniedError,
    AuthenticationError,
    DuplicateEntryError,
    NotFoundError,
    ValidationError,
)
from db.models.user import ALL_ACCESS_OPTIONS, User, UserRole

logger = logging.getLogger(__name__)


def _clean_accesses(accesses: Optional[Iterable[str]]) -> List[str]:
    accesses = list(accesses or [])
    unknown = [a for a in accesses if a not in ALL_ACCESS_OPTIONS]
    if unknown:
        raise ValidationError(f"Unknown access: {', '.join(unknown)}", unknown=unknown)
    return [a for a in ALL_ACCESS_OPTIONS if a in accesses]


def _parse_role(role) -> UserRole:
    if isinstance(role, UserRole):
        return role
    try:
        return UserRole[(role or "STAFF").upper()]
    except KeyError:
        raise ValidationError(f"Unknown role: {role}", role=role)


def list_users() -> List[User]:
    return User.query.order_by(User.username.asc()).all()


def get_user(user_id) -> Optional[User]:
    return db.session.get(User, int(user_id))


def require_user(user_id) -> User:
    u = get_user(user_id)
    if not u:
        raise NotFoundError("User not found", userId=user_id)
    return u


def create_user(
    username: str,
    password: str,
    full_name: Optional[str] = None,
    role=UserRole.STAFF,
    accesses=None,
    assigned_branches=None,
    is_active: bool = True,
) -> User:
    username = (username or "").strip()
    if not username or not password:
        raise ValidationError("Username and password are required")
    if User.query.filter_by(username=username).first():
        raise DuplicateEntryError("Username already exists", username=username)

    r = _parse_role(role)
    u = User(
        username=username,
        password_hash=generate_password_hash(password),
        full_name=full_name or None,
        role=r,
        # admins see every page and every branch
        accesses=list(ALL_ACCESS_OPTIONS) if r == UserRole.ADMIN else _clean_accesses(accesses),
        assigned_branches=list(assigned_branches or []),
        is_active=bool(is_active),
    )
    db.session.add(u)
    _commit()
    logger.info("user created: %s (%s)", u.username, r.value)
    return u


def update_user(user_id, **fields) -> User:
    u = require_user(user_id)
    if "full_name" in fields:
        u.full_name = fields["full_name"] or None
    if fields.get("password"):
        u.password_hash = generate_password_hash(fields["password"])
    if "role" in fields and fields["role"]:
        u.role = _parse_role(fields["role"])
    if "is_active" in fields:
        u.is_active = bool(fields["is_active"])
    if "accesses" in fields:
        u.accesses = _clean_accesses(fields["accesses"])
    if "assigned_branches" in fields:
        u.assigned_branches = list(fields["assigned_branches"] or [])
    if u.role == UserRole.ADMIN:
        u.accesses = list(ALL_ACCESS_OPTIONS)
    _commit()
    return u


def delete_user(user_id) -> None:
    u = require_user(user_id)
    db.session.delete(u)
    _commit()


def authenticate(username: str, password: str) -> User:
    u = User.query.filter_by(username=(username or "").strip()).first()
    if not u or not check_password_hash(u.password_hash, password or ""):
        raise AuthenticationError("Invalid username or password")
    if not u.is_active:
        raise AccessDeniedError("Account is disabled", username=u.username)
    u.last_login = datetime.utcnow()
    _commit()
    return u


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
