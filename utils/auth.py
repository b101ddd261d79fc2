# utils/auth.py
from functools import wraps

from flask import current_app
from flask_login import current_user

from dao.errors import AccessDeniedError, AuthenticationError
from dao.filters import ALL_BRANCHES


def _auth_off() -> bool:
    return bool(current_app.config.get("LOGIN_DISABLED"))


def _require_login():
    if not current_user.is_authenticated:
        raise AuthenticationError("Login required")


def roles_required(*roles):
    def deco(fn):
        @wraps(fn)
        def inner(*a, **kw):
            if not _auth_off():
                _require_login()
                if not current_user.has_role(*roles):
                    raise AccessDeniedError("You do not have permission for this action")
            return fn(*a, **kw)

        return inner

    return deco


def access_required(*pages):
    """Allow the call when the user has any of ``pages`` in their accesses."""

    def deco(fn):
        @wraps(fn)
        def inner(*a, **kw):
            if not _auth_off():
                _require_login()
                if not any(current_user.can_access(p) for p in pages):
                    raise AccessDeniedError(
                        "You do not have access to this page", pages=list(pages)
                    )
            return fn(*a, **kw)

        return inner

    return deco


def ensure_branch_access(branch) -> None:
    """Reject branches the user is not assigned to.

    Only admins may leave ``branch`` empty or ask for "All Branches".
    """
    if _auth_off():
        return
    _require_login()
    if current_user.is_admin:
        return
    if not branch:
        raise AccessDeniedError("Select one of your assigned branches", branch=None)
    if branch == ALL_BRANCHES or not current_user.can_use_branch(branch):
        raise AccessDeniedError(f"You are not assigned to branch {branch}", branch=branch)


def current_username():
    if _auth_off() or not current_user.is_authenticated:
        return None
    return current_user.full_name or current_user.username
