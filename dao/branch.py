# dao/branch.py
import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from configs import db
from dao.errors import DuplicateEntryError, InUseError, NotFoundError, ValidationError
from db.models.branch import Branch
from db.models.cash import CashEntry
from db.models.grocery import GroceryBatch, GroceryReturn, GrocerySale
from db.models.machine import MachineBatch, MachineSale
from db.models.stock import FinishedBatch, StockEntry
from db.models.transfer import Transfer
from db.models.user import User

logger = logging.getLogger(__name__)


class BranchInUseError(InUseError):
    pass


_LEDGER_MODELS = (
    StockEntry,
    FinishedBatch,
    GroceryBatch,
    GrocerySale,
    GroceryReturn,
    MachineBatch,
    MachineSale,
    CashEntry,
)


def branch_in_use(name: str) -> bool:
    """True when any ledger row, transfer or user assignment names the branch."""
    for model in _LEDGER_MODELS:
        if db.session.query(model.id).filter_by(branch=name).limit(1).first() is not None:
            return True
    moved = db.session.query(Transfer.id).filter(
        or_(Transfer.sender_branch == name, Transfer.receiver_branch == name)
    )
    if moved.limit(1).first() is not None:
        return True
    # assigned_branches is a JSON list, so filter in Python
    return any(name in (u.assigned_branches or []) for u in User.query.all())


def list_branches() -> List[Branch]:
    return Branch.query.order_by(Branch.name.asc()).all()


def get_branch(name: str) -> Optional[Branch]:
    return Branch.query.filter_by(name=name).one_or_none()


def require_branch(name: str) -> Branch:
    b = get_branch(name)
    if not b:
        raise NotFoundError(f"Branch '{name}' not found", branch=name)
    return b


def _clean(fields: dict) -> dict:
    out = {k: (v.strip() if isinstance(v, str) else v) for k, v in fields.items()}
    for k in ("name", "address", "manager"):
        if not out.get(k):
            raise ValidationError("Name, address, and manager are required")
    return out


def create_branch(name, address, manager, phone=None, email=None) -> Branch:
    f = _clean(dict(name=name, address=address, manager=manager, phone=phone, email=email))
    if get_branch(f["name"]):
        raise DuplicateEntryError("Branch already exists", branch=f["name"])
    b = Branch(**f)
    db.session.add(b)
    _commit()
    logger.info("branch created: %s", b.name)
    return b


def update_branch(original_name: str, **fields) -> Branch:
    b = require_branch(original_name)
    f = _clean(fields)
    if f["name"] != original_name:
        if get_branch(f["name"]):
            raise DuplicateEntryError("Branch name already exists", branch=f["name"])
        # ledger rows reference branches by name
        if branch_in_use(original_name):
            raise BranchInUseError("Branch has ledger records or users, it cannot be renamed.")
    for k, v in f.items():
        setattr(b, k, v)
    _commit()
    return b


def delete_branch(name: str) -> None:
    b = require_branch(name)
    if branch_in_use(name):
        raise BranchInUseError("Branch has ledger records or users, it cannot be deleted.")
    db.session.delete(b)
    _commit()


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
