# dao/transfer.py
"""Stock moves between branches.

Normal items move on the daily sheet (sender ``transferred`` up, receiver
``added`` up). Grocery items leave the sender earliest-expiry first and every
slice lands at the receiver as a new lot with the same expiry date.
"""
import logging
import uuid
from collections import OrderedDict
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from configs import db
from dao import allocation, batch_lock, grocery, stock
from dao.activity import log_activity
from dao.branch import require_branch
from dao.errors import InsufficientStockError, InvalidQuantityError, ValidationError
from dao.filters import apply_filters, branch_is, date_from as _from, date_to as _to
from dao.item import require_item
from db.models.item import ItemType
from db.models.transfer import Transfer
from utils.payload import TransferLine

logger = logging.getLogger(__name__)

SUPPORTED_TYPES = (ItemType.NORMAL, ItemType.GROCERY)


def list_transfers(branch=None, date_from=None, date_to=None) -> List[Transfer]:
    q = Transfer.query
    if branch_is(Transfer.sender_branch, branch) is not None:
        q = q.filter(or_(Transfer.sender_branch == branch, Transfer.receiver_branch == branch))
    q = apply_filters(
        q,
        _from(Transfer.transfer_date, date_from),
        _to(Transfer.transfer_date, date_to),
    )
    return q.order_by(Transfer.processed_at.desc(), Transfer.id.desc()).all()


def _merge(lines: List[TransferLine], item_type: ItemType) -> "OrderedDict[str, Decimal]":
    merged: "OrderedDict[str, Decimal]" = OrderedDict()
    for ln in lines:
        qty = Decimal(str(ln.quantity))
        if qty <= 0:
            raise InvalidQuantityError(
                f"Quantity for item {ln.item_code} must be greater than 0", itemCode=ln.item_code
            )
        item = require_item(ln.item_code, item_type)
        whole_only = item_type == ItemType.NORMAL or not item.sold_by_weight
        if whole_only and qty != qty.to_integral_value():
            raise InvalidQuantityError(
                f"Quantity for {item.name} must be a whole number", itemCode=ln.item_code
            )
        merged[ln.item_code] = merged.get(ln.item_code, Decimal("0")) + qty
    return merged


def _move_normal(day, sender, receiver, merged):
    wanted = {code: int(qty) for code, qty in merged.items()}
    entries = stock.check_available(day, sender, wanted, "transfer")
    now = datetime.utcnow()
    for code, qty in wanted.items():
        entry = entries[code]
        entry.transferred = (entry.transferred or 0) + qty
        entry.recompute_sold()
        entry.updated_at = now
        stock.bump_added(day, receiver, code, qty)


def _move_grocery(day, sender, receiver, merged):
    # check every item before the first lot changes
    plans = []
    for code, qty in merged.items():
        lots = [b for b in grocery.fifo_batches(code, sender, for_update=True) if b.remaining > 0]
        try:
            takes = allocation.fifo_take([b.remaining for b in lots], qty)
        except InsufficientStockError as e:
            raise InsufficientStockError(
                f"Cannot transfer {qty}. Only {e.data.get('available')} available for item {code}",
                itemCode=code,
                **e.data,
            )
        plans.append((code, lots, takes))

    for code, lots, takes in plans:
        for lot, take in zip(lots, takes):
            if take <= 0:
                continue
            lot.remaining = allocation.q3(Decimal(str(lot.remaining)) - take)
            grocery.create_lot(code, receiver, take, lot.expiry_date, day)


def create_transfer(
    day: date,
    sender: str,
    receiver: str,
    item_type,
    lines: List[TransferLine],
    processed_by: Optional[str] = None,
) -> Transfer:
    if not sender or not receiver:
        raise ValidationError("Sender and receiver branches are required")
    if sender == receiver:
        raise ValidationError("Sender and receiver branches must be different")
    itype = item_type if isinstance(item_type, ItemType) else ItemType.parse(item_type)
    if itype not in SUPPORTED_TYPES:
        raise ValidationError(f"Items of type {item_type} cannot be transferred", itemType=str(item_type))
    if not lines:
        raise ValidationError("items must be a non-empty list")
    require_branch(sender)
    require_branch(receiver)
    for br in (sender, receiver):
        batch_lock.ensure_open(day, br, itype)

    merged = _merge(lines, itype)
    if itype == ItemType.NORMAL:
        _move_normal(day, sender, receiver, merged)
    else:
        _move_grocery(day, sender, receiver, merged)

    items = [{"itemCode": code, "quantity": float(qty)} for code, qty in merged.items()]
    tr = Transfer(
        transfer_id="T" + uuid.uuid4().hex[:20].upper(),
        transfer_date=day,
        sender_branch=sender,
        receiver_branch=receiver,
        item_type=itype,
        items=items,
        processed_by=processed_by,
        processed_at=datetime.utcnow(),
    )
    db.session.add(tr)

    names = stock.item_names(merged)
    for ln in items:
        name = names.get(ln["itemCode"], ln["itemCode"])
        qty = ln["quantity"]
        meta = {
            "itemCode": ln["itemCode"],
            "itemName": name,
            "quantity": qty,
            "senderBranch": sender,
            "receiverBranch": receiver,
            "itemType": itype.value,
            "date": day.isoformat(),
        }
        log_activity(
            "transfer",
            f"{qty:g} {name} transferred from {sender} to {receiver}",
            sender,
            dict(meta, direction="sent"),
            real_date=day,
            occurred_at=tr.processed_at,
        )
        log_activity(
            "transfer",
            f"{qty:g} {name} received from {sender} to {receiver}",
            receiver,
            dict(meta, direction="received"),
            real_date=day,
            occurred_at=tr.processed_at,
        )
    _commit()
    logger.info("transfer %s: %s -> %s (%d item(s))", tr.transfer_id, sender, receiver, len(items))
    return tr


def _commit():
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise
