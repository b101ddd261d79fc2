# utils/serializers.py
"""Model -> JSON dicts (camelCase keys, money with 2 decimals)."""
from decimal import Decimal


def money(v) -> float:
    return float(Decimal(str(v or 0)).quantize(Decimal("0.01")))


def qty(v) -> float:
    return float(Decimal(str(v or 0)).quantize(Decimal("0.001")))


def iso(v):
    return v.isoformat() if v else None


def item_dict(it):
    return {
        "code": it.code,
        "itemType": it.item_type.value,
        "name": it.name,
        "category": it.category,
        "subcategory": it.subcategory,
        "price": money(it.price),
        "description": it.description,
        "soldByWeight": bool(it.sold_by_weight),
        "notifyExpiry": bool(it.notify_expiry),
        "createdAt": iso(it.created_at),
        "updatedAt": iso(it.updated_at),
    }


def branch_dict(b):
    return {
        "id": b.id,
        "name": b.name,
        "address": b.address,
        "manager": b.manager,
        "phone": b.phone,
        "email": b.email,
        "createdAt": iso(b.created_at),
    }


def stock_dict(s):
    return {
        "date": iso(s.stock_date),
        "branch": s.branch,
        "itemCode": s.item_code,
        "itemName": s.item.name if s.item else None,
        "itemType": s.item.item_type.value if s.item else None,
        "price": money(s.item.price) if s.item else 0.0,
        "added": s.added,
        "returned": s.returned,
        "transferred": s.transferred,
        "sold": s.sold,
        "available": s.available,
        "updatedAt": iso(s.updated_at),
    }


def grocery_batch_dict(b):
    return {
        "id": b.id,
        "batchId": b.batch_id,
        "itemCode": b.item_code,
        "itemName": b.item.name if b.item else None,
        "branch": b.branch,
        "quantity": qty(b.quantity),
        "remaining": qty(b.remaining),
        "expiryDate": iso(b.expiry_date),
        "addedDate": iso(b.added_date),
    }


def grocery_sale_dict(s):
    return {
        "id": s.id,
        "itemCode": s.item_code,
        "itemName": s.item_name,
        "branch": s.branch,
        "date": iso(s.sale_date),
        "soldQty": qty(s.sold_qty),
        "totalCash": money(s.total_cash),
    }


def grocery_return_dict(r):
    return {
        "id": r.id,
        "itemCode": r.item_code,
        "itemName": r.item_name,
        "branch": r.branch,
        "date": iso(r.return_date),
        "returnedQty": qty(r.returned_qty),
        "reason": r.reason,
    }


def machine_batch_dict(b):
    return {
        "batchId": b.batch_id,
        "machineCode": b.machine_code,
        "machineName": b.machine.name if b.machine else None,
        "branch": b.branch,
        "startValue": b.start_value,
        "endValue": b.end_value,
        "date": iso(b.batch_date),
        "status": b.status.value,
        "startTime": iso(b.started_at),
        "endTime": iso(b.ended_at),
    }


def machine_sale_dict(s):
    return {
        "id": s.id,
        "batchId": s.batch_id,
        "machineCode": s.machine_code,
        "machineName": s.machine_name,
        "date": iso(s.sale_date),
        "branch": s.branch,
        "startValue": s.start_value,
        "endValue": s.end_value,
        "soldQty": s.sold_qty,
        "unitPrice": money(s.unit_price),
        "totalCash": money(s.total_cash),
    }


def transfer_dict(t):
    return {
        "transferId": t.transfer_id,
        "date": iso(t.transfer_date),
        "senderBranch": t.sender_branch,
        "receiverBranch": t.receiver_branch,
        "itemType": t.item_type.value,
        "items": t.items or [],
        "processedBy": t.processed_by,
        "processedAt": iso(t.processed_at),
    }


def cash_dict(c):
    return {
        "id": c.id,
        "date": iso(c.entry_date),
        "branch": c.branch,
        "expected": money(c.expected),
        "actual": money(c.actual),
        "actualCash": money(c.actual_cash),
        "cardPayment": money(c.card_payment),
        "difference": money(c.difference),
        "status": c.status.value,
        "operatorId": c.operator_id,
        "operatorName": c.operator_name,
        "notes": c.notes,
    }


def activity_dict(a):
    return {
        "id": a.id,
        "type": a.type,
        "message": a.message,
        "branch": a.branch,
        "timestamp": iso(a.occurred_at),
        "realDate": iso(a.real_date),
        "metadata": a.details,
    }


def user_dict(u):
    return {
        "id": u.id,
        "username": u.username,
        "fullName": u.full_name,
        "role": u.role.value,
        "isActive": bool(u.is_active),
        "accesses": u.accesses or [],
        "assignedBranches": u.assigned_branches or [],
        "lastLogin": iso(u.last_login),
    }


def report_row_dict(r):
    return dict(r, sold=float(r["sold"]), sales=money(r["sales"]))
