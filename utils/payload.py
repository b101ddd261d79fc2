# utils/payload.py
"""Request records and the parsers that build them from JSON bodies.

Parsers raise ValidationError (missing or malformed fields) or
InvalidQuantityError (non-positive quantities) before any ledger call.
"""
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Optional

from dao.errors import InvalidQuantityError, ValidationError

# keeps the Integer and Numeric(18, 3) counters in range
MAX_QUANTITY = Decimal("100000000")


@dataclass(frozen=True)
class StockLine:
    item_code: str
    quantity: int


@dataclass(frozen=True)
class RemainingUpdate:
    item_code: str
    new_remaining: Decimal


@dataclass(frozen=True)
class TransferLine:
    item_code: str
    quantity: Decimal


def body(req) -> Dict[str, Any]:
    data = req.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Invalid request data")
    return data


def require(data: Dict[str, Any], *fields: str) -> None:
    missing = [f for f in fields if data.get(f) in (None, "")]
    if missing:
        raise ValidationError(
            f"Required fields missing: {', '.join(missing)}", missing=missing
        )


def parse_date(value, field: str = "date", default: Optional[date] = None) -> Optional[date]:
    if value in (None, ""):
        return default
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value)[:10], "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"{field} must be a date (YYYY-MM-DD)", field=field)


def _check_bound(d: Decimal, field: str) -> None:
    if not d.is_finite():
        raise ValidationError(f"{field} must be a number", field=field)
    if d > MAX_QUANTITY:
        raise InvalidQuantityError(f"{field} must not exceed {MAX_QUANTITY}", field=field)


def parse_int_quantity(value, field: str = "quantity", allow_zero: bool = False) -> int:
    try:
        d = Decimal(str(value))
    except (InvalidOperation, TypeError):
        raise ValidationError(f"{field} must be a number", field=field)
    _check_bound(d, field)
    if d != d.to_integral_value():
        raise InvalidQuantityError(f"{field} must be a whole number", field=field)
    n = int(d)
    if n < 0 or (n == 0 and not allow_zero):
        raise InvalidQuantityError(f"{field} must be greater than 0", field=field)
    return n


def parse_decimal_quantity(value, field: str = "quantity", allow_zero: bool = False) -> Decimal:
    try:
        d = Decimal(str(value))
    except (InvalidOperation, TypeError):
        raise ValidationError(f"{field} must be a number", field=field)
    _check_bound(d, field)
    if d < 0 or (d == 0 and not allow_zero):
        raise InvalidQuantityError(f"{field} must be greater than 0", field=field)
    if d != d.quantize(Decimal("0.001")):
        raise InvalidQuantityError(f"{field} allows at most 3 decimals", field=field)
    return d


def parse_lines(raw, build: Callable[[Dict[str, Any], int], Any], field: str = "items") -> List[Any]:
    if not isinstance(raw, list) or not raw:
        raise ValidationError(f"{field} must be a non-empty list", field=field)
    out = []
    for idx, ln in enumerate(raw, 1):
        if not isinstance(ln, dict) or not ln.get("itemCode"):
            raise ValidationError(f"Line {idx}: itemCode is required", line=idx)
        out.append(build(ln, idx))
    return out


def stock_line(ln: Dict[str, Any], idx: int) -> StockLine:
    return StockLine(
        item_code=str(ln["itemCode"]),
        quantity=parse_int_quantity(ln.get("quantity"), f"items[{idx}].quantity"),
    )


def remaining_update(ln: Dict[str, Any], idx: int) -> RemainingUpdate:
    return RemainingUpdate(
        item_code=str(ln["itemCode"]),
        new_remaining=parse_decimal_quantity(
            ln.get("newRemaining"), f"updates[{idx}].newRemaining", allow_zero=True
        ),
    )


def transfer_line(ln: Dict[str, Any], idx: int) -> TransferLine:
    return TransferLine(
        item_code=str(ln["itemCode"]),
        quantity=parse_decimal_quantity(ln.get("quantity"), f"items[{idx}].quantity"),
    )


def as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)
