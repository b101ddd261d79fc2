# dao/allocation.py
"""Quantity arithmetic for grocery lots.

Pure functions over lists of per-lot quantities given in FIFO order
(expiry date, then added date). Nothing here touches the session.
"""
from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from typing import List, Sequence

from dao.errors import InsufficientStockError

QTY_STEP = Decimal("0.001")
ZERO = Decimal("0")
ONE = Decimal("1")


def _dec(x) -> Decimal:
    return Decimal(str(x or 0))


def q3(x) -> Decimal:
    """Round to grocery quantity precision (3 decimals, half up)."""
    return _dec(x).quantize(QTY_STEP, rounding=ROUND_HALF_UP)


def fifo_take(remainings: Sequence, quantity) -> List[Decimal]:
    """How much to take from each lot, earliest lot first.

    Empty lots are skipped. Raises InsufficientStockError when the lots
    together hold less than ``quantity``.
    """
    need = _dec(quantity)
    total = sum((_dec(r) for r in remainings), ZERO)
    if need > total:
        raise InsufficientStockError(
            f"Cannot take {need}. Only {total} available.",
            requested=str(need),
            available=str(total),
        )

    takes: List[Decimal] = []
    for r in remainings:
        r = _dec(r)
        if need <= 0 or r <= 0:
            takes.append(ZERO)
            continue
        take = min(r, need)
        takes.append(take)
        need -= take
    return takes


def _proportional_shares(currents: List[Decimal], target: Decimal) -> List[Decimal]:
    total = sum(currents, ZERO)
    shares = []
    for cur in currents:
        proportion = cur / total if total > 0 else ZERO
        shares.append(min(cur, max(ZERO, target * proportion)))
    return shares


def allocate_by_weight(remainings: Sequence, new_remaining) -> List[Decimal]:
    """Spread ``new_remaining`` over lots in proportion to what they hold now.

    Every share is rounded to 3 decimals. If the rounded shares miss the target
    the gap is closed in 0.001 steps on the lot whose rounding moved it the
    furthest the other way, never past 0 or the lot's current remaining.
    """
    currents = [q3(r) for r in remainings]
    target = q3(new_remaining)
    raw = _proportional_shares(currents, target)
    allocs = [q3(s) for s in raw]

    residual = target - sum(allocs, ZERO)
    while abs(residual) >= QTY_STEP:
        step = QTY_STEP if residual > 0 else -QTY_STEP
        if step > 0:
            candidates = [i for i, a in enumerate(allocs) if currents[i] - a >= QTY_STEP]
            # lot that lost most to rounding first
            candidates.sort(key=lambda i: (allocs[i] - raw[i], i))
        else:
            candidates = [i for i, a in enumerate(allocs) if a >= QTY_STEP]
            candidates.sort(key=lambda i: (raw[i] - allocs[i], i))
        if not candidates:
            break
        allocs[candidates[0]] += step
        residual -= step
    return allocs


def allocate_by_count(remainings: Sequence, new_remaining) -> List[Decimal]:
    """Largest-remainder split of a whole number of units over lots."""
    currents = [_dec(r) for r in remainings]
    target = _dec(new_remaining).quantize(ONE, rounding=ROUND_HALF_UP)
    raw = _proportional_shares(currents, target)
    allocs = [s.to_integral_value(rounding=ROUND_FLOOR) for s in raw]

    leftover = target - sum(allocs, ZERO)
    order = sorted(range(len(allocs)), key=lambda i: (-(raw[i] - allocs[i]), i))
    while leftover > 0:
        progressed = False
        for i in order:
            if leftover <= 0:
                break
            if allocs[i] + ONE <= currents[i]:
                allocs[i] += ONE
                leftover -= ONE
                progressed = True
        if not progressed:
            break
    return allocs


def allocate(remainings: Sequence, new_remaining, by_weight: bool) -> List[Decimal]:
    if by_weight:
        return allocate_by_weight(remainings, new_remaining)
    return allocate_by_count(remainings, new_remaining)
