"""
Tests for the grocery lot arithmetic (no database).
"""
from decimal import Decimal

import pytest

from dao import allocation
from dao.errors import InsufficientStockError

D = Decimal


class TestFifoTake:
    """Earliest lot first, skipping empty lots, all-or-nothing."""

    def test_takes_from_earliest_lot_first(self):
        assert allocation.fifo_take([D("2"), D("5")], D("3")) == [D("2"), D("1")]

    def test_skips_empty_lots(self):
        assert allocation.fifo_take([D("0"), D("4"), D("1")], D("4")) == [D("0"), D("4"), D("0")]

    def test_exact_total_is_allowed(self):
        assert sum(allocation.fifo_take([D("1.5"), D("2.25")], D("3.75"))) == D("3.75")

    def test_more_than_total_is_rejected(self):
        with pytest.raises(InsufficientStockError) as exc:
            allocation.fifo_take([D("1"), D("2")], D("3.001"))
        assert exc.value.data["available"] == "3"


class TestAllocateByWeight:
    """Proportional split rounded to 3 decimals with the residual closed."""

    def test_three_to_two_split(self):
        allocs = allocation.allocate_by_weight([D("3.000"), D("2.000")], D("2.000"))
        assert allocs == [D("1.200"), D("0.800")]

    def test_residual_is_closed_exactly(self):
        allocs = allocation.allocate_by_weight([D("1"), D("1"), D("1")], D("1"))
        assert sum(allocs) == D("1.000")
        assert sorted(allocs) == [D("0.333"), D("0.333"), D("0.334")]

    def test_negative_residual_is_closed(self):
        allocs = allocation.allocate_by_weight([D("1"), D("1"), D("1")], D("2"))
        assert sum(allocs) == D("2.000")
        assert all(a <= D("1") for a in allocs)

    def test_zero_target_empties_every_lot(self):
        assert allocation.allocate_by_weight([D("1.5"), D("0.25")], D("0")) == [D("0.000"), D("0.000")]

    def test_full_target_keeps_every_lot(self):
        assert allocation.allocate_by_weight([D("1.5"), D("0.25")], D("1.75")) == [D("1.500"), D("0.250")]

    @pytest.mark.parametrize("target", ["0.001", "0.999", "4.321", "7.777"])
    def test_never_exceeds_lot_and_conserves(self, target):
        currents = [D("2.5"), D("0.001"), D("3.3"), D("2")]
        allocs = allocation.allocate_by_weight(currents, D(target))
        assert sum(allocs) == D(target)
        assert all(D("0") <= a <= c for a, c in zip(allocs, currents))


class TestAllocateByCount:
    """Floor plus largest remainder, whole units only."""

    def test_seven_and_three_to_six(self):
        assert allocation.allocate_by_count([D("7"), D("3")], D("6")) == [D("4"), D("2")]

    def test_result_is_integral_and_conserves(self):
        allocs = allocation.allocate_by_count([D("5"), D("5"), D("5")], D("7"))
        assert sum(allocs) == D("7")
        assert all(a == a.to_integral_value() for a in allocs)
        assert all(a <= D("5") for a in allocs)

    def test_target_is_rounded_half_up(self):
        assert sum(allocation.allocate_by_count([D("4"), D("4")], D("2.5"))) == D("3")

    def test_dispatch_on_sold_by_weight(self):
        assert allocation.allocate([D("3"), D("2")], D("2"), by_weight=True) == [D("1.200"), D("0.800")]
        assert allocation.allocate([D("7"), D("3")], D("6"), by_weight=False) == [D("4"), D("2")]
