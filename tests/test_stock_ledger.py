"""
Tests for the daily stock sheet and the finish/lock flags.
"""
from datetime import timedelta

import pytest

from configs import db
from dao import batch_lock, stock
from dao.errors import (
    AlreadyFinishedError,
    BatchLockedError,
    InsufficientStockError,
    InvalidQuantityError,
    NotFoundError,
    ValidationError,
)
from db.models.activity import Activity
from db.models.item import ItemType
from db.models.stock import FinishedBatch
from utils.payload import StockLine

from tests.conftest import DAY, LAKE, MAIN


def _entry(code, branch=MAIN, day=DAY):
    db.session.expire_all()
    return stock.get_entry(day, branch, code)


class TestAddStock:
    def test_first_add_creates_row(self, codes):
        stock.add_stock(DAY, MAIN, codes["bun"], 100)
        e = _entry(codes["bun"])
        assert (e.added, e.returned, e.transferred, e.available) == (100, 0, 0, 100)

    def test_adds_accumulate(self, codes):
        stock.add_stock(DAY, MAIN, codes["bun"], 10)
        stock.add_stock(DAY, MAIN, codes["bun"], 5)
        assert _entry(codes["bun"]).added == 15

    def test_same_item_twice_in_one_request_is_summed(self, codes):
        stock.add_stocks(DAY, MAIN, [StockLine(codes["bun"], 3), StockLine(codes["bun"], 4)])
        assert _entry(codes["bun"]).added == 7

    def test_days_and_branches_are_separate_rows(self, codes):
        stock.add_stock(DAY, MAIN, codes["bun"], 10)
        stock.add_stock(DAY + timedelta(days=1), MAIN, codes["bun"], 1)
        stock.add_stock(DAY, LAKE, codes["bun"], 2)
        assert _entry(codes["bun"]).added == 10

    def test_zero_quantity_is_rejected(self, codes):
        with pytest.raises(InvalidQuantityError):
            stock.add_stock(DAY, MAIN, codes["bun"], 0)

    def test_unknown_branch_is_rejected(self, codes):
        with pytest.raises(NotFoundError):
            stock.add_stock(DAY, "Nowhere", codes["bun"], 1)

    def test_grocery_item_is_rejected(self, codes):
        with pytest.raises(ValidationError):
            stock.add_stock(DAY, MAIN, codes["rice"], 1)

    def test_logs_activity(self, codes):
        stock.add_stock(DAY, MAIN, codes["bun"], 12)
        act = Activity.query.filter_by(type="stock_added").one()
        assert act.branch == MAIN
        assert act.details["quantity"] == 12
        assert "Fish Bun" in act.message


class TestReturns:
    def test_return_reduces_available(self, codes):
        stock.add_stock(DAY, MAIN, codes["bun"], 10)
        stock.record_return(DAY, MAIN, codes["bun"], 4)
        e = _entry(codes["bun"])
        assert e.returned == 4
        assert e.available == 6
        assert e.sold == 6

    def test_return_up_to_available_is_allowed(self, codes):
        stock.add_stock(DAY, MAIN, codes["bun"], 10)
        stock.record_return(DAY, MAIN, codes["bun"], 10)
        assert _entry(codes["bun"]).available == 0

    def test_return_beyond_available_is_rejected(self, codes):
        stock.add_stock(DAY, MAIN, codes["bun"], 10)
        stock.record_return(DAY, MAIN, codes["bun"], 7)
        with pytest.raises(InsufficientStockError):
            stock.record_return(DAY, MAIN, codes["bun"], 4)
        assert _entry(codes["bun"]).returned == 7

    def test_return_without_row_is_rejected(self, codes):
        with pytest.raises(InsufficientStockError):
            stock.record_return(DAY, MAIN, codes["bun"], 1)

    def test_failing_line_leaves_other_lines_untouched(self, codes):
        stock.add_stocks(DAY, MAIN, [StockLine(codes["bun"], 5), StockLine(codes["cake"], 2)])
        with pytest.raises(InsufficientStockError):
            stock.record_returns(DAY, MAIN, [StockLine(codes["bun"], 1), StockLine(codes["cake"], 3)])
        assert _entry(codes["bun"]).returned == 0
        assert _entry(codes["cake"]).returned == 0

    def test_duplicate_lines_are_checked_together(self, codes):
        stock.add_stock(DAY, MAIN, codes["bun"], 5)
        with pytest.raises(InsufficientStockError):
            stock.record_returns(DAY, MAIN, [StockLine(codes["bun"], 3), StockLine(codes["bun"], 3)])

    def test_invariant_returned_plus_transferred_within_added(self, codes):
        stock.add_stock(DAY, MAIN, codes["bun"], 8)
        for q in (3, 3, 2):
            stock.record_return(DAY, MAIN, codes["bun"], q)
        with pytest.raises(InsufficientStockError):
            stock.record_return(DAY, MAIN, codes["bun"], 1)
        e = _entry(codes["bun"])
        assert e.returned + e.transferred <= e.added


class TestFinishBatch:
    def test_scenario_add_return_finish(self, codes):
        stock.add_stock(DAY, MAIN, codes["bun"], 100)
        stock.record_return(DAY, MAIN, codes["bun"], 20)
        res = stock.finish_batch(DAY, MAIN)
        e = _entry(codes["bun"])
        assert e.sold == 80
        assert e.available == 80
        assert res["totalRevenue"] == 8000
        assert stock.get_batch_status(DAY, MAIN) is True

    def test_finish_logs_total_revenue(self, codes):
        stock.add_stock(DAY, MAIN, codes["cake"], 4)
        stock.finish_batch(DAY, MAIN)
        act = Activity.query.filter_by(type="batch_finished_sale").one()
        assert act.details["totalRevenue"] == 1000.0

    def test_second_finish_is_rejected(self, codes):
        stock.add_stock(DAY, MAIN, codes["bun"], 5)
        first = stock.finish_batch(DAY, MAIN)
        with pytest.raises(AlreadyFinishedError):
            stock.finish_batch(DAY, MAIN)
        assert FinishedBatch.query.count() == 1
        assert batch_lock.get_flag(DAY, MAIN, ItemType.NORMAL).finished_at == first["finishedAt"]

    def test_finished_day_rejects_adds_and_returns(self, codes):
        stock.add_stock(DAY, MAIN, codes["bun"], 5)
        stock.finish_batch(DAY, MAIN)
        with pytest.raises(BatchLockedError):
            stock.add_stock(DAY, MAIN, codes["bun"], 1)
        with pytest.raises(BatchLockedError):
            stock.record_return(DAY, MAIN, codes["bun"], 1)
        assert _entry(codes["bun"]).added == 5

    def test_lock_is_scoped_to_branch_day_and_type(self, codes):
        stock.finish_batch(DAY, MAIN)
        stock.add_stock(DAY, LAKE, codes["bun"], 1)
        stock.add_stock(DAY + timedelta(days=1), MAIN, codes["bun"], 1)
        assert batch_lock.is_finished(DAY, MAIN, ItemType.NORMAL)
        assert not batch_lock.is_finished(DAY, MAIN, ItemType.GROCERY)

    def test_get_stocks_reports_flag(self, codes):
        stock.add_stock(DAY, MAIN, codes["bun"], 5)
        rows, flag = stock.get_stocks(DAY, MAIN)
        assert [r.item_code for r in rows] == [codes["bun"]]
        assert flag is None
        stock.finish_batch(DAY, MAIN)
        _, flag = stock.get_stocks(DAY, MAIN)
        assert flag is not None


class TestEnsureOpen:
    def test_mark_finished_then_ensure_open_raises(self, app):
        batch_lock.mark_finished(DAY, MAIN, ItemType.GROCERY)
        db.session.commit()
        with pytest.raises(BatchLockedError) as exc:
            batch_lock.ensure_open(DAY, MAIN, ItemType.GROCERY)
        assert exc.value.status == 409
        assert exc.value.data["itemType"] == "Grocery Item"
