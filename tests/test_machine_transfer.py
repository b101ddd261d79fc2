"""
Tests for machine meter batches and inter-branch transfers.
"""
from datetime import timedelta
from decimal import Decimal

import pytest

from configs import db
from dao import grocery, machine, stock, transfer
from dao.errors import (
    AlreadyFinishedError,
    BatchLockedError,
    DuplicateEntryError,
    InsufficientStockError,
    InvalidQuantityError,
    NotFoundError,
    ValidationError,
)
from db.models.activity import Activity
from db.models.machine import MachineBatchStatus, MachineSale
from db.models.transfer import Transfer
from utils.payload import TransferLine

from tests.conftest import DAY, LAKE, MAIN

D = Decimal


class TestMachineBatches:
    def test_start_and_finish_records_sale(self, codes):
        b = machine.start_batch(codes["espresso"], MAIN, 1000, DAY)
        sale = machine.finish_batch(b.batch_id, 1012)
        assert sale.sold_qty == 12
        assert sale.total_cash == D("4200.00")
        db.session.expire_all()
        assert machine.get_batch(b.batch_id).status == MachineBatchStatus.COMPLETED

    def test_one_active_batch_per_machine_and_branch(self, codes):
        machine.start_batch(codes["espresso"], MAIN, 0, DAY)
        with pytest.raises(DuplicateEntryError):
            machine.start_batch(codes["espresso"], MAIN, 5, DAY)
        machine.start_batch(codes["espresso"], LAKE, 0, DAY)

    def test_end_below_start_is_rejected(self, codes):
        b = machine.start_batch(codes["espresso"], MAIN, 50, DAY)
        with pytest.raises(InvalidQuantityError):
            machine.finish_batch(b.batch_id, 49)

    def test_completed_batch_cannot_finish_again(self, codes):
        b = machine.start_batch(codes["espresso"], MAIN, 0, DAY)
        machine.finish_batch(b.batch_id, 3)
        with pytest.raises(AlreadyFinishedError):
            machine.finish_batch(b.batch_id, 4)
        assert MachineSale.query.count() == 1

    def test_update_only_active_batches(self, codes):
        b = machine.start_batch(codes["espresso"], MAIN, 10, DAY)
        machine.update_batch(b.batch_id, 12, branch=MAIN)
        with pytest.raises(ValidationError):
            machine.update_batch(b.batch_id, 12, branch=LAKE)
        machine.finish_batch(b.batch_id, 20)
        with pytest.raises(NotFoundError):
            machine.update_batch(b.batch_id, 13)
        assert MachineSale.query.one().sold_qty == 8

    def test_non_machine_item_is_rejected(self, codes):
        with pytest.raises(ValidationError):
            machine.start_batch(codes["bun"], MAIN, 0, DAY)


class TestNormalTransfer:
    def test_moves_units_between_sheets(self, codes):
        stock.add_stock(DAY, MAIN, codes["bun"], 10)
        transfer.create_transfer(DAY, MAIN, LAKE, "Normal Item", [TransferLine(codes["bun"], D("4"))])
        db.session.expire_all()
        sender = stock.get_entry(DAY, MAIN, codes["bun"])
        receiver = stock.get_entry(DAY, LAKE, codes["bun"])
        assert (sender.transferred, sender.available) == (4, 6)
        assert receiver.added == 4

    def test_more_than_available_is_rejected(self, codes):
        stock.add_stock(DAY, MAIN, codes["bun"], 3)
        with pytest.raises(InsufficientStockError):
            transfer.create_transfer(DAY, MAIN, LAKE, "Normal Item", [TransferLine(codes["bun"], D("4"))])
        assert stock.get_entry(DAY, LAKE, codes["bun"]) is None
        assert Transfer.query.count() == 0

    def test_same_branch_is_rejected(self, codes):
        with pytest.raises(ValidationError):
            transfer.create_transfer(DAY, MAIN, MAIN, "Normal Item", [TransferLine(codes["bun"], D("1"))])

    def test_locked_receiver_blocks_transfer(self, codes):
        stock.add_stock(DAY, MAIN, codes["bun"], 3)
        stock.finish_batch(DAY, LAKE)
        with pytest.raises(BatchLockedError):
            transfer.create_transfer(DAY, MAIN, LAKE, "Normal Item", [TransferLine(codes["bun"], D("1"))])

    def test_logs_sent_and_received(self, codes):
        stock.add_stock(DAY, MAIN, codes["bun"], 3)
        transfer.create_transfer(
            DAY, MAIN, LAKE, "Normal Item", [TransferLine(codes["bun"], D("2"))], processed_by="ops"
        )
        acts = Activity.query.filter_by(type="transfer").all()
        assert sorted(a.details["direction"] for a in acts) == ["received", "sent"]
        assert Transfer.query.one().processed_by == "ops"
        assert [t.transfer_id for t in transfer.list_transfers(branch=LAKE)] == [
            Transfer.query.one().transfer_id
        ]


class TestGroceryTransfer:
    def test_slices_keep_expiry(self, codes):
        early = DAY + timedelta(days=2)
        late = DAY + timedelta(days=6)
        grocery.add_batch(codes["rice"], MAIN, D("1"), early, DAY)
        grocery.add_batch(codes["rice"], MAIN, D("3"), late, DAY)
        transfer.create_transfer(DAY, MAIN, LAKE, "Grocery Item", [TransferLine(codes["rice"], D("1.5"))])
        db.session.expire_all()
        received = grocery.fifo_batches(codes["rice"], LAKE)
        assert [(b.expiry_date, b.quantity) for b in received] == [(early, D("1")), (late, D("0.5"))]
        assert grocery.get_available_stock(codes["rice"], MAIN) == D("2.5")

    def test_grocery_shortage_is_rejected(self, codes):
        grocery.add_batch(codes["rice"], MAIN, D("1"), DAY + timedelta(days=2), DAY)
        with pytest.raises(InsufficientStockError):
            transfer.create_transfer(DAY, MAIN, LAKE, "Grocery Item", [TransferLine(codes["rice"], D("1.5"))])
        assert grocery.fifo_batches(codes["rice"], LAKE) == []

    def test_machine_items_cannot_move(self, codes):
        with pytest.raises(ValidationError):
            transfer.create_transfer(DAY, MAIN, LAKE, "Machine", [TransferLine(codes["espresso"], D("1"))])
