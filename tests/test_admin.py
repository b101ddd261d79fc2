"""
Back-office views must respect the same in-use rules as the API.
"""
from datetime import timedelta
from decimal import Decimal

import pytest

from admin.setup import BranchView, ItemView
from configs import db
from dao import branch as branch_dao
from dao import grocery, stock
from dao import item as item_dao
from dao.errors import InUseError, ValidationError
from db.models.branch import Branch
from db.models.item import Item, ItemType

from tests.conftest import DAY, LAKE, MAIN


class TestBranchView:
    def test_rename_of_branch_in_use_is_refused(self, codes):
        stock.add_stock(DAY, MAIN, codes["bun"], 1)
        view = BranchView(Branch, db.session, endpoint="branch_rename_check")
        b = branch_dao.get_branch(MAIN)
        b.name = "Main St"
        with pytest.raises(InUseError):
            view.on_model_change(None, b, False)
        db.session.rollback()

    def test_rename_of_unused_branch_is_allowed(self, codes):
        view = BranchView(Branch, db.session, endpoint="branch_rename_ok")
        b = branch_dao.get_branch(LAKE)
        b.name = "Lake Rd"
        view.on_model_change(None, b, False)
        db.session.commit()
        assert branch_dao.get_branch("Lake Rd") is not None

    def test_delete_goes_through_in_use_check(self, client, codes):
        stock.add_stock(DAY, MAIN, codes["bun"], 1)
        used = branch_dao.get_branch(MAIN).id
        free = branch_dao.create_branch("Hill Side", "3 Hill Lane", "N. Silva").id

        assert client.post("/manage/admin_branch/delete/", data={"id": used}).status_code == 302
        assert client.post("/manage/admin_branch/delete/", data={"id": free}).status_code == 302
        db.session.expire_all()
        assert branch_dao.get_branch(MAIN) is not None
        assert branch_dao.get_branch("Hill Side") is None


class TestItemView:
    def test_code_and_type_are_fixed(self, codes):
        view = ItemView(Item, db.session, endpoint="item_fixed_fields")
        it = item_dao.get_item(codes["cake"])
        it.item_type = ItemType.GROCERY
        with pytest.raises(ValidationError):
            view.on_model_change(None, it, False)
        db.session.rollback()

    def test_unit_of_stocked_item_is_fixed(self, codes):
        grocery.add_batch(codes["rice"], MAIN, Decimal("2"), DAY + timedelta(days=3), DAY)
        view = ItemView(Item, db.session, endpoint="item_unit")
        it = item_dao.get_item(codes["rice"])
        it.sold_by_weight = False
        with pytest.raises(InUseError):
            view.on_model_change(None, it, False)
        db.session.rollback()

    def test_new_item_gets_a_code(self, codes):
        view = ItemView(Item, db.session, endpoint="item_new")
        it = Item(code="", item_type=ItemType.NORMAL, name="Tea Bun", category="Bakery", price=60)
        view.on_model_change(None, it, True)
        assert it.code.startswith("ITEM")

    def test_delete_of_stocked_item_is_refused(self, client, codes):
        stock.add_stock(DAY, MAIN, codes["bun"], 1)
        bun_id = item_dao.get_item(codes["bun"]).id
        client.post("/manage/admin_item/delete/", data={"id": bun_id})
        db.session.expire_all()
        assert item_dao.get_item(codes["bun"]) is not None
