"""
Pytest fixtures for the branch ledger.

Every test gets a fresh app on an in-memory SQLite database with two branches
and one item of each kind already created. Login checks are off unless a test
asks for ``auth_client``.
"""
from datetime import date

import pytest

from app import create_app
from configs import TestConfig, db
from dao import branch as branch_dao
from dao import item as item_dao
from dao import user as user_dao
from db.models.item import ItemType
from db.models.user import UserRole

DAY = date(2026, 10, 18)
MAIN = "Main Street"
LAKE = "Lake Road"


class AuthTestConfig(TestConfig):
    LOGIN_DISABLED = False


def _seed():
    branch_dao.create_branch(MAIN, "12 Main Street", "A. Perera")
    branch_dao.create_branch(LAKE, "48 Lake Road", "S. Fernando")
    return {
        "bun": item_dao.create_item(ItemType.NORMAL, "Fish Bun", "Bakery", 100).code,
        "cake": item_dao.create_item(ItemType.NORMAL, "Butter Cake", "Bakery", 250).code,
        "rice": item_dao.create_item(
            ItemType.GROCERY, "Basmati Rice", "Grocery", 200, sold_by_weight=True
        ).code,
        "milk": item_dao.create_item(ItemType.GROCERY, "Milk Packet", "Grocery", 30).code,
        "espresso": item_dao.create_item(ItemType.MACHINE, "Espresso", None, 350).code,
    }


def _make_app(config):
    app = create_app(config)
    ctx = app.app_context()
    ctx.push()
    app.codes = _seed()
    return app, ctx


def _teardown(ctx):
    db.session.remove()
    db.drop_all()
    ctx.pop()


@pytest.fixture
def app():
    app, ctx = _make_app(TestConfig)
    yield app
    _teardown(ctx)


@pytest.fixture
def codes(app):
    """Item codes by short name: bun, cake (normal), rice (by weight), milk (by count), espresso."""
    return app.codes


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_app():
    app, ctx = _make_app(AuthTestConfig)
    user_dao.create_user("admin", "secret", "System Admin", role=UserRole.ADMIN)
    user_dao.create_user(
        "cashier",
        "secret",
        "Main Cashier",
        accesses=["Dashboard", "Add Item Stock"],
        assigned_branches=[MAIN],
    )
    yield app
    _teardown(ctx)


@pytest.fixture
def auth_client(auth_app):
    return auth_app.test_client()
