"""
Login, page access and branch assignment.
"""
from datetime import timedelta
from decimal import Decimal

import pytest

from configs import db
from dao import grocery, machine
from dao import user as user_dao
from dao.errors import AccessDeniedError, AuthenticationError, ValidationError
from db.models.machine import MachineBatchStatus
from db.models.user import ALL_ACCESS_OPTIONS

from tests.conftest import DAY, LAKE, MAIN


def _login(client, username, password="secret"):
    return client.post("/auth/login", json={"username": username, "password": password})


class TestAuthenticate:
    def test_bad_password(self, auth_app):
        with pytest.raises(AuthenticationError):
            user_dao.authenticate("cashier", "nope")

    def test_disabled_account(self, auth_app):
        u = user_dao.authenticate("cashier", "secret")
        user_dao.update_user(u.id, is_active=False)
        with pytest.raises(AccessDeniedError):
            user_dao.authenticate("cashier", "secret")

    def test_admin_gets_every_access(self, auth_app):
        admin = user_dao.authenticate("admin", "secret")
        assert admin.accesses == ALL_ACCESS_OPTIONS
        assert admin.last_login is not None

    def test_unknown_access_is_rejected(self, auth_app):
        with pytest.raises(ValidationError):
            user_dao.create_user("x", "pw", accesses=["Kitchen"])


class TestApiAccess:
    def test_anonymous_is_unauthorized(self, auth_client):
        r = auth_client.get(f"/api/stocks?date={DAY.isoformat()}&branch={MAIN}")
        assert r.status_code == 401

    def test_login_and_me(self, auth_client):
        r = _login(auth_client, "cashier")
        assert r.status_code == 200
        assert auth_client.get("/auth/me").get_json()["user"]["username"] == "cashier"

    def test_wrong_password_is_unauthorized(self, auth_client):
        assert _login(auth_client, "cashier", "bad").status_code == 401

    def test_page_without_access_is_forbidden(self, auth_client):
        _login(auth_client, "cashier")
        r = auth_client.get(f"/api/cash?branch={MAIN}")
        assert r.status_code == 403
        assert r.get_json()["code"] == "ACCESS_DENIED"

    def test_unassigned_branch_is_forbidden(self, auth_client):
        _login(auth_client, "cashier")
        assert auth_client.get(f"/api/stocks?date={DAY.isoformat()}&branch={MAIN}").status_code == 200
        assert auth_client.get(f"/api/stocks?date={DAY.isoformat()}&branch={LAKE}").status_code == 403

    def test_admin_sees_every_branch(self, auth_client):
        _login(auth_client, "admin")
        assert auth_client.get(f"/api/stocks?date={DAY.isoformat()}&branch={LAKE}").status_code == 200
        assert auth_client.get("/api/users").status_code == 200

    def test_staff_cannot_open_back_office(self, auth_client):
        _login(auth_client, "cashier")
        assert auth_client.get("/manage/").status_code == 403

    def test_logout(self, auth_client):
        _login(auth_client, "cashier")
        auth_client.post("/auth/logout")
        assert auth_client.get("/auth/me").status_code == 401


class TestBranchScope:
    """Staff only ever read their assigned branches."""

    @pytest.fixture
    def lake_lot(self, auth_app):
        grocery.add_batch(auth_app.codes["rice"], LAKE, Decimal("1"), DAY + timedelta(days=1), DAY)

    @pytest.mark.parametrize(
        "url",
        [
            "/api/grocery/stocks",
            "/api/grocery/expiring",
            "/api/grocery/stocks?branch=All Branches",
            "/api/machines/batches",
            "/api/activities",
        ],
    )
    def test_staff_must_name_an_assigned_branch(self, auth_client, lake_lot, url):
        _login(auth_client, "cashier")
        r = auth_client.get(url)
        assert r.status_code == 403
        assert r.get_json()["code"] == "ACCESS_DENIED"

    def test_staff_sees_only_their_branch(self, auth_client, lake_lot):
        _login(auth_client, "cashier")
        r = auth_client.get(f"/api/grocery/stocks?branch={MAIN}")
        assert r.status_code == 200
        assert r.get_json()["stocks"] == []

    def test_admin_may_omit_branch(self, auth_client, lake_lot):
        _login(auth_client, "admin")
        rows = auth_client.get("/api/grocery/stocks").get_json()["stocks"]
        assert [s["branch"] for s in rows] == [LAKE]

    def test_finish_flags_of_other_branches_are_hidden(self, auth_client):
        _login(auth_client, "cashier")
        d = DAY.isoformat()
        assert auth_client.get(f"/api/stocks/batch-status?date={d}&branch={LAKE}").status_code == 403
        assert auth_client.get(f"/api/grocery/check-finished?date={d}&branch={LAKE}").status_code == 403
        assert auth_client.get(f"/api/stocks/batch-status?date={d}&branch={MAIN}").status_code == 200

    def test_machine_batch_of_other_branch_cannot_be_finished(self, auth_client, auth_app):
        batch = machine.start_batch(auth_app.codes["espresso"], LAKE, 10, DAY)
        _login(auth_client, "cashier")
        r = auth_client.post(f"/api/machines/batches/{batch.batch_id}/finish", json={"endValue": 12})
        assert r.status_code == 403
        db.session.expire_all()
        assert machine.get_batch(batch.batch_id).status == MachineBatchStatus.ACTIVE
