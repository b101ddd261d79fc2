"""
HTTP tests for the JSON API (login checks off).
"""
import pytest

from configs import db
from dao import stock
from db.models.grocery import GroceryBatch

from tests.conftest import DAY, LAKE, MAIN

D = DAY.isoformat()


def _post(client, url, payload, method="post"):
    return getattr(client, method)(url, json=payload)


class TestStockRoutes:
    def test_add_return_finish_flow(self, client, codes):
        items = [{"itemCode": codes["bun"], "quantity": 100}]
        assert _post(client, "/api/stocks/update", {"date": D, "branch": MAIN, "items": items}).status_code == 200

        items = [{"itemCode": codes["bun"], "quantity": 20}]
        assert _post(client, "/api/stocks/update-returns", {"date": D, "branch": MAIN, "items": items}).status_code == 200

        r = _post(client, "/api/stocks/finish-batch", {"date": D, "branch": MAIN})
        assert r.status_code == 200
        assert r.get_json()["totalRevenue"] == 8000.0

        body = client.get(f"/api/stocks?date={D}&branch={MAIN}").get_json()
        assert body["isFinished"] is True
        assert body["stocks"][0]["sold"] == 80

    def test_finish_twice_is_conflict(self, client, codes):
        _post(client, "/api/stocks/finish-batch", {"date": D, "branch": MAIN})
        r = _post(client, "/api/stocks/finish-batch", {"date": D, "branch": MAIN})
        assert r.status_code == 409
        assert r.get_json()["code"] == "ALREADY_FINISHED"

    def test_locked_day_rejects_add(self, client, codes):
        _post(client, "/api/stocks/finish-batch", {"date": D, "branch": MAIN})
        items = [{"itemCode": codes["bun"], "quantity": 1}]
        r = _post(client, "/api/stocks/update", {"date": D, "branch": MAIN, "items": items})
        assert r.status_code == 409
        assert r.get_json()["code"] == "BATCH_LOCKED"

    def test_over_return_is_bad_request(self, client, codes):
        stock.add_stock(DAY, MAIN, codes["bun"], 2)
        items = [{"itemCode": codes["bun"], "quantity": 3}]
        r = _post(client, "/api/stocks/update-returns", {"date": D, "branch": MAIN, "items": items})
        assert r.status_code == 400
        assert r.get_json() == {
            "success": False,
            "code": "INSUFFICIENT_STOCK",
            "message": f"Cannot return 3. Only 2 available for item {codes['bun']}",
            "details": {"itemCode": codes["bun"], "requested": 3, "available": 2},
        }

    def test_missing_fields_and_bad_quantities(self, client, codes):
        assert _post(client, "/api/stocks/update", {"branch": MAIN}).status_code == 400
        items = [{"itemCode": codes["bun"], "quantity": 1.5}]
        r = _post(client, "/api/stocks/update", {"date": D, "branch": MAIN, "items": items})
        assert r.get_json()["code"] == "INVALID_QUANTITY"
        r = _post(client, "/api/stocks/update", {"date": "18/10/2026", "branch": MAIN, "items": []})
        assert r.get_json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.parametrize(
        "raw, code",
        [("Infinity", "VALIDATION_ERROR"), ("NaN", "VALIDATION_ERROR"), ("1e12", "INVALID_QUANTITY")],
    )
    def test_out_of_range_quantities_are_bad_requests(self, client, codes, raw, code):
        payload = (
            f'{{"date": "{D}", "branch": "{MAIN}", '
            f'"items": [{{"itemCode": "{codes["bun"]}", "quantity": {raw}}}]}}'
        )
        r = client.post("/api/stocks/update", data=payload, content_type="application/json")
        assert r.status_code == 400
        assert r.get_json()["code"] == code
        assert stock.get_entry(DAY, MAIN, codes["bun"]) is None


class TestGroceryRoutes:
    def test_add_update_and_available(self, client, codes):
        for qty, exp in (("3", "2026-10-20"), ("2", "2026-10-22")):
            r = _post(
                client,
                "/api/grocery/stocks",
                {"itemCode": codes["rice"], "branch": MAIN, "quantity": qty, "expiryDate": exp, "date": D},
            )
            assert r.get_json()["batchId"].startswith("B")

        r = _post(
            client,
            "/api/grocery/stocks/remaining",
            {"branch": MAIN, "date": D, "updates": [{"itemCode": codes["rice"], "newRemaining": 2}]},
            method="put",
        )
        assert r.status_code == 200
        assert r.get_json()["sales"][0]["soldQty"] == 3.0

        r = client.get(f"/api/grocery/stocks/available?itemCode={codes['rice']}&branch={MAIN}")
        assert r.get_json()["totalStock"] == 2.0

        rows = client.get(f"/api/grocery/stocks?branch={MAIN}").get_json()["stocks"]
        assert sorted(s["remaining"] for s in rows) == [0.8, 1.2]

    def test_return_and_expiring(self, client, codes):
        _post(
            client,
            "/api/grocery/stocks",
            {"itemCode": codes["milk"], "branch": LAKE, "quantity": 6, "expiryDate": "2099-01-01"},
        )
        r = _post(
            client,
            "/api/grocery/returns",
            {"itemCode": codes["milk"], "branch": LAKE, "date": D, "returnedQty": 2},
        )
        assert r.get_json()["return"]["reason"] == "waste"
        db.session.expire_all()
        assert GroceryBatch.query.one().remaining == 4
        assert client.get("/api/grocery/expiring?days=3").get_json()["batches"] == []

    def test_finish_and_check(self, client, codes):
        r = _post(client, "/api/grocery/finish-batch", {"date": D, "branch": MAIN})
        assert r.get_json()["totalSales"] == 0.0
        assert client.get(f"/api/grocery/check-finished?date={D}&branch={MAIN}").get_json()["isFinished"]


class TestOtherRoutes:
    def test_machine_transfer_cash_report(self, client, codes):
        r = _post(client, "/api/machines/batches", {"machineCode": codes["espresso"], "branch": MAIN, "startValue": 10, "date": D})
        batch_id = r.get_json()["batchId"]
        r = _post(client, f"/api/machines/batches/{batch_id}/finish", {"endValue": 14})
        assert r.get_json()["totalCash"] == 1400.0

        stock.add_stock(DAY, MAIN, codes["bun"], 5)
        r = _post(
            client,
            "/api/transfers",
            {
                "date": D,
                "senderBranch": MAIN,
                "receiverBranch": LAKE,
                "itemType": "Normal Item",
                "items": [{"itemCode": codes["bun"], "quantity": 2}],
            },
        )
        assert r.status_code == 200
        assert len(client.get(f"/api/transfers?branch={LAKE}").get_json()["transfers"]) == 1

        _post(client, "/api/stocks/finish-batch", {"date": D, "branch": MAIN})
        assert client.get(f"/api/cash/expected?branch={MAIN}&date={D}").get_json()["expected"] == 1700.0
        r = _post(client, "/api/cash", {"branch": MAIN, "date": D, "actualCash": 1700})
        assert r.get_json()["entry"]["status"] == "Match"

        r = _post(client, "/api/reports", {"type": "item", "dateFrom": D, "dateTo": D, "branch": MAIN})
        assert r.get_json()["totals"]["sales"] == 1700.0

        acts = client.get(f"/api/activities?branch={MAIN}").get_json()["activities"]
        assert {"transfer", "stock_added", "machine_sale"} <= {a["type"] for a in acts}

    def test_master_data_crud(self, client, codes):
        r = _post(client, "/api/items", {"itemType": "Grocery Item", "name": "Flour", "category": "Baking", "price": 90, "soldByWeight": True})
        assert r.status_code == 201
        code = r.get_json()["item"]["code"]
        assert _post(client, f"/api/items/{code}", {"name": "Wheat Flour", "category": "Baking", "price": 95}, method="put").get_json()["item"]["price"] == 95.0
        assert client.delete(f"/api/items/{code}").status_code == 200
        assert client.get(f"/api/items/{code}").status_code == 404

        r = _post(client, "/api/branches", {"name": "Hill Side", "address": "3 Hill Lane", "manager": "N. Silva"})
        assert r.status_code == 201
        assert _post(client, "/api/branches", {"name": "Hill Side", "address": "x", "manager": "y"}).status_code == 409

    def test_health(self, client):
        assert client.get("/").get_json()["success"] is True
