from datetime import date

from flask import Blueprint, jsonify, request

from dao import machine as machine_dao
from utils.auth import access_required, ensure_branch_access
from utils.payload import body, parse_date, require
from utils.serializers import machine_batch_dict, machine_sale_dict, money

machine_bp = Blueprint("machine", __name__, url_prefix="/api/machines")


def _guard_batch(batch_id):
    batch = machine_dao.get_batch(batch_id)
    if batch:
        ensure_branch_access(batch.branch)


@machine_bp.route("/batches", methods=["GET"])
@access_required("Dashboard", "Add Item Stock")
def batches_list():
    a = request.args
    ensure_branch_access(a.get("branch"))
    rows = machine_dao.list_batches(
        branch=a.get("branch"),
        day=parse_date(a.get("date")),
        status=a.get("status"),
        machine_code=a.get("machineCode"),
    )
    return jsonify({"success": True, "batches": [machine_batch_dict(b) for b in rows]})


@machine_bp.route("/batches", methods=["POST"])
@access_required("Add Item Stock")
def batches_start():
    data = body(request)
    require(data, "machineCode", "branch", "startValue")
    ensure_branch_access(data["branch"])
    batch = machine_dao.start_batch(
        data["machineCode"],
        data["branch"],
        data["startValue"],
        parse_date(data.get("date"), default=date.today()),
    )
    return jsonify({"success": True, "message": "Batch started successfully", "batchId": batch.batch_id})


@machine_bp.route("/batches/<batch_id>", methods=["PUT"])
@access_required("Add Item Stock")
def batches_update(batch_id):
    data = body(request)
    require(data, "startValue")
    _guard_batch(batch_id)
    batch = machine_dao.update_batch(
        batch_id,
        data["startValue"],
        day=parse_date(data.get("date")),
        branch=data.get("branch"),
        machine_code=data.get("machineCode"),
    )
    return jsonify(
        {"success": True, "message": "Batch updated successfully", "batch": machine_batch_dict(batch)}
    )


@machine_bp.route("/batches/<batch_id>/finish", methods=["POST"])
@access_required("Add Item Stock")
def batches_finish(batch_id):
    data = body(request)
    require(data, "endValue")
    _guard_batch(batch_id)
    sale = machine_dao.finish_batch(batch_id, data["endValue"])
    return jsonify(
        {
            "success": True,
            "message": "Batch completed successfully",
            "soldQty": sale.sold_qty,
            "totalCash": money(sale.total_cash),
        }
    )


@machine_bp.route("/sales", methods=["GET"])
@access_required("Dashboard", "Add Item Stock", "Reports", "Cash Management")
def sales_list():
    a = request.args
    ensure_branch_access(a.get("branch"))
    rows = machine_dao.list_sales(
        branch=a.get("branch"),
        day=parse_date(a.get("date")),
        date_from=parse_date(a.get("dateFrom"), "dateFrom"),
        date_to=parse_date(a.get("dateTo"), "dateTo"),
    )
    return jsonify({"success": True, "sales": [machine_sale_dict(s) for s in rows]})
