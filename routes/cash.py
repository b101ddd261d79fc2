from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user

from dao import cash as cash_dao
from utils.auth import access_required, ensure_branch_access
from utils.payload import body, parse_date, require
from utils.serializers import cash_dict, money

cash_bp = Blueprint("cash", __name__, url_prefix="/api/cash")


@cash_bp.route("", methods=["GET"])
@access_required("Cash Management", "Reports")
def entries_list():
    a = request.args
    ensure_branch_access(a.get("branch"))
    rows = cash_dao.list_entries(
        branch=a.get("branch"),
        day=parse_date(a.get("date")),
        date_from=parse_date(a.get("dateFrom"), "dateFrom"),
        date_to=parse_date(a.get("dateTo"), "dateTo"),
    )
    return jsonify({"success": True, "entries": [cash_dict(c) for c in rows]})


@cash_bp.route("/expected", methods=["GET"])
@access_required("Cash Management")
def expected():
    a = request.args
    require({"branch": a.get("branch"), "date": a.get("date")}, "branch", "date")
    ensure_branch_access(a["branch"])
    value = cash_dao.expected_cash(a["branch"], parse_date(a["date"]))
    return jsonify(
        {"success": True, "expected": money(value), "currency": current_app.config["CURRENCY_LABEL"]}
    )


@cash_bp.route("", methods=["POST"])
@access_required("Cash Management")
def entries_create():
    data = body(request)
    require(data, "branch", "date")
    ensure_branch_access(data["branch"])
    operator_id, operator_name = data.get("operatorId"), data.get("operatorName")
    if not operator_id and current_user.is_authenticated:
        operator_id, operator_name = str(current_user.id), current_user.full_name or current_user.username
    entry = cash_dao.create_entry(
        data["branch"],
        parse_date(data["date"]),
        data.get("actualCash"),
        card_payment=data.get("cardPayment"),
        notes=data.get("notes"),
        operator_id=operator_id,
        operator_name=operator_name,
    )
    return jsonify({"success": True, "message": "Cash entry created successfully", "entry": cash_dict(entry)})
