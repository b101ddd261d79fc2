from flask import Blueprint, jsonify, request

from dao import activity as activity_dao
from dao import report as report_dao
from utils.auth import access_required, ensure_branch_access
from utils.payload import body, parse_date, parse_int_quantity
from utils.serializers import activity_dict, money, report_row_dict

report_bp = Blueprint("report", __name__, url_prefix="/api")


@report_bp.route("/reports", methods=["POST"])
@access_required("Reports")
def reports_generate():
    data = body(request)
    ensure_branch_access(data.get("branch"))
    res = report_dao.sales_report(
        report_type=data.get("type") or "item",
        date_from=parse_date(data.get("dateFrom"), "dateFrom"),
        date_to=parse_date(data.get("dateTo"), "dateTo"),
        branch=data.get("branch"),
        item_type=data.get("itemTypeFilter"),
        item_name=data.get("itemFilter"),
    )
    totals = res["totals"]
    return jsonify(
        {
            "success": True,
            "data": [report_row_dict(r) for r in res["data"]],
            "totals": {
                "returned": totals["returned"],
                "sold": float(totals["sold"]),
                "sales": money(totals["sales"]),
            },
        }
    )


@report_bp.route("/activities", methods=["GET"])
@access_required("Dashboard")
def activities_list():
    a = request.args
    ensure_branch_access(a.get("branch"))
    limit = a.get("limit")
    rows = activity_dao.list_activities(
        branch=a.get("branch"),
        date_from=parse_date(a.get("dateFrom"), "dateFrom"),
        date_to=parse_date(a.get("dateTo"), "dateTo"),
        limit=parse_int_quantity(limit, "limit") if limit else 100,
    )
    return jsonify({"success": True, "activities": [activity_dict(x) for x in rows]})
