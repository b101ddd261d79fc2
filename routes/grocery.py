from datetime import date

from flask import Blueprint, current_app, jsonify, request

from dao import grocery as grocery_dao
from utils.auth import access_required, ensure_branch_access
from utils.payload import (
    body,
    parse_date,
    parse_decimal_quantity,
    parse_int_quantity,
    parse_lines,
    remaining_update,
    require,
)
from utils.serializers import (
    grocery_batch_dict,
    grocery_return_dict,
    grocery_sale_dict,
    iso,
    money,
    qty,
)

grocery_bp = Blueprint("grocery", __name__, url_prefix="/api/grocery")

VIEW_PAGES = ("Dashboard", "Add Item Stock", "Add Return Stock", "Internal Transfer", "Expire Tracking")


def _range_args():
    a = request.args
    return dict(
        branch=a.get("branch"),
        day=parse_date(a.get("date")),
        date_from=parse_date(a.get("dateFrom"), "dateFrom"),
        date_to=parse_date(a.get("dateTo"), "dateTo"),
    )


@grocery_bp.route("/stocks", methods=["GET"])
@access_required(*VIEW_PAGES)
def stocks_list():
    branch = request.args.get("branch")
    ensure_branch_access(branch)
    rows = grocery_dao.list_batches(
        branch=branch,
        item_code=request.args.get("itemCode"),
        day=parse_date(request.args.get("date")),
    )
    return jsonify({"success": True, "stocks": [grocery_batch_dict(b) for b in rows]})


@grocery_bp.route("/stocks", methods=["POST"])
@access_required("Add Item Stock")
def stocks_add():
    data = body(request)
    require(data, "itemCode", "branch", "quantity", "expiryDate")
    ensure_branch_access(data["branch"])
    lot = grocery_dao.add_batch(
        item_code=data["itemCode"],
        branch=data["branch"],
        quantity=parse_decimal_quantity(data["quantity"]),
        expiry_date=parse_date(data["expiryDate"], "expiryDate"),
        added_date=parse_date(data.get("date"), default=date.today()),
    )
    return jsonify(
        {"success": True, "message": "Grocery stock added successfully", "batchId": lot.batch_id}
    )


@grocery_bp.route("/stocks/remaining", methods=["PUT"])
@access_required("Add Item Stock")
def stocks_remaining():
    data = body(request)
    require(data, "branch")
    ensure_branch_access(data["branch"])
    updates = parse_lines(data.get("updates"), remaining_update, "updates")
    sales = grocery_dao.update_remaining(
        data["branch"], updates, parse_date(data.get("date"), default=date.today())
    )
    return jsonify(
        {
            "success": True,
            "message": "Remaining quantities updated successfully",
            "sales": [grocery_sale_dict(s) for s in sales],
        }
    )


@grocery_bp.route("/stocks/available", methods=["GET"])
@access_required(*VIEW_PAGES)
def stocks_available():
    a = request.args
    require({"itemCode": a.get("itemCode"), "branch": a.get("branch")}, "itemCode", "branch")
    ensure_branch_access(a["branch"])
    total = grocery_dao.get_available_stock(a["itemCode"], a["branch"])
    return jsonify({"success": True, "totalStock": qty(total)})


@grocery_bp.route("/sales", methods=["GET"])
@access_required(*VIEW_PAGES, "Reports", "Cash Management")
def sales_list():
    args = _range_args()
    ensure_branch_access(args["branch"])
    sales = grocery_dao.list_sales(**args)
    return jsonify({"success": True, "sales": [grocery_sale_dict(s) for s in sales]})


@grocery_bp.route("/sales", methods=["POST"])
@access_required("Add Item Stock")
def sales_add():
    data = body(request)
    require(data, "itemCode", "branch", "date", "soldQty")
    ensure_branch_access(data["branch"])
    sale = grocery_dao.record_sale(
        item_code=data["itemCode"],
        branch=data["branch"],
        day=parse_date(data["date"]),
        sold_qty=parse_decimal_quantity(data["soldQty"], "soldQty"),
        total_cash=data.get("totalCash"),
        item_name=data.get("itemName"),
    )
    return jsonify({"success": True, "message": "Sale recorded successfully", "sale": grocery_sale_dict(sale)})


@grocery_bp.route("/returns", methods=["GET"])
@access_required(*VIEW_PAGES, "Reports")
def returns_list():
    args = _range_args()
    ensure_branch_access(args["branch"])
    rows = grocery_dao.list_returns(**args)
    return jsonify({"success": True, "returns": [grocery_return_dict(r) for r in rows]})


@grocery_bp.route("/returns", methods=["POST"])
@access_required("Add Return Stock")
def returns_add():
    data = body(request)
    require(data, "itemCode", "branch", "returnedQty")
    ensure_branch_access(data["branch"])
    ret = grocery_dao.record_return(
        item_code=data["itemCode"],
        branch=data["branch"],
        quantity=parse_decimal_quantity(data["returnedQty"], "returnedQty"),
        reason=data.get("reason"),
        day=parse_date(data.get("date"), default=date.today()),
        item_name=data.get("itemName"),
    )
    return jsonify(
        {"success": True, "message": "Return recorded successfully", "return": grocery_return_dict(ret)}
    )


@grocery_bp.route("/check-finished", methods=["GET"])
@access_required(*VIEW_PAGES)
def check_finished():
    a = request.args
    require({"date": a.get("date"), "branch": a.get("branch")}, "date", "branch")
    ensure_branch_access(a["branch"])
    finished = grocery_dao.check_finished(parse_date(a["date"]), a["branch"])
    return jsonify({"success": True, "isFinished": finished})


@grocery_bp.route("/finish-batch", methods=["POST"])
@access_required("Add Item Stock", "Add Return Stock")
def finish_batch():
    data = body(request)
    require(data, "date", "branch")
    ensure_branch_access(data["branch"])
    res = grocery_dao.finish_batch(parse_date(data["date"]), data["branch"])
    return jsonify(
        {
            "success": True,
            "message": "Grocery batch finished successfully",
            "finishedAt": iso(res["finishedAt"]),
            "totalSales": money(res["totalSales"]),
        }
    )


@grocery_bp.route("/expiring", methods=["GET"])
@access_required("Dashboard", "Expire Tracking")
def expiring():
    branch = request.args.get("branch")
    ensure_branch_access(branch)
    days = request.args.get("days")
    days = (
        parse_int_quantity(days, "days", allow_zero=True)
        if days not in (None, "")
        else current_app.config["EXPIRY_WARNING_DAYS"]
    )
    rows = grocery_dao.expiring_batches(days, branch)
    return jsonify({"success": True, "days": days, "batches": [grocery_batch_dict(b) for b in rows]})
