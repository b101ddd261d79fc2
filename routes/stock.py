from datetime import date

from flask import Blueprint, jsonify, request

from dao import stock as stock_dao
from db.models.item import ItemType
from utils.auth import access_required, ensure_branch_access
from utils.payload import body, parse_date, parse_lines, require, stock_line
from utils.serializers import iso, money, stock_dict

stock_bp = Blueprint("stock", __name__, url_prefix="/api/stocks")

VIEW_PAGES = ("Dashboard", "Add Item Stock", "Add Return Stock", "Internal Transfer")


@stock_bp.route("", methods=["GET"])
@access_required(*VIEW_PAGES)
def stocks_list():
    branch = request.args.get("branch")
    require({"branch": branch}, "branch")
    ensure_branch_access(branch)
    day = parse_date(request.args.get("date"), default=date.today())
    item_type = ItemType.parse(request.args.get("itemType")) if request.args.get("itemType") else None
    rows, flag = stock_dao.get_stocks(day, branch, item_type)
    return jsonify(
        {
            "success": True,
            "stocks": [stock_dict(r) for r in rows],
            "isFinished": flag is not None,
            "finishedAt": iso(flag.finished_at) if flag else None,
        }
    )


@stock_bp.route("/batch-status", methods=["GET"])
@access_required(*VIEW_PAGES)
def batch_status():
    branch = request.args.get("branch")
    require({"branch": branch, "date": request.args.get("date")}, "date", "branch")
    ensure_branch_access(branch)
    day = parse_date(request.args.get("date"))
    return jsonify({"success": True, "isFinished": stock_dao.get_batch_status(day, branch)})


@stock_bp.route("/update", methods=["POST"])
@access_required("Add Item Stock")
def stocks_add():
    data = body(request)
    require(data, "date", "branch")
    ensure_branch_access(data["branch"])
    lines = parse_lines(data.get("items"), stock_line)
    stock_dao.add_stocks(parse_date(data["date"]), data["branch"], lines)
    return jsonify({"success": True, "message": "Stocks updated successfully"})


@stock_bp.route("/update-returns", methods=["POST"])
@access_required("Add Return Stock")
def stocks_return():
    data = body(request)
    require(data, "date", "branch")
    ensure_branch_access(data["branch"])
    lines = parse_lines(data.get("items"), stock_line)
    stock_dao.record_returns(parse_date(data["date"]), data["branch"], lines)
    return jsonify({"success": True, "message": "Returns updated successfully"})


@stock_bp.route("/finish-batch", methods=["POST"])
@access_required("Add Item Stock", "Add Return Stock")
def finish_batch():
    data = body(request)
    require(data, "date", "branch")
    ensure_branch_access(data["branch"])
    res = stock_dao.finish_batch(parse_date(data["date"]), data["branch"])
    return jsonify(
        {
            "success": True,
            "message": "Batch finished successfully",
            "finishedAt": iso(res["finishedAt"]),
            "totalRevenue": money(res["totalRevenue"]),
        }
    )
