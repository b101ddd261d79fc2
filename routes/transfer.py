from flask import Blueprint, jsonify, request

from dao import transfer as transfer_dao
from utils.auth import access_required, current_username, ensure_branch_access
from utils.payload import body, parse_date, parse_lines, require, transfer_line
from utils.serializers import transfer_dict

transfer_bp = Blueprint("transfer", __name__, url_prefix="/api/transfers")


@transfer_bp.route("", methods=["GET"])
@access_required("Internal Transfer", "Reports")
def transfers_list():
    a = request.args
    ensure_branch_access(a.get("branch"))
    rows = transfer_dao.list_transfers(
        branch=a.get("branch"),
        date_from=parse_date(a.get("dateFrom"), "dateFrom"),
        date_to=parse_date(a.get("dateTo"), "dateTo"),
    )
    return jsonify({"success": True, "transfers": [transfer_dict(t) for t in rows]})


@transfer_bp.route("", methods=["POST"])
@access_required("Internal Transfer")
def transfers_create():
    data = body(request)
    require(data, "date", "senderBranch", "receiverBranch", "itemType")
    # the sender must be one of the operator's branches
    ensure_branch_access(data["senderBranch"])
    lines = parse_lines(data.get("items"), transfer_line)
    tr = transfer_dao.create_transfer(
        parse_date(data["date"]),
        data["senderBranch"],
        data["receiverBranch"],
        data["itemType"],
        lines,
        processed_by=data.get("processedBy") or current_username(),
    )
    return jsonify(
        {"success": True, "message": "Transfer completed successfully", "transfer": transfer_dict(tr)}
    )
