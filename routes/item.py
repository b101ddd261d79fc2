from flask import Blueprint, jsonify, request

from dao import item as item_dao
from dao.errors import NotFoundError, ValidationError
from db.models.item import ItemType
from db.models.user import ALL_ACCESS_OPTIONS
from utils.auth import access_required
from utils.payload import as_bool, body
from utils.serializers import item_dict

item_bp = Blueprint("item", __name__, url_prefix="/api/items")


def _fields(data):
    out = dict(
        name=data.get("name"),
        category=data.get("category"),
        subcategory=data.get("subcategory"),
        price=data.get("price"),
        description=data.get("description"),
    )
    if "soldByWeight" in data:
        out["sold_by_weight"] = as_bool(data["soldByWeight"])
    if "notifyExpiry" in data:
        out["notify_expiry"] = as_bool(data["notifyExpiry"])
    return out


@item_bp.route("", methods=["GET"])
@access_required(*ALL_ACCESS_OPTIONS)
def items_list():
    raw = request.args.get("itemType")
    item_type = ItemType.parse(raw) if raw else None
    if raw and item_type is None:
        raise ValidationError(f"Unknown item type: {raw}", itemType=raw)
    return jsonify({"success": True, "items": [item_dict(i) for i in item_dao.list_items(item_type)]})


@item_bp.route("/<code>", methods=["GET"])
@access_required(*ALL_ACCESS_OPTIONS)
def items_get(code):
    it = item_dao.get_item(code)
    if not it:
        raise NotFoundError("Item not found", itemCode=code)
    return jsonify({"success": True, "item": item_dict(it)})


@item_bp.route("", methods=["POST"])
@access_required("Master Creation")
def items_create():
    data = body(request)
    it = item_dao.create_item(item_type=data.get("itemType"), **_fields(data))
    return jsonify({"success": True, "message": "Item created successfully", "item": item_dict(it)}), 201


@item_bp.route("/<code>", methods=["PUT"])
@access_required("Master Creation")
def items_update(code):
    it = item_dao.update_item(code, **_fields(body(request)))
    return jsonify({"success": True, "message": "Item updated successfully", "item": item_dict(it)})


@item_bp.route("/<code>", methods=["DELETE"])
@access_required("Master Creation")
def items_delete(code):
    item_dao.delete_item(code)
    return jsonify({"success": True, "message": "Item deleted successfully"})
