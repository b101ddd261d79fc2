from flask import Blueprint, jsonify, request

from dao import branch as branch_dao
from db.models.user import ALL_ACCESS_OPTIONS
from utils.auth import access_required
from utils.payload import body
from utils.serializers import branch_dict

branch_bp = Blueprint("branch", __name__, url_prefix="/api/branches")


def _fields(data):
    return {k: data.get(k) for k in ("name", "address", "manager", "phone", "email")}


@branch_bp.route("", methods=["GET"])
@access_required(*ALL_ACCESS_OPTIONS)
def branches_list():
    return jsonify({"success": True, "branches": [branch_dict(b) for b in branch_dao.list_branches()]})


@branch_bp.route("", methods=["POST"])
@access_required("Branch Management")
def branches_create():
    b = branch_dao.create_branch(**_fields(body(request)))
    return jsonify({"success": True, "message": "Branch created successfully", "branch": branch_dict(b)}), 201


@branch_bp.route("/<name>", methods=["PUT"])
@access_required("Branch Management")
def branches_update(name):
    b = branch_dao.update_branch(name, **_fields(body(request)))
    return jsonify({"success": True, "message": "Branch updated successfully", "branch": branch_dict(b)})


@branch_bp.route("/<name>", methods=["DELETE"])
@access_required("Branch Management")
def branches_delete(name):
    branch_dao.delete_branch(name)
    return jsonify({"success": True, "message": "Branch deleted successfully"})
