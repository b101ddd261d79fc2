from flask import Blueprint, jsonify, request

from dao import user as user_dao
from db.models.user import ALL_ACCESS_OPTIONS, UserRole
from utils.auth import access_required, roles_required
from utils.payload import as_bool, body, require
from utils.serializers import user_dict

user_bp = Blueprint("user", __name__, url_prefix="/api/users")

_FIELD_MAP = {
    "fullName": "full_name",
    "password": "password",
    "role": "role",
    "accesses": "accesses",
    "assignedBranches": "assigned_branches",
}


@user_bp.route("", methods=["GET"])
@access_required("User Management")
def users_list():
    return jsonify(
        {
            "success": True,
            "users": [user_dict(u) for u in user_dao.list_users()],
            "accessOptions": ALL_ACCESS_OPTIONS,
        }
    )


@user_bp.route("", methods=["POST"])
@access_required("User Management")
def users_create():
    data = body(request)
    require(data, "username", "password")
    u = user_dao.create_user(
        username=data["username"],
        password=data["password"],
        full_name=data.get("fullName"),
        role=data.get("role") or UserRole.STAFF,
        accesses=data.get("accesses"),
        assigned_branches=data.get("assignedBranches"),
        is_active=as_bool(data.get("isActive", True)),
    )
    return jsonify({"success": True, "message": "User created successfully", "user": user_dict(u)}), 201


@user_bp.route("/<int:user_id>", methods=["PUT"])
@access_required("User Management")
def users_update(user_id: int):
    data = body(request)
    fields = {dst: data[src] for src, dst in _FIELD_MAP.items() if src in data}
    if "isActive" in data:
        fields["is_active"] = as_bool(data["isActive"])
    u = user_dao.update_user(user_id, **fields)
    return jsonify({"success": True, "message": "User updated successfully", "user": user_dict(u)})


@user_bp.route("/<int:user_id>", methods=["DELETE"])
@roles_required(UserRole.ADMIN)
def users_delete(user_id: int):
    user_dao.delete_user(user_id)
    return jsonify({"success": True, "message": "User deleted successfully"})
