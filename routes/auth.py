from flask import Blueprint, jsonify, request
from flask_login import current_user, login_user, logout_user

from dao import user as user_dao
from dao.errors import AuthenticationError
from utils.payload import body, require
from utils.serializers import user_dict

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


@auth_bp.route("/login", methods=["POST"])
def login():
    data = body(request)
    require(data, "username", "password")
    user = user_dao.authenticate(data["username"], data["password"])
    login_user(user, remember=True)
    return jsonify({"success": True, "message": "Login successful", "user": user_dict(user)})


@auth_bp.route("/logout", methods=["POST"])
def logout():
    if current_user.is_authenticated:
        logout_user()
    return jsonify({"success": True, "message": "Logged out"})


@auth_bp.route("/me", methods=["GET"])
def me():
    if not current_user.is_authenticated:
        raise AuthenticationError("Login required")
    return jsonify({"success": True, "user": user_dict(current_user)})
