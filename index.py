# index.py
from datetime import datetime

from flask import Blueprint, current_app, jsonify

main_bp = Blueprint("main", __name__)


@main_bp.route("/")
def home():
    return jsonify(
        {
            "success": True,
            "service": "branch-ledger",
            "currency": current_app.config.get("CURRENCY_LABEL"),
            "serverTime": datetime.now().isoformat(timespec="seconds"),
        }
    )
