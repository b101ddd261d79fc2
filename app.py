import os

from flask import Flask, jsonify
from sqlalchemy.exc import IntegrityError

from admin.setup import init_admin
from blueprint import blue_print
from configs import Config, configure_logging, db, login
from dao.errors import LedgerError
from db.models.user import User


def create_app(config_object=Config):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)
    if not app.config.get("SQLALCHEMY_DATABASE_URI"):
        os.makedirs(app.instance_path, exist_ok=True)
        app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///" + os.path.join(
            app.instance_path, "ledger.db"
        )

    configure_logging(app)
    db.init_app(app)
    login.init_app(app)

    @login.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @app.errorhandler(LedgerError)
    def handle_ledger_error(e):
        db.session.rollback()
        app.logger.warning("rejected: %s %s", e.code, e.message)
        return jsonify(e.to_dict()), e.status

    def handle_integrity_error(e):
        db.session.rollback()
        app.logger.warning("IntegrityError: %s", getattr(e, "orig", e))
        return (
            jsonify({"success": False, "code": "DUPLICATE_ENTRY", "message": "Record conflicts with existing data"}),
            409,
        )

    app.register_error_handler(IntegrityError, handle_integrity_error)

    init_admin(app)  # /manage
    blue_print(app)

    with app.app_context():
        db.create_all()

    return app


if __name__ == "__main__":
    create_app().run(debug=True, host="0.0.0.0", port=5000)
