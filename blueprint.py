from index import main_bp
from routes.auth import auth_bp
from routes.branch import branch_bp
from routes.cash import cash_bp
from routes.grocery import grocery_bp
from routes.item import item_bp
from routes.machine import machine_bp
from routes.report import report_bp
from routes.stock import stock_bp
from routes.transfer import transfer_bp
from routes.user import user_bp


def blue_print(app):
    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(item_bp)
    app.register_blueprint(branch_bp)
    app.register_blueprint(user_bp)
    app.register_blueprint(stock_bp)
    app.register_blueprint(grocery_bp)
    app.register_blueprint(machine_bp)
    app.register_blueprint(transfer_bp)
    app.register_blueprint(cash_bp)
    app.register_blueprint(report_bp)
