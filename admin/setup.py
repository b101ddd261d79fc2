# admin/setup.py
from flask import current_app, flash
from flask_admin import Admin, AdminIndexView, expose
from flask_admin.contrib.sqla import ModelView
from flask_admin.theme import Bootstrap4Theme
from flask_login import current_user
from sqlalchemy import inspect as sa_inspect

from configs import db
from dao import branch as branch_dao
from dao import item as item_dao
from dao.branch import BranchInUseError
from dao.errors import AccessDeniedError, AuthenticationError, LedgerError, ValidationError
from dao.item import ItemInUseError
from db.models.user import UserRole


def _is_admin() -> bool:
    if current_app.config.get("LOGIN_DISABLED"):
        return True
    return current_user.is_authenticated and current_user.has_role(UserRole.ADMIN)


def _deny():
    if not current_user.is_authenticated:
        raise AuthenticationError("Login required")
    raise AccessDeniedError("Back office is restricted to administrators")


class LedgerAdminIndex(AdminIndexView):
    @expose("/")
    def index(self):
        if not _is_admin():
            _deny()
        return super().index()

    def is_accessible(self):
        return _is_admin()

    def inaccessible_callback(self, name, **kwargs):
        _deny()


class SecureModelView(ModelView):
    can_view_details = True
    can_export = True

    def is_accessible(self):
        return _is_admin()

    def inaccessible_callback(self, name, **kwargs):
        _deny()


class ReadOnlyView(SecureModelView):
    """Ledger facts are corrected through the API, never edited in place."""

    can_create = False
    can_edit = False
    can_delete = False


class UserView(SecureModelView):
    column_exclude_list = ["password_hash"]
    column_details_exclude_list = ["password_hash"]
    form_excluded_columns = ["password_hash", "last_login", "created_at"]
    column_searchable_list = ["username", "full_name"]
    column_filters = ["role", "is_active"]


def _original(model, attr):
    """Return ``(changed, old value)`` for ``attr`` of a model being edited."""
    hist = sa_inspect(model).attrs[attr].history
    if not hist.has_changes():
        return False, None
    if hist.deleted:
        return True, hist.deleted[0]
    # attribute was expired before the form set it, read the stored value
    cls = type(model)
    with db.session.no_autoflush:
        old = db.session.query(getattr(cls, attr)).filter(cls.id == model.id).scalar()
    return old != getattr(model, attr), old


class GuardedModelView(SecureModelView):
    """Master data whose deletes go through the DAO in-use checks."""

    def handle_view_exception(self, exc):
        if isinstance(exc, LedgerError):
            flash(exc.message, "error")
            return True
        return super().handle_view_exception(exc)

    def dao_delete(self, model):
        raise NotImplementedError

    def delete_model(self, model):
        try:
            self.dao_delete(model)
        except LedgerError as ex:
            self.session.rollback()
            self.handle_view_exception(ex)
            return False
        self.after_model_delete(model)
        return True


class ItemView(GuardedModelView):
    column_searchable_list = ["code", "name", "category"]
    column_filters = ["item_type", "category", "sold_by_weight", "notify_expiry"]
    column_list = ["code", "item_type", "name", "category", "subcategory", "price", "sold_by_weight"]
    form_widget_args = {"code": {"readonly": True}}

    def on_model_change(self, form, model, is_created):
        if is_created:
            model.code = model.code or item_dao.generate_code()
            return
        for attr in ("code", "item_type"):
            changed, _ = _original(model, attr)
            if changed:
                raise ValidationError(f"{attr} cannot be changed once the item exists")
        changed, _ = _original(model, "sold_by_weight")
        with self.session.no_autoflush:
            if changed and item_dao.item_in_use(model.code):
                raise ItemInUseError("Item has stock records, its unit cannot be changed.")

    def dao_delete(self, model):
        item_dao.delete_item(model.code)


class BranchView(GuardedModelView):
    column_searchable_list = ["name", "manager"]

    def on_model_change(self, form, model, is_created):
        if is_created:
            return
        changed, old_name = _original(model, "name")
        with self.session.no_autoflush:
            if changed and branch_dao.branch_in_use(old_name):
                raise BranchInUseError("Branch has ledger records or users, it cannot be renamed.")

    def dao_delete(self, model):
        branch_dao.delete_branch(model.name)


class StockEntryView(ReadOnlyView):
    column_filters = ["stock_date", "branch", "item_code"]
    column_list = ["stock_date", "branch", "item_code", "added", "returned", "transferred", "sold"]
    column_default_sort = ("stock_date", True)


class GroceryBatchView(ReadOnlyView):
    column_filters = ["branch", "item_code", "expiry_date", "added_date"]
    column_list = ["batch_id", "item_code", "branch", "quantity", "remaining", "expiry_date", "added_date"]
    column_default_sort = ("expiry_date", False)


def init_admin(app):
    admin = Admin(
        app,
        name="Branch Ledger Admin",
        theme=Bootstrap4Theme(),
        index_view=LedgerAdminIndex(url="/manage"),
        url="/manage",
    )
    from db.models.activity import Activity
    from db.models.branch import Branch
    from db.models.cash import CashEntry
    from db.models.grocery import GroceryBatch, GroceryReturn, GrocerySale
    from db.models.item import Item
    from db.models.machine import MachineBatch, MachineSale
    from db.models.stock import FinishedBatch, StockEntry
    from db.models.transfer import Transfer
    from db.models.user import User

    admin.add_view(UserView(User, db.session, category="System", endpoint="admin_user", name="Users"))
    admin.add_view(
        ReadOnlyView(Activity, db.session, category="System", endpoint="admin_activity", name="Activities")
    )

    admin.add_view(ItemView(Item, db.session, category="Master Data", endpoint="admin_item", name="Items"))
    admin.add_view(
        BranchView(Branch, db.session, category="Master Data", endpoint="admin_branch", name="Branches")
    )

    admin.add_view(
        StockEntryView(StockEntry, db.session, category="Stock", endpoint="admin_stock", name="Daily Stock")
    )
    admin.add_view(
        ReadOnlyView(FinishedBatch, db.session, category="Stock", endpoint="admin_finished", name="Finished Batches")
    )
    admin.add_view(
        GroceryBatchView(GroceryBatch, db.session, category="Grocery", endpoint="admin_grocery_batch", name="Lots")
    )
    admin.add_view(
        ReadOnlyView(GrocerySale, db.session, category="Grocery", endpoint="admin_grocery_sale", name="Sales")
    )
    admin.add_view(
        ReadOnlyView(GroceryReturn, db.session, category="Grocery", endpoint="admin_grocery_return", name="Returns")
    )
    admin.add_view(
        ReadOnlyView(MachineBatch, db.session, category="Machines", endpoint="admin_machine_batch", name="Batches")
    )
    admin.add_view(
        ReadOnlyView(MachineSale, db.session, category="Machines", endpoint="admin_machine_sale", name="Sales")
    )
    admin.add_view(
        ReadOnlyView(Transfer, db.session, category="Operations", endpoint="admin_transfer", name="Transfers")
    )
    admin.add_view(
        ReadOnlyView(CashEntry, db.session, category="Operations", endpoint="admin_cash", name="Cash Entries")
    )
    return admin
