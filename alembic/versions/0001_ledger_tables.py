"""ledger tables

Revision ID: 0001_ledger_tables
Revises:
Create Date: 2026-10-18 09:00:00

"""
from alembic import op
import sqlalchemy as sa


revision = "0001_ledger_tables"
down_revision = None
branch_labels = None
depends_on = None

ITEM_TYPES = ("NORMAL", "GROCERY", "MACHINE")


def upgrade() -> None:
    op.create_table(
        "item",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("code", sa.String(length=32), nullable=False),
        sa.Column("item_type", sa.Enum(*ITEM_TYPES, name="itemtype"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=False),
        sa.Column("subcategory", sa.String(length=100), nullable=True),
        sa.Column("price", sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("sold_by_weight", sa.Boolean(), nullable=False),
        sa.Column("notify_expiry", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_item_code"), "item", ["code"], unique=True)
    op.create_index(op.f("ix_item_item_type"), "item", ["item_type"], unique=False)

    op.create_table(
        "branch",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("address", sa.String(length=255), nullable=False),
        sa.Column("manager", sa.String(length=120), nullable=False),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("email", sa.String(length=120), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_branch_name"), "branch", ["name"], unique=True)

    op.create_table(
        "user_account",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(length=80), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=120), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("role", sa.Enum("ADMIN", "STAFF", name="userrole"), nullable=False),
        sa.Column("accesses", sa.JSON(), nullable=True),
        sa.Column("assigned_branches", sa.JSON(), nullable=True),
        sa.Column("last_login", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_user_account_username"), "user_account", ["username"], unique=True)

    op.create_table(
        "stock_entry",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("stock_date", sa.Date(), nullable=False),
        sa.Column("branch", sa.String(length=100), nullable=False),
        sa.Column("item_code", sa.String(length=32), nullable=False),
        sa.Column("added", sa.Integer(), nullable=False),
        sa.Column("returned", sa.Integer(), nullable=False),
        sa.Column("transferred", sa.Integer(), nullable=False),
        sa.Column("sold", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["item_code"], ["item.code"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("stock_date", "branch", "item_code", name="uq_stock_entry_day"),
    )
    op.create_index(op.f("ix_stock_entry_stock_date"), "stock_entry", ["stock_date"], unique=False)
    op.create_index(op.f("ix_stock_entry_branch"), "stock_entry", ["branch"], unique=False)

    op.create_table(
        "finished_batch",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("finish_date", sa.Date(), nullable=False),
        sa.Column("branch", sa.String(length=100), nullable=False),
        sa.Column("item_type", sa.Enum(*ITEM_TYPES, name="itemtype"), nullable=False),
        sa.Column("finished_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("finish_date", "branch", "item_type", name="uq_finished_batch_scope"),
    )

    op.create_table(
        "grocery_batch",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("batch_id", sa.String(length=40), nullable=False),
        sa.Column("item_code", sa.String(length=32), nullable=False),
        sa.Column("branch", sa.String(length=100), nullable=False),
        sa.Column("quantity", sa.Numeric(precision=18, scale=3), nullable=False),
        sa.Column("remaining", sa.Numeric(precision=18, scale=3), nullable=False),
        sa.Column("expiry_date", sa.Date(), nullable=False),
        sa.Column("added_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint("remaining >= 0", name="ck_grocery_remaining_min"),
        sa.CheckConstraint("remaining <= quantity", name="ck_grocery_remaining_max"),
        sa.ForeignKeyConstraint(["item_code"], ["item.code"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("batch_id"),
    )
    op.create_index(
        "ix_grocery_batch_fifo",
        "grocery_batch",
        ["item_code", "branch", "expiry_date", "added_date"],
        unique=False,
    )

    op.create_table(
        "grocery_sale",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("item_code", sa.String(length=32), nullable=False),
        sa.Column("item_name", sa.String(length=255), nullable=True),
        sa.Column("branch", sa.String(length=100), nullable=False),
        sa.Column("sale_date", sa.Date(), nullable=False),
        sa.Column("sold_qty", sa.Numeric(precision=18, scale=3), nullable=False),
        sa.Column("total_cash", sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_grocery_sale_sale_date"), "grocery_sale", ["sale_date"], unique=False)

    op.create_table(
        "grocery_return",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("item_code", sa.String(length=32), nullable=False),
        sa.Column("item_name", sa.String(length=255), nullable=True),
        sa.Column("branch", sa.String(length=100), nullable=False),
        sa.Column("return_date", sa.Date(), nullable=False),
        sa.Column("returned_qty", sa.Numeric(precision=18, scale=3), nullable=False),
        sa.Column("reason", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_grocery_return_return_date"), "grocery_return", ["return_date"], unique=False)

    op.create_table(
        "machine_batch",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("batch_id", sa.String(length=40), nullable=False),
        sa.Column("machine_code", sa.String(length=32), nullable=False),
        sa.Column("branch", sa.String(length=100), nullable=False),
        sa.Column("start_value", sa.Integer(), nullable=False),
        sa.Column("end_value", sa.Integer(), nullable=True),
        sa.Column("batch_date", sa.Date(), nullable=False),
        sa.Column("status", sa.Enum("ACTIVE", "COMPLETED", name="machinebatchstatus"), nullable=False),
        sa.Column("started_at", sa.DateTime(), nullable=True),
        sa.Column("ended_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["machine_code"], ["item.code"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_machine_batch_batch_id"), "machine_batch", ["batch_id"], unique=True)

    op.create_table(
        "machine_sale",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("batch_id", sa.String(length=40), nullable=True),
        sa.Column("machine_code", sa.String(length=32), nullable=False),
        sa.Column("machine_name", sa.String(length=255), nullable=True),
        sa.Column("sale_date", sa.Date(), nullable=False),
        sa.Column("branch", sa.String(length=100), nullable=False),
        sa.Column("start_value", sa.Integer(), nullable=False),
        sa.Column("end_value", sa.Integer(), nullable=False),
        sa.Column("sold_qty", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column("total_cash", sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["batch_id"], ["machine_batch.batch_id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_machine_sale_sale_date"), "machine_sale", ["sale_date"], unique=False)

    op.create_table(
        "transfer",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("transfer_id", sa.String(length=48), nullable=False),
        sa.Column("transfer_date", sa.Date(), nullable=False),
        sa.Column("sender_branch", sa.String(length=100), nullable=False),
        sa.Column("receiver_branch", sa.String(length=100), nullable=False),
        sa.Column("item_type", sa.Enum(*ITEM_TYPES, name="itemtype"), nullable=False),
        sa.Column("items", sa.JSON(), nullable=False),
        sa.Column("processed_by", sa.String(length=120), nullable=True),
        sa.Column("processed_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("transfer_id"),
    )
    op.create_index(op.f("ix_transfer_transfer_date"), "transfer", ["transfer_date"], unique=False)

    op.create_table(
        "cash_entry",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("entry_date", sa.Date(), nullable=False),
        sa.Column("branch", sa.String(length=100), nullable=False),
        sa.Column("expected", sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column("actual", sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column("actual_cash", sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column("card_payment", sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column("difference", sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column("status", sa.Enum("MATCH", "OVERAGE", "SHORTAGE", name="cashstatus"), nullable=False),
        sa.Column("operator_id", sa.String(length=64), nullable=True),
        sa.Column("operator_name", sa.String(length=120), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("entry_date", "branch", name="uq_cash_entry_day"),
    )
    op.create_index(op.f("ix_cash_entry_entry_date"), "cash_entry", ["entry_date"], unique=False)

    op.create_table(
        "activity",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("type", sa.String(length=40), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("branch", sa.String(length=100), nullable=True),
        sa.Column("occurred_at", sa.DateTime(), nullable=True),
        sa.Column("real_date", sa.Date(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_activity_branch"), "activity", ["branch"], unique=False)
    op.create_index(op.f("ix_activity_occurred_at"), "activity", ["occurred_at"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_activity_occurred_at"), table_name="activity")
    op.drop_index(op.f("ix_activity_branch"), table_name="activity")
    op.drop_table("activity")
    op.drop_index(op.f("ix_cash_entry_entry_date"), table_name="cash_entry")
    op.drop_table("cash_entry")
    op.drop_index(op.f("ix_transfer_transfer_date"), table_name="transfer")
    op.drop_table("transfer")
    op.drop_index(op.f("ix_machine_sale_sale_date"), table_name="machine_sale")
    op.drop_table("machine_sale")
    op.drop_index(op.f("ix_machine_batch_batch_id"), table_name="machine_batch")
    op.drop_table("machine_batch")
    op.drop_index(op.f("ix_grocery_return_return_date"), table_name="grocery_return")
    op.drop_table("grocery_return")
    op.drop_index(op.f("ix_grocery_sale_sale_date"), table_name="grocery_sale")
    op.drop_table("grocery_sale")
    op.drop_index("ix_grocery_batch_fifo", table_name="grocery_batch")
    op.drop_table("grocery_batch")
    op.drop_table("finished_batch")
    op.drop_index(op.f("ix_stock_entry_branch"), table_name="stock_entry")
    op.drop_index(op.f("ix_stock_entry_stock_date"), table_name="stock_entry")
    op.drop_table("stock_entry")
    op.drop_index(op.f("ix_user_account_username"), table_name="user_account")
    op.drop_table("user_account")
    op.drop_index(op.f("ix_branch_name"), table_name="branch")
    op.drop_table("branch")
    op.drop_index(op.f("ix_item_item_type"), table_name="item")
    op.drop_index(op.f("ix_item_code"), table_name="item")
    op.drop_table("item")

    bind = op.get_bind()
    for name in ("cashstatus", "machinebatchstatus", "userrole", "itemtype"):
        sa.Enum(name=name).drop(bind, checkfirst=True)
