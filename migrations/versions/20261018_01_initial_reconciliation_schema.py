"""initial reconciliation schema

Revision ID: 3f1c9a7d2b10
Revises: 
Create Date: 2026-10-18 09:30:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f1c9a7d2b10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "pay_order",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("order_code", sa.String(length=64), nullable=False),
        sa.Column("account_id", sa.Integer(), nullable=False),
        sa.Column("kind", sa.Integer(), nullable=False),
        sa.Column("requested_amount_cents", sa.Integer(), nullable=False),
        sa.Column("actual_amount_cents", sa.Integer(), nullable=False),
        sa.Column("status", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.Integer(), nullable=False),
        sa.Column("paid_at", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("closed_at", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_pay_order_order_code", "pay_order", ["order_code"], unique=True)
    op.create_index("ix_pay_order_account_id", "pay_order", ["account_id"])
    op.create_index("ix_pay_order_status", "pay_order", ["status"])

    op.create_table(
        "settings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("account_id", sa.Integer(), nullable=False),
        sa.Column("key", sa.String(length=64), nullable=False),
        sa.Column("value", sa.String(length=255), nullable=False, server_default=""),
        sa.UniqueConstraint("account_id", "key", name="uq_settings_account_key"),
    )
    op.create_index("ix_settings_account_id", "settings", ["account_id"])
    op.create_index("ix_settings_key", "settings", ["key"])

    op.create_table(
        "merchant_mappings",
        sa.Column("app_id", sa.String(length=255), primary_key=True),
        sa.Column("account_id", sa.Integer(), nullable=False, unique=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    op.create_table(
        "price_locks",
        sa.Column("lock_key", sa.String(length=64), primary_key=True),
        sa.Column("order_code", sa.String(length=64), nullable=False),
    )
    op.create_index("ix_price_locks_order_code", "price_locks", ["order_code"])


def downgrade() -> None:
    op.drop_index("ix_price_locks_order_code", table_name="price_locks")
    op.drop_table("price_locks")
    op.drop_table("merchant_mappings")
    op.drop_index("ix_settings_key", table_name="settings")
    op.drop_index("ix_settings_account_id", table_name="settings")
    op.drop_table("settings")
    op.drop_index("ix_pay_order_status", table_name="pay_order")
    op.drop_index("ix_pay_order_account_id", table_name="pay_order")
    op.drop_index("ix_pay_order_order_code", table_name="pay_order")
    op.drop_table("pay_order")
