"""create orders and order counters

Revision ID: 202610011000
Revises: 202610010900
Create Date: 2026-10-01 10:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "202610011000"
down_revision = "202610010900"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "orders",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("restaurant_id", sa.String(length=128), nullable=False),
        sa.Column("order_number", sa.Integer(), nullable=False),
        sa.Column("order_day", sa.String(length=10), nullable=False),
        sa.Column("customer_identifier", sa.String(length=120), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("total_cents", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.ForeignKeyConstraint(["restaurant_id"], ["restaurants.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "restaurant_id",
            "order_day",
            "order_number",
            name="uq_orders_restaurant_day_number",
        ),
    )
    op.create_index(
        "ix_orders_restaurant_status_created_at",
        "orders",
        ["restaurant_id", "status", "created_at"],
        unique=False,
    )

    op.create_table(
        "order_items",
        sa.Column("order_id", sa.String(length=50), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("item_id", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price_cents", sa.Integer(), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("line_total_cents", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("order_id", "position"),
    )

    op.create_table(
        "order_counters",
        sa.Column("id", sa.String(length=150), nullable=False),
        sa.Column("restaurant_id", sa.String(length=128), nullable=False),
        sa.Column("day", sa.String(length=10), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_order_counters_restaurant_id",
        "order_counters",
        ["restaurant_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_order_counters_restaurant_id", table_name="order_counters")
    op.drop_table("order_counters")
    op.drop_table("order_items")
    op.drop_index("ix_orders_restaurant_status_created_at", table_name="orders")
    op.drop_table("orders")
