"""initial schema

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3f1c2a9d7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# enum labels are the Python member names (SQLAlchemy's default for Enum columns)
ROLE = postgresql.ENUM("admin", "purchasing", "stock_movement", "warehouse_validation", name="role", create_type=False)
PO_STATUS = postgresql.ENUM("pending", "in_progress", "completed", "cancelled", name="po_status", create_type=False)
MOVEMENT_TYPE = postgresql.ENUM("inbound", "outbound", name="movement_type", create_type=False)


def upgrade() -> None:
    bind = op.get_bind()
    for enum_type in (ROLE, PO_STATUS, MOVEMENT_TYPE):
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        "warehouses",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
    )

    op.create_table(
        "products",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("description", sa.String(250), nullable=False),
        sa.Column("barcode", sa.String(50), nullable=False, unique=True),
        sa.Column("uom", sa.String(32), nullable=False, server_default="unit"),
        sa.Column("warehouse_id", sa.BigInteger(), sa.ForeignKey("warehouses.id", ondelete="RESTRICT")),
        sa.Column("ideal_temperature", sa.Numeric(5, 2)),
        sa.Column("min_stock", sa.Integer(), nullable=False),
        sa.Column("max_stock", sa.Integer(), nullable=False),
        sa.Column("reorder_point", sa.Integer(), nullable=False),
        sa.CheckConstraint("min_stock > 0", name="ck_product_min_pos"),
        sa.CheckConstraint("max_stock > min_stock", name="ck_product_max_gt_min"),
        sa.CheckConstraint(
            "reorder_point >= min_stock AND reorder_point <= max_stock",
            name="ck_product_reorder_in_range",
        ),
    )
    op.create_index("ix_products_name", "products", ["name"])

    op.create_table(
        "suppliers",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("legal_name", sa.String(255), nullable=False, unique=True),
        sa.Column("tax_id", sa.String(20)),
        sa.Column("representative", sa.String(100)),
        sa.Column("representative_contact", sa.String(15)),
        sa.Column("payment_terms", sa.String(250)),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("login", sa.String(50), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(100)),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "user_roles",
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("role", ROLE, primary_key=True),
    )

    op.create_table(
        "access_grants",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("role", ROLE, nullable=False),
        sa.Column("path_prefix", sa.String(200), nullable=False),
        sa.UniqueConstraint("role", "path_prefix", name="uq_access_grant_role_prefix"),
    )

    op.create_table(
        "purchase_orders",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("supplier_id", sa.BigInteger(), sa.ForeignKey("suppliers.id", ondelete="RESTRICT")),
        sa.Column("status", PO_STATUS, nullable=False, server_default="pending"),
        sa.Column("value", sa.Numeric(12, 2), nullable=False),
        sa.Column("placed_on", sa.Date(), nullable=False),
        sa.Column("expected_on", sa.Date(), nullable=False),
        sa.Column("delivered_on", sa.Date()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("value > 0", name="ck_po_value_pos"),
        sa.CheckConstraint("expected_on >= placed_on", name="ck_po_expected_after_placed"),
    )
    op.create_index("ix_purchase_orders_status", "purchase_orders", ["status"])

    op.create_table(
        "purchase_order_lines",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column(
            "po_id",
            sa.BigInteger(),
            sa.ForeignKey("purchase_orders.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("product_id", sa.BigInteger(), sa.ForeignKey("products.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("expires_on", sa.Date()),
        sa.CheckConstraint("quantity > 0", name="ck_po_line_qty_pos"),
        sa.CheckConstraint("unit_price > 0", name="ck_po_line_unit_price_pos"),
    )
    op.create_index("ix_purchase_order_lines_po_id", "purchase_order_lines", ["po_id"])
    op.create_index("ix_purchase_order_lines_product_id", "purchase_order_lines", ["product_id"])

    op.create_table(
        "lots",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column(
            "po_id",
            sa.BigInteger(),
            sa.ForeignKey("purchase_orders.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("expires_on", sa.Date()),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.CheckConstraint("quantity >= 0", name="ck_lot_qty_nonneg"),
    )
    op.create_index("ix_lots_po_id", "lots", ["po_id"])
    op.create_index("ix_lots_expires_on", "lots", ["expires_on"])

    op.create_table(
        "stock_records",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("product_id", sa.BigInteger(), sa.ForeignKey("products.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("lot_id", sa.BigInteger(), sa.ForeignKey("lots.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("quantity >= 0", name="ck_stock_record_qty_nonneg"),
    )
    op.create_index("ix_stock_records_lot_id", "stock_records", ["lot_id"])
    op.create_index("ix_stock_records_product_lot", "stock_records", ["product_id", "lot_id"])

    op.create_table(
        "accounting_movements",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("product_id", sa.BigInteger(), sa.ForeignKey("products.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("po_id", sa.BigInteger(), sa.ForeignKey("purchase_orders.id", ondelete="SET NULL")),
        sa.Column("movement_date", sa.Date(), nullable=False),
        sa.Column("movement_type", MOVEMENT_TYPE, nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_value", sa.Numeric(10, 2)),
        sa.Column("total_value", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("note", sa.String(500)),
        sa.CheckConstraint("quantity > 0", name="ck_accounting_movement_qty_pos"),
    )
    op.create_index("ix_accounting_movements_product_id", "accounting_movements", ["product_id"])
    op.create_index("ix_accounting_movements_po_id", "accounting_movements", ["po_id"])
    op.create_index("ix_accounting_movements_date", "accounting_movements", ["movement_date"])

    op.create_table(
        "audit_log",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("actor_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("action", sa.String(64), nullable=False),
        sa.Column("entity_type", sa.String(64), nullable=False),
        sa.Column("entity_id", sa.String(64), nullable=False),
        sa.Column("meta", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_audit_entity", "audit_log", ["entity_type", "entity_id"])


def downgrade() -> None:
    for table in (
        "audit_log",
        "accounting_movements",
        "stock_records",
        "lots",
        "purchase_order_lines",
        "purchase_orders",
        "access_grants",
        "user_roles",
        "users",
        "suppliers",
        "products",
        "warehouses",
    ):
        op.drop_table(table)

    bind = op.get_bind()
    for enum_type in (MOVEMENT_TYPE, PO_STATUS, ROLE):
        enum_type.drop(bind, checkfirst=True)
