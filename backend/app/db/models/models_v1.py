from __future__ import annotations

from datetime import datetime, date
from decimal import Decimal

from sqlalchemy import (
    String,
    Integer,
    DateTime,
    Date,
    Boolean,
    ForeignKey,
    Numeric,
    Text,
    Enum,
    UniqueConstraint,
    Index,
    CheckConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from werkzeug.security import check_password_hash, generate_password_hash

from backend.app.db.base import Base, BigIntPK
from backend.app.db.models.core_types import Role, POStatus, MovementType


# ---------- MASTER DATA ----------
class Warehouse(Base):
    __tablename__ = "warehouses"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)


class Product(Base):
    __tablename__ = "products"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(250), nullable=False)
    barcode: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    uom: Mapped[str] = mapped_column(String(32), default="unit", nullable=False)
    warehouse_id: Mapped[int | None] = mapped_column(ForeignKey("warehouses.id", ondelete="RESTRICT"))
    ideal_temperature: Mapped[Decimal | None] = mapped_column(Numeric(5, 2))

    min_stock: Mapped[int] = mapped_column(Integer, nullable=False)
    max_stock: Mapped[int] = mapped_column(Integer, nullable=False)
    reorder_point: Mapped[int] = mapped_column(Integer, nullable=False)

    warehouse: Mapped[Warehouse | None] = relationship()

    __table_args__ = (
        CheckConstraint("min_stock > 0", name="ck_product_min_pos"),
        CheckConstraint("max_stock > min_stock", name="ck_product_max_gt_min"),
        CheckConstraint(
            "reorder_point >= min_stock AND reorder_point <= max_stock",
            name="ck_product_reorder_in_range",
        ),
    )


class Supplier(Base):
    __tablename__ = "suppliers"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    legal_name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    tax_id: Mapped[str | None] = mapped_column(String(20))
    representative: Mapped[str | None] = mapped_column(String(100))
    representative_contact: Mapped[str | None] = mapped_column(String(15))
    payment_terms: Mapped[str | None] = mapped_column(String(250))


# ---------- AUTH ----------
class User(Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    login: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(100))
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    roles: Mapped[list["UserRole"]] = relationship(back_populates="user", cascade="all, delete-orphan")

    @property
    def role_names(self) -> set[str]:
        return {r.role.value for r in self.roles}

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)


class UserRole(Base):
    __tablename__ = "user_roles"
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    role: Mapped[Role] = mapped_column(Enum(Role, name="role"), primary_key=True)

    user: Mapped[User] = relationship(back_populates="roles")


class AccessGrant(Base):
    __tablename__ = "access_grants"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    role: Mapped[Role] = mapped_column(Enum(Role, name="role"), nullable=False)
    path_prefix: Mapped[str] = mapped_column(String(200), nullable=False)

    __table_args__ = (UniqueConstraint("role", "path_prefix", name="uq_access_grant_role_prefix"),)


# ---------- PROCUREMENT ----------
class PurchaseOrder(Base):
    __tablename__ = "purchase_orders"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    supplier_id: Mapped[int | None] = mapped_column(ForeignKey("suppliers.id", ondelete="RESTRICT"))
    status: Mapped[POStatus] = mapped_column(
        Enum(POStatus, name="po_status"),
        default=POStatus.pending,
        nullable=False,
        index=True,
    )
    value: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    placed_on: Mapped[date] = mapped_column(Date, nullable=False)
    expected_on: Mapped[date] = mapped_column(Date, nullable=False)
    delivered_on: Mapped[date | None] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    supplier: Mapped[Supplier | None] = relationship()

    __table_args__ = (
        CheckConstraint("value > 0", name="ck_po_value_pos"),
        CheckConstraint("expected_on >= placed_on", name="ck_po_expected_after_placed"),
    )


class PurchaseOrderLine(Base):
    __tablename__ = "purchase_order_lines"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    po_id: Mapped[int] = mapped_column(
        ForeignKey("purchase_orders.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    expires_on: Mapped[date | None] = mapped_column(Date)

    po: Mapped[PurchaseOrder] = relationship()
    product: Mapped[Product] = relationship()

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_po_line_qty_pos"),
        CheckConstraint("unit_price > 0", name="ck_po_line_unit_price_pos"),
    )

    @property
    def line_total(self) -> Decimal:
        return Decimal(self.unit_price) * self.quantity


# ---------- INVENTORY ----------
class Lot(Base):
    __tablename__ = "lots"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    po_id: Mapped[int] = mapped_column(
        ForeignKey("purchase_orders.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    expires_on: Mapped[date | None] = mapped_column(Date, index=True)
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    po: Mapped[PurchaseOrder] = relationship()

    __table_args__ = (CheckConstraint("quantity >= 0", name="ck_lot_qty_nonneg"),)

    @property
    def exhausted(self) -> bool:
        return self.quantity == 0


class StockRecord(Base):
    __tablename__ = "stock_records"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    lot_id: Mapped[int] = mapped_column(ForeignKey("lots.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    product: Mapped[Product] = relationship()
    lot: Mapped[Lot] = relationship()

    # (product_id, lot_id) uniqueness is checked by backend.services.inventory
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_stock_record_qty_nonneg"),
        Index("ix_stock_records_product_lot", "product_id", "lot_id"),
    )


# ---------- ACCOUNTING ----------
class AccountingMovement(Base):
    __tablename__ = "accounting_movements"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    po_id: Mapped[int | None] = mapped_column(ForeignKey("purchase_orders.id", ondelete="SET NULL"), index=True)
    movement_date: Mapped[date] = mapped_column(Date, nullable=False)
    movement_type: Mapped[MovementType] = mapped_column(Enum(MovementType, name="movement_type"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_value: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    total_value: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    note: Mapped[str | None] = mapped_column(String(500))

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_accounting_movement_qty_pos"),
        Index("ix_accounting_movements_date", "movement_date"),
    )


# ---------- AUDIT ----------
class AuditLog(Base):
    __tablename__ = "audit_log"
    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    actor_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    action: Mapped[str] = mapped_column(String(64), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(64), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(64), nullable=False)
    meta: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    __table_args__ = (Index("ix_audit_entity", "entity_type", "entity_id"),)
