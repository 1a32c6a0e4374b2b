from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from backend.app.config import settings
from backend.app.db.models.models_v1 import Product, PurchaseOrder, PurchaseOrderLine
from backend.app.schemas.line_item import LineItemCreate, LineItemUpdate
from backend.services.errors import NotFoundError
from backend.services.purchase_orders import ensure_open
from backend.services.validation import (
    ensure_unchanged,
    require_identity,
    require_new,
    require_positive,
    require_present,
)

logger = logging.getLogger(__name__)


def get_line(db: Session, line_id: int | None) -> PurchaseOrderLine:
    require_identity(line_id, "Line item")
    line = db.get(PurchaseOrderLine, line_id)
    if not line:
        raise NotFoundError("Purchase order line", "id", line_id)
    return line


def list_by_order(db: Session, order_id: int | None) -> list[PurchaseOrderLine]:
    require_identity(order_id, "Purchase order")
    stmt = select(PurchaseOrderLine).where(PurchaseOrderLine.po_id == order_id).order_by(PurchaseOrderLine.id)
    return list(db.execute(stmt).scalars().all())


def list_by_product(db: Session, product_id: int | None) -> list[PurchaseOrderLine]:
    require_identity(product_id, "Product")
    stmt = (
        select(PurchaseOrderLine)
        .where(PurchaseOrderLine.product_id == product_id)
        .order_by(PurchaseOrderLine.id)
    )
    return list(db.execute(stmt).scalars().all())


def list_expired(db: Session) -> list[PurchaseOrderLine]:
    stmt = (
        select(PurchaseOrderLine)
        .where(PurchaseOrderLine.expires_on < date.today())
        .order_by(PurchaseOrderLine.expires_on.asc())
    )
    return list(db.execute(stmt).scalars().all())


def list_expiring(db: Session, days: int) -> list[PurchaseOrderLine]:
    require_positive(days, "days")
    today = date.today()
    stmt = (
        select(PurchaseOrderLine)
        .where(PurchaseOrderLine.expires_on.between(today, today + timedelta(days=days)))
        .order_by(PurchaseOrderLine.expires_on.asc())
    )
    return list(db.execute(stmt).scalars().all())


def order_total(db: Session, order_id: int | None) -> Decimal:
    require_identity(order_id, "Purchase order")
    stmt = select(
        func.coalesce(func.sum(PurchaseOrderLine.quantity * PurchaseOrderLine.unit_price), 0)
    ).where(PurchaseOrderLine.po_id == order_id)
    return Decimal(str(db.execute(stmt).scalar_one())).quantize(Decimal("0.01"))


def _validate(quantity: int | None, unit_price: Decimal | None) -> None:
    require_positive(quantity, "Quantity")
    require_positive(unit_price, "Unit price")


def create_line(db: Session, payload: LineItemCreate) -> PurchaseOrderLine:
    require_new(payload, "Line item")
    require_identity(payload.po_id, "Purchase order")
    require_identity(payload.product_id, "Product")
    _validate(payload.quantity, payload.unit_price)

    po = db.get(PurchaseOrder, payload.po_id)
    if not po:
        raise NotFoundError("Purchase order", "id", payload.po_id)
    ensure_open(po)
    if not db.get(Product, payload.product_id):
        raise NotFoundError("Product", "id", payload.product_id)

    expires_on = payload.expires_on or date.today() + timedelta(days=settings.line_item_default_expiry_days)

    logger.info("Adding product %s x%s to order %s", payload.product_id, payload.quantity, payload.po_id)
    line = PurchaseOrderLine(
        po_id=payload.po_id,
        product_id=payload.product_id,
        quantity=payload.quantity,
        unit_price=payload.unit_price,
        expires_on=expires_on,
    )
    db.add(line)
    db.flush()
    return line


def update_line(db: Session, line_id: int | None, payload: LineItemUpdate) -> PurchaseOrderLine:
    require_present(payload, "Line item")
    line = get_line(db, line_id)
    ensure_unchanged(line.po_id, payload.po_id, "Purchase order of a line item")
    ensure_unchanged(line.product_id, payload.product_id, "Product of a line item")
    _validate(payload.quantity, payload.unit_price)

    logger.info("Updating line item %s", line_id)
    line.quantity = payload.quantity
    line.unit_price = payload.unit_price
    if payload.expires_on is not None:
        line.expires_on = payload.expires_on
    db.flush()
    return line


def delete_line(db: Session, line_id: int | None) -> None:
    line = get_line(db, line_id)
    logger.info("Removing line item %s", line_id)
    db.delete(line)
    db.flush()


def delete_by_order(db: Session, order_id: int) -> int:
    lines = list_by_order(db, order_id)
    for line in lines:
        db.delete(line)
    db.flush()
    return len(lines)
