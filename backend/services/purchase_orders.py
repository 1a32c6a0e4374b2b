"""
Purchase order CRUD and queries.

Status changes and deletion of an order together with its dependents live in
backend.services.procurement; this module only handles the order row itself.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from backend.app.db.models.core_types import POStatus
from backend.app.db.models.models_v1 import PurchaseOrder, Supplier
from backend.app.schemas.purchase_order import PurchaseOrderCreate, PurchaseOrderUpdate
from backend.services.errors import BusinessRuleError, NotFoundError
from backend.services.pagination import Page, paginate
from backend.services.validation import require_new, require_positive, require_present, require_range

logger = logging.getLogger(__name__)

CLOSED_STATUSES = {POStatus.completed, POStatus.cancelled}


def get_order(db: Session, order_id: int) -> PurchaseOrder:
    logger.debug("Fetching purchase order %s", order_id)
    po = db.get(PurchaseOrder, order_id)
    if not po:
        raise NotFoundError("Purchase order", "id", order_id)
    return po


def list_orders(db: Session, page: int = 0, size: int | None = None) -> Page[PurchaseOrder]:
    return paginate(db, select(PurchaseOrder).order_by(PurchaseOrder.id.desc()), page, size)


def list_by_status(db: Session, status: POStatus) -> list[PurchaseOrder]:
    stmt = select(PurchaseOrder).where(PurchaseOrder.status == status).order_by(PurchaseOrder.placed_on.desc())
    return list(db.execute(stmt).scalars().all())


def list_by_value_range(db: Session, minimum: Decimal, maximum: Decimal) -> list[PurchaseOrder]:
    require_range(minimum, maximum, "value")
    stmt = (
        select(PurchaseOrder)
        .where(PurchaseOrder.value.between(minimum, maximum))
        .order_by(PurchaseOrder.value.desc())
    )
    return list(db.execute(stmt).scalars().all())


def list_placed_between(db: Session, start: date, end: date) -> list[PurchaseOrder]:
    require_range(start, end, "placed date")
    stmt = (
        select(PurchaseOrder)
        .where(PurchaseOrder.placed_on.between(start, end))
        .order_by(PurchaseOrder.placed_on.desc())
    )
    return list(db.execute(stmt).scalars().all())


def list_expected_on(db: Session, expected_on: date) -> list[PurchaseOrder]:
    require_present(expected_on, "expected date")
    stmt = (
        select(PurchaseOrder)
        .where(PurchaseOrder.expected_on == expected_on)
        .order_by(PurchaseOrder.placed_on.desc())
    )
    return list(db.execute(stmt).scalars().all())


def list_overdue(db: Session, today: date | None = None) -> list[PurchaseOrder]:
    """Orders whose expected date has passed and that are still open."""
    today = today or date.today()
    stmt = (
        select(PurchaseOrder)
        .where(PurchaseOrder.expected_on < today)
        .where(PurchaseOrder.status.not_in(CLOSED_STATUSES))
        .order_by(PurchaseOrder.expected_on.asc())
    )
    return list(db.execute(stmt).scalars().all())


def count_by_status(db: Session, status: POStatus) -> int:
    stmt = select(func.count()).select_from(PurchaseOrder).where(PurchaseOrder.status == status)
    return int(db.execute(stmt).scalar_one())


def _validate_dates_and_value(value: Decimal | None, placed_on: date, expected_on: date | None) -> None:
    require_positive(value, "Order value")
    require_present(expected_on, "Expected date")
    if placed_on > date.today():
        raise BusinessRuleError("Placed date cannot be in the future")
    if expected_on < placed_on:
        raise BusinessRuleError("Expected date cannot be earlier than the placed date")


def _check_supplier(db: Session, supplier_id: int | None) -> None:
    if supplier_id is not None and not db.get(Supplier, supplier_id):
        raise NotFoundError("Supplier", "id", supplier_id)


def create_order(db: Session, payload: PurchaseOrderCreate) -> PurchaseOrder:
    require_new(payload, "Purchase order")
    placed_on = payload.placed_on or date.today()
    _validate_dates_and_value(payload.value, placed_on, payload.expected_on)
    _check_supplier(db, payload.supplier_id)

    logger.info("Creating purchase order (value=%s, expected=%s)", payload.value, payload.expected_on)
    po = PurchaseOrder(
        supplier_id=payload.supplier_id,
        status=POStatus.pending,
        value=payload.value,
        placed_on=placed_on,
        expected_on=payload.expected_on,
    )
    db.add(po)
    db.flush()
    logger.info("Purchase order %s created", po.id)
    return po


def ensure_open(po: PurchaseOrder) -> None:
    """Completed and cancelled orders accept no further edits."""
    if po.status == POStatus.completed:
        raise BusinessRuleError("Completed orders cannot be modified")
    if po.status == POStatus.cancelled:
        raise BusinessRuleError("Cancelled orders cannot be modified")


def update_order(db: Session, order_id: int, payload: PurchaseOrderUpdate) -> PurchaseOrder:
    require_present(payload, "Purchase order")
    po = get_order(db, order_id)
    ensure_open(po)

    placed_on = payload.placed_on or po.placed_on
    _validate_dates_and_value(payload.value, placed_on, payload.expected_on)
    _check_supplier(db, payload.supplier_id)

    logger.info("Updating purchase order %s", order_id)
    po.supplier_id = payload.supplier_id
    po.value = payload.value
    po.placed_on = placed_on
    po.expected_on = payload.expected_on
    db.flush()
    return po


def delete_order(db: Session, order_id: int) -> None:
    """
    Delete a bare order. Only pending orders qualify; line items or lots still
    pointing at it make the database refuse the delete.
    """
    po = get_order(db, order_id)
    if po.status != POStatus.pending:
        raise BusinessRuleError("Only pending orders can be removed")

    logger.info("Removing purchase order %s", order_id)
    db.delete(po)
    db.flush()
