from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from backend.app.db.models.models_v1 import AccountingMovement, Product, PurchaseOrder
from backend.app.schemas.accounting import AccountingMovementCreate, AccountingMovementUpdate
from backend.services.errors import NotFoundError
from backend.services.validation import (
    require_identity,
    require_new,
    require_non_negative,
    require_positive,
    require_present,
    require_range,
)

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def get_movement(db: Session, movement_id: int) -> AccountingMovement:
    m = db.get(AccountingMovement, movement_id)
    if not m:
        raise NotFoundError("Accounting movement", "id", movement_id)
    return m


def list_movements(db: Session) -> list[AccountingMovement]:
    stmt = select(AccountingMovement).order_by(AccountingMovement.movement_date.desc(), AccountingMovement.id.desc())
    return list(db.execute(stmt).scalars().all())


def list_by_product(db: Session, product_id: int) -> list[AccountingMovement]:
    stmt = (
        select(AccountingMovement)
        .where(AccountingMovement.product_id == product_id)
        .order_by(AccountingMovement.movement_date.desc())
    )
    return list(db.execute(stmt).scalars().all())


def list_by_order(db: Session, order_id: int) -> list[AccountingMovement]:
    stmt = (
        select(AccountingMovement)
        .where(AccountingMovement.po_id == order_id)
        .order_by(AccountingMovement.movement_date.desc())
    )
    return list(db.execute(stmt).scalars().all())


def list_by_date(db: Session, movement_date: date) -> list[AccountingMovement]:
    require_present(movement_date, "Movement date")
    stmt = (
        select(AccountingMovement)
        .where(AccountingMovement.movement_date == movement_date)
        .order_by(AccountingMovement.id)
    )
    return list(db.execute(stmt).scalars().all())


def list_by_period(db: Session, start: date, end: date) -> list[AccountingMovement]:
    require_range(start, end, "period")
    stmt = (
        select(AccountingMovement)
        .where(AccountingMovement.movement_date.between(start, end))
        .order_by(AccountingMovement.movement_date.asc(), AccountingMovement.id.asc())
    )
    return list(db.execute(stmt).scalars().all())


def sum_period(db: Session, start: date, end: date) -> Decimal:
    require_range(start, end, "period")
    stmt = select(func.coalesce(func.sum(AccountingMovement.total_value), 0)).where(
        AccountingMovement.movement_date.between(start, end)
    )
    return Decimal(str(db.execute(stmt).scalar_one())).quantize(CENT)


def _total(unit_value: Decimal | None, quantity: int) -> Decimal:
    if unit_value is None:
        return Decimal("0.00")
    return (Decimal(unit_value) * quantity).quantize(CENT)


def _validate(db: Session, payload: AccountingMovementCreate | AccountingMovementUpdate) -> None:
    require_identity(payload.product_id, "Product")
    require_positive(payload.quantity, "Quantity")
    if payload.unit_value is not None:
        require_non_negative(payload.unit_value, "Unit value")
    if not db.get(Product, payload.product_id):
        raise NotFoundError("Product", "id", payload.product_id)
    if payload.po_id is not None and not db.get(PurchaseOrder, payload.po_id):
        raise NotFoundError("Purchase order", "id", payload.po_id)


def create_movement(db: Session, payload: AccountingMovementCreate) -> AccountingMovement:
    require_new(payload, "Accounting movement")
    _validate(db, payload)

    m = AccountingMovement(
        product_id=payload.product_id,
        po_id=payload.po_id,
        movement_date=payload.movement_date or date.today(),
        movement_type=payload.movement_type,
        quantity=payload.quantity,
        unit_value=payload.unit_value,
        total_value=_total(payload.unit_value, payload.quantity),
        note=payload.note,
    )
    logger.info(
        "Creating %s accounting movement for product %s (total=%s)",
        m.movement_type.value,
        m.product_id,
        m.total_value,
    )
    db.add(m)
    db.flush()
    return m


def update_movement(db: Session, movement_id: int, payload: AccountingMovementUpdate) -> AccountingMovement:
    require_present(payload, "Accounting movement")
    m = get_movement(db, movement_id)
    _validate(db, payload)

    logger.info("Updating accounting movement %s", movement_id)
    m.product_id = payload.product_id
    m.po_id = payload.po_id
    m.movement_date = payload.movement_date or m.movement_date
    m.movement_type = payload.movement_type
    m.quantity = payload.quantity
    m.unit_value = payload.unit_value
    m.total_value = _total(payload.unit_value, payload.quantity)
    m.note = payload.note
    db.flush()
    return m


def delete_movement(db: Session, movement_id: int) -> None:
    m = get_movement(db, movement_id)
    logger.info("Removing accounting movement %s", movement_id)
    db.delete(m)
    db.flush()
