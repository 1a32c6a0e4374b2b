"""
Lot store.

A lot is a received batch tied to one purchase order, with its own expiry
date and remaining quantity. `Lot.quantity` is kept here and is independent
of the per-product StockRecord counters handled in backend.services.inventory.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from backend.app.config import settings
from backend.app.db.models.models_v1 import Lot, PurchaseOrder
from backend.app.schemas.lot import LotCreate, LotUpdate
from backend.services.errors import BusinessRuleError, InvalidArgumentError, NotFoundError
from backend.services.validation import (
    ensure_unchanged,
    require_identity,
    require_new,
    require_non_negative,
    require_positive,
    require_present,
    require_range,
)

logger = logging.getLogger(__name__)


def get_lot(db: Session, lot_id: int | None, *, for_update: bool = False) -> Lot:
    require_identity(lot_id, "Lot")
    stmt = select(Lot).where(Lot.id == lot_id)
    if for_update:
        stmt = stmt.with_for_update()
    lot = db.execute(stmt).scalar_one_or_none()
    if not lot:
        raise NotFoundError("Lot", "id", lot_id)
    return lot


def list_lots(db: Session) -> list[Lot]:
    return list(db.execute(select(Lot).order_by(Lot.id)).scalars().all())


def list_by_order(db: Session, order_id: int | None) -> list[Lot]:
    require_identity(order_id, "Purchase order")
    stmt = select(Lot).where(Lot.po_id == order_id).order_by(Lot.expires_on.asc(), Lot.id.asc())
    return list(db.execute(stmt).scalars().all())


def list_by_expiry(db: Session, expires_on: date | None) -> list[Lot]:
    require_present(expires_on, "Expiry date")
    return list(db.execute(select(Lot).where(Lot.expires_on == expires_on).order_by(Lot.id)).scalars().all())


def list_by_expiry_range(db: Session, start: date | None, end: date | None) -> list[Lot]:
    require_range(start, end, "expiry date")
    stmt = select(Lot).where(Lot.expires_on.between(start, end)).order_by(Lot.expires_on.asc())
    return list(db.execute(stmt).scalars().all())


def list_expired(db: Session) -> list[Lot]:
    stmt = select(Lot).where(Lot.expires_on < date.today()).order_by(Lot.expires_on.asc())
    return list(db.execute(stmt).scalars().all())


def list_expiring_soon(db: Session, days: int | None = None) -> list[Lot]:
    days = settings.expiry_warning_days if days is None else days
    require_positive(days, "days")
    today = date.today()
    return list_by_expiry_range(db, today, today + timedelta(days=days))


def list_valid(db: Session) -> list[Lot]:
    """Lots that have not expired yet (including lots without an expiry date)."""
    stmt = (
        select(Lot)
        .where((Lot.expires_on.is_(None)) | (Lot.expires_on >= date.today()))
        .order_by(Lot.expires_on.asc())
    )
    return list(db.execute(stmt).scalars().all())


def list_by_quantity(db: Session, quantity: int | None) -> list[Lot]:
    require_non_negative(quantity, "Quantity")
    return list(db.execute(select(Lot).where(Lot.quantity == quantity).order_by(Lot.id)).scalars().all())


def list_by_quantity_range(db: Session, minimum: int | None, maximum: int | None) -> list[Lot]:
    require_non_negative(minimum, "Minimum quantity")
    require_non_negative(maximum, "Maximum quantity")
    require_range(minimum, maximum, "quantity")
    stmt = select(Lot).where(Lot.quantity.between(minimum, maximum)).order_by(Lot.quantity.asc())
    return list(db.execute(stmt).scalars().all())


def list_low_quantity(db: Session, threshold: int | None) -> list[Lot]:
    require_positive(threshold, "Threshold")
    stmt = select(Lot).where(Lot.quantity < threshold).order_by(Lot.quantity.asc())
    return list(db.execute(stmt).scalars().all())


def list_exhausted(db: Session) -> list[Lot]:
    return list_by_quantity(db, 0)


def count_by_order(db: Session, order_id: int | None) -> int:
    require_identity(order_id, "Purchase order")
    stmt = select(func.count()).select_from(Lot).where(Lot.po_id == order_id)
    return int(db.execute(stmt).scalar_one())


def sum_quantity_by_order(db: Session, order_id: int | None) -> int:
    require_identity(order_id, "Purchase order")
    stmt = select(func.coalesce(func.sum(Lot.quantity), 0)).where(Lot.po_id == order_id)
    return int(db.execute(stmt).scalar_one())


def is_expired(lot: Lot, today: date | None = None) -> bool:
    require_present(lot, "Lot")
    today = today or date.today()
    return lot.expires_on is not None and lot.expires_on < today


def is_expiring_soon(lot: Lot, today: date | None = None, days: int | None = None) -> bool:
    require_present(lot, "Lot")
    if lot.expires_on is None:
        return False
    today = today or date.today()
    days = settings.expiry_warning_days if days is None else days
    return today <= lot.expires_on < today + timedelta(days=days)


def _validate(quantity: int | None, expires_on: date | None) -> None:
    require_non_negative(quantity, "Quantity")
    if expires_on is not None and expires_on < date.today():
        raise InvalidArgumentError("Expiry date must not be in the past")


def create_lot(db: Session, payload: LotCreate) -> Lot:
    require_new(payload, "Lot")
    require_identity(payload.po_id, "Purchase order")
    _validate(payload.quantity, payload.expires_on)
    if not db.get(PurchaseOrder, payload.po_id):
        raise NotFoundError("Purchase order", "id", payload.po_id)

    logger.info("Creating lot for order %s (quantity=%s)", payload.po_id, payload.quantity)
    lot = Lot(po_id=payload.po_id, expires_on=payload.expires_on, quantity=payload.quantity)
    db.add(lot)
    db.flush()
    return lot


def update_lot(db: Session, lot_id: int | None, payload: LotUpdate) -> Lot:
    require_present(payload, "Lot")
    lot = get_lot(db, lot_id)
    ensure_unchanged(lot.po_id, payload.po_id, "Purchase order of a lot")
    _validate(payload.quantity, payload.expires_on)

    logger.info("Updating lot %s", lot_id)
    lot.expires_on = payload.expires_on
    lot.quantity = payload.quantity
    db.flush()
    return lot


def delete_lot(db: Session, lot_id: int | None) -> None:
    lot = get_lot(db, lot_id)
    if lot.quantity > 0:
        raise BusinessRuleError(f"Cannot delete lot #{lot.id} with remaining quantity ({lot.quantity})")

    logger.info("Removing lot %s", lot_id)
    db.delete(lot)
    db.flush()


def add_quantity(db: Session, lot_id: int | None, quantity: int | None) -> Lot:
    require_positive(quantity, "Quantity")
    lot = get_lot(db, lot_id, for_update=True)
    logger.info("Adding %s to lot %s (was %s)", quantity, lot_id, lot.quantity)
    lot.quantity += quantity
    db.flush()
    return lot


def remove_quantity(db: Session, lot_id: int | None, quantity: int | None) -> Lot:
    require_positive(quantity, "Quantity")
    lot = get_lot(db, lot_id, for_update=True)
    if lot.quantity < quantity:
        raise BusinessRuleError(
            f"Insufficient quantity in lot #{lot.id}. Available: {lot.quantity}, requested: {quantity}"
        )
    logger.info("Removing %s from lot %s (was %s)", quantity, lot_id, lot.quantity)
    lot.quantity -= quantity
    db.flush()
    return lot
