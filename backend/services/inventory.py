from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from backend.app.db.models.models_v1 import Lot, Product, StockRecord
from backend.app.schemas.stock_record import StockRecordCreate
from backend.services.errors import BusinessRuleError, NotFoundError
from backend.services.pagination import Page, paginate
from backend.services.validation import require_identity, require_new, require_non_negative, require_positive

logger = logging.getLogger(__name__)


def get_record(db: Session, record_id: int | None) -> StockRecord:
    require_identity(record_id, "Stock record")
    sr = db.get(StockRecord, record_id)
    if not sr:
        raise NotFoundError("Stock record", "id", record_id)
    return sr


def list_records(db: Session, page: int = 0, size: int | None = None) -> Page[StockRecord]:
    return paginate(db, select(StockRecord).order_by(StockRecord.id), page, size)


def list_by_product(db: Session, product_id: int | None) -> list[StockRecord]:
    require_identity(product_id, "Product")
    stmt = (
        select(StockRecord)
        .where(StockRecord.product_id == product_id)
        .order_by(StockRecord.quantity.desc())
    )
    return list(db.execute(stmt).scalars().all())


def list_by_lot(db: Session, lot_id: int | None) -> list[StockRecord]:
    require_identity(lot_id, "Lot")
    stmt = select(StockRecord).where(StockRecord.lot_id == lot_id).order_by(StockRecord.quantity.desc())
    return list(db.execute(stmt).scalars().all())


def total_for_product(db: Session, product_id: int | None) -> int:
    require_identity(product_id, "Product")
    stmt = select(func.coalesce(func.sum(StockRecord.quantity), 0)).where(StockRecord.product_id == product_id)
    return int(db.execute(stmt).scalar_one())


def _find_record(db: Session, product_id: int, lot_id: int, *, for_update: bool = False) -> StockRecord | None:
    stmt = (
        select(StockRecord)
        .where(StockRecord.product_id == product_id)
        .where(StockRecord.lot_id == lot_id)
        .order_by(StockRecord.id)
    )
    if for_update:
        stmt = stmt.with_for_update()
    return db.execute(stmt).scalars().first()


def _check_references(db: Session, product_id: int, lot_id: int) -> None:
    if not db.get(Product, product_id):
        raise NotFoundError("Product", "id", product_id)
    if not db.get(Lot, lot_id):
        raise NotFoundError("Lot", "id", lot_id)


def create_record(db: Session, payload: StockRecordCreate) -> StockRecord:
    require_new(payload, "Stock record")
    require_identity(payload.product_id, "Product")
    require_identity(payload.lot_id, "Lot")
    require_non_negative(payload.quantity, "Quantity")
    _check_references(db, payload.product_id, payload.lot_id)

    if _find_record(db, payload.product_id, payload.lot_id):
        raise BusinessRuleError(
            f"A stock record already exists for product {payload.product_id} and lot {payload.lot_id}"
        )

    logger.info("Creating stock record product=%s lot=%s", payload.product_id, payload.lot_id)
    sr = StockRecord(product_id=payload.product_id, lot_id=payload.lot_id, quantity=payload.quantity)
    db.add(sr)
    db.flush()
    return sr


def _get_or_create_record(db: Session, product_id: int, lot_id: int) -> StockRecord:
    sr = _find_record(db, product_id, lot_id, for_update=True)
    if sr:
        return sr

    _check_references(db, product_id, lot_id)
    sr = StockRecord(product_id=product_id, lot_id=lot_id, quantity=0)
    db.add(sr)
    db.flush()
    return sr


def add_stock(db: Session, product_id: int, lot_id: int, quantity: int) -> StockRecord:
    """Record an inbound quantity, creating the (product, lot) record at zero if needed."""
    logger.info("Stock entry product=%s lot=%s quantity=%s", product_id, lot_id, quantity)
    require_positive(quantity, "Quantity")

    sr = _get_or_create_record(db, product_id, lot_id)
    sr.quantity += quantity
    db.flush()

    logger.info("Stock entry recorded, new quantity %s", sr.quantity)
    return sr


def remove_stock(db: Session, product_id: int, lot_id: int, quantity: int) -> StockRecord:
    logger.info("Stock withdrawal product=%s lot=%s quantity=%s", product_id, lot_id, quantity)
    require_positive(quantity, "Quantity")

    sr = _find_record(db, product_id, lot_id, for_update=True)
    if not sr:
        raise NotFoundError("No stock record for the given product/lot")

    if sr.quantity < quantity:
        raise BusinessRuleError(f"Insufficient stock. Available: {sr.quantity}, requested: {quantity}")

    sr.quantity -= quantity
    db.flush()

    logger.info("Stock withdrawal recorded, new quantity %s", sr.quantity)
    return sr


def set_quantity(db: Session, record_id: int | None, quantity: int | None) -> StockRecord:
    """Overwrite the counter (inventory count correction)."""
    require_non_negative(quantity, "Quantity")
    sr = get_record(db, record_id)
    logger.info("Setting stock record %s quantity to %s", record_id, quantity)
    sr.quantity = quantity
    db.flush()
    return sr


def delete_record(db: Session, record_id: int | None) -> None:
    sr = get_record(db, record_id)
    if sr.quantity > 0:
        raise BusinessRuleError(f"Cannot delete stock record #{sr.id} with quantity {sr.quantity}")

    logger.info("Removing stock record %s", record_id)
    db.delete(sr)
    db.flush()
