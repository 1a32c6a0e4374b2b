from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from backend.app.db.models.models_v1 import Supplier
from backend.app.schemas.supplier import SupplierCreate, SupplierUpdate
from backend.services.errors import BusinessRuleError, NotFoundError
from backend.services.validation import require_new, require_present

logger = logging.getLogger(__name__)


def get_supplier(db: Session, supplier_id: int) -> Supplier:
    s = db.get(Supplier, supplier_id)
    if not s:
        raise NotFoundError("Supplier", "id", supplier_id)
    return s


def list_suppliers(db: Session) -> list[Supplier]:
    return list(db.execute(select(Supplier).order_by(Supplier.legal_name)).scalars().all())


def search_by_representative(db: Session, representative: str) -> list[Supplier]:
    require_present(representative, "Representative")
    stmt = (
        select(Supplier)
        .where(func.lower(Supplier.representative).contains(representative.strip().lower(), autoescape=True))
        .order_by(Supplier.representative)
    )
    return list(db.execute(stmt).scalars().all())


def _ensure_unique_name(db: Session, legal_name: str, supplier_id: int | None = None) -> None:
    stmt = select(Supplier.id).where(Supplier.legal_name == legal_name)
    if supplier_id is not None:
        stmt = stmt.where(Supplier.id != supplier_id)
    if db.execute(stmt).first():
        raise BusinessRuleError(f"A supplier named '{legal_name}' already exists")


def create_supplier(db: Session, payload: SupplierCreate) -> Supplier:
    require_new(payload, "Supplier")
    _ensure_unique_name(db, payload.legal_name)

    logger.info("Creating supplier %s", payload.legal_name)
    s = Supplier(**payload.model_dump(exclude={"id"}))
    db.add(s)
    db.flush()
    return s


def update_supplier(db: Session, supplier_id: int, payload: SupplierUpdate) -> Supplier:
    require_present(payload, "Supplier")
    s = get_supplier(db, supplier_id)
    _ensure_unique_name(db, payload.legal_name, supplier_id)

    logger.info("Updating supplier %s", supplier_id)
    for key, value in payload.model_dump().items():
        setattr(s, key, value)
    db.flush()
    return s


def delete_supplier(db: Session, supplier_id: int) -> None:
    s = get_supplier(db, supplier_id)
    logger.info("Removing supplier %s", supplier_id)
    db.delete(s)
    db.flush()
