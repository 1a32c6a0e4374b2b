from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.db.models.models_v1 import Warehouse
from backend.app.schemas.warehouse import WarehouseCreate
from backend.services.errors import BusinessRuleError, NotFoundError

logger = logging.getLogger(__name__)


def get_warehouse(db: Session, warehouse_id: int) -> Warehouse:
    w = db.get(Warehouse, warehouse_id)
    if not w:
        raise NotFoundError("Warehouse", "id", warehouse_id)
    return w


def list_warehouses(db: Session) -> list[Warehouse]:
    return list(db.execute(select(Warehouse).order_by(Warehouse.name)).scalars().all())


def create_warehouse(db: Session, payload: WarehouseCreate) -> Warehouse:
    name = payload.name.strip()
    if db.execute(select(Warehouse.id).where(Warehouse.name == name)).first():
        raise BusinessRuleError(f"Warehouse '{name}' already exists")

    logger.info("Creating warehouse %s", name)
    w = Warehouse(name=name)
    db.add(w)
    db.flush()
    return w
