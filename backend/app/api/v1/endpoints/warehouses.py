from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db
from backend.app.db.session import unit_of_work
from backend.app.schemas.envelope import ApiResponse, ok
from backend.app.schemas.warehouse import WarehouseCreate, WarehouseRead
from backend.services import warehouses as warehouse_service

router = APIRouter(prefix="/warehouses")


@router.get("", response_model_exclude_none=True)
def list_warehouses(db: Session = Depends(get_db)) -> ApiResponse[list[WarehouseRead]]:
    return ok([WarehouseRead.model_validate(w) for w in warehouse_service.list_warehouses(db)])


@router.post("", status_code=201, response_model_exclude_none=True)
def create_warehouse(payload: WarehouseCreate, db: Session = Depends(get_db)) -> ApiResponse[WarehouseRead]:
    with unit_of_work(db):
        w = warehouse_service.create_warehouse(db, payload)
    return ok(WarehouseRead.model_validate(w), "Warehouse created")
