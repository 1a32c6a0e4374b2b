from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db
from backend.app.db.session import unit_of_work
from backend.app.schemas.envelope import ApiResponse, ok, ok_page
from backend.app.schemas.stock_record import (
    StockMovementRequest,
    StockQuantityUpdate,
    StockRecordCreate,
    StockRecordRead,
)
from backend.services import inventory

router = APIRouter(prefix="/stock")


@router.get("", response_model_exclude_none=True)
def list_stock(
    page: int = Query(0, ge=0),
    size: int | None = Query(None, ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[list[StockRecordRead]]:
    return ok_page(inventory.list_records(db, page, size), StockRecordRead)


@router.get("/by-product/{product_id}", response_model_exclude_none=True)
def list_by_product(product_id: int, db: Session = Depends(get_db)) -> ApiResponse[list[StockRecordRead]]:
    rows = inventory.list_by_product(db, product_id)
    total = inventory.total_for_product(db, product_id)
    return ok([StockRecordRead.model_validate(r) for r in rows], f"Total quantity: {total}")


@router.get("/by-lot/{lot_id}", response_model_exclude_none=True)
def list_by_lot(lot_id: int, db: Session = Depends(get_db)) -> ApiResponse[list[StockRecordRead]]:
    return ok([StockRecordRead.model_validate(r) for r in inventory.list_by_lot(db, lot_id)])


@router.get("/{record_id}", response_model_exclude_none=True)
def get_stock_record(record_id: int, db: Session = Depends(get_db)) -> ApiResponse[StockRecordRead]:
    return ok(StockRecordRead.model_validate(inventory.get_record(db, record_id)))


@router.post("", status_code=201, response_model_exclude_none=True)
def create_stock_record(payload: StockRecordCreate, db: Session = Depends(get_db)) -> ApiResponse[StockRecordRead]:
    with unit_of_work(db):
        sr = inventory.create_record(db, payload)
    return ok(StockRecordRead.model_validate(sr), "Stock record created")


@router.post("/entries", response_model_exclude_none=True)
def stock_entry(payload: StockMovementRequest, db: Session = Depends(get_db)) -> ApiResponse[StockRecordRead]:
    with unit_of_work(db):
        sr = inventory.add_stock(db, payload.product_id, payload.lot_id, payload.quantity)
    return ok(StockRecordRead.model_validate(sr), "Stock entry recorded")


@router.post("/withdrawals", response_model_exclude_none=True)
def stock_withdrawal(payload: StockMovementRequest, db: Session = Depends(get_db)) -> ApiResponse[StockRecordRead]:
    with unit_of_work(db):
        sr = inventory.remove_stock(db, payload.product_id, payload.lot_id, payload.quantity)
    return ok(StockRecordRead.model_validate(sr), "Stock withdrawal recorded")


@router.patch("/{record_id}/quantity", response_model_exclude_none=True)
def set_quantity(
    record_id: int,
    payload: StockQuantityUpdate,
    db: Session = Depends(get_db),
) -> ApiResponse[StockRecordRead]:
    with unit_of_work(db):
        sr = inventory.set_quantity(db, record_id, payload.quantity)
    return ok(StockRecordRead.model_validate(sr), "Quantity updated")


@router.delete("/{record_id}", response_model_exclude_none=True)
def delete_stock_record(record_id: int, db: Session = Depends(get_db)) -> ApiResponse[None]:
    with unit_of_work(db):
        inventory.delete_record(db, record_id)
    return ok(message="Stock record removed")
