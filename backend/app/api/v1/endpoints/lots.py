from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db
from backend.app.db.session import unit_of_work
from backend.app.schemas.envelope import ApiResponse, ok
from backend.app.schemas.lot import LotCreate, LotQuantityChange, LotRead, LotUpdate
from backend.services import lots as lot_service

router = APIRouter(prefix="/lots")


def _many(rows) -> ApiResponse[list[LotRead]]:
    return ok([LotRead.model_validate(r) for r in rows])


@router.get("", response_model_exclude_none=True)
def list_lots(db: Session = Depends(get_db)) -> ApiResponse[list[LotRead]]:
    return _many(lot_service.list_lots(db))


@router.get("/expired", response_model_exclude_none=True)
def list_expired(db: Session = Depends(get_db)) -> ApiResponse[list[LotRead]]:
    return _many(lot_service.list_expired(db))


@router.get("/expiring", response_model_exclude_none=True)
def list_expiring(days: int | None = Query(None), db: Session = Depends(get_db)) -> ApiResponse[list[LotRead]]:
    return _many(lot_service.list_expiring_soon(db, days))


@router.get("/valid", response_model_exclude_none=True)
def list_valid(db: Session = Depends(get_db)) -> ApiResponse[list[LotRead]]:
    return _many(lot_service.list_valid(db))


@router.get("/exhausted", response_model_exclude_none=True)
def list_exhausted(db: Session = Depends(get_db)) -> ApiResponse[list[LotRead]]:
    return _many(lot_service.list_exhausted(db))


@router.get("/expiry-range", response_model_exclude_none=True)
def list_by_expiry_range(start: date, end: date, db: Session = Depends(get_db)) -> ApiResponse[list[LotRead]]:
    return _many(lot_service.list_by_expiry_range(db, start, end))


@router.get("/by-expiry/{expires_on}", response_model_exclude_none=True)
def list_by_expiry(expires_on: date, db: Session = Depends(get_db)) -> ApiResponse[list[LotRead]]:
    return _many(lot_service.list_by_expiry(db, expires_on))


@router.get("/by-order/{po_id}", response_model_exclude_none=True)
def list_by_order(po_id: int, db: Session = Depends(get_db)) -> ApiResponse[list[LotRead]]:
    return _many(lot_service.list_by_order(db, po_id))


@router.get("/{lot_id}", response_model_exclude_none=True)
def get_lot(lot_id: int, db: Session = Depends(get_db)) -> ApiResponse[LotRead]:
    return ok(LotRead.model_validate(lot_service.get_lot(db, lot_id)))


@router.post("", status_code=201, response_model_exclude_none=True)
def create_lot(payload: LotCreate, db: Session = Depends(get_db)) -> ApiResponse[LotRead]:
    with unit_of_work(db):
        lot = lot_service.create_lot(db, payload)
    return ok(LotRead.model_validate(lot), "Lot created")


@router.put("/{lot_id}", response_model_exclude_none=True)
def update_lot(lot_id: int, payload: LotUpdate, db: Session = Depends(get_db)) -> ApiResponse[LotRead]:
    with unit_of_work(db):
        lot = lot_service.update_lot(db, lot_id, payload)
    return ok(LotRead.model_validate(lot), "Lot updated")


@router.post("/{lot_id}/add", response_model_exclude_none=True)
def add_quantity(lot_id: int, payload: LotQuantityChange, db: Session = Depends(get_db)) -> ApiResponse[LotRead]:
    with unit_of_work(db):
        lot = lot_service.add_quantity(db, lot_id, payload.quantity)
    return ok(LotRead.model_validate(lot))


@router.post("/{lot_id}/remove", response_model_exclude_none=True)
def remove_quantity(lot_id: int, payload: LotQuantityChange, db: Session = Depends(get_db)) -> ApiResponse[LotRead]:
    with unit_of_work(db):
        lot = lot_service.remove_quantity(db, lot_id, payload.quantity)
    return ok(LotRead.model_validate(lot))


@router.delete("/{lot_id}", response_model_exclude_none=True)
def delete_lot(lot_id: int, db: Session = Depends(get_db)) -> ApiResponse[None]:
    with unit_of_work(db):
        lot_service.delete_lot(db, lot_id)
    return ok(message="Lot removed")
