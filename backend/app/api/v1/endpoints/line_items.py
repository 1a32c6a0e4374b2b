from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db
from backend.app.db.session import unit_of_work
from backend.app.schemas.envelope import ApiResponse, ok
from backend.app.schemas.line_item import LineItemCreate, LineItemRead, LineItemUpdate
from backend.services import line_items as line_service

router = APIRouter(prefix="/line-items")


def _many(rows) -> ApiResponse[list[LineItemRead]]:
    return ok([LineItemRead.model_validate(r) for r in rows])


@router.get("/expired", response_model_exclude_none=True)
def list_expired(db: Session = Depends(get_db)) -> ApiResponse[list[LineItemRead]]:
    return _many(line_service.list_expired(db))


@router.get("/expiring", response_model_exclude_none=True)
def list_expiring(days: int = Query(30), db: Session = Depends(get_db)) -> ApiResponse[list[LineItemRead]]:
    return _many(line_service.list_expiring(db, days))


@router.get("/by-order/{po_id}", response_model_exclude_none=True)
def list_by_order(po_id: int, db: Session = Depends(get_db)) -> ApiResponse[list[LineItemRead]]:
    return _many(line_service.list_by_order(db, po_id))


@router.get("/by-product/{product_id}", response_model_exclude_none=True)
def list_by_product(product_id: int, db: Session = Depends(get_db)) -> ApiResponse[list[LineItemRead]]:
    return _many(line_service.list_by_product(db, product_id))


@router.get("/{line_id}", response_model_exclude_none=True)
def get_line(line_id: int, db: Session = Depends(get_db)) -> ApiResponse[LineItemRead]:
    return ok(LineItemRead.model_validate(line_service.get_line(db, line_id)))


@router.post("", status_code=201, response_model_exclude_none=True)
def create_line(payload: LineItemCreate, db: Session = Depends(get_db)) -> ApiResponse[LineItemRead]:
    with unit_of_work(db):
        line = line_service.create_line(db, payload)
    return ok(LineItemRead.model_validate(line), "Line item created")


@router.put("/{line_id}", response_model_exclude_none=True)
def update_line(line_id: int, payload: LineItemUpdate, db: Session = Depends(get_db)) -> ApiResponse[LineItemRead]:
    with unit_of_work(db):
        line = line_service.update_line(db, line_id, payload)
    return ok(LineItemRead.model_validate(line), "Line item updated")


@router.delete("/{line_id}", response_model_exclude_none=True)
def delete_line(line_id: int, db: Session = Depends(get_db)) -> ApiResponse[None]:
    with unit_of_work(db):
        line_service.delete_line(db, line_id)
    return ok(message="Line item removed")
