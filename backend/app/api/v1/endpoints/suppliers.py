from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db
from backend.app.db.session import unit_of_work
from backend.app.schemas.envelope import ApiResponse, ok
from backend.app.schemas.supplier import SupplierCreate, SupplierRead, SupplierUpdate
from backend.services import suppliers as supplier_service

router = APIRouter(prefix="/suppliers")


@router.get("", response_model_exclude_none=True)
def list_suppliers(
    representative: str | None = None,
    db: Session = Depends(get_db),
) -> ApiResponse[list[SupplierRead]]:
    if representative:
        rows = supplier_service.search_by_representative(db, representative)
    else:
        rows = supplier_service.list_suppliers(db)
    return ok([SupplierRead.model_validate(s) for s in rows])


@router.get("/{supplier_id}", response_model_exclude_none=True)
def get_supplier(supplier_id: int, db: Session = Depends(get_db)) -> ApiResponse[SupplierRead]:
    return ok(SupplierRead.model_validate(supplier_service.get_supplier(db, supplier_id)))


@router.post("", status_code=201, response_model_exclude_none=True)
def create_supplier(payload: SupplierCreate, db: Session = Depends(get_db)) -> ApiResponse[SupplierRead]:
    with unit_of_work(db):
        s = supplier_service.create_supplier(db, payload)
    return ok(SupplierRead.model_validate(s), "Supplier created")


@router.put("/{supplier_id}", response_model_exclude_none=True)
def update_supplier(
    supplier_id: int,
    payload: SupplierUpdate,
    db: Session = Depends(get_db),
) -> ApiResponse[SupplierRead]:
    with unit_of_work(db):
        s = supplier_service.update_supplier(db, supplier_id, payload)
    return ok(SupplierRead.model_validate(s), "Supplier updated")


@router.delete("/{supplier_id}", response_model_exclude_none=True)
def delete_supplier(supplier_id: int, db: Session = Depends(get_db)) -> ApiResponse[None]:
    with unit_of_work(db):
        supplier_service.delete_supplier(db, supplier_id)
    return ok(message="Supplier removed")
