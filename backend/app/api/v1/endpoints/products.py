from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db
from backend.app.db.session import unit_of_work
from backend.app.schemas.envelope import ApiResponse, ok, ok_page
from backend.app.schemas.product import ProductCreate, ProductRead, ProductUpdate
from backend.services import products as product_service

router = APIRouter(prefix="/products")


@router.get("", response_model_exclude_none=True)
def list_products(
    page: int = Query(0, ge=0),
    size: int | None = Query(None, ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[list[ProductRead]]:
    return ok_page(product_service.list_products(db, page, size), ProductRead)


@router.get("/search", response_model_exclude_none=True)
def search_products(
    name: str | None = None,
    barcode: str | None = None,
    db: Session = Depends(get_db),
) -> ApiResponse[list[ProductRead]]:
    if barcode:
        return ok([ProductRead.model_validate(product_service.get_by_barcode(db, barcode))])
    rows = product_service.search_by_name(db, name)
    return ok([ProductRead.model_validate(p) for p in rows])


@router.get("/reorder", response_model_exclude_none=True)
def list_to_reorder(db: Session = Depends(get_db)) -> ApiResponse[list[ProductRead]]:
    return ok([ProductRead.model_validate(p) for p in product_service.list_to_reorder(db)])


@router.get("/low-stock", response_model_exclude_none=True)
def list_low_stock(db: Session = Depends(get_db)) -> ApiResponse[list[ProductRead]]:
    return ok([ProductRead.model_validate(p) for p in product_service.list_low_stock(db)])


@router.get("/{product_id}", response_model_exclude_none=True)
def get_product(product_id: int, db: Session = Depends(get_db)) -> ApiResponse[ProductRead]:
    return ok(ProductRead.model_validate(product_service.get_product(db, product_id)))


@router.post("", status_code=201, response_model_exclude_none=True)
def create_product(payload: ProductCreate, db: Session = Depends(get_db)) -> ApiResponse[ProductRead]:
    with unit_of_work(db):
        p = product_service.create_product(db, payload)
    return ok(ProductRead.model_validate(p), "Product created")


@router.put("/{product_id}", response_model_exclude_none=True)
def update_product(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)) -> ApiResponse[ProductRead]:
    with unit_of_work(db):
        p = product_service.update_product(db, product_id, payload)
    return ok(ProductRead.model_validate(p), "Product updated")


@router.delete("/{product_id}", response_model_exclude_none=True)
def delete_product(product_id: int, db: Session = Depends(get_db)) -> ApiResponse[None]:
    with unit_of_work(db):
        product_service.delete_product(db, product_id)
    return ok(message="Product removed")
