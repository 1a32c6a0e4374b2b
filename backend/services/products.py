from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from backend.app.db.models.models_v1 import Product, StockRecord, Warehouse
from backend.app.schemas.product import ProductCreate, ProductUpdate
from backend.services.errors import BusinessRuleError, NotFoundError
from backend.services.pagination import Page, paginate
from backend.services.validation import require_new, require_positive, require_present

logger = logging.getLogger(__name__)


def get_product(db: Session, product_id: int) -> Product:
    logger.debug("Fetching product %s", product_id)
    p = db.get(Product, product_id)
    if not p:
        raise NotFoundError("Product", "id", product_id)
    return p


def get_by_barcode(db: Session, barcode: str) -> Product:
    require_present(barcode, "Barcode")
    p = db.execute(select(Product).where(Product.barcode == barcode)).scalar_one_or_none()
    if not p:
        raise NotFoundError("Product", "barcode", barcode)
    return p


def list_products(db: Session, page: int = 0, size: int | None = None) -> Page[Product]:
    return paginate(db, select(Product).order_by(Product.name, Product.id), page, size)


def search_by_name(db: Session, name: str) -> list[Product]:
    require_present(name, "Name")
    stmt = (
        select(Product)
        .where(func.lower(Product.name).contains(name.strip().lower(), autoescape=True))
        .order_by(Product.name)
    )
    return list(db.execute(stmt).scalars().all())


def _below(db: Session, threshold) -> list[Product]:
    # one product may hold several stock records (one per lot)
    stmt = (
        select(Product)
        .join(StockRecord, StockRecord.product_id == Product.id)
        .where(StockRecord.quantity <= threshold)
        .distinct()
        .order_by(Product.name)
    )
    return list(db.execute(stmt).scalars().all())


def list_to_reorder(db: Session) -> list[Product]:
    """Products with at least one stock record at or below their reorder point."""
    return _below(db, Product.reorder_point)


def list_low_stock(db: Session) -> list[Product]:
    """Products with at least one stock record at or below their safety minimum."""
    return _below(db, Product.min_stock)


def _validate(db: Session, payload: ProductCreate | ProductUpdate, product_id: int | None = None) -> None:
    require_positive(payload.min_stock, "Minimum stock")
    require_positive(payload.max_stock, "Maximum stock")
    require_positive(payload.reorder_point, "Reorder point")
    if payload.max_stock <= payload.min_stock:
        raise BusinessRuleError("Maximum stock must be greater than minimum stock")
    if not payload.min_stock <= payload.reorder_point <= payload.max_stock:
        raise BusinessRuleError("Reorder point must lie between minimum and maximum stock")

    stmt = select(Product.id).where(Product.barcode == payload.barcode)
    if product_id is not None:
        stmt = stmt.where(Product.id != product_id)
    if db.execute(stmt).first():
        raise BusinessRuleError(f"A product with barcode '{payload.barcode}' already exists")

    if payload.warehouse_id is not None and not db.get(Warehouse, payload.warehouse_id):
        raise NotFoundError("Warehouse", "id", payload.warehouse_id)


def create_product(db: Session, payload: ProductCreate) -> Product:
    require_new(payload, "Product")
    _validate(db, payload)

    logger.info("Creating product %s (barcode=%s)", payload.name, payload.barcode)
    p = Product(**payload.model_dump(exclude={"id"}))
    db.add(p)
    db.flush()
    return p


def update_product(db: Session, product_id: int, payload: ProductUpdate) -> Product:
    require_present(payload, "Product")
    p = get_product(db, product_id)
    _validate(db, payload, product_id)

    logger.info("Updating product %s", product_id)
    for key, value in payload.model_dump().items():
        setattr(p, key, value)
    db.flush()
    return p


def delete_product(db: Session, product_id: int) -> None:
    p = get_product(db, product_id)
    logger.info("Removing product %s", product_id)
    db.delete(p)
    db.flush()
