from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field


class ProductBase(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    description: str = Field(min_length=1, max_length=250)
    barcode: str = Field(min_length=1, max_length=50)
    uom: str = Field(default="unit", min_length=1, max_length=32)
    warehouse_id: int | None = None
    ideal_temperature: Decimal | None = None
    min_stock: int
    max_stock: int
    reorder_point: int


class ProductCreate(ProductBase):
    id: int | None = None


class ProductUpdate(ProductBase):
    pass


class ProductRead(ProductBase):
    id: int

    class Config:
        from_attributes = True
