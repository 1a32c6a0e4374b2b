from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel


class LineItemCreate(BaseModel):
    id: int | None = None
    po_id: int | None = None
    product_id: int | None = None
    quantity: int | None = None
    unit_price: Decimal | None = None
    expires_on: date | None = None


class LineItemUpdate(BaseModel):
    po_id: int | None = None
    product_id: int | None = None
    quantity: int | None = None
    unit_price: Decimal | None = None
    expires_on: date | None = None


class LineItemRead(BaseModel):
    id: int
    po_id: int
    product_id: int
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    expires_on: date | None = None

    class Config:
        from_attributes = True
