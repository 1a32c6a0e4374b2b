from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

from backend.app.db.models.core_types import POStatus


class PurchaseOrderCreate(BaseModel):
    id: int | None = None
    supplier_id: int | None = None
    value: Decimal
    placed_on: date | None = None
    expected_on: date


class PurchaseOrderUpdate(BaseModel):
    supplier_id: int | None = None
    value: Decimal
    placed_on: date | None = None
    expected_on: date


class PurchaseOrderRead(BaseModel):
    id: int
    supplier_id: int | None = None
    status: POStatus
    value: Decimal
    placed_on: date
    expected_on: date
    delivered_on: date | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class RemovalCheck(BaseModel):
    removable: bool
    reason: str | None = None
    lots: int = 0
    stock_records: int = 0
    line_items: int = 0


class AuthenticatedDeleteRequest(BaseModel):
    login: str = Field(min_length=1)
    password: str = Field(min_length=1)
    reason: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
