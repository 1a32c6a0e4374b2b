from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from backend.app.db.models.core_types import MovementType


class AccountingMovementBase(BaseModel):
    product_id: int | None = None
    po_id: int | None = None
    movement_date: date | None = None
    movement_type: MovementType
    quantity: int | None = None
    unit_value: Decimal | None = None
    note: str | None = Field(default=None, max_length=500)


class AccountingMovementCreate(AccountingMovementBase):
    id: int | None = None


class AccountingMovementUpdate(AccountingMovementBase):
    pass


class AccountingMovementRead(AccountingMovementBase):
    id: int
    product_id: int
    movement_date: date
    quantity: int
    total_value: Decimal

    class Config:
        from_attributes = True


class PeriodTotal(BaseModel):
    start: date
    end: date
    total_value: Decimal
