from __future__ import annotations

from datetime import date

from pydantic import BaseModel


class LotCreate(BaseModel):
    id: int | None = None
    po_id: int | None = None
    expires_on: date | None = None
    quantity: int = 0


class LotUpdate(BaseModel):
    po_id: int | None = None
    expires_on: date | None = None
    quantity: int


class LotQuantityChange(BaseModel):
    quantity: int


class LotRead(BaseModel):
    id: int
    po_id: int
    expires_on: date | None = None
    quantity: int
    exhausted: bool

    class Config:
        from_attributes = True
