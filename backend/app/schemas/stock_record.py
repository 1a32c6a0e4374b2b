from datetime import datetime

from pydantic import BaseModel


class StockRecordCreate(BaseModel):
    id: int | None = None
    product_id: int | None = None
    lot_id: int | None = None
    quantity: int = 0


class StockMovementRequest(BaseModel):
    product_id: int
    lot_id: int
    quantity: int


class StockQuantityUpdate(BaseModel):
    quantity: int


class StockRecordRead(BaseModel):
    id: int
    product_id: int
    lot_id: int
    quantity: int
    updated_at: datetime

    class Config:
        from_attributes = True
