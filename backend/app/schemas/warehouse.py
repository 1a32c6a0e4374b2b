from pydantic import BaseModel, Field


class WarehouseCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class WarehouseRead(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True
