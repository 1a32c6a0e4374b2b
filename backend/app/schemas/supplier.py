from pydantic import BaseModel, Field


class SupplierBase(BaseModel):
    legal_name: str = Field(min_length=1, max_length=255)
    tax_id: str | None = Field(default=None, max_length=20)
    representative: str | None = Field(default=None, max_length=100)
    representative_contact: str | None = Field(default=None, max_length=15)
    payment_terms: str | None = Field(default=None, max_length=250)


class SupplierCreate(SupplierBase):
    id: int | None = None


class SupplierUpdate(SupplierBase):
    pass


class SupplierRead(SupplierBase):
    id: int

    class Config:
        from_attributes = True
