from pydantic import BaseModel, Field

from backend.app.db.models.core_types import Role


class AccessGrantCreate(BaseModel):
    role: Role
    path_prefix: str = Field(min_length=1, max_length=200, pattern=r"^/")


class AccessGrantRead(BaseModel):
    id: int
    role: Role
    path_prefix: str

    class Config:
        from_attributes = True
