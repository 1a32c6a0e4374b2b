from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from backend.app.db.models.core_types import Role


class UserCreate(BaseModel):
    id: int | None = None
    login: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=255)
    full_name: str = Field(min_length=1, max_length=100)
    email: str | None = Field(default=None, max_length=100)
    roles: list[Role] = Field(default_factory=list)


class UserUpdate(BaseModel):
    login: str = Field(min_length=1, max_length=50)
    # blank keeps the current password
    password: str | None = Field(default=None, max_length=255)
    full_name: str = Field(min_length=1, max_length=100)
    email: str | None = Field(default=None, max_length=100)
    active: bool | None = None
    roles: list[Role] | None = None


class UserRead(BaseModel):
    id: int
    login: str
    full_name: str
    email: str | None = None
    active: bool
    roles: list[Role]
    created_at: datetime

    @classmethod
    def from_user(cls, user) -> "UserRead":
        return cls(
            id=user.id,
            login=user.login,
            full_name=user.full_name,
            email=user.email,
            active=user.active,
            roles=sorted((r.role for r in user.roles), key=lambda r: r.value),
            created_at=user.created_at,
        )
