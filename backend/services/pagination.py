from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from backend.app.config import settings
from backend.services.errors import InvalidArgumentError

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    items: list[T]
    page: int
    size: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.size) if self.size else 0

    @property
    def first(self) -> bool:
        return self.page == 0

    @property
    def last(self) -> bool:
        return self.page >= max(self.total_pages - 1, 0)


def paginate(db: Session, stmt: Select[Any], page: int = 0, size: int | None = None) -> Page[Any]:
    """Run `stmt` for one zero-based page and count the full result set."""
    size = settings.default_page_size if size is None else size
    if page < 0:
        raise InvalidArgumentError("page must be zero or positive")
    if size <= 0 or size > settings.max_page_size:
        raise InvalidArgumentError(f"size must be between 1 and {settings.max_page_size}")

    total = db.execute(select(func.count()).select_from(stmt.order_by(None).subquery())).scalar_one()
    items = db.execute(stmt.limit(size).offset(page * size)).scalars().all()
    return Page(items=list(items), page=page, size=size, total=int(total))
