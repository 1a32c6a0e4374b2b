from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

from backend.services.pagination import Page

T = TypeVar("T")


class PaginationInfo(BaseModel):
    page: int
    size: int
    total_elements: int
    total_pages: int
    first: bool
    last: bool


class ApiResponse(BaseModel, Generic[T]):
    """
    Envelope returned by every endpoint.
    Null fields are dropped from the JSON (routers use response_model_exclude_none).
    """

    timestamp: datetime = Field(default_factory=datetime.now)
    success: bool
    message: str | None = None
    data: T | None = None
    pagination: PaginationInfo | None = None


def ok(data: Any = None, message: str | None = None) -> ApiResponse[Any]:
    return ApiResponse(success=True, message=message, data=data)


def ok_page(page: Page[Any], schema: type[BaseModel]) -> ApiResponse[Any]:
    return ApiResponse(
        success=True,
        data=[schema.model_validate(item) for item in page.items],
        pagination=PaginationInfo(
            page=page.page,
            size=page.size,
            total_elements=page.total,
            total_pages=page.total_pages,
            first=page.first,
            last=page.last,
        ),
    )


def error(message: str, data: Any = None) -> dict[str, Any]:
    body = ApiResponse(success=False, message=message, data=data)
    return body.model_dump(mode="json", exclude_none=True)
