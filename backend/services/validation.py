"""
Validation helpers shared by every service.

They run before any persistence call, so a failing check never leaves a
partial write behind.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from backend.services.errors import BusinessRuleError, InvalidArgumentError


def require_present(value: Any, name: str) -> Any:
    if value is None:
        raise InvalidArgumentError(f"{name} is required")
    return value


def require_text(value: str | None, name: str) -> str:
    if value is None or not value.strip():
        raise InvalidArgumentError(f"{name} is required")
    return value.strip()


def require_new(payload: Any, name: str) -> None:
    """Create payloads must not carry an identity; the database assigns it."""
    require_present(payload, name)
    if getattr(payload, "id", None) is not None:
        raise InvalidArgumentError(f"{name} id must be empty on creation")


def require_identity(entity_id: int | None, name: str) -> int:
    if entity_id is None:
        raise InvalidArgumentError(f"{name} id is required")
    return entity_id


def require_positive(value: int | Decimal | None, name: str) -> None:
    if value is None or value <= 0:
        raise InvalidArgumentError(f"{name} must be positive")


def require_non_negative(value: int | Decimal | None, name: str) -> None:
    if value is None or value < 0:
        raise InvalidArgumentError(f"{name} must be zero or positive")


def require_range(lower: Any, upper: Any, name: str) -> None:
    if lower is None or upper is None:
        raise InvalidArgumentError(f"{name} bounds are required")
    if lower > upper:
        raise InvalidArgumentError(f"{name}: lower bound must not exceed upper bound")


def ensure_unchanged(current: Any, requested: Any, name: str) -> None:
    # None means "not sent", which keeps the stored value
    if requested is not None and current is not None and current != requested:
        raise BusinessRuleError(f"{name} cannot be changed after creation")
