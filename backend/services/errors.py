"""
Exceptions raised by the service layer.

The API layer maps each one to an HTTP status (see backend.app.api.errors);
services never raise HTTPException themselves.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for every error the service layer raises on purpose."""


class NotFoundError(ServiceError):
    def __init__(self, resource: str, field: str | None = None, value: object = None):
        if field is None:
            message = resource
        else:
            message = f"{resource} not found with {field}: '{value}'"
        super().__init__(message)
        self.resource = resource


class InvalidArgumentError(ServiceError, ValueError):
    """Null/negative/zero where a value is required, malformed ranges."""


class BusinessRuleError(ServiceError):
    """A request that is well formed but forbidden by a business rule."""


class IntegrityViolationError(ServiceError):
    """A database constraint refused the write."""


class AuthenticationError(ServiceError):
    pass


class PermissionDeniedError(ServiceError):
    pass
