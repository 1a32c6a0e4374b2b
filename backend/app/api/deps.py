from __future__ import annotations

from typing import Generator

from fastapi import Depends, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.orm import Session

from backend.app.db.models.models_v1 import User
from backend.app.db.session import SessionLocal
from backend.services import users
from backend.services.access import TableAccessPolicy
from backend.services.errors import AuthenticationError, PermissionDeniedError

security = HTTPBasic(auto_error=False)


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    credentials: HTTPBasicCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None:
        raise AuthenticationError("Authentication required")
    user = users.authenticate(db, credentials.username, credentials.password)
    if user is None:
        raise AuthenticationError("Invalid credentials")
    return user


def require_access(
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> User:
    policy = TableAccessPolicy(db)
    roles = [r.role for r in user.roles]
    if not policy.is_allowed(roles, request.url.path):
        raise PermissionDeniedError(f"User '{user.login}' may not access {request.url.path}")
    return user
