"""
User accounts and credential checks.

Passwords are stored only as werkzeug hashes; there is no other comparison
path. Users are never hard-deleted, they are deactivated.
"""

from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.db.models.core_types import Role
from backend.app.db.models.models_v1 import User, UserRole
from backend.app.schemas.user import UserCreate, UserUpdate
from backend.services.errors import BusinessRuleError, NotFoundError
from backend.services.validation import require_new, require_present

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> User:
    u = db.get(User, user_id)
    if not u:
        raise NotFoundError("User", "id", user_id)
    return u


def find_by_login(db: Session, login: str) -> User | None:
    return db.execute(select(User).where(User.login == login)).scalar_one_or_none()


def list_users(db: Session, *, active_only: bool = False) -> list[User]:
    stmt = select(User).order_by(User.login)
    if active_only:
        stmt = stmt.where(User.active.is_(True))
    return list(db.execute(stmt).scalars().all())


def authenticate(db: Session, login: str | None, password: str | None) -> User | None:
    """Return the active user matching the credentials, or None."""
    if not login or not password:
        return None

    u = find_by_login(db, login)
    if u is None or not u.active or not u.check_password(password):
        logger.warning("Failed authentication for login %s", login)
        return None
    return u


def _ensure_unique_login(db: Session, login: str, user_id: int | None = None) -> None:
    stmt = select(User.id).where(User.login == login)
    if user_id is not None:
        stmt = stmt.where(User.id != user_id)
    if db.execute(stmt).first():
        raise BusinessRuleError(f"Login '{login}' is already taken")


def _set_roles(u: User, roles: Iterable[Role]) -> None:
    wanted = set(roles)
    u.roles[:] = [r for r in u.roles if r.role in wanted]
    present = {r.role for r in u.roles}
    for role in sorted(wanted - present, key=lambda r: r.value):
        u.roles.append(UserRole(role=role))


def create_user(db: Session, payload: UserCreate) -> User:
    require_new(payload, "User")
    login = payload.login.strip()
    _ensure_unique_login(db, login)

    logger.info("Creating user %s with roles %s", login, [r.value for r in payload.roles])
    u = User(login=login, full_name=payload.full_name, email=payload.email, active=True)
    u.set_password(payload.password)
    _set_roles(u, payload.roles)
    db.add(u)
    db.flush()
    return u


def update_user(db: Session, user_id: int, payload: UserUpdate) -> User:
    require_present(payload, "User")
    u = get_user(db, user_id)
    login = payload.login.strip()
    _ensure_unique_login(db, login, user_id)

    logger.info("Updating user %s", user_id)
    u.login = login
    u.full_name = payload.full_name
    u.email = payload.email
    if payload.password:
        u.set_password(payload.password)
    if payload.active is not None:
        u.active = payload.active
    if payload.roles is not None:
        _set_roles(u, payload.roles)
    db.flush()
    return u


def toggle_active(db: Session, user_id: int) -> User:
    u = get_user(db, user_id)
    u.active = not u.active
    logger.info("User %s is now %s", u.login, "active" if u.active else "inactive")
    db.flush()
    return u


def deactivate(db: Session, user_id: int) -> User:
    u = get_user(db, user_id)
    if not u.active:
        raise BusinessRuleError(f"User '{u.login}' is already inactive")
    logger.info("Deactivating user %s", u.login)
    u.active = False
    db.flush()
    return u
