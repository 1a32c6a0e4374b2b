"""
Role-to-resource access policy.

Grants live in the `access_grants` table as (role, path prefix) pairs. For a
request path, the longest prefix that has any grant decides: the caller needs
one of the roles granted on that prefix. A path no grant covers is open to
any authenticated user. Admins pass every check.
"""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.db.models.core_types import Role
from backend.app.db.models.models_v1 import AccessGrant
from backend.app.schemas.access import AccessGrantCreate
from backend.services.errors import BusinessRuleError, NotFoundError

logger = logging.getLogger(__name__)


class AccessPolicy(Protocol):
    def is_allowed(self, roles: Iterable[Role], path: str) -> bool: ...


def _matches(prefix: str, path: str) -> bool:
    prefix = prefix.rstrip("/") or "/"
    if prefix == "/":
        return True
    return path == prefix or path.startswith(prefix + "/")


class TableAccessPolicy:
    def __init__(self, db: Session):
        self.db = db

    def is_allowed(self, roles: Iterable[Role], path: str) -> bool:
        roles = set(roles)
        if Role.admin in roles:
            return True

        grants = self.db.execute(select(AccessGrant)).scalars().all()
        matching = [g for g in grants if _matches(g.path_prefix, path)]
        if not matching:
            return True

        longest = max(len(g.path_prefix.rstrip("/")) for g in matching)
        allowed = {g.role for g in matching if len(g.path_prefix.rstrip("/")) == longest}
        decision = bool(allowed & roles)
        logger.debug("Access to %s for roles %s: %s", path, sorted(r.value for r in roles), decision)
        return decision


def list_grants(db: Session) -> list[AccessGrant]:
    stmt = select(AccessGrant).order_by(AccessGrant.path_prefix, AccessGrant.role)
    return list(db.execute(stmt).scalars().all())


def create_grant(db: Session, payload: AccessGrantCreate) -> AccessGrant:
    stmt = (
        select(AccessGrant.id)
        .where(AccessGrant.role == payload.role)
        .where(AccessGrant.path_prefix == payload.path_prefix)
    )
    if db.execute(stmt).first():
        raise BusinessRuleError(f"Role {payload.role.value} already has access to {payload.path_prefix}")

    logger.info("Granting %s access to %s", payload.role.value, payload.path_prefix)
    g = AccessGrant(role=payload.role, path_prefix=payload.path_prefix)
    db.add(g)
    db.flush()
    return g


def delete_grant(db: Session, grant_id: int) -> None:
    g = db.get(AccessGrant, grant_id)
    if not g:
        raise NotFoundError("Access grant", "id", grant_id)
    logger.info("Revoking %s access to %s", g.role.value, g.path_prefix)
    db.delete(g)
    db.flush()
