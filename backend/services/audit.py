from __future__ import annotations

import json
import logging
from typing import Any

from sqlalchemy.orm import Session

from backend.app.db.models.models_v1 import AuditLog

logger = logging.getLogger(__name__)


def record(
    db: Session,
    *,
    actor_id: int | None,
    action: str,
    entity_type: str,
    entity_id: int | str,
    meta: dict[str, Any] | None = None,
) -> AuditLog:
    """Write an audit row in the caller's transaction; it commits or rolls back with it."""
    entry = AuditLog(
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        meta=json.dumps(meta, default=str, sort_keys=True) if meta is not None else None,
    )
    db.add(entry)
    db.flush()
    logger.info("AUDIT %s %s#%s by user %s: %s", action, entity_type, entity_id, actor_id, meta)
    return entry
