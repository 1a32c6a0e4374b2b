from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from backend.app.config import settings
from backend.services.errors import IntegrityViolationError

logger = logging.getLogger(__name__)

DATABASE_URL = settings.database_url

engine = create_engine(DATABASE_URL, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


@contextmanager
def unit_of_work(db: Session, operation: str = "the update") -> Iterator[Session]:
    """
    Transaction scope for one business operation.

    Every write issued inside the block is committed together on exit,
    or rolled back together if anything raises. Driver details of an
    integrity failure are logged, never returned to the caller.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Integrity violation during %s, transaction rolled back: %s", operation, exc.orig)
        raise IntegrityViolationError(
            f"Data integrity violation: {operation} conflicts with existing or related records"
        ) from exc
    except Exception:
        db.rollback()
        raise
