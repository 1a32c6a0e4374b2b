from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health")


@router.get("")
def health():
    return {"status": "UP", "service": "clinic-stock", "timestamp": datetime.now().isoformat()}


@router.get("/detailed")
def health_detailed(db: Session = Depends(get_db)):
    body = {"status": "UP", "service": "clinic-stock", "timestamp": datetime.now().isoformat()}
    try:
        db.execute(text("SELECT 1"))
        body["database"] = {"status": "UP"}
    except SQLAlchemyError as exc:
        logger.error("Database health check failed: %s", exc)
        body["status"] = "DOWN"
        body["database"] = {"status": "DOWN", "error": exc.__class__.__name__}
        return JSONResponse(status_code=503, content=body)
    return body
