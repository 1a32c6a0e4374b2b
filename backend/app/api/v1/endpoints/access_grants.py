from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db
from backend.app.db.session import unit_of_work
from backend.app.schemas.access import AccessGrantCreate, AccessGrantRead
from backend.app.schemas.envelope import ApiResponse, ok
from backend.services import access

router = APIRouter(prefix="/access-grants")


@router.get("", response_model_exclude_none=True)
def list_grants(db: Session = Depends(get_db)) -> ApiResponse[list[AccessGrantRead]]:
    return ok([AccessGrantRead.model_validate(g) for g in access.list_grants(db)])


@router.post("", status_code=201, response_model_exclude_none=True)
def create_grant(payload: AccessGrantCreate, db: Session = Depends(get_db)) -> ApiResponse[AccessGrantRead]:
    with unit_of_work(db):
        g = access.create_grant(db, payload)
    return ok(AccessGrantRead.model_validate(g), "Access granted")


@router.delete("/{grant_id}", response_model_exclude_none=True)
def delete_grant(grant_id: int, db: Session = Depends(get_db)) -> ApiResponse[None]:
    with unit_of_work(db):
        access.delete_grant(db, grant_id)
    return ok(message="Access revoked")
