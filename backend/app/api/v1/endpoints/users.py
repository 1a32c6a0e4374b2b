from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db
from backend.app.db.session import unit_of_work
from backend.app.schemas.envelope import ApiResponse, ok
from backend.app.schemas.user import UserCreate, UserRead, UserUpdate
from backend.services import users as user_service

router = APIRouter(prefix="/users")


@router.get("", response_model_exclude_none=True)
def list_users(active_only: bool = False, db: Session = Depends(get_db)) -> ApiResponse[list[UserRead]]:
    return ok([UserRead.from_user(u) for u in user_service.list_users(db, active_only=active_only)])


@router.get("/{user_id}", response_model_exclude_none=True)
def get_user(user_id: int, db: Session = Depends(get_db)) -> ApiResponse[UserRead]:
    return ok(UserRead.from_user(user_service.get_user(db, user_id)))


@router.post("", status_code=201, response_model_exclude_none=True)
def create_user(payload: UserCreate, db: Session = Depends(get_db)) -> ApiResponse[UserRead]:
    with unit_of_work(db):
        u = user_service.create_user(db, payload)
    return ok(UserRead.from_user(u), "User created")


@router.put("/{user_id}", response_model_exclude_none=True)
def update_user(user_id: int, payload: UserUpdate, db: Session = Depends(get_db)) -> ApiResponse[UserRead]:
    with unit_of_work(db):
        u = user_service.update_user(db, user_id, payload)
    return ok(UserRead.from_user(u), "User updated")


@router.patch("/{user_id}/toggle-active", response_model_exclude_none=True)
def toggle_active(user_id: int, db: Session = Depends(get_db)) -> ApiResponse[UserRead]:
    with unit_of_work(db):
        u = user_service.toggle_active(db, user_id)
    return ok(UserRead.from_user(u))


@router.delete("/{user_id}", response_model_exclude_none=True)
def deactivate_user(user_id: int, db: Session = Depends(get_db)) -> ApiResponse[UserRead]:
    with unit_of_work(db):
        u = user_service.deactivate(db, user_id)
    return ok(UserRead.from_user(u), "User deactivated")
