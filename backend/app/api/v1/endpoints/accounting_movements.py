from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db
from backend.app.db.session import unit_of_work
from backend.app.schemas.accounting import (
    AccountingMovementCreate,
    AccountingMovementRead,
    AccountingMovementUpdate,
    PeriodTotal,
)
from backend.app.schemas.envelope import ApiResponse, ok
from backend.services import accounting

router = APIRouter(prefix="/accounting-movements")


def _many(rows) -> ApiResponse[list[AccountingMovementRead]]:
    return ok([AccountingMovementRead.model_validate(m) for m in rows])


@router.get("", response_model_exclude_none=True)
def list_movements(
    product_id: int | None = None,
    po_id: int | None = None,
    on: date | None = None,
    db: Session = Depends(get_db),
) -> ApiResponse[list[AccountingMovementRead]]:
    if product_id is not None:
        return _many(accounting.list_by_product(db, product_id))
    if po_id is not None:
        return _many(accounting.list_by_order(db, po_id))
    if on is not None:
        return _many(accounting.list_by_date(db, on))
    return _many(accounting.list_movements(db))


@router.get("/period", response_model_exclude_none=True)
def list_by_period(start: date, end: date, db: Session = Depends(get_db)) -> ApiResponse[list[AccountingMovementRead]]:
    return _many(accounting.list_by_period(db, start, end))


@router.get("/period/total", response_model_exclude_none=True)
def period_total(start: date, end: date, db: Session = Depends(get_db)) -> ApiResponse[PeriodTotal]:
    return ok(PeriodTotal(start=start, end=end, total_value=accounting.sum_period(db, start, end)))


@router.get("/{movement_id}", response_model_exclude_none=True)
def get_movement(movement_id: int, db: Session = Depends(get_db)) -> ApiResponse[AccountingMovementRead]:
    return ok(AccountingMovementRead.model_validate(accounting.get_movement(db, movement_id)))


@router.post("", status_code=201, response_model_exclude_none=True)
def create_movement(
    payload: AccountingMovementCreate,
    db: Session = Depends(get_db),
) -> ApiResponse[AccountingMovementRead]:
    with unit_of_work(db):
        m = accounting.create_movement(db, payload)
    return ok(AccountingMovementRead.model_validate(m), "Accounting movement created")


@router.put("/{movement_id}", response_model_exclude_none=True)
def update_movement(
    movement_id: int,
    payload: AccountingMovementUpdate,
    db: Session = Depends(get_db),
) -> ApiResponse[AccountingMovementRead]:
    with unit_of_work(db):
        m = accounting.update_movement(db, movement_id, payload)
    return ok(AccountingMovementRead.model_validate(m), "Accounting movement updated")


@router.delete("/{movement_id}", response_model_exclude_none=True)
def delete_movement(movement_id: int, db: Session = Depends(get_db)) -> ApiResponse[None]:
    with unit_of_work(db):
        accounting.delete_movement(db, movement_id)
    return ok(message="Accounting movement removed")
