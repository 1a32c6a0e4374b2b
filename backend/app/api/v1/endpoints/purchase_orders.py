from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db
from backend.app.db.models.core_types import POStatus
from backend.app.db.session import unit_of_work
from backend.app.schemas.envelope import ApiResponse, ok, ok_page
from backend.app.schemas.purchase_order import (
    AuthenticatedDeleteRequest,
    PurchaseOrderCreate,
    PurchaseOrderRead,
    PurchaseOrderUpdate,
    RemovalCheck,
)
from backend.services import procurement, users
from backend.services import purchase_orders as po_service
from backend.services.errors import AuthenticationError

router = APIRouter(prefix="/purchase-orders")


@router.get("", response_model_exclude_none=True)
def list_pos(
    page: int = Query(0, ge=0),
    size: int | None = Query(None, ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[list[PurchaseOrderRead]]:
    return ok_page(po_service.list_orders(db, page, size), PurchaseOrderRead)


@router.get("/overdue", response_model_exclude_none=True)
def list_overdue(db: Session = Depends(get_db)) -> ApiResponse[list[PurchaseOrderRead]]:
    rows = po_service.list_overdue(db)
    return ok([PurchaseOrderRead.model_validate(po) for po in rows])


@router.get("/status/{status}", response_model_exclude_none=True)
def list_by_status(status: POStatus, db: Session = Depends(get_db)) -> ApiResponse[list[PurchaseOrderRead]]:
    rows = po_service.list_by_status(db, status)
    return ok([PurchaseOrderRead.model_validate(po) for po in rows])


@router.get("/{po_id}", response_model_exclude_none=True)
def get_po(po_id: int, db: Session = Depends(get_db)) -> ApiResponse[PurchaseOrderRead]:
    return ok(PurchaseOrderRead.model_validate(po_service.get_order(db, po_id)))


@router.post("", status_code=201, response_model_exclude_none=True)
def create_po(payload: PurchaseOrderCreate, db: Session = Depends(get_db)) -> ApiResponse[PurchaseOrderRead]:
    with unit_of_work(db):
        po = po_service.create_order(db, payload)
    return ok(PurchaseOrderRead.model_validate(po), "Purchase order created")


@router.put("/{po_id}", response_model_exclude_none=True)
def update_po(
    po_id: int,
    payload: PurchaseOrderUpdate,
    db: Session = Depends(get_db),
) -> ApiResponse[PurchaseOrderRead]:
    with unit_of_work(db):
        po = po_service.update_order(db, po_id, payload)
    return ok(PurchaseOrderRead.model_validate(po), "Purchase order updated")


@router.patch("/{po_id}/status", response_model_exclude_none=True)
def change_status(
    po_id: int,
    target: POStatus = Query(...),
    db: Session = Depends(get_db),
) -> ApiResponse[PurchaseOrderRead]:
    with unit_of_work(db):
        po = procurement.advance_status(db, po_id, target)
    return ok(PurchaseOrderRead.model_validate(po), f"Status changed to {po.status.value}")


@router.delete("/{po_id}", response_model_exclude_none=True)
def delete_po(po_id: int, db: Session = Depends(get_db)) -> ApiResponse[None]:
    with unit_of_work(db, "purchase order removal"):
        po_service.delete_order(db, po_id)
    return ok(message="Purchase order removed")


@router.get("/{po_id}/removal-check", response_model_exclude_none=True)
def removal_check(po_id: int, db: Session = Depends(get_db)) -> ApiResponse[RemovalCheck]:
    plan = procurement.check_removable(db, po_id)
    return ok(
        RemovalCheck(
            removable=plan.removable,
            reason=plan.reason,
            lots=len(plan.lot_ids),
            stock_records=len(plan.stock_record_ids),
            line_items=plan.line_item_count,
        )
    )


@router.delete("/{po_id}/authenticated", response_model_exclude_none=True)
def delete_po_authenticated(
    po_id: int,
    payload: AuthenticatedDeleteRequest,
    db: Session = Depends(get_db),
) -> ApiResponse[RemovalCheck]:
    """
    Cascading delete confirmed by the operator's own credentials.
    Removes the order's lots (and their empty stock records) and line items.
    """
    actor = users.authenticate(db, payload.login, payload.password)
    if actor is None:
        raise AuthenticationError("Invalid credentials for the confirming user")

    plan = procurement.delete_with_audit(db, po_id, actor, payload.reason)
    return ok(
        RemovalCheck(
            removable=True,
            lots=len(plan.lot_ids),
            stock_records=len(plan.stock_record_ids),
            line_items=plan.line_item_count,
        ),
        "Purchase order and its dependents removed",
    )
