"""
Procurement service.

Purchase order lifecycle: the status machine and the audited deletion of an
order together with everything hanging off it (lots, their stock records,
line items).

Plain CRUD on the order row lives in backend.services.purchase_orders and the
stock counters in backend.services.inventory.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from backend.app.db.models.core_types import POStatus
from backend.app.db.models.models_v1 import Lot, PurchaseOrder, StockRecord, User
from backend.app.db.session import unit_of_work
from backend.services import audit, line_items, lots
from backend.services.errors import BusinessRuleError
from backend.services.purchase_orders import get_order
from backend.services.validation import require_present, require_text

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS: dict[POStatus, frozenset[POStatus]] = {
    POStatus.pending: frozenset({POStatus.in_progress, POStatus.cancelled}),
    POStatus.in_progress: frozenset({POStatus.completed, POStatus.cancelled}),
    POStatus.completed: frozenset(),
    POStatus.cancelled: frozenset(),
}


@dataclass
class RemovalPlan:
    """What a cascading delete of one order would touch, or why it is refused."""

    order_id: int
    removable: bool = True
    reason: str | None = None
    lot_ids: list[int] = field(default_factory=list)
    stock_record_ids: list[int] = field(default_factory=list)
    line_item_count: int = 0


def advance_status(db: Session, order_id: int, target: POStatus) -> PurchaseOrder:
    require_present(target, "Target status")
    po = get_order(db, order_id)
    current = po.status

    if current == POStatus.completed:
        raise BusinessRuleError("Completed orders cannot be modified")
    if current == POStatus.pending and target == POStatus.completed:
        raise BusinessRuleError("A pending order must pass through in-progress before it can be completed")
    if target not in ALLOWED_TRANSITIONS[current]:
        raise BusinessRuleError(f"Invalid status transition: {current.value} -> {target.value}")

    logger.info("Purchase order %s: %s -> %s", order_id, current.value, target.value)
    po.status = target
    if target == POStatus.completed:
        po.delivered_on = date.today()
    db.flush()
    return po


def _stock_records_for_lot(db: Session, lot_id: int, *, for_update: bool = False) -> list[StockRecord]:
    stmt = select(StockRecord).where(StockRecord.lot_id == lot_id).order_by(StockRecord.id)
    if for_update:
        stmt = stmt.with_for_update()
    return list(db.execute(stmt).scalars().all())


def _lot_blocker(lot: Lot, records: list[StockRecord]) -> str | None:
    if lot.quantity > 0:
        return f"Cannot remove order: lot #{lot.id} still holds quantity {lot.quantity}"
    for sr in records:
        if sr.quantity > 0:
            return (
                f"Cannot remove order: stock record #{sr.id} (product {sr.product_id}, lot #{lot.id}) "
                f"still holds quantity {sr.quantity}"
            )
    return None


def check_removable(db: Session, order_id: int) -> RemovalPlan:
    """Run every check of delete_with_audit without deleting anything."""
    po = get_order(db, order_id)
    plan = RemovalPlan(order_id=po.id, line_item_count=len(line_items.list_by_order(db, po.id)))

    if po.status == POStatus.completed:
        plan.removable = False
        plan.reason = "Completed orders cannot be removed"
        return plan

    for lot in lots.list_by_order(db, po.id):
        records = _stock_records_for_lot(db, lot.id)
        blocker = _lot_blocker(lot, records)
        if blocker:
            plan.removable = False
            plan.reason = blocker
            return plan
        plan.lot_ids.append(lot.id)
        plan.stock_record_ids.extend(sr.id for sr in records)

    return plan


def delete_with_audit(db: Session, order_id: int, actor: User, reason: str) -> RemovalPlan:
    """
    Remove an order and its dependents in dependency order:
    stock records -> lots -> line items -> order.

    The whole cascade runs in one unit of work; a lot or stock record that
    still holds quantity aborts it and every delete already issued is rolled
    back. The caller is expected to have authenticated `actor` already.
    """
    reason = require_text(reason, "Removal reason")
    with unit_of_work(db, "purchase order removal"):
        po = get_order(db, order_id)
        if po.status == POStatus.completed:
            raise BusinessRuleError("Completed orders cannot be removed")

        logger.info("User %s is removing purchase order %s (reason: %s)", actor.login, order_id, reason)
        plan = RemovalPlan(order_id=po.id)

        for lot in lots.list_by_order(db, po.id):
            records = _stock_records_for_lot(db, lot.id, for_update=True)
            blocker = _lot_blocker(lot, records)
            if blocker:
                logger.warning("Removal of purchase order %s refused: %s", order_id, blocker)
                raise BusinessRuleError(blocker)

            for sr in records:
                db.delete(sr)
                plan.stock_record_ids.append(sr.id)
            db.flush()

            plan.lot_ids.append(lot.id)
            db.delete(lot)
            db.flush()

        plan.line_item_count = line_items.delete_by_order(db, po.id)

        db.delete(po)
        db.flush()

        audit.record(
            db,
            actor_id=actor.id,
            action="purchase_order.delete",
            entity_type="purchase_order",
            entity_id=order_id,
            meta={
                "reason": reason,
                "lots": plan.lot_ids,
                "stock_records": plan.stock_record_ids,
                "line_items": plan.line_item_count,
            },
        )

    logger.info(
        "Purchase order %s removed with %s lot(s), %s stock record(s), %s line item(s)",
        order_id,
        len(plan.lot_ids),
        len(plan.stock_record_ids),
        plan.line_item_count,
    )
    return plan
