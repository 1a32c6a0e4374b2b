from datetime import date

import pytest
from sqlalchemy import select

from backend.app.db.models.core_types import POStatus, Role
from backend.app.db.models.models_v1 import AuditLog, Lot, PurchaseOrder, PurchaseOrderLine, StockRecord
from backend.app.schemas.line_item import LineItemCreate
from backend.services import inventory, line_items, procurement
from backend.services.errors import BusinessRuleError, InvalidArgumentError, NotFoundError


def _advance(db, po_id, *targets):
    for target in targets:
        procurement.advance_status(db, po_id, target)
        db.commit()


# ---------- status machine ----------
def test_new_order_is_pending_and_cannot_jump_to_completed(db_session, make_order):
    """
    GIVEN an order of 1500.00 placed today, expected in 10 days
    THEN it is created PENDING and cannot be completed directly
    """
    po = make_order(value="1500.00", expected_in_days=10)
    assert po.status == POStatus.pending

    with pytest.raises(BusinessRuleError, match="must pass through in-progress"):
        procurement.advance_status(db_session, po.id, POStatus.completed)

    db_session.rollback()
    assert db_session.get(PurchaseOrder, po.id).status == POStatus.pending


def test_full_lifecycle_stamps_delivery_date(db_session, make_order):
    po = make_order()

    _advance(db_session, po.id, POStatus.in_progress, POStatus.completed)

    po = db_session.get(PurchaseOrder, po.id)
    assert po.status == POStatus.completed
    assert po.delivered_on == date.today()


@pytest.mark.parametrize("target", list(POStatus))
def test_completed_order_is_immutable(db_session, make_order, target):
    po = make_order()
    _advance(db_session, po.id, POStatus.in_progress, POStatus.completed)

    with pytest.raises(BusinessRuleError, match="Completed orders cannot be modified"):
        procurement.advance_status(db_session, po.id, target)


def test_reverse_transition_is_rejected(db_session, make_order):
    po = make_order()
    _advance(db_session, po.id, POStatus.in_progress)

    with pytest.raises(BusinessRuleError, match="Invalid status transition"):
        procurement.advance_status(db_session, po.id, POStatus.pending)


def test_cancelled_is_terminal(db_session, make_order):
    po = make_order()
    _advance(db_session, po.id, POStatus.cancelled)

    with pytest.raises(BusinessRuleError):
        procurement.advance_status(db_session, po.id, POStatus.in_progress)


def test_transition_table_has_no_exit_from_terminal_states():
    assert procurement.ALLOWED_TRANSITIONS[POStatus.completed] == frozenset()
    assert procurement.ALLOWED_TRANSITIONS[POStatus.cancelled] == frozenset()
    assert POStatus.completed not in procurement.ALLOWED_TRANSITIONS[POStatus.pending]


def test_advance_unknown_order(db_session):
    with pytest.raises(NotFoundError):
        procurement.advance_status(db_session, 999, POStatus.in_progress)


# ---------- cascading delete ----------
def test_delete_with_audit_refuses_lot_with_quantity(db_session, make_order, make_lot, make_user):
    """
    GIVEN an order with one lot holding 5 units
    THEN the delete fails naming the lot and its quantity, and nothing is removed
    """
    actor = make_user("matheus", Role.purchasing)
    po = make_order()
    lot = make_lot(po.id, quantity=5)

    with pytest.raises(BusinessRuleError) as exc:
        procurement.delete_with_audit(db_session, po.id, actor, "duplicate order")

    assert f"lot #{lot.id}" in str(exc.value)
    assert "5" in str(exc.value)
    assert db_session.get(PurchaseOrder, po.id) is not None
    assert db_session.get(Lot, lot.id) is not None


def test_delete_with_audit_refuses_stock_record_with_quantity(
    db_session, make_order, make_lot, make_product, make_stock, make_user
):
    actor = make_user("matheus", Role.purchasing)
    product = make_product()
    po = make_order()
    lot = make_lot(po.id, quantity=0)
    sr = make_stock(product.id, lot.id, 3)

    with pytest.raises(BusinessRuleError, match="stock record"):
        procurement.delete_with_audit(db_session, po.id, actor, "wrong supplier")

    assert db_session.get(StockRecord, sr.id).quantity == 3
    assert db_session.get(Lot, lot.id) is not None


def test_delete_with_audit_removes_exhausted_lot_lines_and_order(
    db_session, make_order, make_lot, make_product, make_user
):
    """
    GIVEN an order with one exhausted lot, no stock record and one line item
    THEN the lot, the line item and the order are removed and an audit row is written
    """
    actor = make_user("matheus", Role.purchasing)
    product = make_product()
    po = make_order()
    lot = make_lot(po.id, quantity=0)
    line_items.create_line(
        db_session,
        LineItemCreate(po_id=po.id, product_id=product.id, quantity=4, unit_price="12.50"),
    )
    db_session.commit()
    po_id, lot_id = po.id, lot.id

    plan = procurement.delete_with_audit(db_session, po_id, actor, "entered twice")

    assert plan.lot_ids == [lot_id]
    assert plan.line_item_count == 1
    assert db_session.get(PurchaseOrder, po_id) is None
    assert db_session.get(Lot, lot_id) is None
    assert db_session.execute(select(PurchaseOrderLine)).scalars().all() == []

    entry = db_session.execute(select(AuditLog)).scalar_one()
    assert entry.actor_id == actor.id
    assert entry.entity_id == str(po_id)
    assert "entered twice" in entry.meta


def test_delete_with_audit_removes_empty_stock_records(
    db_session, make_order, make_lot, make_product, make_stock, make_user
):
    actor = make_user("matheus", Role.purchasing)
    product = make_product()
    po = make_order()
    lot = make_lot(po.id, quantity=0)
    sr = make_stock(product.id, lot.id, 2)
    inventory.remove_stock(db_session, product.id, lot.id, 2)
    db_session.commit()
    sr_id = sr.id

    plan = procurement.delete_with_audit(db_session, po.id, actor, "cleanup")

    assert plan.stock_record_ids == [sr_id]
    assert db_session.get(StockRecord, sr_id) is None


def test_mid_cascade_failure_rolls_back_earlier_lots(db_session, make_order, make_lot, make_user):
    """
    GIVEN an order whose first lot is exhausted and whose second lot still holds stock
    THEN the delete fails and the first lot, already processed, is still there
    """
    actor = make_user("matheus", Role.purchasing)
    po = make_order()
    first = make_lot(po.id, quantity=0, expires_on=date(2099, 1, 1))
    second = make_lot(po.id, quantity=7, expires_on=date(2099, 6, 1))

    with pytest.raises(BusinessRuleError, match=f"lot #{second.id}"):
        procurement.delete_with_audit(db_session, po.id, actor, "test")

    assert db_session.get(Lot, first.id) is not None
    assert db_session.get(Lot, second.id).quantity == 7
    assert db_session.get(PurchaseOrder, po.id) is not None
    assert db_session.execute(select(AuditLog)).scalars().all() == []


def test_completed_order_cannot_be_deleted(db_session, make_order, make_user):
    actor = make_user("matheus", Role.purchasing)
    po = make_order()
    _advance(db_session, po.id, POStatus.in_progress, POStatus.completed)

    with pytest.raises(BusinessRuleError, match="Completed orders cannot be removed"):
        procurement.delete_with_audit(db_session, po.id, actor, "late")

    assert db_session.get(PurchaseOrder, po.id) is not None


def test_delete_unknown_order(db_session, make_user):
    actor = make_user("matheus", Role.purchasing)
    with pytest.raises(NotFoundError):
        procurement.delete_with_audit(db_session, 4242, actor, "missing")


def test_check_removable_is_a_dry_run(db_session, make_order, make_lot):
    po = make_order()
    make_lot(po.id, quantity=0)
    blocking = make_lot(po.id, quantity=2)

    plan = procurement.check_removable(db_session, po.id)

    assert plan.removable is False
    assert f"lot #{blocking.id}" in plan.reason
    assert len(db_session.execute(select(Lot)).scalars().all()) == 2


@pytest.mark.parametrize("reason", ["", "   ", None])
def test_delete_with_audit_requires_a_reason(db_session, make_order, make_user, reason):
    actor = make_user("matheus", Role.purchasing)
    po = make_order()

    with pytest.raises(InvalidArgumentError, match="Removal reason is required"):
        procurement.delete_with_audit(db_session, po.id, actor, reason)

    assert db_session.get(PurchaseOrder, po.id) is not None
    assert db_session.execute(select(AuditLog)).scalars().all() == []


def test_delete_with_audit_stores_trimmed_reason(db_session, make_order, make_user):
    actor = make_user("matheus", Role.purchasing)
    po = make_order()

    procurement.delete_with_audit(db_session, po.id, actor, "  entered twice  ")

    assert '"reason": "entered twice"' in db_session.execute(select(AuditLog)).scalar_one().meta
