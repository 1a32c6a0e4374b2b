from datetime import date, timedelta
from decimal import Decimal

import pytest

from backend.app.db.models.core_types import MovementType
from backend.app.schemas.accounting import AccountingMovementCreate, AccountingMovementUpdate
from backend.app.schemas.product import ProductCreate, ProductUpdate
from backend.app.schemas.supplier import SupplierCreate
from backend.app.schemas.warehouse import WarehouseCreate
from backend.services import accounting, products, suppliers, warehouses
from backend.services.errors import BusinessRuleError, InvalidArgumentError, NotFoundError


def _product_payload(**overrides):
    data = dict(
        name="Dipirona 500mg",
        description="analgesic",
        barcode="7891234567890",
        min_stock=10,
        max_stock=100,
        reorder_point=20,
    )
    data.update(overrides)
    return data


# ---------- products ----------
@pytest.mark.parametrize(
    "overrides",
    [
        {"min_stock": 50, "max_stock": 50, "reorder_point": 50},
        {"reorder_point": 5},
        {"reorder_point": 150},
    ],
)
def test_product_threshold_rules(db_session, overrides):
    with pytest.raises(BusinessRuleError):
        products.create_product(db_session, ProductCreate(**_product_payload(**overrides)))


def test_product_thresholds_must_be_positive(db_session):
    with pytest.raises(InvalidArgumentError):
        products.create_product(db_session, ProductCreate(**_product_payload(min_stock=0)))


def test_product_barcode_is_unique(db_session, make_product):
    make_product(barcode="7890000000001")
    with pytest.raises(BusinessRuleError, match="barcode"):
        products.create_product(db_session, ProductCreate(**_product_payload(barcode="7890000000001")))


def test_product_update_keeps_own_barcode(db_session, make_product):
    p = make_product(barcode="7890000000002")
    updated = products.update_product(
        db_session,
        p.id,
        ProductUpdate(**_product_payload(barcode="7890000000002", name="Renamed")),
    )
    assert updated.name == "Renamed"


def test_product_search_and_lookup(db_session, make_product):
    make_product(name="Amoxicilina", barcode="7890000000003")
    make_product(name="Dipirona", barcode="7890000000004")

    assert [p.name for p in products.search_by_name(db_session, "amoxi")] == ["Amoxicilina"]
    assert products.get_by_barcode(db_session, "7890000000004").name == "Dipirona"
    with pytest.raises(NotFoundError):
        products.get_by_barcode(db_session, "nope")


def test_reorder_and_low_stock_lists(db_session, make_product, make_order, make_lot, make_stock):
    """
    GIVEN min=10, reorder=20 and three products stocked at 5, 15 and 50
    THEN reorder lists the first two and low-stock only the first
    """
    po = make_order()
    critical = make_product(name="A critical")
    reorder = make_product(name="B reorder")
    healthy = make_product(name="C healthy")
    for product, qty in ((critical, 5), (reorder, 15), (healthy, 50)):
        make_stock(product.id, make_lot(po.id).id, qty)

    assert [p.id for p in products.list_to_reorder(db_session)] == [critical.id, reorder.id]
    assert [p.id for p in products.list_low_stock(db_session)] == [critical.id]


def test_product_requires_existing_warehouse(db_session):
    with pytest.raises(NotFoundError, match="Warehouse"):
        products.create_product(db_session, ProductCreate(**_product_payload(warehouse_id=77)))


# ---------- suppliers / warehouses ----------
def test_supplier_crud_and_search(db_session):
    s = suppliers.create_supplier(
        db_session,
        SupplierCreate(legal_name="Pharma Ltda", representative="Joana Silva", representative_contact="11999990000"),
    )
    db_session.commit()

    assert [x.id for x in suppliers.search_by_representative(db_session, "joana")] == [s.id]
    with pytest.raises(BusinessRuleError):
        suppliers.create_supplier(db_session, SupplierCreate(legal_name="Pharma Ltda"))

    suppliers.delete_supplier(db_session, s.id)
    db_session.commit()
    assert suppliers.list_suppliers(db_session) == []


def test_warehouse_names_are_unique(db_session):
    warehouses.create_warehouse(db_session, WarehouseCreate(name="Central"))
    db_session.commit()
    with pytest.raises(BusinessRuleError):
        warehouses.create_warehouse(db_session, WarehouseCreate(name="Central"))


# ---------- accounting ----------
def test_movement_total_is_computed(db_session, make_product, make_order):
    product = make_product()
    po = make_order()

    m = accounting.create_movement(
        db_session,
        AccountingMovementCreate(
            product_id=product.id,
            po_id=po.id,
            movement_type=MovementType.inbound,
            quantity=4,
            unit_value=Decimal("2.25"),
        ),
    )
    db_session.commit()

    assert m.total_value == Decimal("9.00")
    assert m.movement_date == date.today()
    assert [x.id for x in accounting.list_by_order(db_session, po.id)] == [m.id]

    updated = accounting.update_movement(
        db_session,
        m.id,
        AccountingMovementUpdate(
            product_id=product.id,
            movement_type=MovementType.outbound,
            quantity=2,
            unit_value=Decimal("2.25"),
        ),
    )
    assert updated.total_value == Decimal("4.50")


def test_movement_requires_positive_quantity(db_session, make_product):
    product = make_product()
    with pytest.raises(InvalidArgumentError):
        accounting.create_movement(
            db_session,
            AccountingMovementCreate(product_id=product.id, movement_type=MovementType.inbound, quantity=0),
        )


def test_period_sum(db_session, make_product):
    product = make_product()
    today = date.today()
    for days_ago, unit in ((1, "10.00"), (3, "5.00"), (40, "100.00")):
        accounting.create_movement(
            db_session,
            AccountingMovementCreate(
                product_id=product.id,
                movement_type=MovementType.inbound,
                movement_date=today - timedelta(days=days_ago),
                quantity=1,
                unit_value=Decimal(unit),
            ),
        )
    db_session.commit()

    assert accounting.sum_period(db_session, today - timedelta(days=7), today) == Decimal("15.00")
    assert len(accounting.list_by_period(db_session, today - timedelta(days=7), today)) == 2
    with pytest.raises(InvalidArgumentError):
        accounting.sum_period(db_session, today, today - timedelta(days=1))
