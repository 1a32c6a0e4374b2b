from datetime import date, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from backend.app.api.deps import get_db
from backend.app.db.base import Base
from backend.app.db.models import models_v1  # noqa: F401  (registers the tables)
from backend.app.db.models.core_types import Role
from backend.app.db.models.models_v1 import AccessGrant
from backend.app.db.seed import DEFAULT_GRANTS
from backend.app.main import app
from backend.app.schemas.lot import LotCreate
from backend.app.schemas.product import ProductCreate
from backend.app.schemas.purchase_order import PurchaseOrderCreate
from backend.app.schemas.user import UserCreate
from backend.services import inventory, lots, products, purchase_orders, users

PASSWORD = "s3cret-pass"


@pytest.fixture(scope="function")
def engine():
    """
    In-memory SQLite, one per test.
    StaticPool keeps the single connection alive across threads (TestClient).
    """
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(eng, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        eng.dispose()


@pytest.fixture(scope="function")
def db_session(engine) -> Session:
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()


# ---------- factories ----------
@pytest.fixture
def make_product(db_session):
    counter = {"n": 0}

    def _make(min_stock=10, max_stock=100, reorder_point=20, **kw):
        counter["n"] += 1
        payload = ProductCreate(
            name=kw.pop("name", f"Product {counter['n']}"),
            description=kw.pop("description", "test product"),
            barcode=kw.pop("barcode", f"789{counter['n']:010d}"),
            min_stock=min_stock,
            max_stock=max_stock,
            reorder_point=reorder_point,
            **kw,
        )
        p = products.create_product(db_session, payload)
        db_session.commit()
        return p

    return _make


@pytest.fixture
def make_order(db_session):
    def _make(value="1500.00", placed_on=None, expected_in_days=10):
        placed_on = placed_on or date.today()
        po = purchase_orders.create_order(
            db_session,
            PurchaseOrderCreate(
                value=Decimal(value),
                placed_on=placed_on,
                expected_on=placed_on + timedelta(days=expected_in_days),
            ),
        )
        db_session.commit()
        return po

    return _make


@pytest.fixture
def make_lot(db_session):
    def _make(po_id, quantity=0, expires_on=None):
        lot = lots.create_lot(
            db_session,
            LotCreate(po_id=po_id, quantity=quantity, expires_on=expires_on or date.today() + timedelta(days=90)),
        )
        db_session.commit()
        return lot

    return _make


@pytest.fixture
def make_stock(db_session):
    def _make(product_id, lot_id, quantity):
        sr = inventory.add_stock(db_session, product_id, lot_id, quantity)
        db_session.commit()
        return sr

    return _make


# ---------- auth / API ----------
@pytest.fixture
def make_user(db_session):
    def _make(login, *roles: Role, password=PASSWORD):
        u = users.create_user(
            db_session,
            UserCreate(login=login, password=password, full_name=login.title(), roles=list(roles)),
        )
        db_session.commit()
        return u

    return _make


@pytest.fixture
def default_grants(db_session):
    for role, prefixes in DEFAULT_GRANTS.items():
        for prefix in prefixes:
            db_session.add(AccessGrant(role=role, path_prefix=prefix))
    db_session.commit()


@pytest.fixture
def client(db_session, default_grants):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin_auth(make_user):
    make_user("admin", Role.admin)
    return ("admin", PASSWORD)


@pytest.fixture
def purchasing_auth(make_user):
    make_user("purchasing", Role.purchasing)
    return ("purchasing", PASSWORD)


@pytest.fixture
def stock_auth(make_user):
    make_user("stock", Role.stock_movement)
    return ("stock", PASSWORD)
