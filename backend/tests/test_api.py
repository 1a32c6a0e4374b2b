from datetime import date, timedelta

from sqlalchemy import select

from backend.app.db.models.core_types import POStatus, Role
from backend.app.db.models.models_v1 import AuditLog, PurchaseOrder


def _create_order(client, auth, value="1500.00", expected_in_days=10):
    today = date.today()
    res = client.post(
        "/v1/purchase-orders",
        json={
            "value": value,
            "placed_on": today.isoformat(),
            "expected_on": (today + timedelta(days=expected_in_days)).isoformat(),
        },
        auth=auth,
    )
    assert res.status_code == 201, res.text
    return res.json()["data"]


def test_health_is_public(client):
    res = client.get("/v1/health")
    assert res.status_code == 200
    assert res.json()["status"] == "UP"

    detailed = client.get("/v1/health/detailed")
    assert detailed.json()["database"]["status"] == "UP"


def test_missing_or_bad_credentials_give_401(client, purchasing_auth):
    assert client.get("/v1/purchase-orders").status_code == 401

    res = client.get("/v1/purchase-orders", auth=("purchasing", "wrong"))
    assert res.status_code == 401
    body = res.json()
    assert body["success"] is False
    assert "data" not in body


def test_role_without_grant_gets_403(client, stock_auth):
    res = client.get("/v1/purchase-orders", auth=stock_auth)
    assert res.status_code == 403
    assert res.json()["success"] is False


def test_ungranted_paths_are_open_to_authenticated_users(client, stock_auth):
    assert client.get("/v1/suppliers", auth=stock_auth).status_code == 200


def test_envelope_and_pagination(client, purchasing_auth):
    for _ in range(3):
        _create_order(client, purchasing_auth)

    res = client.get("/v1/purchase-orders", params={"page": 0, "size": 2}, auth=purchasing_auth)
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert "timestamp" in body
    assert "message" not in body
    assert len(body["data"]) == 2
    assert body["pagination"] == {
        "page": 0,
        "size": 2,
        "total_elements": 3,
        "total_pages": 2,
        "first": True,
        "last": False,
    }


def test_create_order_scenario_and_direct_completion_rejected(client, purchasing_auth):
    """
    GIVEN a 1500.00 order placed today and expected in 10 days
    THEN it is created PENDING and PATCHing it straight to COMPLETED gives 422
    """
    po = _create_order(client, purchasing_auth)
    assert po["status"] == POStatus.pending.value
    assert "delivered_on" not in po

    res = client.patch(f"/v1/purchase-orders/{po['id']}/status", params={"target": "COMPLETED"}, auth=purchasing_auth)
    assert res.status_code == 422
    assert "must pass through in-progress" in res.json()["message"]

    ok = client.patch(f"/v1/purchase-orders/{po['id']}/status", params={"target": "IN_PROGRESS"}, auth=purchasing_auth)
    assert ok.status_code == 200
    assert ok.json()["data"]["status"] == "IN_PROGRESS"


def test_validation_errors_are_400_with_field_map(client, purchasing_auth):
    res = client.post("/v1/purchase-orders", json={"value": "abc"}, auth=purchasing_auth)
    assert res.status_code == 400
    body = res.json()
    assert body["message"] == "Validation failed"
    assert "value" in body["data"]
    assert "expected_on" in body["data"]


def test_service_argument_errors_are_400(client, purchasing_auth):
    today = date.today()
    res = client.post(
        "/v1/purchase-orders",
        json={"value": "-1", "expected_on": today.isoformat()},
        auth=purchasing_auth,
    )
    assert res.status_code == 400


def test_unknown_order_is_404(client, purchasing_auth):
    res = client.get("/v1/purchase-orders/9999", auth=purchasing_auth)
    assert res.status_code == 404
    assert res.json()["message"] == "Purchase order not found with id: '9999'"


def test_plain_delete_with_dependents_is_409(client, db_session, purchasing_auth, stock_auth):
    po = _create_order(client, purchasing_auth)
    lot = client.post("/v1/lots", json={"po_id": po["id"], "quantity": 0}, auth=stock_auth)
    assert lot.status_code == 201, lot.text

    res = client.delete(f"/v1/purchase-orders/{po['id']}", auth=purchasing_auth)
    assert res.status_code == 409
    assert res.json()["message"] == (
        "Data integrity violation: purchase order removal conflicts with existing or related records"
    )
    assert db_session.get(PurchaseOrder, po["id"]) is not None


def test_authenticated_delete_with_stocked_lot_is_422(client, purchasing_auth, stock_auth):
    po = _create_order(client, purchasing_auth)
    lot = client.post("/v1/lots", json={"po_id": po["id"], "quantity": 5}, auth=stock_auth).json()["data"]

    check = client.get(f"/v1/purchase-orders/{po['id']}/removal-check", auth=purchasing_auth).json()["data"]
    assert check["removable"] is False

    res = client.request(
        "DELETE",
        f"/v1/purchase-orders/{po['id']}/authenticated",
        json={"login": "purchasing", "password": purchasing_auth[1], "reason": "duplicate"},
        auth=purchasing_auth,
    )
    assert res.status_code == 422
    assert f"lot #{lot['id']}" in res.json()["message"]
    assert client.get(f"/v1/lots/{lot['id']}", auth=stock_auth).status_code == 200


def test_authenticated_delete_bad_confirmation_is_401(client, purchasing_auth):
    po = _create_order(client, purchasing_auth)

    res = client.request(
        "DELETE",
        f"/v1/purchase-orders/{po['id']}/authenticated",
        json={"login": "purchasing", "password": "nope", "reason": "duplicate"},
        auth=purchasing_auth,
    )
    assert res.status_code == 401


def test_authenticated_delete_cascades_and_audits(client, db_session, purchasing_auth, stock_auth):
    po = _create_order(client, purchasing_auth)
    client.post("/v1/lots", json={"po_id": po["id"], "quantity": 0}, auth=stock_auth)

    res = client.request(
        "DELETE",
        f"/v1/purchase-orders/{po['id']}/authenticated",
        json={"login": "purchasing", "password": purchasing_auth[1], "reason": "entered twice"},
        auth=purchasing_auth,
    )
    assert res.status_code == 200, res.text
    assert res.json()["data"]["lots"] == 1
    assert client.get(f"/v1/purchase-orders/{po['id']}", auth=purchasing_auth).status_code == 404
    assert db_session.execute(select(AuditLog)).scalar_one().action == "purchase_order.delete"


def test_authenticated_delete_requires_a_reason(client, db_session, purchasing_auth):
    po = _create_order(client, purchasing_auth)

    res = client.request(
        "DELETE",
        f"/v1/purchase-orders/{po['id']}/authenticated",
        json={"login": "purchasing", "password": purchasing_auth[1], "reason": "   "},
        auth=purchasing_auth,
    )
    assert res.status_code == 400
    assert "reason" in res.json()["data"]
    assert db_session.get(PurchaseOrder, po["id"]) is not None
    assert db_session.execute(select(AuditLog)).scalars().all() == []


def test_lots_by_expiry_date(client, purchasing_auth, stock_auth):
    po = _create_order(client, purchasing_auth)
    expires_on = (date.today() + timedelta(days=90)).isoformat()
    lot = client.post("/v1/lots", json={"po_id": po["id"], "expires_on": expires_on}, auth=stock_auth).json()["data"]
    client.post("/v1/lots", json={"po_id": po["id"]}, auth=stock_auth)

    res = client.get(f"/v1/lots/by-expiry/{expires_on}", auth=stock_auth)
    assert res.status_code == 200
    assert [l["id"] for l in res.json()["data"]] == [lot["id"]]


def test_stock_withdrawal_over_available_is_422(client, make_product, purchasing_auth, stock_auth):
    product = make_product()
    po = _create_order(client, purchasing_auth)
    lot = client.post("/v1/lots", json={"po_id": po["id"]}, auth=stock_auth).json()["data"]
    movement = {"product_id": product.id, "lot_id": lot["id"], "quantity": 12}
    assert client.post("/v1/stock/entries", json=movement, auth=stock_auth).json()["data"]["quantity"] == 12

    res = client.post("/v1/stock/withdrawals", json={**movement, "quantity": 20}, auth=stock_auth)
    assert res.status_code == 422
    assert res.json()["message"] == "Insufficient stock. Available: 12, requested: 20"

    records = client.get(f"/v1/stock/by-lot/{lot['id']}", auth=stock_auth).json()["data"]
    assert [r["quantity"] for r in records] == [12]


def test_admin_manages_users_and_grants(client, admin_auth):
    res = client.post(
        "/v1/users",
        json={"login": "yuri", "password": "pw", "full_name": "Yuri", "roles": [Role.stock_movement.value]},
        auth=admin_auth,
    )
    assert res.status_code == 201, res.text
    assert res.json()["data"]["roles"] == ["stock_movement"]
    assert "password" not in res.json()["data"]
    assert "password_hash" not in res.json()["data"]

    assert client.get("/v1/users", auth=("yuri", "pw")).status_code == 403

    grants = client.get("/v1/access-grants", auth=admin_auth).json()["data"]
    assert {"role": "purchasing", "path_prefix": "/v1/purchase-orders"} in [
        {"role": g["role"], "path_prefix": g["path_prefix"]} for g in grants
    ]
