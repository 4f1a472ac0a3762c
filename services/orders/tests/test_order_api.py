from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from services.orders.app.db.models import Store, User

CUSTOMER = {"X-Actor-Id": "c-1", "X-Actor-Role": "customer"}
SELLER_A = {"X-Actor-Id": "s-1", "X-Actor-Role": "seller"}
SELLER_B = {"X-Actor-Id": "s-2", "X-Actor-Role": "seller"}
ADMIN = {"X-Actor-Id": "a-1", "X-Actor-Role": "admin"}


@pytest.fixture()
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    db_path = tmp_path / "marketplace_api.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("MARKET_DB_AUTO_CREATE", "true")
    monkeypatch.setenv("MARKET_NOTIFIER", "mock")

    from services.orders.app.db.database import db_session
    from services.orders.app.main import app
    from services.orders.app.services.notifier_factory import get_mock_sink

    get_mock_sink().reset()

    with TestClient(app) as c:
        db = db_session()
        try:
            db.add_all(
                [
                    User(id="c-1", username="alice", email="alice@example.com", role="customer"),
                    User(id="s-1", username="a", email="seller-a@example.com", role="seller"),
                    User(id="s-2", username="b", email="seller-b@example.com", role="seller"),
                    User(id="a-1", username="admin", email="admin@example.com", role="admin"),
                ]
            )
            db.flush()
            db.add_all(
                [
                    Store(id="store-a", store_name="Corner Books", owner_id="s-1"),
                    Store(id="store-b", store_name="Harbor Books", owner_id="s-2"),
                ]
            )
            db.commit()
        finally:
            db.close()
        yield c


def _place_cart(client: TestClient) -> dict:
    resp = client.post(
        "/v1/orders/complete",
        headers=CUSTOMER,
        json={
            "items": [
                {
                    "product_id": "p-1",
                    "store_id": "store-a",
                    "title": "Dune",
                    "price": 10,
                    "quantity": 2,
                },
                {
                    "product_id": "p-2",
                    "store_id": "store-b",
                    "title": "Emma",
                    "price": "5",
                    "quantity": 3,
                },
            ],
            "customer_note": "Ring twice",
        },
    )
    assert resp.status_code == 201
    return resp.json()


def _order_for_store(client: TestClient, headers: dict) -> dict:
    resp = client.get("/v1/orders/seller", headers=headers)
    assert resp.status_code == 200
    (order,) = resp.json()
    return order


def test_complete_order_creates_one_order_per_store(client: TestClient) -> None:
    from services.orders.app.services.notifier_factory import get_mock_sink

    data = _place_cart(client)

    assert sorted(o["store_name"] for o in data["orders"]) == ["Corner Books", "Harbor Books"]
    assert data["skipped"] == []

    mine = client.get("/v1/orders", headers=CUSTOMER).json()
    totals = {o["store"]["store_name"]: Decimal(str(o["total_price"])) for o in mine}
    assert totals == {"Corner Books": Decimal("20"), "Harbor Books": Decimal("15")}
    assert all(o["customer"] is None for o in mine)

    destinations = sorted(n.destination_email for n in get_mock_sink().sent)
    assert destinations == ["seller-a@example.com", "seller-b@example.com"]


def test_complete_order_rejects_invalid_cart(client: TestClient) -> None:
    resp = client.post(
        "/v1/orders/complete",
        headers=CUSTOMER,
        json={"items": [{"product_id": "p", "store_id": "store-a", "price": 1, "quantity": 0}]},
    )
    assert resp.status_code == 400
    assert resp.json()["kind"] == "invalid_cart"

    assert client.get("/v1/orders", headers=CUSTOMER).json() == []


def test_complete_order_reports_skipped_store(client: TestClient) -> None:
    resp = client.post(
        "/v1/orders/complete",
        headers=CUSTOMER,
        json={
            "items": [
                {"product_id": "p", "store_id": "store-a", "price": 1, "quantity": 1},
                {"product_id": "q", "store_id": "store-zzz", "price": 1, "quantity": 1},
            ]
        },
    )
    assert resp.status_code == 201
    data = resp.json()
    assert len(data["orders"]) == 1
    assert data["skipped"][0]["kind"] == "store_not_found"


def test_missing_identity_is_forbidden(client: TestClient) -> None:
    resp = client.get("/v1/orders")
    assert resp.status_code == 403
    assert resp.json()["kind"] == "forbidden"


def test_confirm_flow_and_repeat(client: TestClient) -> None:
    _place_cart(client)
    order = _order_for_store(client, SELLER_A)
    assert order["customer"]["username"] == "alice"
    assert order["store"] is None

    resp = client.put(
        f"/v1/orders/{order['id']}/confirm",
        headers=SELLER_A,
        json={"estimated_delivery_time": "30 minutes"},
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "CONFIRMED"
    assert resp.json()["warnings"] == []

    detail = client.get(f"/v1/orders/{order['id']}", headers=CUSTOMER).json()
    assert detail["confirmed"] is True
    assert detail["estimated_delivery_time"] == "30 minutes"

    again = client.put(
        f"/v1/orders/{order['id']}/confirm",
        headers=SELLER_A,
        json={"estimated_delivery_time": "1 hour"},
    )
    assert again.status_code == 409
    assert again.json()["kind"] == "invalid_state"


def test_deny_by_other_seller_is_forbidden(client: TestClient) -> None:
    _place_cart(client)
    order = _order_for_store(client, SELLER_A)

    resp = client.put(f"/v1/orders/{order['id']}/deny", headers=SELLER_B)
    assert resp.status_code == 403
    assert resp.json()["kind"] == "forbidden"

    ok = client.put(f"/v1/orders/{order['id']}/deny", headers=SELLER_A)
    assert ok.status_code == 200
    assert ok.json()["status"] == "DENIED"

    detail = client.get(f"/v1/orders/{order['id']}", headers=ADMIN).json()
    assert detail["denied"] is True
    assert detail["confirmed"] is False


def test_unknown_order_is_404(client: TestClient) -> None:
    resp = client.put("/v1/orders/nope/deny", headers=SELLER_A)
    assert resp.status_code == 404
    assert resp.json()["kind"] == "not_found"


def test_confirm_requires_estimate(client: TestClient) -> None:
    resp = client.put("/v1/orders/any/confirm", headers=SELLER_A, json={})
    assert resp.status_code == 422


def test_admin_listings(client: TestClient) -> None:
    _place_cart(client)
    order = _order_for_store(client, SELLER_A)
    client.put(
        f"/v1/orders/{order['id']}/confirm",
        headers=SELLER_A,
        json={"estimated_delivery_time": "today"},
    )

    all_orders = client.get("/v1/admin/orders/all", headers=ADMIN)
    assert all_orders.status_code == 200
    assert len(all_orders.json()) == 2

    pending = client.get("/v1/admin/orders/pending", headers=ADMIN).json()
    assert [o["store"]["store_name"] for o in pending] == ["Harbor Books"]

    assert client.get("/v1/admin/orders/all", headers=CUSTOMER).status_code == 403


def test_listing_date_filters(client: TestClient) -> None:
    _place_cart(client)

    assert len(client.get("/v1/orders", headers=CUSTOMER, params={"from": "junk"}).json()) == 2
    assert client.get("/v1/orders", headers=CUSTOMER, params={"to": "2000-01-01"}).json() == []

    bad = client.get("/v1/orders", headers=CUSTOMER, params={"to": "someday"})
    assert bad.status_code == 400
    assert bad.json()["kind"] == "invalid_request"


def test_internal_errors_do_not_leak(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{tmp_path / 'leak.db'}")

    from services.orders.app.db.deps import get_query_service
    from services.orders.app.main import app

    class _BrokenQuery:
        def list_orders(self, actor, from_, to):
            raise RuntimeError("connection to postgres://user:secret@db failed")

    app.dependency_overrides[get_query_service] = lambda: _BrokenQuery()
    try:
        with TestClient(app, raise_server_exceptions=False) as c:
            resp = c.get("/v1/orders", headers=CUSTOMER)
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 500
    assert resp.json() == {"kind": "internal", "detail": "Internal Server Error"}
    assert "secret" not in resp.text
