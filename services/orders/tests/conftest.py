from __future__ import annotations

from collections.abc import Callable, Generator
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from uuid import uuid4

import pytest
from services.orders.app.db.models import Order, Store, User
from services.orders.app.services.notifier_mock import MockNotificationSink
from sqlalchemy.orm import Session


@pytest.fixture()
def db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Session, None, None]:
    db_path = tmp_path / "marketplace_test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("MARKET_DB_AUTO_CREATE", "true")

    from services.orders.app.db.database import db_session
    from services.orders.app.db.init_db import init_db

    init_db()
    session = db_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def seeded(db: Session) -> Session:
    """Two customers, two sellers with one store each, an admin, and a store whose owner
    account no longer exists."""

    db.add_all(
        [
            User(
                id="c-1",
                username="alice",
                email="alice@example.com",
                role="customer",
                customer_region="North",
                customer_street_address="12 Elm Street",
                customer_floor="3",
                customer_doorbell="Alice",
                customer_mobile_phone="+15550001",
            ),
            User(id="c-2", username="bob", email="bob@example.com", role="customer"),
            User(id="s-1", username="seller-a", email="seller-a@example.com", role="seller"),
            User(id="s-2", username="seller-b", email="seller-b@example.com", role="seller"),
            User(id="s-3", username="no-store", email="no-store@example.com", role="seller"),
            User(id="a-1", username="admin", email="admin@example.com", role="admin"),
        ]
    )
    db.flush()
    db.add_all(
        [
            Store(id="store-a", store_name="Corner Books", owner_id="s-1"),
            Store(id="store-b", store_name="Harbor Books", owner_id="s-2"),
            Store(id="store-orphan", store_name="Orphan Books", owner_id="s-gone"),
        ]
    )
    db.commit()
    return db


@pytest.fixture()
def make_order(seeded: Session) -> Callable[..., Order]:
    def _make(
        *,
        customer_id: str = "c-1",
        store_id: str = "store-a",
        created_at: datetime,
        total: str = "10.00",
        status: str = "PENDING",
    ) -> Order:
        order = Order(
            id=uuid4().hex,
            customer_id=customer_id,
            store_id=store_id,
            items_json=[
                {"product_id": "p-1", "title": "Book", "quantity": 1, "unit_price": total}
            ],
            total_price=Decimal(total),
            comments="",
            status=status,
            confirmed=status == "CONFIRMED",
            created_at=created_at,
        )
        seeded.add(order)
        seeded.commit()
        return order

    return _make


@pytest.fixture()
def sink() -> MockNotificationSink:
    return MockNotificationSink()
