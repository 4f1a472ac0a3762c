from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import uuid4

from services.orders.app.db.models import Order, utcnow
from services.orders.app.models.order import OrderStatus
from services.orders.app.services.splitter import OrderDraft
from sqlalchemy.orm import Query, Session, joinedload


@dataclass(frozen=True, slots=True)
class OrderCriteria:
    customer_id: str | None = None
    store_id: str | None = None
    status: OrderStatus | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None


class OrderRepository(Protocol):
    def create(self, customer_id: str, draft: OrderDraft, note: str) -> Order: ...

    def find_by_id(self, order_id: str, populate: Iterable[str] = ()) -> Order | None: ...

    def find(self, criteria: OrderCriteria, populate: Iterable[str] = ()) -> list[Order]: ...

    def find_earliest(self, criteria: OrderCriteria) -> Order | None: ...

    def transition(
        self,
        order_id: str,
        to_status: OrderStatus,
        *,
        estimated_delivery_time: str | None = None,
    ) -> bool: ...


_POPULATE = {
    "customer": Order.customer,
    "store": Order.store,
}


class SqlOrderRepository:
    def __init__(self, db: Session) -> None:
        self._db = db

    def create(self, customer_id: str, draft: OrderDraft, note: str) -> Order:
        order = Order(
            id=uuid4().hex,
            customer_id=customer_id,
            store_id=draft.store_id,
            items_json=[i.to_json() for i in draft.items],
            total_price=draft.total_price,
            comments=note,
            status=OrderStatus.PENDING.value,
            confirmed=False,
            estimated_delivery_time=None,
            created_at=utcnow(),
        )
        self._db.add(order)
        try:
            self._db.commit()
        except Exception:
            self._db.rollback()
            raise

        self._db.refresh(order)
        return order

    def find_by_id(self, order_id: str, populate: Iterable[str] = ()) -> Order | None:
        q = self._populate(self._db.query(Order), populate)
        return q.filter(Order.id == order_id).first()

    def find(self, criteria: OrderCriteria, populate: Iterable[str] = ()) -> list[Order]:
        q = self._populate(self._filtered(criteria), populate)
        return q.order_by(Order.created_at.desc()).all()

    def find_earliest(self, criteria: OrderCriteria) -> Order | None:
        return self._filtered(criteria).order_by(Order.created_at.asc()).first()

    def transition(
        self,
        order_id: str,
        to_status: OrderStatus,
        *,
        estimated_delivery_time: str | None = None,
    ) -> bool:
        """Move a pending order to ``to_status``.

        The status check and the write are one conditional UPDATE, so two concurrent
        transitions on the same order cannot both succeed. Returns False when the order
        was no longer pending.
        """

        values: dict = {
            Order.status: to_status.value,
            Order.decided_at: utcnow(),
        }
        if to_status == OrderStatus.CONFIRMED:
            values[Order.confirmed] = True
            values[Order.estimated_delivery_time] = estimated_delivery_time

        try:
            updated = (
                self._db.query(Order)
                .filter(Order.id == order_id, Order.status == OrderStatus.PENDING.value)
                .update(values, synchronize_session=False)
            )
            self._db.commit()
        except Exception:
            self._db.rollback()
            raise

        return updated == 1

    def _filtered(self, criteria: OrderCriteria) -> Query:
        q = self._db.query(Order)
        if criteria.customer_id is not None:
            q = q.filter(Order.customer_id == criteria.customer_id)
        if criteria.store_id is not None:
            q = q.filter(Order.store_id == criteria.store_id)
        if criteria.status is not None:
            q = q.filter(Order.status == criteria.status.value)
        if criteria.created_from is not None:
            q = q.filter(Order.created_at >= criteria.created_from)
        if criteria.created_to is not None:
            q = q.filter(Order.created_at <= criteria.created_to)
        return q

    @staticmethod
    def _populate(q: Query, populate: Iterable[str]) -> Query:
        for name in populate:
            q = q.options(joinedload(_POPULATE[name]))
        return q
