from __future__ import annotations

from dataclasses import replace
from datetime import datetime, time, timezone
from decimal import Decimal

from services.orders.app.db.models import Order
from services.orders.app.models.actor import Actor
from services.orders.app.models.order import (
    CustomerContact,
    CustomerDeliveryProfile,
    OrderItemOut,
    OrderOut,
    OrderStatus,
    StoreSummary,
)
from services.orders.app.services.directory import Directory
from services.orders.app.services.errors import ForbiddenError, InvalidRequestError, NotFoundError
from services.orders.app.services.policy import Projection, RolePolicy, policy_for
from services.orders.app.services.repository import OrderCriteria, OrderRepository

_END_OF_DAY = time(23, 59, 59, 999000)

_POPULATE = {
    Projection.STORE: ("store",),
    Projection.CUSTOMER: ("customer",),
    Projection.ADMIN: ("store", "customer"),
}


class OrderQueryService:
    def __init__(self, repository: OrderRepository, directory: Directory) -> None:
        self._repo = repository
        self._directory = directory

    def list_orders(
        self, actor: Actor, from_: str | None = None, to: str | None = None
    ) -> list[OrderOut]:
        """List the actor's own orders (customer) or their store's orders (seller).

        ``from_`` is parsed tolerantly: blank or unparseable values fall back to the
        creation time of the earliest order in scope. ``to`` includes the whole day.
        """

        policy = policy_for(actor)
        criteria = policy.listing_criteria(self._directory)
        return self._list_scoped(policy, criteria, from_, to)

    def list_seller_orders(
        self, actor: Actor, from_: str | None = None, to: str | None = None
    ) -> list[OrderOut]:
        policy = policy_for(actor)
        policy.require_store_listing()
        criteria = policy.listing_criteria(self._directory)
        return self._list_scoped(policy, criteria, from_, to)

    def list_all_orders(self, actor: Actor) -> list[OrderOut]:
        policy = policy_for(actor)
        policy.require_admin_listing()
        orders = self._repo.find(OrderCriteria(), populate=_POPULATE[policy.projection])
        return [to_order_out(o, policy.projection) for o in orders]

    def list_pending_orders(self, actor: Actor) -> list[OrderOut]:
        policy = policy_for(actor)
        policy.require_admin_listing()
        orders = self._repo.find(
            OrderCriteria(status=OrderStatus.PENDING), populate=_POPULATE[policy.projection]
        )
        return [to_order_out(o, policy.projection) for o in orders]

    def get_order(self, actor: Actor, order_id: str) -> OrderOut:
        policy = policy_for(actor)
        order = self._repo.find_by_id(order_id, populate=("store", "customer"))
        if order is None:
            raise NotFoundError(order_id)

        if not policy.can_read(order):
            raise ForbiddenError("You do not have access to this order")

        return to_order_out(order, policy.projection)

    def _list_scoped(
        self,
        policy: RolePolicy,
        criteria: OrderCriteria,
        from_: str | None,
        to: str | None,
    ) -> list[OrderOut]:
        created_from = parse_from_date(from_)
        if created_from is None:
            earliest = self._repo.find_earliest(criteria)
            if earliest is not None:
                created_from = earliest.created_at

        created_to = parse_to_date(to)

        scoped = replace(criteria, created_from=created_from, created_to=created_to)
        orders = self._repo.find(scoped, populate=_POPULATE[policy.projection])
        return [to_order_out(o, policy.projection) for o in orders]


def _parse_datetime(value: str) -> datetime | None:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _as_utc(parsed: datetime) -> datetime:
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_from_date(raw: str | None) -> datetime | None:
    """Lower bound for a listing; None means "use the earliest order in scope".

    Unparseable input is ignored on purpose, matching how clients send partial filters.
    """

    value = (raw or "").strip()
    if not value:
        return None
    parsed = _parse_datetime(value)
    return _as_utc(parsed) if parsed is not None else None


def parse_to_date(raw: str | None) -> datetime | None:
    """Upper bound for a listing: the end of the calendar day the caller wrote."""

    value = (raw or "").strip()
    if not value:
        return None

    parsed = _parse_datetime(value)
    if parsed is None:
        raise InvalidRequestError(f"Invalid 'to' date: {raw!r}")

    return datetime.combine(parsed.date(), _END_OF_DAY)


def to_order_out(order: Order, projection: str) -> OrderOut:
    out = OrderOut(
        id=order.id,
        customer_id=order.customer_id,
        store_id=order.store_id,
        items=[
            OrderItemOut(
                product_id=str(it.get("product_id") or ""),
                title=str(it.get("title") or ""),
                quantity=int(it.get("quantity") or 0),
                unit_price=Decimal(str(it.get("unit_price") or "0")),
            )
            for it in (order.items_json or [])
        ],
        total_price=Decimal(order.total_price),
        comments=order.comments or "",
        status=order.status,
        confirmed=order.confirmed,
        denied=order.status == OrderStatus.DENIED.value,
        estimated_delivery_time=order.estimated_delivery_time,
        created_at=order.created_at.isoformat(),
        decided_at=order.decided_at.isoformat() if order.decided_at else None,
    )

    if projection in (Projection.STORE, Projection.ADMIN) and order.store is not None:
        out.store = StoreSummary(id=order.store.id, store_name=order.store.store_name)

    if projection == Projection.CUSTOMER and order.customer is not None:
        c = order.customer
        out.customer = CustomerDeliveryProfile(
            id=c.id,
            username=c.username,
            customer_region=c.customer_region,
            customer_street_address=c.customer_street_address,
            customer_floor=c.customer_floor,
            customer_doorbell=c.customer_doorbell,
            customer_mobile_phone=c.customer_mobile_phone,
        )

    if projection == Projection.ADMIN and order.customer is not None:
        out.customer_contact = CustomerContact(
            id=order.customer.id,
            username=order.customer.username,
            email=order.customer.email,
        )

    return out
