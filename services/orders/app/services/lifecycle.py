from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

import structlog
from packages.shared.schemas.notification_v1 import (
    CustomerInfoV1,
    DeliveryInfoV1,
    NotificationItemV1,
    NotificationKindV1,
    OrderNotificationV1,
)
from services.orders.app.db.models import Order, Store, User
from services.orders.app.models.actor import Actor
from services.orders.app.models.order import CartSubmission, OrderStatus
from services.orders.app.services.directory import Directory
from services.orders.app.services.errors import (
    InvalidRequestError,
    InvalidStateError,
    NotFoundError,
    OrderServiceError,
    SellerNotFoundError,
    StoreNotFoundError,
    UpstreamNotificationError,
)
from services.orders.app.services.notifier_base import NotificationSink
from services.orders.app.services.policy import RolePolicy, policy_for
from services.orders.app.services.repository import OrderRepository
from services.orders.app.services.splitter import OrderDraft, split_cart
from sqlalchemy.exc import SQLAlchemyError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CreatedOrderResult:
    order_id: str
    store_name: str


@dataclass(frozen=True, slots=True)
class SkippedStoreResult:
    store_id: str
    kind: str
    detail: str


@dataclass(slots=True)
class CreateOrdersResult:
    orders: list[CreatedOrderResult] = field(default_factory=list)
    skipped: list[SkippedStoreResult] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class TransitionResult:
    order_id: str
    status: OrderStatus
    warnings: list[str]


class OrderLifecycle:
    """Creates orders from carts and moves them through confirm/deny.

    State changes are committed before any notification is attempted. Notification
    failures end up in ``warnings`` and never undo a committed change.
    """

    def __init__(
        self,
        repository: OrderRepository,
        directory: Directory,
        notifier: NotificationSink,
    ) -> None:
        self._repo = repository
        self._directory = directory
        self._notifier = notifier

    def create_orders(self, actor: Actor, cart: CartSubmission) -> CreateOrdersResult:
        policy_for(actor).require_place_orders()

        drafts = split_cart(cart.items)
        customer = self._directory.find_user_by_id(actor.id)
        note = cart.customer_note or ""

        result = CreateOrdersResult()
        for draft in drafts:
            try:
                created = self._create_store_order(actor, customer, draft, note, result.warnings)
            except OrderServiceError as e:
                logger.warning(
                    "Skipping store during order creation",
                    store_id=draft.store_id,
                    kind=e.kind,
                    reason=e.message,
                )
                result.skipped.append(
                    SkippedStoreResult(store_id=draft.store_id, kind=e.kind, detail=e.message)
                )
                continue
            except SQLAlchemyError:
                logger.exception("Failed to persist store order", store_id=draft.store_id)
                result.skipped.append(
                    SkippedStoreResult(
                        store_id=draft.store_id,
                        kind="internal",
                        detail="Order could not be saved",
                    )
                )
                continue

            result.orders.append(created)

        return result

    def confirm_order(
        self, actor: Actor, order_id: str, estimated_delivery_time: str
    ) -> TransitionResult:
        order = self._load_pending_for_decision(policy_for(actor), order_id)

        if not estimated_delivery_time or not estimated_delivery_time.strip():
            raise InvalidRequestError("estimated_delivery_time is required")

        if not self._repo.transition(
            order_id,
            OrderStatus.CONFIRMED,
            estimated_delivery_time=estimated_delivery_time.strip(),
        ):
            raise InvalidStateError(order_id, order.status)

        logger.info(
            "Order confirmed",
            order_id=order_id,
            store_id=order.store_id,
            estimated_delivery_time=order.estimated_delivery_time,
        )

        warnings: list[str] = []
        self._notify_customer(order, NotificationKindV1.ORDER_CONFIRMED, warnings)
        return TransitionResult(order_id=order_id, status=OrderStatus.CONFIRMED, warnings=warnings)

    def deny_order(self, actor: Actor, order_id: str) -> TransitionResult:
        order = self._load_pending_for_decision(policy_for(actor), order_id)

        if not self._repo.transition(order_id, OrderStatus.DENIED):
            raise InvalidStateError(order_id, order.status)

        logger.info("Order denied", order_id=order_id, store_id=order.store_id)

        warnings: list[str] = []
        self._notify_customer(order, NotificationKindV1.ORDER_DECLINED, warnings)
        return TransitionResult(order_id=order_id, status=OrderStatus.DENIED, warnings=warnings)

    def _create_store_order(
        self,
        actor: Actor,
        customer: User | None,
        draft: OrderDraft,
        note: str,
        warnings: list[str],
    ) -> CreatedOrderResult:
        store = self._directory.find_store_by_id(draft.store_id)
        if store is None:
            raise StoreNotFoundError(draft.store_id)

        seller = self._directory.find_user_by_id(store.owner_id)
        if seller is None:
            raise SellerNotFoundError(store.id, store.owner_id)

        order = self._repo.create(actor.id, draft, note)
        logger.info(
            "Order created",
            order_id=order.id,
            store_id=store.id,
            customer_id=actor.id,
            total_price=str(order.total_price),
            item_count=len(draft.items),
        )

        payload = OrderNotificationV1(
            kind=NotificationKindV1.ORDER_PLACED,
            order_id=order.id,
            created_at=order.created_at,
            store_name=store.store_name,
            items=_notification_items(order),
            total_price=draft.total_price,
            note=note,
            customer_info=_customer_info(actor.id, customer),
        )
        self._send(seller.email, payload, warnings)

        return CreatedOrderResult(order_id=order.id, store_name=store.store_name)

    def _load_pending_for_decision(self, policy: RolePolicy, order_id: str) -> Order:
        order = self._repo.find_by_id(order_id, populate=("customer", "store"))
        if order is None:
            raise NotFoundError(order_id)

        policy.require_decide(order)

        if order.status != OrderStatus.PENDING.value:
            raise InvalidStateError(order_id, order.status)

        return order

    def _notify_customer(
        self, order: Order, kind: NotificationKindV1, warnings: list[str]
    ) -> None:
        customer: User | None = order.customer
        store: Store | None = order.store
        if customer is None:
            warnings.append(f"Customer {order.customer_id} not found; no notification sent")
            return

        confirmed = kind == NotificationKindV1.ORDER_CONFIRMED
        payload = OrderNotificationV1(
            kind=kind,
            order_id=order.id,
            created_at=order.created_at,
            store_name=store.store_name if store is not None else None,
            username=customer.username,
            items=_notification_items(order),
            total_price=Decimal(order.total_price),
            note=order.comments or "",
            estimated_delivery_time=order.estimated_delivery_time if confirmed else None,
            delivery_info=_delivery_info(customer),
        )
        self._send(customer.email, payload, warnings)

    def _send(
        self, destination_email: str, payload: OrderNotificationV1, warnings: list[str]
    ) -> None:
        try:
            self._notifier.send(destination_email, payload)
        except UpstreamNotificationError as e:
            logger.warning(
                "Notification failed",
                kind=payload.kind.value,
                order_id=payload.order_id,
                destination=destination_email,
                reason=e.reason,
            )
            warnings.append(f"Notification for order {payload.order_id} was not delivered")


def _notification_items(order: Order) -> list[NotificationItemV1]:
    return [
        NotificationItemV1(
            product_id=str(it.get("product_id") or ""),
            title=str(it.get("title") or ""),
            quantity=int(it.get("quantity") or 0),
            unit_price=Decimal(str(it.get("unit_price") or "0")),
        )
        for it in (order.items_json or [])
    ]


def _delivery_info(user: User) -> DeliveryInfoV1:
    return DeliveryInfoV1(
        region=user.customer_region,
        street=user.customer_street_address,
        floor=user.customer_floor,
        doorbell=user.customer_doorbell,
        phone=user.customer_mobile_phone,
    )


def _customer_info(customer_id: str, customer: User | None) -> CustomerInfoV1:
    if customer is None:
        return CustomerInfoV1(id=customer_id)

    return CustomerInfoV1(
        id=customer.id,
        username=customer.username,
        email=customer.email,
        delivery=_delivery_info(customer),
    )
