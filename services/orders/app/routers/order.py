from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from services.orders.app.db.deps import get_actor, get_lifecycle, get_query_service
from services.orders.app.models.actor import Actor
from services.orders.app.models.order import (
    CartSubmission,
    CreatedOrder,
    CreateOrdersResponse,
    OrderConfirmRequest,
    OrderOut,
    OrderTransitionResponse,
    SkippedStore,
)
from services.orders.app.services.lifecycle import OrderLifecycle
from services.orders.app.services.query import OrderQueryService

router = APIRouter()


@router.post("/v1/orders/complete", response_model=CreateOrdersResponse, status_code=201)
def complete_order(
    payload: CartSubmission,
    actor: Actor = Depends(get_actor),
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
) -> CreateOrdersResponse:
    result = lifecycle.create_orders(actor, payload)

    return CreateOrdersResponse(
        message="Orders submitted to sellers" if result.orders else "No orders were created",
        orders=[CreatedOrder(order_id=o.order_id, store_name=o.store_name) for o in result.orders],
        skipped=[
            SkippedStore(store_id=s.store_id, kind=s.kind, detail=s.detail) for s in result.skipped
        ],
        warnings=result.warnings,
    )


@router.get("/v1/orders", response_model=list[OrderOut])
def list_my_orders(
    from_: str | None = Query(default=None, alias="from"),
    to: str | None = None,
    actor: Actor = Depends(get_actor),
    query: OrderQueryService = Depends(get_query_service),
) -> list[OrderOut]:
    return query.list_orders(actor, from_, to)


@router.get("/v1/orders/seller", response_model=list[OrderOut])
def list_seller_orders(
    from_: str | None = Query(default=None, alias="from"),
    to: str | None = None,
    actor: Actor = Depends(get_actor),
    query: OrderQueryService = Depends(get_query_service),
) -> list[OrderOut]:
    return query.list_seller_orders(actor, from_, to)


@router.get("/v1/orders/{order_id}", response_model=OrderOut)
def get_order(
    order_id: str,
    actor: Actor = Depends(get_actor),
    query: OrderQueryService = Depends(get_query_service),
) -> OrderOut:
    return query.get_order(actor, order_id)


@router.put("/v1/orders/{order_id}/confirm", response_model=OrderTransitionResponse)
def confirm_order(
    order_id: str,
    payload: OrderConfirmRequest,
    actor: Actor = Depends(get_actor),
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
) -> OrderTransitionResponse:
    result = lifecycle.confirm_order(actor, order_id, payload.estimated_delivery_time)
    return OrderTransitionResponse(
        message="Order confirmed and customer notified"
        if not result.warnings
        else "Order confirmed; customer notification failed",
        order_id=result.order_id,
        status=result.status.value,
        warnings=result.warnings,
    )


@router.put("/v1/orders/{order_id}/deny", response_model=OrderTransitionResponse)
def deny_order(
    order_id: str,
    actor: Actor = Depends(get_actor),
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
) -> OrderTransitionResponse:
    result = lifecycle.deny_order(actor, order_id)
    return OrderTransitionResponse(
        message="Order denied and customer notified"
        if not result.warnings
        else "Order denied; customer notification failed",
        order_id=result.order_id,
        status=result.status.value,
        warnings=result.warnings,
    )
