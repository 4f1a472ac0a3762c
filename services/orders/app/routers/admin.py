from __future__ import annotations

from fastapi import APIRouter, Depends
from services.orders.app.db.deps import get_actor, get_query_service
from services.orders.app.models.actor import Actor
from services.orders.app.models.order import OrderOut
from services.orders.app.services.query import OrderQueryService

router = APIRouter()


@router.get("/v1/admin/orders/all", response_model=list[OrderOut])
def list_all_orders(
    actor: Actor = Depends(get_actor),
    query: OrderQueryService = Depends(get_query_service),
) -> list[OrderOut]:
    return query.list_all_orders(actor)


@router.get("/v1/admin/orders/pending", response_model=list[OrderOut])
def list_pending_orders(
    actor: Actor = Depends(get_actor),
    query: OrderQueryService = Depends(get_query_service),
) -> list[OrderOut]:
    return query.list_pending_orders(actor)
