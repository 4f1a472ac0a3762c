"""Shared order notification payload schema (v1).

Sellers and customers receive these payloads through whichever notification sink is
configured; e-mail templates and any future push channel render the same fields.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class NotificationKindV1(str, Enum):
    ORDER_PLACED = "ORDER_PLACED"
    ORDER_CONFIRMED = "ORDER_CONFIRMED"
    ORDER_DECLINED = "ORDER_DECLINED"


class NotificationItemV1(BaseModel):
    product_id: str
    title: str
    quantity: int
    unit_price: Decimal


class DeliveryInfoV1(BaseModel):
    region: str | None = None
    street: str | None = None
    floor: str | None = None
    doorbell: str | None = None
    phone: str | None = None


class CustomerInfoV1(BaseModel):
    id: str
    username: str | None = None
    email: str | None = None
    delivery: DeliveryInfoV1 = Field(default_factory=DeliveryInfoV1)


class OrderNotificationV1(BaseModel):
    version: str = "1"
    kind: NotificationKindV1

    order_id: str
    created_at: datetime
    store_name: str | None = None

    # Customer-facing notifications address the customer by name.
    username: str | None = None

    items: list[NotificationItemV1] = Field(default_factory=list)
    total_price: Decimal
    note: str = ""

    estimated_delivery_time: str | None = None
    delivery_info: DeliveryInfoV1 | None = None

    # Seller-facing notifications carry who placed the order.
    customer_info: CustomerInfoV1 | None = None
