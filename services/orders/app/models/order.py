from __future__ import annotations

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    DENIED = "DENIED"


# Quantity/price bounds are enforced by the splitter so that a bad cart is reported as
# invalid_cart rather than a schema error.


class CartItemInput(BaseModel):
    product_id: str
    store_id: str
    title: str = ""
    quantity: int
    price: Decimal


class CartSubmission(BaseModel):
    items: list[CartItemInput] = Field(default_factory=list)
    customer_note: str = ""


class CreatedOrder(BaseModel):
    order_id: str
    store_name: str


class SkippedStore(BaseModel):
    store_id: str
    kind: str
    detail: str


class CreateOrdersResponse(BaseModel):
    message: str
    orders: list[CreatedOrder]
    skipped: list[SkippedStore] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class OrderConfirmRequest(BaseModel):
    estimated_delivery_time: str = Field(..., min_length=1)


class OrderTransitionResponse(BaseModel):
    message: str
    order_id: str
    status: str
    warnings: list[str] = Field(default_factory=list)


class OrderItemOut(BaseModel):
    product_id: str
    title: str
    quantity: int
    unit_price: Decimal


class StoreSummary(BaseModel):
    id: str
    store_name: str


class CustomerDeliveryProfile(BaseModel):
    id: str
    username: str
    customer_region: str | None = None
    customer_street_address: str | None = None
    customer_floor: str | None = None
    customer_doorbell: str | None = None
    customer_mobile_phone: str | None = None


class CustomerContact(BaseModel):
    id: str
    username: str
    email: str


class OrderOut(BaseModel):
    id: str
    customer_id: str
    store_id: str
    items: list[OrderItemOut]
    total_price: Decimal
    comments: str
    status: str
    confirmed: bool
    denied: bool
    estimated_delivery_time: str | None = None
    created_at: str
    decided_at: str | None = None

    # Role-dependent projection: at most one of these is populated for customers/sellers.
    store: StoreSummary | None = None
    customer: CustomerDeliveryProfile | None = None
    customer_contact: CustomerContact | None = None
