from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from services.orders.app.models.order import CartItemInput
from services.orders.app.services.errors import InvalidCartError


@dataclass(frozen=True, slots=True)
class DraftItem:
    product_id: str
    title: str
    quantity: int
    unit_price: Decimal

    def to_json(self) -> dict:
        return {
            "product_id": self.product_id,
            "title": self.title,
            "quantity": self.quantity,
            "unit_price": str(self.unit_price),
        }


@dataclass(frozen=True, slots=True)
class OrderDraft:
    store_id: str
    items: list[DraftItem]
    total_price: Decimal


def _validate(items: list[CartItemInput]) -> None:
    if not items:
        raise InvalidCartError("Cart is empty")

    for idx, item in enumerate(items):
        if not item.store_id.strip():
            raise InvalidCartError(f"Item {idx} ({item.product_id}) has no store")
        if item.quantity <= 0:
            raise InvalidCartError(
                f"Item {idx} ({item.product_id}) has non-positive quantity {item.quantity}"
            )
        if item.price < 0:
            raise InvalidCartError(f"Item {idx} ({item.product_id}) has negative price")


def split_cart(items: list[CartItemInput]) -> list[OrderDraft]:
    """Partition a cart into one draft per store.

    Groups follow the order in which each store first appears in the cart, and items keep
    their relative order inside a group. The whole cart is validated before any grouping,
    so a single bad line rejects the submission.
    """

    _validate(items)

    grouped: dict[str, list[DraftItem]] = {}
    for item in items:
        store_id = item.store_id.strip()
        grouped.setdefault(store_id, []).append(
            DraftItem(
                product_id=item.product_id,
                title=item.title,
                quantity=item.quantity,
                unit_price=item.price,
            )
        )

    drafts: list[OrderDraft] = []
    for store_id, store_items in grouped.items():
        total = sum((i.unit_price * i.quantity for i in store_items), Decimal("0"))
        drafts.append(OrderDraft(store_id=store_id, items=store_items, total_price=total))

    return drafts
