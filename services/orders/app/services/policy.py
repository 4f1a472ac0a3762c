from __future__ import annotations

from services.orders.app.db.models import Order
from services.orders.app.models.actor import Actor, Role
from services.orders.app.services.directory import Directory
from services.orders.app.services.errors import ForbiddenError, StoreNotFoundError
from services.orders.app.services.repository import OrderCriteria


class Projection:
    STORE = "store"
    CUSTOMER = "customer"
    ADMIN = "admin"


class RolePolicy:
    """Capabilities of one role. Everything is denied unless a subclass grants it."""

    role: Role
    projection: str

    def __init__(self, actor: Actor) -> None:
        self.actor = actor

    def require_place_orders(self) -> None:
        raise ForbiddenError("Only customers can place orders")

    def listing_criteria(self, directory: Directory) -> OrderCriteria:
        raise ForbiddenError("You do not have access to orders")

    def require_store_listing(self) -> None:
        raise ForbiddenError("Only sellers can list store orders")

    def can_read(self, order: Order) -> bool:
        return False

    def require_decide(self, order: Order) -> None:
        raise ForbiddenError("Only sellers can confirm or deny orders")

    def require_admin_listing(self) -> None:
        raise ForbiddenError("Admin only")


class CustomerPolicy(RolePolicy):
    role = Role.CUSTOMER
    projection = Projection.STORE

    def require_place_orders(self) -> None:
        return None

    def listing_criteria(self, directory: Directory) -> OrderCriteria:
        return OrderCriteria(customer_id=self.actor.id)

    def can_read(self, order: Order) -> bool:
        return order.customer_id == self.actor.id


class SellerPolicy(RolePolicy):
    role = Role.SELLER
    projection = Projection.CUSTOMER

    def listing_criteria(self, directory: Directory) -> OrderCriteria:
        store = directory.find_store_by_owner(self.actor.id)
        if store is None:
            raise StoreNotFoundError(owner_id=self.actor.id)
        return OrderCriteria(store_id=store.id)

    def can_read(self, order: Order) -> bool:
        return order.store is not None and order.store.owner_id == self.actor.id

    def require_decide(self, order: Order) -> None:
        # Ownership comes from the store row loaded with the order, never from the request.
        if not self.can_read(order):
            raise ForbiddenError("You do not have access to this order")


class AdminPolicy(RolePolicy):
    role = Role.ADMIN
    projection = Projection.ADMIN

    def can_read(self, order: Order) -> bool:
        return True

    def require_admin_listing(self) -> None:
        return None


_POLICIES: dict[Role, type[RolePolicy]] = {
    Role.CUSTOMER: CustomerPolicy,
    Role.SELLER: SellerPolicy,
    Role.ADMIN: AdminPolicy,
}


def policy_for(actor: Actor | None) -> RolePolicy:
    if actor is None or not actor.id:
        raise ForbiddenError("Not authenticated")

    try:
        role = Role(actor.role)
    except ValueError as e:
        raise ForbiddenError(f"Unknown role: {actor.role!r}") from e

    return _POLICIES[role](actor)
