from __future__ import annotations


class OrderServiceError(Exception):
    """Base class for caller-facing order service errors.

    Every subclass carries a stable machine-checkable ``kind`` and the HTTP status the
    API surface maps it to.
    """

    kind = "order_error"
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidCartError(OrderServiceError):
    kind = "invalid_cart"
    status_code = 400


class InvalidRequestError(OrderServiceError):
    kind = "invalid_request"
    status_code = 400


class StoreNotFoundError(OrderServiceError):
    kind = "store_not_found"
    status_code = 404

    def __init__(self, store_id: str | None = None, *, owner_id: str | None = None) -> None:
        if store_id is None:
            super().__init__(f"No store found for user {owner_id}")
        else:
            super().__init__(f"Store not found: {store_id}")
        self.store_id = store_id
        self.owner_id = owner_id


class SellerNotFoundError(OrderServiceError):
    kind = "seller_not_found"
    status_code = 404

    def __init__(self, store_id: str, owner_id: str) -> None:
        super().__init__(f"Seller account {owner_id} for store {store_id} not found")
        self.store_id = store_id
        self.owner_id = owner_id


class NotFoundError(OrderServiceError):
    kind = "not_found"
    status_code = 404

    def __init__(self, order_id: str) -> None:
        super().__init__(f"Order not found: {order_id}")
        self.order_id = order_id


class ForbiddenError(OrderServiceError):
    kind = "forbidden"
    status_code = 403


class InvalidStateError(OrderServiceError):
    kind = "invalid_state"
    status_code = 409

    def __init__(self, order_id: str, status: str) -> None:
        super().__init__(f"Order {order_id} is already {status.lower()}")
        self.order_id = order_id
        self.status = status


class UpstreamNotificationError(OrderServiceError):
    kind = "upstream_notification"
    status_code = 502

    def __init__(self, destination: str, reason: str) -> None:
        super().__init__(f"Notification to {destination} failed: {reason}")
        self.destination = destination
        self.reason = reason
