from __future__ import annotations

from dataclasses import dataclass

import structlog
from packages.shared.schemas.notification_v1 import OrderNotificationV1
from services.orders.app.services.errors import UpstreamNotificationError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class SentNotification:
    destination_email: str
    payload: OrderNotificationV1


class MockNotificationSink:
    """Records notifications in memory instead of delivering them."""

    channel = "MOCK"

    def __init__(self) -> None:
        self.sent: list[SentNotification] = []
        self.should_succeed = True
        self.failure_reason = "Mock delivery failed"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Mock delivery failed"):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def send(self, destination_email: str, payload: OrderNotificationV1) -> None:
        if not self.should_succeed:
            raise UpstreamNotificationError(destination_email, self.failure_reason)

        self.sent.append(SentNotification(destination_email=destination_email, payload=payload))
        logger.info(
            "Notification recorded",
            channel=self.channel,
            kind=payload.kind.value,
            order_id=payload.order_id,
            destination=destination_email,
        )

    def reset(self) -> None:
        self.sent.clear()
        self.should_succeed = True
        self.failure_reason = "Mock delivery failed"
