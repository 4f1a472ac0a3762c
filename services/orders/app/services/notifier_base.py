from __future__ import annotations

from typing import Protocol

from packages.shared.schemas.notification_v1 import OrderNotificationV1


class NotificationSink(Protocol):
    """Delivers order notifications.

    Implementations raise ``UpstreamNotificationError`` when delivery fails; anything they
    return is ignored.
    """

    channel: str

    def send(self, destination_email: str, payload: OrderNotificationV1) -> None: ...
