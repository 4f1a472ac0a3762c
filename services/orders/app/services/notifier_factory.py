from __future__ import annotations

import os

from services.orders.app.services.notifier_base import NotificationSink
from services.orders.app.services.notifier_mock import MockNotificationSink

_mock_sink: MockNotificationSink | None = None


def get_mock_sink() -> MockNotificationSink:
    """Process-wide mock sink so tests can inspect what the API sent."""

    global _mock_sink
    if _mock_sink is None:
        _mock_sink = MockNotificationSink()
    return _mock_sink


def get_notification_sink() -> NotificationSink:
    """Select a notification sink based on env vars.

    Defaults to the in-memory mock so tests and local dev never send real e-mail unless
    explicitly configured otherwise.
    """

    mode = os.getenv("MARKET_NOTIFIER", "mock").strip().lower()

    if mode == "mock":
        return get_mock_sink()

    if mode == "smtp":
        from services.orders.app.services.notifier_smtp import SmtpNotificationSink

        return SmtpNotificationSink.from_env()

    raise ValueError(f"Unknown MARKET_NOTIFIER={mode!r}. Expected mock or smtp.")
