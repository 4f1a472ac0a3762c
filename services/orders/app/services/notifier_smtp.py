from __future__ import annotations

import os
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage

from packages.shared.schemas.notification_v1 import NotificationKindV1, OrderNotificationV1
from services.orders.app.services.errors import UpstreamNotificationError

_SUBJECTS = {
    NotificationKindV1.ORDER_PLACED: "New order {order_id}",
    NotificationKindV1.ORDER_CONFIRMED: "Your order {order_id} was confirmed",
    NotificationKindV1.ORDER_DECLINED: "Your order {order_id} was declined",
}


@dataclass(frozen=True, slots=True)
class _SmtpConfig:
    host: str
    port: int
    username: str | None
    password: str | None
    sender: str
    timeout_seconds: float
    starttls: bool


class SmtpNotificationSink:
    """Notification sink that sends plain-text e-mail over SMTP.

    Env vars:
    - MARKET_NOTIFIER=smtp
    - MARKET_SMTP_HOST (required)
    - MARKET_SMTP_PORT (default: 587)
    - MARKET_SMTP_USERNAME / MARKET_SMTP_PASSWORD (optional)
    - MARKET_SMTP_FROM (default: orders@localhost)
    - MARKET_SMTP_TIMEOUT_SECONDS (default: 10)
    - MARKET_SMTP_STARTTLS (default: true)
    """

    channel = "SMTP"

    def __init__(self, cfg: _SmtpConfig) -> None:
        self._cfg = cfg

    @classmethod
    def from_env(cls) -> "SmtpNotificationSink":
        host = os.getenv("MARKET_SMTP_HOST", "").strip()
        if not host:
            raise ValueError("MARKET_SMTP_HOST is required when MARKET_NOTIFIER=smtp")

        return cls(
            _SmtpConfig(
                host=host,
                port=int(os.getenv("MARKET_SMTP_PORT", "587")),
                username=os.getenv("MARKET_SMTP_USERNAME") or None,
                password=os.getenv("MARKET_SMTP_PASSWORD") or None,
                sender=os.getenv("MARKET_SMTP_FROM", "orders@localhost"),
                timeout_seconds=float(os.getenv("MARKET_SMTP_TIMEOUT_SECONDS", "10")),
                starttls=_parse_bool(os.getenv("MARKET_SMTP_STARTTLS", "true")),
            )
        )

    def send(self, destination_email: str, payload: OrderNotificationV1) -> None:
        msg = EmailMessage()
        msg["From"] = self._cfg.sender
        msg["To"] = destination_email
        msg["Subject"] = _SUBJECTS[payload.kind].format(order_id=payload.order_id)
        msg.set_content(render_text(payload))

        try:
            with smtplib.SMTP(
                self._cfg.host, self._cfg.port, timeout=self._cfg.timeout_seconds
            ) as smtp:
                if self._cfg.starttls:
                    smtp.starttls()
                if self._cfg.username:
                    smtp.login(self._cfg.username, self._cfg.password or "")
                smtp.send_message(msg)
        except (OSError, smtplib.SMTPException) as e:
            raise UpstreamNotificationError(destination_email, str(e)) from e


def render_text(payload: OrderNotificationV1) -> str:
    lines: list[str] = []

    if payload.username:
        lines.append(f"Hello {payload.username},")
        lines.append("")

    if payload.kind == NotificationKindV1.ORDER_PLACED:
        lines.append(f"A new order was placed at {payload.store_name}.")
    elif payload.kind == NotificationKindV1.ORDER_CONFIRMED:
        lines.append(f"{payload.store_name} confirmed your order.")
        lines.append(f"Estimated delivery: {payload.estimated_delivery_time}")
    else:
        lines.append(f"{payload.store_name} could not accept your order.")

    lines.append("")
    lines.append(f"Order: {payload.order_id}")
    lines.append(f"Placed: {payload.created_at.isoformat()}")
    lines.append("")
    for item in payload.items:
        lines.append(f"- {item.quantity} x {item.title} @ {item.unit_price}")
    lines.append(f"Total: {payload.total_price}")

    if payload.note:
        lines.append(f"Note: {payload.note}")

    info = payload.delivery_info
    if payload.customer_info is not None:
        lines.append("")
        lines.append(f"Customer: {payload.customer_info.username or payload.customer_info.id}")
        info = payload.customer_info.delivery

    if info is not None:
        lines.append(
            "Deliver to: "
            + ", ".join(
                v for v in (info.region, info.street, info.floor, info.doorbell, info.phone) if v
            )
        )

    return "\n".join(lines) + "\n"


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}
