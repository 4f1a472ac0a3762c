from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator


def utcnow() -> datetime:
    # Stored naive; every timestamp in the database is UTC.
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ExactDecimal(TypeDecorator):
    """Decimal stored as its string form, so no scale is imposed on money values."""

    impl = String
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(Decimal(value))

    def process_result_value(self, value, dialect):
        return None if value is None else Decimal(value)


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    username: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[str] = mapped_column(String, nullable=False)

    # Delivery profile, only meaningful for customers.
    customer_region: Mapped[str | None] = mapped_column(String, nullable=True)
    customer_street_address: Mapped[str | None] = mapped_column(String, nullable=True)
    customer_floor: Mapped[str | None] = mapped_column(String, nullable=True)
    customer_doorbell: Mapped[str | None] = mapped_column(String, nullable=True)
    customer_mobile_phone: Mapped[str | None] = mapped_column(String, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class Store(Base):
    __tablename__ = "stores"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    store_name: Mapped[str] = mapped_column(String, nullable=False)
    owner_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, unique=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    owner: Mapped[User] = relationship()


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    customer_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    store_id: Mapped[str] = mapped_column(ForeignKey("stores.id"), nullable=False, index=True)

    # [{product_id, quantity, unit_price, title}], unit_price kept as a decimal string.
    items_json: Mapped[list] = mapped_column(JSON, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(ExactDecimal, nullable=False)
    comments: Mapped[str] = mapped_column(String, nullable=False, default="")

    status: Mapped[str] = mapped_column(String, nullable=False, default="PENDING", index=True)
    confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    estimated_delivery_time: Mapped[str | None] = mapped_column(String, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )
    decided_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    customer: Mapped[User] = relationship()
    store: Mapped[Store] = relationship()
