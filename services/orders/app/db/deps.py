from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, Header
from services.orders.app.db.database import db_session
from services.orders.app.models.actor import Actor
from services.orders.app.services.directory import SqlDirectory
from services.orders.app.services.errors import ForbiddenError
from services.orders.app.services.lifecycle import OrderLifecycle
from services.orders.app.services.notifier_factory import get_notification_sink
from services.orders.app.services.query import OrderQueryService
from services.orders.app.services.repository import SqlOrderRepository
from sqlalchemy.orm import Session


def get_db() -> Generator[Session, None, None]:
    db = db_session()
    try:
        yield db
    finally:
        db.close()


def get_actor(
    x_actor_id: str | None = Header(default=None),
    x_actor_role: str | None = Header(default=None),
) -> Actor:
    # Identity is verified upstream; we only require that it was handed over.
    if not x_actor_id or not x_actor_role:
        raise ForbiddenError("Not authenticated")
    return Actor(id=x_actor_id.strip(), role=x_actor_role.strip().lower())


def get_lifecycle(db: Session = Depends(get_db)) -> OrderLifecycle:
    return OrderLifecycle(
        repository=SqlOrderRepository(db),
        directory=SqlDirectory(db),
        notifier=get_notification_sink(),
    )


def get_query_service(db: Session = Depends(get_db)) -> OrderQueryService:
    return OrderQueryService(repository=SqlOrderRepository(db), directory=SqlDirectory(db))
