from __future__ import annotations

from typing import Protocol

from services.orders.app.db.models import Store, User
from sqlalchemy.orm import Session


class Directory(Protocol):
    def find_store_by_id(self, store_id: str) -> Store | None: ...

    def find_user_by_id(self, user_id: str) -> User | None: ...

    def find_store_by_owner(self, user_id: str) -> Store | None: ...


class SqlDirectory:
    def __init__(self, db: Session) -> None:
        self._db = db

    def find_store_by_id(self, store_id: str) -> Store | None:
        return self._db.get(Store, store_id)

    def find_user_by_id(self, user_id: str) -> User | None:
        return self._db.get(User, user_id)

    def find_store_by_owner(self, user_id: str) -> Store | None:
        return self._db.query(Store).filter(Store.owner_id == user_id).first()
