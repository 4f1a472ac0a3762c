from pathlib import Path

from sqlalchemy import inspect


def test_init_db_creates_tables(tmp_path: Path, monkeypatch) -> None:
    db_path = tmp_path / "marketplace_init.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("MARKET_DB_AUTO_CREATE", "true")

    from services.orders.app.db.database import get_engine
    from services.orders.app.db.init_db import init_db

    init_db()

    inspector = inspect(get_engine())
    tables = set(inspector.get_table_names())

    assert {"users", "stores", "orders"} <= tables
    assert "status" in {c["name"] for c in inspector.get_columns("orders")}


def test_init_db_respects_opt_out(tmp_path: Path, monkeypatch) -> None:
    db_path = tmp_path / "marketplace_skip.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("MARKET_DB_AUTO_CREATE", "false")

    from services.orders.app.db.database import get_engine
    from services.orders.app.db.init_db import init_db

    init_db()

    assert inspect(get_engine()).get_table_names() == []
