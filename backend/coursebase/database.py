from __future__ import annotations

import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from coursebase.config import get_settings
from coursebase.models import Base

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str, **kwargs) -> Engine:
    settings = get_settings()
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        eng = create_engine(url, future=True, **kwargs)
        # Cascading deletes and FK checks are off by default in SQLite.
        event.listen(eng, "connect", _enable_sqlite_foreign_keys)
        return eng
    kwargs.setdefault("pool_size", settings.db_pool_size)
    kwargs.setdefault("pool_timeout", settings.db_pool_timeout)
    kwargs.setdefault("pool_recycle", settings.db_pool_recycle)
    kwargs.setdefault("pool_pre_ping", True)
    return create_engine(url, future=True, **kwargs)


engine = make_engine(get_settings().database_url)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_schema(bind: Engine | None = None) -> None:
    Base.metadata.create_all(bind or engine)


def reset_schema(bind: Engine | None = None) -> None:
    """Drop and recreate every table. Destroys all stored content."""
    target = bind or engine
    logger.info("resetting database schema", extra={"path": str(target.url)})
    Base.metadata.drop_all(target)
    Base.metadata.create_all(target)
