"""Async database engine and session management for the central store.

The central store holds identities, one-time codes and sessions. Per-user
project data lives in separate SQLite files managed by
``timereport.core.user_store``.
"""

from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from timereport.core.config import settings


def _on_sqlite_connect(dbapi_connection: Any, _record: Any) -> None:
    """Enforce foreign keys and hand transaction control to SQLAlchemy.

    SQLite leaves FK enforcement off per connection, and the driver's own
    implicit BEGIN handling breaks SAVEPOINT semantics.
    """
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _on_sqlite_begin(conn: Any) -> None:
    """Take the write lock up front.

    A deferred BEGIN that reads and then writes must upgrade its lock, and
    two such transactions fail with "database is locked" instead of
    waiting. IMMEDIATE makes the second one wait on the busy timeout.
    """
    conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_engine(url: str, *, echo: bool = False) -> AsyncEngine:
    """Create an async engine; SQLite gets FKs and working savepoints.

    Args:
        url: SQLAlchemy database URL.
        echo: Log emitted SQL.

    Returns:
        Configured AsyncEngine.
    """
    new_engine = create_async_engine(url, echo=echo)
    if new_engine.dialect.name == "sqlite":
        event.listen(new_engine.sync_engine, "connect", _on_sqlite_connect)
        event.listen(new_engine.sync_engine, "begin", _on_sqlite_begin)
    return new_engine


def ensure_sqlite_parent_dir(url: str) -> None:
    """Create the directory holding a file-based SQLite database."""
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return
    if not parsed.database or parsed.database == ":memory:":
        return
    Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)


engine = create_engine(
    settings.database_url,
    echo=settings.environment == "development" and settings.log_level == "DEBUG",
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a central database session."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
