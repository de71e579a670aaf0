"""Engine lifecycle and request-scoped sessions.

PostgreSQL (asyncpg) in deployment, SQLite (aiosqlite) for tests and local
runs. Both go through the same module-level engine.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from golong.config import get_settings

_NOT_READY = "Database not initialized. Call init_db() first."

_engine: AsyncEngine | None = None
_sessions: async_sessionmaker[AsyncSession] | None = None


def _sqlite_pragmas(dbapi_connection: Any, _record: Any) -> None:  # noqa: ANN401
    # driver autocommit off so BEGIN/SAVEPOINT come from SQLAlchemy only
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _sqlite_begin(conn: Any) -> None:  # noqa: ANN401
    conn.exec_driver_sql("BEGIN")


def _build_engine(url: str) -> AsyncEngine:
    if make_url(url).get_backend_name() == "sqlite":
        engine = create_async_engine(url)
        event.listen(engine.sync_engine, "connect", _sqlite_pragmas)
        event.listen(engine.sync_engine, "begin", _sqlite_begin)
        return engine

    settings = get_settings()
    return create_async_engine(
        url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True,
        connect_args={"statement_cache_size": 0},
    )


async def init_db(url: str) -> None:
    """Create the engine and session factory for ``url``."""
    global _engine, _sessions  # noqa: PLW0603
    _engine = _build_engine(url)
    _sessions = async_sessionmaker(_engine, expire_on_commit=False)


async def close_db() -> None:
    global _engine, _sessions  # noqa: PLW0603
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _sessions = None


def get_engine() -> AsyncEngine:
    if _engine is None:
        raise RuntimeError(_NOT_READY)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory for jobs that open their own sessions."""
    if _sessions is None:
        raise RuntimeError(_NOT_READY)
    return _sessions


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    async with get_session_factory()() as session:
        yield session
