# src/Loreweaver/db.py
from __future__ import annotations

import contextlib
from collections.abc import AsyncIterator

import structlog
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from Loreweaver.config import load_settings
from Loreweaver.errors import DatabaseError, LoreweaverError

settings = load_settings()
log = structlog.get_logger()


def _normalize_url(url: str) -> str:
    # Upgrade to the async driver if a sync SQLite URL is supplied
    if url.startswith("sqlite://") and not url.startswith("sqlite+aiosqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


DATABASE_URL = _normalize_url(settings.database_url)


class Base(DeclarativeBase):
    pass


_engine: AsyncEngine | None = None
_sessionmaker: async_sessionmaker[AsyncSession] | None = None
_schema_initialized: bool = False


def _is_memory_url(url: str) -> bool:
    return ":memory:" in url or "mode=memory" in url


def _enable_sqlite_foreign_keys(dbapi_conn, _record) -> None:
    # Cascade and set-null rules are only honored with this pragma on
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA foreign_keys=ON")
    cur.close()


def get_engine() -> AsyncEngine:
    global _engine, _sessionmaker
    if _engine is None:
        kwargs: dict[str, object] = {}
        if DATABASE_URL.startswith("sqlite+aiosqlite://"):
            kwargs.update(connect_args={"timeout": settings.sqlite_busy_timeout_seconds})
            # In-memory DBs must share a single connection so the schema persists
            if _is_memory_url(DATABASE_URL):
                kwargs.update(poolclass=StaticPool)

        _engine = create_async_engine(DATABASE_URL, **kwargs)
        if _engine.dialect.name == "sqlite":
            event.listen(_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        _sessionmaker = async_sessionmaker(_engine, expire_on_commit=False)

        url = make_url(DATABASE_URL)
        log.info(
            "db.connection.config",
            backend=_engine.dialect.name,
            database=url.database or "",
            driver=url.drivername,
        )
    return _engine


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    if _sessionmaker is None:
        get_engine()
    return _sessionmaker  # type: ignore[return-value]


def configure_engine(url: str) -> None:
    """Point the module at a different database; the next engine use reconnects.

    Callers own disposal of any engine that was already created.
    """
    global DATABASE_URL, _engine, _sessionmaker, _schema_initialized
    DATABASE_URL = _normalize_url(url)
    _engine = None
    _sessionmaker = None
    _schema_initialized = False


async def dispose_engine() -> None:
    global _engine, _sessionmaker, _schema_initialized
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _sessionmaker = None
    _schema_initialized = False


async def create_schema() -> None:
    """Create every table, the search index and its triggers on the current engine."""
    # Ensure models are imported so all tables are registered on Base.metadata
    from Loreweaver import models as _models  # noqa: F401

    global _schema_initialized
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    _schema_initialized = True


async def _ensure_schema_created_if_needed() -> None:
    """Ensure tables exist for in-memory SQLite.

    File-backed databases are owned by the Alembic migrations instead.
    """
    if _schema_initialized:
        return
    if DATABASE_URL.startswith("sqlite+aiosqlite://") and _is_memory_url(DATABASE_URL):
        await create_schema()


@contextlib.asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    await _ensure_schema_created_if_needed()
    sm = get_sessionmaker()
    async with sm() as s:
        try:
            yield s
            await s.commit()
        except SQLAlchemyError as exc:
            log.error("db.session.error", exc_info=True)
            await s.rollback()
            orig = getattr(exc, "orig", None)
            raise DatabaseError(str(orig if orig is not None else exc)) from exc
        except LoreweaverError:
            await s.rollback()
            raise
        except Exception:
            log.error("db.session.error", exc_info=True)
            await s.rollback()
            raise
