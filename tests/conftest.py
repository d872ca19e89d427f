# tests/conftest.py

import os
from collections.abc import AsyncIterator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

# Point the app at a process-local in-memory DB before any app module reads settings.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

import Loreweaver.db as _db  # noqa: E402
from Loreweaver import models as _models  # noqa: F401,E402
from Loreweaver.commanding import invoke  # noqa: E402
from Loreweaver.metrics import reset_counters  # noqa: E402

MEMORY_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(autouse=True)
async def _fresh_db_per_test() -> AsyncIterator[None]:
    """Give every test its own empty in-memory database with the full schema.

    A new StaticPool engine means a new SQLite connection, so nothing leaks
    between tests. The engine is disposed even if the test swapped in another.
    """
    _db.configure_engine(MEMORY_URL)
    engine = _db.get_engine()
    await _db.create_schema()
    reset_counters()
    try:
        yield None
    finally:
        await _db.dispose_engine()
        await engine.dispose()


@pytest.fixture
async def db() -> AsyncIterator[AsyncSession]:
    sm = _db.get_sessionmaker()
    async with sm() as s:
        try:
            yield s
        finally:
            await s.rollback()
            await s.close()


@pytest.fixture
async def campaign() -> dict:
    rec = await invoke("create_campaign", {"name": "Shattered Isles", "system": "5e"})
    return rec.model_dump()


@pytest.fixture
async def other_campaign() -> dict:
    rec = await invoke("create_campaign", {"name": "Ember Wastes"})
    return rec.model_dump()
