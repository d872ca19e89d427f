# search_index.py
"""Full-text search index over campaign content.

The index is an SQLite FTS5 table holding one row per searchable entity. Rows
are written exclusively by triggers on the source tables, so an index row is
always inserted, replaced or removed in the same statement that changed its
source row. Nothing in the application writes to ``search_index`` directly,
with the single exception of :func:`rebuild_search_index`, a repair tool.

The per-kind projection (display name + searchable content) is declared once
in :data:`PROJECTIONS`. The trigger DDL, the Alembic migration and the
Python-side drift check are all derived from that table.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import structlog
from sqlalchemy import DDL, MetaData, event, text
from sqlalchemy.ext.asyncio import AsyncSession

from Loreweaver.metrics import inc_counter

log = structlog.get_logger()

INDEX_TABLE = "search_index"
# Column order matters: snippet() addresses columns by position
INDEX_COLUMNS = ("entity_type", "entity_id", "campaign_id", "name", "content")
NAME_COLUMN = INDEX_COLUMNS.index("name")
CONTENT_COLUMN = INDEX_COLUMNS.index("content")


@dataclass(frozen=True)
class Projection:
    """How one source table maps onto an index row."""

    entity_type: str
    table: str
    content_fields: tuple[str, ...]
    name_field: str = "name"
    # (prefix, field) used when name_field is NULL, e.g. "Session " || session_number
    name_fallback: tuple[str, str] | None = None

    def name_sql(self, row: str) -> str:
        expr = f"{row}.{self.name_field}"
        if self.name_fallback is None:
            return expr
        prefix, fallback_field = self.name_fallback
        return f"COALESCE({expr}, '{prefix}' || {row}.{fallback_field})"

    def content_sql(self, row: str) -> str:
        # Missing fields count as '' so the separators stay put
        return " || ' ' || ".join(f"COALESCE({row}.{f}, '')" for f in self.content_fields)

    def name_of(self, values: Mapping[str, Any]) -> str:
        value = values[self.name_field]
        if value is None and self.name_fallback is not None:
            prefix, fallback_field = self.name_fallback
            return f"{prefix}{values[fallback_field]}"
        return value

    def content_of(self, values: Mapping[str, Any]) -> str:
        return " ".join((values[f] or "") for f in self.content_fields)

    @property
    def source_columns(self) -> tuple[str, ...]:
        cols = ["id", "campaign_id", self.name_field, *self.content_fields]
        if self.name_fallback is not None:
            cols.append(self.name_fallback[1])
        return tuple(dict.fromkeys(cols))


PROJECTIONS: dict[str, Projection] = {
    p.entity_type: p
    for p in (
        Projection("character", "characters", ("description", "personality", "motivations")),
        Projection("location", "locations", ("description",)),
        Projection("organization", "organizations", ("description", "goals")),
        Projection("quest", "quests", ("description", "hook", "objectives")),
        Projection("hero", "heroes", ("description", "backstory")),
        Projection(
            "session",
            "sessions",
            ("notes", "summary"),
            name_field="title",
            name_fallback=("Session ", "session_number"),
        ),
    )
}


def project(entity_type: str, values: Mapping[str, Any]) -> tuple[str, str]:
    """Return the (name, content) index projection for a source row."""
    p = PROJECTIONS[entity_type]
    return p.name_of(values), p.content_of(values)


# -----------------------------
# DDL
# -----------------------------


def _insert_sql(p: Projection, row: str) -> str:
    return (
        f"INSERT INTO {INDEX_TABLE}({', '.join(INDEX_COLUMNS)}) "
        f"VALUES ('{p.entity_type}', {row}.id, {row}.campaign_id, "
        f"{p.name_sql(row)}, {p.content_sql(row)});"
    )


def _delete_sql(p: Projection, row: str) -> str:
    return (
        f"DELETE FROM {INDEX_TABLE} "
        f"WHERE entity_type = '{p.entity_type}' AND entity_id = {row}.id;"
    )


def create_table_statement() -> str:
    return (
        f"CREATE VIRTUAL TABLE IF NOT EXISTS {INDEX_TABLE} USING fts5("
        "entity_type, entity_id UNINDEXED, campaign_id UNINDEXED, name, content, "
        "tokenize='porter unicode61')"
    )


def trigger_statements(p: Projection) -> list[str]:
    t = p.table
    return [
        f"CREATE TRIGGER IF NOT EXISTS {t}_ai AFTER INSERT ON {t} BEGIN "
        f"{_insert_sql(p, 'NEW')} END",
        # Full replace on update: drop the old entry, project the new row
        f"CREATE TRIGGER IF NOT EXISTS {t}_au AFTER UPDATE ON {t} BEGIN "
        f"{_delete_sql(p, 'OLD')} {_insert_sql(p, 'NEW')} END",
        f"CREATE TRIGGER IF NOT EXISTS {t}_ad AFTER DELETE ON {t} BEGIN "
        f"{_delete_sql(p, 'OLD')} END",
    ]


def create_statements() -> list[str]:
    out = [create_table_statement()]
    for p in PROJECTIONS.values():
        out.extend(trigger_statements(p))
    return out


def drop_statements() -> list[str]:
    out: list[str] = []
    for p in PROJECTIONS.values():
        out.extend(f"DROP TRIGGER IF EXISTS {p.table}_{suffix}" for suffix in ("ai", "au", "ad"))
    out.append(f"DROP TABLE IF EXISTS {INDEX_TABLE}")
    return out


def backfill_statements() -> list[str]:
    """INSERT ... SELECT statements projecting every existing source row."""
    return [
        f"INSERT INTO {INDEX_TABLE}({', '.join(INDEX_COLUMNS)}) "
        f"SELECT '{p.entity_type}', src.id, src.campaign_id, "
        f"{p.name_sql('src')}, {p.content_sql('src')} FROM {p.table} AS src"
        for p in PROJECTIONS.values()
    ]


def attach(metadata: MetaData) -> None:
    """Install the index and triggers on create_all, remove them on drop_all."""
    for stmt in create_statements():
        event.listen(metadata, "after_create", DDL(stmt).execute_if(dialect="sqlite"))
    for stmt in drop_statements():
        event.listen(metadata, "before_drop", DDL(stmt).execute_if(dialect="sqlite"))


# -----------------------------
# Consistency tooling
# -----------------------------


@dataclass
class IndexDrift:
    """Differences between the index and the projection of live rows."""

    missing: list[tuple[str, str]] = field(default_factory=list)
    stale: list[tuple[str, str]] = field(default_factory=list)
    orphaned: list[tuple[str, str]] = field(default_factory=list)
    duplicated: list[tuple[str, str]] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not (self.missing or self.stale or self.orphaned or self.duplicated)


async def check_search_index(s: AsyncSession, campaign_id: str | None = None) -> IndexDrift:
    """Compare index rows against a fresh projection of every indexed source row."""
    expected: dict[tuple[str, str], tuple[str, str, str]] = {}
    for p in PROJECTIONS.values():
        sql = f"SELECT {', '.join(p.source_columns)} FROM {p.table}"
        params: dict[str, Any] = {}
        if campaign_id is not None:
            sql += " WHERE campaign_id = :cid"
            params["cid"] = campaign_id
        rows = (await s.execute(text(sql), params)).mappings().all()
        for r in rows:
            name, content = project(p.entity_type, r)
            expected[(p.entity_type, r["id"])] = (r["campaign_id"], name, content)

    sql = f"SELECT {', '.join(INDEX_COLUMNS)} FROM {INDEX_TABLE}"
    params = {}
    if campaign_id is not None:
        sql += " WHERE campaign_id = :cid"
        params["cid"] = campaign_id
    indexed = (await s.execute(text(sql), params)).mappings().all()

    drift = IndexDrift()
    seen: set[tuple[str, str]] = set()
    for r in indexed:
        key = (r["entity_type"], r["entity_id"])
        if key in seen:
            drift.duplicated.append(key)
            continue
        seen.add(key)
        want = expected.get(key)
        if want is None:
            drift.orphaned.append(key)
        elif (r["campaign_id"], r["name"], r["content"]) != want:
            drift.stale.append(key)
    drift.missing.extend(k for k in expected if k not in seen)

    if not drift.clean:
        inc_counter("search_index.drift_detected")
        log.warning(
            "search_index.drift",
            campaign_id=campaign_id,
            missing=len(drift.missing),
            stale=len(drift.stale),
            orphaned=len(drift.orphaned),
            duplicated=len(drift.duplicated),
        )
    return drift


async def rebuild_search_index(s: AsyncSession) -> int:
    """Drop every index row and re-project all source rows. Returns rows written."""
    await s.execute(text(f"DELETE FROM {INDEX_TABLE}"))
    for stmt in backfill_statements():
        await s.execute(text(stmt))
    total = (await s.execute(text(f"SELECT count(*) FROM {INDEX_TABLE}"))).scalar_one()
    inc_counter("search_index.rebuilt")
    log.info("search_index.rebuilt", rows=total)
    return total
