# search.py
"""Campaign-scoped full-text search over the trigger-maintained index."""

from __future__ import annotations

import time
from collections.abc import Sequence

import structlog
from sqlalchemy import bindparam, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from Loreweaver.errors import DatabaseError
from Loreweaver.metrics import inc_counter, observe_histogram
from Loreweaver.schemas import SearchResult
from Loreweaver.search_index import CONTENT_COLUMN, INDEX_TABLE

log = structlog.get_logger()

DEFAULT_LIMIT = 50
SNIPPET_OPEN = "<mark>"
SNIPPET_CLOSE = "</mark>"
SNIPPET_ELLIPSIS = "..."
SNIPPET_TOKENS = 32


def build_fts_query(query: str) -> str:
    """Translate free text into an FTS5 prefix query.

    Each whitespace-separated token loses its double quotes (so user input
    can't open a phrase) and gains a trailing ``*``:

    >>> build_fts_query('gandalf "the grey"')
    'gandalf* the* grey*'

    Empty input yields ``""``, which FTS5 rejects; callers get that error as-is.
    """
    return " ".join(f"{token.replace(chr(34), '')}*" for token in query.split())


_SEARCH_SQL = (
    "SELECT entity_type, entity_id, name, "
    f"snippet({INDEX_TABLE}, {CONTENT_COLUMN}, '{SNIPPET_OPEN}', '{SNIPPET_CLOSE}', "
    f"'{SNIPPET_ELLIPSIS}', {SNIPPET_TOKENS}) AS snippet, rank "
    f"FROM {INDEX_TABLE} "
    f"WHERE {INDEX_TABLE} MATCH :match AND campaign_id = :campaign_id"
)


async def search_entities(
    s: AsyncSession,
    campaign_id: str,
    query: str,
    *,
    entity_types: Sequence[str] | None = None,
    limit: int | None = None,
) -> list[SearchResult]:
    """Ranked search within one campaign, best match first.

    ``entity_types`` narrows results to the given kinds; ``None`` or an empty
    list searches every indexed kind.
    """
    fts_query = build_fts_query(query)
    limit = DEFAULT_LIMIT if limit is None else limit

    sql = _SEARCH_SQL
    params: dict[str, object] = {
        "match": fts_query,
        "campaign_id": campaign_id,
        "limit": limit,
    }
    if entity_types:
        sql += " AND entity_type IN :entity_types"
        params["entity_types"] = list(entity_types)
    stmt = text(sql + " ORDER BY rank LIMIT :limit")
    if entity_types:
        stmt = stmt.bindparams(bindparam("entity_types", expanding=True))

    inc_counter("search.query")
    started = time.perf_counter()
    try:
        rows = (await s.execute(stmt, params)).mappings().all()
    except SQLAlchemyError as exc:
        inc_counter("search.error")
        log.warning("search.query_failed", campaign_id=campaign_id, fts_query=fts_query)
        orig = getattr(exc, "orig", None)
        raise DatabaseError(str(orig if orig is not None else exc)) from exc
    finally:
        observe_histogram("search.latency_ms", int((time.perf_counter() - started) * 1000))

    results = [
        SearchResult(
            entity_type=r["entity_type"],
            entity_id=r["entity_id"],
            name=r["name"],
            snippet=r["snippet"],
            rank=r["rank"],
        )
        for r in rows
    ]
    log.debug(
        "search.query",
        campaign_id=campaign_id,
        fts_query=fts_query,
        entity_types=list(entity_types or []),
        results=len(results),
    )
    return results
