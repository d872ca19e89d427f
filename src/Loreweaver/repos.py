# repos.py

from __future__ import annotations

import asyncio
import datetime as dt
from collections import defaultdict
from collections.abc import Iterable
from typing import Any, TypeVar

import structlog
from sqlalchemy import delete, func, or_, select, tuple_, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from Loreweaver import models
from Loreweaver.db import Base
from Loreweaver.errors import DatabaseError, NotFoundError
from Loreweaver.metrics import inc_counter

log = structlog.get_logger()

M = TypeVar("M", bound=Base)

# Deterministic list order per kind; id breaks ties
_LIST_ORDER: dict[type[Base], tuple[Any, ...]] = {
    models.Campaign: (models.Campaign.updated_at.desc(),),
    models.Player: (models.Player.name.asc(),),
    models.Location: (models.Location.name.asc(),),
    models.Character: (models.Character.name.asc(),),
    models.Organization: (models.Organization.name.asc(),),
    models.Quest: (models.Quest.name.asc(),),
    models.Hero: (models.Hero.name.asc(),),
    models.Session: (models.Session.session_number.asc(),),
    models.TimelineEvent: (models.TimelineEvent.sort_order.asc(),),
    models.Secret: (models.Secret.created_at.desc(),),
    models.Relationship: (models.Relationship.created_at.desc(),),
    models.Tag: (models.Tag.name.asc(),),
}


class MessageOrderConflict(DatabaseError):
    """Another writer took the message_order this insert computed."""


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _label(model: type[Base]) -> str:
    return models.LABELS.get(model, model.__name__)


async def _flush_retry(s: AsyncSession, attempts: int = 5, delay: float = 0.2) -> None:
    """Retry session.flush() on transient SQLite 'database is locked' errors.

    Exponential backoff: delay * 2^i between attempts.
    """
    for i in range(attempts):
        try:
            await s.flush()
            return
        except OperationalError as e:  # pragma: no cover - timing dependent
            msg = str(e).lower()
            if "database is locked" in msg or "database is busy" in msg:
                if i == attempts - 1:
                    raise
                await asyncio.sleep(delay * (2**i))
                continue
            raise


# -----------------------------
# Generic entity operations
# -----------------------------


async def create_entity(s: AsyncSession, model: type[M], **fields: Any) -> M:
    obj = model(**fields)
    s.add(obj)
    await _flush_retry(s)
    inc_counter(f"{model.__tablename__}.created")
    return obj


async def find_entity(s: AsyncSession, model: type[M], entity_id: str) -> M | None:
    return await s.get(model, entity_id, populate_existing=True)


async def get_entity(s: AsyncSession, model: type[M], entity_id: str) -> M:
    obj = await find_entity(s, model, entity_id)
    if obj is None:
        raise NotFoundError.for_entity(_label(model), entity_id)
    return obj


async def list_entities(
    s: AsyncSession, model: type[M], campaign_id: str | None = None
) -> list[M]:
    """Campaign-scoped listing in the kind's fixed order.

    Campaigns themselves are global; pass no campaign_id for them.
    """
    stmt = select(model)
    if campaign_id is not None:
        stmt = stmt.where(model.campaign_id == campaign_id)  # type: ignore[attr-defined]
    stmt = stmt.order_by(*_LIST_ORDER.get(model, ()), model.id)  # type: ignore[attr-defined]
    q = await s.execute(stmt.execution_options(populate_existing=True))
    return list(q.scalars().all())


async def update_entity(s: AsyncSession, model: type[M], entity_id: str, **changes: Any) -> M:
    """Apply only the supplied (non-None) fields and refresh updated_at."""
    obj = await get_entity(s, model, entity_id)
    for key, value in changes.items():
        if value is not None:
            setattr(obj, key, value)
    if hasattr(obj, "updated_at"):
        obj.updated_at = _utcnow()  # type: ignore[attr-defined]
    await _flush_retry(s)
    inc_counter(f"{model.__tablename__}.updated")
    return obj


async def delete_entity(s: AsyncSession, model: type[M], entity_id: str) -> bool:
    """Delete by id; False when nothing matched.

    Dependent rows follow the schema's ON DELETE rules. Relationships and
    entity tags pointing at the row are left in place.
    """
    res = await s.execute(
        delete(model)
        .where(model.id == entity_id)  # type: ignore[attr-defined]
        .execution_options(synchronize_session=False)
    )
    removed = (res.rowcount or 0) > 0
    if removed:
        inc_counter(f"{model.__tablename__}.deleted")
        log.info("entity.deleted", kind=model.__tablename__, entity_id=entity_id)
    return removed


# -----------------------------
# Locations
# -----------------------------


async def list_location_children(s: AsyncSession, parent_id: str) -> list[models.Location]:
    q = await s.execute(
        select(models.Location)
        .where(models.Location.parent_id == parent_id)
        .order_by(models.Location.name.asc(), models.Location.id)
        .execution_options(populate_existing=True)
    )
    return list(q.scalars().all())


# -----------------------------
# Relationships and tags
# -----------------------------


async def list_entity_relationships(
    s: AsyncSession, entity_type: str, entity_id: str
) -> list[models.Relationship]:
    """Relationships where the entity is either the source or the target."""
    R = models.Relationship
    q = await s.execute(
        select(R)
        .where(
            or_(
                (R.source_type == entity_type) & (R.source_id == entity_id),
                (R.target_type == entity_type) & (R.target_id == entity_id),
            )
        )
        .order_by(R.created_at.desc(), R.id)
        .execution_options(populate_existing=True)
    )
    return list(q.scalars().all())


async def add_entity_tag(s: AsyncSession, tag_id: str, entity_type: str, entity_id: str) -> bool:
    s.add(models.EntityTag(tag_id=tag_id, entity_type=entity_type, entity_id=entity_id))
    await _flush_retry(s)
    inc_counter("entity_tags.created")
    return True


async def remove_entity_tag(
    s: AsyncSession, tag_id: str, entity_type: str, entity_id: str
) -> bool:
    ET = models.EntityTag
    res = await s.execute(
        delete(ET)
        .where(ET.tag_id == tag_id, ET.entity_type == entity_type, ET.entity_id == entity_id)
        .execution_options(synchronize_session=False)
    )
    return (res.rowcount or 0) > 0


async def list_entity_tags(s: AsyncSession, entity_type: str, entity_id: str) -> list[models.Tag]:
    ET = models.EntityTag
    q = await s.execute(
        select(models.Tag)
        .join(ET, ET.tag_id == models.Tag.id)
        .where(ET.entity_type == entity_type, ET.entity_id == entity_id)
        .order_by(models.Tag.name.asc(), models.Tag.id)
        .execution_options(populate_existing=True)
    )
    return list(q.scalars().all())


async def _live_refs(s: AsyncSession, refs: Iterable[tuple[str, str]]) -> set[tuple[str, str]]:
    """Subset of (entity_type, entity_id) refs that still resolve.

    Refs to kinds this build doesn't know are reported live and left alone.
    """
    by_type: dict[str, set[str]] = defaultdict(set)
    for entity_type, entity_id in refs:
        by_type[entity_type].add(entity_id)
    live: set[tuple[str, str]] = set()
    for entity_type, ids in by_type.items():
        model = models.KINDS.get(entity_type)
        if model is None:
            live.update((entity_type, i) for i in ids)
            continue
        q = await s.execute(select(model.id).where(model.id.in_(ids)))  # type: ignore[attr-defined]
        live.update((entity_type, i) for i in q.scalars().all())
    return live


async def prune_orphaned_associations(s: AsyncSession, campaign_id: str) -> tuple[int, int]:
    """Delete relationships and entity tags whose referenced entity is gone.

    Returns (relationships_removed, entity_tags_removed).
    """
    R = models.Relationship
    ET = models.EntityTag

    rels = (await s.execute(select(R).where(R.campaign_id == campaign_id))).scalars().all()
    tag_rows = (
        await s.execute(
            select(ET.tag_id, ET.entity_type, ET.entity_id)
            .join(models.Tag, models.Tag.id == ET.tag_id)
            .where(models.Tag.campaign_id == campaign_id)
        )
    ).all()

    refs: set[tuple[str, str]] = set()
    for r in rels:
        refs.add((r.source_type, r.source_id))
        refs.add((r.target_type, r.target_id))
    refs.update((row.entity_type, row.entity_id) for row in tag_rows)
    live = await _live_refs(s, refs)

    dead_rel_ids = [
        r.id
        for r in rels
        if (r.source_type, r.source_id) not in live or (r.target_type, r.target_id) not in live
    ]
    dead_tags = [
        (row.tag_id, row.entity_type, row.entity_id)
        for row in tag_rows
        if (row.entity_type, row.entity_id) not in live
    ]

    if dead_rel_ids:
        await s.execute(
            delete(R).where(R.id.in_(dead_rel_ids)).execution_options(synchronize_session=False)
        )
    if dead_tags:
        await s.execute(
            delete(ET)
            .where(tuple_(ET.tag_id, ET.entity_type, ET.entity_id).in_(dead_tags))
            .execution_options(synchronize_session=False)
        )
    inc_counter("associations.pruned", len(dead_rel_ids) + len(dead_tags))
    log.info(
        "associations.pruned",
        campaign_id=campaign_id,
        relationships=len(dead_rel_ids),
        entity_tags=len(dead_tags),
    )
    return len(dead_rel_ids), len(dead_tags)


# -----------------------------
# AI conversations
# -----------------------------


async def find_ai_conversation(
    s: AsyncSession, campaign_id: str, context_type: str
) -> models.AiConversation | None:
    C = models.AiConversation
    q = await s.execute(
        select(C)
        .where(C.campaign_id == campaign_id, C.context_type == context_type)
        .execution_options(populate_existing=True)
    )
    return q.scalar_one_or_none()


async def list_ai_conversations(
    s: AsyncSession, context_type: str | None = None
) -> list[models.AiConversation]:
    """All conversations across campaigns, most recently active first."""
    C = models.AiConversation
    stmt = select(C)
    if context_type is not None:
        stmt = stmt.where(C.context_type == context_type)
    q = await s.execute(stmt.order_by(C.updated_at.desc(), C.id))
    return list(q.scalars().all())


async def get_or_create_ai_conversation(
    s: AsyncSession, campaign_id: str, context_type: str
) -> models.AiConversation:
    obj = await find_ai_conversation(s, campaign_id, context_type)
    if obj:
        return obj
    return await create_entity(
        s, models.AiConversation, campaign_id=campaign_id, context_type=context_type
    )


async def list_ai_messages(s: AsyncSession, conversation_id: str) -> list[models.AiMessage]:
    AM = models.AiMessage
    q = await s.execute(
        select(AM)
        .where(AM.conversation_id == conversation_id)
        .order_by(AM.message_order.asc())
        .execution_options(populate_existing=True)
    )
    return list(q.scalars().all())


async def add_ai_message(
    s: AsyncSession,
    conversation_id: str,
    *,
    role: str,
    content: str,
    tool_name: str | None = None,
    tool_input_json: str | None = None,
    tool_data_json: str | None = None,
    proposal_json: str | None = None,
) -> models.AiMessage:
    """Append a message with order = existing message count + 1.

    Raises MessageOrderConflict when a concurrent append took that order;
    the session must be rolled back before retrying.
    """
    AM = models.AiMessage
    q = await s.execute(
        select(func.count()).select_from(AM).where(AM.conversation_id == conversation_id)
    )
    count = q.scalar_one()
    msg = AM(
        conversation_id=conversation_id,
        role=role,
        content=content,
        tool_name=tool_name,
        tool_input_json=tool_input_json,
        tool_data_json=tool_data_json,
        proposal_json=proposal_json,
        message_order=int(count) + 1,
    )
    s.add(msg)
    try:
        await _flush_retry(s)
    except IntegrityError as exc:
        if "UNIQUE" in str(exc.orig):
            inc_counter("ai_messages.order_conflict")
            raise MessageOrderConflict(str(exc.orig)) from exc
        raise
    await s.execute(
        update(models.AiConversation)
        .where(models.AiConversation.id == conversation_id)
        .values(updated_at=_utcnow())
        .execution_options(synchronize_session=False)
    )
    inc_counter("ai_messages.created")
    return msg


async def update_ai_token_counts(
    s: AsyncSession,
    conversation_id: str,
    *,
    input_tokens: int,
    output_tokens: int,
    cache_read_tokens: int,
    cache_creation_tokens: int,
) -> models.AiConversation:
    """Add the given counts onto the running totals."""
    C = models.AiConversation
    res = await s.execute(
        update(C)
        .where(C.id == conversation_id)
        .values(
            total_input_tokens=C.total_input_tokens + input_tokens,
            total_output_tokens=C.total_output_tokens + output_tokens,
            total_cache_read_tokens=C.total_cache_read_tokens + cache_read_tokens,
            total_cache_creation_tokens=C.total_cache_creation_tokens + cache_creation_tokens,
            updated_at=_utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    if (res.rowcount or 0) == 0:
        raise NotFoundError.for_entity(_label(C), conversation_id)
    return await get_entity(s, C, conversation_id)


async def clear_ai_conversation(s: AsyncSession, conversation_id: str) -> bool:
    """Drop every message and zero the counters; the conversation row stays.

    Returns True iff any message was deleted.
    """
    AM = models.AiMessage
    C = models.AiConversation
    res = await s.execute(
        delete(AM)
        .where(AM.conversation_id == conversation_id)
        .execution_options(synchronize_session=False)
    )
    await s.execute(
        update(C)
        .where(C.id == conversation_id)
        .values(
            total_input_tokens=0,
            total_output_tokens=0,
            total_cache_read_tokens=0,
            total_cache_creation_tokens=0,
            updated_at=_utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    deleted = res.rowcount or 0
    log.info("ai_conversation.cleared", conversation_id=conversation_id, messages=deleted)
    return deleted > 0
