# models.py

from __future__ import annotations

import datetime as dt
import uuid

from sqlalchemy import (
    BigInteger,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from Loreweaver import search_index
from Loreweaver.db import Base


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _id_column() -> Mapped[str]:
    return mapped_column(String(36), primary_key=True, default=_new_id)


def _campaign_fk() -> Mapped[str]:
    return mapped_column(ForeignKey("campaigns.id", ondelete="CASCADE"), nullable=False)


def _created_at() -> Mapped[dt.datetime]:
    return mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)


def _updated_at() -> Mapped[dt.datetime]:
    return mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False
    )


class Campaign(Base):
    __tablename__ = "campaigns"
    id: Mapped[str] = _id_column()
    name: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    system: Mapped[str | None] = mapped_column(String(200), nullable=True)
    # Opaque JSON owned by the UI
    settings_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = _created_at()
    updated_at: Mapped[dt.datetime] = _updated_at()


class Player(Base):
    __tablename__ = "players"
    id: Mapped[str] = _id_column()
    campaign_id: Mapped[str] = _campaign_fk()
    name: Mapped[str] = mapped_column(String(200))
    preferences: Mapped[str | None] = mapped_column(Text, nullable=True)
    boundaries: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = _created_at()
    updated_at: Mapped[dt.datetime] = _updated_at()

    __table_args__ = (Index("idx_players_campaign", "campaign_id"),)


class Location(Base):
    __tablename__ = "locations"
    id: Mapped[str] = _id_column()
    campaign_id: Mapped[str] = _campaign_fk()
    # Deleting a parent orphans its children instead of deleting them
    parent_id: Mapped[str | None] = mapped_column(
        ForeignKey("locations.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(200))
    location_type: Mapped[str] = mapped_column(String(32), default="settlement")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    gm_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = _created_at()
    updated_at: Mapped[dt.datetime] = _updated_at()

    __table_args__ = (
        Index("idx_locations_campaign", "campaign_id"),
        Index("idx_locations_parent", "parent_id"),
    )


class Character(Base):
    __tablename__ = "characters"
    id: Mapped[str] = _id_column()
    campaign_id: Mapped[str] = _campaign_fk()
    name: Mapped[str] = mapped_column(String(200))
    lineage: Mapped[str | None] = mapped_column(String(200), nullable=True)
    occupation: Mapped[str | None] = mapped_column(String(200), nullable=True)
    is_alive: Mapped[bool] = mapped_column(Boolean, default=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    personality: Mapped[str | None] = mapped_column(Text, nullable=True)
    motivations: Mapped[str | None] = mapped_column(Text, nullable=True)
    secrets: Mapped[str | None] = mapped_column(Text, nullable=True)
    voice_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    stat_block_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = _created_at()
    updated_at: Mapped[dt.datetime] = _updated_at()

    __table_args__ = (Index("idx_characters_campaign", "campaign_id"),)


class Organization(Base):
    __tablename__ = "organizations"
    id: Mapped[str] = _id_column()
    campaign_id: Mapped[str] = _campaign_fk()
    name: Mapped[str] = mapped_column(String(200))
    org_type: Mapped[str] = mapped_column(String(32), default="other")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    goals: Mapped[str | None] = mapped_column(Text, nullable=True)
    resources: Mapped[str | None] = mapped_column(Text, nullable=True)
    reputation: Mapped[str | None] = mapped_column(Text, nullable=True)
    secrets: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[dt.datetime] = _created_at()
    updated_at: Mapped[dt.datetime] = _updated_at()

    __table_args__ = (Index("idx_organizations_campaign", "campaign_id"),)


class Quest(Base):
    __tablename__ = "quests"
    id: Mapped[str] = _id_column()
    campaign_id: Mapped[str] = _campaign_fk()
    name: Mapped[str] = mapped_column(String(200))
    status: Mapped[str] = mapped_column(String(32), default="planned")
    plot_type: Mapped[str] = mapped_column(String(32), default="side")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    hook: Mapped[str | None] = mapped_column(Text, nullable=True)
    objectives: Mapped[str | None] = mapped_column(Text, nullable=True)
    complications: Mapped[str | None] = mapped_column(Text, nullable=True)
    resolution: Mapped[str | None] = mapped_column(Text, nullable=True)
    reward: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = _created_at()
    updated_at: Mapped[dt.datetime] = _updated_at()

    __table_args__ = (
        Index("idx_quests_campaign", "campaign_id"),
        Index("idx_quests_status", "status"),
    )


class Hero(Base):
    __tablename__ = "heroes"
    id: Mapped[str] = _id_column()
    campaign_id: Mapped[str] = _campaign_fk()
    # A player can leave without taking their heroes along
    player_id: Mapped[str | None] = mapped_column(
        ForeignKey("players.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(200))
    lineage: Mapped[str | None] = mapped_column(String(200), nullable=True)
    classes: Mapped[str | None] = mapped_column(String(200), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    backstory: Mapped[str | None] = mapped_column(Text, nullable=True)
    goals: Mapped[str | None] = mapped_column(Text, nullable=True)
    bonds: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[dt.datetime] = _created_at()
    updated_at: Mapped[dt.datetime] = _updated_at()

    __table_args__ = (
        Index("idx_heroes_campaign", "campaign_id"),
        Index("idx_heroes_player", "player_id"),
    )


class Session(Base):
    """One played (or planned) game session."""

    __tablename__ = "sessions"
    id: Mapped[str] = _id_column()
    campaign_id: Mapped[str] = _campaign_fk()
    session_number: Mapped[int] = mapped_column(Integer)
    date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    planned_content: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    highlights: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = _created_at()
    updated_at: Mapped[dt.datetime] = _updated_at()

    __table_args__ = (
        UniqueConstraint("campaign_id", "session_number", name="ux_sessions_campaign_number"),
        Index("idx_sessions_campaign", "campaign_id"),
    )


class TimelineEvent(Base):
    __tablename__ = "timeline_events"
    id: Mapped[str] = _id_column()
    campaign_id: Mapped[str] = _campaign_fk()
    # Free-form in-world date, ordering comes from sort_order
    date_display: Mapped[str] = mapped_column(String(200))
    sort_order: Mapped[int] = mapped_column(BigInteger, default=0)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    significance: Mapped[str] = mapped_column(String(32), default="local")
    is_public: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[dt.datetime] = _created_at()
    updated_at: Mapped[dt.datetime] = _updated_at()

    __table_args__ = (Index("idx_timeline_events_campaign", "campaign_id"),)


class Secret(Base):
    __tablename__ = "secrets"
    id: Mapped[str] = _id_column()
    campaign_id: Mapped[str] = _campaign_fk()
    title: Mapped[str] = mapped_column(String(200))
    content: Mapped[str] = mapped_column(Text)
    related_entity_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    related_entity_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    known_by: Mapped[str | None] = mapped_column(Text, nullable=True)
    revealed: Mapped[bool] = mapped_column(Boolean, default=False)
    revealed_in_session: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[dt.datetime] = _created_at()
    updated_at: Mapped[dt.datetime] = _updated_at()

    __table_args__ = (Index("idx_secrets_campaign", "campaign_id"),)


# -----------------------------
# Polymorphic associations
# -----------------------------


class Relationship(Base):
    """Directed link between two entities referenced as (type, id) pairs.

    Endpoints are not foreign keys; deleting an endpoint leaves the row behind.
    """

    __tablename__ = "relationships"
    id: Mapped[str] = _id_column()
    campaign_id: Mapped[str] = _campaign_fk()
    source_type: Mapped[str] = mapped_column(String(32))
    source_id: Mapped[str] = mapped_column(String(36))
    target_type: Mapped[str] = mapped_column(String(32))
    target_id: Mapped[str] = mapped_column(String(36))
    relationship_type: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_bidirectional: Mapped[bool] = mapped_column(Boolean, default=False)
    # Convention: -100..100
    strength: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[dt.datetime] = _created_at()
    updated_at: Mapped[dt.datetime] = _updated_at()

    __table_args__ = (
        Index("idx_relationships_campaign", "campaign_id"),
        Index("idx_relationships_source", "source_type", "source_id"),
        Index("idx_relationships_target", "target_type", "target_id"),
    )


class Tag(Base):
    __tablename__ = "tags"
    id: Mapped[str] = _id_column()
    campaign_id: Mapped[str] = _campaign_fk()
    name: Mapped[str] = mapped_column(String(200))
    color: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[dt.datetime] = _created_at()

    __table_args__ = (
        UniqueConstraint("campaign_id", "name", name="ux_tags_campaign_name"),
        Index("idx_tags_campaign", "campaign_id"),
    )


class EntityTag(Base):
    __tablename__ = "entity_tags"
    tag_id: Mapped[str] = mapped_column(
        ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True
    )
    entity_type: Mapped[str] = mapped_column(String(32), primary_key=True)
    entity_id: Mapped[str] = mapped_column(String(36), primary_key=True)

    __table_args__ = (Index("idx_entity_tags_entity", "entity_type", "entity_id"),)


# -----------------------------
# AI assistant transcripts
# -----------------------------


class AiConversation(Base):
    __tablename__ = "ai_conversations"
    id: Mapped[str] = _id_column()
    campaign_id: Mapped[str] = _campaign_fk()
    # e.g. "sidebar" | "fullpage"
    context_type: Mapped[str] = mapped_column(String(32))
    total_input_tokens: Mapped[int] = mapped_column(BigInteger, default=0)
    total_output_tokens: Mapped[int] = mapped_column(BigInteger, default=0)
    total_cache_read_tokens: Mapped[int] = mapped_column(BigInteger, default=0)
    total_cache_creation_tokens: Mapped[int] = mapped_column(BigInteger, default=0)
    created_at: Mapped[dt.datetime] = _created_at()
    updated_at: Mapped[dt.datetime] = _updated_at()

    __table_args__ = (
        UniqueConstraint(
            "campaign_id", "context_type", name="ux_ai_conversations_campaign_context"
        ),
    )


class AiMessage(Base):
    __tablename__ = "ai_messages"
    id: Mapped[str] = _id_column()
    conversation_id: Mapped[str] = mapped_column(
        ForeignKey("ai_conversations.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[str] = mapped_column(String(32))
    content: Mapped[str] = mapped_column(Text)
    tool_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    tool_input_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    tool_data_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    proposal_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    message_order: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[dt.datetime] = _created_at()

    __table_args__ = (
        # Concurrent appends that compute the same order collide here and retry
        UniqueConstraint(
            "conversation_id", "message_order", name="ux_ai_messages_conversation_order"
        ),
    )


# Entity kinds addressable through (entity_type, entity_id) pairs
KINDS: dict[str, type[Base]] = {
    "campaign": Campaign,
    "player": Player,
    "location": Location,
    "character": Character,
    "organization": Organization,
    "quest": Quest,
    "hero": Hero,
    "session": Session,
    "timeline_event": TimelineEvent,
    "secret": Secret,
}

LABELS: dict[type[Base], str] = {
    Campaign: "Campaign",
    Player: "Player",
    Location: "Location",
    Character: "Character",
    Organization: "Organization",
    Quest: "Quest",
    Hero: "Hero",
    Session: "Session",
    TimelineEvent: "Timeline event",
    Secret: "Secret",
    Relationship: "Relationship",
    Tag: "Tag",
    AiConversation: "Conversation",
}

# Full-text index and its sync triggers ride along with create_all/drop_all
search_index.attach(Base.metadata)
