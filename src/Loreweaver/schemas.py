# schemas.py
"""Response records returned by commands.

Each mirrors one ORM model and is built with ``model_validate(obj)``.
"""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict


class _Record(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: dt.datetime
    updated_at: dt.datetime


class _CampaignScoped(_Record):
    campaign_id: str


class CampaignRecord(_Record):
    name: str
    description: str | None = None
    system: str | None = None
    settings_json: str | None = None


class PlayerRecord(_CampaignScoped):
    name: str
    preferences: str | None = None
    boundaries: str | None = None
    notes: str | None = None


class LocationRecord(_CampaignScoped):
    parent_id: str | None = None
    name: str
    location_type: str
    description: str | None = None
    gm_notes: str | None = None


class CharacterRecord(_CampaignScoped):
    name: str
    lineage: str | None = None
    occupation: str | None = None
    is_alive: bool
    description: str | None = None
    personality: str | None = None
    motivations: str | None = None
    secrets: str | None = None
    voice_notes: str | None = None
    stat_block_json: str | None = None


class OrganizationRecord(_CampaignScoped):
    name: str
    org_type: str
    description: str | None = None
    goals: str | None = None
    resources: str | None = None
    reputation: str | None = None
    secrets: str | None = None
    is_active: bool


class QuestRecord(_CampaignScoped):
    name: str
    status: str
    plot_type: str
    description: str | None = None
    hook: str | None = None
    objectives: str | None = None
    complications: str | None = None
    resolution: str | None = None
    reward: str | None = None


class HeroRecord(_CampaignScoped):
    player_id: str | None = None
    name: str
    lineage: str | None = None
    classes: str | None = None
    description: str | None = None
    backstory: str | None = None
    goals: str | None = None
    bonds: str | None = None
    is_active: bool


class SessionRecord(_CampaignScoped):
    session_number: int
    date: dt.date | None = None
    title: str | None = None
    planned_content: str | None = None
    notes: str | None = None
    summary: str | None = None
    highlights: str | None = None


class TimelineEventRecord(_CampaignScoped):
    date_display: str
    sort_order: int
    title: str
    description: str | None = None
    significance: str
    is_public: bool


class SecretRecord(_CampaignScoped):
    title: str
    content: str
    related_entity_type: str | None = None
    related_entity_id: str | None = None
    known_by: str | None = None
    revealed: bool
    revealed_in_session: int | None = None


class RelationshipRecord(_CampaignScoped):
    source_type: str
    source_id: str
    target_type: str
    target_id: str
    relationship_type: str
    description: str | None = None
    is_bidirectional: bool
    strength: int | None = None
    is_public: bool


class TagRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    campaign_id: str
    name: str
    color: str | None = None
    created_at: dt.datetime


class AiConversationRecord(_CampaignScoped):
    context_type: str
    total_input_tokens: int
    total_output_tokens: int
    total_cache_read_tokens: int
    total_cache_creation_tokens: int


class AiMessageRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    conversation_id: str
    role: str
    content: str
    tool_name: str | None = None
    tool_input_json: str | None = None
    tool_data_json: str | None = None
    proposal_json: str | None = None
    message_order: int
    created_at: dt.datetime


class ConversationWithMessages(BaseModel):
    conversation: AiConversationRecord
    messages: list[AiMessageRecord]


class SearchResult(BaseModel):
    entity_type: str
    entity_id: str
    name: str
    snippet: str | None = None
    # FTS5 bm25 rank: smaller is a better match
    rank: float


class PruneReport(BaseModel):
    relationships_removed: int = 0
    entity_tags_removed: int = 0


class IndexDriftReport(BaseModel):
    missing: list[tuple[str, str]]
    stale: list[tuple[str, str]]
    orphaned: list[tuple[str, str]]
    duplicated: list[tuple[str, str]]
    clean: bool
