# src/Loreweaver/commands/relationship.py
from pydantic import Field

from Loreweaver import models, repos
from Loreweaver.commanding import Option, command, register_crud
from Loreweaver.db import session_scope
from Loreweaver.schemas import RelationshipRecord
from Loreweaver.validation import EntityType, LongText, Name


class CreateRelationshipOpts(Option):
    campaign_id: str
    source_type: EntityType
    source_id: str
    target_type: EntityType
    target_id: str
    relationship_type: Name = Field(description="Free-form label, e.g. 'ally_of'")
    description: LongText | None = None
    is_bidirectional: bool | None = None
    strength: int | None = Field(default=None, description="Convention: -100..100")


class UpdateRelationshipOpts(Option):
    id: str
    relationship_type: Name | None = None
    description: LongText | None = None
    is_bidirectional: bool | None = None
    strength: int | None = None
    is_public: bool | None = None


class EntityRefOpts(Option):
    entity_type: EntityType
    entity_id: str


register_crud(
    kind="relationship",
    plural="relationships",
    model=models.Relationship,
    record=RelationshipRecord,
    create_model=CreateRelationshipOpts,
    update_model=UpdateRelationshipOpts,
)


@command(
    name="get_entity_relationships",
    description="List relationships where the entity is the source or the target.",
    option_model=EntityRefOpts,
)
async def get_entity_relationships(opts: EntityRefOpts):
    async with session_scope() as s:
        rows = await repos.list_entity_relationships(s, opts.entity_type, opts.entity_id)
        return [RelationshipRecord.model_validate(r) for r in rows]
