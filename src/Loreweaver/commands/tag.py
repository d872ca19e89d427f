# src/Loreweaver/commands/tag.py
from Loreweaver import models, repos
from Loreweaver.commanding import Option, command, register_crud
from Loreweaver.db import session_scope
from Loreweaver.schemas import TagRecord
from Loreweaver.validation import EntityType, Name, ShortText


class CreateTagOpts(Option):
    campaign_id: str
    name: Name
    color: ShortText | None = None


class EntityTagOpts(Option):
    tag_id: str
    entity_type: EntityType
    entity_id: str


class EntityTagsOpts(Option):
    entity_type: EntityType
    entity_id: str


register_crud(
    kind="tag",
    plural="tags",
    model=models.Tag,
    record=TagRecord,
    create_model=CreateTagOpts,
)


@command(
    name="add_entity_tag",
    description="Attach a tag to an entity.",
    option_model=EntityTagOpts,
)
async def add_entity_tag(opts: EntityTagOpts):
    async with session_scope() as s:
        return await repos.add_entity_tag(s, opts.tag_id, opts.entity_type, opts.entity_id)


@command(
    name="remove_entity_tag",
    description="Detach a tag from an entity; false if it was not attached.",
    option_model=EntityTagOpts,
)
async def remove_entity_tag(opts: EntityTagOpts):
    async with session_scope() as s:
        return await repos.remove_entity_tag(s, opts.tag_id, opts.entity_type, opts.entity_id)


@command(
    name="get_entity_tags",
    description="List the tags attached to an entity.",
    option_model=EntityTagsOpts,
)
async def get_entity_tags(opts: EntityTagsOpts):
    async with session_scope() as s:
        rows = await repos.list_entity_tags(s, opts.entity_type, opts.entity_id)
        return [TagRecord.model_validate(r) for r in rows]
