# src/Loreweaver/commands/location.py
from pydantic import Field

from Loreweaver import models, repos
from Loreweaver.commanding import Option, command, register_crud
from Loreweaver.db import session_scope
from Loreweaver.schemas import LocationRecord
from Loreweaver.validation import LocationType, LongText, Name


class CreateLocationOpts(Option):
    campaign_id: str
    name: Name
    location_type: LocationType = Field(default="settlement", description="Kind of place")
    parent_id: str | None = Field(default=None, description="Enclosing location")
    description: LongText | None = None


class UpdateLocationOpts(Option):
    id: str
    name: Name | None = None
    location_type: LocationType | None = None
    parent_id: str | None = None
    description: LongText | None = None
    gm_notes: LongText | None = None


class LocationChildrenOpts(Option):
    parent_id: str


register_crud(
    kind="location",
    plural="locations",
    model=models.Location,
    record=LocationRecord,
    create_model=CreateLocationOpts,
    update_model=UpdateLocationOpts,
)


@command(
    name="get_location_children",
    description="List the direct children of a location.",
    option_model=LocationChildrenOpts,
)
async def get_location_children(opts: LocationChildrenOpts):
    async with session_scope() as s:
        rows = await repos.list_location_children(s, opts.parent_id)
        return [LocationRecord.model_validate(r) for r in rows]
