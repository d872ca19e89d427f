# src/Loreweaver/commands/search.py
from pydantic import Field

from Loreweaver import search
from Loreweaver.commanding import Option, command
from Loreweaver.db import session_scope
from Loreweaver.validation import SearchableType


class SearchOpts(Option):
    campaign_id: str
    query: str = Field(description="Free text; every word is prefix-matched")
    entity_types: list[SearchableType] | None = Field(
        default=None, description="Restrict results to these kinds"
    )
    limit: int | None = Field(default=None, ge=1, description="Maximum results (default 50)")


@command(
    name="search_entities",
    description="Full-text search within one campaign.",
    option_model=SearchOpts,
)
async def search_entities(opts: SearchOpts):
    async with session_scope() as s:
        return await search.search_entities(
            s,
            opts.campaign_id,
            opts.query,
            entity_types=opts.entity_types,
            limit=opts.limit,
        )
