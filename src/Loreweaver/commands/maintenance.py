# src/Loreweaver/commands/maintenance.py
from Loreweaver import repos, search_index
from Loreweaver.commanding import CampaignOpts, Option, command
from Loreweaver.db import session_scope
from Loreweaver.schemas import IndexDriftReport, PruneReport


class IndexCheckOpts(Option):
    campaign_id: str | None = None


@command(
    name="prune_orphaned_associations",
    description="Remove relationships and entity tags that point at deleted entities.",
    option_model=CampaignOpts,
)
async def prune_orphaned_associations(opts: CampaignOpts):
    async with session_scope() as s:
        rels, tags = await repos.prune_orphaned_associations(s, opts.campaign_id)
        return PruneReport(relationships_removed=rels, entity_tags_removed=tags)


@command(
    name="check_search_index",
    description="Compare the search index with its source rows.",
    option_model=IndexCheckOpts,
)
async def check_search_index(opts: IndexCheckOpts):
    async with session_scope() as s:
        drift = await search_index.check_search_index(s, opts.campaign_id)
        return IndexDriftReport(
            missing=drift.missing,
            stale=drift.stale,
            orphaned=drift.orphaned,
            duplicated=drift.duplicated,
            clean=drift.clean,
        )


@command(
    name="rebuild_search_index",
    description="Re-project every indexed row into the search index.",
)
async def rebuild_search_index(opts: Option):
    async with session_scope() as s:
        return await search_index.rebuild_search_index(s)
