import pytest

from Loreweaver.commanding import ensure_commands_loaded, find_command, invoke
from Loreweaver.errors import DatabaseError, NotFoundError, ValidationError


def _ref(entity_id: str) -> dict:
    return {"entity_type": "character", "entity_id": entity_id}


async def _npc(campaign_id: str, name: str):
    return await invoke("create_character", {"campaign_id": campaign_id, "name": name})


@pytest.mark.asyncio
async def test_relationship_create_defaults_and_update(campaign):
    cid = campaign["id"]
    a = await _npc(cid, "Aragorn")
    b = await _npc(cid, "Arwen")
    rel = await invoke(
        "create_relationship",
        {
            "campaign_id": cid,
            "source_type": "character",
            "source_id": a.id,
            "target_type": "character",
            "target_id": b.id,
            "relationship_type": "betrothed_to",
        },
    )
    assert rel.is_bidirectional is False
    assert rel.is_public is True
    assert rel.strength is None

    updated = await invoke("update_relationship", {"id": rel.id, "strength": 90})
    assert updated.strength == 90
    assert updated.relationship_type == "betrothed_to"


@pytest.mark.asyncio
async def test_entity_relationships_match_either_end(campaign):
    cid = campaign["id"]
    a = await _npc(cid, "Aragorn")
    b = await _npc(cid, "Boromir")
    guild = await invoke("create_organization", {"campaign_id": cid, "name": "Fellowship"})

    outgoing = await invoke(
        "create_relationship",
        {
            "campaign_id": cid,
            "source_type": "character",
            "source_id": a.id,
            "target_type": "character",
            "target_id": b.id,
            "relationship_type": "ally_of",
        },
    )
    incoming = await invoke(
        "create_relationship",
        {
            "campaign_id": cid,
            "source_type": "organization",
            "source_id": guild.id,
            "target_type": "character",
            "target_id": a.id,
            "relationship_type": "includes",
        },
    )

    rels = await invoke(
        "get_entity_relationships", _ref(a.id)
    )
    assert {r.id for r in rels} == {outgoing.id, incoming.id}

    only_b = await invoke(
        "get_entity_relationships", _ref(b.id)
    )
    assert [r.id for r in only_b] == [outgoing.id]

    # Same id under a different kind does not match
    assert (
        await invoke("get_entity_relationships", {"entity_type": "location", "entity_id": a.id})
        == []
    )


@pytest.mark.asyncio
async def test_relationship_rejects_unknown_entity_type(campaign):
    with pytest.raises(ValidationError) as ei:
        await invoke(
            "create_relationship",
            {
                "campaign_id": campaign["id"],
                "source_type": "dragon",
                "source_id": "x",
                "target_type": "character",
                "target_id": "y",
                "relationship_type": "hunts",
            },
        )
    assert "source_type: must be one of:" in str(ei.value)


@pytest.mark.asyncio
async def test_tag_names_are_unique_per_campaign(campaign, other_campaign):
    await invoke("create_tag", {"campaign_id": campaign["id"], "name": "villain"})
    # Same name in another campaign is fine
    await invoke("create_tag", {"campaign_id": other_campaign["id"], "name": "villain"})
    with pytest.raises(DatabaseError) as ei:
        await invoke("create_tag", {"campaign_id": campaign["id"], "name": "villain"})
    assert "UNIQUE" in str(ei.value)


def test_tags_have_no_update_command():
    ensure_commands_loaded()
    assert find_command("create_tag") is not None
    assert find_command("update_tag") is None


@pytest.mark.asyncio
async def test_entity_tag_attach_list_detach(campaign):
    cid = campaign["id"]
    npc = await _npc(cid, "Saruman")
    villain = await invoke("create_tag", {"campaign_id": cid, "name": "villain", "color": "#f00"})
    wizard = await invoke("create_tag", {"campaign_id": cid, "name": "wizard"})
    ref = {"entity_type": "character", "entity_id": npc.id}

    assert await invoke("add_entity_tag", {"tag_id": wizard.id, **ref}) is True
    assert await invoke("add_entity_tag", {"tag_id": villain.id, **ref}) is True
    tags = await invoke("get_entity_tags", ref)
    assert [t.name for t in tags] == ["villain", "wizard"]

    assert await invoke("remove_entity_tag", {"tag_id": villain.id, **ref}) is True
    assert await invoke("remove_entity_tag", {"tag_id": villain.id, **ref}) is False
    assert [t.name for t in await invoke("get_entity_tags", ref)] == ["wizard"]


@pytest.mark.asyncio
async def test_duplicate_entity_tag_is_database_error(campaign):
    cid = campaign["id"]
    npc = await _npc(cid, "Grima")
    tag = await invoke("create_tag", {"campaign_id": cid, "name": "traitor"})
    payload = {"tag_id": tag.id, "entity_type": "character", "entity_id": npc.id}
    await invoke("add_entity_tag", payload)
    with pytest.raises(DatabaseError):
        await invoke("add_entity_tag", payload)


@pytest.mark.asyncio
async def test_deleting_tag_removes_its_associations(campaign):
    cid = campaign["id"]
    npc = await _npc(cid, "Wormtongue")
    tag = await invoke("create_tag", {"campaign_id": cid, "name": "spy"})
    ref = {"entity_type": "character", "entity_id": npc.id}
    await invoke("add_entity_tag", {"tag_id": tag.id, **ref})

    assert await invoke("delete_tag", {"id": tag.id}) is True
    assert await invoke("get_entity_tags", ref) == []
    with pytest.raises(NotFoundError):
        await invoke("get_tag", {"id": tag.id})


@pytest.mark.asyncio
async def test_deleting_entity_leaves_associations_until_pruned(campaign):
    cid = campaign["id"]
    a = await _npc(cid, "Gollum")
    b = await _npc(cid, "Frodo")
    keep = await _npc(cid, "Sam")
    tag = await invoke("create_tag", {"campaign_id": cid, "name": "ringbearer"})

    doomed_rel = await invoke(
        "create_relationship",
        {
            "campaign_id": cid,
            "source_type": "character",
            "source_id": a.id,
            "target_type": "character",
            "target_id": b.id,
            "relationship_type": "guides",
        },
    )
    kept_rel = await invoke(
        "create_relationship",
        {
            "campaign_id": cid,
            "source_type": "character",
            "source_id": keep.id,
            "target_type": "character",
            "target_id": b.id,
            "relationship_type": "serves",
        },
    )
    await invoke("add_entity_tag", {"tag_id": tag.id, **_ref(a.id)})
    await invoke("add_entity_tag", {"tag_id": tag.id, **_ref(b.id)})

    await invoke("delete_character", {"id": a.id})

    # Nothing is removed implicitly
    assert await invoke("get_relationship", {"id": doomed_rel.id})
    dangling = await invoke("get_entity_tags", _ref(a.id))
    assert [t.id for t in dangling] == [tag.id]

    report = await invoke("prune_orphaned_associations", {"campaign_id": cid})
    assert report.relationships_removed == 1
    assert report.entity_tags_removed == 1

    remaining = await invoke("list_relationships", {"campaign_id": cid})
    assert [r.id for r in remaining] == [kept_rel.id]
    assert await invoke("get_entity_tags", _ref(a.id)) == []
    assert [
        t.id
        for t in await invoke("get_entity_tags", _ref(b.id))
    ] == [tag.id]

    again = await invoke("prune_orphaned_associations", {"campaign_id": cid})
    assert (again.relationships_removed, again.entity_tags_removed) == (0, 0)
