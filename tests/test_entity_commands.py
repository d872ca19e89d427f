import asyncio

import pytest

from Loreweaver.commanding import invoke
from Loreweaver.errors import DatabaseError, NotFoundError

# kind -> (plural, minimal create payload without campaign_id, update payload)
KIND_CASES = {
    "player": ("players", {"name": "Sam"}, {"notes": "Prefers roleplay"}),
    "location": ("locations", {"name": "Rivendell"}, {"gm_notes": "Hidden valley"}),
    "character": ("characters", {"name": "Elrond"}, {"occupation": "Lord"}),
    "organization": ("organizations", {"name": "White Council"}, {"goals": "Watch"}),
    "quest": ("quests", {"name": "Destroy the Ring"}, {"status": "active"}),
    "hero": ("heroes", {"name": "Frodo"}, {"backstory": "Shire-born"}),
    "session": ("sessions", {"session_number": 1}, {"summary": "The party met"}),
    "timeline_event": (
        "timeline_events",
        {"title": "Fall of Gil-galad", "date_display": "SA 3441"},
        {"description": "Last alliance"},
    ),
    "secret": ("secrets", {"title": "Ring", "content": "It is the One"}, {"revealed": True}),
}


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", sorted(KIND_CASES))
async def test_crud_round_trip_per_kind(kind, campaign):
    plural, create, update = KIND_CASES[kind]
    created = await invoke(f"create_{kind}", {"campaign_id": campaign["id"], **create})
    assert created.campaign_id == campaign["id"]

    fetched = await invoke(f"get_{kind}", {"id": created.id})
    assert fetched.id == created.id

    updated = await invoke(f"update_{kind}", {"id": created.id, **update})
    for key, value in update.items():
        assert getattr(updated, key) == value
    for key, value in create.items():
        assert getattr(updated, key) == value

    listed = await invoke(f"list_{plural}", {"campaign_id": campaign["id"]})
    assert [r.id for r in listed] == [created.id]

    assert await invoke(f"delete_{kind}", {"id": created.id}) is True
    assert await invoke(f"delete_{kind}", {"id": created.id}) is False
    with pytest.raises(NotFoundError):
        await invoke(f"get_{kind}", {"id": created.id})


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", sorted(KIND_CASES))
async def test_lists_are_scoped_to_campaign(kind, campaign, other_campaign):
    plural, create, _ = KIND_CASES[kind]
    mine = await invoke(f"create_{kind}", {"campaign_id": campaign["id"], **create})
    await invoke(f"create_{kind}", {"campaign_id": other_campaign["id"], **create})

    listed = await invoke(f"list_{plural}", {"campaign_id": campaign["id"]})
    assert [r.id for r in listed] == [mine.id]


@pytest.mark.asyncio
async def test_create_applies_column_defaults(campaign):
    cid = campaign["id"]
    loc = await invoke("create_location", {"campaign_id": cid, "name": "Bree"})
    assert loc.location_type == "settlement"
    assert loc.parent_id is None

    npc = await invoke("create_character", {"campaign_id": cid, "name": "Butterbur"})
    assert npc.is_alive is True

    org = await invoke("create_organization", {"campaign_id": cid, "name": "Rangers"})
    assert org.org_type == "other"
    assert org.is_active is True

    quest = await invoke("create_quest", {"campaign_id": cid, "name": "Find Strider"})
    assert quest.status == "planned"
    assert quest.plot_type == "side"

    secret = await invoke(
        "create_secret", {"campaign_id": cid, "title": "Strider", "content": "Heir of Isildur"}
    )
    assert secret.revealed is False


@pytest.mark.asyncio
async def test_partial_update_leaves_other_fields_untouched(campaign):
    npc = await invoke(
        "create_character",
        {
            "campaign_id": campaign["id"],
            "name": "Gandalf",
            "occupation": "Wizard",
            "description": "Grey pilgrim",
        },
    )
    updated = await invoke("update_character", {"id": npc.id, "is_alive": False})
    assert updated.is_alive is False
    assert updated.name == "Gandalf"
    assert updated.occupation == "Wizard"
    assert updated.description == "Grey pilgrim"


@pytest.mark.asyncio
async def test_empty_update_only_refreshes_updated_at(campaign):
    npc = await invoke(
        "create_character",
        {"campaign_id": campaign["id"], "name": "Radagast", "lineage": "Maia"},
    )
    await invoke("update_character", {"id": npc.id, "personality": "Fond of birds"})
    before = await invoke("get_character", {"id": npc.id})
    await asyncio.sleep(0.01)

    await invoke("update_character", {"id": npc.id})
    after = await invoke("get_character", {"id": npc.id})

    assert after.model_dump(exclude={"updated_at"}) == before.model_dump(exclude={"updated_at"})
    assert after.personality == "Fond of birds"
    assert after.updated_at > before.updated_at


@pytest.mark.asyncio
async def test_update_unknown_entity_is_not_found():
    with pytest.raises(NotFoundError) as ei:
        await invoke("update_character", {"id": "nope", "name": "x"})
    assert "Character nope not found" in str(ei.value)


@pytest.mark.asyncio
async def test_lists_follow_kind_order(campaign):
    cid = campaign["id"]
    for name in ("Zed", "Anna", "Mira"):
        await invoke("create_character", {"campaign_id": cid, "name": name})
    names = [c.name for c in await invoke("list_characters", {"campaign_id": cid})]
    assert names == ["Anna", "Mira", "Zed"]

    for number in (3, 1, 2):
        await invoke("create_session", {"campaign_id": cid, "session_number": number})
    numbers = [s.session_number for s in await invoke("list_sessions", {"campaign_id": cid})]
    assert numbers == [1, 2, 3]

    for title, order in (("Late", 30), ("Early", 10), ("Middle", 20)):
        await invoke(
            "create_timeline_event",
            {"campaign_id": cid, "title": title, "date_display": title, "sort_order": order},
        )
    titles = [e.title for e in await invoke("list_timeline_events", {"campaign_id": cid})]
    assert titles == ["Early", "Middle", "Late"]


@pytest.mark.asyncio
async def test_location_children(campaign):
    cid = campaign["id"]
    world = await invoke(
        "create_location", {"campaign_id": cid, "name": "Arda", "location_type": "world"}
    )
    await invoke("create_location", {"campaign_id": cid, "name": "Rohan", "parent_id": world.id})
    await invoke("create_location", {"campaign_id": cid, "name": "Gondor", "parent_id": world.id})

    children = await invoke("get_location_children", {"parent_id": world.id})
    assert [c.name for c in children] == ["Gondor", "Rohan"]
    assert await invoke("get_location_children", {"parent_id": children[0].id}) == []


@pytest.mark.asyncio
async def test_deleting_parent_location_orphans_children(campaign):
    cid = campaign["id"]
    parent = await invoke("create_location", {"campaign_id": cid, "name": "Eriador"})
    child = await invoke(
        "create_location", {"campaign_id": cid, "name": "Shire", "parent_id": parent.id}
    )
    assert await invoke("delete_location", {"id": parent.id}) is True

    survivor = await invoke("get_location", {"id": child.id})
    assert survivor.parent_id is None


@pytest.mark.asyncio
async def test_deleting_player_detaches_heroes(campaign):
    cid = campaign["id"]
    player = await invoke("create_player", {"campaign_id": cid, "name": "Sam"})
    hero = await invoke(
        "create_hero", {"campaign_id": cid, "name": "Samwise", "player_id": player.id}
    )
    assert hero.player_id == player.id

    await invoke("delete_player", {"id": player.id})
    assert (await invoke("get_hero", {"id": hero.id})).player_id is None


@pytest.mark.asyncio
async def test_deleting_campaign_cascades_to_owned_rows(campaign):
    cid = campaign["id"]
    for kind, (_, create, _) in KIND_CASES.items():
        await invoke(f"create_{kind}", {"campaign_id": cid, **create})
    a = await invoke("create_character", {"campaign_id": cid, "name": "Arwen"})
    b = await invoke("create_character", {"campaign_id": cid, "name": "Aragorn"})
    rel = await invoke(
        "create_relationship",
        {
            "campaign_id": cid,
            "source_type": "character",
            "source_id": a.id,
            "target_type": "character",
            "target_id": b.id,
            "relationship_type": "betrothed",
        },
    )
    tag = await invoke("create_tag", {"campaign_id": cid, "name": "important"})
    conv = await invoke(
        "get_or_create_ai_conversation", {"campaign_id": cid, "context_type": "sidebar"}
    )
    await invoke("add_ai_message", {"conversation_id": conv.id, "role": "user", "content": "hi"})

    assert await invoke("delete_campaign", {"id": cid}) is True

    for kind, (plural, _, _) in KIND_CASES.items():
        assert await invoke(f"list_{plural}", {"campaign_id": cid}) == [], kind
    with pytest.raises(NotFoundError):
        await invoke("get_tag", {"id": tag.id})
    with pytest.raises(NotFoundError):
        await invoke("get_relationship", {"id": rel.id})
    assert await invoke(
        "load_ai_conversation", {"campaign_id": cid, "context_type": "sidebar"}
    ) is None
    assert await invoke("search_entities", {"campaign_id": cid, "query": "Elrond"}) == []


@pytest.mark.asyncio
async def test_create_with_unknown_campaign_is_database_error():
    with pytest.raises(DatabaseError) as ei:
        await invoke("create_character", {"campaign_id": "ghost", "name": "Nobody"})
    assert "FOREIGN KEY" in str(ei.value)
