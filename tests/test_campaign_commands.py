import importlib
import sys

import pytest

from Loreweaver import commanding
from Loreweaver.commanding import invoke
from Loreweaver.errors import NotFoundError


@pytest.mark.asyncio
async def test_create_and_get_campaign():
    created = await invoke("create_campaign", {"name": "Shattered Isles", "system": "5e"})
    assert created.id
    assert created.name == "Shattered Isles"
    assert created.system == "5e"
    assert created.description is None
    assert created.created_at is not None

    fetched = await invoke("get_campaign", {"id": created.id})
    assert (fetched.id, fetched.name, fetched.system) == (created.id, created.name, created.system)


@pytest.mark.asyncio
async def test_campaign_ids_are_unique():
    a = await invoke("create_campaign", {"name": "A"})
    b = await invoke("create_campaign", {"name": "A"})
    assert a.id != b.id


@pytest.mark.asyncio
async def test_list_campaigns_most_recently_updated_first():
    first = await invoke("create_campaign", {"name": "First"})
    await invoke("create_campaign", {"name": "Second"})
    await invoke("update_campaign", {"id": first.id, "description": "touched"})

    listed = await invoke("list_campaigns", {})
    assert [c.name for c in listed] == ["First", "Second"]


@pytest.mark.asyncio
async def test_update_campaign_keeps_omitted_fields():
    created = await invoke(
        "create_campaign", {"name": "Isles", "description": "Sea", "system": "5e"}
    )
    updated = await invoke("update_campaign", {"id": created.id, "name": "Isles Reborn"})
    assert updated.name == "Isles Reborn"
    assert updated.description == "Sea"
    assert updated.system == "5e"
    assert updated.id == created.id


@pytest.mark.asyncio
async def test_get_unknown_campaign_is_not_found():
    with pytest.raises(NotFoundError) as ei:
        await invoke("get_campaign", {"id": "missing"})
    assert str(ei.value) == "Not found: Campaign missing not found"
    assert ei.value.to_dict()["kind"] == "not_found"


@pytest.mark.asyncio
async def test_update_unknown_campaign_is_not_found():
    with pytest.raises(NotFoundError):
        await invoke("update_campaign", {"id": "missing", "name": "x"})


@pytest.mark.asyncio
async def test_delete_campaign_reports_whether_anything_was_removed():
    created = await invoke("create_campaign", {"name": "Doomed"})
    assert await invoke("delete_campaign", {"id": created.id}) is True
    assert await invoke("delete_campaign", {"id": created.id}) is False
    assert await invoke("list_campaigns", {}) == []


@pytest.mark.asyncio
async def test_commands_load_after_a_single_module_import(monkeypatch):
    monkeypatch.setattr(commanding, "_REGISTRY", {})
    monkeypatch.setattr(commanding, "_loaded", False)
    for mod in [m for m in sys.modules if m.startswith("Loreweaver.commands.")]:
        monkeypatch.delitem(sys.modules, mod)

    importlib.import_module("Loreweaver.commands.search")
    assert set(commanding.all_commands()) == {"search_entities"}

    created = await invoke("create_campaign", {"name": "Isles"})
    assert created.name == "Isles"
    assert "get_campaign" in commanding.all_commands()
