import pytest

from Loreweaver.commanding import invoke
from Loreweaver.metrics import (
    get_counter,
    get_counters,
    inc_counter,
    observe_histogram,
    reset_counters,
)


def test_counters_increment_and_reset():
    reset_counters()
    inc_counter("a")
    inc_counter("a", 2)
    assert get_counter("a") == 3
    assert get_counter("never") == 0
    reset_counters()
    assert get_counter("a") == 0


def test_histogram_buckets_flatten_into_counters():
    reset_counters()
    observe_histogram("lat", 3)
    observe_histogram("lat", 5)
    observe_histogram("lat", 9000)
    observe_histogram("custom", 7, buckets=[10])

    c = get_counters()
    assert c["histo.lat.le_5"] == 2
    assert c["histo.lat.gt_5000"] == 1
    assert c["histo.lat.sum"] == 9008
    assert c["histo.lat.count"] == 3
    assert c["histo.custom.le_10"] == 1


@pytest.mark.asyncio
async def test_commands_count_their_writes(campaign):
    npc = await invoke("create_character", {"campaign_id": campaign["id"], "name": "Bard"})
    await invoke("update_character", {"id": npc.id, "occupation": "Bowman"})
    await invoke("delete_character", {"id": npc.id})
    await invoke("delete_character", {"id": npc.id})

    assert get_counter("characters.created") == 1
    assert get_counter("characters.updated") == 1
    assert get_counter("characters.deleted") == 1
    assert get_counter("command.delete_character") == 2
