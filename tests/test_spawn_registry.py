import pytest

from empirecore.core.config import LoopConfig
from empirecore.empire.registry import SpawnRegistry, NoSpawnGroupError
from empirecore.empire.spawn_group import SpawnRequest, SpawnOutcome
from empirecore.world.model import Controller


@pytest.fixture
def registry(world, config):
    return SpawnRegistry(world, config)


def test_lookup_is_idempotent_and_identity_is_stable(registry, world, make_room, place_room):
    place_room(make_room("E1N1"))

    first = registry.get("E1N1")
    second = registry.get("E1N1")
    registry.refresh()
    world.time += 500

    assert first is not None
    assert first is second
    assert registry.get("E1N1") is first
    assert len(registry) == 1


def test_unobserved_room_gives_no_group(registry):
    assert registry.get("E5N5") is None
    assert "E5N5" not in registry


def test_ineligible_rooms_are_not_fabricated(registry, make_room, place_room):
    place_room(make_room("E1N1", level=0))
    place_room(make_room("E2N1", owner="rival"))
    place_room(make_room("E3N1", idle=0))

    assert registry.get("E1N1") is None
    assert registry.get("E2N1") is None
    assert registry.get("E3N1") is None
    assert len(registry) == 0


def test_room_becomes_eligible_once(registry, world, make_room, place_room):
    room = place_room(make_room("E1N1", level=0))
    assert registry.get("E1N1") is None

    room.controller = Controller(owner=world.username, level=1)
    group = registry.get("E1N1")
    assert group is not None

    # losing vision later does not drop the group
    del world.rooms["E1N1"]
    assert registry.get("E1N1") is group
    assert group.availability == 0.0
    assert group.level == 0


def test_refresh_picks_up_every_eligible_observed_room(registry, make_room, place_room):
    place_room(make_room("E1N1"))
    place_room(make_room("E2N1", level=0))
    place_room(make_room("E3N1"))

    created = registry.refresh()

    assert sorted(group.room_name for group in created) == ["E1N1", "E3N1"]
    assert registry.refresh() == []


def test_availability_reads_live_spawn_state(registry, make_room, place_room):
    room = place_room(make_room("E1N1", idle=2, busy=3))
    group = registry.get("E1N1")
    assert group.availability == pytest.approx(0.4)

    room.spawns[0].spawning = "someone"
    assert group.availability == pytest.approx(0.2)


def test_spawn_uses_first_idle_spawn(registry, make_room, place_room):
    room = place_room(make_room("E1N1", idle=1, busy=1))
    group = registry.get("E1N1")

    assert group.spawn(SpawnRequest(name="hauler")) == SpawnOutcome.OK
    assert room.spawns[0].spawning == "hauler"
    assert group.spawn(SpawnRequest(name="hauler")) == SpawnOutcome.NAME_EXISTS
    assert group.spawn(SpawnRequest(name="miner")) == SpawnOutcome.BUSY


def test_closest_prefers_nearest_room(registry, make_room, place_room):
    place_room(make_room("E1N1"))
    place_room(make_room("E6N1"))
    registry.refresh()

    assert registry.closest("E5N1").room_name == "E6N1"
    assert registry.closest("E2N2").room_name == "E1N1"


def test_closest_without_groups_raises(world):
    registry = SpawnRegistry(world, LoopConfig())
    with pytest.raises(NoSpawnGroupError):
        registry.closest("E1N1")


def test_eligibility_needs_owned_controller_level_and_own_spawn(registry, world, make_room, place_room):
    place_room(make_room("E1N1"))
    place_room(make_room("E2N1", level=0))
    place_room(make_room("E3N1", idle=0, busy=1))
    foreign = place_room(make_room("E4N1"))
    foreign.spawns[0].owner = "rival"

    assert registry.is_eligible("E1N1")
    assert not registry.is_eligible("E2N1")
    assert registry.is_eligible("E3N1")
    assert not registry.is_eligible("E4N1")
    assert not registry.is_eligible("E9N9")
