import pytest

from empirecore.core.ids import ObjectId, RoomName
from empirecore.operations.mission import Mission
from empirecore.operations.operation import Operation, OperationPriority
from empirecore.world.model import Structure, Position


@pytest.fixture
def operation(empire, make_flag, place_flag):
    flag = place_flag(make_flag("test_alpha", "E0S0"))
    op = Operation(flag, "alpha", "test", empire)
    empire.add_operation(op)
    return op


def test_set_spawn_room_rejects_room_without_group(operation):
    message = operation.set_spawn_room("E3S3")
    assert message == "SPAWN: that room doesn't appear to host a valid spawn group"
    assert "spawn_room" not in operation.memory


def test_set_spawn_room_needs_waypoints_for_portal_travel(operation, make_room, place_room):
    place_room(make_room("E2S0"))
    message = operation.set_spawn_room("E2S0", portal_travel=True)
    assert "waypoints" in message
    assert "spawn_room" not in operation.memory


def test_set_spawn_room_records_override_and_resets_mission_distances(operation, make_room, place_room,
                                                                      make_flag, place_flag):
    place_room(make_room("E2S0"))
    place_room(make_room("E3S0"))
    waypoint = place_flag(make_flag("alpha_waypoints_0", "E1S0"))
    operation.find_operation_waypoints()
    mission = Mission(operation, "hauler")
    operation.add_mission(mission)
    operation.set_spawn_room("E3S0")
    assert mission.spawn_distance == 3

    message = operation.set_spawn_room("E2S0", portal_travel=True)

    assert message == "SPAWN: spawn room for alpha set to E2S0 (map range: 2)"
    assert operation.memory["spawn_room"] == "E2S0"
    assert waypoint.memory["portal_travel"] is True
    assert "distance_to_spawn" not in mission.memory
    assert mission.spawn_distance == 2


def test_set_spawn_room_accepts_another_operation(operation, empire, make_room, place_room,
                                                  make_flag, place_flag):
    place_room(make_room("E4S0"))
    other = Operation(place_flag(make_flag("test_home", "E4S0")), "home", "test", empire)

    assert operation.set_spawn_room(other).startswith("SPAWN: spawn room for alpha set to E4S0")


def test_set_spawn_room_handles_bad_input(operation):
    assert "usage" in operation.set_spawn_room(None)
    assert "usage" in operation.set_spawn_room("")


def test_override_wins_in_find_spawn_group(operation, make_room, place_room):
    place_room(make_room("E0S0"))
    place_room(make_room("E5S0"))
    operation.set_spawn_room("E5S0")

    operation.init()

    assert operation.spawn_group.room_name == "E5S0"


def test_set_max_and_boost(operation):
    assert operation.set_max("miner", 3) == "SPAWN: no miner mission in alpha"
    operation.memory["miner"] = {"max": 1}

    assert operation.set_max("miner", 3) == "SPAWN: miner max spawn value changed from 1 to 3"
    assert operation.memory["miner"]["max"] == 3
    assert "non-negative" in operation.set_max("miner", -2)
    assert operation.set_boost("miner", True) == "SPAWN: miner boost value changed from None to True"
    assert operation.set_boost("hauler", True) == "SPAWN: no hauler mission in alpha"


def test_set_max_and_boost_ignore_operation_keys(operation):
    operation.memory["spawn_room"] = "E2S0"
    operation.memory["priority"] = 3

    assert operation.set_max("spawn_room", 3) == "SPAWN: no spawn_room mission in alpha"
    assert operation.set_boost("priority", True) == "SPAWN: no priority mission in alpha"
    assert operation.memory["spawn_room"] == "E2S0"
    assert operation.memory["priority"] == 3


def test_set_priority(operation):
    assert operation.priority == OperationPriority.MEDIUM
    assert operation.set_priority(2) == "PRIORITY: alpha priority changed from MEDIUM to VERY_HIGH"
    assert operation.priority == OperationPriority.VERY_HIGH
    assert "out of range" in operation.set_priority(42)
    assert operation.priority == OperationPriority.VERY_HIGH


def test_repair_validates_every_input(operation, world, make_room, place_room):
    room = place_room(make_room("E0S0"))
    room.structures.append(Structure(id=ObjectId("wall-1"), structure_type="constructedWall",
                                     pos=Position(RoomName("E0S0"), 3, 3), hits=1000, hits_max=300000000))

    assert operation.repair() == "usage: op.repair(id, hits)"
    assert operation.repair("wall-1", 5000) == "no mason available for repair instructions"
    operation.memory["mason"] = "busy"
    assert operation.repair("wall-1", 5000) == "no mason available for repair instructions"

    operation.memory["mason"] = {}
    assert operation.repair("nothing", 5000) == "that object doesn't seem to exist"
    assert operation.repair(room.spawns[0].id, 5000) == "that isn't a structure"
    assert operation.repair("wall-1", 300000001) == "constructedWall cannot have more than 300000000 hits"
    assert operation.repair("wall-1", "5000") == "usage: op.repair(id, hits)"
    assert operation.repair("wall-1", -5) == "usage: op.repair(id, hits)"
    assert operation.repair("wall-1", 0) == "usage: op.repair(id, hits)"
    assert operation.repair("wall-1", 5000) == "MASON: repairing constructedWall to 5000 hits"
    assert operation.memory["mason"] == {"manual_target_id": "wall-1", "manual_target_hits": 5000}


def test_manual_controller_battery(operation, world, make_room, place_room):
    room = place_room(make_room("E0S0"))
    world.room_memory("E0S0")["upgrader_positions"] = [1, 2]

    assert operation.manual_controller_battery("ghost") == "that is not a valid game object or not in vision"
    message = operation.manual_controller_battery(room.spawns[0].id)

    assert message.startswith("controller battery assigned to")
    assert world.room_memory("E0S0") == {"controller_battery_id": room.spawns[0].id}


def test_admin_results_reach_the_notifier(operation, empire, world):
    message = operation.set_max("miner", 3)

    notices = empire.notifier.of_type("notice")
    assert [entry.reason for entry in notices] == [message]
    assert notices[0].tick == world.time
