import pytest

from empirecore.core.config import LoopConfig
from empirecore.core.ids import RoomName, FlagName, ObjectId
from empirecore.empire.empire import Empire
from empirecore.world.model import (
    World, Room, Flag, Position, Spawn, Controller, Source, Mineral,
)

USERNAME = "overseer"


def build_room(name, level=4, idle=1, busy=0, owner=USERNAME, sources=(), minerals=()):
    """A room with ``idle`` free spawns and ``busy`` spawning ones."""
    spawns = []
    for i in range(idle):
        spawns.append(Spawn(id=ObjectId(f"{name}-idle-{i}"), name=f"{name}-idle-{i}", owner=owner))
    for i in range(busy):
        spawns.append(Spawn(id=ObjectId(f"{name}-busy-{i}"), name=f"{name}-busy-{i}", owner=owner,
                            spawning=f"creep-{name}-{i}"))
    return Room(
        name=RoomName(name),
        controller=Controller(owner=owner, level=level),
        spawns=spawns,
        sources=[Source(id=ObjectId(f"{name}-src-{i}"), pos=Position(RoomName(name), x, y))
                 for i, (x, y) in enumerate(sources)],
        minerals=[Mineral(id=ObjectId(f"{name}-min-{i}"), pos=Position(RoomName(name), x, y))
                  for i, (x, y) in enumerate(minerals)],
    )


def build_flag(name, room, x=25, y=25):
    return Flag(name=FlagName(name), pos=Position(RoomName(room), x, y))


@pytest.fixture
def make_room():
    return build_room


@pytest.fixture
def make_flag():
    return build_flag


@pytest.fixture
def world() -> World:
    return World(username=USERNAME, time=100)


@pytest.fixture
def config() -> LoopConfig:
    return LoopConfig()


@pytest.fixture
def empire(world, config) -> Empire:
    return Empire(world, config=config, seed=7)


def add_room(world, room):
    world.rooms[room.name] = room
    return room


def add_flag(world, flag):
    world.flags[flag.name] = flag
    return flag


@pytest.fixture
def place_room(world):
    return lambda room: add_room(world, room)


@pytest.fixture
def place_flag(world):
    return lambda flag: add_flag(world, flag)
