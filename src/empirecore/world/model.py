from __future__ import annotations
from dataclasses import dataclass, field
import math
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import numpy as np
from scipy.spatial.distance import cdist

from ..core.ids import RoomName, FlagName, ObjectId

ROOM_NAME_PATTERN = re.compile(r'^([WE])(\d+)([NS])(\d+)$')


@dataclass
class Position:
    room: RoomName
    x: int = 25
    y: int = 25


@dataclass
class Spawn:
    id: ObjectId
    name: str
    owner: str
    spawning: Optional[str] = None # name of the creep being spawned, None when idle


@dataclass
class Controller:
    owner: Optional[str] = None
    level: int = 0


@dataclass
class Source:
    id: ObjectId
    pos: Position


@dataclass
class Mineral:
    id: ObjectId
    pos: Position
    mineral_type: str = "H"


@dataclass
class Structure:
    id: ObjectId
    structure_type: str
    pos: Position
    hits: int = 1
    hits_max: int = 1


@dataclass
class ConstructionSite:
    id: ObjectId
    pos: Position
    structure_type: str = "road"


@dataclass
class Room:
    name: RoomName
    controller: Optional[Controller] = None
    spawns: List[Spawn] = field(default_factory=list)
    sources: List[Source] = field(default_factory=list)
    minerals: List[Mineral] = field(default_factory=list)
    structures: List[Structure] = field(default_factory=list)


@dataclass
class Flag:
    name: FlagName
    pos: Position
    memory: Dict[str, Any] = field(default_factory=dict)


def room_coords(room_name: str) -> Tuple[int, int]:
    """
    Converts a room name such as ``W3N12`` into integer map coordinates.
    West and north rooms take negative coordinates, so W0 sits left of E0.
    """
    match = ROOM_NAME_PATTERN.match(room_name)
    if not match:
        raise ValueError(f"'{room_name}' is not a valid room name.")
    h_dir, h_num, v_dir, v_num = match.groups()
    x = -int(h_num) - 1 if h_dir == "W" else int(h_num)
    y = -int(v_num) - 1 if v_dir == "N" else int(v_num)
    return x, y


def linear_distance(a: str, b: str) -> int:
    """Number of room borders between two rooms, ignoring terrain."""
    ax, ay = room_coords(a)
    bx, by = room_coords(b)
    return max(abs(ax - bx), abs(ay - by))


def linear_distances(origin: str, room_names: Iterable[str]) -> np.ndarray:
    """Vectorised linear_distance from ``origin`` to each room in ``room_names``."""
    names = list(room_names)
    if not names:
        return np.zeros(0, dtype=int)
    origin_coords = np.array([room_coords(origin)])
    coords = np.array([room_coords(name) for name in names])
    return cdist(origin_coords, coords, metric="chebyshev")[0].astype(int)


def position_range(a: Position, b: Position) -> float:
    """Tile range between two positions; rooms apart count as infinitely far."""
    if a.room != b.room:
        return math.inf
    return max(abs(a.x - b.x), abs(a.y - b.y))


GameObject = Union[Spawn, Source, Mineral, Structure]


@dataclass
class World:
    """
    Snapshot of what the player can currently see. Only observable rooms are
    present in ``rooms``; memory is the durable store carried between ticks.
    """
    username: str
    time: int = 0
    rooms: Dict[RoomName, Room] = field(default_factory=dict)
    flags: Dict[FlagName, Flag] = field(default_factory=dict)
    construction_sites: Dict[ObjectId, ConstructionSite] = field(default_factory=dict)
    memory: Dict[str, Any] = field(default_factory=dict)

    def get_room(self, room_name: str) -> Optional[Room]:
        return self.rooms.get(room_name)

    def flag(self, flag_name: str) -> Optional[Flag]:
        return self.flags.get(flag_name)

    def room_memory(self, room_name: str) -> Dict[str, Any]:
        return self.memory.setdefault("rooms", {}).setdefault(room_name, {})

    def find_my_spawns(self, room: Room) -> List[Spawn]:
        return [spawn for spawn in room.spawns if spawn.owner == self.username]

    def find_sources(self, room: Room) -> List[Source]:
        return list(room.sources)

    def get_object_by_id(self, object_id: str) -> Optional[GameObject]:
        for room in self.rooms.values():
            for collection in (room.spawns, room.sources, room.minerals, room.structures):
                for obj in collection:
                    if obj.id == object_id:
                        return obj
        return None

    def remove_construction_site(self, site: ConstructionSite):
        self.construction_sites.pop(site.id, None)
