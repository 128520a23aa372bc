from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from ..core.ids import RoomName

if TYPE_CHECKING:
    from ..world.model import World, Room, Spawn

logger = logging.getLogger(__name__)


class SpawnOutcome(str, Enum):
    OK = "OK"
    BUSY = "BUSY"
    NAME_EXISTS = "NAME_EXISTS"
    NO_ROOM = "NO_ROOM"


@dataclass
class SpawnRequest:
    name: str
    body: List[str] = field(default_factory=list)
    memory: Dict[str, Any] = field(default_factory=dict)


class SpawnGroup:
    """
    All spawns the player owns in one room, treated as a single production
    resource. Nothing is cached: every property reads the live room so the
    availability seen by callers is always the current one.
    """

    def __init__(self, room_name: RoomName, world: World):
        self.room_name = room_name
        self.world = world

    def __repr__(self):
        return f"SpawnGroup({self.room_name})"

    @property
    def room(self) -> Optional[Room]:
        return self.world.get_room(self.room_name)

    @property
    def spawns(self) -> List[Spawn]:
        room = self.room
        if room is None:
            return []
        return self.world.find_my_spawns(room)

    @property
    def level(self) -> int:
        room = self.room
        if room is None or room.controller is None:
            return 0
        return room.controller.level

    @property
    def availability(self) -> float:
        """Fraction of spawns in the room that are idle, in [0, 1]."""
        spawns = self.spawns
        if not spawns:
            return 0.0
        idle = sum(1 for spawn in spawns if spawn.spawning is None)
        return idle / len(spawns)

    @property
    def is_available(self) -> bool:
        return any(spawn.spawning is None for spawn in self.spawns)

    def spawn(self, request: SpawnRequest) -> SpawnOutcome:
        spawns = self.spawns
        if not spawns:
            return SpawnOutcome.NO_ROOM
        if any(spawn.spawning == request.name for spawn in spawns):
            return SpawnOutcome.NAME_EXISTS
        for spawn in spawns:
            if spawn.spawning is None:
                spawn.spawning = request.name
                logger.debug("%s spawning %s from %s", self.room_name, request.name, spawn.name)
                return SpawnOutcome.OK
        return SpawnOutcome.BUSY
