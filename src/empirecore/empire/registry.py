from __future__ import annotations
import logging
from typing import Dict, List, Optional, TYPE_CHECKING

from ..core.ids import RoomName
from ..world.model import linear_distances
from .spawn_group import SpawnGroup

if TYPE_CHECKING:
    from ..core.config import LoopConfig
    from ..world.model import World

logger = logging.getLogger(__name__)


class NoSpawnGroupError(Exception):
    """Raised when a spawn is requested before any spawn group exists."""
    pass


class SpawnRegistry:
    """
    Spawn groups keyed by room name. A room enters the registry the first
    time it is seen with an owned spawn and a leveled controller, and is
    never removed afterwards.
    """

    def __init__(self, world: World, config: LoopConfig):
        self.world = world
        self.config = config
        self._groups: Dict[RoomName, SpawnGroup] = {}

    def __contains__(self, room_name: str) -> bool:
        return room_name in self._groups

    def __len__(self) -> int:
        return len(self._groups)

    def all(self) -> List[SpawnGroup]:
        return list(self._groups.values())

    def room_names(self) -> List[RoomName]:
        return list(self._groups)

    def is_eligible(self, room_name: str) -> bool:
        room = self.world.get_room(room_name)
        if room is None or room.controller is None:
            return False
        if room.controller.owner != self.world.username:
            return False
        if room.controller.level < self.config.min_controller_level:
            return False
        return len(self.world.find_my_spawns(room)) > 0

    def refresh(self) -> List[SpawnGroup]:
        """Adds a group for every newly eligible observable room."""
        created = []
        for room_name in self.world.rooms:
            if room_name in self:
                continue
            group = self.get(room_name)
            if group is not None:
                created.append(group)
        return created

    def get(self, room_name: str) -> Optional[SpawnGroup]:
        group = self._groups.get(room_name)
        if group is not None:
            return group
        if not self.is_eligible(room_name):
            return None
        group = SpawnGroup(RoomName(room_name), self.world)
        self._groups[group.room_name] = group
        logger.info("New spawn group in %s (level %d)", room_name, group.level)
        return group

    def closest(self, room_name: str) -> SpawnGroup:
        if len(self) == 0:
            raise NoSpawnGroupError(f"No spawn group available to serve {room_name}.")
        names = self.room_names()
        distances = linear_distances(room_name, names)
        # argmin returns the first minimum, so ties go to the earliest registered room
        return self._groups[names[int(distances.argmin())]]
