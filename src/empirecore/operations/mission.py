from __future__ import annotations
from typing import Any, Dict, Optional, Protocol, TYPE_CHECKING

from ..core.ids import MissionName
from ..world.model import linear_distance

if TYPE_CHECKING:
    from ..empire.spawn_group import SpawnGroup, SpawnRequest, SpawnOutcome
    from ..world.model import Flag
    from .operation import Operation


class MissionHooks(Protocol):
    """Phase hooks an operation calls on each of its missions every tick."""

    name: MissionName

    def init_mission(self) -> None: ...
    def role_call(self) -> None: ...
    def mission_actions(self) -> None: ...
    def finalize_mission(self) -> None: ...
    def invalidate_mission_cache(self) -> None: ...
    def invalidate_spawn_distance(self) -> None: ...


class Mission:
    """
    Base mission. Concrete missions override the hooks they need; the rest
    stay no-ops. A mission never keeps its own spawn group: it always asks
    its operation, so a reassignment is seen by every mission at once.
    """

    def __init__(self, operation: Operation, name: str):
        self.operation = operation
        self.name = MissionName(name)

    def __repr__(self):
        return f"{type(self).__name__}({self.operation.name}:{self.name})"

    @property
    def memory(self) -> Dict[str, Any]:
        return self.operation.memory.setdefault(self.name, {})

    @property
    def flag(self) -> Flag:
        return self.operation.flag

    @property
    def spawn_group(self) -> Optional[SpawnGroup]:
        return self.operation.spawn_group

    @property
    def spawn_distance(self) -> Optional[int]:
        """Linear distance from the assigned spawn group to the operation, cached in memory."""
        distance = self.memory.get("distance_to_spawn")
        if distance is None:
            spawn_group = self.spawn_group
            if spawn_group is None:
                return None
            distance = linear_distance(spawn_group.room_name, self.flag.pos.room)
            self.memory["distance_to_spawn"] = distance
        return distance

    def invalidate_spawn_distance(self):
        self.memory.pop("distance_to_spawn", None)

    def spawn(self, request: SpawnRequest) -> Optional[SpawnOutcome]:
        spawn_group = self.spawn_group
        if spawn_group is None:
            return None
        return spawn_group.spawn(request)

    def init_mission(self):
        pass

    def role_call(self):
        pass

    def mission_actions(self):
        pass

    def finalize_mission(self):
        pass

    def invalidate_mission_cache(self):
        pass
