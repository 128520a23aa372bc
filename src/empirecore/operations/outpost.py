from __future__ import annotations
import logging

from ..empire.spawn_group import SpawnOutcome, SpawnRequest
from .factory import operation_factory
from .mission import Mission
from .operation import Operation, OperationPriority

logger = logging.getLogger(__name__)


class ScoutMission(Mission):
    """Keeps one scout on the way to the flag room."""

    def role_call(self):
        if self.memory.get("spawned_at") is not None:
            return
        max_scouts = self.memory.get("max", 1)
        if max_scouts < 1:
            return
        if self.spawn_group is None or not self.spawn_group.is_available:
            return
        outcome = self.spawn(SpawnRequest(name=f"{self.operation.name}_{self.name}", body=["move"]))
        if outcome == SpawnOutcome.OK:
            self.memory["spawned_at"] = self.operation.world.time
            logger.info("%s spawned scout from %s (distance %s)",
                        self.operation.name, self.spawn_group.room_name, self.spawn_distance)

    def invalidate_mission_cache(self):
        self.memory.pop("spawned_at", None)


@operation_factory.register("outpost")
class OutpostOperation(Operation):
    """Remote room watched from the nearest capable spawn room."""

    default_priority = OperationPriority.LOW

    def find_spawn_group(self):
        override = self.memory.get("spawn_room")
        if override:
            spawn_group = self.empire.get_spawn_group(override)
            if spawn_group is not None:
                return spawn_group
        return self.get_remote_spawn_group(distance_limit=4, level_requirement=2)

    def init_operation(self):
        self.add_mission(ScoutMission(self, "scout"))
