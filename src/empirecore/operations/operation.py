from __future__ import annotations
from enum import IntEnum
import logging
from typing import Any, Callable, Dict, List, Optional, Union, TYPE_CHECKING

import numpy as np

from ..core.ids import OperationName, RoomName
from ..core.rng import roll
from ..world.model import Structure, linear_distance, linear_distances, position_range

if TYPE_CHECKING:
    from ..empire.empire import Empire
    from ..empire.spawn_group import SpawnGroup
    from ..world.model import Flag, Room, Source, Mineral
    from .mission import MissionHooks

logger = logging.getLogger(__name__)


class OperationPriority(IntEnum):
    EMERGENCY = 0
    OWNED_ROOM = 1
    VERY_HIGH = 2
    HIGH = 3
    MEDIUM = 4
    LOW = 5
    VERY_LOW = 6


class Operation:
    """
    A group of missions working relative to one flag. Flags follow the
    naming convention ``type_name``: the type picks the operation class and
    the name must be unique among operations.

    Each tick the empire drives init -> role_call -> actions -> finalize,
    with invalidate_cache running every so often. Every mission hook is
    called inside its own try block so a broken mission cannot stop its
    siblings or the rest of the tick.
    """

    default_priority = OperationPriority.MEDIUM

    def __init__(self, flag: Flag, name: str, type: str, empire: Empire):
        self.flag = flag
        self.name = OperationName(name)
        self.type = type
        self.empire = empire
        self.memory: Dict[str, Any] = flag.memory
        self.missions: Dict[str, MissionHooks] = {}
        self.spawn_group: Optional[SpawnGroup] = None
        self.waypoints: List[Flag] = []
        self.ranking_count = 0

        # variables that require vision (null check where appropriate)
        self.room: Optional[Room] = None
        self.has_vision = False
        self.sources: List[Source] = []
        self.mineral: Optional[Mineral] = None

    def __repr__(self):
        return f"{type(self).__name__}({self.type}_{self.name})"

    @property
    def world(self):
        return self.empire.world

    @property
    def config(self):
        return self.empire.config

    @property
    def priority(self) -> OperationPriority:
        override = self.memory.get("priority")
        if override is not None:
            return OperationPriority(override)
        return self.default_priority

    # --- hooks for concrete operations ---

    def init_operation(self):
        pass

    def finalize_operation(self):
        pass

    def invalidate_operation_cache(self):
        pass

    # --- phases ---

    def init(self):
        """
        Init Phase - refresh flag-relative facts, pick a spawn group, then
        initialize the operation and each of its missions.
        """
        self.refresh_vision()
        self.find_operation_waypoints()
        self._guard("find_spawn_group", self._assign_spawn_group)
        self._guard("init_operation", self.init_operation)
        self._fan_out("init_mission", "in_m")

    def role_call(self):
        self._fan_out("role_call", "rc_m")

    def actions(self):
        self._fan_out("mission_actions", "ac_m")

    def finalize(self):
        self._fan_out("finalize_mission", "fi_m")
        self._guard("finalize_operation", self.finalize_operation)

    def invalidate_cache(self) -> bool:
        """
        Invalidate Cache Phase - fires on roughly one tick in a hundred per
        operation so that not every operation recomputes on the same tick.
        """
        if not roll(self.empire.rng, self.config.cache_invalidation_chance):
            return False
        self._fan_out("invalidate_mission_cache")
        self._guard("invalidate_operation_cache", self.invalidate_operation_cache)
        return True

    def add_mission(self, mission: MissionHooks):
        # missions need unique names within an operation or they overwrite each other here
        self.missions[mission.name] = mission

    def refresh_vision(self):
        self.room = self.world.get_room(self.flag.pos.room)
        self.has_vision = self.room is not None
        if self.has_vision:
            self.sources = sorted(
                self.world.find_sources(self.room),
                key=lambda source: position_range(source.pos, self.flag.pos),
            )
            self.mineral = self.room.minerals[0] if self.room.minerals else None
        else:
            self.sources = []
            self.mineral = None

    def _guard(self, phase: str, hook: Callable[[], Any], mission_name: Optional[str] = None) -> bool:
        try:
            hook()
            return True
        except Exception as e:
            if mission_name is None:
                logger.exception("error caught in %s phase, operation: %s", phase, self.name)
            else:
                logger.exception("error caught in %s phase, operation: %s, mission: %s",
                                 phase, self.name, mission_name)
            self.empire.notifier.add_entry(
                "hook.error",
                self.world.time,
                room=self.flag.pos.room,
                reason=f"{phase} failed in {self.name}" + (f":{mission_name}" if mission_name else "") + f": {e!r}",
                details={"operation": self.name, "mission": mission_name, "phase": phase},
            )
            return False

    def _fan_out(self, hook_name: str, label_prefix: Optional[str] = None):
        profiler = self.empire.profiler
        for mission_name, mission in list(self.missions.items()):
            label = f"{label_prefix}.{mission_name[:3]}" if label_prefix else None
            if label:
                profiler.start(label)
            self._guard(hook_name, getattr(mission, hook_name), mission_name)
            if label:
                profiler.end(label)

    # --- spawn group selection ---

    def _assign_spawn_group(self):
        self.spawn_group = self.find_spawn_group()

    def find_spawn_group(self) -> Optional[SpawnGroup]:
        """
        Default choice: an administrative override, then a spawn group in the
        flag's own room, then the best remote one.
        """
        override = self.memory.get("spawn_room")
        if override:
            spawn_group = self.empire.get_spawn_group(override)
            if spawn_group is not None:
                return spawn_group
        spawn_group = self.empire.get_spawn_group(self.flag.pos.room)
        if spawn_group is not None:
            return spawn_group
        return self.get_remote_spawn_group()

    def rank_spawn_rooms(self, distance_limit: int, level_requirement: int) -> List[RoomName]:
        """
        Room names of spawn groups able to serve this operation, nearest first.
        Only rooms within ``distance_limit`` plus the configured margin count.
        """
        self.ranking_count += 1
        flag_room = self.flag.pos.room
        candidates = [
            spawn_group.room_name for spawn_group in self.empire.spawn_groups.all()
            if spawn_group.level >= level_requirement and spawn_group.room_name != flag_room
        ]
        if not candidates:
            return []
        distances = linear_distances(flag_room, candidates)
        order = np.argsort(distances, kind="stable")
        limit = distance_limit + self.config.distance_margin
        return [candidates[i] for i in order if distances[i] <= limit]

    def get_remote_spawn_group(self, distance_limit: Optional[int] = None,
                               level_requirement: Optional[int] = None) -> Optional[SpawnGroup]:
        config = self.config
        if distance_limit is None:
            distance_limit = config.default_distance_limit
        if level_requirement is None:
            level_requirement = config.default_level_requirement
        time = self.world.time

        # invalidated periodically
        next_check = self.memory.get("next_spawn_check")
        if next_check is None or time >= next_check:
            room_names = self.rank_spawn_rooms(distance_limit, level_requirement)
            if room_names:
                self.memory["spawn_rooms"] = room_names
                self.memory["next_spawn_check"] = time + config.spawn_check_found
            else:
                self.memory.pop("spawn_rooms", None)
                self.memory["next_spawn_check"] = time + config.spawn_check_empty
            logger.info("SPAWN: finding spawn rooms in %s, result: %s", self.name, room_names)

        spawn_rooms = self.memory.get("spawn_rooms")
        if spawn_rooms:
            best_availability = 0.0
            best_spawn_group = None
            for room_name in spawn_rooms:
                spawn_group = self.empire.get_spawn_group(room_name)
                if spawn_group is None:
                    continue
                availability = spawn_group.availability
                if availability >= 1:
                    return spawn_group
                if availability > best_availability:
                    best_availability = availability
                    best_spawn_group = spawn_group
            if best_spawn_group is not None:
                return best_spawn_group

        self.memory["next_spawn_check"] = max(self.memory["next_spawn_check"], time + config.spawn_check_retry)
        return None

    # --- waypoints ---

    def find_operation_waypoints(self) -> List[Flag]:
        self.waypoints = []
        for i in range(self.config.waypoint_limit):
            flag = self.world.flag(f"{self.name}_waypoints_{i}")
            if flag is None:
                break
            self.waypoints.append(flag)
        return self.waypoints

    # --- administrative commands, always return a message ---

    def _report(self, message: str) -> str:
        self.empire.notifier.log(message, tick=self.world.time)
        return message

    def set_spawn_room(self, room_name: Union[str, "Operation"], portal_travel: bool = False) -> str:
        if isinstance(room_name, Operation):
            room_name = room_name.flag.pos.room
        if not isinstance(room_name, str) or not room_name:
            return self._report("SPAWN: usage: op.set_spawn_room(room_name or operation, portal_travel)")

        spawn_group = self.empire.get_spawn_group(room_name)
        if spawn_group is None:
            return self._report("SPAWN: that room doesn't appear to host a valid spawn group")

        if not self.waypoints:
            if portal_travel:
                return self._report("SPAWN: please set up waypoints before setting spawn room with portal travel")
        else:
            self.waypoints[0].memory["portal_travel"] = portal_travel

        self.memory["spawn_room"] = room_name
        self.spawn_group = spawn_group
        for mission in self.missions.values():
            mission.invalidate_spawn_distance()
        return self._report(f"SPAWN: spawn room for {self.name} set to {room_name} "
                            f"(map range: {linear_distance(self.flag.pos.room, room_name)})")

    def expedite_spawn_check(self, ticks: int = 0) -> str:
        if not isinstance(ticks, int) or ticks < 0:
            return self._report("SPAWN: usage: op.expedite_spawn_check(ticks >= 0)")
        time = self.world.time
        target = time + max(ticks, self.config.spawn_check_retry)
        current = self.memory.get("next_spawn_check")
        if current is not None and current <= target:
            return self._report(f"SPAWN: next spawn check for {self.name} already at tick {current}")
        self.memory["next_spawn_check"] = target
        return self._report(f"SPAWN: next spawn check for {self.name} moved to tick {target}")

    def set_priority(self, priority: int) -> str:
        try:
            value = OperationPriority(priority)
        except ValueError:
            return self._report(f"PRIORITY: {priority} is out of range "
                                f"({min(OperationPriority).value}-{max(OperationPriority).value})")
        old_value = self.priority
        self.memory["priority"] = value.value
        return self._report(f"PRIORITY: {self.name} priority changed from {old_value.name} to {value.name}")

    def _mission_memory(self, mission_name: str) -> Optional[dict]:
        # flag memory also holds operation keys such as spawn_room and priority
        entry = self.memory.get(mission_name)
        return entry if isinstance(entry, dict) else None

    def set_max(self, mission_name: str, max_spawn: int) -> str:
        entry = self._mission_memory(mission_name)
        if entry is None:
            return self._report(f"SPAWN: no {mission_name} mission in {self.name}")
        if not isinstance(max_spawn, int) or isinstance(max_spawn, bool) or max_spawn < 0:
            return self._report(f"SPAWN: max must be a non-negative integer, got {max_spawn!r}")
        old_value = entry.get("max")
        entry["max"] = max_spawn
        return self._report(f"SPAWN: {mission_name} max spawn value changed from {old_value} to {max_spawn}")

    def set_boost(self, mission_name: str, activate_boost: bool) -> str:
        entry = self._mission_memory(mission_name)
        if entry is None:
            return self._report(f"SPAWN: no {mission_name} mission in {self.name}")
        old_value = entry.get("activate_boost")
        entry["activate_boost"] = bool(activate_boost)
        return self._report(f"SPAWN: {mission_name} boost value changed from {old_value} to {bool(activate_boost)}")

    def repair(self, object_id: Optional[str] = None, hits: Optional[int] = None) -> str:
        if not object_id or not isinstance(hits, int) or isinstance(hits, bool) or hits <= 0:
            return self._report("usage: op.repair(id, hits)")
        mason = self._mission_memory("mason")
        if mason is None:
            return self._report("no mason available for repair instructions")
        target = self.world.get_object_by_id(object_id)
        if target is None:
            return self._report("that object doesn't seem to exist")
        if not isinstance(target, Structure):
            return self._report("that isn't a structure")
        if hits > target.hits_max:
            return self._report(f"{target.structure_type} cannot have more than {target.hits_max} hits")
        mason["manual_target_id"] = object_id
        mason["manual_target_hits"] = hits
        return self._report(f"MASON: repairing {target.structure_type} to {hits} hits")

    def manual_controller_battery(self, object_id: str) -> str:
        target = self.world.get_object_by_id(object_id)
        if target is None:
            return self._report("that is not a valid game object or not in vision")
        room_memory = self.world.room_memory(self.flag.pos.room)
        room_memory["controller_battery_id"] = object_id
        room_memory.pop("upgrader_positions", None)
        return self._report(f"controller battery assigned to {target}")
