from __future__ import annotations
from collections import defaultdict
import logging
from typing import Dict, List, Optional, TYPE_CHECKING

from ..core.config import LoopConfig
from ..core.ids import OperationName
from ..core.log import Notifier
from ..core.profiler import Profiler
from ..core.rng import get_seeded_rng
from ..reports.gazette import TickGazette
from .registry import SpawnRegistry

if TYPE_CHECKING:
    from ..operations.operation import Operation
    from ..world.model import World, Position
    from .spawn_group import SpawnGroup, SpawnRequest, SpawnOutcome

logger = logging.getLogger(__name__)


class Empire:
    """
    Owns the spawn registry and every operation, and drives the per-tick
    phases across them. Everything here runs on a single thread: the
    registry and operation caches are only touched by the tick in progress.
    """

    def __init__(
        self,
        world: World,
        config: Optional[LoopConfig] = None,
        profiler: Optional[Profiler] = None,
        notifier: Optional[Notifier] = None,
        seed: int = 0,
    ):
        self.world = world
        self.config = config or LoopConfig()
        self.profiler = profiler or Profiler(budget_ms=self.config.cpu_budget_ms)
        self.notifier = notifier or Notifier()
        self.rng = get_seeded_rng(seed)
        self.memory = world.memory.setdefault("empire", {})
        self.memory.setdefault("errant_construction_rooms", {})
        self.spawn_groups = SpawnRegistry(world, self.config)
        self.operations: Dict[OperationName, Operation] = {}
        self.vis = TickGazette()

    def add_operation(self, operation: Operation):
        # dict order is registration order; replacing a name keeps its slot
        self.operations[operation.name] = operation

    def remove_operation(self, name: str) -> Optional[Operation]:
        return self.operations.pop(name, None)

    # --- phases ---

    def init(self):
        """
        Occurs before operation phases
        """
        self.profiler.start("emp.init")
        self.spawn_groups.refresh()
        self.profiler.end("emp.init")
        self._run_phase("init", "in_op")

    def role_call(self):
        self._run_phase("role_call", "rc_op")

    def actions(self):
        """
        Operation actions, followed by empire housekeeping
        """
        self._run_phase("actions", "ac_op")
        self.profiler.start("emp.clr")
        self.clear_errant_construction()
        self.profiler.end("emp.clr")
        self.profiler.start("emp.vis")
        self.vis.finalize(self.notifier, self.world.time)
        self.profiler.end("emp.vis")

    def finalize(self):
        self._run_phase("finalize", "fi_op")

    def invalidate_cache(self) -> List[OperationName]:
        """Returns the names of operations whose caches were invalidated this tick."""
        invalidated = []
        for name, operation in list(self.operations.items()):
            try:
                if operation.invalidate_cache():
                    invalidated.append(name)
            except Exception:
                logger.exception("error caught in invalidate_cache phase, operation: %s", name)
        return invalidated

    def _run_phase(self, phase: str, label_prefix: str):
        for name, operation in list(self.operations.items()):
            label = f"{label_prefix}.{name}"
            self.profiler.start(label)
            try:
                getattr(operation, phase)()
            except Exception as e:
                logger.exception("error caught in %s phase, operation: %s", phase, name)
                self.notifier.add_entry(
                    "hook.error",
                    self.world.time,
                    reason=f"{phase} failed in {name}: {e!r}",
                    details={"operation": name, "phase": phase},
                )
            self.profiler.end(label)

    # --- spawning ---

    def get_spawn_group(self, room_name: str) -> Optional[SpawnGroup]:
        return self.spawn_groups.get(room_name)

    def spawn_from_closest(self, pos: Position, request: SpawnRequest) -> SpawnOutcome:
        return self.spawn_groups.closest(pos.room).spawn(request)

    def under_cpu_limit(self) -> bool:
        return self.profiler.proportion_used() < self.config.cpu_limit_ratio

    # --- housekeeping ---

    def clear_errant_construction(self) -> bool:
        """
        Construction sites in rooms we cannot see are flagged on one pass and
        removed if they are still unseen on the next. Rooms whose unseen sites
        have gone away are cleared. Returns False on ticks where the pass
        does not run.
        """
        if self.world.time % self.config.errant_construction_interval != 0:
            return False

        errant = self.memory["errant_construction_rooms"]
        unseen_sites = defaultdict(list)
        for site in list(self.world.construction_sites.values()):
            if self.world.get_room(site.pos.room) is None:
                unseen_sites[site.pos.room].append(site)

        for room_name in list(errant):
            if room_name not in unseen_sites:
                del errant[room_name]
                self.notifier.add_entry(
                    "construction.resolved",
                    self.world.time,
                    room=room_name,
                    reason=f"EMPIRE: errant construction status cleared in {room_name}",
                )

        for room_name, sites in unseen_sites.items():
            if errant.get(room_name):
                for site in sites:
                    self.world.remove_construction_site(site)
                del errant[room_name]
                self.notifier.add_entry(
                    "construction.removed",
                    self.world.time,
                    room=room_name,
                    reason=f"EMPIRE: removed construction sites in {room_name}",
                    details={"sites": [site.id for site in sites]},
                )
            else:
                errant[room_name] = True
                logger.debug("Flagged errant construction in %s", room_name)
        return True
