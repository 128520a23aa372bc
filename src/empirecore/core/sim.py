from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, TYPE_CHECKING

from .log import NoticeEntry

if TYPE_CHECKING:
    from ..empire.empire import Empire


@dataclass
class TickReport:
    tick: int
    entries: List[NoticeEntry] = field(default_factory=list)
    profile: Dict[str, float] = field(default_factory=dict)
    under_cpu_limit: bool = True


def step(empire: Empire) -> TickReport:
    """
    Runs one tick: init, role call, actions, finalize, then the occasional
    cache invalidation. Advances the world clock afterwards.
    """
    world = empire.world
    tick = world.time
    empire.profiler.begin_tick()
    empire.notifier.clear()

    # --- Phases, strictly in order ---
    empire.init()
    empire.role_call()
    empire.actions()
    empire.finalize()

    # --- Independent of the main phases ---
    empire.invalidate_cache()

    report = TickReport(
        tick=tick,
        entries=list(empire.notifier.entries),
        profile=empire.profiler.report(),
        under_cpu_limit=empire.under_cpu_limit(),
    )
    world.time += 1
    return report
