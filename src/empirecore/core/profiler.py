import logging
import time
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Dict

logger = logging.getLogger(__name__)


@dataclass
class ProfileStat:
    total_ms: float = 0.0
    calls: int = 0


class Profiler:
    """
    Brackets phases with start/end labels and measures how much of the
    per-tick budget has been consumed. The clock is injectable so tests can
    drive it deterministically.
    """

    def __init__(self, budget_ms: float = 20.0, clock: Callable[[], float] = time.perf_counter):
        self.budget_ms = budget_ms
        self.clock = clock
        self.stats: Dict[str, ProfileStat] = defaultdict(ProfileStat)
        self._open: Dict[str, float] = {}
        self._tick_start = clock()

    def begin_tick(self):
        self.stats.clear()
        self._open.clear()
        self._tick_start = self.clock()

    def start(self, label: str):
        self._open[label] = self.clock()

    def end(self, label: str):
        started = self._open.pop(label, None)
        if started is None:
            logger.debug("Profiler.end(%s) without matching start", label)
            return
        stat = self.stats[label]
        stat.total_ms += (self.clock() - started) * 1000.0
        stat.calls += 1

    def elapsed_ms(self) -> float:
        return (self.clock() - self._tick_start) * 1000.0

    def proportion_used(self) -> float:
        return self.elapsed_ms() / self.budget_ms

    def report(self) -> Dict[str, float]:
        return {label: stat.total_ms for label, stat in sorted(self.stats.items())}
