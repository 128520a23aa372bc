from collections import Counter
from typing import Optional

from ..core.log import Notifier


def generate_gazette(notifier: Notifier, tick: int) -> str:
    """
    Generates a concise per-tick report from the notifier entries.
    """
    lines = [f"== Tick {tick} Report =="]
    for entry in notifier.entries:
        reason = entry.reason or ""
        if reason:
            lines.append(f"[{entry.type}] {reason}")
        else:
            lines.append(f"[{entry.type}]")
    return "\n".join(lines) + "\n"


def summarize(notifier: Notifier) -> str:
    counts = Counter(entry.type for entry in notifier.entries)
    if not counts:
        return "No notices."
    return ", ".join(f"{entry_type}: {count}" for entry_type, count in sorted(counts.items()))


class TickGazette:
    """Overlay sink the empire flushes once per tick."""

    def __init__(self):
        self.last: Optional[str] = None
        self.last_tick: Optional[int] = None

    def finalize(self, notifier: Notifier, tick: int) -> str:
        self.last = generate_gazette(notifier, tick)
        self.last_tick = tick
        return self.last
