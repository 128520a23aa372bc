from dataclasses import dataclass, field
import logging
from typing import List, Optional, Dict, Any

from .ids import RoomName

logger = logging.getLogger(__name__)


@dataclass
class NoticeEntry:
    type: str
    tick: int
    room: Optional[RoomName] = None
    reason: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


class Notifier:
    """
    Report sink for escalations, hook failures and administrative results.
    Entries accumulate until cleared; every entry is also sent to the logger.
    """

    def __init__(self):
        self.entries: List[NoticeEntry] = []

    def add_entry(
        self,
        type: str,
        tick: int,
        room: Optional[RoomName] = None,
        reason: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> NoticeEntry:
        entry = NoticeEntry(
            type=type,
            tick=tick,
            room=room,
            reason=reason,
            details=details or {},
        )
        self.entries.append(entry)
        logger.info("[%s] tick %d: %s", type, tick, reason or "")
        return entry

    def log(self, message: str, tick: int = 0) -> NoticeEntry:
        return self.add_entry("notice", tick, reason=message)

    def of_type(self, type: str) -> List[NoticeEntry]:
        return [entry for entry in self.entries if entry.type == type]

    def clear(self):
        self.entries.clear()
