from collections import deque
from datetime import datetime

from src.sb_common.errors import ConfigurationError
from src.sb_round.domain.models import HistoryEntry, HistoryStats


class HistoryLog:
    """Fixed-capacity ring buffer of past crash points, most-recent-first."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ConfigurationError(f"history capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._entries: deque[HistoryEntry] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, crash_point: float, timestamp: datetime) -> HistoryEntry:
        entry = HistoryEntry(crash_point=crash_point, timestamp=timestamp)
        # appendleft on a bounded deque drops from the right: oldest goes first
        self._entries.appendleft(entry)
        return entry

    def snapshot(self) -> tuple[HistoryEntry, ...]:
        return tuple(self._entries)

    def latest(self) -> HistoryEntry | None:
        return self._entries[0] if self._entries else None

    def stats(self) -> HistoryStats:
        if not self._entries:
            return HistoryStats(count=0)
        points = [e.crash_point for e in self._entries]
        return HistoryStats(
            count=len(points),
            average=sum(points) / len(points),
            highest=max(points),
            lowest=min(points),
        )
