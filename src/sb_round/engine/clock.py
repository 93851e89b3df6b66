"""Injectable clocks.

The engine only ever asks "what time is it"; it never sleeps. SystemClock is
used in production, ManualClock lets tests move virtual time deterministically.
"""

import time
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    def monotonic(self) -> float: ...

    def now(self) -> datetime: ...


class SystemClock:
    def monotonic(self) -> float:
        return time.monotonic()

    def now(self) -> datetime:
        return datetime.now(UTC)


class ManualClock:
    """Virtual clock: time moves only when advance() is called."""

    def __init__(self, start: datetime | None = None) -> None:
        self._elapsed = 0.0
        self._epoch = start or datetime(2024, 1, 1, tzinfo=UTC)

    def monotonic(self) -> float:
        return self._elapsed

    def now(self) -> datetime:
        return self._epoch + timedelta(seconds=self._elapsed)

    def advance(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError(f"Cannot move a clock backwards ({seconds}s)")
        self._elapsed += seconds
