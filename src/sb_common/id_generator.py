"""Monotonic business IDs for bets.

Round ids are plain integers owned by the engine; bet ids are prefixed
strings so they are never confused with round ids in logs or API payloads.
"""

import threading


class SequenceIdGenerator:
    """Thread-safe, strictly increasing string ids: 'bet-000001', 'bet-000002', ..."""

    def __init__(self, prefix: str = "bet", start: int = 1, width: int = 6) -> None:
        if start < 0:
            raise ValueError(f"start must be >= 0, got {start}")
        self._prefix = prefix
        self._next = start
        self._width = width
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            value = self._next
            self._next += 1
        return f"{self._prefix}-{value:0{self._width}d}"
