"""Domain models for sb_round — pure dataclasses, no engine logic."""

from dataclasses import dataclass
from datetime import datetime

from src.sb_common.enums import RoundState


@dataclass
class Round:
    """Mutated only by RoundEngine. crash_point never leaves the engine before CRASHED."""

    id: int
    crash_point: float
    created_at: datetime
    state: RoundState = RoundState.WAITING
    current_multiplier: float = 1.0
    # Engine-clock instants (seconds, monotonic)
    waiting_since: float = 0.0
    running_since: float | None = None
    crashed_since: float | None = None
    started_at: datetime | None = None      # wall-clock RUNNING entry
    crash_tick_multiplier: float | None = None  # raw curve value that tripped the crash


@dataclass(frozen=True)
class RoundSnapshot:
    """Read-only view pushed to render sinks once per tick."""

    round_id: int
    state: RoundState
    current_multiplier: float
    countdown_remaining: float
    last_crash_point: float | None


@dataclass(frozen=True)
class HistoryEntry:
    crash_point: float
    timestamp: datetime


@dataclass(frozen=True)
class HistoryStats:
    count: int
    average: float | None = None
    highest: float | None = None
    lowest: float | None = None
