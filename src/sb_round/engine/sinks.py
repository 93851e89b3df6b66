"""Render sink interface — how rendering collaborators observe the engine.

Sinks are called synchronously from the tick. They receive read-only
snapshots; the crash point is only ever revealed through on_crash.
"""

from typing import Protocol

from src.sb_betting.domain.models import Bet
from src.sb_round.domain.models import RoundSnapshot


class RenderSink(Protocol):
    def on_tick(self, snapshot: RoundSnapshot) -> None: ...

    def on_round_start(self, snapshot: RoundSnapshot) -> None: ...

    def on_crash(self, crash_point: float) -> None: ...

    def on_bet_resolved(self, bet: Bet) -> None: ...


class BaseRenderSink:
    """No-op sink; subclass and override the events you care about."""

    def on_tick(self, snapshot: RoundSnapshot) -> None:
        pass

    def on_round_start(self, snapshot: RoundSnapshot) -> None:
        pass

    def on_crash(self, crash_point: float) -> None:
        pass

    def on_bet_resolved(self, bet: Bet) -> None:
        pass


class LatestSnapshotSink(BaseRenderSink):
    """Keeps the most recent snapshot for pull-based readers (HTTP polling)."""

    def __init__(self) -> None:
        self.latest: RoundSnapshot | None = None

    def on_tick(self, snapshot: RoundSnapshot) -> None:
        self.latest = snapshot
