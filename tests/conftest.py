"""Shared test fixtures.

Engine tests run on virtual time: a ManualClock plus a ManualScheduler that
fires one tick per interval step. Crash points are pinned with
FixedCrashPoints so scenarios are exact.
"""

from collections.abc import Callable, Sequence
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any

import pytest

from src.sb_betting.domain.models import Bet
from src.sb_betting.engine.ledger import BetLedger
from src.sb_betting.infrastructure.accounts import InMemoryAccountProvider
from src.sb_common.enums import RoundState
from src.sb_round.domain.config import load_game_config
from src.sb_round.domain.models import RoundSnapshot
from src.sb_round.engine.clock import ManualClock
from src.sb_round.engine.crash_point import CrashPointGenerator, RandomSource
from src.sb_round.engine.engine import RoundEngine
from src.sb_round.engine.scheduler import ManualScheduler
from src.sb_round.engine.sinks import BaseRenderSink


class FixedCrashPoints(CrashPointGenerator):
    """Generator stub: returns the given crash points in order, repeating the last."""

    def __init__(self, *points: float) -> None:
        self._points = list(points)

    def sample(self) -> float:
        if len(self._points) > 1:
            return self._points.pop(0)
        return self._points[0]


class FixedRandom:
    """RandomSource stub returning the same value on every draw."""

    def __init__(self, value: float) -> None:
        self.value = value

    def random(self) -> float:
        return self.value


class RecordingSink(BaseRenderSink):
    def __init__(self) -> None:
        self.snapshots: list[RoundSnapshot] = []
        self.round_starts: list[RoundSnapshot] = []
        self.crashes: list[float] = []
        self.resolved: list[Bet] = []

    def on_tick(self, snapshot: RoundSnapshot) -> None:
        self.snapshots.append(snapshot)

    def on_round_start(self, snapshot: RoundSnapshot) -> None:
        self.round_starts.append(snapshot)

    def on_crash(self, crash_point: float) -> None:
        self.crashes.append(crash_point)

    def on_bet_resolved(self, bet: Bet) -> None:
        self.resolved.append(bet)


@dataclass
class Harness:
    engine: RoundEngine
    ledger: BetLedger
    accounts: InMemoryAccountProvider
    clock: ManualClock
    scheduler: ManualScheduler
    sink: RecordingSink = field(default_factory=RecordingSink)

    def apply(self, future: "Future[Bet]") -> Bet:
        """Fire one tick (no time passes) and return the command's result."""
        self.scheduler.tick()
        return future.result(timeout=0)

    def run_until_state(self, state: RoundState, max_seconds: float = 600.0) -> None:
        self.scheduler.run_until(lambda: self.engine.state == state, max_seconds)

    def elapsed_after_next_step(self) -> float:
        running_since = self.engine._round.running_since  # type: ignore[union-attr]
        assert running_since is not None
        return self.clock.monotonic() + self.scheduler.interval - running_since


HarnessFactory = Callable[..., Harness]


@pytest.fixture
def make_harness() -> HarnessFactory:
    def _make(
        variant: str = "crash",
        crash_points: Sequence[float] | None = (3.0,),
        rng: RandomSource | None = None,
        balances: dict[str, int] | None = None,
        start: bool = True,
        **overrides: Any,
    ) -> Harness:
        config = load_game_config(variant, **overrides)
        clock = ManualClock()
        scheduler = ManualScheduler(clock)
        accounts = InMemoryAccountProvider()
        for account_id, balance in (balances or {"alice": 1000}).items():
            accounts.open_account(account_id, balance)
        ledger = BetLedger(accounts, config, clock=clock)
        generator = FixedCrashPoints(*crash_points) if crash_points else None
        engine = RoundEngine(
            config, ledger, clock=clock, scheduler=scheduler, rng=rng, generator=generator
        )
        harness = Harness(engine, ledger, accounts, clock, scheduler)
        engine.subscribe(harness.sink)
        if start:
            engine.start()
        return harness

    return _make
