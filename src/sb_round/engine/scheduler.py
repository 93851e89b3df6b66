"""Tick sources.

A scheduler calls one callback at a fixed interval until cancelled. It is the
only suspension point of the round engine: countdown and settle periods are
deadlines on the engine clock checked on each tick, so cancelling the tick
source is enough to stop every pending timer.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Protocol

from src.sb_round.engine.clock import ManualClock

logger = logging.getLogger(__name__)

TickCallback = Callable[[], None]


class Scheduler(Protocol):
    def start(self, callback: TickCallback, interval: float) -> None: ...

    def cancel(self) -> None: ...

    @property
    def running(self) -> bool: ...


class AsyncioScheduler:
    """Periodic asyncio task. Must be started from inside a running event loop."""

    def __init__(self) -> None:
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, callback: TickCallback, interval: float) -> None:
        if self.running:
            raise RuntimeError("Scheduler already started")
        self._task = asyncio.get_running_loop().create_task(
            self._run(callback, interval), name="round-engine-ticker"
        )

    async def _run(self, callback: TickCallback, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                callback()
            except Exception:
                # One bad tick must not stop the game loop
                logger.exception("Tick callback failed")

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None


class ManualScheduler:
    """Deterministic tick source over a ManualClock, for tests and simulations.

    advance() moves virtual time in interval-sized steps and fires one tick
    per step, exactly like a perfectly regular timer would.
    """

    def __init__(self, clock: ManualClock) -> None:
        self._clock = clock
        self._callback: TickCallback | None = None
        self._interval = 0.0
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._callback is not None

    @property
    def interval(self) -> float:
        return self._interval

    def start(self, callback: TickCallback, interval: float) -> None:
        if self.running:
            raise RuntimeError("Scheduler already started")
        self._callback = callback
        self._interval = interval

    def cancel(self) -> None:
        self._callback = None

    def tick(self) -> None:
        """Fire one tick without moving time."""
        if self._callback is None:
            return
        self.ticks += 1
        self._callback()

    def step(self, seconds: float | None = None) -> None:
        """Move time by one interval (or `seconds`), then tick."""
        self._clock.advance(self._interval if seconds is None else seconds)
        self.tick()

    def advance(self, seconds: float) -> None:
        remaining = seconds
        while remaining > 1e-12 and self.running:
            step = min(self._interval, remaining)
            self.step(step)
            remaining -= step

    def run_until(self, predicate: Callable[[], bool], max_seconds: float = 600.0) -> None:
        """Step until predicate() holds. Raises TimeoutError past max_seconds of virtual time."""
        waited = 0.0
        while not predicate():
            if waited >= max_seconds or not self.running:
                raise TimeoutError(f"Condition not met after {waited:.2f}s of virtual time")
            self.step()
            waited += self._interval
