"""RoundEngine — stateful orchestrator of the round lifecycle.

    WAITING --countdown--> RUNNING --m >= crash_point--> CRASHED --settle--> WAITING

Each tick does, in order:
  1. RUNNING only: evaluate m = curve(now - running_since)
  2. drain queued player commands
  3. evaluate the transition for the current state
  4. push a snapshot to every render sink

Commands are drained before the crash comparison. In the crash tick they
settle at the last published multiplier, which is strictly below the crash
point, so a cashout that arrived before the crash tick always wins.
"""

import logging
import threading
from collections import deque
from concurrent.futures import Future

from src.sb_betting.domain.models import Bet
from src.sb_betting.engine.ledger import BetLedger
from src.sb_common.enums import RoundState
from src.sb_common.errors import AppError, InvalidStateError, NotFoundError
from src.sb_round.domain.config import GameConfig
from src.sb_round.domain.models import HistoryEntry, Round, RoundSnapshot
from src.sb_round.engine.clock import Clock, SystemClock
from src.sb_round.engine.commands import CashOutCommand, Command, PlaceBetCommand
from src.sb_round.engine.crash_point import CrashPointGenerator, RandomSource
from src.sb_round.engine.curve import MultiplierCurve
from src.sb_round.engine.history import HistoryLog
from src.sb_round.engine.scheduler import AsyncioScheduler, Scheduler
from src.sb_round.engine.sinks import RenderSink

logger = logging.getLogger(__name__)

_DISPOSED = "DISPOSED"


class RoundEngine:
    def __init__(
        self,
        config: GameConfig,
        ledger: BetLedger,
        *,
        clock: Clock | None = None,
        scheduler: Scheduler | None = None,
        rng: RandomSource | None = None,
        generator: CrashPointGenerator | None = None,
        history: HistoryLog | None = None,
    ) -> None:
        self._config = config
        self._ledger = ledger
        self._clock: Clock = clock or SystemClock()
        self._scheduler: Scheduler = scheduler or AsyncioScheduler()
        # Fail fast: no round can begin without a valid distribution and curve
        self._generator = generator or CrashPointGenerator(config.distribution_tiers, rng)
        self._curve = MultiplierCurve(config.curve_base, config.curve_scale)
        self._history = history or HistoryLog(config.history_capacity)

        self._sinks: list[RenderSink] = []
        self._commands: deque[tuple[Command, Future[Bet]]] = deque()
        self._commands_lock = threading.Lock()
        self._round: Round | None = None
        self._next_round_id = 1
        self._disposed = False

        ledger.add_resolution_listener(self._emit_bet_resolved)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self._disposed:
            raise RuntimeError("Engine has been disposed")
        if self._round is not None:
            raise RuntimeError("Engine already started")
        self._open_round(self._clock.monotonic())
        self._scheduler.start(self.tick, self._config.tick_interval_seconds)
        self._publish()
        logger.info(
            "Round engine started: variant=%s tick=%dms",
            self._config.game_type.value, self._config.tick_interval_ms,
        )

    def dispose(self) -> None:
        """Stop ticking and fail every queued command. Later ticks are no-ops."""
        if self._disposed:
            return
        self._disposed = True
        self._scheduler.cancel()
        with self._commands_lock:
            pending = list(self._commands)
            self._commands.clear()
        for command, future in pending:
            if future.set_running_or_notify_cancel():
                future.set_exception(InvalidStateError(command.action, _DISPOSED))
        logger.info("Round engine disposed (%d queued command(s) rejected)", len(pending))

    def subscribe(self, sink: RenderSink) -> None:
        self._sinks.append(sink)

    # ------------------------------------------------------------------
    # Command surface
    # ------------------------------------------------------------------

    def submit(self, command: Command) -> "Future[Bet]":
        future: Future[Bet] = Future()
        if self._disposed:
            future.set_exception(InvalidStateError(command.action, _DISPOSED))
            return future
        with self._commands_lock:
            self._commands.append((command, future))
        return future

    def place_bet(self, account_id: str, stake: int) -> "Future[Bet]":
        return self.submit(PlaceBetCommand(account_id=account_id, stake=stake))

    def cash_out(self, account_id: str, bet_id: str | None = None) -> "Future[Bet]":
        return self.submit(CashOutCommand(account_id=account_id, bet_id=bet_id))

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self) -> None:
        if self._disposed or self._round is None:
            return
        now = self._clock.monotonic()
        round_ = self._round

        if round_.state == RoundState.WAITING:
            self._drain(round_, now)
            if now - round_.waiting_since >= self._config.countdown_seconds:
                self._enter_running(round_, now)

        elif round_.state == RoundState.RUNNING:
            assert round_.running_since is not None
            multiplier = self._curve(now - round_.running_since)
            logger.debug("Round %d tick: m=%.4f", round_.id, multiplier)
            if multiplier < round_.crash_point:
                round_.current_multiplier = max(multiplier, round_.current_multiplier)
                self._drain(round_, now)
            else:
                self._drain(round_, now)
                self._crash(round_, now, multiplier)

        else:  # CRASHED
            assert round_.crashed_since is not None
            self._drain(round_, now)
            if now - round_.crashed_since >= self._config.settle_seconds:
                self._open_round(now)

        self._publish()

    def _drain(self, round_: Round, now: float) -> None:
        with self._commands_lock:
            pending = list(self._commands)
            self._commands.clear()
        for command, future in pending:
            if not future.set_running_or_notify_cancel():
                continue
            try:
                result = self._apply(command, round_, now)
            except AppError as exc:
                future.set_exception(exc)
            except Exception as exc:
                logger.exception("Command %r failed unexpectedly", command)
                future.set_exception(exc)
            else:
                future.set_result(result)

    def _apply(self, command: Command, round_: Round, now: float) -> Bet:
        match command:
            case PlaceBetCommand(account_id=account_id, stake=stake):
                return self._ledger.place_bet(
                    round_, account_id, stake,
                    countdown_remaining=self._countdown_remaining(round_, now),
                )
            case CashOutCommand(account_id=account_id, bet_id=None):
                return self._ledger.cash_out_account(round_, account_id)
            case CashOutCommand(account_id=account_id, bet_id=str(bet_id)):
                if self._ledger.get(bet_id).account_id != account_id:
                    raise NotFoundError(bet_id)
                return self._ledger.cash_out(round_, bet_id)
        raise TypeError(f"Unknown command: {command!r}")

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _open_round(self, now: float) -> None:
        round_ = Round(
            id=self._next_round_id,
            crash_point=self._generator.sample(),
            created_at=self._clock.now(),
            waiting_since=now,
        )
        self._next_round_id += 1
        self._round = round_
        logger.info(
            "Round %d open: accepting bets for %.1fs",
            round_.id, self._config.countdown_seconds,
        )

    def _enter_running(self, round_: Round, now: float) -> None:
        round_.state = RoundState.RUNNING
        round_.running_since = now
        round_.started_at = self._clock.now()
        round_.current_multiplier = 1.0
        logger.info("Round %d running", round_.id)
        self._emit("on_round_start", self.snapshot())

    def _crash(self, round_: Round, now: float, multiplier: float) -> None:
        round_.crash_tick_multiplier = multiplier
        round_.current_multiplier = round_.crash_point
        round_.state = RoundState.CRASHED
        round_.crashed_since = now
        self._ledger.resolve_round(round_.id)
        self._history.append(round_.crash_point, self._clock.now())
        logger.info("Round %d crashed @ %.2fx", round_.id, round_.crash_point)
        self._emit("on_crash", round_.crash_point)

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def ledger(self) -> BetLedger:
        return self._ledger

    @property
    def history(self) -> HistoryLog:
        return self._history

    @property
    def curve(self) -> MultiplierCurve:
        return self._curve

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def state(self) -> RoundState:
        return self._require_round().state

    @property
    def round_id(self) -> int:
        return self._require_round().id

    @property
    def current_multiplier(self) -> float:
        return self._require_round().current_multiplier

    def snapshot(self) -> RoundSnapshot:
        round_ = self._require_round()
        last: HistoryEntry | None = self._history.latest()
        return RoundSnapshot(
            round_id=round_.id,
            state=round_.state,
            current_multiplier=round_.current_multiplier,
            countdown_remaining=self._countdown_remaining(round_, self._clock.monotonic()),
            last_crash_point=last.crash_point if last else None,
        )

    def _countdown_remaining(self, round_: Round, now: float) -> float:
        if round_.state != RoundState.WAITING:
            return 0.0
        return max(0.0, self._config.countdown_seconds - (now - round_.waiting_since))

    def _require_round(self) -> Round:
        if self._round is None:
            raise RuntimeError("Engine not started")
        return self._round

    def _publish(self) -> None:
        self._emit("on_tick", self.snapshot())

    def _emit_bet_resolved(self, bet: Bet) -> None:
        self._emit("on_bet_resolved", bet)

    def _emit(self, event: str, *args: object) -> None:
        # Sinks observe only; a failing sink never interrupts a transition
        for sink in self._sinks:
            try:
                getattr(sink, event)(*args)
            except Exception:
                logger.exception("Render sink %r failed on %s", sink, event)
