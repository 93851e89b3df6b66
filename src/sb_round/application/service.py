"""GameTableService — thin composition layer over one running game table.

Wires RoundEngine + BetLedger + account provider and exposes the command
surface (place_bet / cash_out return futures resolved on the next tick) and
the read side (snapshot, history, bet feed, balances) to the API layer.
"""

from concurrent.futures import Future

from src.sb_betting.domain.models import Bet, LedgerEntry
from src.sb_betting.engine.ledger import BetLedger
from src.sb_betting.infrastructure.accounts import InMemoryAccountProvider
from src.sb_round.domain.config import GameConfig
from src.sb_round.domain.models import HistoryEntry, HistoryStats, RoundSnapshot
from src.sb_round.engine.clock import Clock, SystemClock
from src.sb_round.engine.crash_point import RandomSource
from src.sb_round.engine.engine import RoundEngine
from src.sb_round.engine.scheduler import Scheduler
from src.sb_round.engine.sinks import LatestSnapshotSink, RenderSink


class GameTableService:
    def __init__(
        self,
        config: GameConfig,
        *,
        accounts: InMemoryAccountProvider | None = None,
        clock: Clock | None = None,
        scheduler: Scheduler | None = None,
        rng: RandomSource | None = None,
        initial_balance: int = 0,
    ) -> None:
        self._clock: Clock = clock or SystemClock()
        self._accounts = accounts or InMemoryAccountProvider()
        self._initial_balance = initial_balance
        self._ledger = BetLedger(self._accounts, config, clock=self._clock)
        self._engine = RoundEngine(
            config, self._ledger, clock=self._clock, scheduler=scheduler, rng=rng
        )
        self._latest = LatestSnapshotSink()
        self._engine.subscribe(self._latest)

    @property
    def engine(self) -> RoundEngine:
        return self._engine

    @property
    def config(self) -> GameConfig:
        return self._engine.config

    def start(self) -> None:
        self._engine.start()

    def dispose(self) -> None:
        self._engine.dispose()

    def subscribe(self, sink: RenderSink) -> None:
        self._engine.subscribe(sink)

    # --- accounts ---

    def ensure_account(self, account_id: str) -> None:
        self._accounts.open_account(account_id, self._initial_balance)

    def balance(self, account_id: str) -> int:
        return self._accounts.get_balance(account_id)

    def ledger_entries(self, account_id: str, limit: int = 20) -> list[LedgerEntry]:
        return self._accounts.list_entries(account_id, limit)

    # --- commands ---

    def place_bet(self, account_id: str, stake: int) -> "Future[Bet]":
        return self._engine.place_bet(account_id, stake)

    def cash_out(self, account_id: str) -> "Future[Bet]":
        return self._engine.cash_out(account_id)

    # --- read side ---

    def snapshot(self) -> RoundSnapshot:
        """State as of the last tick."""
        return self._latest.latest or self._engine.snapshot()

    def history(self) -> tuple[HistoryEntry, ...]:
        return self._engine.history.snapshot()

    def history_stats(self) -> HistoryStats:
        return self._engine.history.stats()

    def bets(self, account_id: str, limit: int = 20) -> list[Bet]:
        return self._ledger.list_bets(account_id, limit)

    def active_bet(self, account_id: str) -> Bet | None:
        return self._ledger.active_bet(account_id, self._engine.round_id)
