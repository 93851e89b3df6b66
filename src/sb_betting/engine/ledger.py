"""BetLedger — bet placement, cashout, and crash resolution.

The ledger never reads the clock to decide validity: the round it is handed
(owned by RoundEngine) is the single source of truth for state and current
multiplier. Balances move only through the injected account provider:

    place_bet : debit stake            (BET_STAKE,  -stake)
    cash_out  : credit payout          (BET_PAYOUT, +floor(stake * m))
    crash     : no balance change      (stake already debited)
"""

import logging
from collections import defaultdict
from collections.abc import Callable

from src.sb_betting.domain.models import Bet, make_bet_details
from src.sb_betting.domain.repository import AccountProviderProtocol
from src.sb_common.enums import LedgerEntryType, RoundState
from src.sb_common.errors import (
    AlreadyResolvedError,
    DuplicateBetError,
    InsufficientFundsError,
    InvalidBetAmountError,
    InvalidStateError,
    NotFoundError,
)
from src.sb_common.id_generator import SequenceIdGenerator
from src.sb_common.money import calc_payout, max_stake_for
from src.sb_round.domain.config import GameConfig
from src.sb_round.domain.models import Round
from src.sb_round.engine.clock import Clock, SystemClock

logger = logging.getLogger(__name__)

BetListener = Callable[[Bet], None]


class BetLedger:
    def __init__(
        self,
        accounts: AccountProviderProtocol,
        config: GameConfig,
        clock: Clock | None = None,
        id_generator: SequenceIdGenerator | None = None,
    ) -> None:
        self._accounts = accounts
        self._config = config
        self._clock: Clock = clock or SystemClock()
        self._ids = id_generator or SequenceIdGenerator(prefix="bet")
        self._bets: dict[str, Bet] = {}
        self._by_round: dict[int, list[str]] = defaultdict(list)
        self._by_account: dict[str, list[str]] = defaultdict(list)
        self._by_account_round: dict[tuple[str, int], str] = {}
        self._listeners: list[BetListener] = []

    def add_resolution_listener(self, listener: BetListener) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def place_bet(
        self,
        round_: Round,
        account_id: str,
        stake: int,
        countdown_remaining: float = 0.0,
    ) -> Bet:
        if round_.state != RoundState.WAITING:
            raise InvalidStateError("place a bet", round_.state.value)
        self._check_stake(stake)
        if (account_id, round_.id) in self._by_account_round:
            raise DuplicateBetError(account_id, round_.id)

        balance = self._accounts.get_balance(account_id)
        if stake > balance:
            raise InsufficientFundsError(stake, balance)
        cap = max_stake_for(balance, self._config.max_bet_multiplier_of_balance)
        if stake > cap:
            raise InvalidBetAmountError(f"stake {stake} exceeds the per-bet cap of {cap}")

        bet_id = self._ids.next_id()
        self._accounts.apply_delta(
            account_id, -stake, entry_type=LedgerEntryType.BET_STAKE, reference_id=bet_id
        )
        bet = Bet(
            id=bet_id,
            round_id=round_.id,
            account_id=account_id,
            stake=stake,
            details=make_bet_details(self._config.game_type, countdown_remaining),
            placed_at=self._clock.now(),
        )
        self._bets[bet.id] = bet
        self._by_round[round_.id].append(bet.id)
        self._by_account[account_id].append(bet.id)
        self._by_account_round[(account_id, round_.id)] = bet.id
        logger.info(
            "Bet %s placed: account=%s round=%d stake=%d", bet.id, account_id, round_.id, stake
        )
        return bet

    def cash_out(self, round_: Round, bet_id: str) -> Bet:
        bet = self.get(bet_id)
        if not bet.is_pending:
            raise AlreadyResolvedError(bet.id, bet.status.value)
        if bet.round_id != round_.id or round_.state != RoundState.RUNNING:
            raise InvalidStateError("cash out", round_.state.value)

        multiplier = round_.current_multiplier
        if multiplier >= round_.crash_point:
            raise InvalidStateError("cash out", RoundState.CRASHED.value)

        payout = calc_payout(bet.stake, multiplier)
        self._accounts.apply_delta(
            bet.account_id, payout, entry_type=LedgerEntryType.BET_PAYOUT, reference_id=bet.id
        )
        bet.mark_won(multiplier, payout, self._clock.now())
        logger.info(
            "Bet %s won: round=%d multiplier=%.4f payout=%d",
            bet.id, round_.id, multiplier, payout,
        )
        self._notify(bet)
        return bet

    def cash_out_account(self, round_: Round, account_id: str) -> Bet:
        """Cash out whatever bet the account holds in this round."""
        bet_id = self._by_account_round.get((account_id, round_.id))
        if bet_id is None:
            raise NotFoundError(f"no bet for account {account_id} in round {round_.id}")
        return self.cash_out(round_, bet_id)

    def resolve_round(self, round_id: int) -> list[Bet]:
        """Every still-PENDING bet of the crashed round becomes LOST (payout 0)."""
        now = self._clock.now()
        lost: list[Bet] = []
        for bet_id in self._by_round.get(round_id, []):
            bet = self._bets[bet_id]
            if bet.is_pending:
                bet.mark_lost(now)
                lost.append(bet)
        if lost:
            logger.info("Round %d resolved: %d bet(s) lost", round_id, len(lost))
        # Every bet is settled before any listener runs
        for bet in lost:
            self._notify(bet)
        self._prune_before(round_id - self._config.bet_retention_rounds + 1)
        return lost

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, bet_id: str) -> Bet:
        bet = self._bets.get(bet_id)
        if bet is None:
            raise NotFoundError(bet_id)
        return bet

    def active_bet(self, account_id: str, round_id: int) -> Bet | None:
        bet_id = self._by_account_round.get((account_id, round_id))
        return self._bets[bet_id] if bet_id is not None else None

    def bets_for_round(self, round_id: int) -> list[Bet]:
        return [self._bets[b] for b in self._by_round.get(round_id, [])]

    def list_bets(self, account_id: str, limit: int = 20) -> list[Bet]:
        """Newest first."""
        if limit <= 0:
            return []
        ids = self._by_account.get(account_id, [])[-limit:]
        return [self._bets[b] for b in reversed(ids)]

    # ------------------------------------------------------------------

    def _check_stake(self, stake: int) -> None:
        if isinstance(stake, bool) or not isinstance(stake, int) or stake <= 0:
            raise InvalidBetAmountError(f"stake must be a positive integer, got {stake!r}")
        if stake < self._config.min_bet:
            raise InvalidBetAmountError(
                f"stake {stake} is below the minimum bet of {self._config.min_bet}"
            )

    def _notify(self, bet: Bet) -> None:
        for listener in self._listeners:
            try:
                listener(bet)
            except Exception:
                logger.exception("Resolution listener failed for bet %s", bet.id)

    def _prune_before(self, oldest_kept: int) -> None:
        """Forget settled rounds with id < oldest_kept."""
        stale = [rid for rid in self._by_round if rid < oldest_kept]
        if not stale:
            return
        touched: set[str] = set()
        for rid in stale:
            for bet_id in self._by_round.pop(rid):
                bet = self._bets.pop(bet_id)
                self._by_account_round.pop((bet.account_id, rid), None)
                touched.add(bet.account_id)
        for account_id in touched:
            kept = [b for b in self._by_account[account_id] if b in self._bets]
            if kept:
                self._by_account[account_id] = kept
            else:
                del self._by_account[account_id]
        logger.debug("Pruned %d settled round(s) before round %d", len(stale), oldest_kept)
