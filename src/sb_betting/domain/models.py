"""Domain models for sb_betting — pure dataclasses, no engine logic."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, assert_never

from src.sb_common.enums import BetStatus, GameType
from src.sb_common.errors import AlreadyResolvedError
from src.sb_common.money import format_multiplier

# ---------------------------------------------------------------------------
# Per-variant bet details (closed tagged union keyed by game type)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CrashBetDetails:
    game_type: Literal[GameType.CRASH] = GameType.CRASH


@dataclass(frozen=True)
class AviatorBetDetails:
    boarded_with: float  # seconds left on the countdown when the bet was placed
    game_type: Literal[GameType.AVIATOR] = GameType.AVIATOR


BetDetails = CrashBetDetails | AviatorBetDetails


def make_bet_details(game_type: GameType, countdown_remaining: float) -> BetDetails:
    match game_type:
        case GameType.CRASH:
            return CrashBetDetails()
        case GameType.AVIATOR:
            return AviatorBetDetails(boarded_with=round(countdown_remaining, 2))
        case _:
            assert_never(game_type)


# ---------------------------------------------------------------------------
# Bet
# ---------------------------------------------------------------------------


@dataclass
class Bet:
    id: str
    round_id: int
    account_id: str
    stake: int
    details: BetDetails
    placed_at: datetime
    status: BetStatus = BetStatus.PENDING
    cashout_multiplier: float | None = None
    payout: int | None = None
    resolved_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == BetStatus.PENDING

    def mark_won(self, multiplier: float, payout: int, at: datetime) -> None:
        self._ensure_pending()
        self.status = BetStatus.WON
        self.cashout_multiplier = multiplier
        self.payout = payout
        self.resolved_at = at

    def mark_lost(self, at: datetime) -> None:
        self._ensure_pending()
        self.status = BetStatus.LOST
        self.payout = 0
        self.resolved_at = at

    def _ensure_pending(self) -> None:
        if not self.is_pending:
            raise AlreadyResolvedError(self.id, self.status.value)


def describe_bet(bet: Bet) -> str:
    """One-line feed text for a bet, worded per game variant."""
    details = bet.details
    match details:
        case CrashBetDetails():
            if bet.status == BetStatus.WON:
                return f"Crash: cashed out @ {format_multiplier(bet.cashout_multiplier or 1.0)}"
            if bet.status == BetStatus.LOST:
                return "Crash: busted"
            return "Crash: in play"
        case AviatorBetDetails(boarded_with=boarded_with):
            if bet.status == BetStatus.WON:
                return f"Aviator: jumped @ {format_multiplier(bet.cashout_multiplier or 1.0)}"
            if bet.status == BetStatus.LOST:
                return "Aviator: flew away"
            return f"Aviator: boarded at T-{boarded_with:.1f}s"
        case _:
            assert_never(details)


# ---------------------------------------------------------------------------
# Account + ledger
# ---------------------------------------------------------------------------


@dataclass
class Account:
    id: str
    balance: int
    created_at: datetime
    entries: list["LedgerEntry"] = field(default_factory=list)


@dataclass(frozen=True)
class LedgerEntry:
    id: int
    account_id: str
    entry_type: str              # LedgerEntryType value
    amount: int                  # positive=credit negative=debit
    balance_after: int
    reference_id: str | None = None
    created_at: datetime | None = None
