"""Pydantic schemas for sb_betting API."""

from pydantic import BaseModel, Field

from src.sb_betting.domain.models import Bet, LedgerEntry, describe_bet
from src.sb_common.money import format_amount

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PlaceBetRequest(BaseModel):
    stake: int = Field(..., gt=0, description="Stake in whole currency units")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BetResponse(BaseModel):
    id: str
    round_id: int
    game_type: str
    stake: int
    stake_display: str
    status: str
    cashout_multiplier: float | None
    payout: int | None
    payout_display: str | None
    summary: str
    placed_at: str  # ISO8601 string

    @classmethod
    def from_bet(cls, bet: Bet, currency: str = "MZN") -> "BetResponse":
        return cls(
            id=bet.id,
            round_id=bet.round_id,
            game_type=bet.details.game_type.value,
            stake=bet.stake,
            stake_display=format_amount(bet.stake, currency),
            status=bet.status.value,
            cashout_multiplier=bet.cashout_multiplier,
            payout=bet.payout,
            payout_display=format_amount(bet.payout, currency) if bet.payout is not None else None,
            summary=describe_bet(bet),
            placed_at=bet.placed_at.isoformat(),
        )


class BetListResponse(BaseModel):
    items: list[BetResponse]  # newest first


class BalanceResponse(BaseModel):
    account_id: str
    balance: int
    balance_display: str

    @classmethod
    def from_balance(cls, account_id: str, balance: int, currency: str = "MZN") -> "BalanceResponse":
        return cls(
            account_id=account_id,
            balance=balance,
            balance_display=format_amount(balance, currency),
        )


class LedgerEntryItem(BaseModel):
    id: int
    entry_type: str
    amount: int
    balance_after: int
    reference_id: str | None
    created_at: str  # ISO8601 string

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> "LedgerEntryItem":
        return cls(
            id=entry.id,
            entry_type=entry.entry_type,
            amount=entry.amount,
            balance_after=entry.balance_after,
            reference_id=entry.reference_id,
            created_at=entry.created_at.isoformat() if entry.created_at else "",
        )


class LedgerResponse(BaseModel):
    items: list[LedgerEntryItem]
