"""Player commands queued between ticks and applied at the start of the next one."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PlaceBetCommand:
    account_id: str
    stake: int

    action = "place a bet"


@dataclass(frozen=True)
class CashOutCommand:
    account_id: str
    bet_id: str | None = None  # None = the account's bet in the current round

    action = "cash out"


Command = PlaceBetCommand | CashOutCommand
