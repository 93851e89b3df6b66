"""Global enums. All inherit from (str, Enum) so they serialize as plain strings."""

from enum import Enum


class GameType(str, Enum):
    CRASH = "crash"
    AVIATOR = "aviator"


class RoundState(str, Enum):
    """Strictly cyclic: WAITING -> RUNNING -> CRASHED -> WAITING."""
    WAITING = "WAITING"
    RUNNING = "RUNNING"
    CRASHED = "CRASHED"


class BetStatus(str, Enum):
    PENDING = "PENDING"
    WON = "WON"
    LOST = "LOST"


class LedgerEntryType(str, Enum):
    DEPOSIT = "DEPOSIT"
    BET_STAKE = "BET_STAKE"
    BET_PAYOUT = "BET_PAYOUT"
