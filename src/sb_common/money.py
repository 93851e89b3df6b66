"""Integer arithmetic utilities for stakes, payouts and balances.

Stakes and balances are whole currency units (int). Multipliers are floats;
the only float -> int conversion is in calc_payout, which rounds down so the
house never pays out more than stake x multiplier.
"""

import math


def calc_payout(stake: int, multiplier: float) -> int:
    """payout = floor(stake * multiplier)."""
    if stake <= 0:
        raise ValueError(f"Stake must be positive, got {stake}")
    if multiplier < 1.0:
        raise ValueError(f"Multiplier must be >= 1.00, got {multiplier}")
    return math.floor(stake * multiplier)


def max_stake_for(balance: int, max_multiplier_of_balance: float) -> int:
    """Largest stake allowed for a balance under the balance-fraction cap."""
    if balance <= 0:
        return 0
    return math.floor(balance * max_multiplier_of_balance)


def format_amount(units: int, currency: str = "MZN") -> str:
    """2500 -> '2,500 MZN', -100 -> '-100 MZN'."""
    return f"{units:,} {currency}"


def format_multiplier(multiplier: float) -> str:
    """2.345 -> '2.34x' (truncated, never shows more than was reached)."""
    return f"{math.floor(multiplier * 100 + 1e-9) / 100:.2f}x"
