"""Account provider Protocol — the only way the core touches balances.

BetLedger receives an implementation at construction; there is no ambient
account state. Unit tests inject a mock conforming to this Protocol.
"""

from typing import Protocol

from src.sb_common.enums import LedgerEntryType


class AccountProviderProtocol(Protocol):
    def get_balance(self, account_id: str) -> int:
        """Raises AccountNotFoundError for unknown accounts."""
        ...

    def apply_delta(
        self,
        account_id: str,
        delta: int,
        *,
        entry_type: LedgerEntryType,
        reference_id: str | None = None,
    ) -> int:
        """Apply a signed delta and return the new balance.

        Must refuse (InsufficientFundsError) any delta that would take the
        balance below zero, leaving the balance untouched.
        """
        ...
