"""In-process account provider.

Durable account storage is an external concern; this implementation keeps
balances and their ledger entries in memory for the API process and tests.
"""

import logging
import threading
from datetime import UTC, datetime

from src.sb_betting.domain.models import Account, LedgerEntry
from src.sb_common.enums import LedgerEntryType
from src.sb_common.errors import AccountNotFoundError, InsufficientFundsError

logger = logging.getLogger(__name__)


class InMemoryAccountProvider:
    def __init__(self, max_entries_per_account: int = 1000) -> None:
        if max_entries_per_account < 1:
            raise ValueError(
                f"max_entries_per_account must be >= 1, got {max_entries_per_account}"
            )
        self._accounts: dict[str, Account] = {}
        self._max_entries = max_entries_per_account
        self._next_entry_id = 1
        self._lock = threading.Lock()

    def open_account(self, account_id: str, initial_balance: int = 0) -> Account:
        if initial_balance < 0:
            raise ValueError(f"Initial balance must be >= 0, got {initial_balance}")
        with self._lock:
            if account_id in self._accounts:
                return self._accounts[account_id]
            account = Account(id=account_id, balance=0, created_at=datetime.now(UTC))
            self._accounts[account_id] = account
            if initial_balance:
                self._post(account, initial_balance, LedgerEntryType.DEPOSIT, None)
        logger.info("Opened account %s with balance %d", account_id, initial_balance)
        return account

    def get_balance(self, account_id: str) -> int:
        with self._lock:
            return self._get(account_id).balance

    def apply_delta(
        self,
        account_id: str,
        delta: int,
        *,
        entry_type: LedgerEntryType,
        reference_id: str | None = None,
    ) -> int:
        with self._lock:
            account = self._get(account_id)
            if account.balance + delta < 0:
                raise InsufficientFundsError(-delta, account.balance)
            self._post(account, delta, entry_type, reference_id)
            return account.balance

    def list_entries(self, account_id: str, limit: int = 20) -> list[LedgerEntry]:
        """Newest first."""
        with self._lock:
            entries = self._get(account_id).entries
            return list(reversed(entries[-limit:])) if limit > 0 else []

    def _get(self, account_id: str) -> Account:
        account = self._accounts.get(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    def _post(
        self,
        account: Account,
        delta: int,
        entry_type: LedgerEntryType,
        reference_id: str | None,
    ) -> None:
        account.balance += delta
        account.entries.append(
            LedgerEntry(
                id=self._next_entry_id,
                account_id=account.id,
                entry_type=entry_type.value,
                amount=delta,
                balance_after=account.balance,
                reference_id=reference_id,
                created_at=datetime.now(UTC),
            )
        )
        self._next_entry_id += 1
        # Oldest entries roll off; balance_after keeps the running total
        if len(account.entries) > self._max_entries:
            del account.entries[: len(account.entries) - self._max_entries]
