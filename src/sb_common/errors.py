"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Round state
  2xxx: Account
  3xxx: Bet
  9xxx: System / configuration

Every command error is recoverable: the command fails, the engine keeps
ticking. ConfigurationError is the only one raised at startup.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Round state ---

class InvalidStateError(AppError):
    def __init__(self, action: str, state: str) -> None:
        super().__init__(1001, f"Cannot {action} while round is {state}", 409)


# --- 2xxx: Account ---

class InsufficientFundsError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient funds: required {required}, available {available}",
            422,
        )


class AccountNotFoundError(AppError):
    def __init__(self, account_id: str) -> None:
        super().__init__(2002, f"Account not found: {account_id}", 404)


# --- 3xxx: Bet ---

class DuplicateBetError(AppError):
    def __init__(self, account_id: str, round_id: int) -> None:
        super().__init__(
            3001, f"Account {account_id} already has a bet in round {round_id}", 409
        )


class NotFoundError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3002, f"Bet not found: {detail}", 404)


class AlreadyResolvedError(AppError):
    def __init__(self, bet_id: str, status: str) -> None:
        super().__init__(3003, f"Bet {bet_id} already resolved as {status}", 409)


class InvalidBetAmountError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3004, f"Invalid bet amount: {detail}", 422)


# --- 9xxx: System ---

class ConfigurationError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9001, f"Invalid game configuration: {detail}", 500)
