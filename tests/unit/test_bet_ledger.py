"""Tests for BetLedger — driven with hand-built rounds, no engine."""

from datetime import UTC, datetime

import pytest

from src.sb_betting.domain.models import AviatorBetDetails, Bet
from src.sb_betting.engine.ledger import BetLedger
from src.sb_betting.infrastructure.accounts import InMemoryAccountProvider
from src.sb_common.enums import BetStatus, LedgerEntryType, RoundState
from src.sb_common.errors import (
    AlreadyResolvedError,
    DuplicateBetError,
    InsufficientFundsError,
    InvalidBetAmountError,
    InvalidStateError,
    NotFoundError,
)
from src.sb_round.domain.config import load_game_config
from src.sb_round.domain.models import Round
from src.sb_round.engine.clock import ManualClock


def _make_round(round_id: int = 1, crash_point: float = 3.0, **kwargs) -> Round:
    return Round(
        id=round_id,
        crash_point=crash_point,
        created_at=datetime(2024, 1, 1, tzinfo=UTC),
        **kwargs,
    )


def _make_ledger(
    variant: str = "crash", balances: dict[str, int] | None = None, **overrides
) -> tuple[BetLedger, InMemoryAccountProvider]:
    accounts = InMemoryAccountProvider()
    for account_id, balance in (balances or {"alice": 1000}).items():
        accounts.open_account(account_id, balance)
    ledger = BetLedger(accounts, load_game_config(variant, **overrides), clock=ManualClock())
    return ledger, accounts


def _run(round_: Round, multiplier: float) -> Round:
    round_.state = RoundState.RUNNING
    round_.current_multiplier = multiplier
    return round_


class TestPlaceBet:
    def test_debits_stake(self) -> None:
        ledger, accounts = _make_ledger()
        bet = ledger.place_bet(_make_round(), "alice", 100)
        assert bet.id == "bet-000001"
        assert bet.status == BetStatus.PENDING
        assert accounts.get_balance("alice") == 900
        entry = accounts.list_entries("alice", limit=1)[0]
        assert entry.entry_type == LedgerEntryType.BET_STAKE.value
        assert entry.amount == -100
        assert entry.reference_id == bet.id

    def test_aviator_bet_records_countdown(self) -> None:
        ledger, _ = _make_ledger("aviator")
        bet = ledger.place_bet(_make_round(), "alice", 100, countdown_remaining=5.5)
        assert bet.details == AviatorBetDetails(boarded_with=5.5)

    @pytest.mark.parametrize("state", [RoundState.RUNNING, RoundState.CRASHED])
    def test_only_while_waiting(self, state: RoundState) -> None:
        ledger, accounts = _make_ledger()
        with pytest.raises(InvalidStateError):
            ledger.place_bet(_make_round(state=state), "alice", 100)
        assert accounts.get_balance("alice") == 1000

    def test_duplicate_in_same_round(self) -> None:
        ledger, accounts = _make_ledger()
        round_ = _make_round()
        ledger.place_bet(round_, "alice", 100)
        with pytest.raises(DuplicateBetError):
            ledger.place_bet(round_, "alice", 100)
        assert accounts.get_balance("alice") == 900
        assert len(ledger.bets_for_round(1)) == 1

    def test_new_round_allows_new_bet(self) -> None:
        ledger, _ = _make_ledger()
        ledger.place_bet(_make_round(1), "alice", 100)
        bet = ledger.place_bet(_make_round(2), "alice", 100)
        assert bet.round_id == 2

    def test_insufficient_funds(self) -> None:
        ledger, accounts = _make_ledger(balances={"alice": 50})
        with pytest.raises(InsufficientFundsError):
            ledger.place_bet(_make_round(), "alice", 100)
        assert accounts.get_balance("alice") == 50
        assert ledger.bets_for_round(1) == []

    @pytest.mark.parametrize("stake", [0, -5, 10, 2.5, True])
    def test_invalid_stake(self, stake) -> None:
        ledger, _ = _make_ledger()
        with pytest.raises(InvalidBetAmountError):
            ledger.place_bet(_make_round(), "alice", stake)

    def test_balance_fraction_cap(self) -> None:
        ledger, _ = _make_ledger(max_bet_multiplier_of_balance=0.5)
        with pytest.raises(InvalidBetAmountError):
            ledger.place_bet(_make_round(), "alice", 501)
        assert ledger.place_bet(_make_round(), "alice", 500).stake == 500


class TestCashOut:
    def test_pays_floor_of_stake_times_multiplier(self) -> None:
        ledger, accounts = _make_ledger()
        round_ = _make_round(crash_point=3.0)
        bet = ledger.place_bet(round_, "alice", 100)
        result = ledger.cash_out(_run(round_, 2.0), bet.id)
        assert result.status == BetStatus.WON
        assert result.cashout_multiplier == 2.0
        assert result.payout == 200
        assert accounts.get_balance("alice") == 1100

    def test_rounds_down(self) -> None:
        ledger, accounts = _make_ledger()
        round_ = _make_round(crash_point=3.0)
        bet = ledger.place_bet(round_, "alice", 25)
        ledger.cash_out(_run(round_, 1.99), bet.id)
        assert bet.payout == 49
        assert accounts.get_balance("alice") == 1024

    def test_second_cashout_rejected(self) -> None:
        ledger, accounts = _make_ledger()
        round_ = _make_round(crash_point=3.0)
        bet = ledger.place_bet(round_, "alice", 100)
        ledger.cash_out(_run(round_, 1.5), bet.id)
        round_.current_multiplier = 2.5
        with pytest.raises(AlreadyResolvedError):
            ledger.cash_out(round_, bet.id)
        assert bet.payout == 150
        assert accounts.get_balance("alice") == 1050

    def test_while_waiting(self) -> None:
        ledger, _ = _make_ledger()
        round_ = _make_round()
        bet = ledger.place_bet(round_, "alice", 100)
        with pytest.raises(InvalidStateError):
            ledger.cash_out(round_, bet.id)
        assert bet.is_pending

    def test_at_or_past_crash_point(self) -> None:
        ledger, accounts = _make_ledger()
        round_ = _make_round(crash_point=2.0)
        bet = ledger.place_bet(round_, "alice", 100)
        with pytest.raises(InvalidStateError):
            ledger.cash_out(_run(round_, 2.0), bet.id)
        assert bet.is_pending
        assert accounts.get_balance("alice") == 900

    def test_bet_from_another_round(self) -> None:
        ledger, _ = _make_ledger()
        bet = ledger.place_bet(_make_round(1), "alice", 100)
        with pytest.raises(InvalidStateError):
            ledger.cash_out(_run(_make_round(2), 1.5), bet.id)

    def test_unknown_bet(self) -> None:
        ledger, _ = _make_ledger()
        with pytest.raises(NotFoundError):
            ledger.cash_out(_run(_make_round(), 1.5), "bet-999999")

    def test_cash_out_account(self) -> None:
        ledger, _ = _make_ledger()
        round_ = _make_round()
        bet = ledger.place_bet(round_, "alice", 100)
        assert ledger.cash_out_account(_run(round_, 1.2), "alice") is bet
        assert bet.payout == 120

    def test_cash_out_account_without_bet(self) -> None:
        ledger, _ = _make_ledger()
        with pytest.raises(NotFoundError):
            ledger.cash_out_account(_run(_make_round(), 1.2), "alice")


class TestResolveRound:
    def test_pending_bets_lose(self) -> None:
        ledger, accounts = _make_ledger(balances={"alice": 1000, "bob": 1000})
        round_ = _make_round(crash_point=3.4)
        a = ledger.place_bet(round_, "alice", 100)
        b = ledger.place_bet(round_, "bob", 200)
        ledger.cash_out(_run(round_, 1.5), b.id)

        lost = ledger.resolve_round(round_.id)

        assert lost == [a]
        assert a.status == BetStatus.LOST
        assert a.payout == 0
        assert b.status == BetStatus.WON
        assert accounts.get_balance("alice") == 900
        assert accounts.get_balance("bob") == 1100

    def test_resolves_exactly_once(self) -> None:
        ledger, _ = _make_ledger()
        resolved: list[Bet] = []
        ledger.add_resolution_listener(resolved.append)
        round_ = _make_round()
        ledger.place_bet(round_, "alice", 100)
        ledger.resolve_round(round_.id)
        assert ledger.resolve_round(round_.id) == []
        assert len(resolved) == 1

    def test_failing_listener_does_not_stop_resolution(self) -> None:
        ledger, _ = _make_ledger(balances={"alice": 1000, "bob": 1000})
        seen: list[Bet] = []

        def broken(bet: Bet) -> None:
            raise RuntimeError("listener down")

        ledger.add_resolution_listener(broken)
        ledger.add_resolution_listener(seen.append)
        round_ = _make_round()
        a = ledger.place_bet(round_, "alice", 100)
        b = ledger.place_bet(round_, "bob", 100)

        assert ledger.resolve_round(round_.id) == [a, b]
        assert a.status == BetStatus.LOST
        assert b.status == BetStatus.LOST
        assert seen == [a, b]

    def test_failing_listener_does_not_undo_cashout(self) -> None:
        ledger, accounts = _make_ledger()

        def broken(bet: Bet) -> None:
            raise RuntimeError("listener down")

        ledger.add_resolution_listener(broken)
        round_ = _make_round()
        bet = ledger.place_bet(round_, "alice", 100)
        assert ledger.cash_out(_run(round_, 1.5), bet.id) is bet
        assert bet.status == BetStatus.WON
        assert accounts.get_balance("alice") == 1050

    def test_empty_round(self) -> None:
        ledger, _ = _make_ledger()
        assert ledger.resolve_round(42) == []

    def test_cashout_after_resolution(self) -> None:
        ledger, _ = _make_ledger()
        round_ = _make_round()
        bet = ledger.place_bet(round_, "alice", 100)
        ledger.resolve_round(round_.id)
        with pytest.raises(AlreadyResolvedError):
            ledger.cash_out(_run(round_, 1.5), bet.id)


class TestRetention:
    def _settle(self, ledger: BetLedger, round_id: int) -> Bet:
        bet = ledger.place_bet(_make_round(round_id), "alice", 100)
        ledger.resolve_round(round_id)
        return bet

    def test_old_rounds_are_forgotten(self) -> None:
        ledger, _ = _make_ledger(bet_retention_rounds=2)
        first = self._settle(ledger, 1)
        self._settle(ledger, 2)
        assert ledger.get(first.id) is first

        self._settle(ledger, 3)

        with pytest.raises(NotFoundError):
            ledger.get(first.id)
        assert ledger.bets_for_round(1) == []
        assert ledger.active_bet("alice", 1) is None
        assert [b.round_id for b in ledger.list_bets("alice")] == [3, 2]

    def test_account_without_recent_bets_has_empty_feed(self) -> None:
        ledger, _ = _make_ledger(balances={"alice": 1000, "bob": 1000}, bet_retention_rounds=1)
        ledger.place_bet(_make_round(1), "bob", 100)
        ledger.resolve_round(1)
        self._settle(ledger, 2)
        assert ledger.list_bets("bob") == []
        assert len(ledger.list_bets("alice")) == 1

    def test_default_keeps_recent_rounds(self) -> None:
        ledger, _ = _make_ledger()
        bets = [self._settle(ledger, rid) for rid in range(1, 6)]
        assert ledger.list_bets("alice", limit=10) == list(reversed(bets))

class TestQueries:
    def test_list_bets_newest_first(self) -> None:
        ledger, _ = _make_ledger()
        for round_id in (1, 2, 3):
            ledger.place_bet(_make_round(round_id), "alice", 100)
        assert [b.round_id for b in ledger.list_bets("alice", limit=2)] == [3, 2]
        assert ledger.list_bets("bob") == []

    def test_active_bet(self) -> None:
        ledger, _ = _make_ledger()
        bet = ledger.place_bet(_make_round(5), "alice", 100)
        assert ledger.active_bet("alice", 5) is bet
        assert ledger.active_bet("alice", 6) is None

    def test_listener_notified_on_win(self) -> None:
        ledger, _ = _make_ledger()
        resolved: list[Bet] = []
        ledger.add_resolution_listener(resolved.append)
        round_ = _make_round()
        bet = ledger.place_bet(round_, "alice", 100)
        ledger.cash_out(_run(round_, 1.1), bet.id)
        assert resolved == [bet]
