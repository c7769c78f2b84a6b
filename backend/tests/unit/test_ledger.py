"""Unit Tests: Favor Ledger

Test cases:
- Reserve moves favor from balance to reserved
- Release with and without credit
- Insufficient favor and reservation underflow leave the account untouched
- Lock contention surfaces as ConcurrencyError
"""

import threading

import pytest

from mytherra.betting.ledger import FavorLedger
from mytherra.exceptions import (
    ConcurrencyError,
    InsufficientFavorError,
    MytherraError,
    NotFoundError,
    ValidationError,
)


@pytest.fixture
def ledger():
    ledger = FavorLedger()
    ledger.open_account("player", 100)
    return ledger


def test_open_account_is_idempotent(ledger):
    ledger.open_account("player", 500)
    assert ledger.get_account("player").balance == 100


def test_reserve_moves_balance_to_reserved(ledger):
    account = ledger.reserve("player", 40)

    assert account.balance == 60
    assert account.reserved == 40
    assert ledger.get_account("player").total == 100


def test_reserve_more_than_balance_fails(ledger):
    with pytest.raises(InsufficientFavorError) as exc_info:
        ledger.reserve("player", 150)

    assert exc_info.value.required == 150
    assert exc_info.value.available == 100
    account = ledger.get_account("player")
    assert account.balance == 100
    assert account.reserved == 0


def test_release_with_payout(ledger):
    ledger.reserve("player", 100)
    account = ledger.release("player", 100, credit=250)

    assert account.balance == 250
    assert account.reserved == 0


def test_release_without_credit_forfeits(ledger):
    ledger.reserve("player", 30)
    account = ledger.release("player", 30)

    assert account.balance == 70
    assert account.reserved == 0


def test_release_more_than_reserved_fails(ledger):
    ledger.reserve("player", 10)

    with pytest.raises(MytherraError):
        ledger.release("player", 20)
    assert ledger.get_account("player").reserved == 10


def test_credit_and_charge(ledger):
    ledger.credit("player", 15)
    assert ledger.get_account("player").balance == 115

    ledger.charge("player", 115)
    assert ledger.get_account("player").balance == 0

    with pytest.raises(InsufficientFavorError):
        ledger.charge("player", 1)


def test_non_positive_amounts_rejected(ledger):
    with pytest.raises(ValidationError) as exc_info:
        ledger.reserve("player", 0)
    assert exc_info.value.field == "amount"

    with pytest.raises(ValidationError):
        ledger.credit("player", -5)


def test_unknown_player(ledger):
    with pytest.raises(NotFoundError):
        ledger.get_account("nobody")
    with pytest.raises(NotFoundError):
        ledger.reserve("nobody", 10)


def test_lock_timeout_raises_concurrency_error():
    """A second thread cannot mutate while the player's lock is held."""
    ledger = FavorLedger(lock_timeout=0.05)
    ledger.open_account("player", 100)
    held = threading.Event()
    done = threading.Event()

    def hold_lock():
        with ledger.locked("player"):
            held.set()
            done.wait(timeout=5)

    holder = threading.Thread(target=hold_lock)
    holder.start()
    try:
        assert held.wait(timeout=5)
        with pytest.raises(ConcurrencyError):
            ledger.reserve("player", 10)
    finally:
        done.set()
        holder.join()

    assert ledger.get_account("player").balance == 100


def test_lock_is_reentrant_for_the_holder(ledger):
    with ledger.locked("player"):
        ledger.reserve("player", 10)
        ledger.release("player", 10, credit=10)
    assert ledger.get_account("player").balance == 100
