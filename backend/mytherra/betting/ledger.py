"""Divine favor ledger with per-player locking."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from mytherra.exceptions import (
    ConcurrencyError,
    InsufficientFavorError,
    MytherraError,
    NotFoundError,
    ValidationError,
)
from mytherra.storage.repositories import FavorLedgerRepository, InMemoryFavorLedgerRepository

from .models import FavorAccount

logger = logging.getLogger(__name__)


class FavorLedger:
    """Per-player favor balances. No operation ever leaves a negative balance.

    Every mutation runs under the player's re-entrant lock, acquired with a
    bounded wait. Callers that must combine a ledger change with other work
    (placing a bet) hold ``locked(player_id)`` around the whole sequence.
    """

    def __init__(
        self,
        repository: FavorLedgerRepository | None = None,
        lock_timeout: float = 2.0,
    ):
        self.repository = repository or InMemoryFavorLedgerRepository()
        self.lock_timeout = lock_timeout
        self._locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, player_id: str) -> threading.RLock:
        with self._locks_guard:
            if player_id not in self._locks:
                self._locks[player_id] = threading.RLock()
            return self._locks[player_id]

    @contextmanager
    def locked(self, player_id: str) -> Iterator[None]:
        lock = self._lock_for(player_id)
        if not lock.acquire(timeout=self.lock_timeout):
            logger.warning(f"Ledger lock timeout for player {player_id}")
            raise ConcurrencyError(f"Favor ledger busy for player {player_id}, try again")
        try:
            yield
        finally:
            lock.release()

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def open_account(self, player_id: str, initial_balance: int = 0) -> FavorAccount:
        """Create the account if it does not exist yet and return it."""
        with self.locked(player_id):
            account = self.repository.get(player_id)
            if account is None:
                account = FavorAccount(player_id=player_id, balance=initial_balance)
                self.repository.save(account)
                logger.info(f"Opened favor account for {player_id} with {initial_balance} favor")
            return account

    def get_account(self, player_id: str) -> FavorAccount:
        account = self.repository.get(player_id)
        if account is None:
            raise NotFoundError(f"No favor account for player {player_id}")
        return account

    def accounts(self) -> list[FavorAccount]:
        return self.repository.all()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @staticmethod
    def _check_amount(amount: int) -> None:
        if amount <= 0:
            raise ValidationError("amount", f"Amount must be positive, got {amount}")

    def reserve(self, player_id: str, amount: int) -> FavorAccount:
        """Move favor from balance into reserved."""
        self._check_amount(amount)
        with self.locked(player_id):
            account = self.get_account(player_id)
            if amount > account.balance:
                raise InsufficientFavorError(
                    f"Insufficient divine favor: need {amount}, have {account.balance}",
                    required=amount,
                    available=account.balance,
                )
            account.balance -= amount
            account.reserved += amount
            self.repository.save(account)
            logger.debug(f"Reserved {amount} favor for {player_id}")
            return account

    def release(self, player_id: str, amount: int, credit: int = 0) -> FavorAccount:
        """Drop a reservation and credit ``credit`` favor to the balance.

        Won bets pass the payout, expired bets pass the stake, lost bets pass 0.
        """
        self._check_amount(amount)
        if credit < 0:
            raise ValidationError("credit", f"Credit cannot be negative, got {credit}")
        with self.locked(player_id):
            account = self.get_account(player_id)
            if amount > account.reserved:
                raise MytherraError(
                    f"Cannot release {amount} favor for {player_id}: only {account.reserved} reserved"
                )
            account.reserved -= amount
            account.balance += credit
            self.repository.save(account)
            logger.debug(f"Released {amount} reserved favor for {player_id}, credited {credit}")
            return account

    def credit(self, player_id: str, amount: int) -> FavorAccount:
        self._check_amount(amount)
        with self.locked(player_id):
            account = self.get_account(player_id)
            account.balance += amount
            self.repository.save(account)
            return account

    def charge(self, player_id: str, amount: int) -> FavorAccount:
        """Spend favor outright (divine influence)."""
        self._check_amount(amount)
        with self.locked(player_id):
            account = self.get_account(player_id)
            if amount > account.balance:
                raise InsufficientFavorError(
                    f"Insufficient divine favor: need {amount}, have {account.balance}",
                    required=amount,
                    available=account.balance,
                )
            account.balance -= amount
            self.repository.save(account)
            logger.debug(f"Charged {amount} favor to {player_id}")
            return account
