"""Repository interfaces and their in-memory implementations.

Components receive repositories through their constructors; nothing reaches
for a process-wide store.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Iterable, Protocol

from mytherra.exceptions import NotFoundError
from mytherra.world.state import WorldState

if TYPE_CHECKING:
    from mytherra.betting.models import Bet, FavorAccount

logger = logging.getLogger(__name__)


# ============================================================================
# Interfaces
# ============================================================================


class WorldStateRepository(Protocol):
    def get(self) -> WorldState: ...

    def save(self, world: WorldState) -> None: ...


class BetRepository(Protocol):
    def add(self, bet: Bet) -> Bet: ...

    def get(self, bet_id: str) -> Bet: ...

    def update(self, bet: Bet) -> Bet: ...

    def all(self) -> list[Bet]: ...

    def active(self) -> list[Bet]: ...


class FavorLedgerRepository(Protocol):
    def get(self, player_id: str) -> FavorAccount | None: ...

    def save(self, account: FavorAccount) -> None: ...

    def all(self) -> list[FavorAccount]: ...


# ============================================================================
# In-memory implementations
# ============================================================================


class InMemoryWorldStateRepository:
    """Holds the latest committed WorldState value."""

    def __init__(self, world: WorldState | None = None):
        self._world = world or WorldState()
        self._lock = threading.Lock()

    def get(self) -> WorldState:
        with self._lock:
            return self._world

    def save(self, world: WorldState) -> None:
        with self._lock:
            self._world = world


class InMemoryBetRepository:
    """Bets kept in placement order."""

    def __init__(self, bets: Iterable[Bet] = ()):
        self._bets: dict[str, Bet] = {bet.id: bet for bet in bets}
        self._lock = threading.Lock()

    def add(self, bet: Bet) -> Bet:
        with self._lock:
            if bet.id in self._bets:
                raise ValueError(f"Duplicate bet id: {bet.id}")
            self._bets[bet.id] = bet.model_copy(deep=True)
        return bet

    def get(self, bet_id: str) -> Bet:
        with self._lock:
            bet = self._bets.get(bet_id)
        if bet is None:
            raise NotFoundError(f"Bet not found: {bet_id}")
        return bet.model_copy(deep=True)

    def update(self, bet: Bet) -> Bet:
        with self._lock:
            if bet.id not in self._bets:
                raise NotFoundError(f"Bet not found: {bet.id}")
            self._bets[bet.id] = bet.model_copy(deep=True)
        return bet

    def all(self) -> list[Bet]:
        with self._lock:
            return [bet.model_copy(deep=True) for bet in self._bets.values()]

    def active(self) -> list[Bet]:
        return [bet for bet in self.all() if bet.is_active]


class InMemoryFavorLedgerRepository:
    """Favor accounts keyed by player id."""

    def __init__(self, accounts: Iterable[FavorAccount] = ()):
        self._accounts = {account.player_id: account for account in accounts}
        self._lock = threading.Lock()

    def get(self, player_id: str) -> FavorAccount | None:
        with self._lock:
            account = self._accounts.get(player_id)
        return account.model_copy() if account is not None else None

    def save(self, account: FavorAccount) -> None:
        with self._lock:
            self._accounts[account.player_id] = account.model_copy()

    def all(self) -> list[FavorAccount]:
        with self._lock:
            return [account.model_copy() for account in self._accounts.values()]
