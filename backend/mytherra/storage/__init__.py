"""Storage layer for Mytherra - repositories and the YAML snapshot store.

This package provides:
- Repository interfaces for the world, bets and favor accounts
- In-memory implementations used by the game at runtime
- Snapshot persistence (load/save data/state.yaml with atomic writes)
"""

# Repositories
from .repositories import (
    BetRepository,
    FavorLedgerRepository,
    InMemoryBetRepository,
    InMemoryFavorLedgerRepository,
    InMemoryWorldStateRepository,
    WorldStateRepository,
)

# Snapshot persistence
from .state import GameSnapshot, SnapshotStore

__all__ = [
    # Repositories
    "BetRepository",
    "FavorLedgerRepository",
    "InMemoryBetRepository",
    "InMemoryFavorLedgerRepository",
    "InMemoryWorldStateRepository",
    "WorldStateRepository",
    # Snapshot persistence
    "GameSnapshot",
    "SnapshotStore",
]
