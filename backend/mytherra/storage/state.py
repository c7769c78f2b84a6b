"""Game snapshot persistence with atomic writes to data/state.yaml."""

import logging
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from mytherra.betting.models import Bet, FavorAccount
from mytherra.world.models import Clock, WorldEvent
from mytherra.world.state import WorldState

logger = logging.getLogger(__name__)


# ============================================================================
# Pydantic Models
# ============================================================================


class GameSnapshot(BaseModel):
    """Complete game state - matches data/state.yaml schema."""

    last_updated: datetime | None = None
    clock: Clock = Field(default_factory=Clock)
    world: WorldState = Field(default_factory=WorldState)
    bets: list[Bet] = Field(default_factory=list)
    accounts: list[FavorAccount] = Field(default_factory=list)
    events: list[WorldEvent] = Field(default_factory=list)


# ============================================================================
# Store
# ============================================================================


class SnapshotStore:
    """Loads and saves GameSnapshots at a fixed path."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> GameSnapshot | None:
        """Load the snapshot, or None when no state has been saved yet."""
        if not self.path.exists():
            logger.info(f"State file not found: {self.path}. Starting from a fresh world.")
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw_data = yaml.safe_load(f)

            if not raw_data:
                logger.warning(f"Empty state file: {self.path}. Starting from a fresh world.")
                return None

            snapshot = GameSnapshot(**raw_data)
            logger.debug(f"Loaded state from {self.path}")
            return snapshot

        except yaml.YAMLError as e:
            logger.error(f"Corrupted YAML in state file: {e}")
            raise
        except Exception as e:
            logger.error(f"Failed to load state: {e}")
            raise

    def save(self, snapshot: GameSnapshot) -> None:
        """Atomically save the snapshot.

        Writes to a temp file in the same directory and moves it over the old
        file, so a crash mid-write leaves the previous state.yaml intact.
        """
        snapshot.last_updated = datetime.now(timezone.utc)
        state_dict = snapshot.model_dump(mode="json")

        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                dir=self.path.parent,
                delete=False,
                suffix=".yaml",
                encoding="utf-8",
            ) as temp_file:
                yaml.dump(
                    state_dict,
                    temp_file,
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False,
                )
                temp_path = Path(temp_file.name)

            shutil.move(str(temp_path), str(self.path))
            logger.debug(f"Saved state to {self.path}")

        except Exception as e:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            logger.error(f"Failed to save state: {e}")
            raise
