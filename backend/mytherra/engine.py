"""Tick orchestration: evolution, resolution, income, clock."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Sequence

from pydantic import BaseModel, Field

from mytherra.betting.ledger import FavorLedger
from mytherra.betting.models import ResolutionSummary
from mytherra.betting.resolution import ResolutionEngine
from mytherra.config import EconomyConfig, EvolutionConfig, SimulationConfig
from mytherra.exceptions import TickInProgressError
from mytherra.storage.repositories import WorldStateRepository
from mytherra.world.journal import EventJournal
from mytherra.world.models import Clock, WorldEvent
from mytherra.world.processors import DEFAULT_PROCESSORS, Processor, processor_rng

logger = logging.getLogger(__name__)


class TickResult(BaseModel):
    """Outcome of one tick attempt."""

    year: int
    completed: bool
    current_year: int
    events: list[WorldEvent] = Field(default_factory=list)
    resolution: ResolutionSummary | None = None
    favor_income: int = 0
    error: str | None = None
    duration_seconds: float = 0.0


class TickScheduler:
    """Runs one full tick at a time.

    Phases run in order: Region, Settlement and Hero processors, then bet
    resolution, then passive favor income. The clock advances only when
    every phase finished. A failed tick is logged and reported with
    ``completed=False`` so the next invocation retries the same year; world
    changes and events committed by earlier phases of the failed attempt
    are kept.
    """

    def __init__(
        self,
        world: WorldStateRepository,
        clock: Clock,
        journal: EventJournal,
        resolution: ResolutionEngine,
        ledger: FavorLedger,
        simulation: SimulationConfig | None = None,
        evolution: EvolutionConfig | None = None,
        economy: EconomyConfig | None = None,
        processors: Sequence[tuple[str, Processor]] = DEFAULT_PROCESSORS,
        world_lock: threading.RLock | None = None,
        on_commit: Callable[[], None] | None = None,
    ):
        self.world = world
        self.clock = clock
        self.journal = journal
        self.resolution = resolution
        self.ledger = ledger
        self.simulation = simulation or SimulationConfig()
        self.evolution = evolution or EvolutionConfig()
        self.economy = economy or EconomyConfig()
        self.processors = list(processors)
        self.world_lock = world_lock or threading.RLock()
        self.on_commit = on_commit
        self._tick_guard = threading.Lock()

    @property
    def in_progress(self) -> bool:
        return self._tick_guard.locked()

    def run_tick(self) -> TickResult:
        """Run one tick. Raises TickInProgressError if another tick is running."""
        if not self._tick_guard.acquire(blocking=False):
            raise TickInProgressError("A tick is already in progress")
        try:
            return self._run()
        finally:
            self._tick_guard.release()

    def _evolve(self, year: int) -> None:
        for name, processor in self.processors:
            rng = processor_rng(self.simulation.seed, year, name)
            with self.world_lock:
                result = processor(self.world.get(), self.clock, rng, self.evolution)
                self.world.save(result.world)
            self.journal.append(result.events)
            logger.debug(f"{name} processor produced {len(result.events)} events")

    def _run(self) -> TickResult:
        year = self.clock.current_year
        cursor = self.journal.cursor
        started = time.monotonic()
        logger.info(f"Tick starting for year {year}")

        try:
            self._evolve(year)
            summary = self.resolution.resolve(self.world.get(), year)

            income = self.economy.favor_per_tick
            if income > 0:
                self.ledger.credit(self.simulation.player_id, income)
        except Exception as e:
            logger.exception(f"Tick for year {year} failed, will retry on next run: {e}")
            return TickResult(
                year=year,
                completed=False,
                current_year=self.clock.current_year,
                events=self.journal.since(cursor),
                error=str(e),
                duration_seconds=time.monotonic() - started,
            )

        new_year = self.clock.advance()
        events = self.journal.since(cursor)

        if self.on_commit is not None:
            try:
                self.on_commit()
            except Exception as e:
                logger.error(f"Failed to persist state after year {year}: {e}")

        duration = time.monotonic() - started
        logger.info(
            f"✓ Tick complete: year {year} -> {new_year}, {len(events)} events, "
            f"{summary.processed_count} bets resolved ({duration:.2f}s)"
        )
        return TickResult(
            year=year,
            completed=True,
            current_year=new_year,
            events=events,
            resolution=summary,
            favor_income=max(income, 0),
            duration_seconds=duration,
        )
