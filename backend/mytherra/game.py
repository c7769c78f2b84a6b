"""Game facade: the single entry point used by the CLI, scheduler and API."""

from __future__ import annotations

import logging
import threading
from typing import Any

from pydantic import BaseModel

from mytherra.betting.ledger import FavorLedger
from mytherra.betting.market import BettingMarket
from mytherra.betting.models import Bet, BetFilters, FavorAccount, OddsQuote, ResolutionSummary
from mytherra.betting.odds import OddsEngine
from mytherra.betting.registry import ConfigRegistry
from mytherra.betting.resolution import ResolutionEngine
from mytherra.config import Settings, get_settings
from mytherra.engine import TickResult, TickScheduler
from mytherra.seed import build_seed_world
from mytherra.storage.repositories import (
    InMemoryBetRepository,
    InMemoryFavorLedgerRepository,
    InMemoryWorldStateRepository,
)
from mytherra.storage.state import GameSnapshot, SnapshotStore
from mytherra.world.influence import plan_influence
from mytherra.world.journal import EventJournal
from mytherra.world.models import Clock, WorldEvent
from mytherra.world.state import WorldState

logger = logging.getLogger(__name__)


class InfluenceResult(BaseModel):
    action: str
    strength: str
    target_id: str
    target_type: str
    cost: int
    balance: int
    event: WorldEvent


class Game:
    """Wires the world, the betting market and the tick scheduler together."""

    def __init__(
        self,
        settings: Settings | None = None,
        world: WorldState | None = None,
        registry: ConfigRegistry | None = None,
        store: SnapshotStore | None = None,
        snapshot: GameSnapshot | None = None,
    ):
        self.settings = settings or get_settings()
        self.store = store
        simulation = self.settings.simulation

        if snapshot is not None:
            clock = snapshot.clock
            world = snapshot.world
            bets, accounts, events = snapshot.bets, snapshot.accounts, snapshot.events
        else:
            clock = Clock(current_year=simulation.starting_year)
            world = world if world is not None else build_seed_world()
            bets, accounts, events = [], [], []

        self.clock = clock
        self.journal = EventJournal(events)
        self.world_lock = threading.RLock()
        self._save_lock = threading.Lock()
        self.worlds = InMemoryWorldStateRepository(world)
        self.bets = InMemoryBetRepository(bets)

        self.ledger = FavorLedger(
            InMemoryFavorLedgerRepository(accounts),
            lock_timeout=self.settings.betting.lock_timeout_seconds,
        )
        self.ledger.open_account(simulation.player_id, simulation.initial_favor)

        self.registry = registry or ConfigRegistry.load(self.settings.betting_config_path)
        self.odds_engine = OddsEngine(self.registry, self.settings.betting)
        self.market = BettingMarket(
            self.odds_engine,
            self.ledger,
            self.bets,
            self.worlds,
            self.clock,
            self.settings.betting,
        )
        self.resolution = ResolutionEngine(self.bets, self.ledger)
        self.scheduler = TickScheduler(
            self.worlds,
            self.clock,
            self.journal,
            self.resolution,
            self.ledger,
            simulation=simulation,
            evolution=self.settings.evolution,
            economy=self.settings.economy,
            world_lock=self.world_lock,
            on_commit=self.save if store is not None else None,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> Game:
        """Load the saved game from data/state.yaml, or start a seeded one."""
        settings = settings or get_settings()
        store = SnapshotStore(settings.state_path)
        snapshot = store.load()
        game = cls(settings=settings, store=store, snapshot=snapshot)
        if snapshot is None:
            game.save()
        return game

    @property
    def player_id(self) -> str:
        return self.settings.simulation.player_id

    @property
    def world(self) -> WorldState:
        return self.worlds.get()

    # ========================================================================
    # Persistence
    # ========================================================================

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            clock=self.clock.model_copy(),
            world=self.worlds.get(),
            bets=self.bets.all(),
            accounts=self.ledger.accounts(),
            events=self.journal.all(),
        )

    def save(self) -> None:
        """Write the current state. Snapshots are taken and written in order."""
        if self.store is None:
            return
        with self._save_lock:
            self.store.save(self.snapshot())

    # ========================================================================
    # Betting
    # ========================================================================

    def place_bet(
        self,
        bet_type: str,
        target_id: str,
        description: str,
        timeframe: int,
        confidence: str,
        divine_favor_stake: int,
        target_type: str | None = None,
        player_id: str | None = None,
    ) -> Bet:
        bet = self.market.place_bet(
            player_id or self.player_id,
            bet_type,
            target_id,
            description,
            timeframe,
            confidence,
            divine_favor_stake,
            target_type=target_type,
        )
        self.save()
        return bet

    def get_bet(self, bet_id: str) -> Bet:
        return self.market.get_bet(bet_id)

    def list_bets(self, filters: BetFilters | None = None) -> list[Bet]:
        return self.market.list_bets(filters)

    def get_odds(
        self,
        bet_type: str,
        target_id: str,
        target_type: str | None = None,
        confidence: str = "possible",
        timeframe: int = 5,
        stake: int | None = None,
    ) -> OddsQuote:
        return self.market.get_odds(
            bet_type, target_id, confidence, timeframe, target_type=target_type, stake=stake
        )

    def process_expired_bets(self) -> ResolutionSummary:
        """Run a resolution pass at the current year without advancing time."""
        summary = self.resolution.resolve(self.worlds.get(), self.clock.current_year)
        self.save()
        return summary

    def get_account(self, player_id: str | None = None) -> FavorAccount:
        return self.ledger.get_account(player_id or self.player_id)

    # ========================================================================
    # World
    # ========================================================================

    def run_tick(self) -> TickResult:
        return self.scheduler.run_tick()

    def recent_events(self, limit: int = 20) -> list[WorldEvent]:
        return self.journal.recent(limit)

    def apply_influence(
        self,
        target_id: str,
        action: str,
        strength: str = "moderate",
        target_type: str | None = None,
        player_id: str | None = None,
    ) -> InfluenceResult:
        """Spend favor to act on the world directly."""
        player_id = player_id or self.player_id
        with self.world_lock:
            plan = plan_influence(
                self.worlds.get(),
                self.clock.current_year,
                target_id,
                action,
                strength,
                target_type,
            )
            account = self.ledger.charge(player_id, plan.cost)
            self.worlds.save(plan.world)
            self.journal.append([plan.event])

        logger.info(
            f"Divine {action} ({strength}) on {plan.target_type} {target_id} "
            f"for {plan.cost} favor"
        )
        self.save()
        return InfluenceResult(
            action=plan.action,
            strength=plan.strength,
            target_id=plan.target_id,
            target_type=plan.target_type,
            cost=plan.cost,
            balance=account.balance,
            event=plan.event,
        )

    def world_summary(self) -> dict[str, Any]:
        world = self.worlds.get()
        account = self.get_account()
        return {
            "current_year": self.clock.current_year,
            "counts": world.counts(),
            "living_heroes": len(world.living_heroes()),
            "active_bets": len(self.bets.active()),
            "events": len(self.journal),
            "favor": account.model_dump(),
            "regions": [region.model_dump() for region in world.regions.values()],
            "settlements": [s.model_dump() for s in world.settlements.values()],
            "heroes": [hero.model_dump() for hero in world.heroes.values()],
            "landmarks": [lm.model_dump() for lm in world.landmarks.values()],
        }
