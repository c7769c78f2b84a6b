"""Shared fixtures: small deterministic worlds and games."""

import pytest

from mytherra.betting.registry import ConfigRegistry
from mytherra.config import EconomyConfig, Settings
from mytherra.game import Game
from mytherra.world.models import Alignment, Clock, Hero, Landmark, Region, Settlement
from mytherra.world.state import WorldState


def build_world() -> WorldState:
    """Two regions, one village, one hamlet, one hero and two landmarks."""
    return WorldState.from_entities(
        [
            Region(id="region-001", name="Arcane Highlands", prosperity=60, chaos=10, magic_affinity=50),
            Region(id="region-002", name="Merchant's Haven", prosperity=70, chaos=20, magic_affinity=40),
            Settlement(
                id="settlement-001",
                name="Fellwood",
                region_id="region-001",
                type="village",
                status="stable",
                population=500,
                prosperity=60,
            ),
            Settlement(
                id="settlement-002",
                name="Goldport",
                region_id="region-002",
                type="hamlet",
                status="stable",
                population=120,
                prosperity=55,
            ),
            Hero(
                id="hero-001",
                name="Eldara",
                region_id="region-001",
                level=3,
                age=45,
                alignment=Alignment(good=70, chaotic=30),
                visited_region_ids=["region-001"],
            ),
            Landmark(id="landmark-001", name="Crystal Sanctuary", region_id="region-001", discovered_year=1),
            Landmark(id="landmark-002", name="Whispering Grove", region_id="region-001"),
        ]
    )


def make_settings(tmp_path, favor_per_tick: int = 0) -> Settings:
    return Settings(data_dir=tmp_path, economy=EconomyConfig(favor_per_tick=favor_per_tick))


def make_game(tmp_path, processors=None, favor_per_tick: int = 0, world: WorldState | None = None) -> Game:
    """Game over the small world. Pass processors=[] to freeze evolution."""
    game = Game(
        settings=make_settings(tmp_path, favor_per_tick),
        world=world if world is not None else build_world(),
        registry=ConfigRegistry.default(),
    )
    if processors is not None:
        game.scheduler.processors = list(processors)
    return game


@pytest.fixture
def world() -> WorldState:
    return build_world()


@pytest.fixture
def clock() -> Clock:
    return Clock(current_year=1)


@pytest.fixture
def registry() -> ConfigRegistry:
    return ConfigRegistry.default()


@pytest.fixture
def game(tmp_path) -> Game:
    """Game with evolution frozen and no passive income."""
    return make_game(tmp_path, processors=[])
