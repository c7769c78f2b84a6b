"""Unit Tests: World Evolution Processors

Test cases:
- Same seed and year produce identical worlds
- Processors return new values and never mutate their input
- Statistics stay in range and settlement status only moves forward
- Settlement decline, abandonment, ruin and type growth
- Region status derivation
- Hero death, travel, bonding, discovery and leveling
"""

import random

from conftest import build_world

from mytherra.config import EvolutionConfig
from mytherra.seed import build_seed_world
from mytherra.world.models import (
    SETTLEMENT_STATUS_ORDER,
    Building,
    Clock,
    Region,
    Settlement,
)
from mytherra.world.processors import (
    DEFAULT_PROCESSORS,
    derive_region_status,
    process_heroes,
    process_regions,
    process_settlements,
    processor_rng,
)
from mytherra.world.processors.hero import roll_level_ups
from mytherra.world.state import WorldState

QUIET_HEROES = EvolutionConfig(
    chance_to_move=0.0,
    base_level_up_chance=0.0,
    bond_chance=0.0,
    discovery_chance=0.0,
    base_danger=0.0,
    natural_death_chance=0.0,
)


def _run_years(world: WorldState, years: int, seed: int = 7) -> WorldState:
    for year in range(1, years + 1):
        clock = Clock(current_year=year)
        for name, processor in DEFAULT_PROCESSORS:
            world = processor(world, clock, processor_rng(seed, year, name), EvolutionConfig()).world
    return world


def test_same_seed_same_world():
    first = _run_years(build_seed_world(), 10)
    second = _run_years(build_seed_world(), 10)
    assert first == second


def test_different_seed_diverges():
    assert _run_years(build_seed_world(), 10, seed=1) != _run_years(build_seed_world(), 10, seed=2)


def test_processors_do_not_mutate_input():
    world = build_seed_world()
    before = world.model_copy(deep=True)
    clock = Clock(current_year=3)

    for name, processor in DEFAULT_PROCESSORS:
        result = processor(world, clock, processor_rng(1, 3, name), EvolutionConfig())
        assert result.world is not world

    assert world == before


def test_stats_stay_bounded_and_status_is_monotonic():
    world = build_seed_world()
    seen = {sid: [s.status] for sid, s in world.settlements.items()}

    for year in range(1, 60):
        clock = Clock(current_year=year)
        for name, processor in DEFAULT_PROCESSORS:
            world = processor(world, clock, processor_rng(99, year, name), EvolutionConfig()).world
        for sid, settlement in world.settlements.items():
            seen[sid].append(settlement.status)
            assert 0 <= settlement.prosperity <= 100
            assert settlement.population >= 0
        for region in world.regions.values():
            assert 0 <= region.prosperity <= 100
            assert 0 <= region.chaos <= 100

    for history in seen.values():
        ranks = [SETTLEMENT_STATUS_ORDER.index(s) for s in history]
        assert ranks == sorted(ranks)


def test_no_spontaneous_ascension_or_undeath():
    world = _run_years(build_seed_world(), 80)
    assert all(h.status in ("living", "deceased") for h in world.heroes.values())


# ============================================================================
# Settlements
# ============================================================================


def _settlement_world(settlement: Settlement, region: Region | None = None) -> WorldState:
    return WorldState.from_entities(
        [region or Region(id="region-x", prosperity=50, chaos=0), settlement]
    )


def test_settlement_declines_under_chaos():
    world = _settlement_world(
        Settlement(id="s", region_id="region-x", prosperity=5, population=200, status="stable"),
        Region(id="region-x", prosperity=0, chaos=100),
    )
    result = process_settlements(world, Clock(current_year=4), random.Random(1))

    settlement = result.world.settlements["s"]
    assert settlement.status == "declining"
    assert any(e.type == "settlement_declining" for e in result.events)


def test_declining_settlement_is_abandoned():
    world = _settlement_world(
        Settlement(id="s", region_id="region-x", prosperity=5, population=9, status="declining"),
        Region(id="region-x", prosperity=0, chaos=100),
    )
    result = process_settlements(world, Clock(current_year=4), random.Random(1))

    settlement = result.world.settlements["s"]
    assert settlement.status == "abandoned"
    assert settlement.population == 0
    assert settlement.abandoned_since == 4
    assert [e.type for e in result.events] == ["settlement_abandoned"]


def test_abandoned_settlement_falls_into_ruin():
    world = _settlement_world(
        Settlement(
            id="s", region_id="region-x", population=0, status="abandoned", abandoned_since=2
        )
    )

    early = process_settlements(world, Clock(current_year=6), random.Random(1))
    assert early.world.settlements["s"].status == "abandoned"
    assert early.events == []

    late = process_settlements(world, Clock(current_year=7), random.Random(1))
    assert late.world.settlements["s"].status == "ruined"
    assert late.events[0].type == "settlement_ruined"


def test_ruined_settlement_is_left_alone():
    world = _settlement_world(
        Settlement(id="s", region_id="region-x", population=0, status="ruined")
    )
    result = process_settlements(world, Clock(current_year=9), random.Random(1))
    assert result.world.settlements["s"] == world.settlements["s"]


def test_hamlet_grows_into_village():
    world = _settlement_world(
        Settlement(
            id="s",
            region_id="region-x",
            type="hamlet",
            prosperity=80,
            population=150,
            buildings=[Building(id="b1", type="market"), Building(id="b2", type="housing")],
        ),
        Region(id="region-x", prosperity=80, chaos=0),
    )
    result = process_settlements(world, Clock(current_year=2), random.Random(1))

    assert result.world.settlements["s"].type == "village"
    assert any(e.type == "settlement_transformation" for e in result.events)


def test_hamlet_without_buildings_stays_hamlet():
    world = _settlement_world(
        Settlement(id="s", region_id="region-x", type="hamlet", prosperity=80, population=150),
        Region(id="region-x", prosperity=80, chaos=0),
    )
    result = process_settlements(world, Clock(current_year=2), random.Random(1))
    assert result.world.settlements["s"].type == "hamlet"


# ============================================================================
# Regions
# ============================================================================


def test_region_status_derivation():
    assert derive_region_status(Region(id="r", chaos=85), []) == "warring"
    assert derive_region_status(Region(id="r", chaos=65, prosperity=30), []) == "corrupt"
    assert derive_region_status(Region(id="r", chaos=65, prosperity=60), []) == "peaceful"
    ruins = [Settlement(id="s", region_id="r", status="ruined")]
    assert derive_region_status(Region(id="r", chaos=0), ruins) == "abandoned"


def test_chaotic_region_goes_to_war():
    world = WorldState.from_entities([Region(id="r", chaos=100, prosperity=50)])
    result = process_regions(world, Clock(current_year=1), random.Random(3))

    region = result.world.regions["r"]
    assert region.status == "warring"
    assert region.chaos < 100 or any(e.type == "region_turmoil" for e in result.events)
    assert any(e.type == "region_status" for e in result.events)


def test_divine_resonance_drifts_to_baseline():
    world = WorldState.from_entities([Region(id="r", divine_resonance=70, chaos=0)])
    result = process_regions(world, Clock(current_year=1), random.Random(3))
    assert result.world.regions["r"].divine_resonance == 69


# ============================================================================
# Heroes
# ============================================================================


def test_hero_death():
    params = QUIET_HEROES.model_copy(update={"base_danger": 100.0})
    result = process_heroes(build_world(), Clock(current_year=5), random.Random(1), params)

    hero = result.world.heroes["hero-001"]
    assert not hero.is_alive
    assert hero.status == "deceased"
    assert hero.death_reason
    death = next(e for e in result.events if e.type == "hero_death")
    assert death.description.startswith("Year 5: Eldara has died. Cause:")


def test_dead_heroes_are_skipped():
    world = build_world()
    hero = world.heroes["hero-001"]
    world = world.with_updates(hero.model_copy(update={"is_alive": False, "status": "deceased"}))

    result = process_heroes(world, Clock(current_year=5), random.Random(1))

    assert result.world.heroes["hero-001"].age == 45
    assert result.events == []


def test_hero_travels_and_records_visit():
    params = QUIET_HEROES.model_copy(update={"chance_to_move": 1.0})
    result = process_heroes(build_world(), Clock(current_year=2), random.Random(1), params)

    hero = result.world.heroes["hero-001"]
    assert hero.region_id == "region-002"
    assert hero.visited_region_ids == ["region-001", "region-002"]
    assert hero.age == 46
    assert [e.type for e in result.events] == ["hero_travel"]


def test_hero_bonds_with_local_settlement():
    params = QUIET_HEROES.model_copy(update={"bond_chance": 1.0})
    result = process_heroes(build_world(), Clock(current_year=2), random.Random(1), params)

    assert result.world.heroes["hero-001"].bonded_settlement_ids == ["settlement-001"]
    assert [e.type for e in result.events] == ["hero_settlement_bond"]


def test_hero_discovers_landmark():
    params = QUIET_HEROES.model_copy(update={"discovery_chance": 1.0})
    world = build_world()
    result = process_heroes(world, Clock(current_year=3), random.Random(1), params)

    assert result.world.landmarks["landmark-002"].discovered_year == 3
    assert world.landmarks["landmark-002"].discovered_year is None
    assert [e.type for e in result.events] == ["landmark_discovery"]


def test_hero_levels_up():
    params = QUIET_HEROES.model_copy(
        update={
            "base_level_up_chance": 1.0,
            "level_up_difficulty": 1.0,
            "max_level_up_chance": 1.0,
        }
    )
    result = process_heroes(build_world(), Clock(current_year=2), random.Random(1), params)

    assert result.world.heroes["hero-001"].level == 6
    assert [e.type for e in result.events] == ["hero_level_up"]


def test_level_up_chance_shrinks_with_level():
    params = EvolutionConfig()
    low = sum(roll_level_ups(1, random.Random(i), params) for i in range(500))
    high = sum(roll_level_ups(15, random.Random(i), params) for i in range(500))
    assert low > high
