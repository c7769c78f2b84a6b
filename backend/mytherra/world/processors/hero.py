"""Hero lifecycle: aging, leveling, travel, bonding, discovery and death."""

from __future__ import annotations

import logging
import random

from mytherra.config import EvolutionConfig
from mytherra.world.models import Clock, Hero, WorldEvent
from mytherra.world.state import WorldState

from .base import ProcessorResult, make_event

logger = logging.getLogger(__name__)

DEATH_REASONS: tuple[str, ...] = (
    "Fell in glorious battle",
    "Lost to the wilderness",
    "Claimed by dark magic",
    "Victim of treachery",
    "Lost exploring ancient ruins",
    "Succumbed to a mysterious illness",
    "Vanished without a trace",
    "Met their end in a heroic sacrifice",
)

LIFE_EXPECTANCY_PER_LEVEL = 2


def roll_level_ups(level: int, rng: random.Random, params: EvolutionConfig) -> int:
    """Number of levels gained this year."""
    gained = 0
    for _ in range(params.max_levels_per_year):
        chance = params.base_level_up_chance * params.level_up_difficulty ** (level + gained - 1)
        chance = min(params.max_level_up_chance, chance)
        if rng.random() >= chance:
            break
        gained += 1
    return gained


def _death_chance(hero: Hero, age: int, chaos: int, params: EvolutionConfig) -> float:
    chance = params.base_danger * max(0.2, 1 - hero.level / 10) * (1 + chaos / 100)
    if age > params.base_life_expectancy + hero.level * LIFE_EXPECTANCY_PER_LEVEL:
        chance += params.natural_death_chance
    return chance


def process_heroes(
    world: WorldState,
    clock: Clock,
    rng: random.Random,
    params: EvolutionConfig | None = None,
) -> ProcessorResult:
    """Advance every living hero by one year."""
    params = params or EvolutionConfig()
    year = clock.current_year
    working = world
    events: list[WorldEvent] = []

    for hero in sorted(world.living_heroes(), key=lambda h: h.id):
        name = hero.name or hero.id
        age = hero.age + 1

        gained = roll_level_ups(hero.level, rng, params)
        level = hero.level + gained
        if gained:
            events.append(
                make_event(
                    year,
                    "hero_level_up",
                    f"{name} reached level {level}",
                    f"Year {year}: {name} grew in power, reaching level {level}.",
                    regions=[hero.region_id],
                    heroes=[hero.id],
                )
            )

        region_id = hero.region_id
        visited = list(hero.visited_region_ids)
        if rng.random() < params.chance_to_move:
            destinations = sorted(
                r.id
                for r in working.regions.values()
                if r.id != hero.region_id and r.status != "abandoned"
            )
            if destinations:
                region_id = rng.choice(destinations)
                if region_id not in visited:
                    visited.append(region_id)
                region = working.regions[region_id]
                events.append(
                    make_event(
                        year,
                        "hero_travel",
                        f"{name} travels to {region.name or region_id}",
                        f"Year {year}: {name} journeyed to {region.name or region_id}.",
                        regions=[hero.region_id, region_id],
                        heroes=[hero.id],
                    )
                )

        bonded = list(hero.bonded_settlement_ids)
        candidates = sorted(
            s.id
            for s in working.settlements_in(region_id)
            if s.is_inhabited and s.id not in bonded
        )
        if candidates and rng.random() < params.bond_chance:
            settlement_id = rng.choice(candidates)
            bonded.append(settlement_id)
            settlement = working.settlements[settlement_id]
            events.append(
                make_event(
                    year,
                    "hero_settlement_bond",
                    f"{name} bonds with {settlement.name or settlement_id}",
                    f"Year {year}: {name} swore to protect "
                    f"{settlement.name or settlement_id}.",
                    regions=[region_id],
                    heroes=[hero.id],
                    settlements=[settlement_id],
                )
            )

        hidden = sorted(lm.id for lm in working.landmarks_in(region_id) if not lm.discovered)
        if hidden and rng.random() < params.discovery_chance * (1 + level / 10):
            landmark = working.landmarks[rng.choice(hidden)]
            working = working.with_updates(landmark.model_copy(update={"discovered_year": year}))
            events.append(
                make_event(
                    year,
                    "landmark_discovery",
                    f"{name} discovers {landmark.name or landmark.id}",
                    f"Year {year}: {name} uncovered the {landmark.type} "
                    f"{landmark.name or landmark.id}.",
                    regions=[region_id],
                    heroes=[hero.id],
                )
            )

        changes: dict = {
            "age": age,
            "level": level,
            "region_id": region_id,
            "visited_region_ids": visited,
            "bonded_settlement_ids": bonded,
        }

        region = working.regions.get(region_id)
        chaos = region.chaos if region else 0
        if rng.random() < _death_chance(hero, age, chaos, params):
            reason = rng.choice(DEATH_REASONS)
            changes.update({"is_alive": False, "status": "deceased", "death_reason": reason})
            events.append(
                make_event(
                    year,
                    "hero_death",
                    f"{name} has died",
                    f"Year {year}: {name} has died. Cause: {reason.lower()}.",
                    regions=[region_id],
                    heroes=[hero.id],
                )
            )

        working = working.with_updates(hero.model_copy(update=changes))

    logger.debug(f"Processed {len(world.living_heroes())} heroes for year {year}")
    return ProcessorResult(world=working, events=events)
