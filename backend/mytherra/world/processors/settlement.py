"""Settlement evolution: prosperity, population, status decline and type growth."""

from __future__ import annotations

import logging
import random
from typing import NamedTuple

from mytherra.config import EvolutionConfig
from mytherra.world.models import Clock, Settlement, clamp_stat
from mytherra.world.state import WorldState

from .base import ProcessorResult, make_event

logger = logging.getLogger(__name__)


class TypeEvolution(NamedTuple):
    next_type: str
    min_population: int
    min_prosperity: int
    required_buildings: frozenset[str]


SETTLEMENT_EVOLUTION: dict[str, TypeEvolution] = {
    "hamlet": TypeEvolution("village", 100, 40, frozenset({"market", "housing"})),
    "village": TypeEvolution(
        "town", 500, 50, frozenset({"market", "housing", "tavern", "craftshop"})
    ),
    "town": TypeEvolution(
        "city",
        2000,
        60,
        frozenset({"market", "housing", "tavern", "craftshop", "temple", "guild_hall"}),
    ),
}

MAX_POPULATION: dict[str, int] = {
    "hamlet": 300,
    "village": 1500,
    "town": 6000,
    "city": 50000,
}

REGION_PULL = 0.10
CHAOS_PRESSURE = 0.05


def growth_rate(prosperity: int, params: EvolutionConfig) -> float:
    """Yearly population growth rate for a given prosperity."""
    rate = params.growth_factor * (prosperity - params.decline_threshold) / 100
    return max(-params.max_growth_rate, min(params.max_growth_rate, rate))


def _evolve_type(settlement: Settlement) -> str | None:
    rule = SETTLEMENT_EVOLUTION.get(settlement.type)
    if rule is None:
        return None
    if settlement.population < rule.min_population:
        return None
    if settlement.prosperity < rule.min_prosperity:
        return None
    if not rule.required_buildings <= settlement.building_types:
        return None
    return rule.next_type


def _advance_ruin(settlement: Settlement, year: int, params: EvolutionConfig):
    abandoned_since = settlement.abandoned_since or year
    if year - abandoned_since < params.ruin_after_years:
        return settlement, None
    ruined = settlement.model_copy(update={"status": "ruined"})
    event = make_event(
        year,
        "settlement_ruined",
        f"{settlement.name or settlement.id} lies in ruins",
        f"Year {year}: the abandoned {settlement.type} of "
        f"{settlement.name or settlement.id} has crumbled into ruin.",
        regions=[settlement.region_id],
        settlements=[settlement.id],
    )
    return ruined, event


def process_settlements(
    world: WorldState,
    clock: Clock,
    rng: random.Random,
    params: EvolutionConfig | None = None,
) -> ProcessorResult:
    """Advance every settlement by one year."""
    params = params or EvolutionConfig()
    year = clock.current_year
    updated: list[Settlement] = []
    events = []

    for settlement in sorted(world.settlements.values(), key=lambda s: s.id):
        name = settlement.name or settlement.id

        if settlement.status == "ruined":
            continue
        if settlement.status == "abandoned":
            new_settlement, event = _advance_ruin(settlement, year, params)
            if event is not None:
                updated.append(new_settlement)
                events.append(event)
            continue

        region = world.regions.get(settlement.region_id)
        region_prosperity = region.prosperity if region else settlement.prosperity
        region_chaos = region.chaos if region else 0

        drift = (region_prosperity - settlement.prosperity) * REGION_PULL
        drift -= region_chaos * CHAOS_PRESSURE
        drift += rng.uniform(-3.0, 5.0)
        prosperity = clamp_stat(settlement.prosperity + drift)

        rate = growth_rate(prosperity, params)
        population = int(round(settlement.population * (1 + rate)))
        population = max(0, min(population, MAX_POPULATION[settlement.type]))

        changes: dict = {"prosperity": prosperity, "population": population}
        status = settlement.status

        if status in ("thriving", "stable") and prosperity < params.decline_threshold:
            status = "declining"
            events.append(
                make_event(
                    year,
                    "settlement_declining",
                    f"{name} is in decline",
                    f"Year {year}: hard times have come to {name}.",
                    regions=[settlement.region_id],
                    settlements=[settlement.id],
                )
            )

        if status == "declining" and population < params.abandon_population:
            status = "abandoned"
            changes["population"] = 0
            changes["abandoned_since"] = year
            events.append(
                make_event(
                    year,
                    "settlement_abandoned",
                    f"{name} has been abandoned",
                    f"Year {year}: the last inhabitants of {name} have left.",
                    regions=[settlement.region_id],
                    settlements=[settlement.id],
                )
            )

        changes["status"] = status
        new_settlement = settlement.model_copy(update=changes)

        if new_settlement.is_inhabited and status != "declining":
            next_type = _evolve_type(new_settlement)
            if next_type is not None:
                events.append(
                    make_event(
                        year,
                        "settlement_transformation",
                        f"{name} grows into a {next_type}",
                        f"Year {year}: the {settlement.type} of {name} has grown "
                        f"into a {next_type}.",
                        regions=[settlement.region_id],
                        settlements=[settlement.id],
                    )
                )
                new_settlement = new_settlement.model_copy(update={"type": next_type})

        updated.append(new_settlement)

    logger.debug(f"Processed {len(updated)} settlements for year {year}")
    return ProcessorResult(world=world.with_updates(*updated), events=events)
