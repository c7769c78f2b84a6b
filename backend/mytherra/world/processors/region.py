"""Region evolution: prosperity drift, chaos decay, turmoil and status."""

from __future__ import annotations

import logging
import random
from statistics import mean

from mytherra.config import EvolutionConfig
from mytherra.world.models import Clock, Region, RegionStatus, Settlement, clamp_stat
from mytherra.world.state import WorldState

from .base import ProcessorResult, make_event

logger = logging.getLogger(__name__)

WARRING_CHAOS = 80
CORRUPT_CHAOS = 60
CORRUPT_MAX_PROSPERITY = 40
RESONANCE_BASELINE = 50


def derive_region_status(region: Region, settlements: list[Settlement]) -> RegionStatus:
    """Status implied by a region's stats and the state of its settlements."""
    if settlements and not any(s.is_inhabited for s in settlements):
        return "abandoned"
    if region.chaos >= WARRING_CHAOS:
        return "warring"
    if region.chaos >= CORRUPT_CHAOS and region.prosperity < CORRUPT_MAX_PROSPERITY:
        return "corrupt"
    return "peaceful"


def _drift_resonance(value: int) -> int:
    if value > RESONANCE_BASELINE:
        return value - 1
    if value < RESONANCE_BASELINE:
        return value + 1
    return value


def process_regions(
    world: WorldState,
    clock: Clock,
    rng: random.Random,
    params: EvolutionConfig | None = None,
) -> ProcessorResult:
    """Advance every region by one year."""
    params = params or EvolutionConfig()
    year = clock.current_year
    updated: list[Region] = []
    events = []

    for region in sorted(world.regions.values(), key=lambda r: r.id):
        settlements = world.settlements_in(region.id)
        inhabited = [s for s in settlements if s.is_inhabited]

        prosperity = float(region.prosperity)
        if inhabited:
            target = mean(s.prosperity for s in inhabited)
            prosperity += (target - prosperity) * params.region_prosperity_drift
        prosperity += rng.uniform(-2.0, 2.0)

        chaos = float(region.chaos)
        if chaos > 0:
            chaos -= max(1.0, chaos * params.chaos_decay)

        if rng.random() < region.chaos * params.turmoil_chance_per_chaos:
            chaos += params.turmoil_chaos_gain
            events.append(
                make_event(
                    year,
                    "region_turmoil",
                    f"Turmoil in {region.name or region.id}",
                    f"Year {year}: unrest spread across {region.name or region.id}.",
                    regions=[region.id],
                )
            )

        new_region = region.model_copy(
            update={
                "prosperity": clamp_stat(prosperity),
                "chaos": clamp_stat(chaos),
                "divine_resonance": _drift_resonance(region.divine_resonance),
            }
        )

        status = derive_region_status(new_region, settlements)
        if status != region.status:
            new_region = new_region.model_copy(update={"status": status})
            events.append(
                make_event(
                    year,
                    "region_status",
                    f"{region.name or region.id} is now {status}",
                    f"Year {year}: {region.name or region.id} changed from "
                    f"{region.status} to {status}.",
                    regions=[region.id],
                )
            )

        updated.append(new_region)

    logger.debug(f"Processed {len(updated)} regions for year {year}")
    return ProcessorResult(world=world.with_updates(*updated), events=events)
