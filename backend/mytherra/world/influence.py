"""Divine influence actions.

Planning an influence is pure: it prices the action and returns the world as
it would look afterwards. The game facade charges the ledger and commits the
result under its world lock.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel

from mytherra.exceptions import NotFoundError, ValidationError

from .models import SETTLEMENT_STATUS_ORDER, Hero, Region, Settlement, WorldEvent, clamp_stat
from .processors.base import make_event
from .processors.region import derive_region_status
from .state import WorldState

logger = logging.getLogger(__name__)

BASE_COSTS: dict[str, int] = {
    "bless": 20,
    "curse": 25,
    "empower": 30,
    "ascend": 150,
    "raise_undead": 100,
}

STRENGTH_MULTIPLIERS: dict[str, float] = {
    "subtle": 1.0,
    "moderate": 2.0,
    "significant": 3.0,
}

STRENGTH_MAGNITUDES: dict[str, int] = {
    "subtle": 5,
    "moderate": 10,
    "significant": 20,
}

EMPOWER_LEVELS: dict[str, int] = {
    "subtle": 1,
    "moderate": 2,
    "significant": 3,
}

REGION_COST_MULTIPLIER = 1.5

ACTION_TARGETS: dict[str, frozenset[str]] = {
    "bless": frozenset({"region", "settlement"}),
    "curse": frozenset({"region"}),
    "empower": frozenset({"hero"}),
    "ascend": frozenset({"hero"}),
    "raise_undead": frozenset({"hero"}),
}


class InfluencePlan(BaseModel):
    """Priced influence and the world it would produce."""

    action: str
    strength: str
    target_id: str
    target_type: str
    cost: int
    world: WorldState
    event: WorldEvent


def influence_cost(action: str, strength: str, target_type: str) -> int:
    """Favor cost of an influence action."""
    if action not in BASE_COSTS:
        raise ValidationError("action", f"Unknown influence action: {action}")
    if strength not in STRENGTH_MULTIPLIERS:
        raise ValidationError("strength", f"Unknown influence strength: {strength}")
    cost = BASE_COSTS[action] * STRENGTH_MULTIPLIERS[strength]
    if target_type == "region":
        cost *= REGION_COST_MULTIPLIER
    return int(round(cost))


# ============================================================================
# Effects
# ============================================================================


def _bless_region(world: WorldState, region: Region, magnitude: int) -> Region:
    blessed = region.model_copy(
        update={
            "prosperity": clamp_stat(region.prosperity + magnitude),
            "chaos": clamp_stat(region.chaos - magnitude / 2),
            "divine_resonance": clamp_stat(region.divine_resonance + magnitude / 2),
        }
    )
    status = derive_region_status(blessed, world.settlements_in(region.id))
    return blessed.model_copy(update={"status": status})


def _curse_region(world: WorldState, region: Region, magnitude: int) -> Region:
    cursed = region.model_copy(
        update={
            "chaos": clamp_stat(region.chaos + magnitude),
            "prosperity": clamp_stat(region.prosperity - magnitude / 2),
        }
    )
    status = derive_region_status(cursed, world.settlements_in(region.id))
    return cursed.model_copy(update={"status": status})


def _bless_settlement(settlement: Settlement, magnitude: int) -> Settlement:
    if not settlement.is_inhabited:
        raise ValidationError(
            "target_id", f"Settlement {settlement.id} is {settlement.status} and cannot be blessed"
        )
    index = SETTLEMENT_STATUS_ORDER.index(settlement.status)
    return settlement.model_copy(
        update={
            "prosperity": clamp_stat(settlement.prosperity + magnitude),
            "status": SETTLEMENT_STATUS_ORDER[max(0, index - 1)],
        }
    )


def _touch_hero(hero: Hero, action: str, strength: str) -> Hero:
    if action == "raise_undead":
        if hero.status != "deceased":
            raise ValidationError("target_id", f"Hero {hero.id} is not deceased")
        return hero.model_copy(update={"status": "undead"})

    if hero.status != "living" or not hero.is_alive:
        raise ValidationError("target_id", f"Hero {hero.id} is not living")
    if action == "ascend":
        return hero.model_copy(update={"status": "ascended"})
    return hero.model_copy(update={"level": hero.level + EMPOWER_LEVELS[strength]})


def plan_influence(
    world: WorldState,
    year: int,
    target_id: str,
    action: str,
    strength: str = "moderate",
    target_type: str | None = None,
) -> InfluencePlan:
    """Price an influence action and compute its effect on the world.

    Raises ValidationError for unknown actions, strengths or unsupported
    target kinds and NotFoundError for a missing target. Nothing is mutated.
    """
    if action not in ACTION_TARGETS:
        raise ValidationError("action", f"Unknown influence action: {action}")
    if strength not in STRENGTH_MULTIPLIERS:
        raise ValidationError("strength", f"Unknown influence strength: {strength}")

    if target_type:
        entity = world.get(target_type, target_id)
        if entity is None:
            raise NotFoundError(f"{target_type.capitalize()} not found: {target_id}")
        kind = target_type
    else:
        found = world.find(target_id)
        if found is None:
            raise NotFoundError(f"Target not found: {target_id}")
        kind, entity = found

    if kind not in ACTION_TARGETS[action]:
        raise ValidationError(
            "target_type", f"Action '{action}' cannot target a {kind}"
        )

    magnitude = STRENGTH_MAGNITUDES[strength]
    if action == "bless" and kind == "region":
        updated = _bless_region(world, entity, magnitude)
    elif action == "curse":
        updated = _curse_region(world, entity, magnitude)
    elif action == "bless":
        updated = _bless_settlement(entity, magnitude)
    else:
        updated = _touch_hero(entity, action, strength)

    name = entity.name or entity.id
    event = make_event(
        year,
        "divine_influence",
        f"Divine {action.replace('_', ' ')} upon {name}",
        f"Year {year}: a {strength} divine {action.replace('_', ' ')} touched {name}.",
        regions=[entity.id] if kind == "region" else [entity.region_id],
        heroes=[entity.id] if kind == "hero" else [],
        settlements=[entity.id] if kind == "settlement" else [],
    )

    cost = influence_cost(action, strength, kind)
    logger.debug(f"Planned {action} ({strength}) on {kind} {target_id} for {cost} favor")
    return InfluencePlan(
        action=action,
        strength=strength,
        target_id=target_id,
        target_type=kind,
        cost=cost,
        world=world.with_updates(updated),
        event=event,
    )
