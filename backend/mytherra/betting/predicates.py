"""Outcome predicates: decide whether an active bet has been won or lost.

A predicate compares the target's current state with the baseline captured
when the bet was placed. It returns a Verdict whose outcome is "won", "lost"
(the condition can no longer come true) or None (still undecided).
"""

from __future__ import annotations

from typing import Any, Callable, Literal, NamedTuple

from mytherra.exceptions import ValidationError
from mytherra.world.state import Entity, WorldState

from .models import Bet

GROWTH_TARGET = 1.2
MAGIC_SHIFT = 15
CHAOS_RISE = 20


class Verdict(NamedTuple):
    outcome: Literal["won", "lost"] | None
    notes: str = ""


UNDECIDED = Verdict(None)

Predicate = Callable[[Bet, WorldState], Verdict]


def _gone(bet: Bet) -> Verdict:
    return Verdict("lost", f"Target {bet.target_type} {bet.target_id} no longer exists")


# ============================================================================
# Settlements
# ============================================================================


def settlement_growth(bet: Bet, world: WorldState) -> Verdict:
    settlement = world.settlements.get(bet.target_id)
    if settlement is None:
        return _gone(bet)
    baseline = bet.baseline.get("population", 0)
    if settlement.population >= baseline * GROWTH_TARGET and settlement.population > baseline:
        return Verdict(
            "won", f"Population grew from {baseline} to {settlement.population}"
        )
    if not settlement.is_inhabited:
        return Verdict("lost", f"Settlement became {settlement.status}")
    return UNDECIDED


def settlement_transformation(bet: Bet, world: WorldState) -> Verdict:
    settlement = world.settlements.get(bet.target_id)
    if settlement is None:
        return _gone(bet)
    baseline = bet.baseline.get("type")
    if settlement.type != baseline:
        return Verdict("won", f"Settlement transformed from {baseline} to {settlement.type}")
    if settlement.status == "ruined":
        return Verdict("lost", "Settlement fell into ruin")
    return UNDECIDED


# ============================================================================
# Landmarks
# ============================================================================


def landmark_discovery(bet: Bet, world: WorldState) -> Verdict:
    if bet.target_type == "landmark":
        landmark = world.landmarks.get(bet.target_id)
        if landmark is None:
            return _gone(bet)
        if landmark.discovered:
            return Verdict("won", f"Landmark discovered in year {landmark.discovered_year}")
        return UNDECIDED

    if bet.target_id not in world.regions:
        return _gone(bet)
    candidates = [
        world.landmarks[lid]
        for lid in bet.baseline.get("undiscovered_landmark_ids", [])
        if lid in world.landmarks
    ]
    for landmark in candidates:
        if landmark.discovered:
            return Verdict(
                "won", f"Landmark {landmark.id} discovered in year {landmark.discovered_year}"
            )
    if not candidates:
        return Verdict("lost", "No undiscovered landmarks remain in the region")
    return UNDECIDED


# ============================================================================
# Regions
# ============================================================================


def cultural_shift(bet: Bet, world: WorldState) -> Verdict:
    region = world.regions.get(bet.target_id)
    if region is None:
        return _gone(bet)
    baseline_status = bet.baseline.get("status")
    if region.status != baseline_status:
        return Verdict("won", f"Region status shifted from {baseline_status} to {region.status}")
    baseline_magic = bet.baseline.get("magic_affinity", region.magic_affinity)
    if abs(region.magic_affinity - baseline_magic) >= MAGIC_SHIFT:
        return Verdict(
            "won", f"Magic affinity moved from {baseline_magic} to {region.magic_affinity}"
        )
    return UNDECIDED


def corruption_spread(bet: Bet, world: WorldState) -> Verdict:
    region = world.regions.get(bet.target_id)
    if region is None:
        return _gone(bet)
    if region.status == "corrupt" and bet.baseline.get("status") != "corrupt":
        return Verdict("won", "Region fell to corruption")
    baseline_chaos = bet.baseline.get("chaos", region.chaos)
    if region.chaos >= baseline_chaos + CHAOS_RISE:
        return Verdict("won", f"Chaos rose from {baseline_chaos} to {region.chaos}")
    if region.status == "abandoned":
        return Verdict("lost", "Region was abandoned")
    return UNDECIDED


# ============================================================================
# Heroes
# ============================================================================


def _hero_gained(bet: Bet, world: WorldState, field: str, label: str) -> Verdict:
    hero = world.heroes.get(bet.target_id)
    if hero is None:
        return _gone(bet)
    known = set(bet.baseline.get(field, []))
    if field == "visited_region_ids":
        known.add(bet.baseline.get("region_id"))
    gained = [eid for eid in getattr(hero, field) if eid not in known]
    if gained:
        return Verdict("won", f"Hero {label} {', '.join(gained)}")
    if not hero.is_alive or hero.status != "living":
        return Verdict("lost", f"Hero is {hero.status}")
    return UNDECIDED


def hero_settlement_bond(bet: Bet, world: WorldState) -> Verdict:
    return _hero_gained(bet, world, "bonded_settlement_ids", "bonded with")


def hero_location_visit(bet: Bet, world: WorldState) -> Verdict:
    return _hero_gained(bet, world, "visited_region_ids", "visited")


PREDICATES: dict[str, Predicate] = {
    "settlement_growth": settlement_growth,
    "settlement_transformation": settlement_transformation,
    "landmark_discovery": landmark_discovery,
    "cultural_shift": cultural_shift,
    "corruption_spread": corruption_spread,
    "hero_settlement_bond": hero_settlement_bond,
    "hero_location_visit": hero_location_visit,
}


def evaluate(bet: Bet, world: WorldState) -> Verdict:
    """Apply the predicate for the bet's type. Unknown types never decide."""
    predicate = PREDICATES.get(bet.bet_type)
    if predicate is None:
        return UNDECIDED
    return predicate(bet, world)


# ============================================================================
# Placement
# ============================================================================


def capture_baseline(
    bet_type: str, target_type: str, entity: Entity, world: WorldState
) -> dict[str, Any]:
    """Snapshot of the target that the predicate later compares against."""
    baseline = entity.snapshot()
    if bet_type == "landmark_discovery" and target_type == "region":
        baseline["undiscovered_landmark_ids"] = sorted(
            lm.id for lm in world.landmarks_in(entity.id) if not lm.discovered
        )
    return baseline


def check_preconditions(
    bet_type: str, target_type: str, entity: Entity, world: WorldState
) -> None:
    """Reject bets that are already decided at placement time."""
    if bet_type == "landmark_discovery":
        if target_type == "landmark" and entity.discovered:
            raise ValidationError("target_id", f"Landmark {entity.id} is already discovered")
        if target_type == "region" and not any(
            not lm.discovered for lm in world.landmarks_in(entity.id)
        ):
            raise ValidationError(
                "target_id", f"Region {entity.id} has no undiscovered landmarks"
            )
    elif bet_type in ("settlement_growth", "settlement_transformation"):
        if not entity.is_inhabited:
            raise ValidationError("target_id", f"Settlement {entity.id} is {entity.status}")
    elif bet_type in ("hero_settlement_bond", "hero_location_visit"):
        if not entity.is_alive or entity.status != "living":
            raise ValidationError("target_id", f"Hero {entity.id} is {entity.status}")
