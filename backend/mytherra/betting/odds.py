"""Odds pricing for prospective bets."""

from __future__ import annotations

import logging
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal

from pydantic import BaseModel, ConfigDict

from mytherra.config import BettingConfig
from mytherra.exceptions import NotFoundError
from mytherra.world.state import WorldState

from .registry import ConfigRegistry

logger = logging.getLogger(__name__)


def floor_payout(stake: int, odds: float) -> int:
    """stake * odds rounded down to whole favor."""
    amount = Decimal(stake) * Decimal(str(odds))
    return int(amount.to_integral_value(rounding=ROUND_FLOOR))


def round_odds(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class Quote(BaseModel):
    """Priced odds with the factors that produced them."""

    model_config = ConfigDict(frozen=True)

    bet_type: str
    confidence: str
    timeframe: int
    target_type: str
    target_id: str
    base_odds: float
    confidence_modifier: float
    timeframe_modifier: float
    target_modifier: float
    odds: float

    @property
    def implied_probability(self) -> float:
        return round(1 / self.odds, 4)

    def payout(self, stake: int) -> int:
        return floor_payout(stake, self.odds)


class OddsEngine:
    """Pure pricing over a WorldState and a ConfigRegistry."""

    def __init__(self, registry: ConfigRegistry, config: BettingConfig | None = None):
        self.registry = registry
        self.config = config or BettingConfig()

    def resolve_target(
        self, world: WorldState, target_id: str, target_type: str | None = None
    ) -> tuple[str, dict]:
        """Find a target's kind and live snapshot, searching every kind when none is given."""
        if target_type:
            snapshot = world.snapshot_of(target_type, target_id)
            if snapshot is None:
                raise NotFoundError(f"{target_type.capitalize()} not found: {target_id}")
            return target_type, snapshot

        found = world.find(target_id)
        if found is None:
            raise NotFoundError(f"Target not found: {target_id}")
        kind, entity = found
        return kind, entity.snapshot()

    def target_modifier(self, target_type: str, bet_type: str, snapshot: dict) -> float:
        """Additive modifiers sum onto 1.0, then multiplicative ones apply; result is clamped."""
        modifiers = [
            m
            for m in self.registry.target_modifiers_for(target_type, bet_type)
            if m.matches(snapshot)
        ]
        combined = 1.0 + sum(m.modifier_value for m in modifiers if m.modifier_type == "additive")
        for m in modifiers:
            if m.modifier_type == "multiplicative":
                combined *= m.modifier_value
        return max(self.config.target_modifier_floor, min(self.config.target_modifier_ceiling, combined))

    def quote(
        self,
        world: WorldState,
        bet_type: str,
        confidence: str,
        timeframe: int,
        target_id: str,
        target_type: str | None = None,
    ) -> Quote:
        bet_config = self.registry.bet_type(bet_type)
        confidence_config = self.registry.confidence(confidence)
        timeframe_config = self.registry.timeframe_modifier(timeframe)
        kind, snapshot = self.resolve_target(world, target_id, target_type)

        target_mod = self.target_modifier(kind, bet_type, snapshot)
        raw = (
            bet_config.base_odds
            * confidence_config.odds_modifier
            * timeframe_config.modifier
            * target_mod
        )
        odds = max(self.config.min_odds, round_odds(raw))

        logger.debug(
            f"Quoted {bet_type}/{confidence}/{timeframe}y on {kind} {target_id}: "
            f"{raw:.4f} -> {odds}"
        )
        return Quote(
            bet_type=bet_type,
            confidence=confidence,
            timeframe=timeframe,
            target_type=kind,
            target_id=target_id,
            base_odds=bet_config.base_odds,
            confidence_modifier=confidence_config.odds_modifier,
            timeframe_modifier=timeframe_config.modifier,
            target_modifier=target_mod,
            odds=odds,
        )
