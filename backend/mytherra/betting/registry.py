"""Immutable pricing tables for the divine betting market.

The registry is built once at startup, either from the default tables below or
from a YAML file with the same four sections (bet_types, confidence_levels,
timeframe_modifiers, target_modifiers).
"""

from __future__ import annotations

import logging
import operator
from pathlib import Path
from typing import Any, Callable, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from mytherra.exceptions import ConfigMissingError

logger = logging.getLogger(__name__)

ModifierType = Literal["additive", "multiplicative"]

_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
    "=": operator.eq,
    "==": operator.eq,
    "!=": operator.ne,
}


# ============================================================================
# Config Models
# ============================================================================


class BetTypeConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    description: str = ""
    base_odds: float = Field(gt=0)
    min_timeframe: int = Field(default=1, ge=1)
    max_timeframe: int = Field(default=50, ge=1)
    resolve_conditions: str = ""
    target_types: tuple[str, ...] = ()


class ConfidenceConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    description: str = ""
    odds_modifier: float = Field(gt=0)
    stake_multiplier: float = Field(default=1.0, gt=0)


class TimeframeModifier(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_timeframe: int = Field(ge=1)
    modifier: float = Field(gt=0)


class TargetModifier(BaseModel):
    """Odds adjustment applied when a live target attribute meets a condition."""

    model_config = ConfigDict(frozen=True)

    target_type: str
    bet_type: str
    condition_field: str
    comparison_operator: str
    condition_value: Any
    modifier_value: float
    modifier_type: ModifierType = "multiplicative"
    description: str = ""

    @field_validator("comparison_operator")
    @classmethod
    def validate_operator(cls, v: str) -> str:
        if v not in _OPERATORS:
            raise ValueError(f"Unsupported comparison operator: {v}")
        return v

    def matches(self, snapshot: dict[str, Any]) -> bool:
        """Evaluate the condition; a field missing from the snapshot never matches."""
        if self.condition_field not in snapshot:
            return False
        value = snapshot[self.condition_field]
        try:
            return bool(_OPERATORS[self.comparison_operator](value, self.condition_value))
        except TypeError:
            return False


# ============================================================================
# Default Tables
# ============================================================================

DEFAULT_BET_TYPES: tuple[BetTypeConfig, ...] = (
    BetTypeConfig(
        code="settlement_growth",
        description="A bet on whether a settlement will grow in size",
        base_odds=2.5,
        resolve_conditions="Settlement population increases by at least 20% within timeframe",
        target_types=("settlement",),
    ),
    BetTypeConfig(
        code="landmark_discovery",
        description="A bet on whether a new landmark will be discovered",
        base_odds=4.0,
        resolve_conditions="New landmark is discovered within the specified region within timeframe",
        target_types=("landmark", "region"),
    ),
    BetTypeConfig(
        code="cultural_shift",
        description="A bet on cultural changes within a region",
        base_odds=3.0,
        resolve_conditions="Status or magic affinity of the region changes significantly within timeframe",
        target_types=("region",),
    ),
    BetTypeConfig(
        code="hero_settlement_bond",
        description="A bet on whether a hero will form a bond with a settlement",
        base_odds=3.5,
        resolve_conditions="Hero bonds with a new settlement within timeframe",
        target_types=("hero",),
    ),
    BetTypeConfig(
        code="hero_location_visit",
        description="A bet on whether a hero will visit a new location",
        base_odds=2.8,
        resolve_conditions="Hero visits a region it has not visited before within timeframe",
        target_types=("hero",),
    ),
    BetTypeConfig(
        code="settlement_transformation",
        description="A bet on a major transformation of a settlement",
        base_odds=5.0,
        resolve_conditions="Settlement changes type within timeframe",
        target_types=("settlement",),
    ),
    BetTypeConfig(
        code="corruption_spread",
        description="A bet on whether corruption will spread to an area",
        base_odds=3.5,
        resolve_conditions="Region becomes corrupt or its chaos rises by 20 within timeframe",
        target_types=("region",),
    ),
)

DEFAULT_CONFIDENCE_LEVELS: tuple[ConfidenceConfig, ...] = (
    ConfidenceConfig(
        code="long_shot",
        description="Very unlikely to happen",
        odds_modifier=2.0,
        stake_multiplier=0.5,
    ),
    ConfidenceConfig(
        code="possible",
        description="Could reasonably happen",
        odds_modifier=1.0,
        stake_multiplier=1.0,
    ),
    ConfidenceConfig(
        code="likely",
        description="More likely to happen than not",
        odds_modifier=0.7,
        stake_multiplier=1.5,
    ),
    ConfidenceConfig(
        code="near_certain",
        description="Almost guaranteed to happen",
        odds_modifier=0.4,
        stake_multiplier=2.0,
    ),
)

DEFAULT_TIMEFRAME_MODIFIERS: tuple[TimeframeModifier, ...] = (
    TimeframeModifier(max_timeframe=1, modifier=1.5),
    TimeframeModifier(max_timeframe=3, modifier=1.2),
    TimeframeModifier(max_timeframe=5, modifier=1.0),
    TimeframeModifier(max_timeframe=10, modifier=0.8),
    TimeframeModifier(max_timeframe=50, modifier=0.6),
)


def _mod(target_type, bet_type, field, op, value, modifier, kind, description):
    return TargetModifier(
        target_type=target_type,
        bet_type=bet_type,
        condition_field=field,
        comparison_operator=op,
        condition_value=value,
        modifier_value=modifier,
        modifier_type=kind,
        description=description,
    )


DEFAULT_TARGET_MODIFIERS: tuple[TargetModifier, ...] = (
    # Settlement growth
    _mod("settlement", "settlement_growth", "prosperity", ">", 80, 0.7, "multiplicative",
         "High prosperity settlements are more likely to grow"),
    _mod("settlement", "settlement_growth", "prosperity", ">", 60, 0.8, "multiplicative",
         "Above average prosperity settlements have good growth potential"),
    _mod("settlement", "settlement_growth", "prosperity", "<", 30, 1.5, "multiplicative",
         "Low prosperity settlements struggle to grow"),
    _mod("settlement", "settlement_growth", "population", ">", 5000, 1.2, "multiplicative",
         "Larger settlements grow more slowly"),
    _mod("settlement", "settlement_growth", "status", "=", "declining", 2.0, "multiplicative",
         "Declining settlements are unlikely to grow"),
    _mod("settlement", "settlement_growth", "status", "=", "thriving", 0.6, "multiplicative",
         "Thriving settlements are likely to continue growing"),
    # Settlement transformation
    _mod("settlement", "settlement_transformation", "prosperity", ">", 90, 0.8, "multiplicative",
         "Extremely prosperous settlements can transform"),
    _mod("settlement", "settlement_transformation", "prosperity", "<", 10, 0.8, "multiplicative",
         "Struggling settlements might transform"),
    _mod("settlement", "settlement_transformation", "status", "=", "stable", 1.5, "multiplicative",
         "Stable settlements rarely transform"),
    # Hero settlement bond
    _mod("hero", "hero_settlement_bond", "alignment_good", ">", 50, 0.01, "additive",
         "Benevolent heroes form bonds more easily"),
    _mod("hero", "hero_settlement_bond", "status", "=", "living", 0.8, "multiplicative",
         "Active heroes are more likely to form bonds"),
    # Hero location visit
    _mod("hero", "hero_location_visit", "alignment_chaotic", ">", 50, 0.01, "additive",
         "Restless heroes travel more"),
    _mod("hero", "hero_location_visit", "level", ">", 5, 0.9, "multiplicative",
         "Higher level heroes travel more efficiently"),
    # Region cultural shift
    _mod("region", "cultural_shift", "chaos", ">", 50, 0.01, "additive",
         "Chaotic regions experience more cultural shifts"),
    _mod("region", "cultural_shift", "divine_resonance", ">", 70, 0.8, "multiplicative",
         "Divine presence stabilizes culture"),
    # Region corruption spread
    _mod("region", "corruption_spread", "chaos", ">", 50, 0.015, "additive",
         "Chaotic regions are more susceptible to corruption"),
    _mod("region", "corruption_spread", "magic_affinity", ">", 50, 0.01, "additive",
         "Magical regions attract corruption"),
)


# ============================================================================
# Registry
# ============================================================================


class ConfigRegistry(BaseModel):
    """Read-only lookup over the betting config tables."""

    model_config = ConfigDict(frozen=True)

    bet_types: tuple[BetTypeConfig, ...]
    confidence_levels: tuple[ConfidenceConfig, ...]
    timeframe_modifiers: tuple[TimeframeModifier, ...]
    target_modifiers: tuple[TargetModifier, ...] = ()

    @classmethod
    def default(cls) -> ConfigRegistry:
        return cls(
            bet_types=DEFAULT_BET_TYPES,
            confidence_levels=DEFAULT_CONFIDENCE_LEVELS,
            timeframe_modifiers=DEFAULT_TIMEFRAME_MODIFIERS,
            target_modifiers=DEFAULT_TARGET_MODIFIERS,
        )

    @classmethod
    def from_yaml(cls, path: Path) -> ConfigRegistry:
        """Build a registry from a YAML file. Sections left out use the defaults."""
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        defaults = cls.default()
        registry = cls(
            bet_types=tuple(
                BetTypeConfig(**item) for item in raw["bet_types"]
            ) if "bet_types" in raw else defaults.bet_types,
            confidence_levels=tuple(
                ConfidenceConfig(**item) for item in raw["confidence_levels"]
            ) if "confidence_levels" in raw else defaults.confidence_levels,
            timeframe_modifiers=tuple(
                TimeframeModifier(**item) for item in raw["timeframe_modifiers"]
            ) if "timeframe_modifiers" in raw else defaults.timeframe_modifiers,
            target_modifiers=tuple(
                TargetModifier(**item) for item in raw["target_modifiers"]
            ) if "target_modifiers" in raw else defaults.target_modifiers,
        )
        logger.info(
            f"Loaded betting config from {path}: {len(registry.bet_types)} bet types, "
            f"{len(registry.target_modifiers)} target modifiers"
        )
        return registry

    @classmethod
    def load(cls, path: Path | None = None) -> ConfigRegistry:
        """Load from a YAML file when it exists, otherwise use the defaults."""
        if path is not None and path.exists():
            return cls.from_yaml(path)
        logger.debug("Using default betting config tables")
        return cls.default()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def bet_type_codes(self) -> list[str]:
        return [bt.code for bt in self.bet_types]

    @property
    def confidence_codes(self) -> list[str]:
        return [c.code for c in self.confidence_levels]

    def bet_type(self, code: str) -> BetTypeConfig:
        for config in self.bet_types:
            if config.code == code:
                return config
        raise ConfigMissingError(f"No bet type config for '{code}'")

    def confidence(self, code: str) -> ConfidenceConfig:
        for config in self.confidence_levels:
            if config.code == code:
                return config
        raise ConfigMissingError(f"No confidence config for '{code}'")

    def timeframe_modifier(self, timeframe: int) -> TimeframeModifier:
        """Smallest threshold that still covers the requested timeframe."""
        candidates = [m for m in self.timeframe_modifiers if m.max_timeframe >= timeframe]
        if not candidates:
            raise ConfigMissingError(f"No timeframe modifier covers {timeframe} years")
        return min(candidates, key=lambda m: m.max_timeframe)

    def target_modifiers_for(self, target_type: str, bet_type: str) -> list[TargetModifier]:
        """Matching modifiers in definition order."""
        return [
            m
            for m in self.target_modifiers
            if m.target_type == target_type and m.bet_type == bet_type
        ]
