"""Unit Tests: Odds Engine

Test cases:
- Base odds x confidence x timeframe x target modifier
- Smallest covering timeframe threshold wins
- Additive modifiers apply before multiplicative ones, result clamped
- Missing config and missing targets
- Payout rounding and implied probability
"""

import pytest

from mytherra.betting.odds import OddsEngine, floor_payout
from mytherra.betting.registry import ConfigRegistry, TargetModifier
from mytherra.config import BettingConfig
from mytherra.exceptions import ConfigMissingError, NotFoundError
from mytherra.world.models import Region, Settlement
from mytherra.world.state import WorldState


def test_quote_for_average_settlement(world, registry):
    """Stable settlement at prosperity 60 matches no growth modifier."""
    quote = OddsEngine(registry).quote(
        world, "settlement_growth", "possible", 5, "settlement-001", "settlement"
    )

    assert quote.odds == 2.5
    assert quote.target_modifier == 1.0
    assert quote.payout(100) == 250
    assert quote.implied_probability == 0.4


def test_timeframe_uses_smallest_covering_threshold(world, registry):
    engine = OddsEngine(registry)

    four = engine.quote(world, "settlement_growth", "possible", 4, "settlement-001")
    six = engine.quote(world, "settlement_growth", "possible", 6, "settlement-001")
    one = engine.quote(world, "settlement_growth", "possible", 1, "settlement-001")

    assert four.timeframe_modifier == 1.0
    assert six.timeframe_modifier == 0.8
    assert one.timeframe_modifier == 1.5
    assert six.odds == 2.0


def test_additive_modifiers_sum_before_multiplicative(registry):
    """cultural_shift: chaos > 50 adds 0.01, divine_resonance > 70 multiplies by 0.8."""
    world = WorldState.from_entities(
        [Region(id="region-x", chaos=60, divine_resonance=80)]
    )
    quote = OddsEngine(registry).quote(world, "cultural_shift", "possible", 5, "region-x")

    assert quote.target_modifier == pytest.approx(1.01 * 0.8)
    assert quote.odds == 2.42


def test_target_modifier_is_clamped(registry):
    """Thriving, very prosperous settlement stacks 0.7 * 0.8 * 0.6 = 0.336 -> floor 0.5."""
    world = WorldState.from_entities(
        [
            Region(id="region-x"),
            Settlement(
                id="town-x",
                region_id="region-x",
                prosperity=85,
                status="thriving",
                population=800,
            ),
        ]
    )
    quote = OddsEngine(registry).quote(world, "settlement_growth", "possible", 5, "town-x")

    assert quote.target_modifier == 0.5
    assert quote.odds == 1.25


def test_odds_never_below_one(world, registry):
    engine = OddsEngine(registry)
    targets = {
        "settlement_growth": "settlement-001",
        "settlement_transformation": "settlement-001",
        "landmark_discovery": "landmark-002",
        "cultural_shift": "region-001",
        "corruption_spread": "region-001",
        "hero_settlement_bond": "hero-001",
        "hero_location_visit": "hero-001",
    }
    for bet_type, target_id in targets.items():
        for confidence in registry.confidence_codes:
            for timeframe in (1, 3, 5, 10, 50):
                quote = engine.quote(world, bet_type, confidence, timeframe, target_id)
                assert quote.odds >= 1.0


def test_min_odds_clamp(world, registry):
    """near_certain over 50 years: 2.5 * 0.4 * 0.6 = 0.6 -> clamped to 1.0."""
    quote = OddsEngine(registry, BettingConfig(min_odds=1.0)).quote(
        world, "settlement_growth", "near_certain", 50, "settlement-001"
    )
    assert quote.odds == 1.0
    assert quote.payout(100) == 100


def test_missing_config_raises(world, registry):
    engine = OddsEngine(registry)

    with pytest.raises(ConfigMissingError):
        engine.quote(world, "dragon_sighting", "possible", 5, "settlement-001")
    with pytest.raises(ConfigMissingError):
        engine.quote(world, "settlement_growth", "reckless", 5, "settlement-001")
    with pytest.raises(ConfigMissingError):
        engine.quote(world, "settlement_growth", "possible", 51, "settlement-001")


def test_missing_target_raises(world, registry):
    engine = OddsEngine(registry)

    with pytest.raises(NotFoundError):
        engine.quote(world, "settlement_growth", "possible", 5, "settlement-999")
    with pytest.raises(NotFoundError):
        engine.quote(world, "settlement_growth", "possible", 5, "hero-001", "settlement")


def test_target_type_is_inferred_when_omitted(world, registry):
    quote = OddsEngine(registry).quote(world, "hero_location_visit", "possible", 5, "hero-001")
    assert quote.target_type == "hero"


def test_condition_on_missing_field_does_not_match():
    modifier = TargetModifier(
        target_type="settlement",
        bet_type="settlement_growth",
        condition_field="defensibility",
        comparison_operator=">",
        condition_value=10,
        modifier_value=3.0,
    )
    assert not modifier.matches({"prosperity": 50})
    assert modifier.matches({"defensibility": 11})


def test_unsupported_operator_rejected():
    with pytest.raises(ValueError):
        TargetModifier(
            target_type="region",
            bet_type="cultural_shift",
            condition_field="chaos",
            comparison_operator="~",
            condition_value=1,
            modifier_value=1.0,
        )


def test_payout_rounds_down():
    assert floor_payout(33, 2.55) == 84
    assert floor_payout(10, 1.99) == 19
    assert floor_payout(100, 2.5) == 250


def test_quote_is_deterministic(world, registry):
    engine = OddsEngine(registry)
    first = engine.quote(world, "corruption_spread", "long_shot", 7, "region-002")
    second = engine.quote(world, "corruption_spread", "long_shot", 7, "region-002")
    assert first == second


def test_registry_from_yaml_overrides_sections(tmp_path):
    path = tmp_path / "betting.yaml"
    path.write_text(
        "bet_types:\n"
        "  - code: settlement_growth\n"
        "    base_odds: 3.0\n"
        "    min_timeframe: 2\n"
        "    max_timeframe: 10\n"
        "    target_types: [settlement]\n",
        encoding="utf-8",
    )

    loaded = ConfigRegistry.load(path)

    assert loaded.bet_type_codes == ["settlement_growth"]
    assert loaded.bet_type("settlement_growth").base_odds == 3.0
    assert loaded.confidence_codes == ConfigRegistry.default().confidence_codes
    assert ConfigRegistry.load(tmp_path / "missing.yaml") == ConfigRegistry.default()
