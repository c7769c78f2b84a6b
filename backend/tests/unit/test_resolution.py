"""Unit Tests: Bet Resolution

Test cases:
- Won, lost and expired outcomes with their favor accounting
- A resolution pass is idempotent within a year
- Vanished or dead targets lose the bet
- Each bet type's outcome predicate
"""

import pytest


def _place(game, bet_type, target_id, stake=50, timeframe=5):
    return game.place_bet(
        bet_type=bet_type,
        target_id=target_id,
        description=f"{bet_type} on {target_id}",
        timeframe=timeframe,
        confidence="possible",
        divine_favor_stake=stake,
    )


def _update(game, kind, entity_id, **changes):
    entity = game.world.get(kind, entity_id)
    game.worlds.save(game.world.with_updates(entity.model_copy(update=changes)))


def _resolve(game, year=None):
    return game.resolution.resolve(game.world, year or game.clock.current_year)


def test_won_bet_pays_out(game):
    bet = _place(game, "settlement_growth", "settlement-001", stake=100)
    _update(game, "settlement", "settlement-001", population=600)

    summary = _resolve(game)

    settled = game.get_bet(bet.id)
    assert settled.status == "won"
    assert settled.resolved_year == 1
    assert settled.resolution_notes
    assert summary.won == 1
    assert summary.favor_paid_out == 250
    assert summary.resolved_bet_ids == [bet.id]
    account = game.get_account()
    assert account.balance == 250
    assert account.reserved == 0


def test_growth_below_threshold_stays_active(game):
    bet = _place(game, "settlement_growth", "settlement-001")
    _update(game, "settlement", "settlement-001", population=599)

    summary = _resolve(game)

    assert game.get_bet(bet.id).status == "active"
    assert summary.still_active == 1
    assert summary.processed_count == 0


def test_lost_bet_forfeits_stake(game):
    bet = _place(game, "settlement_growth", "settlement-001", stake=100)
    _update(game, "settlement", "settlement-001", status="abandoned", population=0)

    summary = _resolve(game)

    assert game.get_bet(bet.id).status == "lost"
    assert summary.lost == 1
    account = game.get_account()
    assert account.balance == 0
    assert account.reserved == 0


def test_expired_bet_returns_stake(game):
    bet = _place(game, "settlement_growth", "settlement-001", stake=100, timeframe=5)

    assert _resolve(game, year=5).still_active == 1
    summary = _resolve(game, year=6)

    settled = game.get_bet(bet.id)
    assert settled.status == "expired"
    assert settled.resolved_year == 6
    assert summary.expired == 1
    assert summary.favor_returned == 100
    assert game.get_account().balance == 100
    assert game.get_account().reserved == 0


def test_resolution_is_idempotent(game):
    _place(game, "settlement_growth", "settlement-001", stake=100)
    _update(game, "settlement", "settlement-001", population=900)

    first = _resolve(game)
    second = _resolve(game)

    assert first.processed_count == 1
    assert second.processed_count == 0
    assert game.get_account().balance == 250


def test_missing_target_loses(game):
    bet = _place(game, "settlement_growth", "settlement-001")
    game.worlds.save(game.world.without("settlement", "settlement-001"))

    _resolve(game)

    settled = game.get_bet(bet.id)
    assert settled.status == "lost"
    assert "no longer exists" in settled.resolution_notes


def test_hero_death_loses_visit_bet(game):
    bet = _place(game, "hero_location_visit", "hero-001")
    _update(game, "hero", "hero-001", is_alive=False, status="deceased")

    _resolve(game)

    assert game.get_bet(bet.id).status == "lost"


def test_hero_visit_to_new_region_wins(game):
    bet = _place(game, "hero_location_visit", "hero-001")
    _update(
        game,
        "hero",
        "hero-001",
        region_id="region-002",
        visited_region_ids=["region-001", "region-002"],
    )

    _resolve(game)

    assert game.get_bet(bet.id).status == "won"


def test_hero_bond_wins(game):
    bet = _place(game, "hero_settlement_bond", "hero-001")
    _update(game, "hero", "hero-001", bonded_settlement_ids=["settlement-001"])

    _resolve(game)

    assert game.get_bet(bet.id).status == "won"


@pytest.mark.parametrize("target_id", ["landmark-002", "region-001"])
def test_landmark_discovery_wins(game, target_id):
    bet = _place(game, "landmark_discovery", target_id, stake=20)
    _update(game, "landmark", "landmark-002", discovered_year=1)

    _resolve(game)

    assert game.get_bet(bet.id).status == "won"
    assert game.get_account().balance == 80 + bet.potential_payout


def test_region_landmark_bet_lost_when_candidates_vanish(game):
    bet = _place(game, "landmark_discovery", "region-001", stake=20)
    game.worlds.save(game.world.without("landmark", "landmark-002"))

    _resolve(game)

    assert game.get_bet(bet.id).status == "lost"


def test_corruption_spread_on_chaos_rise(game):
    bet = _place(game, "corruption_spread", "region-001")
    _update(game, "region", "region-001", chaos=29)
    _resolve(game)
    assert game.get_bet(bet.id).status == "active"

    _update(game, "region", "region-001", chaos=30)
    _resolve(game)
    assert game.get_bet(bet.id).status == "won"


def test_cultural_shift_on_magic_change(game):
    bet = _place(game, "cultural_shift", "region-001")
    _update(game, "region", "region-001", magic_affinity=35)

    _resolve(game)

    assert game.get_bet(bet.id).status == "won"


def test_settlement_transformation(game):
    grows = _place(game, "settlement_transformation", "settlement-001", stake=20)
    ruins = _place(game, "settlement_transformation", "settlement-002", stake=20)
    _update(game, "settlement", "settlement-001", type="town")
    _update(game, "settlement", "settlement-002", status="ruined")

    summary = _resolve(game)

    assert game.get_bet(grows.id).status == "won"
    assert game.get_bet(ruins.id).status == "lost"
    assert summary.won == 1
    assert summary.lost == 1
