"""Unit Tests: Tick Scheduler

Test cases:
- Clock advances exactly once per completed tick
- Overlapping ticks are rejected
- Failed ticks leave the clock alone and are retried
- Passive favor income
- State survives a reload from disk
- A save taken mid-tick never overwrites the committed year
"""

import threading
import time

import pytest
from conftest import make_game, make_settings

from mytherra.exceptions import TickInProgressError
from mytherra.game import Game
from mytherra.storage.state import SnapshotStore
from mytherra.world.processors import ProcessorResult


def test_clock_advances_once_per_tick(tmp_path):
    game = make_game(tmp_path)

    results = [game.run_tick() for _ in range(3)]

    assert [r.year for r in results] == [1, 2, 3]
    assert all(r.completed for r in results)
    assert game.clock.current_year == 4


def test_tick_events_are_stamped_with_the_tick_year(tmp_path):
    game = make_game(tmp_path)

    result = game.run_tick()

    assert all(event.year == 1 for event in result.events)
    assert len(game.journal) == len(result.events)


def test_overlapping_tick_is_rejected(tmp_path):
    started = threading.Event()
    release = threading.Event()

    def blocking_processor(world, clock, rng, params):
        started.set()
        release.wait(timeout=5)
        return ProcessorResult(world=world)

    game = make_game(tmp_path, processors=[("blocking", blocking_processor)])
    worker = threading.Thread(target=game.run_tick)
    worker.start()
    try:
        assert started.wait(timeout=5)
        assert game.scheduler.in_progress
        with pytest.raises(TickInProgressError):
            game.run_tick()
    finally:
        release.set()
        worker.join()

    assert game.clock.current_year == 2
    assert not game.scheduler.in_progress


def test_failed_tick_keeps_year_and_retries(tmp_path):
    calls = []

    def flaky_processor(world, clock, rng, params):
        calls.append(clock.current_year)
        if len(calls) == 1:
            raise RuntimeError("storm of the century")
        return ProcessorResult(world=world)

    game = make_game(tmp_path, processors=[("flaky", flaky_processor)])

    failed = game.run_tick()
    assert not failed.completed
    assert failed.error == "storm of the century"
    assert game.clock.current_year == 1

    retried = game.run_tick()
    assert retried.completed
    assert calls == [1, 1]
    assert game.clock.current_year == 2


def test_passive_income_per_tick(tmp_path):
    game = make_game(tmp_path, processors=[], favor_per_tick=10)

    game.run_tick()
    result = game.run_tick()

    assert result.favor_income == 10
    assert game.get_account().balance == 120


def test_resolution_runs_inside_tick(tmp_path):
    game = make_game(tmp_path, processors=[])
    bet = game.place_bet(
        bet_type="settlement_growth",
        target_id="settlement-001",
        description="Fellwood will flourish",
        timeframe=1,
        confidence="possible",
        divine_favor_stake=50,
    )

    first = game.run_tick()
    assert first.resolution.still_active == 1

    second = game.run_tick()
    assert second.resolution.expired == 1
    assert game.get_bet(bet.id).status == "expired"


def test_state_survives_reload(tmp_path):
    settings = make_settings(tmp_path, favor_per_tick=5)
    game = Game.from_settings(settings)
    game.place_bet(
        bet_type="cultural_shift",
        target_id="region-001",
        description="The highlands will change",
        timeframe=10,
        confidence="likely",
        divine_favor_stake=30,
    )
    game.run_tick()
    game.run_tick()

    reloaded = Game.from_settings(settings)

    assert reloaded.clock.current_year == 3
    assert reloaded.world == game.world
    assert [b.id for b in reloaded.list_bets()] == [b.id for b in game.list_bets()]
    assert reloaded.get_account() == game.get_account()
    assert len(reloaded.journal) == len(game.journal)


def test_mid_tick_save_does_not_overwrite_committed_year(tmp_path, monkeypatch):
    settings = make_settings(tmp_path)
    game = Game.from_settings(settings)
    tick_started = threading.Event()
    release_tick = threading.Event()
    stale_snapshot_taken = threading.Event()

    def blocking_processor(world, clock, rng, params):
        tick_started.set()
        release_tick.wait(timeout=5)
        return ProcessorResult(world=world)

    game.scheduler.processors = [("blocking", blocking_processor)]

    write = game.store.save

    def slow_write(snapshot):
        if snapshot.clock.current_year == 1:
            stale_snapshot_taken.set()
            time.sleep(0.3)
        write(snapshot)

    monkeypatch.setattr(game.store, "save", slow_write)

    tick = threading.Thread(target=game.run_tick)
    tick.start()
    assert tick_started.wait(timeout=5)

    bet_ids = []
    placer = threading.Thread(
        target=lambda: bet_ids.append(
            game.place_bet(
                bet_type="cultural_shift",
                target_id="region-001",
                description="The highlands will change",
                timeframe=10,
                confidence="possible",
                divine_favor_stake=30,
            ).id
        )
    )
    placer.start()
    try:
        assert stale_snapshot_taken.wait(timeout=5)
    finally:
        release_tick.set()
        tick.join()
        placer.join()

    saved = SnapshotStore(settings.state_path).load()

    assert game.clock.current_year == 2
    assert saved.clock.current_year == 2
    assert [b.id for b in saved.bets] == bet_ids
