"""Tick job scheduler using APScheduler."""

import logging
from typing import NoReturn

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from mytherra.config import Settings
from mytherra.exceptions import TickInProgressError
from mytherra.game import Game

logger = logging.getLogger(__name__)


def tick_job(game: Game) -> None:
    """Run one tick; failures are logged and retried on the next interval."""
    try:
        result = game.run_tick()
    except TickInProgressError:
        logger.warning("Previous tick still running, skipping this interval")
        return

    if not result.completed:
        logger.warning(f"Tick for year {result.year} failed: {result.error}")


def _register_tick_job(scheduler: BaseScheduler, game: Game, settings: Settings) -> None:
    interval = settings.scheduler.tick_interval_seconds
    scheduler.add_job(
        tick_job,
        IntervalTrigger(seconds=interval),
        args=[game],
        id="world-tick",
        name="World: Yearly Tick",
        max_instances=1,
        coalesce=True,
    )
    logger.info(f"Registered job: World Tick (every {interval} s)")


def build_scheduler(game: Game, settings: Settings) -> BlockingScheduler:
    """Foreground scheduler for `run`."""
    scheduler = BlockingScheduler()
    _register_tick_job(scheduler, game, settings)
    return scheduler


def build_background_scheduler(game: Game, settings: Settings) -> BackgroundScheduler:
    """Scheduler ticking the same game the API serves, for `serve`."""
    scheduler = BackgroundScheduler()
    _register_tick_job(scheduler, game, settings)
    return scheduler


def start_scheduler(game: Game, settings: Settings) -> NoReturn:
    """Start the APScheduler loop driving world ticks."""
    scheduler = build_scheduler(game, settings)

    try:
        logger.info("✓ Scheduler starting...")
        logger.info(f"✓ {len(scheduler.get_jobs())} jobs registered")
        logger.info("Press Ctrl+C to stop\n")

        scheduler.start()

    except (KeyboardInterrupt, SystemExit):
        logger.info("\nReceived interrupt signal")
        scheduler.shutdown()
        logger.info("✓ Scheduler stopped cleanly")
