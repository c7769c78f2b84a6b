"""Logfire cloud observability initialization."""

import logging

import logfire

from mytherra import __version__
from mytherra.config import Settings

logger = logging.getLogger(__name__)


def initialize_logfire(settings: Settings) -> bool:
    """
    Initialize Logfire and bridge Python logging to it.

    Must be called ONCE at application startup, before the game is built.
    Observability is optional: a missing token or a failed setup is logged
    and the process keeps running.

    Returns:
        True when Logfire is active.
    """
    if not settings.logfire_token:
        logger.info("Logfire token not set - observability disabled")
        return False

    try:
        logfire.configure(
            token=settings.logfire_token,
            service_name="mytherra",
            service_version=__version__,
            environment=settings.environment,
        )

        root_logger = logging.getLogger()
        root_logger.addHandler(logfire.LogfireLoggingHandler())

        logger.info("✓ Logfire cloud tracking initialized")
        return True

    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")
        return False

