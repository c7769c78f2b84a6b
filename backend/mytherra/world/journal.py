"""Append-only journal of world events."""

import logging
import threading
from typing import Iterable

from .models import WorldEvent

logger = logging.getLogger(__name__)


class EventJournal:
    """Append-only sequence of WorldEvents.

    Entries are never rewritten or removed. Readers track a cursor (the
    journal length they last saw) and ask for everything after it.
    """

    def __init__(self, events: Iterable[WorldEvent] = ()):
        self._events: list[WorldEvent] = list(events)
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._events)

    @property
    def cursor(self) -> int:
        return len(self._events)

    def append(self, events: Iterable[WorldEvent]) -> list[WorldEvent]:
        """Append events and return the ones that were added."""
        added = list(events)
        if not added:
            return []
        with self._lock:
            self._events.extend(added)
        logger.debug(f"Journal appended {len(added)} events (total {len(self._events)})")
        return added

    def since(self, cursor: int) -> list[WorldEvent]:
        with self._lock:
            return list(self._events[cursor:])

    def recent(self, limit: int = 20) -> list[WorldEvent]:
        """Most recent events, newest first."""
        with self._lock:
            return list(reversed(self._events[-limit:])) if limit > 0 else []

    def all(self) -> list[WorldEvent]:
        with self._lock:
            return list(self._events)
