"""Simulated world: entities, the state arena, evolution and the event journal."""

from .journal import EventJournal
from .models import (
    Alignment,
    Building,
    Clock,
    Hero,
    Landmark,
    Region,
    ResourceNode,
    Settlement,
    WorldEvent,
)
from .state import WorldState

__all__ = [
    "Alignment",
    "Building",
    "Clock",
    "EventJournal",
    "Hero",
    "Landmark",
    "Region",
    "ResourceNode",
    "Settlement",
    "WorldEvent",
    "WorldState",
]
