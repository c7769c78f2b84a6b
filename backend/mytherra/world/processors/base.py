"""Shared plumbing for the yearly evolution processors."""

from __future__ import annotations

import random
from typing import Callable

from pydantic import BaseModel, Field

from mytherra.config import EvolutionConfig
from mytherra.world.models import Clock, WorldEvent
from mytherra.world.state import WorldState


class ProcessorResult(BaseModel):
    """New world value plus the events a processor produced."""

    world: WorldState
    events: list[WorldEvent] = Field(default_factory=list)


Processor = Callable[[WorldState, Clock, random.Random, EvolutionConfig], ProcessorResult]


def processor_rng(seed: int, year: int, name: str) -> random.Random:
    """Deterministic RNG for one processor in one year."""
    return random.Random(f"{seed}:{year}:{name}")


def make_event(
    year: int,
    event_type: str,
    title: str,
    description: str,
    *,
    regions: tuple[str, ...] | list[str] = (),
    heroes: tuple[str, ...] | list[str] = (),
    settlements: tuple[str, ...] | list[str] = (),
) -> WorldEvent:
    return WorldEvent(
        year=year,
        type=event_type,
        title=title,
        description=description,
        related_region_ids=tuple(regions),
        related_hero_ids=tuple(heroes),
        related_settlement_ids=tuple(settlements),
    )
