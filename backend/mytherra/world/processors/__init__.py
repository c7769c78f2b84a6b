"""Yearly evolution processors, run in order Region -> Settlement -> Hero."""

from .base import Processor, ProcessorResult, make_event, processor_rng
from .hero import process_heroes
from .region import derive_region_status, process_regions
from .settlement import process_settlements

DEFAULT_PROCESSORS: tuple[tuple[str, Processor], ...] = (
    ("region", process_regions),
    ("settlement", process_settlements),
    ("hero", process_heroes),
)

__all__ = [
    "DEFAULT_PROCESSORS",
    "Processor",
    "ProcessorResult",
    "derive_region_status",
    "make_event",
    "process_heroes",
    "process_regions",
    "process_settlements",
    "processor_rng",
]
