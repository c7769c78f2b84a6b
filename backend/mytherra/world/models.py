"""World entity models.

Entities reference each other by id only; the WorldState arena owns them all.
Statistics are bounded integers in [0, 100].
"""

from __future__ import annotations

from typing import Annotated, Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

Stat = Annotated[int, Field(ge=0, le=100)]

RegionStatus = Literal["peaceful", "corrupt", "abandoned", "warring"]
SettlementStatus = Literal["thriving", "stable", "declining", "abandoned", "ruined"]
SettlementType = Literal["hamlet", "village", "town", "city"]
HeroStatus = Literal["living", "deceased", "undead", "ascended"]

TARGET_TYPES: tuple[str, ...] = ("settlement", "hero", "region", "landmark")

# Ordered best to worst; ticks only ever move a settlement to the right.
SETTLEMENT_STATUS_ORDER: tuple[str, ...] = (
    "thriving",
    "stable",
    "declining",
    "abandoned",
    "ruined",
)


def clamp_stat(value: float) -> int:
    """Round and clamp a statistic to [0, 100]."""
    return max(0, min(100, int(round(value))))


def generate_event_id() -> str:
    """Generate unique event ID with format: evt_{uuid_hex[:8]}."""
    return f"evt_{uuid4().hex[:8]}"


# ============================================================================
# Clock
# ============================================================================


class Clock(BaseModel):
    """Current simulated year. Advanced exactly once per completed tick."""

    model_config = ConfigDict(validate_assignment=True)

    current_year: int = Field(default=1, ge=1)

    def advance(self) -> int:
        self.current_year += 1
        return self.current_year


# ============================================================================
# Entities
# ============================================================================


class Region(BaseModel):
    id: str
    name: str = ""
    prosperity: Stat = 50
    chaos: Stat = 50
    magic_affinity: Stat = 50
    divine_resonance: Stat = 50
    status: RegionStatus = "peaceful"

    def snapshot(self) -> dict[str, Any]:
        return {
            "prosperity": self.prosperity,
            "chaos": self.chaos,
            "magic_affinity": self.magic_affinity,
            "divine_resonance": self.divine_resonance,
            "status": self.status,
        }


class Building(BaseModel):
    id: str
    type: str
    condition: Stat = 100


class ResourceNode(BaseModel):
    id: str
    type: str
    richness: Stat = 50


class Settlement(BaseModel):
    id: str
    name: str = ""
    region_id: str
    population: int = Field(default=0, ge=0)
    prosperity: Stat = 50
    status: SettlementStatus = "stable"
    type: SettlementType = "village"
    buildings: list[Building] = Field(default_factory=list)
    resource_nodes: list[ResourceNode] = Field(default_factory=list)
    founded_year: int = 1
    abandoned_since: int | None = None

    @property
    def building_types(self) -> set[str]:
        return {building.type for building in self.buildings}

    @property
    def is_inhabited(self) -> bool:
        return self.status not in ("abandoned", "ruined")

    def snapshot(self) -> dict[str, Any]:
        return {
            "population": self.population,
            "prosperity": self.prosperity,
            "status": self.status,
            "type": self.type,
            "region_id": self.region_id,
        }


class Landmark(BaseModel):
    id: str
    name: str = ""
    region_id: str
    type: str = "ruins"
    magic_level: Stat = 50
    danger_level: Stat = 50
    discovered_year: int | None = None

    @property
    def discovered(self) -> bool:
        return self.discovered_year is not None

    def snapshot(self) -> dict[str, Any]:
        return {
            "magic_level": self.magic_level,
            "danger_level": self.danger_level,
            "discovered": self.discovered,
            "discovered_year": self.discovered_year,
            "region_id": self.region_id,
        }


class Alignment(BaseModel):
    good: Stat = 50
    chaotic: Stat = 50


class Hero(BaseModel):
    id: str
    name: str = ""
    region_id: str
    role: str = "adventurer"
    level: int = Field(default=1, ge=1)
    age: int = Field(default=20, ge=0)
    is_alive: bool = True
    status: HeroStatus = "living"
    alignment: Alignment = Field(default_factory=Alignment)
    bonded_settlement_ids: list[str] = Field(default_factory=list)
    visited_region_ids: list[str] = Field(default_factory=list)
    death_reason: str | None = None

    def snapshot(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "age": self.age,
            "is_alive": self.is_alive,
            "status": self.status,
            "alignment_good": self.alignment.good,
            "alignment_chaotic": self.alignment.chaotic,
            "region_id": self.region_id,
            "bonded_settlement_ids": list(self.bonded_settlement_ids),
            "visited_region_ids": list(self.visited_region_ids),
        }


# ============================================================================
# Events
# ============================================================================


class WorldEvent(BaseModel):
    """Immutable record of a narratively significant change."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_event_id)
    year: int
    type: str
    title: str
    description: str
    related_region_ids: tuple[str, ...] = ()
    related_hero_ids: tuple[str, ...] = ()
    related_settlement_ids: tuple[str, ...] = ()
