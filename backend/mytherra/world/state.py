"""Authoritative in-memory world graph.

WorldState is an arena keyed by entity id. It is treated as a value: the
update helpers return a new WorldState and leave the receiver untouched, so a
processor can never leak a half-applied change into shared state.
"""

from __future__ import annotations

from typing import Any, Iterable

from pydantic import BaseModel, Field

from .models import TARGET_TYPES, Hero, Landmark, Region, Settlement

Entity = Region | Settlement | Hero | Landmark

_COLLECTIONS: dict[str, str] = {
    "region": "regions",
    "settlement": "settlements",
    "hero": "heroes",
    "landmark": "landmarks",
}


def entity_kind(entity: Entity) -> str:
    """Return the target type name for an entity instance."""
    if isinstance(entity, Region):
        return "region"
    if isinstance(entity, Settlement):
        return "settlement"
    if isinstance(entity, Hero):
        return "hero"
    if isinstance(entity, Landmark):
        return "landmark"
    raise TypeError(f"Unknown entity type: {type(entity).__name__}")


class WorldState(BaseModel):
    regions: dict[str, Region] = Field(default_factory=dict)
    settlements: dict[str, Settlement] = Field(default_factory=dict)
    heroes: dict[str, Hero] = Field(default_factory=dict)
    landmarks: dict[str, Landmark] = Field(default_factory=dict)

    @classmethod
    def from_entities(cls, entities: Iterable[Entity]) -> WorldState:
        return cls().with_updates(*entities)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def collection(self, kind: str) -> dict[str, Any]:
        if kind not in _COLLECTIONS:
            raise KeyError(f"Unknown entity kind: {kind}")
        return getattr(self, _COLLECTIONS[kind])

    def get(self, kind: str, entity_id: str) -> Entity | None:
        return self.collection(kind).get(entity_id)

    def find(self, entity_id: str) -> tuple[str, Entity] | None:
        """Search every entity kind for an id."""
        for kind in TARGET_TYPES:
            entity = self.get(kind, entity_id)
            if entity is not None:
                return kind, entity
        return None

    def snapshot_of(self, kind: str, entity_id: str) -> dict[str, Any] | None:
        entity = self.get(kind, entity_id)
        if entity is None:
            return None
        return entity.snapshot()

    def settlements_in(self, region_id: str) -> list[Settlement]:
        return [s for s in self.settlements.values() if s.region_id == region_id]

    def landmarks_in(self, region_id: str) -> list[Landmark]:
        return [lm for lm in self.landmarks.values() if lm.region_id == region_id]

    def living_heroes(self) -> list[Hero]:
        return [h for h in self.heroes.values() if h.is_alive and h.status == "living"]

    # ------------------------------------------------------------------
    # Value-style updates
    # ------------------------------------------------------------------

    def with_updates(self, *entities: Entity) -> WorldState:
        """Return a copy with the given entities inserted or replaced."""
        collections = {name: dict(getattr(self, name)) for name in _COLLECTIONS.values()}
        for entity in entities:
            collections[_COLLECTIONS[entity_kind(entity)]][entity.id] = entity
        return WorldState(**collections)

    def without(self, kind: str, entity_id: str) -> WorldState:
        """Return a copy with one entity removed."""
        collections = {name: dict(getattr(self, name)) for name in _COLLECTIONS.values()}
        collections[_COLLECTIONS[kind]].pop(entity_id, None)
        return WorldState(**collections)

    def counts(self) -> dict[str, int]:
        return {name: len(getattr(self, name)) for name in _COLLECTIONS.values()}
