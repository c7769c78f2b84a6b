"""Starting world used by `init` and whenever no saved state exists."""

from mytherra.world.models import (
    Alignment,
    Building,
    Hero,
    Landmark,
    Region,
    ResourceNode,
    Settlement,
)
from mytherra.world.state import WorldState


def _buildings(settlement_id: str, *types: str) -> list[Building]:
    return [
        Building(id=f"{settlement_id}-bld-{i:02d}", type=building_type)
        for i, building_type in enumerate(types, start=1)
    ]


REGIONS: tuple[Region, ...] = (
    Region(
        id="region-001",
        name="Arcane Highlands",
        prosperity=65,
        chaos=35,
        magic_affinity=80,
        divine_resonance=60,
    ),
    Region(
        id="region-002",
        name="Merchant's Haven",
        prosperity=85,
        chaos=20,
        magic_affinity=40,
        divine_resonance=45,
    ),
    Region(
        id="region-003",
        name="Mystic Vale",
        prosperity=55,
        chaos=45,
        magic_affinity=90,
        divine_resonance=70,
    ),
)

SETTLEMENTS: tuple[Settlement, ...] = (
    Settlement(
        id="settlement-001",
        name="Crystalhaven",
        region_id="region-001",
        type="city",
        status="thriving",
        population=3000,
        prosperity=75,
        buildings=_buildings("settlement-001", "temple", "market", "housing", "manor"),
        resource_nodes=[ResourceNode(id="settlement-001-res-01", type="crystal", richness=70)],
    ),
    Settlement(
        id="settlement-002",
        name="Fellwood Village",
        region_id="region-001",
        type="village",
        status="stable",
        population=500,
        prosperity=45,
        buildings=_buildings("settlement-002", "housing", "housing"),
        resource_nodes=[ResourceNode(id="settlement-002-res-01", type="timber", richness=60)],
    ),
    Settlement(
        id="settlement-003",
        name="Arcane Observatory",
        region_id="region-001",
        type="hamlet",
        status="thriving",
        population=100,
        prosperity=60,
        buildings=_buildings("settlement-003", "housing", "temple"),
    ),
    Settlement(
        id="settlement-004",
        name="Goldport",
        region_id="region-002",
        type="town",
        status="thriving",
        population=1800,
        prosperity=80,
        buildings=_buildings(
            "settlement-004", "market", "housing", "tavern", "craftshop", "guild_hall"
        ),
        resource_nodes=[ResourceNode(id="settlement-004-res-01", type="fishery", richness=75)],
    ),
    Settlement(
        id="settlement-005",
        name="Moonrite Hollow",
        region_id="region-003",
        type="hamlet",
        status="stable",
        population=80,
        prosperity=50,
        buildings=_buildings("settlement-005", "market", "housing"),
        resource_nodes=[ResourceNode(id="settlement-005-res-01", type="moonpetal", richness=85)],
    ),
)

HEROES: tuple[Hero, ...] = (
    Hero(
        id="hero-001",
        name="Eldara the Wise",
        region_id="region-001",
        role="scholar",
        level=3,
        age=45,
        alignment=Alignment(good=70, chaotic=30),
        bonded_settlement_ids=["settlement-001"],
        visited_region_ids=["region-001"],
    ),
    Hero(
        id="hero-002",
        name="Marcus Goldhand",
        region_id="region-002",
        role="agent of change",
        level=2,
        age=38,
        alignment=Alignment(good=60, chaotic=50),
        visited_region_ids=["region-002"],
    ),
    Hero(
        id="hero-003",
        name="Sylvana Moonshadow",
        region_id="region-003",
        role="prophet",
        level=4,
        age=52,
        alignment=Alignment(good=80, chaotic=40),
        visited_region_ids=["region-003"],
    ),
)

LANDMARKS: tuple[Landmark, ...] = (
    Landmark(
        id="landmark-001",
        region_id="region-001",
        name="Crystal Sanctuary",
        type="temple",
        magic_level=75,
        danger_level=25,
        discovered_year=1,
    ),
    Landmark(
        id="landmark-002",
        region_id="region-001",
        name="Whispering Grove",
        type="grove",
        magic_level=60,
        danger_level=15,
    ),
    Landmark(
        id="landmark-003",
        region_id="region-002",
        name="Merchant's Rest Monument",
        type="monument",
        magic_level=20,
        danger_level=10,
        discovered_year=1,
    ),
    Landmark(
        id="landmark-004",
        region_id="region-003",
        name="The Forgotten Tower",
        type="tower",
        magic_level=85,
        danger_level=70,
    ),
)


def build_seed_world() -> WorldState:
    """Fresh copy of the starting world."""
    entities = [
        entity.model_copy(deep=True)
        for entity in (*REGIONS, *SETTLEMENTS, *HEROES, *LANDMARKS)
    ]
    return WorldState.from_entities(entities)
