"""
Tile identifiers used by the generators.

This module defines:
- `BinaryMarker`: the structural categories (floor, wall, stairs, door, pillar)
  written by the layout generators and shared with the level serializer.
- `TilePalette`: a lookup from symbolic material names (e.g. "grass") to the
  concrete tile ids a caller's tileset uses. Generators only ever ask the
  palette for ids, so swapping tilesets means swapping palettes.
- Default object and NPC id tables for the sub-tile layers.

The default palette lets the engine run standalone. Callers with their own
asset registry build a `TilePalette` from it and pass that in instead.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from enum import IntEnum
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from cryptforge.util.rng import SeededRandom


class BinaryMarker(IntEnum):
    """Structural tile categories produced by the layout generators."""

    FLOOR = 0
    WALL = 1
    STAIRS_UP = 2
    STAIRS_DOWN = 3
    DOOR = 4
    PILLAR = 5


MARKER_CHARS: dict[int, str] = {
    BinaryMarker.FLOOR: ".",
    BinaryMarker.WALL: "#",
    BinaryMarker.STAIRS_UP: "<",
    BinaryMarker.STAIRS_DOWN: ">",
    BinaryMarker.DOOR: "+",
    BinaryMarker.PILLAR: "O",
}

# Markers a walker can stand on
WALKABLE_MARKERS: frozenset[int] = frozenset(
    {
        BinaryMarker.FLOOR,
        BinaryMarker.STAIRS_UP,
        BinaryMarker.STAIRS_DOWN,
        BinaryMarker.DOOR,
    }
)


def walkable_marker_mask(grid: np.ndarray) -> np.ndarray:
    """Boolean map of walkable cells in a marker grid."""
    return np.isin(grid, list(WALKABLE_MARKERS))


class TilePalette:
    """Maps material names to the tile ids that represent them.

    Materials with several ids are variants of the same surface; `pick`
    chooses one at random so large areas don't look uniform.
    """

    def __init__(self, materials: Mapping[str, Iterable[int]]) -> None:
        self._materials: dict[str, tuple[int, ...]] = {
            name: tuple(int(tile) for tile in ids) for name, ids in materials.items()
        }
        self._reverse: dict[int, str] = {}
        for name, ids in self._materials.items():
            for tile in ids:
                # First registration wins when materials share an id
                self._reverse.setdefault(tile, name)

    def __contains__(self, material: object) -> bool:
        return material in self._materials

    def __repr__(self) -> str:
        return f"TilePalette({len(self._materials)} materials)"

    @property
    def materials(self) -> list[str]:
        return list(self._materials)

    def ids(self, material: str) -> tuple[int, ...]:
        """All tile ids registered for a material.

        Raises:
            ValueError: If the material is not in this palette.
        """
        try:
            return self._materials[material]
        except KeyError:
            raise ValueError(f"Unknown material: {material!r}") from None

    def first(self, material: str) -> int:
        """The canonical (first) tile id for a material."""
        return self.ids(material)[0]

    def pick(self, material: str, rng: SeededRandom) -> int:
        """Choose one tile id for a material at random."""
        ids = self.ids(material)
        if len(ids) == 1:
            return ids[0]
        return rng.choice(ids)

    def material_of(self, tile: int) -> str | None:
        """Reverse lookup: which material a tile id belongs to."""
        return self._reverse.get(int(tile))

    def mask(self, tiles: np.ndarray, *materials: str) -> np.ndarray:
        """Boolean map of cells whose tile belongs to any of the materials."""
        ids = [
            tile
            for material in materials
            if material in self
            for tile in self.ids(material)
        ]
        return np.isin(tiles, ids)

    def with_materials(self, **overrides: Iterable[int]) -> TilePalette:
        """Return a copy with some materials added or replaced."""
        merged: dict[str, Iterable[int]] = dict(self._materials)
        merged.update(overrides)
        return TilePalette(merged)


DEFAULT_PALETTE = TilePalette(
    {
        # Ground
        "grass": (1, 2, 3, 4),
        "dirt": (5, 6, 7),
        "cobblestone": (8, 9, 10, 11),
        "water": (12, 13),
        "floor": (14, 15, 16),
        "sand": (17, 18, 19),
        "snow": (28, 29),
        "ice": (33, 34),
        "mud": (51, 52),
        "lava": (53, 54),
        "ash": (55, 56),
        "blight": (57, 58),
        # Structure
        "wall_stone": (20, 21, 22, 23),
        "wall_wood": (24, 25, 26),
        "pillar": (27,),
        "roof": (30, 31, 32),
        "door": (35, 36),
        "window": (37, 38),
        "stairs_up": (39,),
        "stairs_down": (40,),
        # Features
        "well": (41,),
        "sign": (42,),
        "fountain": (43,),
        "fire_pit": (44,),
        "tent": (45, 46, 47),
        "cart": (48,),
        "barrel": (49,),
        "crate": (50,),
        # Vegetation
        "tree": (60, 61, 62, 63),
        "bush": (64, 65),
        "flowers": (66, 67),
        "dead_tree": (68,),
        "mushroom": (69,),
        # Debris
        "rubble": (70, 71, 72),
        "bones": (73, 74),
        "rock": (75, 76, 77),
    }
)

# Materials a path or walker can never cross
IMPASSABLE_MATERIALS: tuple[str, ...] = (
    "wall_stone",
    "wall_wood",
    "pillar",
    "water",
    "lava",
    "tree",
)

# Movement cost multipliers for A* routing; unlisted materials cost 1.0
TERRAIN_COSTS: dict[str, float] = {
    "cobblestone": 0.8,
    "dirt": 1.0,
    "floor": 1.0,
    "grass": 1.2,
    "sand": 1.3,
    "snow": 1.5,
    "mud": 1.8,
    "rubble": 2.0,
    "bones": 2.0,
}

# =============================================================================
# OBJECT & ENTITY IDS
# =============================================================================

OBJECT_IDS: dict[str, int] = {
    "large_chest": 50,
    "chest": 51,
    "barrel": 52,
    "shrine": 60,
    "torch": 70,
    "altar": 80,
    "lever": 81,
    "tombstone": 90,
    "portal": 91,
}

NPC_IDS: dict[str, int] = {
    "blacksmith": 62,
    "healer": 63,
    "elder": 64,
    "guard": 65,
    "witch": 66,
    "merchant": 67,
    "child": 68,
    "drunk": 69,
}

MONSTER_IDS: dict[str, int] = {
    "zombie": 1,
    "ghoul": 2,
    "fallen": 17,
    "carver": 18,
    "skeleton": 33,
    "burning_dead": 35,
    "horror": 36,
    "skeleton_archer": 37,
    "scavenger": 49,
    "bat": 65,
    "goat": 81,
    "demon": 97,
    "stalker": 98,
    "skeleton_king": 101,
    "butcher": 102,
}

DEFAULT_NPC_ROLE = "merchant"
DEFAULT_MONSTER_ID = MONSTER_IDS["zombie"]


def object_id(object_type: str | int) -> int:
    """Resolve an object type name (or raw id) to its object id.

    Raises:
        ValueError: If the name is not a known object type.
    """
    if isinstance(object_type, int):
        return object_type
    try:
        return OBJECT_IDS[object_type]
    except KeyError:
        raise ValueError(f"Unknown object type: {object_type!r}") from None


def monster_id(monster_type: str | int) -> int:
    """Resolve a monster name ("Skeleton Archer", "skeleton_archer") or raw id.

    Raises:
        ValueError: If the name is not a known monster type.
    """
    if isinstance(monster_type, int):
        return monster_type
    name = re.sub(r"[^a-z0-9]+", "_", str(monster_type).strip().lower())
    if name.isdigit():
        return int(name)
    try:
        return MONSTER_IDS[name]
    except KeyError:
        raise ValueError(f"Unknown monster type: {monster_type!r}") from None


def npc_id(role: str | None) -> int:
    """Resolve an NPC role to its id. Unknown roles become merchants."""
    if role is None:
        return NPC_IDS[DEFAULT_NPC_ROLE]
    return NPC_IDS.get(role, NPC_IDS[DEFAULT_NPC_ROLE])
