"""The built-in preset library.

- town: town_cluster
- nature: forest_patch, trail_segment
- dungeon: room_cluster, arena_chamber
- entity: monster_group, treasure_room
"""

from __future__ import annotations

from cryptforge.environment.tile_types import TilePalette

from ..base import PresetDefinition
from .dungeon import ArenaChamberPreset, RoomClusterPreset
from .entity import MonsterGroupPreset, TreasureRoomPreset
from .nature import ForestPatchPreset, TrailSegmentPreset
from .town import TownClusterPreset, draw_building

BUILTIN_PRESET_TYPES: tuple[type[PresetDefinition], ...] = (
    TownClusterPreset,
    ForestPatchPreset,
    TrailSegmentPreset,
    RoomClusterPreset,
    ArenaChamberPreset,
    MonsterGroupPreset,
    TreasureRoomPreset,
)


def builtin_presets(palette: TilePalette | None = None) -> list[PresetDefinition]:
    """Fresh instances of every built-in preset drawing with ``palette``."""
    return [preset_type(palette) for preset_type in BUILTIN_PRESET_TYPES]


__all__ = [
    "BUILTIN_PRESET_TYPES",
    "ArenaChamberPreset",
    "ForestPatchPreset",
    "MonsterGroupPreset",
    "RoomClusterPreset",
    "TownClusterPreset",
    "TrailSegmentPreset",
    "TreasureRoomPreset",
    "builtin_presets",
    "draw_building",
]
