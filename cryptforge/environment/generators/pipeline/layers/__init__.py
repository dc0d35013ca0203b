"""Layer generators for the layered compositor.

Each layer handles one LayerType and mutates the shared canvas:
- Terrain: biome ground cover and optional dungeon layouts
- Structures: perimeter walls, preset structures and buildings
- Paths: woven roads, corridors and rivers
- Foliage: noise-clustered vegetation
- Objects / entities: sub-tile containers, monsters and NPCs
- Lighting / special: light sources, stairs and one-off features
"""

from .atmosphere import LightingLayer, SpecialLayer
from .foliage import FoliageLayer
from .paths import PathsLayer, door_anchors
from .placement import EntitiesLayer, ObjectsLayer
from .structures import StructuresLayer
from .terrain import TerrainLayer

DEFAULT_LAYER_TYPES = (
    TerrainLayer,
    StructuresLayer,
    PathsLayer,
    FoliageLayer,
    ObjectsLayer,
    EntitiesLayer,
    LightingLayer,
    SpecialLayer,
)

__all__ = [
    "DEFAULT_LAYER_TYPES",
    "EntitiesLayer",
    "FoliageLayer",
    "LightingLayer",
    "ObjectsLayer",
    "PathsLayer",
    "SpecialLayer",
    "StructuresLayer",
    "TerrainLayer",
    "door_anchors",
]
