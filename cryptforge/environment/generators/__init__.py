"""Level generation algorithms for cryptforge.

This package provides:
- Layout generators writing BinaryMarker grids: BSPGenerator,
  CaveGenerator, RandomWalkGenerator and ArenaGenerator
- The MST connector that joins rooms with corridors
- PathWeaver: obstacle-aware, curve-smoothed paths on a canvas
- PresetEngine: named, parametrized stamps (towns, monster groups, ...)
- LayeredCompositor: blueprint-driven composition of complete levels

Layouts are usually the first step of a dungeon level. The compositor's
terrain layer can stamp any layout onto a canvas before the other layers
add paths, vegetation, monsters and lighting.
"""

from .arena import ArenaGenerator, generate_arena
from .base import BaseLayoutGenerator, GeneratedLayout, Stairs, visualize_layout
from .bsp import BSPGenerator, generate_bsp
from .cave import CaveGenerator, generate_cave
from .connector import Connection, Edge, connect_rooms, minimum_spanning_tree
from .layouts import LAYOUT_GENERATORS, generate_layout
from .path_weaver import (
    PATH_STYLES,
    PathSpec,
    PathStyle,
    PathWeaver,
    WeaveResult,
    create_river,
)
from .pipeline import (
    Blueprint,
    BlueprintBuilder,
    CompositionResult,
    LayeredCompositor,
    LayerGenerator,
    create_blueprint,
)
from .presets import PresetDefinition, PresetEngine, parse_preset_shorthand
from .random_walk import RandomWalkGenerator, generate_random_walk

__all__ = [
    "LAYOUT_GENERATORS",
    "PATH_STYLES",
    "ArenaGenerator",
    "BSPGenerator",
    "BaseLayoutGenerator",
    "Blueprint",
    "BlueprintBuilder",
    "CaveGenerator",
    "CompositionResult",
    "Connection",
    "Edge",
    "GeneratedLayout",
    "LayerGenerator",
    "LayeredCompositor",
    "PathSpec",
    "PathStyle",
    "PathWeaver",
    "PresetDefinition",
    "PresetEngine",
    "RandomWalkGenerator",
    "Stairs",
    "WeaveResult",
    "connect_rooms",
    "create_blueprint",
    "create_river",
    "generate_arena",
    "generate_bsp",
    "generate_cave",
    "generate_layout",
    "generate_random_walk",
    "minimum_spanning_tree",
    "parse_preset_shorthand",
    "visualize_layout",
]
