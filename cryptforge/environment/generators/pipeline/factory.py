"""Factory functions for pre-configured blueprints.

These give callers a complete level recipe by name without assembling the
layers by hand. Each returns a plain Blueprint that can be inspected or
tweaked before composing.

Available blueprints:
- "village": plains with a town cluster, roads between doors, light foliage
- "forest": dense woodland with a winding trail, a river and a monster pack
- "dungeon": BSP rooms and corridors with torches, stairs and a shrine
- "cavern": cellular-automata caves with scattered monsters
- "arena": a pillared central arena with satellite rooms
"""

from __future__ import annotations

from collections.abc import Callable

from cryptforge import config
from cryptforge.types import RandomSeed

from .blueprint import Biome, Blueprint, BlueprintBuilder


def create_blueprint(
    name: str,
    width: int = config.DEFAULT_LEVEL_WIDTH,
    height: int = config.DEFAULT_LEVEL_HEIGHT,
    seed: RandomSeed = None,
) -> Blueprint:
    """Create a pre-configured blueprint by name.

    Args:
        name: One of BLUEPRINT_NAMES.
        width: Level width in tiles.
        height: Level height in tiles.
        seed: Optional random seed for deterministic generation.

    Returns:
        A Blueprint ready for LayeredCompositor.compose().

    Raises:
        ValueError: If the blueprint name is not recognized.
    """
    try:
        factory = _FACTORIES[name]
    except KeyError:
        raise ValueError(f"Unknown blueprint name: {name!r}") from None
    return factory(BlueprintBuilder(width, height).seed(seed), width, height)


def _village(builder: BlueprintBuilder, width: int, height: int) -> Blueprint:
    radius = min(15, max(3, min(width, height) // 4))
    cx, cy = width // 2, height // 2
    return (
        builder.terrain(Biome.PLAINS, regions=4)
        .structures(presets=[{"name": "town_cluster", "params": {"radius": radius}}])
        .paths(connect_structures=True, style="road")
        .foliage(0.15, types=["trees", "bushes", "flowers"])
        .entities(
            npcs=[
                {"x": cx + 2, "y": cy, "role": "elder"},
                {"x": cx - 2, "y": cy + 1, "role": "merchant"},
            ]
        )
        .lighting(ambient=0.8, torch_density=0.05)
        .build()
    )


def _forest(builder: BlueprintBuilder, width: int, height: int) -> Blueprint:
    return (
        builder.terrain(Biome.FOREST, regions=3)
        .paths(
            river="top",
            paths=[
                {
                    "start": [0, height // 2],
                    "end": [width - 1, height // 2],
                    "style": "winding_forest",
                }
            ],
        )
        .foliage(
            0.35, types=["trees", "trees", "bushes", "flowers"], cluster_strength=0.6
        )
        .entities(
            presets=[
                {
                    "name": "monster_group",
                    "params": {
                        "center_x": width // 4,
                        "center_y": height // 4,
                        "formation": "random",
                        "count": 4,
                    },
                }
            ]
        )
        .lighting(ambient=0.6, sources=[])
        .build()
    )


def _dungeon(builder: BlueprintBuilder, width: int, height: int) -> Blueprint:
    return (
        builder.terrain(Biome.UNDERGROUND, layout={"algorithm": "bsp"})
        .entities(scatter={"count": 2, "per_room": True})
        .lighting(ambient=0.2, torch_density=0.08)
        .special(features=[{"type": "shrine"}])
        .build()
    )


def _cavern(builder: BlueprintBuilder, width: int, height: int) -> Blueprint:
    return (
        builder.terrain(Biome.CORRUPTED, layout={"algorithm": "cellular_automata"})
        .entities(scatter={"count": max(3, width * height // 300)})
        .lighting(ambient=0.1, torch_density=0.02)
        .special(features=[{"type": "altar"}])
        .build()
    )


def _arena(builder: BlueprintBuilder, width: int, height: int) -> Blueprint:
    return (
        builder.terrain(Biome.UNDERGROUND, layout={"algorithm": "arena"})
        .entities(scatter={"count": 3, "per_room": True})
        .lighting(ambient=0.4, torch_density=0.1)
        .special(features=[{"type": "portal"}, {"type": "lever"}])
        .build()
    )


_FACTORIES: dict[str, Callable[[BlueprintBuilder, int, int], Blueprint]] = {
    "village": _village,
    "forest": _forest,
    "dungeon": _dungeon,
    "cavern": _cavern,
    "arena": _arena,
}

BLUEPRINT_NAMES: tuple[str, ...] = tuple(_FACTORIES)
