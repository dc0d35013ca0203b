"""Name-based access to the layout generators.

Choosing an algorithm for a dungeon theme is the caller's decision; this
module only maps algorithm names to generator classes.
"""

from __future__ import annotations

from typing import Any

from cryptforge.types import RandomSeed, TileCoord
from cryptforge.util.naming import normalize_option_names

from .arena import ArenaGenerator
from .base import BaseLayoutGenerator, GeneratedLayout
from .bsp import BSPGenerator
from .cave import CaveGenerator
from .random_walk import RandomWalkGenerator

LAYOUT_GENERATORS: dict[str, type[BaseLayoutGenerator]] = {
    "bsp": BSPGenerator,
    "cellular_automata": CaveGenerator,
    "cave": CaveGenerator,
    "drunkard_walk": RandomWalkGenerator,
    "random_walk": RandomWalkGenerator,
    "arena": ArenaGenerator,
}


def generate_layout(
    algorithm: str,
    width: TileCoord,
    height: TileCoord,
    seed: RandomSeed = None,
    **options: Any,
) -> GeneratedLayout:
    """Generate a layout with a named algorithm.

    Args:
        algorithm: One of the keys of LAYOUT_GENERATORS.
        width: Grid width in tiles.
        height: Grid height in tiles.
        seed: Random seed. None draws from system entropy.
        **options: Algorithm options, in snake_case or camelCase.

    Returns:
        The generated layout.

    Raises:
        ValueError: If the algorithm name is not recognized.
    """
    try:
        generator_class = LAYOUT_GENERATORS[algorithm]
    except KeyError:
        raise ValueError(f"Unknown layout algorithm: {algorithm!r}") from None
    generator = generator_class(width, height, seed, **normalize_option_names(options))
    return generator.generate()
