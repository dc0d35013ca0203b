"""Foliage layer: noise-clustered trees, bushes and flowers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from cryptforge import config
from cryptforge.environment.canvas import Canvas, CellTag
from cryptforge.util.noise import PerlinNoise
from cryptforge.util.rng import derive_seed

from ..blueprint import LayerType
from ..layer import LayerGenerator

if TYPE_CHECKING:
    from cryptforge.util.rng import SeededRandom

# Foliage kind -> palette material
FOLIAGE_MATERIALS: dict[str, str] = {
    "trees": "tree",
    "bushes": "bush",
    "flowers": "flowers",
    "dead_trees": "dead_tree",
    "mushrooms": "mushroom",
}

DEFAULT_FOLIAGE_AVOID = CellTag.STRUCTURE | CellTag.PATH | CellTag.WATER


class FoliageLayer(LayerGenerator):
    """Scatter vegetation over the canvas interior.

    A cell is planted when a uniform draw exceeds
    ``1 - density - noise * cluster_strength``, so noise peaks grow thickets
    and troughs stay sparse. The outermost ring is never planted.

    Params:
        density: Base planting probability.
        types: Foliage kinds to choose from (see FOLIAGE_MATERIALS).
        avoid: Tag names that block planting.
        noise_scale: Cluster noise frequency per tile.
        cluster_strength: How strongly noise raises local density.
    """

    layer_type = LayerType.FOLIAGE

    def generate(
        self, canvas: Canvas, params: Mapping[str, Any], rng: SeededRandom
    ) -> dict[str, Any]:
        options = self.options(params)
        density = float(options.get("density", config.DEFAULT_FOLIAGE_DENSITY))
        cluster_strength = float(
            options.get("cluster_strength", config.DEFAULT_CLUSTER_STRENGTH)
        )
        scale = float(options.get("noise_scale", config.FOLIAGE_NOISE_SCALE))
        kinds = list(options.get("types") or ("trees", "bushes"))
        avoid = self.avoid_tags(options.get("avoid"), DEFAULT_FOLIAGE_AVOID)

        noise = PerlinNoise(derive_seed(rng.seed, "foliage.noise"))
        values = noise.grid(
            canvas.width, canvas.height, scale, octaves=3, persistence=0.5
        )

        placed: dict[str, int] = {}
        for y in range(1, canvas.height - 1):
            for x in range(1, canvas.width - 1):
                if canvas.is_blocked(x, y, (avoid,)):
                    continue
                threshold = 1.0 - density - values[x, y] * cluster_strength
                if rng.random() <= threshold:
                    continue
                kind = rng.choice(kinds)
                material = FOLIAGE_MATERIALS.get(kind, "tree")
                canvas.set_tile(x, y, self.palette.pick(material, rng), CellTag.FOLIAGE)
                placed[kind] = placed.get(kind, 0) + 1

        return {"foliage_placed": sum(placed.values()), "by_type": placed}
