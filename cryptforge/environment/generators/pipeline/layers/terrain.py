"""Terrain layer: biome ground cover, optionally carved by a dungeon layout.

Ground is picked per cell from the biome's (primary, secondary, accent)
materials using octave noise. With ``regions`` the canvas is split into
Voronoi regions around Poisson-spaced seeds, each sampling the noise field
at its own offset so neighbouring regions read as different patches.

With ``layout`` a layout generator runs over the whole canvas. Its walls
become wall tiles tagged wall and structure, its walkable cells keep the
biome ground and are tagged floor, and its rooms and stairs are registered
on the canvas for later layers.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import numpy as np

from cryptforge import config
from cryptforge.environment.canvas import Canvas, CellTag
from cryptforge.environment.generators.layouts import generate_layout
from cryptforge.environment.tile_types import BinaryMarker
from cryptforge.util.noise import PerlinNoise
from cryptforge.util.rng import derive_seed
from cryptforge.util.sampling import poisson_disk_sampling, voronoi_regions

from ..blueprint import BIOME_MATERIALS, Biome, LayerType
from ..layer import LayerGenerator

if TYPE_CHECKING:
    from cryptforge.environment.generators.base import GeneratedLayout
    from cryptforge.util.rng import SeededRandom

logger = logging.getLogger(__name__)

# Noise thresholds between primary / secondary / accent ground
PRIMARY_THRESHOLD = 0.3
SECONDARY_THRESHOLD = 0.6

# Region noise offsets are drawn from [0, REGION_OFFSET_RANGE)
REGION_OFFSET_RANGE = 1000.0

_GROUND_TAGS = (CellTag.TERRAIN,)
_WATER_TAGS = (CellTag.TERRAIN, CellTag.WATER)


class TerrainLayer(LayerGenerator):
    """Biome ground cover plus an optional structural layout.

    Params:
        biome: A Biome name. Unknown biomes fall back to plains.
        noise_scale: Noise frequency per tile.
        regions: Number of Voronoi regions with independent noise offsets.
        layout: ``{"algorithm": ..., "options": {...}}`` or an algorithm name.
        wall_material: Palette material for layout walls.
    """

    layer_type = LayerType.TERRAIN

    def generate(
        self, canvas: Canvas, params: Mapping[str, Any], rng: SeededRandom
    ) -> dict[str, Any]:
        options = self.options(params)
        biome = options.get("biome", Biome.PLAINS)
        materials = BIOME_MATERIALS.get(biome)
        if materials is None:
            logger.warning("Unknown biome %r; using plains", biome)
            biome = Biome.PLAINS
            materials = BIOME_MATERIALS[biome]

        values = self._noise_field(canvas, options, rng)
        primary, secondary, accent = materials
        for y in range(canvas.height):
            for x in range(canvas.width):
                value = values[x, y]
                if value < PRIMARY_THRESHOLD:
                    material = primary
                elif value < SECONDARY_THRESHOLD:
                    material = secondary
                else:
                    material = accent
                tags = _WATER_TAGS if material == "water" else _GROUND_TAGS
                canvas.set_tile(x, y, self.palette.pick(material, rng), *tags)

        details: dict[str, Any] = {
            "biome": str(biome),
            "tiles_set": canvas.width * canvas.height,
            "regions": int(options.get("regions") or 0),
        }

        layout_request = options.get("layout")
        if layout_request:
            layout = self._run_layout(canvas, layout_request, rng)
            self._stamp_layout(
                canvas, layout, options.get("wall_material", "wall_stone"), rng
            )
            details["layout"] = {
                "algorithm": layout.algorithm,
                "seed": layout.seed,
                "rooms": len(layout.rooms),
                "floor_tiles": layout.floor_count(),
                "stairs": layout.stairs.to_dict(),
            }
        return details

    # -------------------------------------------------------------------------
    # Ground
    # -------------------------------------------------------------------------

    def _noise_field(
        self, canvas: Canvas, options: Mapping[str, Any], rng: SeededRandom
    ) -> np.ndarray:
        noise = PerlinNoise(derive_seed(rng.seed, "terrain.noise"))
        scale = float(options.get("noise_scale", config.TERRAIN_NOISE_SCALE))
        regions = int(options.get("regions") or 0)
        if regions <= 1:
            return noise.grid(canvas.width, canvas.height, scale)

        min_distance = max(2.0, math.sqrt(canvas.width * canvas.height / regions))
        seeds = poisson_disk_sampling(
            canvas.width,
            canvas.height,
            min_distance,
            config.POISSON_MAX_ATTEMPTS,
            rng,
            max_points=regions,
        )
        region_map = voronoi_regions(canvas.width, canvas.height, seeds)

        values = np.zeros((canvas.width, canvas.height), dtype=np.float64, order="F")
        for index in range(max(len(seeds), 1)):
            offset = (
                rng.uniform(0.0, REGION_OFFSET_RANGE),
                rng.uniform(0.0, REGION_OFFSET_RANGE),
            )
            field = noise.grid(canvas.width, canvas.height, scale, offset=offset)
            mask = region_map == index
            values[mask] = field[mask]
        return values

    # -------------------------------------------------------------------------
    # Layout
    # -------------------------------------------------------------------------

    @staticmethod
    def _run_layout(
        canvas: Canvas, request: str | Mapping[str, Any], rng: SeededRandom
    ) -> GeneratedLayout:
        if isinstance(request, str):
            algorithm, layout_options = request, {}
        else:
            algorithm = request.get("algorithm", "bsp")
            layout_options = dict(request.get("options") or {})
        seed = layout_options.pop("seed", derive_seed(rng.seed, "terrain.layout"))
        return generate_layout(
            algorithm, canvas.width, canvas.height, seed, **layout_options
        )

    def _stamp_layout(
        self,
        canvas: Canvas,
        layout: GeneratedLayout,
        wall_material: str,
        rng: SeededRandom,
    ) -> None:
        palette = self.palette
        grid = layout.grid
        for x in range(canvas.width):
            for y in range(canvas.height):
                marker = int(grid[x, y])
                if marker == BinaryMarker.WALL:
                    canvas.clear_tags(x, y, CellTag.WATER)
                    canvas.set_tile(
                        x,
                        y,
                        palette.pick(wall_material, rng),
                        CellTag.WALL,
                        CellTag.STRUCTURE,
                    )
                elif marker == BinaryMarker.PILLAR:
                    canvas.clear_tags(x, y, CellTag.WATER)
                    canvas.set_tile(
                        x, y, palette.first("pillar"), CellTag.WALL, CellTag.STRUCTURE
                    )
                elif marker == BinaryMarker.DOOR:
                    canvas.clear_tags(x, y, CellTag.WATER)
                    canvas.set_tile(
                        x, y, palette.first("door"), CellTag.FLOOR, CellTag.DOOR
                    )
                else:
                    canvas.add_tags(x, y, CellTag.FLOOR)

        canvas.rooms.extend(layout.rooms)
        canvas.stairs = layout.stairs
