"""Cellular automata cave layout.

Algorithm:
1. Fill the interior with floor at ``fill_probability``; the outer ring stays wall
2. For each iteration, count wall neighbours in the 8-cell Moore neighbourhood
   (off-grid counts as wall):
   - a wall stays wall with >= floor_threshold wall neighbours
   - a floor turns to wall with >= wall_threshold wall neighbours
3. Keep only the largest 4-connected floor region
4. Put stairs far apart (double sweep)

Tuning guide:
- fill_probability=0.45, iterations=5 -> balanced caves
- fill_probability=0.55, iterations=4 -> more open areas
- fill_probability=0.40, iterations=6 -> tighter, more enclosed
"""

from __future__ import annotations

import logging

import numpy as np

from cryptforge import config
from cryptforge.environment.tile_types import BinaryMarker
from cryptforge.types import RandomSeed, TileCoord
from cryptforge.util.pathfinding import connected_regions

from .base import BaseLayoutGenerator, GeneratedLayout, place_stairs_far_apart

logger = logging.getLogger(__name__)

_NEIGHBOR_OFFSETS = tuple(
    (dx, dy) for dx in (-1, 0, 1) for dy in (-1, 0, 1) if (dx, dy) != (0, 0)
)


def count_wall_neighbors(grid: np.ndarray) -> np.ndarray:
    """Number of wall cells around every cell; off-grid neighbours are walls."""
    width, height = grid.shape
    walls = np.pad(grid == BinaryMarker.WALL, 1, constant_values=True).astype(np.uint8)
    counts = np.zeros((width, height), dtype=np.uint8)
    for dx, dy in _NEIGHBOR_OFFSETS:
        counts += walls[1 + dx : 1 + dx + width, 1 + dy : 1 + dy + height]
    return counts


class CaveGenerator(BaseLayoutGenerator):
    """Organic caves from a smoothed random fill. Produces no rooms."""

    algorithm = "cellular_automata"

    def __init__(
        self,
        map_width: TileCoord,
        map_height: TileCoord,
        seed: RandomSeed = None,
        *,
        fill_probability: float = config.CAVE_FILL_PROBABILITY,
        iterations: int = config.CAVE_ITERATIONS,
        wall_threshold: int = config.CAVE_WALL_THRESHOLD,
        floor_threshold: int = config.CAVE_FLOOR_THRESHOLD,
    ) -> None:
        super().__init__(map_width, map_height, seed)
        self.fill_probability = fill_probability
        self.iterations = iterations
        self.wall_threshold = wall_threshold
        self.floor_threshold = floor_threshold

    def generate(self) -> GeneratedLayout:
        rng = self.rng
        width, height = self.map_width, self.map_height
        grid = self._new_grid()

        # Row by row so the draw order is independent of array layout
        for y in range(1, height - 1):
            for x in range(1, width - 1):
                if rng.random() < self.fill_probability:
                    grid[x, y] = BinaryMarker.FLOOR

        for _ in range(self.iterations):
            grid = self._smooth(grid)

        self._keep_largest_region(grid)

        stairs = place_stairs_far_apart(grid, rng)
        if stairs.up is None:
            logger.warning(
                "Cave %dx%d seed=%d has fewer than two floor cells; no stairs placed",
                width,
                height,
                self.seed,
            )
        return self._layout(grid, [], stairs)

    def _smooth(self, grid: np.ndarray) -> np.ndarray:
        walls = count_wall_neighbors(grid)
        is_wall = grid == BinaryMarker.WALL
        becomes_wall = np.where(
            is_wall, walls >= self.floor_threshold, walls >= self.wall_threshold
        )

        smoothed = self._new_grid()
        inner = (slice(1, -1), slice(1, -1))
        smoothed[inner] = np.where(
            becomes_wall[inner], BinaryMarker.WALL, BinaryMarker.FLOOR
        )
        return smoothed

    @staticmethod
    def _keep_largest_region(grid: np.ndarray) -> None:
        regions = connected_regions(grid == BinaryMarker.FLOOR)
        if len(regions) <= 1:
            return
        # Stable sort: ties keep the region found first
        regions.sort(key=len, reverse=True)
        for region in regions[1:]:
            for cell in region:
                grid[cell] = BinaryMarker.WALL


def generate_cave(
    width: TileCoord, height: TileCoord, *, seed: RandomSeed = None, **options: object
) -> GeneratedLayout:
    """Generate a cave layout. Options are the CaveGenerator keyword arguments."""
    generator = CaveGenerator(width, height, seed, **options)  # type: ignore[arg-type]
    return generator.generate()
