"""Spatial sampling primitives: blue-noise points and coarse regions."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from cryptforge import config
from cryptforge.types import FloatPos

from .rng import SeededRandom


def poisson_disk_sampling(
    width: float,
    height: float,
    min_distance: float,
    max_attempts: int = config.POISSON_MAX_ATTEMPTS,
    rng: SeededRandom | None = None,
    max_points: int | None = None,
) -> list[FloatPos]:
    """Distribute points so that no two are closer than ``min_distance``.

    Bridson's algorithm. A background grid with cells of size
    ``min_distance / sqrt(2)`` holds at most one point per cell, so each
    candidate only needs to be checked against the surrounding 5x5 cells.
    Each active point gets ``max_attempts`` candidates in the annulus
    ``[min_distance, 2 * min_distance)`` before it is retired. The active
    list only shrinks once the area saturates, so the loop always terminates.

    Points are returned as floats so the distance guarantee holds exactly;
    round them when stamping onto a grid.

    Args:
        width: Sampling area width.
        height: Sampling area height.
        min_distance: Minimum Euclidean distance between any two points.
        max_attempts: Candidates tried around each active point.
        rng: Random source. A fresh entropy-seeded generator is used if None.
        max_points: Optional cap on the number of points returned.

    Returns:
        List of (x, y) points inside [0, width) x [0, height).

    Raises:
        ValueError: If min_distance is not positive.
    """
    if min_distance <= 0:
        raise ValueError(f"min_distance must be positive, got {min_distance}")
    if width <= 0 or height <= 0 or max_points == 0:
        return []
    if rng is None:
        rng = SeededRandom()

    cell_size = min_distance / math.sqrt(2)
    grid_w = max(1, math.ceil(width / cell_size))
    grid_h = max(1, math.ceil(height / cell_size))
    grid: list[int] = [-1] * (grid_w * grid_h)
    min_distance_sq = min_distance * min_distance

    points: list[FloatPos] = []
    active: list[int] = []

    def cell_of(x: float, y: float) -> tuple[int, int]:
        gx = min(grid_w - 1, int(x / cell_size))
        gy = min(grid_h - 1, int(y / cell_size))
        return gx, gy

    def is_valid(x: float, y: float) -> bool:
        if not (0 <= x < width and 0 <= y < height):
            return False
        gx, gy = cell_of(x, y)
        for cy in range(max(0, gy - 2), min(grid_h, gy + 3)):
            for cx in range(max(0, gx - 2), min(grid_w, gx + 3)):
                index = grid[cy * grid_w + cx]
                if index == -1:
                    continue
                px, py = points[index]
                if (px - x) ** 2 + (py - y) ** 2 < min_distance_sq:
                    return False
        return True

    def add_point(x: float, y: float) -> None:
        gx, gy = cell_of(x, y)
        grid[gy * grid_w + gx] = len(points)
        active.append(len(points))
        points.append((x, y))

    add_point(rng.uniform(0, width), rng.uniform(0, height))

    while active:
        if max_points is not None and len(points) >= max_points:
            break
        active_index = rng.randint(0, len(active) - 1)
        px, py = points[active[active_index]]
        found = False

        for _ in range(max_attempts):
            angle = rng.random() * math.pi * 2
            distance = rng.uniform(min_distance, min_distance * 2)
            nx = px + math.cos(angle) * distance
            ny = py + math.sin(angle) * distance
            if is_valid(nx, ny):
                add_point(nx, ny)
                found = True
                break

        if not found:
            active.pop(active_index)

    return points


def voronoi_regions(
    width: int, height: int, seeds: Sequence[tuple[float, float]]
) -> np.ndarray:
    """Assign every cell the index of its nearest seed (Manhattan distance).

    This is a cheap approximation for coarse region tagging, not an exact
    Voronoi diagram. Ties go to the lowest seed index.

    Returns:
        int32 array of shape (width, height), indexed [x, y]. All zeros when
        no seeds are given.
    """
    regions = np.zeros((width, height), dtype=np.int32, order="F")
    if not seeds or width <= 0 or height <= 0:
        return regions

    xs = np.arange(width, dtype=np.float64)[:, None]
    ys = np.arange(height, dtype=np.float64)[None, :]
    distances = np.stack(
        [np.abs(xs - sx) + np.abs(ys - sy) for sx, sy in seeds],
        axis=0,
    )
    # argmin returns the first index on ties
    regions[:, :] = np.argmin(distances, axis=0)
    return regions
