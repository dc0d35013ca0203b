from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from cryptforge.environment.tile_types import walkable_marker_mask
from cryptforge.util.pathfinding import connected_regions


def walkable_regions(grid: np.ndarray) -> list[list[tuple[int, int]]]:
    """Cardinally connected walkable regions of a marker grid."""
    return connected_regions(walkable_marker_mask(grid))


def is_fully_connected(grid: np.ndarray) -> bool:
    """True if every walkable cell of a marker grid is reachable from every other."""
    return len(walkable_regions(grid)) <= 1


def min_pairwise_distance(points: Sequence[tuple[float, float]]) -> float:
    """Smallest Euclidean distance between any two points."""
    best = float("inf")
    for i, (ax, ay) in enumerate(points):
        for bx, by in points[i + 1 :]:
            best = min(best, float(np.hypot(ax - bx, ay - by)))
    return best


def is_spanning_tree(node_count: int, edges: Sequence[tuple[int, int]]) -> bool:
    """True if the edges connect all nodes with no cycle."""
    if len(edges) != max(0, node_count - 1):
        return False
    parent = list(range(node_count))

    def find(i: int) -> int:
        while parent[i] != i:
            parent[i] = parent[parent[i]]
            i = parent[i]
        return i

    for a, b in edges:
        ra, rb = find(a), find(b)
        if ra == rb:
            return False
        parent[ra] = rb
    return True
