"""Grid search helpers: weighted A*, flood fill and connected regions."""

from __future__ import annotations

import heapq
import itertools
import math
from collections import deque

import numpy as np

from cryptforge import config
from cryptforge.types import WorldTilePos

CARDINAL_DIRECTIONS: tuple[tuple[int, int], ...] = ((0, -1), (1, 0), (0, 1), (-1, 0))
DIAGONAL_DIRECTIONS: tuple[tuple[int, int], ...] = (
    (1, -1),
    (1, 1),
    (-1, 1),
    (-1, -1),
)


class AStarPathfinder:
    """Weighted A* over a per-tile cost array.

    The cost array follows the usual roguelike convention: a value of 0 (or
    anything non-positive or non-finite) marks an impassable tile, any
    positive value is the cost of stepping onto that tile. Diagonal steps,
    when enabled, are scaled by ``config.DIAGONAL_STEP_COST``.

    The heuristic is Manhattan distance for 4-way movement and Euclidean
    distance for 8-way movement, multiplied by ``heuristic_weight``. A weight
    above 1 trades optimality for speed.

    Attributes:
        cost: Float array of shape (width, height), indexed [x, y].
        allow_diagonal: Whether 8-way movement is allowed.
        heuristic_weight: Multiplier applied to the heuristic.
    """

    def __init__(
        self,
        cost: np.ndarray,
        *,
        allow_diagonal: bool = False,
        heuristic_weight: float = 1.0,
    ) -> None:
        self.cost = cost
        self.width, self.height = cost.shape
        self.allow_diagonal = allow_diagonal
        self.heuristic_weight = heuristic_weight

    def is_walkable(self, x: int, y: int) -> bool:
        if not (0 <= x < self.width and 0 <= y < self.height):
            return False
        value = self.cost[x, y]
        return bool(np.isfinite(value) and value > 0)

    def _heuristic(self, a: WorldTilePos, b: WorldTilePos) -> float:
        dx = abs(a[0] - b[0])
        dy = abs(a[1] - b[1])
        if self.allow_diagonal:
            return math.hypot(dx, dy) * self.heuristic_weight
        return (dx + dy) * self.heuristic_weight

    def find_path(
        self, start: WorldTilePos, goal: WorldTilePos
    ) -> list[WorldTilePos] | None:
        """Find the cheapest path from start to goal.

        Args:
            start: Starting tile. Must be walkable.
            goal: Target tile. Must be walkable.

        Returns:
            List of tiles from start to goal inclusive, or None when either
            endpoint is blocked or the goal cannot be reached.
        """
        start = (int(start[0]), int(start[1]))
        goal = (int(goal[0]), int(goal[1]))
        if not self.is_walkable(*start) or not self.is_walkable(*goal):
            return None
        if start == goal:
            return [start]

        directions = CARDINAL_DIRECTIONS
        if self.allow_diagonal:
            directions = CARDINAL_DIRECTIONS + DIAGONAL_DIRECTIONS

        # The counter breaks f-score ties in insertion order
        counter = itertools.count()
        open_heap: list[tuple[float, int, WorldTilePos]] = [
            (self._heuristic(start, goal), next(counter), start)
        ]
        g_score: dict[WorldTilePos, float] = {start: 0.0}
        came_from: dict[WorldTilePos, WorldTilePos] = {}
        closed: set[WorldTilePos] = set()

        while open_heap:
            _, _, current = heapq.heappop(open_heap)
            if current == goal:
                return self._reconstruct(came_from, current)
            if current in closed:
                continue
            closed.add(current)

            cx, cy = current
            for dx, dy in directions:
                nx, ny = cx + dx, cy + dy
                if not self.is_walkable(nx, ny) or (nx, ny) in closed:
                    continue
                step = float(self.cost[nx, ny])
                if dx and dy:
                    step *= config.DIAGONAL_STEP_COST
                tentative = g_score[current] + step
                neighbor = (nx, ny)
                if tentative < g_score.get(neighbor, math.inf):
                    came_from[neighbor] = current
                    g_score[neighbor] = tentative
                    f_score = tentative + self._heuristic(neighbor, goal)
                    heapq.heappush(open_heap, (f_score, next(counter), neighbor))

        return None

    @staticmethod
    def _reconstruct(
        came_from: dict[WorldTilePos, WorldTilePos], current: WorldTilePos
    ) -> list[WorldTilePos]:
        path = [current]
        while current in came_from:
            current = came_from[current]
            path.append(current)
        path.reverse()
        return path


def flood_fill(mask: np.ndarray, start: WorldTilePos) -> np.ndarray:
    """Return the 4-connected region of True cells reachable from start.

    Args:
        mask: Boolean array of shape (width, height) marking passable cells.
        start: Starting cell.

    Returns:
        Boolean array of the same shape. All False if start is not passable.
    """
    width, height = mask.shape
    visited = np.zeros_like(mask, dtype=bool)
    sx, sy = start
    if not (0 <= sx < width and 0 <= sy < height) or not mask[sx, sy]:
        return visited

    queue: deque[WorldTilePos] = deque([(sx, sy)])
    visited[sx, sy] = True
    while queue:
        x, y = queue.popleft()
        for dx, dy in CARDINAL_DIRECTIONS:
            nx, ny = x + dx, y + dy
            if (
                0 <= nx < width
                and 0 <= ny < height
                and mask[nx, ny]
                and not visited[nx, ny]
            ):
                visited[nx, ny] = True
                queue.append((nx, ny))
    return visited


def connected_regions(mask: np.ndarray) -> list[list[WorldTilePos]]:
    """Split the True cells of a mask into 4-connected regions.

    Regions are listed in scan order (x-major) of their first cell.
    """
    width, height = mask.shape
    seen = np.zeros_like(mask, dtype=bool)
    regions: list[list[WorldTilePos]] = []

    for x in range(width):
        for y in range(height):
            if not mask[x, y] or seen[x, y]:
                continue
            region: list[WorldTilePos] = []
            queue: deque[WorldTilePos] = deque([(x, y)])
            seen[x, y] = True
            while queue:
                cx, cy = queue.popleft()
                region.append((cx, cy))
                for dx, dy in CARDINAL_DIRECTIONS:
                    nx, ny = cx + dx, cy + dy
                    if (
                        0 <= nx < width
                        and 0 <= ny < height
                        and mask[nx, ny]
                        and not seen[nx, ny]
                    ):
                        seen[nx, ny] = True
                        queue.append((nx, ny))
            regions.append(region)

    return regions
