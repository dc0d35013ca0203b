"""Minimum spanning tree connector and corridor carving.

Rooms (or any anchor points) are joined with the fewest, shortest links that
connect everything: Prim's algorithm over the complete graph of anchors.
Anchor counts are small (tens), so the O(N^2) dense form is used.

Equal-distance ties are broken by the order anchors joined the tree and
then by anchor index. That is not re-randomized, so the same anchors in
the same order always give the same tree.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal, TypeAlias

import numpy as np

from cryptforge import config
from cryptforge.environment.tile_types import BinaryMarker
from cryptforge.types import FloatPos, WorldTilePos
from cryptforge.util.coordinates import Room
from cryptforge.util.pathfinding import AStarPathfinder
from cryptforge.util.rng import SeededRandom

from .base import is_interior

logger = logging.getLogger(__name__)

DistanceMetric: TypeAlias = Literal["euclidean", "manhattan"]


@dataclass(frozen=True)
class Edge:
    """One MST edge between anchor indices ``a`` (in tree) and ``b`` (added)."""

    a: int
    b: int
    distance: float


@dataclass(frozen=True)
class Connection:
    """A carved corridor between two rooms.

    Attributes:
        source: Index of the room already in the tree.
        target: Index of the room the corridor brought in.
        cells: Centerline cells of the corridor, in order.
        doors: Door cells stamped where the corridor leaves a room.
        routed: True if the corridor was routed with A*, False for an L-shape.
    """

    source: int
    target: int
    cells: tuple[WorldTilePos, ...]
    doors: tuple[WorldTilePos, ...] = ()
    routed: bool = False


def point_distance(a: FloatPos, b: FloatPos, metric: DistanceMetric) -> float:
    if metric == "manhattan":
        return abs(a[0] - b[0]) + abs(a[1] - b[1])
    if metric == "euclidean":
        return math.hypot(a[0] - b[0], a[1] - b[1])
    raise ValueError(f"Unknown distance metric: {metric!r}")


def minimum_spanning_tree(
    points: Sequence[FloatPos], metric: DistanceMetric = "euclidean"
) -> list[Edge]:
    """Prim's algorithm over the complete graph of ``points``.

    Point 0 seeds the tree. Each round adds the outside point closest to the
    tree. Ties prefer the tree point that joined earliest, then the lowest
    outside index.

    Returns:
        Exactly ``max(0, len(points) - 1)`` edges, in the order they were added.
    """
    count = len(points)
    if count < 2:
        return []

    # For each outside point: best distance to the tree and the join rank of
    # the tree point achieving it. Updating only on strict improvement keeps
    # the earliest-joined tree point on ties.
    best_distance = [math.inf] * count
    best_parent = [-1] * count
    best_parent_rank = [count] * count
    in_tree = [False] * count
    in_tree[0] = True

    def relax(tree_index: int, rank: int) -> None:
        for j in range(count):
            if in_tree[j]:
                continue
            distance = point_distance(points[tree_index], points[j], metric)
            if distance < best_distance[j]:
                best_distance[j] = distance
                best_parent[j] = tree_index
                best_parent_rank[j] = rank

    relax(0, 0)
    edges: list[Edge] = []
    for rank in range(1, count):
        chosen = -1
        for j in range(count):
            if in_tree[j]:
                continue
            if chosen == -1 or (best_distance[j], best_parent_rank[j]) < (
                best_distance[chosen],
                best_parent_rank[chosen],
            ):
                chosen = j
        in_tree[chosen] = True
        edges.append(Edge(best_parent[chosen], chosen, best_distance[chosen]))
        relax(chosen, rank)

    return edges


def room_anchor(room: Room) -> FloatPos:
    """Distance anchor for a room: its explicit center, else its true midpoint."""
    if room.center_x is not None and room.center_y is not None:
        return (float(room.center_x), float(room.center_y))
    return (room.x + room.width / 2, room.y + room.height / 2)


def room_exit(room: Room, target: FloatPos) -> WorldTilePos:
    """The boundary cell a corridor should leave ``room`` from to reach ``target``.

    The exit is on the edge facing the dominant axis of the offset from the
    room's midpoint to the target, level with the midpoint.
    """
    cx = room.x + room.width / 2
    cy = room.y + room.height / 2
    dx = target[0] - cx
    dy = target[1] - cy
    if abs(dx) > abs(dy):
        return (room.x + room.width - 1 if dx > 0 else room.x, math.floor(cy))
    return (math.floor(cx), room.y + room.height - 1 if dy > 0 else room.y)


# =============================================================================
# CARVING
# =============================================================================


def _width_offsets(width: int) -> range:
    # width 2 -> (-1, 0): the extra lane sits on the negative side
    return range(-(width // 2), width - width // 2)


def _carve_cell(grid: np.ndarray, x: int, y: int, fill: int) -> None:
    if is_interior(grid, x, y):
        grid[x, y] = fill


def _carve_lane(
    grid: np.ndarray,
    cells: Sequence[WorldTilePos],
    width: int,
    fill: int,
) -> None:
    """Carve a centerline with a square brush of the given width."""
    offsets = _width_offsets(max(1, width))
    for x, y in cells:
        for ox in offsets:
            for oy in offsets:
                _carve_cell(grid, x + ox, y + oy, fill)


def l_shape(
    start: WorldTilePos, end: WorldTilePos, horizontal_first: bool
) -> list[WorldTilePos]:
    """Centerline cells of an L-shaped corridor from start to end."""
    x1, y1 = start
    x2, y2 = end
    step_x = 1 if x2 >= x1 else -1
    step_y = 1 if y2 >= y1 else -1
    cells: list[WorldTilePos] = []
    if horizontal_first:
        cells.extend((x, y1) for x in range(x1, x2 + step_x, step_x))
        cells.extend((x2, y) for y in range(y1 + step_y, y2 + step_y, step_y))
    else:
        cells.extend((x1, y) for y in range(y1, y2 + step_y, step_y))
        cells.extend((x, y2) for x in range(x1 + step_x, x2 + step_x, step_x))
    return cells


def carve_corridor(
    grid: np.ndarray,
    start: WorldTilePos,
    end: WorldTilePos,
    *,
    width: int = config.BSP_CORRIDOR_WIDTH,
    horizontal_first: bool = True,
    widen_turns: bool = False,
    fill: int = BinaryMarker.FLOOR,
) -> list[WorldTilePos]:
    """Carve an L-shaped corridor into the interior of a marker grid.

    Each leg is widened perpendicular to its direction: a width-2 corridor
    running east gets an extra lane on its north side, matching the classic
    look. With ``widen_turns`` the inside corner of the bend is opened too.

    Returns:
        The corridor's centerline cells, start to end.
    """
    cells = l_shape(start, end, horizontal_first)
    offsets = _width_offsets(max(1, width))
    x1, y1 = start
    x2, y2 = end
    corner = (x2, y1) if horizontal_first else (x1, y2)

    for x, y in cells:
        if horizontal_first:
            horizontal_leg = y == y1
        else:
            horizontal_leg = y == y2 and (x, y) != (x1, y2)
        for offset in offsets:
            if horizontal_leg:
                _carve_cell(grid, x, y + offset, fill)
            else:
                _carve_cell(grid, x + offset, y, fill)

    if widen_turns and x1 != x2 and y1 != y2:
        cx, cy = corner
        if horizontal_first:
            inside = (cx - (1 if x2 > x1 else -1), cy + (1 if y2 > y1 else -1))
        else:
            inside = (cx + (1 if x2 > x1 else -1), cy - (1 if y2 > y1 else -1))
        _carve_cell(grid, inside[0], inside[1], fill)

    return cells


def _first_cell_outside(
    cells: Sequence[WorldTilePos], room: Room
) -> WorldTilePos | None:
    for cell in cells:
        if not room.contains(*cell):
            return cell
    return None


def _stamp_doors(
    grid: np.ndarray,
    rooms: Sequence[Room],
    source: Room,
    target: Room,
    cells: list[WorldTilePos],
) -> list[WorldTilePos]:
    doors: list[WorldTilePos] = []
    for room, lane in ((source, cells), (target, list(reversed(cells)))):
        cell = _first_cell_outside(lane, room)
        if cell is None or not is_interior(grid, *cell):
            continue
        # A door inside another room would just be a tile in the floor
        if any(other.contains(*cell) for other in rooms):
            continue
        if grid[cell] == BinaryMarker.FLOOR:
            doors.append(cell)
    return doors


def connect_rooms(
    grid: np.ndarray,
    rooms: Sequence[Room],
    rng: SeededRandom,
    *,
    metric: DistanceMetric = "manhattan",
    corridor_width: int = config.BSP_CORRIDOR_WIDTH,
    widen_turns: bool = False,
    add_doors: bool = False,
    blocked: np.ndarray | None = None,
) -> list[Connection]:
    """Join every room to the others along a minimum spanning tree.

    Each tree edge becomes a corridor between room centers. A coin flip per
    edge decides which leg of the L comes first. When a ``blocked`` mask is
    given, corridors are routed with A* around the blocked cells instead,
    falling back to the L-shape when no route exists.

    Doors are stamped after all corridors are carved so later corridors
    cannot erase them.

    Returns:
        One Connection per tree edge.
    """
    if len(rooms) < 2:
        return []

    edges = minimum_spanning_tree([room_anchor(room) for room in rooms], metric)
    pathfinder = None
    if blocked is not None:
        cost = np.where(blocked, 0, 1).astype(np.float32)
        pathfinder = AStarPathfinder(cost)

    connections: list[Connection] = []
    for edge in edges:
        source = rooms[edge.a]
        target = rooms[edge.b]
        start = source.center
        end = target.center
        horizontal_first = rng.random() > 0.5

        path = None
        if pathfinder is not None:
            # Endpoints sit inside rooms and must be enterable
            pathfinder.cost[start] = 1
            pathfinder.cost[end] = 1
            path = pathfinder.find_path(start, end)

        if path is not None:
            _carve_lane(grid, path, corridor_width, BinaryMarker.FLOOR)
            cells = path
        else:
            if pathfinder is not None:
                logger.debug(
                    "No routed corridor from %s to %s; using L-shape", start, end
                )
            cells = carve_corridor(
                grid,
                start,
                end,
                width=corridor_width,
                horizontal_first=horizontal_first,
                widen_turns=widen_turns,
            )
        connections.append(
            Connection(edge.a, edge.b, tuple(cells), routed=path is not None)
        )

    if add_doors:
        stamped: list[Connection] = []
        for connection in connections:
            doors = _stamp_doors(
                grid,
                rooms,
                rooms[connection.source],
                rooms[connection.target],
                list(connection.cells),
            )
            for door in doors:
                grid[door] = BinaryMarker.DOOR
            stamped.append(
                Connection(
                    connection.source,
                    connection.target,
                    connection.cells,
                    tuple(doors),
                    connection.routed,
                )
            )
        connections = stamped

    return connections
