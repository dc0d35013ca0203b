"""Shared types and helpers for the layout generators."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

import numpy as np

from cryptforge import config
from cryptforge.environment.tile_types import (
    MARKER_CHARS,
    BinaryMarker,
    walkable_marker_mask,
)
from cryptforge.types import RandomSeed, TileCoord, WorldTilePos
from cryptforge.util.coordinates import Room, manhattan
from cryptforge.util.rng import SeededRandom

if TYPE_CHECKING:
    from .connector import Connection


@dataclass(frozen=True)
class Stairs:
    """Stairs placement. Either end is None when no spot could be found."""

    up: WorldTilePos | None = None
    down: WorldTilePos | None = None

    def to_dict(self) -> dict[str, dict[str, int] | None]:
        def point(pos: WorldTilePos | None) -> dict[str, int] | None:
            return None if pos is None else {"x": pos[0], "y": pos[1]}

        return {"up": point(self.up), "down": point(self.down)}


@dataclass
class GeneratedLayout:
    """Output of a layout generator.

    Attributes:
        grid: uint8 array of BinaryMarker values. Shape: (width, height).
        width: Grid width in tiles.
        height: Grid height in tiles.
        rooms: Rooms carved by the generator, in creation order.
        stairs: Stairs up/down positions.
        algorithm: Name of the algorithm that produced the layout.
        seed: The normalized seed the generator ran with.
        connections: Corridors carved by the connector, for diagnostics.
    """

    grid: np.ndarray
    width: int
    height: int
    rooms: list[Room]
    stairs: Stairs
    algorithm: str
    seed: int
    connections: list[Connection] = field(default_factory=list)

    def walkable_mask(self) -> np.ndarray:
        return walkable_marker_mask(self.grid)

    def floor_count(self) -> int:
        return int(np.count_nonzero(self.walkable_mask()))

    def to_dict(self) -> dict[str, Any]:
        """Plain-data form with a row-major ([y][x]) grid."""
        return {
            "grid": self.grid.T.tolist(),
            "width": self.width,
            "height": self.height,
            "rooms": [room.to_dict() for room in self.rooms],
            "stairs": self.stairs.to_dict(),
            "algorithm": self.algorithm,
            "seed": self.seed,
        }


class BaseLayoutGenerator(abc.ABC):
    """Abstract base class for layout generators.

    Subclasses implement ``generate()``. Each instance owns its own
    SeededRandom, so generating twice from fresh instances with the same seed
    gives identical layouts.
    """

    algorithm: ClassVar[str] = ""

    def __init__(
        self, map_width: TileCoord, map_height: TileCoord, seed: RandomSeed = None
    ) -> None:
        if (
            map_width < config.MIN_CANVAS_DIMENSION
            or map_height < config.MIN_CANVAS_DIMENSION
        ):
            raise ValueError(
                f"Layouts need at least {config.MIN_CANVAS_DIMENSION}x"
                f"{config.MIN_CANVAS_DIMENSION} tiles, got {map_width}x{map_height}"
            )
        self.map_width = map_width
        self.map_height = map_height
        self.rng = SeededRandom(seed)
        self.seed = self.rng.seed

    @abc.abstractmethod
    def generate(self) -> GeneratedLayout:
        """Generate a layout."""
        raise NotImplementedError

    def _new_grid(self) -> np.ndarray:
        return np.full(
            (self.map_width, self.map_height),
            fill_value=BinaryMarker.WALL,
            dtype=np.uint8,
            order="F",
        )

    def _layout(
        self,
        grid: np.ndarray,
        rooms: list[Room],
        stairs: Stairs,
        connections: list[Connection] | None = None,
    ) -> GeneratedLayout:
        return GeneratedLayout(
            grid=grid,
            width=self.map_width,
            height=self.map_height,
            rooms=rooms,
            stairs=stairs,
            algorithm=self.algorithm,
            seed=self.seed,
            connections=connections or [],
        )


# =============================================================================
# CARVING
# =============================================================================


def carve_room(grid: np.ndarray, room: Room) -> None:
    """Carve a room to floor, leaving the outermost grid ring untouched."""
    width, height = grid.shape
    x1 = max(room.x, 1)
    y1 = max(room.y, 1)
    x2 = min(room.x + room.width, width - 1)
    y2 = min(room.y + room.height, height - 1)
    if x1 < x2 and y1 < y2:
        grid[x1:x2, y1:y2] = BinaryMarker.FLOOR


def is_interior(grid: np.ndarray, x: int, y: int) -> bool:
    """True if (x, y) is inside the grid and not on its outer ring."""
    width, height = grid.shape
    return 0 < x < width - 1 and 0 < y < height - 1


# =============================================================================
# STAIRS
# =============================================================================


def place_stairs_in_rooms(
    grid: np.ndarray,
    rooms: list[Room],
    rng: SeededRandom,
    avoid: Room | None = None,
) -> Stairs:
    """Put stairs up in one random room and stairs down in another.

    Rooms are shuffled; up goes to the first room's center and down to the
    last one's. When both land on the same cell (one room, or overlapping
    rooms sharing a center) down moves to the walkable cell of its room
    farthest from up.

    Args:
        grid: Marker grid to write the stairs into.
        rooms: Candidate rooms.
        rng: Random source for the room order.
        avoid: Optional area stairs must stay out of. Rooms lying wholly
            inside it are skipped, and a room whose center it covers uses its
            uncovered cell nearest that center.
    """
    walkable = walkable_marker_mask(grid)
    if avoid is not None:
        rooms = [room for room in rooms if _room_cells(grid, room, walkable, avoid)]
    if not rooms:
        return Stairs()

    order = rng.shuffled(rooms)
    up = _room_anchor(grid, order[0], walkable, avoid)
    down_room = order[-1]
    down: WorldTilePos | None = _room_anchor(grid, down_room, walkable, avoid)

    if down == up:
        candidates = [
            cell
            for cell in _room_cells(grid, down_room, walkable, avoid)
            if cell != up
        ]
        down = _farthest(up, candidates)

    grid[up] = BinaryMarker.STAIRS_UP
    if down is not None:
        grid[down] = BinaryMarker.STAIRS_DOWN
    return Stairs(up=up, down=down)


def _room_cells(
    grid: np.ndarray, room: Room, walkable: np.ndarray, avoid: Room | None = None
) -> list[WorldTilePos]:
    return [
        (x, y)
        for x in range(room.x, room.x + room.width)
        for y in range(room.y, room.y + room.height)
        if is_interior(grid, x, y)
        and walkable[x, y]
        and (avoid is None or not avoid.contains(x, y))
    ]


def _room_anchor(
    grid: np.ndarray, room: Room, walkable: np.ndarray, avoid: Room | None
) -> WorldTilePos:
    center = room.center
    if avoid is None or not avoid.contains(*center):
        return center
    cells = _room_cells(grid, room, walkable, avoid)
    return min(cells, key=lambda cell: manhattan(cell, center))


def place_stairs_far_apart(
    grid: np.ndarray, rng: SeededRandom, margin: int = config.CAVE_STAIRS_MARGIN
) -> Stairs:
    """Put stairs on two floor cells that are far apart.

    Double sweep: pick a random floor cell, take the floor cell farthest from
    it as stairs up, then the floor cell farthest from that as stairs down.
    Distances are Manhattan, so this is a greedy estimate and not the true
    diameter of the cave. Cells within ``margin`` of the edge are avoided
    unless that leaves fewer than two candidates.
    """
    width, height = grid.shape
    floor = grid == BinaryMarker.FLOOR
    inner = np.zeros_like(floor)
    inner[margin : width - margin, margin : height - margin] = True

    xs, ys = np.nonzero(floor & inner)
    if len(xs) < 2:
        xs, ys = np.nonzero(floor)
    if len(xs) < 2:
        return Stairs()

    cells = [(int(x), int(y)) for x, y in zip(xs, ys, strict=True)]
    start = rng.choice(cells)
    up = _farthest(start, cells)
    down = _farthest(up, cells) if up is not None else None
    if up is None or down is None or up == down:
        return Stairs()

    grid[up] = BinaryMarker.STAIRS_UP
    grid[down] = BinaryMarker.STAIRS_DOWN
    return Stairs(up=up, down=down)


def _farthest(
    origin: WorldTilePos, cells: list[WorldTilePos]
) -> WorldTilePos | None:
    best: WorldTilePos | None = None
    best_distance = -1
    for cell in cells:
        distance = abs(cell[0] - origin[0]) + abs(cell[1] - origin[1])
        if distance > best_distance:
            best = cell
            best_distance = distance
    return best


# =============================================================================
# DEBUG OUTPUT
# =============================================================================


def visualize_layout(layout: GeneratedLayout | np.ndarray) -> str:
    """ASCII render of a marker grid, one text row per y."""
    grid = layout.grid if isinstance(layout, GeneratedLayout) else layout
    width, height = grid.shape
    return "\n".join(
        "".join(MARKER_CHARS.get(int(grid[x, y]), "?") for x in range(width))
        for y in range(height)
    )
