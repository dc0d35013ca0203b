"""Rectangles, room descriptors and bounds helpers in tile coordinates."""

from __future__ import annotations

from dataclasses import dataclass

from cryptforge.types import TileCoord, WorldTilePos


class Rect:
    """Rectangle/bounding box in tile coordinates. x2/y2 are exclusive."""

    def __init__(self, x: TileCoord, y: TileCoord, w: TileCoord, h: TileCoord) -> None:
        self.x1: TileCoord = x
        self.y1: TileCoord = y
        self.x2: TileCoord = x + w
        self.y2: TileCoord = y + h

    @classmethod
    def from_bounds(
        cls, x1: TileCoord, y1: TileCoord, x2: TileCoord, y2: TileCoord
    ) -> Rect:
        """Create a Rect from corner coordinates (x1, y1, x2, y2)."""
        return cls(x1, y1, x2 - x1, y2 - y1)

    @property
    def width(self) -> TileCoord:
        return self.x2 - self.x1

    @property
    def height(self) -> TileCoord:
        return self.y2 - self.y1

    def center(self) -> tuple[int, int]:
        return (int((self.x1 + self.x2) / 2), int((self.y1 + self.y2) / 2))

    def contains(self, x: TileCoord, y: TileCoord) -> bool:
        return self.x1 <= x < self.x2 and self.y1 <= y < self.y2

    def intersects(self, other: Rect) -> bool:
        return (
            self.x1 <= other.x2
            and self.x2 >= other.x1
            and self.y1 <= other.y2
            and self.y2 >= other.y1
        )

    def cells(self) -> list[WorldTilePos]:
        """All tile positions covered by the rectangle."""
        return [
            (x, y) for x in range(self.x1, self.x2) for y in range(self.y1, self.y2)
        ]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Rect):
            return NotImplemented
        return (self.x1, self.y1, self.x2, self.y2) == (
            other.x1,
            other.y1,
            other.x2,
            other.y2,
        )

    def __hash__(self) -> int:
        return hash((self.x1, self.y1, self.x2, self.y2))

    def __repr__(self) -> str:
        return f"Rect(x1={self.x1}, y1={self.y1}, x2={self.x2}, y2={self.y2})"


@dataclass(frozen=True)
class Room:
    """Immutable description of a room or structure footprint.

    Produced by layout generators and presets, consumed by the connector and
    path weaver.

    Attributes:
        x: Left edge in tiles.
        y: Top edge in tiles.
        width: Footprint width in tiles.
        height: Footprint height in tiles.
        center_x: Explicit anchor x. Defaults to the geometric center.
        center_y: Explicit anchor y. Defaults to the geometric center.
        type: Optional tag such as "arena", "satellite" or "house".
    """

    x: TileCoord
    y: TileCoord
    width: TileCoord
    height: TileCoord
    center_x: TileCoord | None = None
    center_y: TileCoord | None = None
    type: str | None = None

    @property
    def center(self) -> WorldTilePos:
        cx = self.center_x if self.center_x is not None else self.x + self.width // 2
        cy = self.center_y if self.center_y is not None else self.y + self.height // 2
        return (cx, cy)

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    def contains(self, x: TileCoord, y: TileCoord) -> bool:
        return self.x <= x < self.x + self.width and self.y <= y < self.y + self.height

    def to_dict(self) -> dict[str, object]:
        cx, cy = self.center
        data: dict[str, object] = {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "centerX": cx,
            "centerY": cy,
        }
        if self.type is not None:
            data["type"] = self.type
        return data


# =============================================================================
# BOUNDS CHECKING HELPERS
# =============================================================================


def is_valid_world_tile_pos(
    pos: WorldTilePos, map_width: TileCoord, map_height: TileCoord
) -> bool:
    """Check if world tile position is within map bounds."""
    x, y = pos
    return 0 <= x < map_width and 0 <= y < map_height


def clamp_to_bounds(
    pos: tuple[float, float], map_width: TileCoord, map_height: TileCoord
) -> WorldTilePos:
    """Round a position and clamp it onto the map."""
    x, y = pos
    return (
        min(max(int(round(x)), 0), map_width - 1),
        min(max(int(round(y)), 0), map_height - 1),
    )


def manhattan(a: tuple[float, float], b: tuple[float, float]) -> float:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])
