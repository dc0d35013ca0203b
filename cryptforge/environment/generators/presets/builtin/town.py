"""Settlement presets."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from cryptforge import config
from cryptforge.environment.canvas import PROTECTED_TAGS, Canvas, CellTag
from cryptforge.environment.generators.connector import (
    minimum_spanning_tree,
    room_anchor,
)
from cryptforge.types import WorldTilePos
from cryptforge.util.coordinates import Room
from cryptforge.util.sampling import poisson_disk_sampling

from ..base import ParamSpec, PresetDefinition

if TYPE_CHECKING:
    from cryptforge.environment.tile_types import TilePalette
    from cryptforge.util.rng import SeededRandom


def draw_building(
    canvas: Canvas,
    room: Room,
    palette: TilePalette,
    rng: SeededRandom,
    *,
    door: bool = True,
) -> WorldTilePos | None:
    """Stone walls around a cobblestone floor, with a door at bottom center.

    Every cell of the footprint is tagged structure; walls also get wall,
    the door gets door.

    Returns:
        The door position, or None if no door was placed.
    """
    for x in range(room.x, room.x + room.width):
        for y in range(room.y, room.y + room.height):
            edge = (
                x == room.x
                or x == room.x + room.width - 1
                or y == room.y
                or y == room.y + room.height - 1
            )
            if edge:
                canvas.set_tile(
                    x,
                    y,
                    palette.pick("wall_stone", rng),
                    CellTag.STRUCTURE,
                    CellTag.WALL,
                )
            else:
                canvas.set_tile(
                    x,
                    y,
                    palette.pick("cobblestone", rng),
                    CellTag.STRUCTURE,
                    CellTag.FLOOR,
                )

    if not door:
        return None
    door_pos = (room.x + room.width // 2, room.y + room.height - 1)
    if not canvas.in_bounds(*door_pos):
        return None
    canvas.clear_tags(*door_pos, CellTag.WALL)
    canvas.set_tile(*door_pos, palette.first("door"), CellTag.STRUCTURE, CellTag.DOOR)
    return door_pos


class TownClusterPreset(PresetDefinition):
    """Houses scattered by Poisson sampling, joined by dirt lanes, around a well."""

    name = "town_cluster"
    category = "town"
    description = "A cluster of houses arranged naturally with connecting paths"
    params = {
        "count": ParamSpec("int", 8, 3, 20, description="Number of houses"),
        "radius": ParamSpec("int", 6, 3, 15, description="Cluster radius"),
        "center_x": ParamSpec(
            "int", description="Center X (defaults to canvas center)"
        ),
        "center_y": ParamSpec(
            "int", description="Center Y (defaults to canvas center)"
        ),
        "house_min_size": ParamSpec("int", 3, 2, 5),
        "house_max_size": ParamSpec("int", 5, 3, 8),
        "has_well": ParamSpec("bool", True),
        "path_width": ParamSpec("int", 2, 1, 3),
    }

    def generate(
        self, canvas: Canvas, params: Mapping[str, Any], rng: SeededRandom
    ) -> dict[str, Any]:
        center_x, center_y = self.anchor(canvas, params)
        radius = params["radius"]
        min_size = params["house_min_size"]
        max_size = max(min_size, params["house_max_size"])

        positions = poisson_disk_sampling(
            radius * 2,
            radius * 2,
            max(max_size + 1, 4),
            config.POISSON_MAX_ATTEMPTS,
            rng,
        )

        houses: list[Room] = []
        doors: list[WorldTilePos] = []
        offset_x = center_x - radius
        offset_y = center_y - radius
        for px, py in positions[: params["count"]]:
            house_w = rng.randint(min_size, max_size)
            house_h = rng.randint(min_size, max_size)
            house_x = math.floor(offset_x + px - house_w / 2)
            house_y = math.floor(offset_y + py - house_h / 2)
            if (
                house_x < 1
                or house_y < 1
                or house_x + house_w >= canvas.width - 1
                or house_y + house_h >= canvas.height - 1
            ):
                continue

            house = Room(house_x, house_y, house_w, house_h, type="house")
            door = draw_building(canvas, house, self.palette, rng)
            if door is not None:
                doors.append(door)
            houses.append(house)
            canvas.rooms.append(house)

        lanes = 0
        if len(houses) > 1:
            anchors = [room_anchor(house) for house in houses]
            for edge in minimum_spanning_tree(anchors, "euclidean"):
                self._draw_lane(
                    canvas, anchors[edge.a], anchors[edge.b], params["path_width"], rng
                )
                lanes += 1

        if params["has_well"] and canvas.in_bounds(center_x, center_y):
            self._place_well(canvas, center_x, center_y, rng)

        return {
            "houses": [house.to_dict() for house in houses],
            "house_count": len(houses),
            "doors": doors,
            "lanes": lanes,
            "center": {"x": center_x, "y": center_y},
        }

    def _draw_lane(
        self,
        canvas: Canvas,
        start: tuple[float, float],
        end: tuple[float, float],
        width: int,
        rng: SeededRandom,
    ) -> None:
        """Three-leg lane: across to the midpoint column, down, then across."""
        x1, y1 = round(start[0]), round(start[1])
        x2, y2 = round(end[0]), round(end[1])
        mid_x = round((start[0] + end[0]) / 2)

        for x in range(min(x1, mid_x), max(x1, mid_x) + 1):
            for w in range(width):
                self._lane_cell(canvas, x, y1 + w, rng)
        for y in range(min(y1, y2), max(y1, y2) + 1):
            for w in range(width):
                self._lane_cell(canvas, mid_x + w, y, rng)
        for x in range(min(mid_x, x2), max(mid_x, x2) + 1):
            for w in range(width):
                self._lane_cell(canvas, x, y2 + w, rng)

    def _lane_cell(self, canvas: Canvas, x: int, y: int, rng: SeededRandom) -> None:
        # Lanes run between houses, never through their walls or doors
        if canvas.in_bounds(x, y) and not canvas.has_tag(
            x, y, CellTag.WALL, CellTag.DOOR
        ):
            canvas.set_tile(x, y, self.palette.pick("dirt", rng), CellTag.PATH)

    def _place_well(self, canvas: Canvas, x: int, y: int, rng: SeededRandom) -> None:
        canvas.set_tile(x, y, self.palette.first("well"), CellTag.STRUCTURE)
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                if (dx or dy) and not canvas.has_tag(x + dx, y + dy, PROTECTED_TAGS):
                    canvas.set_tile(
                        x + dx,
                        y + dy,
                        self.palette.pick("cobblestone", rng),
                        CellTag.PATH,
                    )
