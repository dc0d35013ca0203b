"""Dungeon presets: room clusters and arena chambers."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from cryptforge import config
from cryptforge.environment.canvas import Canvas, CellTag
from cryptforge.environment.generators.connector import (
    minimum_spanning_tree,
    room_anchor,
)
from cryptforge.types import WorldTilePos
from cryptforge.util.coordinates import Room
from cryptforge.util.sampling import poisson_disk_sampling

from ..base import ParamSpec, PresetDefinition

if TYPE_CHECKING:
    from cryptforge.util.rng import SeededRandom

# (dx, dy, name) for arena entrances
ENTRANCE_DIRECTIONS: tuple[tuple[int, int, str], ...] = (
    (0, -1, "north"),
    (0, 1, "south"),
    (-1, 0, "west"),
    (1, 0, "east"),
)


class RoomClusterPreset(PresetDefinition):
    """Rooms at Poisson-spaced positions, joined by L-shaped corridors.

    Room interiors are tagged floor and structure; corridors floor and path.
    """

    name = "room_cluster"
    category = "dungeon"
    description = "A cluster of connected dungeon rooms"
    params = {
        "room_count": ParamSpec("int", 5, 2, 12),
        "room_min_size": ParamSpec("int", 4, 3, 8),
        "room_max_size": ParamSpec("int", 8, 4, 15),
        "center_x": ParamSpec("int"),
        "center_y": ParamSpec("int"),
        "spread": ParamSpec("int", 10, 5, 20),
        "corridor_width": ParamSpec("int", 2, 1, 3),
        "add_doors": ParamSpec("bool", True),
    }

    def generate(
        self, canvas: Canvas, params: Mapping[str, Any], rng: SeededRandom
    ) -> dict[str, Any]:
        center_x, center_y = self.anchor(canvas, params)
        spread = params["spread"]
        min_size = params["room_min_size"]
        max_size = max(min_size, params["room_max_size"])

        positions = poisson_disk_sampling(
            spread * 2, spread * 2, max_size + 2, config.POISSON_MAX_ATTEMPTS, rng
        )

        rooms: list[Room] = []
        for px, py in positions[: params["room_count"]]:
            room_w = rng.randint(min_size, max_size)
            room_h = rng.randint(min_size, max_size)
            room_x = math.floor(center_x - spread + px - room_w / 2)
            room_y = math.floor(center_y - spread + py - room_h / 2)
            if (
                room_x < 1
                or room_y < 1
                or room_x + room_w >= canvas.width - 1
                or room_y + room_h >= canvas.height - 1
            ):
                continue

            room = Room(room_x, room_y, room_w, room_h, type="room")
            for x, y in room.rect.cells():
                canvas.set_tile(
                    x,
                    y,
                    self.palette.pick("floor", rng),
                    CellTag.FLOOR,
                    CellTag.STRUCTURE,
                )
            rooms.append(room)
            canvas.rooms.append(room)

        doors: list[WorldTilePos] = []
        if len(rooms) > 1:
            anchors = [room_anchor(room) for room in rooms]
            for edge in minimum_spanning_tree(anchors, "euclidean"):
                door = self._corridor(
                    canvas, rooms[edge.a], rooms[edge.b], params, rng
                )
                if door is not None:
                    doors.append(door)

        return {
            "rooms": [room.to_dict() for room in rooms],
            "room_count": len(rooms),
            "doors": doors,
        }

    def _corridor(
        self,
        canvas: Canvas,
        source: Room,
        target: Room,
        params: Mapping[str, Any],
        rng: SeededRandom,
    ) -> WorldTilePos | None:
        """Carve an L between room midpoints; return the door stamped at the source."""
        sx, sy = room_anchor(source)
        tx, ty = room_anchor(target)
        x1, y1, x2, y2 = math.floor(sx), math.floor(sy), math.floor(tx), math.floor(ty)
        width = params["corridor_width"]

        horizontal_first = rng.random() > 0.5
        if horizontal_first:
            self._carve_run(canvas, x1, x2, y1, width, horizontal=True, rng=rng)
            self._carve_run(canvas, y1, y2, x2, width, horizontal=False, rng=rng)
        else:
            self._carve_run(canvas, y1, y2, x1, width, horizontal=False, rng=rng)
            self._carve_run(canvas, x1, x2, y2, width, horizontal=True, rng=rng)

        if not params["add_doors"]:
            return None
        if horizontal_first:
            door = (source.x + source.width if x1 < x2 else source.x - 1, y1)
        else:
            door = (x1, source.y + source.height if y1 < y2 else source.y - 1)
        if not canvas.in_bounds(*door):
            return None
        canvas.set_tile(*door, self.palette.first("door"), CellTag.DOOR)
        return door

    def _carve_run(
        self,
        canvas: Canvas,
        a: int,
        b: int,
        fixed: int,
        width: int,
        *,
        horizontal: bool,
        rng: SeededRandom,
    ) -> None:
        for along in range(min(a, b), max(a, b) + 1):
            for w in range(width):
                across = fixed + w - width // 2
                x, y = (along, across) if horizontal else (across, along)
                if canvas.in_bounds(x, y) and not canvas.has_tag(x, y, CellTag.DOOR):
                    canvas.set_tile(
                        x,
                        y,
                        self.palette.pick("floor", rng),
                        CellTag.FLOOR,
                        CellTag.PATH,
                    )


class ArenaChamberPreset(PresetDefinition):
    """An open floor with a pillar lattice and up to four entrances.

    The lattice skips the middle of the arena so the center stays open.
    Entrance sides are chosen in a shuffled order.
    """

    name = "arena_chamber"
    category = "dungeon"
    description = "A combat arena with pillars and optional features"
    params = {
        "width": ParamSpec("int", 16, 10, 30),
        "height": ParamSpec("int", 16, 10, 30),
        "center_x": ParamSpec("int"),
        "center_y": ParamSpec("int"),
        "pillar_spacing": ParamSpec("int", 4, 3, 8),
        "has_pillars": ParamSpec("bool", True),
        "entrances": ParamSpec("int", 4, 1, 4),
        "entrance_width": ParamSpec("int", 3, 2, 5),
    }

    def generate(
        self, canvas: Canvas, params: Mapping[str, Any], rng: SeededRandom
    ) -> dict[str, Any]:
        palette = self.palette
        center_x, center_y = self.anchor(canvas, params)
        width, height = params["width"], params["height"]
        arena = Room(
            center_x - width // 2, center_y - height // 2, width, height, type="arena"
        )

        for x, y in arena.rect.cells():
            canvas.set_tile(x, y, palette.pick("floor", rng), CellTag.FLOOR)
        canvas.rooms.append(arena)

        pillars: list[WorldTilePos] = []
        if params["has_pillars"]:
            spacing = params["pillar_spacing"]
            clearance = config.ARENA_CENTER_CLEARANCE
            for y in range(arena.y + 2, arena.y + height - 2, spacing):
                for x in range(arena.x + 2, arena.x + width - 2, spacing):
                    if not canvas.in_bounds(x, y):
                        continue
                    if math.hypot(x - center_x, y - center_y) <= clearance:
                        continue
                    canvas.set_tile(
                        x, y, palette.first("pillar"), CellTag.WALL, CellTag.STRUCTURE
                    )
                    pillars.append((x, y))

        entrance_width = params["entrance_width"]
        entrances: list[dict[str, Any]] = []
        chosen = rng.shuffled(ENTRANCE_DIRECTIONS)[: params["entrances"]]
        for dx, dy, direction in chosen:
            if dx == 0:
                ex = center_x - entrance_width // 2
                ey = arena.y - 1 if dy < 0 else arena.y + height
            else:
                ex = arena.x - 1 if dx < 0 else arena.x + width
                ey = center_y - entrance_width // 2
            for w in range(entrance_width):
                x = ex + (w if dx == 0 else 0)
                y = ey + (w if dy == 0 else 0)
                canvas.set_tile(
                    x, y, palette.pick("floor", rng), CellTag.FLOOR, CellTag.DOOR
                )
            entrances.append({"x": ex, "y": ey, "direction": direction})

        return {
            "arena": arena.to_dict(),
            "center": {"x": center_x, "y": center_y},
            "pillars": pillars,
            "entrances": entrances,
        }
