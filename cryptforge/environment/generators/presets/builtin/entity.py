"""Entity presets: monster groups and treasure hoards.

Both write to the double-resolution sub-tile layers. A tile position
(x, y) maps to sub-tile (round(2x), round(2y)), so fractional positions
from formations land in the other sub-tile slots of a tile.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from cryptforge import config
from cryptforge.environment.canvas import Canvas, CellTag
from cryptforge.environment.tile_types import DEFAULT_MONSTER_ID, OBJECT_IDS
from cryptforge.types import FloatPos
from cryptforge.util.sampling import poisson_disk_sampling

from ..base import ParamSpec, PresetDefinition

if TYPE_CHECKING:
    from cryptforge.util.rng import SeededRandom

FORMATIONS: tuple[str, ...] = ("cluster", "circle", "line", "square", "random")

# Spacing between members of line and square formations, in tiles
FORMATION_SPACING = 1.5


def _sub_tile(pos: FloatPos) -> tuple[int, int]:
    scale = config.SUB_TILE_SCALE
    return (round(pos[0] * scale), round(pos[1] * scale))


def _tile_of(sx: int, sy: int) -> tuple[int, int]:
    return (sx // config.SUB_TILE_SCALE, sy // config.SUB_TILE_SCALE)


class MonsterGroupPreset(PresetDefinition):
    """A group of monsters arranged in a formation around a center."""

    name = "monster_group"
    category = "entity"
    description = "A group of monsters with various formations"
    params = {
        "count": ParamSpec("int", 5, 1, 20),
        "center_x": ParamSpec("int", required=True),
        "center_y": ParamSpec("int", required=True),
        "radius": ParamSpec("int", 3, 1, 10),
        "formation": ParamSpec("str", "cluster", choices=FORMATIONS),
        "monster_type": ParamSpec(
            "int", DEFAULT_MONSTER_ID, description="Monster type id"
        ),
        "has_leader": ParamSpec("bool", False),
        "leader_type": ParamSpec("int", description="Leader monster type id"),
    }

    def generate(
        self, canvas: Canvas, params: Mapping[str, Any], rng: SeededRandom
    ) -> dict[str, Any]:
        cx, cy = params["center_x"], params["center_y"]
        count = params["count"]
        radius = params["radius"]
        formation = params["formation"]

        if formation == "circle":
            positions = self._circle(cx, cy, radius, count)
        elif formation == "line":
            positions = self._line(cx, cy, count, rng)
        elif formation == "square":
            positions = self._square(cx, cy, count)
        elif formation == "random":
            positions = [rng.point_in_circle(cx, cy, radius) for _ in range(count)]
        else:
            positions = [
                (cx - radius + px, cy - radius + py)
                for px, py in poisson_disk_sampling(
                    radius * 2, radius * 2, 1.5, config.POISSON_MAX_ATTEMPTS, rng, count
                )
            ]

        leader_type = params["leader_type"]
        placements: list[dict[str, Any]] = []
        for index, pos in enumerate(positions):
            is_leader = index == 0 and params["has_leader"]
            monster = params["monster_type"]
            if is_leader and leader_type:
                monster = leader_type
            sx, sy = _sub_tile(pos)
            if not canvas.set_monster(sx, sy, monster):
                continue
            canvas.add_tags(*_tile_of(sx, sy), CellTag.MONSTER)
            placements.append(
                {"x": pos[0], "y": pos[1], "type": monster, "is_leader": is_leader}
            )

        return {
            "placements": placements,
            "count": len(placements),
            "formation": formation,
        }

    @staticmethod
    def _circle(cx: int, cy: int, radius: int, count: int) -> list[FloatPos]:
        return [
            (
                cx + math.cos(i / count * math.pi * 2) * radius,
                cy + math.sin(i / count * math.pi * 2) * radius,
            )
            for i in range(count)
        ]

    @staticmethod
    def _line(cx: int, cy: int, count: int, rng: SeededRandom) -> list[FloatPos]:
        angle = rng.random() * math.pi
        dx, dy = math.cos(angle), math.sin(angle)
        positions = []
        for i in range(count):
            offset = (i - (count - 1) / 2) * FORMATION_SPACING
            positions.append((cx + dx * offset, cy + dy * offset))
        return positions

    @staticmethod
    def _square(cx: int, cy: int, count: int) -> list[FloatPos]:
        side = math.ceil(math.sqrt(count))
        positions = []
        for row in range(side):
            for col in range(side):
                if len(positions) == count:
                    return positions
                positions.append(
                    (
                        cx + (col - (side - 1) / 2) * FORMATION_SPACING,
                        cy + (row - (side - 1) / 2) * FORMATION_SPACING,
                    )
                )
        return positions


class TreasureRoomPreset(PresetDefinition):
    """A large chest at the center, smaller chests and barrels scattered around it.

    Chests and barrels never replace an object already in their sub-tile slot.
    """

    name = "treasure_room"
    category = "entity"
    description = "A treasure room with chests and containers"
    params = {
        "chest_count": ParamSpec("int", 3, 1, 10),
        "barrel_count": ParamSpec("int", 5, 0, 15),
        "center_x": ParamSpec("int", required=True),
        "center_y": ParamSpec("int", required=True),
        "radius": ParamSpec("int", 4, 2, 10),
        "has_main_chest": ParamSpec("bool", True),
    }

    def generate(
        self, canvas: Canvas, params: Mapping[str, Any], rng: SeededRandom
    ) -> dict[str, Any]:
        cx, cy = params["center_x"], params["center_y"]
        radius = params["radius"]
        placements: list[dict[str, Any]] = []

        if params["has_main_chest"] and self._put(
            canvas, (cx, cy), "large_chest", force=True
        ):
            placements.append({"x": cx, "y": cy, "type": "large_chest"})

        for object_type, spacing, limit in (
            ("chest", 2.0, params["chest_count"]),
            ("barrel", 1.5, params["barrel_count"]),
        ):
            if limit <= 0:
                continue
            points = poisson_disk_sampling(
                radius * 2, radius * 2, spacing, config.POISSON_MAX_ATTEMPTS, rng
            )[:limit]
            for px, py in points:
                pos = (cx - radius + px, cy - radius + py)
                if self._put(canvas, pos, object_type):
                    placements.append({"x": pos[0], "y": pos[1], "type": object_type})

        return {"placements": placements, "total_objects": len(placements)}

    @staticmethod
    def _put(
        canvas: Canvas, pos: FloatPos, object_type: str, *, force: bool = False
    ) -> bool:
        sx, sy = _sub_tile(pos)
        if not (0 <= sx < canvas.sub_width and 0 <= sy < canvas.sub_height):
            return False
        if not force and canvas.objects is not None and canvas.objects[sx, sy] != 0:
            return False
        canvas.set_object(sx, sy, OBJECT_IDS[object_type])
        canvas.add_tags(*_tile_of(sx, sy), CellTag.OBJECT)
        return True
