"""Structures layer: perimeter walls, preset structures and explicit buildings."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from cryptforge.environment.canvas import Canvas, CellTag
from cryptforge.environment.generators.presets.builtin.town import draw_building
from cryptforge.util.coordinates import Room

from ..blueprint import LayerType
from ..layer import LayerGenerator

if TYPE_CHECKING:
    from cryptforge.util.rng import SeededRandom

logger = logging.getLogger(__name__)


class StructuresLayer(LayerGenerator):
    """Walls, towns, rooms and hand-placed buildings.

    Params:
        walls: ``{"thickness", "tile" | "material"}`` for a wall around the
            canvas edge. ``true`` means one tile of stone.
        presets: Preset requests (see LayerGenerator.apply_presets).
        buildings: ``[{"x", "y", "width", "height", "type", "door"}]``.
    """

    layer_type = LayerType.STRUCTURES

    def generate(
        self, canvas: Canvas, params: Mapping[str, Any], rng: SeededRandom
    ) -> dict[str, Any]:
        options = self.options(params)
        details: dict[str, Any] = {"perimeter_walls": 0}

        walls = options.get("walls")
        if walls:
            wall_options = self.options(walls) if isinstance(walls, Mapping) else {}
            details["perimeter_walls"] = self._perimeter_walls(
                canvas,
                int(wall_options.get("thickness", 1)),
                wall_options.get("tile"),
                wall_options.get("material", "wall_stone"),
                rng,
            )

        applied, failures = self.apply_presets(canvas, options.get("presets"), rng)
        details["presets_applied"] = applied
        details["failures"] = failures

        buildings: list[dict[str, Any]] = []
        for spec in options.get("buildings") or ():
            building = self.options(spec)
            room = Room(
                int(building["x"]),
                int(building["y"]),
                int(building["width"]),
                int(building["height"]),
                type=building.get("type", "house"),
            )
            if room.width < 3 or room.height < 3:
                logger.warning("Skipping building smaller than 3x3: %s", room)
                continue
            door = draw_building(
                canvas, room, self.palette, rng, door=building.get("door", True)
            )
            canvas.rooms.append(room)
            buildings.append({**room.to_dict(), "door": door})
        details["buildings"] = buildings
        return details

    def _perimeter_walls(
        self,
        canvas: Canvas,
        thickness: int,
        tile: int | None,
        material: str,
        rng: SeededRandom,
    ) -> int:
        """Wall in the canvas edge. The tile is picked once for the whole ring."""
        if tile is None:
            tile = self.palette.pick(material, rng)
        count = 0
        for x in range(canvas.width):
            for y in range(canvas.height):
                edge_distance = min(x, y, canvas.width - 1 - x, canvas.height - 1 - y)
                if edge_distance < thickness:
                    canvas.clear_tags(x, y, CellTag.WATER, CellTag.FLOOR)
                    canvas.set_tile(x, y, tile, CellTag.STRUCTURE, CellTag.WALL)
                    count += 1
        return count
