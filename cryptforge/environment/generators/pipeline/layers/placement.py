"""Object and entity layers: containers, monsters and NPCs.

Both write to the double-resolution sub-tile layers. Explicit placements go
in the top-left sub-tile slot of their tile; presets may use any slot.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from cryptforge.environment.canvas import Canvas, CellTag
from cryptforge.environment.tile_types import (
    DEFAULT_MONSTER_ID,
    monster_id,
    npc_id,
    object_id,
)
from cryptforge.types import WorldTilePos

from ..blueprint import LayerType
from ..layer import LayerGenerator

if TYPE_CHECKING:
    from cryptforge.util.rng import SeededRandom

logger = logging.getLogger(__name__)

DEFAULT_PLACEMENT_AVOID = CellTag.STRUCTURE | CellTag.WALL | CellTag.WATER

# Cells that already hold something in the sub-tile layers
_OCCUPIED = CellTag.OBJECT | CellTag.MONSTER | CellTag.NPC


class ObjectsLayer(LayerGenerator):
    """Preset hoards plus explicitly placed objects.

    Params:
        presets: Preset requests (see LayerGenerator.apply_presets).
        objects: ``[{"x", "y", "type" | "id"}]``. Blocked cells are skipped.
        avoid: Tag names that block explicit placements.
    """

    layer_type = LayerType.OBJECTS

    def generate(
        self, canvas: Canvas, params: Mapping[str, Any], rng: SeededRandom
    ) -> dict[str, Any]:
        options = self.options(params)
        avoid = self.avoid_tags(options.get("avoid"), DEFAULT_PLACEMENT_AVOID)

        applied, failures = self.apply_presets(canvas, options.get("presets"), rng)
        from_presets = sum(
            int(instance["result"].get("total_objects", 0)) for instance in applied
        )

        placed = 0
        skipped: list[dict[str, Any]] = []
        for spec in options.get("objects") or ():
            x, y = int(spec["x"]), int(spec["y"])
            try:
                oid = object_id(spec.get("id", spec.get("type")))
            except ValueError as exc:
                logger.warning("Skipping object at (%d, %d): %s", x, y, exc)
                skipped.append({"x": x, "y": y, "reason": str(exc)})
                continue
            if canvas.is_blocked(x, y, (avoid,)):
                skipped.append({"x": x, "y": y, "reason": "blocked"})
                continue
            canvas.place_object(x, y, oid)
            placed += 1

        return {
            "objects_placed": placed + from_presets,
            "presets_applied": applied,
            "failures": failures,
            "skipped": skipped,
        }


class EntitiesLayer(LayerGenerator):
    """Monster groups, single monsters, scattered monsters and NPCs.

    Params:
        presets: Preset requests (see LayerGenerator.apply_presets).
        monsters: ``[{"x", "y", "type" | "id"}]``. Types are monster names
            or ids. Blocked cells and unknown names are skipped.
        npcs: ``[{"x", "y", "role"}]``. NPCs may stand inside buildings, so
            only the canvas bounds are checked.
        scatter: ``{"count", "monster_type", "per_room"}``. Places monsters
            on random free floor cells, either ``count`` in total or
            ``count`` in every registered room except the first.
        avoid: Tag names that block monster placements.
    """

    layer_type = LayerType.ENTITIES

    def generate(
        self, canvas: Canvas, params: Mapping[str, Any], rng: SeededRandom
    ) -> dict[str, Any]:
        options = self.options(params)
        avoid = self.avoid_tags(options.get("avoid"), DEFAULT_PLACEMENT_AVOID)

        applied, failures = self.apply_presets(canvas, options.get("presets"), rng)
        monsters = sum(int(instance["result"].get("count", 0)) for instance in applied)

        skipped: list[dict[str, Any]] = []
        for spec in options.get("monsters") or ():
            x, y = int(spec["x"]), int(spec["y"])
            requested = spec.get("id", spec.get("type", DEFAULT_MONSTER_ID))
            try:
                monster = monster_id(requested)
            except ValueError as exc:
                logger.warning("Skipping monster at (%d, %d): %s", x, y, exc)
                skipped.append({"x": x, "y": y, "reason": str(exc)})
                continue
            if canvas.is_blocked(x, y, (avoid,)):
                skipped.append({"x": x, "y": y, "reason": "blocked"})
                continue
            if canvas.place_monster(x, y, monster):
                monsters += 1

        scatter = options.get("scatter")
        if scatter:
            try:
                monsters += self._scatter(canvas, self.options(scatter), avoid, rng)
            except ValueError as exc:
                logger.warning("Skipping monster scatter: %s", exc)
                skipped.append({"scatter": dict(scatter), "reason": str(exc)})

        npcs = 0
        for spec in options.get("npcs") or ():
            x, y = int(spec["x"]), int(spec["y"])
            if canvas.place_object(x, y, npc_id(spec.get("role")), tag=CellTag.NPC):
                npcs += 1

        return {
            "monsters_placed": monsters,
            "npcs_placed": npcs,
            "presets_applied": applied,
            "failures": failures,
            "skipped": skipped,
        }

    @staticmethod
    def _scatter(
        canvas: Canvas, scatter: Mapping[str, Any], avoid: CellTag, rng: SeededRandom
    ) -> int:
        count = int(scatter.get("count", 1))
        monster = monster_id(scatter.get("monster_type", DEFAULT_MONSTER_ID))
        blocked = avoid | _OCCUPIED

        if scatter.get("per_room") and canvas.rooms:
            pools = [
                [
                    (x, y)
                    for x, y in room.rect.cells()
                    if canvas.has_tag(x, y, CellTag.FLOOR)
                    and not canvas.is_blocked(x, y, (blocked,))
                ]
                for room in canvas.rooms[1:]
            ]
        else:
            free = canvas.free_cells((blocked,))
            floors = [cell for cell in free if canvas.has_tag(*cell, CellTag.FLOOR)]
            pools = [floors or free]

        placed = 0
        for pool in pools:
            cells: list[WorldTilePos] = rng.shuffled(pool)[:count]
            for x, y in cells:
                if canvas.place_monster(x, y, monster):
                    placed += 1
        return placed
