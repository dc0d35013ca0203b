"""Lighting and special-feature layers.

Lighting marks lit cells with the light tag around each light source; wall
torches are written to the object layer. The special layer turns layout
stairs into stairs tiles and places shrines, altars, levers and portals.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from cryptforge import config
from cryptforge.environment.canvas import Canvas, CellTag
from cryptforge.environment.tile_types import object_id
from cryptforge.types import WorldTilePos
from cryptforge.util.pathfinding import CARDINAL_DIRECTIONS

from ..blueprint import LayerType
from ..layer import LayerGenerator

if TYPE_CHECKING:
    from cryptforge.util.rng import SeededRandom

logger = logging.getLogger(__name__)

SPECIAL_FEATURES: tuple[str, ...] = ("shrine", "altar", "lever", "portal")

DEFAULT_SPECIAL_AVOID = (
    CellTag.STRUCTURE | CellTag.WALL | CellTag.WATER | CellTag.OBJECT | CellTag.NPC
)

# A torch hangs on a wall next to one of these
_LIT_GROUND = CellTag.FLOOR | CellTag.PATH


class LightingLayer(LayerGenerator):
    """Ambient level, explicit light sources and wall torches.

    Params:
        ambient: Ambient light level in [0, 1], reported for the renderer.
        sources: ``[{"x", "y", "radius"}]``. When given, no torches are placed.
        torch_density: Chance that an eligible wall cell gets a torch.
        radius: Light radius of torches and sources without one.
    """

    layer_type = LayerType.LIGHTING

    def generate(
        self, canvas: Canvas, params: Mapping[str, Any], rng: SeededRandom
    ) -> dict[str, Any]:
        options = self.options(params)
        ambient = min(
            max(float(options.get("ambient", config.DEFAULT_AMBIENT_LIGHT)), 0.0), 1.0
        )
        default_radius = int(options.get("radius", config.DEFAULT_LIGHT_RADIUS))

        sources: list[tuple[WorldTilePos, int]] = []
        torches = 0
        if options.get("sources") is not None:
            for source in options["sources"]:
                pos = (int(source["x"]), int(source["y"]))
                sources.append((pos, int(source.get("radius", default_radius))))
        else:
            density = float(options.get("torch_density", config.DEFAULT_TORCH_DENSITY))
            torch = object_id("torch")
            for x, y in self._torch_sites(canvas):
                if rng.random() >= density:
                    continue
                canvas.place_object(x, y, torch, tag=CellTag.LIGHT)
                sources.append(((x, y), default_radius))
                torches += 1

        lit = 0
        for (sx, sy), radius in sources:
            lit += self._light(canvas, sx, sy, radius)

        return {
            "ambient": ambient,
            "sources": [
                {"x": x, "y": y, "radius": radius} for (x, y), radius in sources
            ],
            "torches": torches,
            "lit_cells": lit,
        }

    @staticmethod
    def _torch_sites(canvas: Canvas) -> list[WorldTilePos]:
        """Wall cells with open floor or path beside them, in x-major order."""
        sites = []
        for x in range(canvas.width):
            for y in range(canvas.height):
                if not canvas.has_tag(x, y, CellTag.WALL):
                    continue
                for dx, dy in CARDINAL_DIRECTIONS:
                    nx, ny = x + dx, y + dy
                    if canvas.has_tag(nx, ny, _LIT_GROUND) and not canvas.has_tag(
                        nx, ny, CellTag.WALL
                    ):
                        sites.append((x, y))
                        break
        return sites

    @staticmethod
    def _light(canvas: Canvas, cx: int, cy: int, radius: int) -> int:
        """Tag cells within ``radius`` of (cx, cy). Returns cells newly lit."""
        newly_lit = 0
        for x in range(cx - radius, cx + radius + 1):
            for y in range(cy - radius, cy + radius + 1):
                if not canvas.in_bounds(x, y) or math.hypot(x - cx, y - cy) > radius:
                    continue
                if not canvas.has_tag(x, y, CellTag.LIGHT):
                    newly_lit += 1
                canvas.add_tags(x, y, CellTag.LIGHT)
        return newly_lit


class SpecialLayer(LayerGenerator):
    """Stairs tiles and one-off features.

    Params:
        stairs: Write stairs tiles where the terrain layout put stairs.
        features: ``[{"type", "x", "y"}]`` with type one of SPECIAL_FEATURES.
            Without a position a random free cell is used.
        avoid: Tag names that block randomly positioned features.
    """

    layer_type = LayerType.SPECIAL

    def generate(
        self, canvas: Canvas, params: Mapping[str, Any], rng: SeededRandom
    ) -> dict[str, Any]:
        options = self.options(params)
        avoid = self.avoid_tags(options.get("avoid"), DEFAULT_SPECIAL_AVOID)
        details: dict[str, Any] = {"stairs": None, "features": [], "skipped": []}

        if options.get("stairs", True) and canvas.stairs is not None:
            for material, pos in (
                ("stairs_up", canvas.stairs.up),
                ("stairs_down", canvas.stairs.down),
            ):
                if pos is not None:
                    canvas.set_tile(*pos, self.palette.first(material), CellTag.SPECIAL)
            details["stairs"] = canvas.stairs.to_dict()

        for spec in options.get("features") or ():
            feature = spec.get("type")
            if feature not in SPECIAL_FEATURES:
                logger.warning("Skipping unknown special feature %r", feature)
                details["skipped"].append(
                    {"type": feature, "reason": "unknown feature"}
                )
                continue

            if "x" in spec and "y" in spec:
                pos = (int(spec["x"]), int(spec["y"]))
            else:
                free = canvas.free_cells((avoid,))
                if not free:
                    details["skipped"].append(
                        {"type": feature, "reason": "no free cell"}
                    )
                    continue
                pos = rng.choice(free)

            if not canvas.place_object(*pos, object_id(feature), tag=CellTag.SPECIAL):
                details["skipped"].append({"type": feature, "reason": "out of bounds"})
                continue
            details["features"].append({"type": feature, "x": pos[0], "y": pos[1]})
        return details
