"""Outdoor presets: forest patches and trails."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from cryptforge import config
from cryptforge.environment.canvas import PROTECTED_TAGS, Canvas, CellTag
from cryptforge.types import WorldTilePos
from cryptforge.util.curves import sample_bezier
from cryptforge.util.noise import PerlinNoise

from ..base import ParamSpec, PresetDefinition

if TYPE_CHECKING:
    from cryptforge.util.rng import SeededRandom

# Cells the forest will not grow on
_FOREST_AVOID = PROTECTED_TAGS | CellTag.PATH | CellTag.WATER


class ForestPatchPreset(PresetDefinition):
    """Noise-clustered trees over a rectangle, with rocks and flowers in the gaps.

    Only bare cells (the canvas default tile) and grass are planted.
    """

    name = "forest_patch"
    category = "nature"
    description = "A natural cluster of trees with optional rocks and undergrowth"
    params = {
        "density": ParamSpec("float", 0.3, 0.1, 0.8, description="Tree density (0-1)"),
        "width": ParamSpec("int", 10, 5, 30),
        "height": ParamSpec("int", 10, 5, 30),
        "start_x": ParamSpec("int", 0),
        "start_y": ParamSpec("int", 0),
        "has_rocks": ParamSpec("bool", True),
        "has_flowers": ParamSpec("bool", False),
        "rock_density": ParamSpec("float", 0.1, 0.0, 0.3),
        "tree_types": ParamSpec("list", description="Specific tree tile ids"),
    }

    def generate(
        self, canvas: Canvas, params: Mapping[str, Any], rng: SeededRandom
    ) -> dict[str, Any]:
        palette = self.palette
        density = params["density"]
        rock_density = params["rock_density"]
        tree_types = params["tree_types"] or list(palette.ids("tree"))
        noise = PerlinNoise(rng.seed)
        placed = {"trees": 0, "rocks": 0, "flowers": 0}

        x0 = max(0, params["start_x"])
        y0 = max(0, params["start_y"])
        x1 = min(canvas.width, params["start_x"] + params["width"])
        y1 = min(canvas.height, params["start_y"] + params["height"])

        for y in range(y0, y1):
            for x in range(x0, x1):
                tile = int(canvas.tiles[x, y])
                if tile != canvas.default_tile and palette.material_of(tile) != "grass":
                    continue
                if canvas.has_tag(x, y, _FOREST_AVOID):
                    continue

                value = noise.octave_noise(
                    x * config.FOLIAGE_NOISE_SCALE,
                    y * config.FOLIAGE_NOISE_SCALE,
                    3,
                    0.5,
                )
                if value > 1 - density:
                    canvas.set_tile(x, y, rng.choice(tree_types), CellTag.FOLIAGE)
                    placed["trees"] += 1
                elif params["has_rocks"] and value < rock_density:
                    canvas.set_tile(x, y, palette.pick("rubble", rng), CellTag.TERRAIN)
                    placed["rocks"] += 1
                elif params["has_flowers"] and 0.4 < value < 0.5 and rng.random() < 0.3:
                    canvas.set_tile(x, y, palette.pick("flowers", rng), CellTag.FOLIAGE)
                    placed["flowers"] += 1
                elif rng.random() < 0.5:
                    canvas.set_tile(x, y, palette.pick("grass", rng), CellTag.TERRAIN)

        return placed


class TrailSegmentPreset(PresetDefinition):
    """A single bowed trail between two points, optionally lined with trees.

    The trail is a quadratic Bezier whose control point is pushed
    perpendicular to the straight line by up to ``length * curviness``.
    """

    name = "trail_segment"
    category = "nature"
    description = "A winding trail segment with optional decorations"
    params = {
        "start_x": ParamSpec("int", required=True),
        "start_y": ParamSpec("int", required=True),
        "end_x": ParamSpec("int", required=True),
        "end_y": ParamSpec("int", required=True),
        "width": ParamSpec("int", 2, 1, 4),
        "curviness": ParamSpec(
            "float", 0.3, 0.0, 1.0, description="How much the path curves"
        ),
        "material": ParamSpec("str", "dirt", choices=("dirt", "cobblestone", "grass")),
        "add_trees": ParamSpec("bool", True),
        "tree_density": ParamSpec("float", 0.15, 0.0, 1.0),
    }

    def generate(
        self, canvas: Canvas, params: Mapping[str, Any], rng: SeededRandom
    ) -> dict[str, Any]:
        palette = self.palette
        sx, sy = params["start_x"], params["start_y"]
        ex, ey = params["end_x"], params["end_y"]
        width = params["width"]
        half = width // 2

        dx, dy = ex - sx, ey - sy
        length = math.hypot(dx, dy)
        if length == 0:
            points: list[WorldTilePos] = [(sx, sy)]
            perp_x = perp_y = 0.0
        else:
            perp_x, perp_y = -dy / length, dx / length
            bend = length * params["curviness"] * (rng.random() - 0.5) * 2
            mid = ((sx + ex) / 2 + perp_x * bend, (sy + ey) / 2 + perp_y * bend)
            curve = sample_bezier([(sx, sy), mid, (ex, ey)], math.ceil(length * 2))
            points = [(round(x), round(y)) for x, y in curve]

        path_cells: set[WorldTilePos] = set()
        for px, py in points:
            for oy in range(-half, half + 1):
                for ox in range(-half, half + 1):
                    x, y = px + ox, py + oy
                    if not canvas.in_bounds(x, y) or canvas.has_tag(
                        x, y, PROTECTED_TAGS
                    ):
                        continue
                    canvas.set_tile(
                        x, y, palette.pick(params["material"], rng), CellTag.PATH
                    )
                    path_cells.add((x, y))

        trees = 0
        if params["add_trees"] and length > 0:
            for px, py in points:
                for side in (-1, 1):
                    offset = (width + 1 + rng.randint(0, 2)) * side
                    tx = round(px + perp_x * offset)
                    ty = round(py + perp_y * offset)
                    if (tx, ty) in path_cells or canvas.is_blocked(
                        tx, ty, [_FOREST_AVOID]
                    ):
                        continue
                    if rng.random() < params["tree_density"]:
                        canvas.set_tile(
                            tx, ty, palette.pick("tree", rng), CellTag.FOLIAGE
                        )
                        trees += 1

        return {
            "path_length": len(points),
            "path_width": width,
            "tiles_modified": len(path_cells),
            "trees": trees,
        }
