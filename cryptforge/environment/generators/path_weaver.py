"""Obstacle-aware path weaving with curve smoothing.

The weaver turns a path request (start, end, optional waypoints and
obstacles, a named style) into tiles on a canvas:

1. Obstacles become impassable cells on top of the terrain cost map
2. A* runs between each consecutive pair of anchors; a pair with no route
   falls back to the straight pair of endpoints
3. Segments are joined, dropping the duplicated joint
4. Curvy styles down-sample the path, jitter interior samples and
   re-interpolate with a Catmull-Rom spline
5. The path is rasterized and stamped with a square brush, then optional
   bounding walls and decorations are added

Cells tagged structure, wall or door are never overwritten.

Styles are configuration, not algorithms. See PATH_STYLES.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from cryptforge import config
from cryptforge.environment.canvas import PROTECTED_TAGS, Canvas, CellTag
from cryptforge.environment.tile_types import (
    DEFAULT_PALETTE,
    IMPASSABLE_MATERIALS,
    TERRAIN_COSTS,
    TilePalette,
)
from cryptforge.types import FloatPos, WorldTilePos
from cryptforge.util.coordinates import Rect, Room, clamp_to_bounds
from cryptforge.util.curves import bresenham_line, catmull_rom
from cryptforge.util.pathfinding import CARDINAL_DIRECTIONS, AStarPathfinder
from cryptforge.util.rng import SeededRandom

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PathStyle:
    """How a woven path looks.

    Attributes:
        name: Style name.
        width: Brush width; the brush covers +/- width // 2 around each point.
        material: Palette material stamped along the path.
        curviness: 0 keeps the A* route; higher values bend it more.
        decorations: Decoration kinds scattered beside the path.
        decoration_density: Chance per candidate cell of placing a decoration.
        add_walls: Whether to line the path with walls.
        wall_material: Palette material for bounding walls.
    """

    name: str
    width: int = 2
    material: str = "dirt"
    curviness: float = 0.0
    decorations: tuple[str, ...] = ()
    decoration_density: float = 0.2
    add_walls: bool = False
    wall_material: str = "wall_stone"

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "material": self.material,
            "curviness": self.curviness,
            "decorations": list(self.decorations),
            "decoration_density": self.decoration_density,
            "add_walls": self.add_walls,
        }


PATH_STYLES: dict[str, PathStyle] = {
    style.name: style
    for style in (
        PathStyle("straight", width=2, material="dirt", curviness=0.0),
        PathStyle("winding", width=2, material="dirt", curviness=0.4),
        PathStyle(
            "winding_forest",
            width=2,
            material="dirt",
            curviness=0.5,
            decorations=("trees", "bushes"),
            decoration_density=0.3,
        ),
        PathStyle(
            "cave_tunnel",
            width=3,
            material="floor",
            curviness=0.3,
            decorations=("rocks",),
            decoration_density=0.15,
        ),
        PathStyle("dungeon_corridor", width=2, material="floor", add_walls=True),
        PathStyle("road", width=3, material="cobblestone", curviness=0.1),
        PathStyle(
            "river",
            width=2,
            material="water",
            curviness=0.6,
            decorations=("trees",),
            decoration_density=0.2,
        ),
    )
}

# Decoration kind -> (palette material, tag)
DECORATIONS: dict[str, tuple[str, CellTag]] = {
    "trees": ("tree", CellTag.FOLIAGE),
    "bushes": ("bush", CellTag.FOLIAGE),
    "flowers": ("flowers", CellTag.FOLIAGE),
    "rocks": ("rubble", CellTag.TERRAIN),
}

# Existing open ground that bounding walls must not cover
_OPEN_GROUND = PROTECTED_TAGS | CellTag.FLOOR | CellTag.PATH | CellTag.WATER


def get_path_style(name: str | None) -> PathStyle:
    """Look up a style; unknown or missing names fall back to the default."""
    if name is None:
        return PATH_STYLES[config.DEFAULT_PATH_STYLE]
    style = PATH_STYLES.get(name)
    if style is None:
        logger.debug("Unknown path style %r; using %r", name, config.DEFAULT_PATH_STYLE)
        return PATH_STYLES[config.DEFAULT_PATH_STYLE]
    return style


def _as_point(value: Any) -> WorldTilePos:
    if isinstance(value, Mapping):
        return (int(value["x"]), int(value["y"]))
    x, y = value
    return (int(x), int(y))


@dataclass(frozen=True)
class PathSpec:
    """A path request.

    Attributes:
        start: First anchor.
        end: Last anchor.
        waypoints: Anchors visited in between, in order.
        obstacles: Points, Rects, Rooms or {x, y[, width, height]} mappings.
        style: Name of a PATH_STYLES entry.
        seed: Seed used when weave() is not given an rng.
    """

    start: WorldTilePos
    end: WorldTilePos
    waypoints: tuple[WorldTilePos, ...] = ()
    obstacles: tuple[Any, ...] = ()
    style: str = config.DEFAULT_PATH_STYLE
    seed: int | str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> PathSpec:
        """Build a spec from plain data.

        Accepts ``start``/``end`` as [x, y] or {x, y}, or the flat
        ``startX``/``startY``/``endX``/``endY`` form.

        Raises:
            ValueError: If the start or end point is missing.
        """
        if "start" in data and "end" in data:
            start = _as_point(data["start"])
            end = _as_point(data["end"])
        elif {"startX", "startY", "endX", "endY"} <= data.keys():
            start = (int(data["startX"]), int(data["startY"]))
            end = (int(data["endX"]), int(data["endY"]))
        else:
            raise ValueError("Path spec needs a start and an end point")
        return cls(
            start=start,
            end=end,
            waypoints=tuple(_as_point(point) for point in data.get("waypoints", ())),
            obstacles=tuple(data.get("obstacles", ())),
            style=data.get("style", config.DEFAULT_PATH_STYLE),
            seed=data.get("seed"),
        )


@dataclass
class WeaveResult:
    """What one weave did. Never mutated after it is returned."""

    path: list[WorldTilePos]
    style: str
    config: PathStyle
    tiles_modified: int = 0
    wall_tiles_added: int = 0
    decorations_placed: int = 0
    fallback_segments: int = 0
    cells: list[WorldTilePos] = field(default_factory=list)

    @property
    def path_length(self) -> int:
        return len(self.path)

    def to_dict(self) -> dict[str, Any]:
        return {
            "style": self.style,
            "path_length": self.path_length,
            "tiles_modified": self.tiles_modified,
            "wall_tiles_added": self.wall_tiles_added,
            "decorations_placed": self.decorations_placed,
            "fallback_segments": self.fallback_segments,
        }


class PathWeaver:
    """Weaves styled paths onto one canvas.

    Attributes:
        canvas: The canvas paths are stamped onto.
        palette: Material lookup for path, wall and decoration tiles.
        heuristic_weight: A* heuristic multiplier.
        allow_diagonal: Whether A* may step diagonally.
    """

    def __init__(
        self,
        canvas: Canvas,
        palette: TilePalette | None = None,
        *,
        heuristic_weight: float = 1.0,
        allow_diagonal: bool = False,
    ) -> None:
        self.canvas = canvas
        self.palette = palette or DEFAULT_PALETTE
        self.heuristic_weight = heuristic_weight
        self.allow_diagonal = allow_diagonal

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def weave(
        self, spec: PathSpec | Mapping[str, Any], rng: SeededRandom | None = None
    ) -> WeaveResult:
        """Route, shape and stamp one path.

        Args:
            spec: The path request.
            rng: Random source. Defaults to a generator seeded from spec.seed.

        Returns:
            A WeaveResult describing the stamped path.
        """
        if not isinstance(spec, PathSpec):
            spec = PathSpec.from_mapping(spec)
        if rng is None:
            rng = SeededRandom(spec.seed)
        style = get_path_style(spec.style)

        anchors = [spec.start, *spec.waypoints, spec.end]
        anchors = [
            clamp_to_bounds(a, self.canvas.width, self.canvas.height) for a in anchors
        ]
        pathfinder = AStarPathfinder(
            self.cost_map(spec.obstacles, keep_open=anchors),
            allow_diagonal=self.allow_diagonal,
            heuristic_weight=self.heuristic_weight,
        )

        path: list[WorldTilePos] = []
        fallbacks = 0
        for origin, target in zip(anchors, anchors[1:], strict=False):
            segment = pathfinder.find_path(origin, target)
            if segment is None:
                fallbacks += 1
                segment = [origin, target]
            if path and path[-1] == segment[0]:
                segment = segment[1:]
            path.extend(segment)

        if fallbacks:
            logger.debug(
                "Path %s -> %s: %d segment(s) had no route",
                spec.start,
                spec.end,
                fallbacks,
            )

        if style.curviness > 0 and len(path) > 2:
            path = self._curve(path, style.curviness, rng)
        path = _remove_consecutive_duplicates(path)

        result = WeaveResult(
            path=path, style=style.name, config=style, fallback_segments=fallbacks
        )
        self._stamp(result, style, rng)
        return result

    def weave_multiple(
        self,
        specs: Iterable[PathSpec | Mapping[str, Any]],
        rng: SeededRandom | None = None,
    ) -> list[WeaveResult]:
        """Weave several paths in order, sharing one random stream."""
        if rng is None:
            rng = SeededRandom()
        return [self.weave(spec, rng) for spec in specs]

    def cost_map(
        self,
        obstacles: Iterable[Any] = (),
        keep_open: Sequence[WorldTilePos] = (),
    ) -> np.ndarray:
        """Per-cell A* step costs for the current canvas.

        Impassable materials, cells tagged wall or structure and obstacle
        cells cost 0 (blocked). ``keep_open`` cells are always passable so
        anchors inside buildings can still be reached.
        """
        canvas = self.canvas
        cost = np.ones((canvas.width, canvas.height), dtype=np.float32, order="F")
        for material, value in TERRAIN_COSTS.items():
            if material in self.palette:
                cost[self.palette.mask(canvas.tiles, material)] = value
        cost[self.palette.mask(canvas.tiles, *IMPASSABLE_MATERIALS)] = 0
        cost[canvas.tag_mask(CellTag.WALL, CellTag.STRUCTURE)] = 0
        # Doors are how paths get into structures
        cost[canvas.tag_mask(CellTag.DOOR)] = 1

        for x, y in obstacle_cells(obstacles):
            if canvas.in_bounds(x, y):
                cost[x, y] = 0
        for x, y in keep_open:
            if canvas.in_bounds(x, y) and cost[x, y] <= 0:
                cost[x, y] = 1
        return cost

    # -------------------------------------------------------------------------
    # Shaping
    # -------------------------------------------------------------------------

    def _curve(
        self, path: list[WorldTilePos], curviness: float, rng: SeededRandom
    ) -> list[WorldTilePos]:
        sample_rate = max(1, len(path) // config.CURVE_SAMPLE_TARGET)
        samples = path[::sample_rate]
        if samples[-1] != path[-1]:
            samples.append(path[-1])

        max_offset = curviness * config.CURVE_MAX_OFFSET
        control: list[FloatPos] = []
        for index, (x, y) in enumerate(samples):
            if 0 < index < len(samples) - 1:
                ox = (rng.random() - 0.5) * 2 * max_offset
                oy = (rng.random() - 0.5) * 2 * max_offset
                control.append((round(x + ox), round(y + oy)))
            else:
                control.append((x, y))

        segments = math.ceil(len(path) / len(control))
        curve = catmull_rom(control, 0.5, segments)
        width, height = self.canvas.width, self.canvas.height
        return [clamp_to_bounds(point, width, height) for point in curve]

    # -------------------------------------------------------------------------
    # Stamping
    # -------------------------------------------------------------------------

    def _stamp(self, result: WeaveResult, style: PathStyle, rng: SeededRandom) -> None:
        canvas = self.canvas
        palette = self.palette
        half = style.width // 2
        material_tags = [CellTag.PATH]
        if style.material == "water":
            material_tags.append(CellTag.WATER)

        centerline: list[WorldTilePos] = []
        for index, point in enumerate(result.path):
            if index == 0:
                centerline.append(point)
            else:
                centerline.extend(bresenham_line(result.path[index - 1], point)[1:])

        footprint: dict[WorldTilePos, None] = {}
        for x, y in centerline:
            for dx in range(-half, half + 1):
                for dy in range(-half, half + 1):
                    cell = (x + dx, y + dy)
                    if canvas.in_bounds(*cell):
                        footprint.setdefault(cell)

        for x, y in footprint:
            if canvas.has_tag(x, y, PROTECTED_TAGS):
                continue
            canvas.set_tile(x, y, palette.pick(style.material, rng), *material_tags)
            result.tiles_modified += 1
        result.cells = list(footprint)

        if style.add_walls:
            for x, y in footprint:
                for dx, dy in CARDINAL_DIRECTIONS:
                    nx, ny = x + dx, y + dy
                    if (nx, ny) in footprint or not canvas.in_bounds(nx, ny):
                        continue
                    if canvas.has_tag(nx, ny, _OPEN_GROUND):
                        continue
                    canvas.set_tile(
                        nx, ny, palette.pick(style.wall_material, rng), CellTag.WALL
                    )
                    result.wall_tiles_added += 1

        if style.decorations:
            for x, y in result.path:
                for side in (-1, 1):
                    offset = side * (half + 1 + rng.randint(0, 2))
                    for ox, oy in ((offset, 0), (0, offset)):
                        nx, ny = x + ox, y + oy
                        if (nx, ny) in footprint or canvas.is_blocked(
                            nx, ny, [_OPEN_GROUND]
                        ):
                            continue
                        if rng.random() >= style.decoration_density:
                            continue
                        kind = rng.choice(style.decorations)
                        material, tag = DECORATIONS[kind]
                        canvas.set_tile(nx, ny, palette.pick(material, rng), tag)
                        result.decorations_placed += 1


def obstacle_cells(obstacles: Iterable[Any]) -> list[WorldTilePos]:
    """Expand obstacle descriptors into the cells they cover."""
    cells: list[WorldTilePos] = []
    for obstacle in obstacles:
        if isinstance(obstacle, Rect):
            cells.extend(obstacle.cells())
        elif isinstance(obstacle, Room):
            cells.extend(obstacle.rect.cells())
        elif isinstance(obstacle, Mapping):
            x, y = int(obstacle["x"]), int(obstacle["y"])
            width = int(obstacle.get("width") or 1)
            height = int(obstacle.get("height") or 1)
            cells.extend(Rect(x, y, width, height).cells())
        else:
            cells.append(_as_point(obstacle))
    return cells


def _remove_consecutive_duplicates(path: list[WorldTilePos]) -> list[WorldTilePos]:
    result: list[WorldTilePos] = []
    for point in path:
        if not result or result[-1] != point:
            result.append(point)
    return result


def create_river(
    canvas: Canvas,
    rng: SeededRandom | None = None,
    start_edge: str = "top",
    palette: TilePalette | None = None,
) -> WeaveResult:
    """Weave a river across the canvas through 2-5 jittered waypoints.

    Args:
        canvas: Canvas to stamp the river onto.
        rng: Random source. A fresh entropy-seeded generator if None.
        start_edge: "top" runs the river top to bottom, "left" left to right.
        palette: Material lookup.

    Raises:
        ValueError: If start_edge is not "top" or "left".
    """
    if rng is None:
        rng = SeededRandom()
    width, height = canvas.width, canvas.height

    def across(size: int) -> int:
        margin = min(5, size // 4)
        return rng.randint(margin, size - 1 - margin)

    if start_edge == "top":
        start = (across(width), 0)
        end = (across(width), height - 1)
    elif start_edge == "left":
        start = (0, across(height))
        end = (width - 1, across(height))
    else:
        raise ValueError(f"Unknown river start edge: {start_edge!r}")

    count = rng.randint(2, 5)
    waypoints: list[WorldTilePos] = []
    for index in range(count):
        t = (index + 1) / (count + 1)
        jitter = (rng.random() - 0.5) * 10
        x = start[0] + t * (end[0] - start[0])
        y = start[1] + t * (end[1] - start[1])
        if start_edge == "top":
            x += jitter
        else:
            y += jitter
        waypoints.append(clamp_to_bounds((x, y), width, height))

    weaver = PathWeaver(canvas, palette)
    return weaver.weave(
        PathSpec(start=start, end=end, waypoints=tuple(waypoints), style="river"), rng
    )
