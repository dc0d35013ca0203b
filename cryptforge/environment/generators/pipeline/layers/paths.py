"""Paths layer: explicit paths, structure links, room links and rivers.

All routing goes through the PathWeaver, so paths bend around walls and
never paint over structures. Linking structures finds door cells left by
earlier layers, steps one tile outside each door, merges doors that share a
DOOR_BUCKET_SIZE bucket, and joins the resulting anchors with a Manhattan
minimum spanning tree.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import numpy as np

from cryptforge import config
from cryptforge.environment.canvas import Canvas, CellTag
from cryptforge.environment.generators.connector import (
    minimum_spanning_tree,
    room_anchor,
    room_exit,
)
from cryptforge.environment.generators.path_weaver import (
    PathSpec,
    PathWeaver,
    WeaveResult,
    create_river,
)
from cryptforge.types import WorldTilePos
from cryptforge.util.coordinates import clamp_to_bounds

from ..blueprint import LayerType
from ..layer import LayerGenerator

if TYPE_CHECKING:
    from cryptforge.util.rng import SeededRandom

logger = logging.getLogger(__name__)


def door_anchors(canvas: Canvas) -> list[WorldTilePos]:
    """One anchor per door bucket: the cell just below the first door found.

    Doors are scanned row by row. Anchors are clamped onto the canvas.
    """
    anchors: list[WorldTilePos] = []
    seen: set[tuple[int, int]] = set()
    # Transposed so nonzero() walks rows (y) first
    ys, xs = np.nonzero(canvas.tag_mask(CellTag.DOOR).T)
    for x, y in zip(xs.tolist(), ys.tolist(), strict=True):
        bucket = (x // config.DOOR_BUCKET_SIZE, y // config.DOOR_BUCKET_SIZE)
        if bucket in seen:
            continue
        seen.add(bucket)
        anchors.append(clamp_to_bounds((x, y + 1), canvas.width, canvas.height))
    return anchors


class PathsLayer(LayerGenerator):
    """Woven paths between explicit points, structures or rooms.

    Params:
        paths: Path requests, as accepted by PathSpec.from_mapping.
        connect_structures: Link every door found on the canvas.
        style: Path style for structure links (default road).
        connect_rooms: Link the rooms registered on the canvas.
        room_style: Path style for room links.
        river: "top" or "left" to run a river across the canvas first.
    """

    layer_type = LayerType.PATHS

    def generate(
        self, canvas: Canvas, params: Mapping[str, Any], rng: SeededRandom
    ) -> dict[str, Any]:
        options = self.options(params)
        weaver = PathWeaver(canvas, self.palette)
        results: list[WeaveResult] = []

        river_edge = options.get("river")
        if river_edge:
            results.append(create_river(canvas, rng, river_edge, self.palette))

        for request in options.get("paths") or ():
            results.append(weaver.weave(PathSpec.from_mapping(request), rng))

        structure_links = 0
        if options.get("connect_structures"):
            style = options.get("style", "road")
            for start, end in self._tree_links(door_anchors(canvas)):
                results.append(
                    weaver.weave(PathSpec(start=start, end=end, style=style), rng)
                )
                structure_links += 1

        room_links = 0
        if options.get("connect_rooms") and len(canvas.rooms) > 1:
            style = options.get("room_style", "dungeon_corridor")
            anchors = [room_anchor(room) for room in canvas.rooms]
            for edge in minimum_spanning_tree(anchors, "manhattan"):
                source, target = canvas.rooms[edge.a], canvas.rooms[edge.b]
                spec = PathSpec(
                    start=room_exit(source, anchors[edge.b]),
                    end=room_exit(target, anchors[edge.a]),
                    style=style,
                )
                results.append(weaver.weave(spec, rng))
                room_links += 1

        logger.debug(
            "Paths layer wove %d path(s): %d structure link(s), %d room link(s)",
            len(results),
            structure_links,
            room_links,
        )
        return {
            "paths_created": len(results),
            "structure_links": structure_links,
            "room_links": room_links,
            "tiles_modified": sum(result.tiles_modified for result in results),
            "paths": [result.to_dict() for result in results],
        }

    @staticmethod
    def _tree_links(
        anchors: list[WorldTilePos],
    ) -> list[tuple[WorldTilePos, WorldTilePos]]:
        if len(anchors) < 2:
            return []
        return [
            (anchors[edge.a], anchors[edge.b])
            for edge in minimum_spanning_tree(anchors, "manhattan")
        ]
