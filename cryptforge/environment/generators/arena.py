"""Central arena with satellite rooms."""

from __future__ import annotations

import logging
import math

import numpy as np

from cryptforge import config
from cryptforge.environment.tile_types import BinaryMarker
from cryptforge.types import RandomSeed, TileCoord
from cryptforge.util.coordinates import Room

from .base import (
    BaseLayoutGenerator,
    GeneratedLayout,
    carve_room,
    place_stairs_in_rooms,
)
from .connector import connect_rooms

logger = logging.getLogger(__name__)

# Satellite slots in placement order
SATELLITE_SIDES: tuple[str, ...] = ("top", "bottom", "left", "right")


class ArenaGenerator(BaseLayoutGenerator):
    """One large central chamber ringed by up to four satellite rooms.

    The arena may be studded with pillars on a regular lattice; the middle
    stays open within ``center_clearance`` tiles of the center. Satellites
    sit against the top, bottom, left and right edges (in that order) and
    everything is joined with MST corridors. Stairs only go in satellites.
    """

    algorithm = "arena"

    def __init__(
        self,
        map_width: TileCoord,
        map_height: TileCoord,
        seed: RandomSeed = None,
        *,
        arena_size: float = config.ARENA_SIZE,
        surrounding_rooms: int = config.ARENA_SURROUNDING_ROOMS,
        pillars: bool = True,
        pillar_spacing: int = config.ARENA_PILLAR_SPACING,
        pillar_chance: float = config.ARENA_PILLAR_CHANCE,
        center_clearance: float = config.ARENA_CENTER_CLEARANCE,
        corridor_width: int = config.BSP_CORRIDOR_WIDTH,
    ) -> None:
        super().__init__(map_width, map_height, seed)
        self.arena_size = arena_size
        self.surrounding_rooms = max(1, min(len(SATELLITE_SIDES), surrounding_rooms))
        self.pillars = pillars
        self.pillar_spacing = max(1, pillar_spacing)
        self.pillar_chance = pillar_chance
        self.center_clearance = center_clearance
        self.corridor_width = corridor_width

    def generate(self) -> GeneratedLayout:
        rng = self.rng
        width, height = self.map_width, self.map_height
        grid = self._new_grid()

        arena_w = max(1, int(width * self.arena_size))
        arena_h = max(1, int(height * self.arena_size))
        arena_x = (width - arena_w) // 2
        arena_y = (height - arena_h) // 2
        arena = Room(arena_x, arena_y, arena_w, arena_h, type="arena")
        carve_room(grid, arena)
        rooms = [arena]

        if self.pillars and arena_w > 8 and arena_h > 8:
            self._place_pillars(grid, arena)

        min_size = config.ARENA_SATELLITE_MIN_SIZE
        max_size = config.ARENA_SATELLITE_MAX_SIZE
        for side in SATELLITE_SIDES[: self.surrounding_rooms]:
            room_w = min(rng.randint(min_size, max_size), max(1, width - 4))
            room_h = min(rng.randint(min_size, max_size), max(1, height - 4))
            room = self._satellite(side, room_w, room_h)
            carve_room(grid, room)
            rooms.append(room)

        connections = connect_rooms(
            grid, rooms, rng, metric="manhattan", corridor_width=self.corridor_width
        )
        stairs = place_stairs_in_rooms(grid, rooms[1:], rng, avoid=arena)
        logger.debug(
            "Arena layout %dx%d seed=%d: arena %dx%d, %d satellites",
            width,
            height,
            self.seed,
            arena_w,
            arena_h,
            len(rooms) - 1,
        )
        return self._layout(grid, rooms, stairs, connections)

    def _place_pillars(self, grid: np.ndarray, arena: Room) -> None:
        cx, cy = arena.center
        spacing = self.pillar_spacing
        for py in range(arena.y + 2, arena.y + arena.height - 2, spacing):
            for px in range(arena.x + 2, arena.x + arena.width - 2, spacing):
                if math.hypot(px - cx, py - cy) <= self.center_clearance:
                    continue
                if self.rng.random() < self.pillar_chance:
                    grid[px, py] = BinaryMarker.PILLAR

    def _satellite(self, side: str, room_w: int, room_h: int) -> Room:
        width, height = self.map_width, self.map_height
        mid_x = width // 2 - room_w // 2
        mid_y = height // 2 - room_h // 2
        if side == "top":
            return Room(mid_x, 2, room_w, room_h, type=side)
        if side == "bottom":
            return Room(mid_x, height - 2 - room_h, room_w, room_h, type=side)
        if side == "left":
            return Room(2, mid_y, room_w, room_h, type=side)
        if side == "right":
            return Room(width - 2 - room_w, mid_y, room_w, room_h, type=side)
        raise ValueError(f"Unknown satellite side: {side!r}")


def generate_arena(
    width: TileCoord, height: TileCoord, *, seed: RandomSeed = None, **options: object
) -> GeneratedLayout:
    """Generate an arena layout. Options are the ArenaGenerator keyword arguments."""
    generator = ArenaGenerator(width, height, seed, **options)  # type: ignore[arg-type]
    return generator.generate()
