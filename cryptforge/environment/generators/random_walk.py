"""Random walk ("drunkard's walk") layout."""

from __future__ import annotations

import logging

import numpy as np

from cryptforge import config
from cryptforge.environment.tile_types import BinaryMarker
from cryptforge.types import RandomSeed, TileCoord
from cryptforge.util.coordinates import Room
from cryptforge.util.pathfinding import CARDINAL_DIRECTIONS

from .base import (
    BaseLayoutGenerator,
    GeneratedLayout,
    carve_room,
    place_stairs_far_apart,
    place_stairs_in_rooms,
)

logger = logging.getLogger(__name__)


class RandomWalkGenerator(BaseLayoutGenerator):
    """A walker tunnels from a central seed room, dropping small rooms.

    The walker picks a cardinal direction, tunnels 1..max_tunnel_length steps
    clamped two cells from every edge, and on each newly opened cell may carve
    a small room around itself. It stops when the number of opened cells
    reaches ``floor_percent`` of the grid area. A step budget proportional to
    the area guarantees termination on small or crowded grids.

    Every cell the walker touches is adjacent to the previous one, so the
    whole layout is a single connected region.
    """

    algorithm = "drunkard_walk"

    def __init__(
        self,
        map_width: TileCoord,
        map_height: TileCoord,
        seed: RandomSeed = None,
        *,
        floor_percent: float = config.WALK_FLOOR_PERCENT,
        max_tunnel_length: int = config.WALK_MAX_TUNNEL_LENGTH,
        room_chance: float = config.WALK_ROOM_CHANCE,
    ) -> None:
        super().__init__(map_width, map_height, seed)
        self.floor_percent = floor_percent
        self.max_tunnel_length = max(1, max_tunnel_length)
        self.room_chance = room_chance

    def generate(self) -> GeneratedLayout:
        rng = self.rng
        width, height = self.map_width, self.map_height
        margin = config.WALK_EDGE_MARGIN
        grid = self._new_grid()
        rooms: list[Room] = []

        target = int(width * height * self.floor_percent)
        x, y = width // 2, height // 2
        half = config.WALK_SEED_ROOM_SIZE // 2

        start_room = Room(
            x - half, y - half, config.WALK_SEED_ROOM_SIZE, config.WALK_SEED_ROOM_SIZE
        )
        opened = self._carve_counting(grid, start_room)
        rooms.append(start_room)

        budget = width * height * config.WALK_STEP_BUDGET_FACTOR
        steps = 0
        while opened < target and steps < budget:
            dx, dy = CARDINAL_DIRECTIONS[rng.randint(0, 3)]
            tunnel_length = rng.randint(1, self.max_tunnel_length)

            for _ in range(tunnel_length):
                steps += 1
                x = max(margin, min(width - margin - 1, x + dx))
                y = max(margin, min(height - margin - 1, y + dy))

                if grid[x, y] != BinaryMarker.WALL:
                    continue
                grid[x, y] = BinaryMarker.FLOOR
                opened += 1

                if rng.random() < self.room_chance:
                    room = self._random_room_at(x, y)
                    if room is not None:
                        opened += self._carve_counting(grid, room)
                        rooms.append(room)

        if opened < target:
            logger.debug(
                "Random walk seed=%d stopped at %d/%d floor cells (step budget)",
                self.seed,
                opened,
                target,
            )

        if rooms:
            stairs = place_stairs_in_rooms(grid, rooms, rng)
        else:
            stairs = place_stairs_far_apart(grid, rng)
        return self._layout(grid, rooms, stairs)

    def _random_room_at(self, x: int, y: int) -> Room | None:
        rng = self.rng
        room_w = rng.randint(config.WALK_ROOM_MIN_SIZE, config.WALK_ROOM_MAX_SIZE)
        room_h = rng.randint(config.WALK_ROOM_MIN_SIZE, config.WALK_ROOM_MAX_SIZE)
        room_x = x - room_w // 2
        room_y = y - room_h // 2
        if (
            room_x > 1
            and room_y > 1
            and room_x + room_w < self.map_width - 1
            and room_y + room_h < self.map_height - 1
        ):
            return Room(room_x, room_y, room_w, room_h)
        return None

    @staticmethod
    def _carve_counting(grid: np.ndarray, room: Room) -> int:
        """Carve a room and return how many wall cells it opened."""
        width, height = grid.shape
        footprint = grid[
            max(room.x, 1) : min(room.x + room.width, width - 1),
            max(room.y, 1) : min(room.y + room.height, height - 1),
        ]
        opened = int(np.count_nonzero(footprint == BinaryMarker.WALL))
        carve_room(grid, room)
        return opened


def generate_random_walk(
    width: TileCoord, height: TileCoord, *, seed: RandomSeed = None, **options: object
) -> GeneratedLayout:
    """Generate a random-walk layout.

    Options are the RandomWalkGenerator keyword arguments.
    """
    generator = RandomWalkGenerator(width, height, seed, **options)  # type: ignore[arg-type]
    return generator.generate()
