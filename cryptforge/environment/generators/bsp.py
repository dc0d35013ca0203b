"""Binary space partition rooms-and-corridors layout."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from cryptforge import config
from cryptforge.types import RandomSeed, TileCoord
from cryptforge.util.coordinates import Room
from cryptforge.util.rng import SeededRandom

from .base import (
    BaseLayoutGenerator,
    GeneratedLayout,
    carve_room,
    place_stairs_in_rooms,
)
from .connector import connect_rooms

logger = logging.getLogger(__name__)


@dataclass
class BSPNode:
    """A rectangle in the partition tree. Leaves get one room each."""

    x: int
    y: int
    width: int
    height: int
    left: BSPNode | None = None
    right: BSPNode | None = None
    room: Room | None = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def split(self, rng: SeededRandom, min_size: int) -> bool:
        """Bisect this node along a random axis.

        Returns:
            False if the node is already split or too small to hold two
            children of at least ``min_size``.
        """
        if not self.is_leaf:
            return False
        if self.width < min_size * 2 + 2 or self.height < min_size * 2 + 2:
            return False

        split_horizontal = rng.random() > 0.5
        max_split = (self.height if split_horizontal else self.width) - min_size
        if max_split <= min_size:
            return False

        position = rng.randint(min_size, max_split)
        if split_horizontal:
            self.left = BSPNode(self.x, self.y, self.width, position)
            self.right = BSPNode(
                self.x, self.y + position, self.width, self.height - position
            )
        else:
            self.left = BSPNode(self.x, self.y, position, self.height)
            self.right = BSPNode(
                self.x + position, self.y, self.width - position, self.height
            )
        return True

    def create_rooms(self, rng: SeededRandom, min_size: int, max_size: int) -> None:
        """Place one randomly sized room inside every leaf, with a 1-tile margin."""
        if not self.is_leaf:
            if self.left is not None:
                self.left.create_rooms(rng, min_size, max_size)
            if self.right is not None:
                self.right.create_rooms(rng, min_size, max_size)
            return

        max_w = min(max_size, self.width - 2)
        max_h = min(max_size, self.height - 2)
        if max_w < 1 or max_h < 1:
            return
        room_w = rng.randint(min(min_size, max_w), max_w)
        room_h = rng.randint(min(min_size, max_h), max_h)
        room_x = rng.randint(1, self.width - room_w - 1) + self.x
        room_y = rng.randint(1, self.height - room_h - 1) + self.y
        self.room = Room(room_x, room_y, room_w, room_h)

    def rooms(self) -> list[Room]:
        """Rooms in depth-first, left-before-right order."""
        found: list[Room] = []
        if self.room is not None:
            found.append(self.room)
        if self.left is not None:
            found.extend(self.left.rooms())
        if self.right is not None:
            found.extend(self.right.rooms())
        return found


class BSPGenerator(BaseLayoutGenerator):
    """Recursively partitioned rooms joined by MST corridors.

    The split axis is a coin flip every time rather than alternating, so long
    thin partitions (and long corridors) are possible but rare.
    """

    algorithm = "bsp"

    def __init__(
        self,
        map_width: TileCoord,
        map_height: TileCoord,
        seed: RandomSeed = None,
        *,
        split_iterations: int = config.BSP_SPLIT_ITERATIONS,
        connect_all_rooms: bool = True,
        min_room_size: int = config.ROOM_MIN_SIZE,
        max_room_size: int = config.ROOM_MAX_SIZE,
        corridor_width: int = config.BSP_CORRIDOR_WIDTH,
        widen_turns: bool = False,
        add_doors: bool = False,
    ) -> None:
        super().__init__(map_width, map_height, seed)
        self.split_iterations = split_iterations
        self.connect_all_rooms = connect_all_rooms
        self.min_room_size = max(1, min_room_size)
        self.max_room_size = max(self.min_room_size, max_room_size)
        self.corridor_width = corridor_width
        self.widen_turns = widen_turns
        self.add_doors = add_doors

    def generate(self) -> GeneratedLayout:
        rng = self.rng
        grid = self._new_grid()

        root = BSPNode(1, 1, self.map_width - 2, self.map_height - 2)
        nodes = [root]
        for _ in range(self.split_iterations):
            new_nodes: list[BSPNode] = []
            for node in nodes:
                if node.split(rng, self.min_room_size):
                    assert node.left is not None and node.right is not None
                    new_nodes.extend((node.left, node.right))
            nodes.extend(new_nodes)

        root.create_rooms(rng, self.min_room_size, self.max_room_size)
        rooms = root.rooms()
        for room in rooms:
            carve_room(grid, room)

        connections = []
        if self.connect_all_rooms and len(rooms) > 1:
            connections = connect_rooms(
                grid,
                rooms,
                rng,
                metric="manhattan",
                corridor_width=self.corridor_width,
                widen_turns=self.widen_turns,
                add_doors=self.add_doors,
            )

        stairs = place_stairs_in_rooms(grid, rooms, rng)
        logger.debug(
            "BSP layout %dx%d seed=%d: %d rooms, %d corridors",
            self.map_width,
            self.map_height,
            self.seed,
            len(rooms),
            len(connections),
        )
        return self._layout(grid, rooms, stairs, connections)


def generate_bsp(
    width: TileCoord, height: TileCoord, *, seed: RandomSeed = None, **options: object
) -> GeneratedLayout:
    """Generate a BSP layout. Options are the BSPGenerator keyword arguments."""
    generator = BSPGenerator(width, height, seed, **options)  # type: ignore[arg-type]
    return generator.generate()
