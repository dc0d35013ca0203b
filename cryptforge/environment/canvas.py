"""The mutable level canvas shared by presets and compositor layers.

A Canvas owns one level in progress: the tile matrix, the double-resolution
monster and object layers, and a per-cell tag bitmask recording what each
layer put where. Layers and presets mutate it in place; later layers read
the tags to avoid trampling earlier work.

All arrays are indexed [x, y] with shape (width, height), matching the rest
of the package. Every write goes through a bounds check and silently skips
coordinates outside the canvas.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import IntFlag
from typing import TYPE_CHECKING, Any

import numpy as np

from cryptforge import config
from cryptforge.types import SubTileCoord, WorldTileCoord, WorldTilePos

if TYPE_CHECKING:
    from cryptforge.environment.generators.base import Stairs
    from cryptforge.util.coordinates import Room


class CellTag(IntFlag):
    """What occupies a cell. Stored as a uint16 bitmask per cell."""

    NONE = 0
    TERRAIN = 1 << 0
    STRUCTURE = 1 << 1
    WALL = 1 << 2
    PATH = 1 << 3
    DOOR = 1 << 4
    FOLIAGE = 1 << 5
    WATER = 1 << 6
    OBJECT = 1 << 7
    MONSTER = 1 << 8
    NPC = 1 << 9
    LIGHT = 1 << 10
    SPECIAL = 1 << 11
    FLOOR = 1 << 12

    @classmethod
    def parse(cls, value: CellTag | str) -> CellTag:
        """Accept a tag or its lowercase name ("structure", "path", ...).

        Raises:
            ValueError: If the name is not a known tag.
        """
        if isinstance(value, CellTag):
            return value
        try:
            return cls[value.upper()]
        except KeyError:
            raise ValueError(f"Unknown cell tag: {value!r}") from None

    @classmethod
    def combine(cls, values: Iterable[CellTag | str]) -> CellTag:
        """Union of several tags or tag names."""
        result = cls.NONE
        for value in values:
            result |= cls.parse(value)
        return result


# Cells carrying any of these tags are never painted over by paths
PROTECTED_TAGS = CellTag.STRUCTURE | CellTag.WALL | CellTag.DOOR


@dataclass
class DunData:
    """Serializer-facing snapshot of a canvas.

    Attributes:
        width: Width in tiles.
        height: Height in tiles.
        base_tiles: Tile ids, shape (width, height).
        monsters: Sub-tile monster ids, shape (2*width, 2*height), or None.
        objects: Sub-tile object ids, shape (2*width, 2*height), or None.
    """

    width: int
    height: int
    base_tiles: np.ndarray
    monsters: np.ndarray | None = None
    objects: np.ndarray | None = None

    @property
    def has_monsters(self) -> bool:
        return self.monsters is not None

    @property
    def has_objects(self) -> bool:
        return self.objects is not None

    def to_dict(self) -> dict[str, Any]:
        """Row-major nested lists ([y][x]) for level file writers."""

        def rows(array: np.ndarray | None) -> list[list[int]] | None:
            return None if array is None else array.T.tolist()

        return {
            "width": self.width,
            "height": self.height,
            "baseTiles": rows(self.base_tiles),
            "items": None,
            "monsters": rows(self.monsters),
            "objects": rows(self.objects),
            "hasItems": False,
            "hasMonsters": self.has_monsters,
            "hasObjects": self.has_objects,
        }


@dataclass
class Canvas:
    """Mutable state container for one level in progress.

    Attributes:
        width: Canvas width in tiles. Fixed at creation.
        height: Canvas height in tiles. Fixed at creation.
        tiles: uint16 array of tile ids. Shape: (width, height).
        metadata: uint16 array of CellTag bitmasks. Shape: (width, height).
        monsters: Sub-tile monster ids, allocated on first write.
        objects: Sub-tile object ids, allocated on first write.
        rooms: Room descriptors registered by layouts and presets.
        stairs: Stairs placement from a terrain layout, if any.
        default_tile: The tile the canvas was filled with.
    """

    width: int
    height: int
    tiles: np.ndarray
    metadata: np.ndarray
    monsters: np.ndarray | None = None
    objects: np.ndarray | None = None
    rooms: list[Room] = field(default_factory=list)
    stairs: Stairs | None = None
    default_tile: int = 0

    @classmethod
    def create_empty(cls, width: int, height: int, default_tile: int = 0) -> Canvas:
        """Create a blank canvas filled with default_tile and no tags.

        Raises:
            ValueError: If either dimension is not positive.
        """
        if width <= 0 or height <= 0:
            raise ValueError(
                f"Canvas dimensions must be positive, got {width}x{height}"
            )
        tiles = np.full((width, height), default_tile, dtype=np.uint16, order="F")
        metadata = np.zeros((width, height), dtype=np.uint16, order="F")
        return cls(
            width=width,
            height=height,
            tiles=tiles,
            metadata=metadata,
            default_tile=default_tile,
        )

    # -------------------------------------------------------------------------
    # Tiles
    # -------------------------------------------------------------------------

    def in_bounds(self, x: WorldTileCoord, y: WorldTileCoord) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_tile(self, x: WorldTileCoord, y: WorldTileCoord) -> int | None:
        if not self.in_bounds(x, y):
            return None
        return int(self.tiles[x, y])

    def set_tile(
        self,
        x: WorldTileCoord,
        y: WorldTileCoord,
        tile: int,
        *tags: CellTag | str,
    ) -> bool:
        """Write a tile and optionally tag the cell.

        Returns:
            False if the position is outside the canvas and nothing was written.
        """
        if not self.in_bounds(x, y):
            return False
        self.tiles[x, y] = tile
        if tags:
            self.metadata[x, y] |= int(CellTag.combine(tags))
        return True

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    def tags_at(self, x: WorldTileCoord, y: WorldTileCoord) -> CellTag:
        if not self.in_bounds(x, y):
            return CellTag.NONE
        return CellTag(int(self.metadata[x, y]))

    def add_tags(
        self, x: WorldTileCoord, y: WorldTileCoord, *tags: CellTag | str
    ) -> None:
        if self.in_bounds(x, y):
            self.metadata[x, y] |= int(CellTag.combine(tags))

    def clear_tags(
        self, x: WorldTileCoord, y: WorldTileCoord, *tags: CellTag | str
    ) -> None:
        if self.in_bounds(x, y):
            self.metadata[x, y] &= 0xFFFF ^ int(CellTag.combine(tags))

    def has_tag(
        self, x: WorldTileCoord, y: WorldTileCoord, *tags: CellTag | str
    ) -> bool:
        """True if the cell carries any of the given tags."""
        if not self.in_bounds(x, y):
            return False
        return bool(int(self.metadata[x, y]) & CellTag.combine(tags))

    def is_blocked(
        self, x: WorldTileCoord, y: WorldTileCoord, avoid: Iterable[CellTag | str]
    ) -> bool:
        """True if the cell is off-canvas or carries any avoided tag."""
        if not self.in_bounds(x, y):
            return True
        return bool(int(self.metadata[x, y]) & CellTag.combine(avoid))

    def tag_mask(self, *tags: CellTag | str) -> np.ndarray:
        """Boolean map of cells carrying any of the given tags."""
        return (self.metadata & int(CellTag.combine(tags))) != 0

    def free_cells(self, avoid: Iterable[CellTag | str]) -> list[WorldTilePos]:
        """All cells without any of the avoided tags, in x-major order."""
        xs, ys = np.nonzero(~self.tag_mask(*avoid))
        return [(int(x), int(y)) for x, y in zip(xs, ys, strict=True)]

    # -------------------------------------------------------------------------
    # Sub-tile layers
    # -------------------------------------------------------------------------

    @property
    def sub_width(self) -> int:
        return self.width * config.SUB_TILE_SCALE

    @property
    def sub_height(self) -> int:
        return self.height * config.SUB_TILE_SCALE

    def _allocate_sub_layer(self) -> np.ndarray:
        return np.zeros((self.sub_width, self.sub_height), dtype=np.uint16, order="F")

    def set_monster(self, sx: SubTileCoord, sy: SubTileCoord, monster_id: int) -> bool:
        """Write a monster id at sub-tile coordinates."""
        if not (0 <= sx < self.sub_width and 0 <= sy < self.sub_height):
            return False
        if self.monsters is None:
            self.monsters = self._allocate_sub_layer()
        self.monsters[sx, sy] = monster_id
        return True

    def set_object(self, sx: SubTileCoord, sy: SubTileCoord, object_id: int) -> bool:
        """Write an object id at sub-tile coordinates."""
        if not (0 <= sx < self.sub_width and 0 <= sy < self.sub_height):
            return False
        if self.objects is None:
            self.objects = self._allocate_sub_layer()
        self.objects[sx, sy] = object_id
        return True

    def place_monster(
        self, x: WorldTileCoord, y: WorldTileCoord, monster_id: int
    ) -> bool:
        """Put a monster in the top-left sub-tile slot of a tile and tag it."""
        scale = config.SUB_TILE_SCALE
        if not self.in_bounds(x, y):
            return False
        if not self.set_monster(x * scale, y * scale, monster_id):
            return False
        self.add_tags(x, y, CellTag.MONSTER)
        return True

    def place_object(
        self,
        x: WorldTileCoord,
        y: WorldTileCoord,
        object_id: int,
        tag: CellTag = CellTag.OBJECT,
    ) -> bool:
        """Put an object in the top-left sub-tile slot of a tile and tag it."""
        scale = config.SUB_TILE_SCALE
        if not self.in_bounds(x, y):
            return False
        if not self.set_object(x * scale, y * scale, object_id):
            return False
        self.add_tags(x, y, tag)
        return True

    def monster_at(self, x: WorldTileCoord, y: WorldTileCoord) -> int:
        """First non-zero monster id in any sub-tile slot of a tile, else 0."""
        return self._sub_value(self.monsters, x, y)

    def object_at(self, x: WorldTileCoord, y: WorldTileCoord) -> int:
        """First non-zero object id in any sub-tile slot of a tile, else 0."""
        return self._sub_value(self.objects, x, y)

    def _sub_value(self, layer: np.ndarray | None, x: int, y: int) -> int:
        if layer is None or not self.in_bounds(x, y):
            return 0
        scale = config.SUB_TILE_SCALE
        block = layer[x * scale : (x + 1) * scale, y * scale : (y + 1) * scale]
        nonzero = block[block != 0]
        return int(nonzero[0]) if nonzero.size else 0

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def to_dun_data(self) -> DunData:
        """Snapshot the canvas for a level serializer."""
        return DunData(
            width=self.width,
            height=self.height,
            base_tiles=self.tiles.copy(),
            monsters=None if self.monsters is None else self.monsters.copy(),
            objects=None if self.objects is None else self.objects.copy(),
        )
