from __future__ import annotations

from typing import TypeAlias

# =============================================================================
# SPATIAL TYPES
# =============================================================================

TileCoord: TypeAlias = int  # Always integer tile position

# World coordinates - absolute positions on the level canvas
WorldTileCoord: TypeAlias = TileCoord  # Example: x=5, y=3
WorldTilePos: TypeAlias = tuple[
    WorldTileCoord, WorldTileCoord
]  # Example: (5, 3) = tile 5,3 on canvas

# Sub-tile coordinates for the double-resolution monster/object layers
SubTileCoord: TypeAlias = int  # Example: sx=11 -> tile 5, right half
SubTilePos: TypeAlias = tuple[SubTileCoord, SubTileCoord]

# Continuous positions produced by sampling and curve interpolation
FloatPos: TypeAlias = tuple[float, float]  # Example: (5.37, 3.92)

# Dimensions
TileDimensions: TypeAlias = tuple[int, int]  # Example: (40, 30) = 40x30 tile canvas

# =============================================================================
# RANDOMNESS
# =============================================================================

# Seeds may be integers, strings (hashed with crc32) or None for entropy
RandomSeed: TypeAlias = int | str | None
