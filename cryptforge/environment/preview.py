"""Debug previews of canvases and layouts.

ASCII previews are what the compositor returns with every result. The
Pillow renderers produce small colour images for eyeballing generator
output; they are debugging aids, not a game renderer.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image as PILImage

from cryptforge import config
from cryptforge.environment.canvas import Canvas, CellTag
from cryptforge.environment.tile_types import DEFAULT_PALETTE, BinaryMarker, TilePalette

if TYPE_CHECKING:
    from cryptforge.environment.generators.base import GeneratedLayout

# Material -> preview character
MATERIAL_CHARS: dict[str, str] = {
    "grass": ",",
    "dirt": ".",
    "cobblestone": "=",
    "water": "~",
    "floor": ".",
    "sand": ".",
    "snow": ".",
    "ice": "_",
    "mud": ";",
    "lava": "~",
    "ash": ".",
    "blight": ";",
    "wall_stone": "#",
    "wall_wood": "#",
    "pillar": "O",
    "roof": "^",
    "door": "+",
    "window": "|",
    "stairs_up": "<",
    "stairs_down": ">",
    "well": "o",
    "sign": "!",
    "fountain": "o",
    "fire_pit": "*",
    "tent": "A",
    "cart": "c",
    "barrel": "b",
    "crate": "b",
    "tree": "T",
    "bush": "*",
    "flowers": '"',
    "dead_tree": "t",
    "mushroom": "m",
    "rubble": ":",
    "bones": "%",
    "rock": "o",
}

# Material -> RGB preview colour
MATERIAL_COLORS: dict[str, tuple[int, int, int]] = {
    "grass": (86, 140, 60),
    "dirt": (133, 100, 62),
    "cobblestone": (150, 150, 140),
    "water": (50, 90, 180),
    "floor": (110, 104, 96),
    "sand": (214, 192, 128),
    "snow": (235, 240, 245),
    "ice": (170, 210, 235),
    "mud": (92, 72, 48),
    "lava": (220, 80, 20),
    "ash": (80, 78, 76),
    "blight": (90, 60, 100),
    "wall_stone": (60, 60, 66),
    "wall_wood": (100, 70, 40),
    "pillar": (40, 40, 46),
    "door": (170, 120, 50),
    "stairs_up": (240, 240, 120),
    "stairs_down": (200, 160, 40),
    "tree": (30, 90, 30),
    "bush": (60, 120, 50),
    "flowers": (200, 120, 180),
    "rubble": (120, 110, 100),
    "bones": (220, 215, 200),
}

MARKER_COLORS: dict[int, tuple[int, int, int]] = {
    BinaryMarker.FLOOR: (110, 104, 96),
    BinaryMarker.WALL: (40, 40, 46),
    BinaryMarker.STAIRS_UP: (240, 240, 120),
    BinaryMarker.STAIRS_DOWN: (200, 160, 40),
    BinaryMarker.DOOR: (170, 120, 50),
    BinaryMarker.PILLAR: (20, 20, 24),
}

UNKNOWN_COLOR = (255, 0, 255)
DEFAULT_TILE_COLOR = (0, 0, 0)
MONSTER_COLOR = (220, 40, 40)
OBJECT_COLOR = (250, 210, 60)
NPC_COLOR = (80, 200, 240)


def render_canvas_ascii(canvas: Canvas, palette: TilePalette | None = None) -> str:
    """One text row per y.

    Sub-tile contents win over the tile: ``M`` monster, ``@`` NPC, ``$``
    object. Untouched default tiles render as a space and tiles the palette
    does not know as ``?``.
    """
    palette = palette or DEFAULT_PALETTE
    rows = []
    for y in range(canvas.height):
        row = []
        for x in range(canvas.width):
            row.append(_cell_char(canvas, palette, x, y))
        rows.append("".join(row))
    return "\n".join(rows)


def _cell_char(canvas: Canvas, palette: TilePalette, x: int, y: int) -> str:
    if canvas.monster_at(x, y):
        return "M"
    if canvas.object_at(x, y):
        return "@" if canvas.has_tag(x, y, CellTag.NPC) else "$"
    tile = int(canvas.tiles[x, y])
    material = palette.material_of(tile)
    if material is None:
        return " " if tile == canvas.default_tile else "?"
    return MATERIAL_CHARS.get(material, "?")


def render_canvas_image(
    canvas: Canvas,
    path: str | Path | None = None,
    palette: TilePalette | None = None,
    scale: int = 4,
) -> PILImage.Image:
    """Render a canvas to an RGB image, one ``scale``-pixel square per tile.

    Monsters, NPCs and objects are drawn as small squares at sub-tile
    resolution on top of the tiles.

    Args:
        canvas: The canvas to render.
        path: If given, the image is also saved there (format from suffix).
        palette: Material lookup for tile colours.
        scale: Pixels per tile. Must be a multiple of the sub-tile scale to
            keep sub-tile markers aligned.

    Returns:
        The rendered image.
    """
    palette = palette or DEFAULT_PALETTE
    pixels = np.zeros((canvas.height, canvas.width, 3), dtype="u1")
    for tile in np.unique(canvas.tiles).tolist():
        material = palette.material_of(tile)
        if material is None:
            color = DEFAULT_TILE_COLOR if tile == canvas.default_tile else UNKNOWN_COLOR
        else:
            color = MATERIAL_COLORS.get(material, UNKNOWN_COLOR)
        # tiles is indexed [x, y]; image rows are y
        pixels[(canvas.tiles == tile).T] = color

    image = PILImage.fromarray(pixels).resize(
        (canvas.width * scale, canvas.height * scale), PILImage.Resampling.NEAREST
    )

    sub_scale = config.SUB_TILE_SCALE
    sub_pixels = max(1, scale // sub_scale)
    npc_mask = canvas.tag_mask(CellTag.NPC)
    overlays = ((canvas.objects, OBJECT_COLOR), (canvas.monsters, MONSTER_COLOR))
    for layer, color in overlays:
        if layer is None:
            continue
        for sx, sy in zip(*np.nonzero(layer), strict=True):
            marker = color
            if layer is canvas.objects and npc_mask[sx // sub_scale, sy // sub_scale]:
                marker = NPC_COLOR
            image.paste(
                marker,
                (
                    int(sx) * sub_pixels,
                    int(sy) * sub_pixels,
                    (int(sx) + 1) * sub_pixels,
                    (int(sy) + 1) * sub_pixels,
                ),
            )

    if path is not None:
        image.save(str(path))
    return image


def render_layout_image(layout: GeneratedLayout, scale: int = 4) -> PILImage.Image:
    """Render a layout's marker grid to an RGB image."""
    grid = layout.grid
    pixels = np.zeros((layout.height, layout.width, 3), dtype="u1")
    pixels[:] = UNKNOWN_COLOR
    for marker, color in MARKER_COLORS.items():
        pixels[(grid == marker).T] = color
    return PILImage.fromarray(pixels).resize(
        (layout.width * scale, layout.height * scale), PILImage.Resampling.NEAREST
    )
