"""Tests for ASCII and image previews."""

from __future__ import annotations

from pathlib import Path

from PIL import Image

from cryptforge.environment.canvas import Canvas, CellTag
from cryptforge.environment.generators.layouts import generate_layout
from cryptforge.environment.preview import (
    MONSTER_COLOR,
    NPC_COLOR,
    render_canvas_ascii,
    render_canvas_image,
    render_layout_image,
)
from cryptforge.environment.tile_types import DEFAULT_PALETTE


class TestAsciiPreview:
    """Tests for render_canvas_ascii."""

    def test_dimensions(self) -> None:
        """One row per y, one character per x."""
        rows = render_canvas_ascii(Canvas.create_empty(6, 3)).split("\n")

        assert len(rows) == 3
        assert all(len(row) == 6 for row in rows)

    def test_characters(self) -> None:
        """Materials, sub-tile contents and unknown tiles each get a character."""
        canvas = Canvas.create_empty(5, 1)
        canvas.set_tile(0, 0, DEFAULT_PALETTE.first("wall_stone"))
        canvas.set_tile(1, 0, DEFAULT_PALETTE.first("water"))
        canvas.place_monster(2, 0, 1)
        canvas.place_object(3, 0, 64, tag=CellTag.NPC)
        canvas.set_tile(4, 0, 999)

        assert render_canvas_ascii(canvas) == "#~M@?"

    def test_blank_canvas_renders_spaces(self) -> None:
        """Untouched default tiles render as spaces."""
        assert render_canvas_ascii(Canvas.create_empty(3, 1)) == "   "


class TestImagePreview:
    """Tests for the Pillow renderers."""

    def test_canvas_image_size_and_markers(self, tmp_path: Path) -> None:
        """The image is scaled per tile and sub-tile markers are coloured."""
        canvas = Canvas.create_empty(4, 3)
        canvas.set_tile(0, 0, DEFAULT_PALETTE.first("grass"))
        canvas.place_monster(1, 1, 1)
        canvas.place_object(2, 2, 64, tag=CellTag.NPC)
        out = tmp_path / "canvas.png"

        image = render_canvas_image(canvas, out, scale=4)

        assert image.size == (16, 12)
        # Sub-tile (2, 2) covers pixels 4..5 at scale 4
        assert image.getpixel((4, 4)) == MONSTER_COLOR
        assert image.getpixel((8, 8)) == NPC_COLOR
        assert out.exists()
        with Image.open(out) as saved:
            assert saved.size == (16, 12)

    def test_layout_image(self) -> None:
        """Layouts render one scaled square per marker."""
        layout = generate_layout("bsp", 20, 16, seed=1)

        image = render_layout_image(layout, scale=2)

        assert image.size == (40, 32)
        assert image.mode == "RGB"
