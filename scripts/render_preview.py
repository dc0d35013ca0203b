#!/usr/bin/env python3
"""Render PNG previews of layouts or composed blueprints.

    python scripts/render_preview.py layout bsp --seed 3 -o bsp.png
    python scripts/render_preview.py blueprint village --seed 42 -o village.png
"""

from __future__ import annotations

import argparse
from pathlib import Path

from cryptforge.environment.generators.layouts import (
    LAYOUT_GENERATORS,
    generate_layout,
)
from cryptforge.environment.generators.pipeline import (
    BLUEPRINT_NAMES,
    LayeredCompositor,
    create_blueprint,
)
from cryptforge.environment.preview import render_canvas_image, render_layout_image


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Render generator output to PNG")
    parser.add_argument("kind", choices=("layout", "blueprint"))
    parser.add_argument("name", help="Layout algorithm or blueprint name")
    parser.add_argument("--width", type=int, default=64)
    parser.add_argument("--height", type=int, default=48)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--scale", type=int, default=8, help="Pixels per tile")
    parser.add_argument("-o", "--output", type=Path, help="Output PNG path")
    args = parser.parse_args(argv)

    output = args.output or Path(f"{args.name}_{args.seed}.png")
    if args.kind == "layout":
        if args.name not in LAYOUT_GENERATORS:
            choices = sorted(LAYOUT_GENERATORS)
            parser.error(f"unknown layout {args.name!r}; choose from {choices}")
        layout = generate_layout(args.name, args.width, args.height, args.seed)
        render_layout_image(layout, args.scale).save(output)
    else:
        if args.name not in BLUEPRINT_NAMES:
            choices = list(BLUEPRINT_NAMES)
            parser.error(f"unknown blueprint {args.name!r}; choose from {choices}")
        compositor = LayeredCompositor()
        result = compositor.compose(
            create_blueprint(args.name, args.width, args.height, args.seed)
        )
        render_canvas_image(result.canvas, output, compositor.palette, args.scale)
    print(f"Saved {output}")


if __name__ == "__main__":
    main()
