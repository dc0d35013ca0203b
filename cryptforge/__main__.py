"""Compose a named blueprint and print its preview.

    python -m cryptforge dungeon --width 64 --height 48 --seed 42
    python -m cryptforge village --seed 7 --png village.png --verbose
"""

from __future__ import annotations

import argparse
import json
import logging

from cryptforge import config
from cryptforge.environment.generators.pipeline import (
    BLUEPRINT_NAMES,
    LayeredCompositor,
    create_blueprint,
)
from cryptforge.environment.preview import render_canvas_image


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="cryptforge", description="Generate a level from a named blueprint"
    )
    parser.add_argument(
        "blueprint", choices=BLUEPRINT_NAMES, help="Blueprint to compose"
    )
    parser.add_argument("--width", type=int, default=config.DEFAULT_LEVEL_WIDTH)
    parser.add_argument("--height", type=int, default=config.DEFAULT_LEVEL_HEIGHT)
    parser.add_argument(
        "--seed", type=str, help="Integer or string seed (default: system entropy)"
    )
    parser.add_argument("--png", type=str, help="Also write a PNG preview to this path")
    parser.add_argument(
        "--json", action="store_true", help="Print the layer results as JSON"
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s"
        )

    seed: int | str | None = args.seed
    if seed is not None and seed.lstrip("-").isdigit():
        seed = int(seed)

    compositor = LayeredCompositor()
    blueprint = create_blueprint(args.blueprint, args.width, args.height, seed)
    report = compositor.validate_blueprint(blueprint)
    for message in report.errors:
        print(f"error: {message}")
    for message in report.warnings:
        print(f"warning: {message}")

    result = compositor.compose(blueprint)
    print(result.preview)
    print(f"\nseed={result.seed} size={result.width}x{result.height}")
    for layer in result.layer_results:
        status = "ok" if layer.ok else f"failed: {layer.error}"
        print(f"  {layer.layer}: {status}")

    if args.json:
        print(json.dumps([layer.to_dict() for layer in result.layer_results], indent=2))
    if args.png:
        render_canvas_image(result.canvas, args.png, compositor.palette)
        print(f"Saved preview to {args.png}")

    return 0 if result.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
