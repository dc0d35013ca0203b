"""The layered compositor: runs a blueprint's layers over one shared canvas.

Layers always run in LAYER_ORDER, whatever order the blueprint lists them
in; layers of the same type keep their blueprint order. Every layer draws
from one SeededRandom seeded with the blueprint seed, so the whole run is
reproducible from that seed and the blueprint alone.

A failing layer never aborts the run: its error is logged and recorded in
its LayerResult, and the remaining layers still run.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from cryptforge import config
from cryptforge.environment.canvas import Canvas, DunData
from cryptforge.environment.generators.presets.engine import PresetEngine
from cryptforge.environment.preview import render_canvas_ascii
from cryptforge.environment.tile_types import DEFAULT_PALETTE, TilePalette
from cryptforge.util.rng import SeededRandom

from .blueprint import Blueprint, LayerType, layer_rank
from .layer import LayerGenerator
from .layers import DEFAULT_LAYER_TYPES

logger = logging.getLogger(__name__)


@dataclass
class LayerResult:
    """What one layer did, or why it failed."""

    layer: str | None
    details: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"layer": self.layer, "details": self.details}
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass
class CompositionResult:
    """The outcome of one compose() run.

    Attributes:
        width: Level width in tiles.
        height: Level height in tiles.
        seed: The seed the run used. Drawn from entropy if the blueprint had none.
        layer_results: One entry per blueprint layer, in execution order.
        dun_data: Serializer-facing snapshot of the final canvas.
        preview: ASCII preview of the final canvas.
        canvas: The final canvas itself, including tags and rooms.
    """

    width: int
    height: int
    seed: int
    layer_results: list[LayerResult]
    dun_data: DunData
    preview: str
    canvas: Canvas

    @property
    def errors(self) -> list[LayerResult]:
        return [result for result in self.layer_results if not result.ok]

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "seed": self.seed,
            "layers": [result.to_dict() for result in self.layer_results],
            "dunData": self.dun_data.to_dict(),
            "preview": self.preview,
        }


@dataclass
class ValidationReport:
    """Advisory blueprint check. compose() does not require a valid report."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class LayeredCompositor:
    """Composes levels from blueprints.

    Each compositor owns its layer registry and preset engine. Custom layer
    types are added with register_generator().

    Example:
        compositor = LayeredCompositor()
        result = compositor.compose(
            {
                "width": 48,
                "height": 48,
                "seed": 7,
                "layers": [
                    {"type": "terrain", "params": {"biome": "forest"}},
                    {"type": "foliage", "params": {"density": 0.3}},
                ],
            }
        )
        print(result.preview)
    """

    def __init__(
        self, engine: PresetEngine | None = None, palette: TilePalette | None = None
    ) -> None:
        self.palette = palette or (
            engine.palette if engine is not None else DEFAULT_PALETTE
        )
        self.engine = engine or PresetEngine(palette=self.palette)
        self._generators: dict[str, LayerGenerator] = {}
        for generator_type in DEFAULT_LAYER_TYPES:
            self.register_generator(
                generator_type.layer_type, generator_type(self.engine, self.palette)
            )

    def register_generator(self, layer_type: str, generator: LayerGenerator) -> None:
        """Add a layer generator, replacing any registered for the same type.

        Raises:
            TypeError: If generator is not a LayerGenerator.
        """
        if not isinstance(generator, LayerGenerator):
            raise TypeError(
                f"Layer generators must be LayerGenerator instances, "
                f"got {type(generator).__name__}"
            )
        if layer_type in self._generators:
            logger.debug("Replacing layer generator for %r", layer_type)
        self._generators[layer_type] = generator

    def get_generator(self, layer_type: str | None) -> LayerGenerator | None:
        if layer_type is None:
            return None
        return self._generators.get(layer_type)

    def compose(self, blueprint: Blueprint | Mapping[str, Any]) -> CompositionResult:
        """Run every layer of a blueprint over a fresh canvas.

        Args:
            blueprint: A Blueprint or its plain mapping form.

        Returns:
            The composition result. Layer failures are recorded, not raised.

        Raises:
            ValueError: If the blueprint dimensions are not positive.
        """
        if not isinstance(blueprint, Blueprint):
            blueprint = Blueprint.from_dict(blueprint)

        rng = SeededRandom(blueprint.seed)
        canvas = Canvas.create_empty(
            blueprint.width, blueprint.height, blueprint.default_tile
        )
        ordered = sorted(blueprint.layers, key=lambda layer: layer_rank(layer.type))
        logger.info(
            "Composing %dx%d level, seed=%d, layers=%s",
            canvas.width,
            canvas.height,
            rng.seed,
            [layer.type for layer in ordered],
        )

        results: list[LayerResult] = []
        for layer in ordered:
            generator = self.get_generator(layer.type)
            if generator is None:
                logger.warning("No generator for layer type %r; skipping", layer.type)
                results.append(
                    LayerResult(layer.type, error=f"Unknown layer type: {layer.type!r}")
                )
                continue
            try:
                details = generator.generate(canvas, layer.params, rng)
            except Exception as exc:
                logger.exception("Layer %r failed", layer.type)
                results.append(LayerResult(layer.type, error=str(exc)))
                continue
            results.append(LayerResult(layer.type, details))

        return CompositionResult(
            width=canvas.width,
            height=canvas.height,
            seed=rng.seed,
            layer_results=results,
            dun_data=canvas.to_dun_data(),
            preview=render_canvas_ascii(canvas, self.palette),
            canvas=canvas,
        )

    def validate_blueprint(
        self, blueprint: Blueprint | Mapping[str, Any]
    ) -> ValidationReport:
        """Check dimensions and layer types without generating anything."""
        errors: list[str] = []
        warnings: list[str] = []

        if isinstance(blueprint, Blueprint):
            width, height = blueprint.width, blueprint.height
            layer_types = [layer.type for layer in blueprint.layers]
        else:
            width = blueprint.get("width")
            height = blueprint.get("height")
            raw_layers = blueprint.get("layers")
            layer_types = (
                [layer.get("type") for layer in raw_layers]
                if isinstance(raw_layers, list)
                else []
            )

        min_size = config.MIN_CANVAS_DIMENSION
        max_size = config.MAX_CANVAS_DIMENSION
        if not isinstance(width, int) or width < min_size:
            errors.append(f"Width must be at least {min_size}")
        if not isinstance(height, int) or height < min_size:
            errors.append(f"Height must be at least {min_size}")
        if (isinstance(width, int) and width > max_size) or (
            isinstance(height, int) and height > max_size
        ):
            errors.append(f"Dimensions cannot exceed {max_size}")

        if not layer_types:
            warnings.append("No layers specified, will create empty level")

        seen: set[str] = set()
        for layer_type in layer_types:
            if not layer_type:
                errors.append("Layer missing type")
                continue
            if layer_type in seen:
                warnings.append(f"Duplicate layer type: {layer_type}")
            seen.add(layer_type)
            if layer_type not in self._generators:
                warnings.append(f"Unknown layer type: {layer_type}")

        if layer_types and LayerType.TERRAIN not in seen:
            warnings.append("No terrain layer - ground will be default tile")

        return ValidationReport(valid=not errors, errors=errors, warnings=warnings)
