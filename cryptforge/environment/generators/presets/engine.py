"""The preset registry and instantiation engine."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from cryptforge.environment.canvas import Canvas
from cryptforge.environment.tile_types import DEFAULT_PALETTE, TilePalette
from cryptforge.types import RandomSeed
from cryptforge.util.rng import SeededRandom

from .base import PresetCall, PresetDefinition, PresetInstance, resolve_params
from .builtin import builtin_presets

logger = logging.getLogger(__name__)


class PresetEngine:
    """Registry of named presets plus the code that runs them.

    Each engine owns its own registry. Built-in presets are registered on
    construction; register_preset() adds custom ones or replaces a built-in.

    Example:
        engine = PresetEngine()
        canvas = engine.create_canvas(40, 40)
        instance = engine.instantiate(canvas, "town_cluster", {"count": 6, "seed": 42})
    """

    def __init__(
        self,
        presets: Iterable[PresetDefinition] | None = None,
        palette: TilePalette | None = None,
    ) -> None:
        """Create an engine.

        Args:
            presets: Presets to register. Defaults to the built-ins.
            palette: Palette for the built-in presets.
        """
        self.palette = palette or DEFAULT_PALETTE
        self._presets: dict[str, PresetDefinition] = {}
        if presets is None:
            presets = builtin_presets(self.palette)
        for definition in presets:
            self.register_preset(definition)

    def register_preset(self, definition: PresetDefinition) -> None:
        """Add a preset, replacing any preset with the same name.

        Raises:
            TypeError: If definition is not a PresetDefinition.
        """
        if not isinstance(definition, PresetDefinition):
            raise TypeError(
                "Presets must be PresetDefinition instances, got "
                f"{type(definition).__name__}"
            )
        if definition.name in self._presets:
            logger.debug("Replacing preset %r", definition.name)
        self._presets[definition.name] = definition

    def get_preset(self, name: str) -> PresetDefinition | None:
        return self._presets.get(name)

    def list_presets(self, category: str | None = None) -> list[dict[str, Any]]:
        """Describe registered presets, optionally only those in one category."""
        return [
            definition.describe()
            for definition in self._presets.values()
            if category is None or definition.category == category
        ]

    def create_canvas(self, width: int, height: int, default_tile: int = 0) -> Canvas:
        return Canvas.create_empty(width, height, default_tile)

    def instantiate(
        self,
        canvas: Canvas,
        name: str,
        params: Mapping[str, Any] | None = None,
        *,
        seed: RandomSeed = None,
    ) -> PresetInstance:
        """Resolve parameters and run one preset on the canvas.

        Each call gets its own SeededRandom seeded from ``seed`` if given,
        else from ``params["seed"]``.
        Without a seed the generator draws one from system entropy, so the
        call is not reproducible; the drawn seed is recorded on the returned
        instance and in its params.

        Raises:
            ValueError: If no preset has this name.
            PresetParameterError: If the parameters do not validate.
        """
        definition = self.get_preset(name)
        if definition is None:
            raise ValueError(f"Unknown preset: {name!r}")

        resolved = resolve_params(definition.params, params, seed=seed)
        rng = SeededRandom(resolved["seed"])
        resolved["seed"] = rng.seed

        result = definition.generate(canvas, resolved, rng)
        logger.debug("Preset %r seed=%d: %s", name, rng.seed, sorted(result))
        return PresetInstance(
            preset=name, params=resolved, seed=rng.seed, result=result
        )

    def batch_instantiate(
        self,
        canvas: Canvas,
        calls: Iterable[PresetCall | Mapping[str, Any]],
    ) -> list[PresetInstance]:
        """Run several presets in order.

        Each call is a PresetCall or a mapping with ``preset`` (or ``name``)
        and ``params``. A call that fails, including one that cannot be
        parsed, is logged and recorded with ``success=False``; the rest of
        the batch still runs.
        """
        instances: list[PresetInstance] = []
        for call in calls:
            try:
                if not isinstance(call, PresetCall):
                    call = PresetCall.from_mapping(call)
                instances.append(self.instantiate(canvas, call.preset, call.params))
            except Exception as exc:
                name, params = _describe_call(call)
                logger.warning("Preset %r failed: %s", name, exc)
                instances.append(
                    PresetInstance(
                        preset=name,
                        params=params,
                        seed=None,
                        result={},
                        success=False,
                        error=str(exc),
                    )
                )
        return instances


def _describe_call(call: object) -> tuple[str, dict[str, Any]]:
    """Best-effort name and params of a call, for failure records."""
    if isinstance(call, PresetCall):
        return call.preset, dict(call.params)
    if isinstance(call, Mapping):
        name = call.get("preset") or call.get("name")
        params = call.get("params")
        return str(name or ""), dict(params) if isinstance(params, Mapping) else {}
    return str(call), {}
