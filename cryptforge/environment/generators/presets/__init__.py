"""Parametric presets: named stamps instantiated onto a canvas.

Example usage:
    from cryptforge.environment.generators.presets import PresetEngine

    engine = PresetEngine()
    canvas = engine.create_canvas(48, 48)
    engine.instantiate(canvas, "town_cluster", {"count": 8, "seed": 42})

Custom presets subclass PresetDefinition and are registered per engine:
    class Graveyard(PresetDefinition):
        name = "graveyard"
        category = "town"
        params = {"rows": ParamSpec("int", 3, 1, 8)}

        def generate(self, canvas, params, rng):
            ...

    engine.register_preset(Graveyard())
"""

from .base import (
    ParamSpec,
    PresetCall,
    PresetDefinition,
    PresetInstance,
    PresetParameterError,
    resolve_params,
)
from .builtin import builtin_presets
from .engine import PresetEngine
from .shorthand import parse_multiple_presets, parse_preset_shorthand

__all__ = [
    "ParamSpec",
    "PresetCall",
    "PresetDefinition",
    "PresetEngine",
    "PresetInstance",
    "PresetParameterError",
    "builtin_presets",
    "parse_multiple_presets",
    "parse_preset_shorthand",
    "resolve_params",
]
