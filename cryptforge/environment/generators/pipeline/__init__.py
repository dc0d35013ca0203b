"""Layered level composition.

A Blueprint lists layers (terrain, structures, paths, foliage, objects,
entities, lighting, special) with their params. The LayeredCompositor runs
them in that canonical order over one shared canvas and one shared random
stream, and returns the level plus a record of what every layer did.

Example usage:
    from cryptforge.environment.generators.pipeline import (
        LayeredCompositor,
        create_blueprint,
    )

    compositor = LayeredCompositor()
    result = compositor.compose(create_blueprint("village", 64, 48, seed=42))
    print(result.preview)

Blueprints can also be assembled by hand:
    from cryptforge.environment.generators.pipeline import BlueprintBuilder

    blueprint = (
        BlueprintBuilder(48, 48)
        .seed(7)
        .terrain("swamp")
        .paths(paths=[{"start": [0, 10], "end": [47, 30], "style": "winding"}])
        .foliage(0.3)
        .build()
    )
"""

from .blueprint import (
    BIOME_MATERIALS,
    LAYER_ORDER,
    Biome,
    Blueprint,
    BlueprintBuilder,
    LayerSpec,
    LayerType,
    layer_rank,
)
from .compositor import (
    CompositionResult,
    LayeredCompositor,
    LayerResult,
    ValidationReport,
)
from .factory import BLUEPRINT_NAMES, create_blueprint
from .layer import LayerGenerator
from .layers import (
    EntitiesLayer,
    FoliageLayer,
    LightingLayer,
    ObjectsLayer,
    PathsLayer,
    SpecialLayer,
    StructuresLayer,
    TerrainLayer,
)

__all__ = [
    "BIOME_MATERIALS",
    "BLUEPRINT_NAMES",
    "LAYER_ORDER",
    "Biome",
    "Blueprint",
    "BlueprintBuilder",
    "CompositionResult",
    "EntitiesLayer",
    "FoliageLayer",
    "LayerGenerator",
    "LayerResult",
    "LayerSpec",
    "LayerType",
    "LayeredCompositor",
    "LightingLayer",
    "ObjectsLayer",
    "PathsLayer",
    "SpecialLayer",
    "StructuresLayer",
    "TerrainLayer",
    "ValidationReport",
    "create_blueprint",
    "layer_rank",
]
