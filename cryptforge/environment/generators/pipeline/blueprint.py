"""Blueprints: the declarative description of one level.

A blueprint is plain data (dimensions, seed, a list of layers with params),
typically produced by a caller or an authoring tool and handed to the
LayeredCompositor. Layers may be listed in any order; the compositor always
runs them in LAYER_ORDER.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from cryptforge import config
from cryptforge.types import RandomSeed


class LayerType(StrEnum):
    TERRAIN = "terrain"
    STRUCTURES = "structures"
    PATHS = "paths"
    FOLIAGE = "foliage"
    OBJECTS = "objects"
    ENTITIES = "entities"
    LIGHTING = "lighting"
    SPECIAL = "special"


# Canonical execution order. Later layers rely on the tags of earlier ones.
LAYER_ORDER: tuple[str, ...] = (
    LayerType.TERRAIN,
    LayerType.STRUCTURES,
    LayerType.PATHS,
    LayerType.FOLIAGE,
    LayerType.OBJECTS,
    LayerType.ENTITIES,
    LayerType.LIGHTING,
    LayerType.SPECIAL,
)


def layer_rank(layer_type: str | None) -> int:
    """Position in LAYER_ORDER; unknown types sort after every known one."""
    try:
        return LAYER_ORDER.index(layer_type)  # type: ignore[arg-type]
    except ValueError:
        return len(LAYER_ORDER)


class Biome(StrEnum):
    PLAINS = "plains"
    FOREST = "forest"
    SWAMP = "swamp"
    DESERT = "desert"
    SNOW = "snow"
    VOLCANIC = "volcanic"
    UNDERGROUND = "underground"
    CORRUPTED = "corrupted"


# Biome -> (primary, secondary, accent) palette materials. The terrain layer
# picks one of the three per cell from octave noise.
BIOME_MATERIALS: dict[str, tuple[str, str, str]] = {
    Biome.PLAINS: ("grass", "dirt", "flowers"),
    Biome.FOREST: ("grass", "dirt", "grass"),
    Biome.SWAMP: ("water", "grass", "mud"),
    Biome.DESERT: ("sand", "sand", "dirt"),
    Biome.SNOW: ("snow", "snow", "ice"),
    Biome.VOLCANIC: ("ash", "rubble", "lava"),
    Biome.UNDERGROUND: ("floor", "floor", "floor"),
    Biome.CORRUPTED: ("rubble", "dirt", "bones"),
}


@dataclass
class LayerSpec:
    """One entry in a blueprint's layer list."""

    type: str | None
    params: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LayerSpec:
        return cls(data.get("type"), dict(data.get("params") or {}))

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "params": self.params}


@dataclass
class Blueprint:
    """Declarative input for one level.

    Attributes:
        width: Canvas width in tiles.
        height: Canvas height in tiles.
        seed: Seed shared by every layer. None draws one from system entropy.
        layers: Layer specs, in any order.
        default_tile: Tile the canvas starts filled with.
    """

    width: int = config.DEFAULT_LEVEL_WIDTH
    height: int = config.DEFAULT_LEVEL_HEIGHT
    seed: RandomSeed = None
    layers: list[LayerSpec] = field(default_factory=list)
    default_tile: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Blueprint:
        """Build a blueprint from its plain mapping form.

        Accepts ``{"width", "height", "seed", "layers": [{"type", "params"}],
        "default_tile"}``; ``defaultTile`` is accepted as well.
        """
        return cls(
            width=int(data.get("width", config.DEFAULT_LEVEL_WIDTH)),
            height=int(data.get("height", config.DEFAULT_LEVEL_HEIGHT)),
            seed=data.get("seed"),
            layers=[LayerSpec.from_dict(layer) for layer in data.get("layers") or ()],
            default_tile=int(data.get("default_tile", data.get("defaultTile", 0))),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "seed": self.seed,
            "layers": [layer.to_dict() for layer in self.layers],
            "default_tile": self.default_tile,
        }


class BlueprintBuilder:
    """Fluent construction of blueprints.

    Example:
        blueprint = (
            BlueprintBuilder(48, 48)
            .seed(42)
            .terrain("forest")
            .structures(presets=["town_cluster:1"])
            .paths(connect_structures=True)
            .foliage(0.25)
            .build()
        )
    """

    def __init__(
        self,
        width: int = config.DEFAULT_LEVEL_WIDTH,
        height: int = config.DEFAULT_LEVEL_HEIGHT,
    ) -> None:
        self._blueprint = Blueprint(width=width, height=height)

    def seed(self, seed: RandomSeed) -> BlueprintBuilder:
        self._blueprint.seed = seed
        return self

    def default_tile(self, tile: int) -> BlueprintBuilder:
        self._blueprint.default_tile = tile
        return self

    def add_layer(self, layer_type: str, **params: Any) -> BlueprintBuilder:
        self._blueprint.layers.append(LayerSpec(layer_type, params))
        return self

    def terrain(self, biome: str = Biome.PLAINS, **params: Any) -> BlueprintBuilder:
        return self.add_layer(LayerType.TERRAIN, biome=biome, **params)

    def structures(self, **params: Any) -> BlueprintBuilder:
        return self.add_layer(LayerType.STRUCTURES, **params)

    def paths(self, **params: Any) -> BlueprintBuilder:
        return self.add_layer(LayerType.PATHS, **params)

    def foliage(
        self, density: float = config.DEFAULT_FOLIAGE_DENSITY, **params: Any
    ) -> BlueprintBuilder:
        return self.add_layer(LayerType.FOLIAGE, density=density, **params)

    def objects(self, **params: Any) -> BlueprintBuilder:
        return self.add_layer(LayerType.OBJECTS, **params)

    def entities(self, **params: Any) -> BlueprintBuilder:
        return self.add_layer(LayerType.ENTITIES, **params)

    def lighting(self, **params: Any) -> BlueprintBuilder:
        return self.add_layer(LayerType.LIGHTING, **params)

    def special(self, **params: Any) -> BlueprintBuilder:
        return self.add_layer(LayerType.SPECIAL, **params)

    def build(self) -> Blueprint:
        """Return the blueprint. Later builder calls do not affect it."""
        built = self._blueprint
        return Blueprint(
            width=built.width,
            height=built.height,
            seed=built.seed,
            layers=[
                LayerSpec(layer.type, dict(layer.params)) for layer in built.layers
            ],
            default_tile=built.default_tile,
        )
