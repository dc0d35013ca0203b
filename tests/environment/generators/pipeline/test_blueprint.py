"""Tests for blueprints, layer specs and the blueprint builder."""

from __future__ import annotations

from cryptforge import config
from cryptforge.environment.generators.pipeline import (
    LAYER_ORDER,
    Biome,
    Blueprint,
    BlueprintBuilder,
    LayerSpec,
    LayerType,
    layer_rank,
)


class TestLayerOrder:
    """Tests for the canonical layer order."""

    def test_canonical_order(self) -> None:
        """Layers run terrain first and special last."""
        assert list(LAYER_ORDER) == [
            "terrain",
            "structures",
            "paths",
            "foliage",
            "objects",
            "entities",
            "lighting",
            "special",
        ]

    def test_rank_follows_order(self) -> None:
        """layer_rank sorts known types into canonical order."""
        shuffled = ["special", "terrain", "entities", "paths"]

        assert sorted(shuffled, key=layer_rank) == [
            "terrain", "paths", "entities", "special"
        ]

    def test_unknown_types_rank_last(self) -> None:
        """Unknown and missing types sort after every known type."""
        assert layer_rank("weather") == len(LAYER_ORDER)
        assert layer_rank(None) == len(LAYER_ORDER)
        assert layer_rank("weather") > layer_rank(LayerType.SPECIAL)


class TestBlueprint:
    """Tests for Blueprint and LayerSpec plain-data forms."""

    def test_defaults(self) -> None:
        """An empty mapping gives a default-sized blueprint with no layers."""
        blueprint = Blueprint.from_dict({})

        assert blueprint.width == config.DEFAULT_LEVEL_WIDTH
        assert blueprint.height == config.DEFAULT_LEVEL_HEIGHT
        assert blueprint.seed is None
        assert blueprint.layers == []
        assert blueprint.default_tile == 0

    def test_from_dict(self) -> None:
        """Layers, seed and the camelCase default tile are read."""
        blueprint = Blueprint.from_dict(
            {
                "width": 32,
                "height": 24,
                "seed": "crypt",
                "defaultTile": 5,
                "layers": [
                    {"type": "terrain", "params": {"biome": "snow"}},
                    {"type": "foliage"},
                ],
            }
        )

        assert (blueprint.width, blueprint.height) == (32, 24)
        assert blueprint.seed == "crypt"
        assert blueprint.default_tile == 5
        assert blueprint.layers == [
            LayerSpec("terrain", {"biome": "snow"}),
            LayerSpec("foliage", {}),
        ]

    def test_to_dict_reads_back(self) -> None:
        """to_dict output is accepted by from_dict."""
        original = Blueprint(20, 10, 3, [LayerSpec("paths", {"river": "left"})], 2)

        assert Blueprint.from_dict(original.to_dict()) == original

    def test_layer_spec_without_params(self) -> None:
        """A layer with null params gets an empty dict."""
        spec = LayerSpec.from_dict({"type": "lighting", "params": None})

        assert spec.params == {}
        assert spec.to_dict() == {"type": "lighting", "params": {}}


class TestBlueprintBuilder:
    """Tests for the fluent builder."""

    def test_builds_layers_in_call_order(self) -> None:
        """Each builder method appends one layer."""
        blueprint = (
            BlueprintBuilder(48, 32)
            .seed(7)
            .default_tile(3)
            .terrain(Biome.SWAMP, regions=2)
            .structures(walls=True)
            .paths(river="top")
            .foliage(0.4)
            .objects(objects=[])
            .entities(npcs=[])
            .lighting(ambient=0.5)
            .special(features=[])
            .build()
        )

        assert blueprint.width == 48
        assert blueprint.height == 32
        assert blueprint.seed == 7
        assert blueprint.default_tile == 3
        assert [layer.type for layer in blueprint.layers] == list(LAYER_ORDER)
        assert blueprint.layers[0].params == {"biome": "swamp", "regions": 2}
        assert blueprint.layers[3].params == {"density": 0.4}

    def test_default_foliage_density(self) -> None:
        """foliage() without a density uses the configured default."""
        blueprint = BlueprintBuilder().foliage().build()

        assert blueprint.layers[0].params["density"] == config.DEFAULT_FOLIAGE_DENSITY

    def test_build_is_a_snapshot(self) -> None:
        """Later builder calls do not change an already built blueprint."""
        builder = BlueprintBuilder(16, 16).terrain()
        first = builder.build()

        builder.foliage(0.5).seed(9)

        assert len(first.layers) == 1
        assert first.seed is None
        assert len(builder.build().layers) == 2

    def test_custom_layer_type(self) -> None:
        """add_layer accepts any type name."""
        blueprint = BlueprintBuilder().add_layer("weather", rain=True).build()

        assert blueprint.layers == [LayerSpec("weather", {"rain": True})]
