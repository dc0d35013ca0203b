"""Tests for the layered compositor."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import numpy as np
import pytest

from cryptforge.environment.canvas import Canvas
from cryptforge.environment.generators.pipeline import (
    Blueprint,
    BlueprintBuilder,
    LayeredCompositor,
    LayerGenerator,
)
from cryptforge.util.rng import SeededRandom


class RecordingLayer(LayerGenerator):
    """Appends each call's ``label`` param to a shared list."""

    layer_type = "foliage"

    def __init__(self, calls: list[str]) -> None:
        super().__init__()
        self.calls = calls

    def generate(
        self, canvas: Canvas, params: Mapping[str, Any], rng: SeededRandom
    ) -> dict[str, Any]:
        self.calls.append(params["label"])
        return {"label": params["label"]}


class FailingLayer(LayerGenerator):
    """Always raises."""

    layer_type = "foliage"

    def generate(
        self, canvas: Canvas, params: Mapping[str, Any], rng: SeededRandom
    ) -> dict[str, Any]:
        raise RuntimeError("foliage exploded")


@pytest.fixture
def compositor() -> LayeredCompositor:
    return LayeredCompositor()


def small_forest(seed: int | str | None) -> Blueprint:
    return (
        BlueprintBuilder(40, 30)
        .seed(seed)
        .terrain("forest", regions=3)
        .paths(paths=[{"start": [0, 15], "end": [39, 15], "style": "winding"}])
        .foliage(0.3)
        .entities(scatter={"count": 4})
        .build()
    )


# =============================================================================
# Ordering
# =============================================================================


class TestOrdering:
    """Tests for layer execution order."""

    def test_layers_run_in_canonical_order(self, compositor: LayeredCompositor) -> None:
        """Blueprint order does not matter; results follow canonical order."""
        blueprint = Blueprint.from_dict(
            {
                "width": 20,
                "height": 20,
                "seed": 1,
                "layers": [
                    {"type": "special"},
                    {"type": "foliage", "params": {"density": 0.1}},
                    {"type": "terrain"},
                ],
            }
        )

        result = compositor.compose(blueprint)

        assert [r.layer for r in result.layer_results] == [
            "terrain", "foliage", "special"
        ]

    def test_same_type_keeps_blueprint_order(
        self, compositor: LayeredCompositor
    ) -> None:
        """Two layers of one type run in the order the blueprint lists them."""
        calls: list[str] = []
        compositor.register_generator("foliage", RecordingLayer(calls))
        blueprint = (
            BlueprintBuilder(10, 10)
            .add_layer("foliage", label="first")
            .terrain()
            .add_layer("foliage", label="second")
            .build()
        )

        result = compositor.compose(blueprint)

        assert calls == ["first", "second"]
        assert [r.layer for r in result.layer_results] == [
            "terrain", "foliage", "foliage"
        ]


# =============================================================================
# Failures
# =============================================================================


class TestFailures:
    """Tests for failure recording."""

    def test_failing_layer_is_recorded(self, compositor: LayeredCompositor) -> None:
        """A layer that raises is recorded and later layers still run."""
        compositor.register_generator("foliage", FailingLayer())
        blueprint = (
            BlueprintBuilder(20, 20).seed(2).terrain().foliage().lighting().build()
        )

        result = compositor.compose(blueprint)

        terrain, foliage, lighting = result.layer_results
        assert terrain.ok
        assert not foliage.ok
        assert foliage.error == "foliage exploded"
        assert foliage.to_dict()["error"] == "foliage exploded"
        assert lighting.ok
        assert not result.success
        assert result.errors == [foliage]

    def test_named_monsters_do_not_fail_entities(
        self, compositor: LayeredCompositor
    ) -> None:
        """Monsters given by name compose cleanly alongside NPCs."""
        blueprint = (
            BlueprintBuilder(20, 20)
            .seed(5)
            .entities(
                monsters=[{"x": 4, "y": 4, "type": "skeleton"}],
                npcs=[{"x": 10, "y": 10, "role": "elder"}],
            )
            .terrain()
            .build()
        )

        result = compositor.compose(blueprint)

        terrain, entities = result.layer_results
        assert terrain.ok
        assert entities.ok, entities.error
        assert entities.details["npcs_placed"] == 1

    def test_unknown_layer_type_is_recorded(
        self, compositor: LayeredCompositor
    ) -> None:
        """Unknown layer types become failed results at the end."""
        blueprint = BlueprintBuilder(20, 20).add_layer("weather").terrain().build()

        result = compositor.compose(blueprint)

        assert [r.layer for r in result.layer_results] == ["terrain", "weather"]
        assert "Unknown layer type" in (result.layer_results[1].error or "")

    def test_invalid_dimensions_raise(self, compositor: LayeredCompositor) -> None:
        """A canvas cannot be created with a zero dimension."""
        with pytest.raises(ValueError):
            compositor.compose({"width": 0, "height": 10})

    def test_register_rejects_non_generators(
        self, compositor: LayeredCompositor
    ) -> None:
        """Only LayerGenerator instances can be registered."""
        with pytest.raises(TypeError):
            compositor.register_generator("foliage", object())  # type: ignore[arg-type]


# =============================================================================
# Determinism
# =============================================================================


class TestDeterminism:
    """Tests for reproducible composition."""

    def test_same_seed_same_level(self, compositor: LayeredCompositor) -> None:
        """Composing one blueprint twice gives identical output."""
        first = compositor.compose(small_forest(99))
        second = LayeredCompositor().compose(small_forest(99))

        assert np.array_equal(first.canvas.tiles, second.canvas.tiles)
        assert np.array_equal(first.canvas.metadata, second.canvas.metadata)
        assert first.preview == second.preview
        assert first.to_dict() == second.to_dict()

    def test_different_seeds_differ(self, compositor: LayeredCompositor) -> None:
        """Different seeds give different terrain."""
        first = compositor.compose(small_forest(1))
        second = compositor.compose(small_forest(2))

        assert not np.array_equal(first.canvas.tiles, second.canvas.tiles)

    def test_entropy_seed_is_reported(self, compositor: LayeredCompositor) -> None:
        """A run without a seed reports the seed it drew, which replays it."""
        first = compositor.compose(small_forest(None))
        replay = compositor.compose(small_forest(first.seed))

        assert np.array_equal(first.canvas.tiles, replay.canvas.tiles)

    def test_string_seed(self, compositor: LayeredCompositor) -> None:
        """String seeds are accepted and stable."""
        first = compositor.compose(small_forest("mossy"))
        second = compositor.compose(small_forest("mossy"))

        assert first.seed == second.seed
        assert first.preview == second.preview


# =============================================================================
# Result
# =============================================================================


class TestResult:
    """Tests for the composition result."""

    def test_mapping_blueprint(self, compositor: LayeredCompositor) -> None:
        """compose() accepts the plain mapping form."""
        result = compositor.compose(
            {
                "width": 24,
                "height": 16,
                "seed": 5,
                "layers": [{"type": "terrain", "params": {"biome": "desert"}}],
            }
        )

        assert (result.width, result.height) == (24, 16)
        assert result.seed == 5
        assert result.success

    def test_preview_and_dun_data(self, compositor: LayeredCompositor) -> None:
        """The preview has one line per row; dun data matches the canvas."""
        result = compositor.compose(small_forest(4))

        lines = result.preview.split("\n")
        assert len(lines) == 30
        assert all(len(line) == 40 for line in lines)
        assert np.array_equal(result.dun_data.base_tiles, result.canvas.tiles)

    def test_to_dict(self, compositor: LayeredCompositor) -> None:
        """to_dict carries every layer and the dun data."""
        data = compositor.compose(small_forest(4)).to_dict()

        assert set(data) == {"width", "height", "seed", "layers", "dunData", "preview"}
        assert [layer["layer"] for layer in data["layers"]] == [
            "terrain",
            "paths",
            "foliage",
            "entities",
        ]
        assert "error" not in data["layers"][0]

    def test_empty_blueprint(self, compositor: LayeredCompositor) -> None:
        """No layers gives a blank canvas and no results."""
        result = compositor.compose(Blueprint(12, 12, seed=1))

        assert result.layer_results == []
        assert result.success
        assert not result.canvas.tiles.any()


# =============================================================================
# Validation
# =============================================================================


class TestValidation:
    """Tests for the advisory blueprint check."""

    def test_valid_blueprint(self, compositor: LayeredCompositor) -> None:
        """A well-formed blueprint has no errors or warnings."""
        report = compositor.validate_blueprint(small_forest(1))

        assert report.valid
        assert report.errors == []
        assert report.warnings == []

    def test_dimension_errors(self, compositor: LayeredCompositor) -> None:
        """Too small and too large dimensions are errors."""
        report = compositor.validate_blueprint(Blueprint(4, 300))

        assert not report.valid
        assert "Width must be at least 8" in report.errors
        assert "Dimensions cannot exceed 256" in report.errors
        assert "No layers specified, will create empty level" in report.warnings

    def test_non_integer_dimension(self, compositor: LayeredCompositor) -> None:
        """Dimensions in the mapping form must be integers."""
        report = compositor.validate_blueprint(
            {"width": "64", "height": 48, "layers": [{"type": "terrain"}]}
        )

        assert report.errors == ["Width must be at least 8"]

    def test_layer_warnings(self, compositor: LayeredCompositor) -> None:
        """Duplicates, unknown types and missing terrain are warnings."""
        report = compositor.validate_blueprint(
            {
                "width": 32,
                "height": 32,
                "layers": [
                    {"type": "foliage"}, {"type": "foliage"}, {"type": "weather"}
                ],
            }
        )

        assert report.valid
        assert "Duplicate layer type: foliage" in report.warnings
        assert "Unknown layer type: weather" in report.warnings
        assert "No terrain layer - ground will be default tile" in report.warnings

    def test_missing_type_is_error(self, compositor: LayeredCompositor) -> None:
        """A layer without a type is an error."""
        report = compositor.validate_blueprint(
            {"width": 32, "height": 32, "layers": [{"type": "terrain"}, {"params": {}}]}
        )

        assert report.errors == ["Layer missing type"]

    def test_validation_does_not_block_compose(
        self, compositor: LayeredCompositor
    ) -> None:
        """compose() still runs a blueprint that fails validation."""
        blueprint = Blueprint(4, 4, seed=1)

        assert not compositor.validate_blueprint(blueprint).valid
        assert compositor.compose(blueprint).success
