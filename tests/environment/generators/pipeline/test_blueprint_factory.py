"""Tests for the named blueprint factory."""

from __future__ import annotations

import numpy as np
import pytest

from cryptforge.environment.canvas import CellTag
from cryptforge.environment.generators.pipeline import (
    BLUEPRINT_NAMES,
    LayeredCompositor,
    create_blueprint,
)
from cryptforge.environment.tile_types import DEFAULT_PALETTE


@pytest.fixture(scope="module")
def compositor() -> LayeredCompositor:
    return LayeredCompositor()


class TestCreateBlueprint:
    """Tests for create_blueprint."""

    def test_names(self) -> None:
        """Every documented blueprint is available."""
        assert BLUEPRINT_NAMES == ("village", "forest", "dungeon", "cavern", "arena")

    def test_unknown_name_raises(self) -> None:
        """Unknown names are rejected."""
        with pytest.raises(ValueError, match="Unknown blueprint name"):
            create_blueprint("castle")

    def test_dimensions_and_seed(self) -> None:
        """The requested size and seed are carried through."""
        blueprint = create_blueprint("cavern", 50, 40, seed=11)

        assert (blueprint.width, blueprint.height, blueprint.seed) == (50, 40, 11)

    def test_dungeon_layers(self) -> None:
        """The dungeon recipe is layout terrain plus population layers."""
        blueprint = create_blueprint("dungeon", seed=1)

        assert [layer.type for layer in blueprint.layers] == [
            "terrain",
            "entities",
            "lighting",
            "special",
        ]
        assert blueprint.layers[0].params["layout"] == {"algorithm": "bsp"}

    def test_blueprints_are_independent(self) -> None:
        """Each call returns a fresh blueprint."""
        first = create_blueprint("village", seed=1)
        second = create_blueprint("village", seed=1)

        first.layers[0].params["biome"] = "snow"

        assert second.layers[0].params["biome"] == "plains"


class TestComposeNamedBlueprints:
    """Compose every named blueprint end to end."""

    @pytest.mark.parametrize("name", BLUEPRINT_NAMES)
    def test_composes_without_errors(
        self, compositor: LayeredCompositor, name: str
    ) -> None:
        """Every layer of every named blueprint succeeds."""
        result = compositor.compose(create_blueprint(name, seed=42))

        assert [r.error for r in result.layer_results if not r.ok] == []
        assert result.success

    @pytest.mark.parametrize("name", BLUEPRINT_NAMES)
    def test_deterministic(self, compositor: LayeredCompositor, name: str) -> None:
        """The same name and seed give the same level."""
        first = compositor.compose(create_blueprint(name, 48, 40, seed=5))
        second = compositor.compose(create_blueprint(name, 48, 40, seed=5))

        assert np.array_equal(first.canvas.tiles, second.canvas.tiles)
        assert first.preview == second.preview

    def test_village_has_houses_and_npcs(self, compositor: LayeredCompositor) -> None:
        """The village has at least one house and both NPCs."""
        result = compositor.compose(create_blueprint("village", seed=42))
        structures = result.layer_results[1].details
        entities = next(r for r in result.layer_results if r.layer == "entities")

        town = structures["presets_applied"][0]["result"]
        assert town["house_count"] > 0
        assert entities.details["npcs_placed"] == 2
        assert result.canvas.tag_mask(CellTag.DOOR).any()

    def test_forest_has_river(self, compositor: LayeredCompositor) -> None:
        """The forest recipe runs a river from the top edge."""
        result = compositor.compose(create_blueprint("forest", seed=42))

        water = result.canvas.tag_mask(CellTag.WATER)
        assert water[:, 0].any()

    def test_dungeon_has_rooms_and_stairs(self, compositor: LayeredCompositor) -> None:
        """The dungeon registers rooms and writes stairs tiles."""
        result = compositor.compose(create_blueprint("dungeon", seed=42))
        canvas = result.canvas

        assert len(canvas.rooms) >= 2
        assert canvas.stairs is not None
        assert (canvas.tiles == DEFAULT_PALETTE.first("stairs_up")).any()
        assert canvas.tag_mask(CellTag.WALL).any()

    def test_arena_has_satellite_rooms(self, compositor: LayeredCompositor) -> None:
        """The arena layout registers the arena and its satellites."""
        result = compositor.compose(create_blueprint("arena", seed=42))

        types = {room.type for room in result.canvas.rooms}
        assert "arena" in types
