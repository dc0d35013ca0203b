"""Tests for markers, palettes and id tables."""

from __future__ import annotations

import numpy as np
import pytest

from cryptforge.environment.tile_types import (
    DEFAULT_PALETTE,
    MONSTER_IDS,
    NPC_IDS,
    OBJECT_IDS,
    BinaryMarker,
    TilePalette,
    monster_id,
    npc_id,
    object_id,
    walkable_marker_mask,
)
from cryptforge.util.rng import SeededRandom


class TestBinaryMarker:
    """Tests for the structural markers."""

    def test_marker_values(self) -> None:
        """Marker values are fixed; level files depend on them."""
        assert [int(m) for m in BinaryMarker] == [0, 1, 2, 3, 4, 5]

    def test_walkable_mask(self) -> None:
        """Walls and pillars block; floor, stairs and doors do not."""
        grid = np.array([[0, 1, 2], [3, 4, 5]], dtype=np.uint8)

        assert walkable_marker_mask(grid).tolist() == [
            [True, False, True], [True, True, False]
        ]


class TestTilePalette:
    """Tests for TilePalette lookups."""

    def test_ids_first_and_contains(self) -> None:
        """Material lookup returns all ids; first() is the canonical one."""
        assert "grass" in DEFAULT_PALETTE
        assert "obsidian" not in DEFAULT_PALETTE
        assert DEFAULT_PALETTE.ids("water") == (12, 13)
        assert DEFAULT_PALETTE.first("wall_stone") == 20

    def test_unknown_material_raises(self) -> None:
        """Asking for a missing material is an error."""
        with pytest.raises(ValueError, match="Unknown material"):
            DEFAULT_PALETTE.ids("obsidian")

    def test_pick_stays_within_material(self) -> None:
        """pick() only returns ids of the requested material."""
        rng = SeededRandom(6)
        picks = {DEFAULT_PALETTE.pick("grass", rng) for _ in range(100)}

        assert picks <= set(DEFAULT_PALETTE.ids("grass"))
        assert len(picks) > 1

    def test_material_of_reverse_lookup(self) -> None:
        """Tile ids map back to their material."""
        assert DEFAULT_PALETTE.material_of(62) == "tree"
        assert DEFAULT_PALETTE.material_of(999) is None

    def test_first_registration_wins_on_shared_ids(self) -> None:
        """When two materials share an id the first one owns the reverse lookup."""
        palette = TilePalette({"a": [1, 2], "b": [2, 3]})

        assert palette.material_of(2) == "a"
        assert palette.material_of(3) == "b"

    def test_mask_skips_unknown_materials(self) -> None:
        """mask() covers known materials and ignores unknown names."""
        tiles = np.array([[12, 1], [20, 13]])

        mask = DEFAULT_PALETTE.mask(tiles, "water", "obsidian")

        assert mask.tolist() == [[True, False], [False, True]]

    def test_with_materials_copies(self) -> None:
        """with_materials returns an extended copy and leaves the original alone."""
        extended = DEFAULT_PALETTE.with_materials(grass=[200], obsidian=[201])

        assert extended.ids("grass") == (200,)
        assert extended.first("obsidian") == 201
        assert DEFAULT_PALETTE.ids("grass") == (1, 2, 3, 4)


class TestIdTables:
    """Tests for object and NPC id resolution."""

    def test_object_id_by_name_or_number(self) -> None:
        """Names resolve through OBJECT_IDS and raw ids pass through."""
        assert object_id("torch") == OBJECT_IDS["torch"]
        assert object_id(123) == 123

    def test_unknown_object_raises(self) -> None:
        """Unknown object names are rejected."""
        with pytest.raises(ValueError):
            object_id("spaceship")

    @pytest.mark.parametrize(
        ("monster_type", "expected"),
        [
            ("skeleton", MONSTER_IDS["skeleton"]),
            ("Skeleton Archer", MONSTER_IDS["skeleton_archer"]),
            ("skeleton-king", MONSTER_IDS["skeleton_king"]),
            (7, 7),
            ("12", 12),
        ],
    )
    def test_monster_names_and_ids(
        self, monster_type: str | int, expected: int
    ) -> None:
        """Names are case- and separator-insensitive; ids pass through."""
        assert monster_id(monster_type) == expected

    def test_unknown_monster_raises(self) -> None:
        """Unknown monster names are rejected."""
        with pytest.raises(ValueError, match="Unknown monster type"):
            monster_id("unicorn")

    def test_npc_roles_default_to_merchant(self) -> None:
        """Unknown or missing roles become merchants."""
        assert npc_id("elder") == NPC_IDS["elder"]
        assert npc_id("astronaut") == NPC_IDS["merchant"]
        assert npc_id(None) == NPC_IDS["merchant"]
