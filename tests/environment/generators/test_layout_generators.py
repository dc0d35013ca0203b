"""Tests for the BSP, cave, random-walk and arena layout generators."""

from __future__ import annotations

import numpy as np
import pytest

from cryptforge.environment.generators.arena import ArenaGenerator
from cryptforge.environment.generators.base import (
    GeneratedLayout,
    Stairs,
    carve_room,
    place_stairs_in_rooms,
    visualize_layout,
)
from cryptforge.environment.generators.bsp import BSPGenerator
from cryptforge.environment.generators.cave import CaveGenerator, count_wall_neighbors
from cryptforge.environment.generators.layouts import LAYOUT_GENERATORS, generate_layout
from cryptforge.environment.generators.random_walk import RandomWalkGenerator
from cryptforge.environment.tile_types import BinaryMarker
from cryptforge.util.coordinates import Room
from cryptforge.util.rng import SeededRandom
from tests.helpers import is_fully_connected, walkable_regions

ALGORITHMS = ["bsp", "cellular_automata", "drunkard_walk", "arena"]

# =============================================================================
# Shared contract
# =============================================================================


class TestLayoutContract:
    """Properties every layout algorithm guarantees."""

    @pytest.mark.parametrize("algorithm", ALGORITHMS)
    def test_same_seed_same_layout(self, algorithm: str) -> None:
        """Generation is a pure function of seed and options."""
        a = generate_layout(algorithm, 48, 36, seed=2024)
        b = generate_layout(algorithm, 48, 36, seed=2024)

        assert np.array_equal(a.grid, b.grid)
        assert a.rooms == b.rooms
        assert a.stairs == b.stairs

    @pytest.mark.parametrize("algorithm", ALGORITHMS)
    def test_different_seeds_differ(self, algorithm: str) -> None:
        """Different seeds give different grids."""
        a = generate_layout(algorithm, 48, 36, seed=1)
        b = generate_layout(algorithm, 48, 36, seed=2)

        assert not np.array_equal(a.grid, b.grid)

    @pytest.mark.parametrize("algorithm", ALGORITHMS)
    @pytest.mark.parametrize("seed", [0, 7, 99])
    def test_outer_ring_is_wall(self, algorithm: str, seed: int) -> None:
        """Nothing is ever carved on the grid's border."""
        grid = generate_layout(algorithm, 40, 30, seed=seed).grid

        assert np.all(grid[0, :] == BinaryMarker.WALL)
        assert np.all(grid[-1, :] == BinaryMarker.WALL)
        assert np.all(grid[:, 0] == BinaryMarker.WALL)
        assert np.all(grid[:, -1] == BinaryMarker.WALL)

    @pytest.mark.parametrize("algorithm", ALGORITHMS)
    @pytest.mark.parametrize("seed", [0, 7, 99])
    def test_walkable_area_is_connected(self, algorithm: str, seed: int) -> None:
        """Every walkable cell can reach every other."""
        layout = generate_layout(algorithm, 50, 40, seed=seed)

        assert layout.floor_count() > 0
        assert is_fully_connected(layout.grid)

    @pytest.mark.parametrize("algorithm", ALGORITHMS)
    def test_stairs_on_grid(self, algorithm: str) -> None:
        """Stairs are distinct and marked on the grid."""
        layout = generate_layout(algorithm, 50, 40, seed=11)
        up, down = layout.stairs.up, layout.stairs.down

        assert up is not None
        assert down is not None
        assert up != down
        assert layout.grid[up] == BinaryMarker.STAIRS_UP
        assert layout.grid[down] == BinaryMarker.STAIRS_DOWN

    @pytest.mark.parametrize("algorithm", ALGORITHMS)
    def test_grid_shape_and_metadata(self, algorithm: str) -> None:
        """The grid is (width, height) and the layout records its seed."""
        layout = generate_layout(algorithm, 33, 21, seed="named-seed")

        assert layout.grid.shape == (33, 21)
        assert layout.grid.dtype == np.uint8
        assert layout.width == 33
        assert layout.height == 21
        assert layout.algorithm == LAYOUT_GENERATORS[algorithm].algorithm
        assert isinstance(layout.seed, int)

    def test_too_small_raises(self) -> None:
        """Grids under 8 tiles on a side are rejected."""
        with pytest.raises(ValueError):
            BSPGenerator(7, 20, seed=1)

    def test_unknown_algorithm_raises(self) -> None:
        """generate_layout rejects unknown names."""
        with pytest.raises(ValueError, match="Unknown layout algorithm"):
            generate_layout("maze", 20, 20, seed=1)

    def test_camel_case_options(self) -> None:
        """Options may be given in camelCase."""
        a = generate_layout("bsp", 40, 30, seed=5, splitIterations=2, corridorWidth=1)
        b = generate_layout("bsp", 40, 30, seed=5, split_iterations=2, corridor_width=1)

        assert np.array_equal(a.grid, b.grid)

    def test_to_dict(self) -> None:
        """The plain-data form is row-major with camelCase room keys."""
        layout = generate_layout("bsp", 30, 20, seed=3)

        data = layout.to_dict()

        assert len(data["grid"]) == 20
        assert len(data["grid"][0]) == 30
        assert data["algorithm"] == "bsp"
        assert data["rooms"][0].keys() >= {
            "x", "y", "width", "height", "centerX", "centerY"
        }
        assert set(data["stairs"]) == {"up", "down"}


# =============================================================================
# BSP
# =============================================================================


class TestBSPGenerator:
    """Tests for BSPGenerator."""

    def test_rooms_are_carved_and_disjoint(self) -> None:
        """Each room is floor (or stairs) and rooms never overlap."""
        layout = BSPGenerator(60, 45, seed=8).generate()

        assert len(layout.rooms) >= 2
        walkable = layout.walkable_mask()
        for room in layout.rooms:
            xs = slice(room.x, room.x + room.width)
            ys = slice(room.y, room.y + room.height)
            assert walkable[xs, ys].all()
        for i, a in enumerate(layout.rooms):
            for b in layout.rooms[i + 1 :]:
                overlap_w = min(a.x + a.width, b.x + b.width) - max(a.x, b.x)
                overlap_h = min(a.y + a.height, b.y + b.height) - max(a.y, b.y)
                assert overlap_w <= 0 or overlap_h <= 0

    def test_connections_form_spanning_tree(self) -> None:
        """One corridor per room beyond the first."""
        layout = BSPGenerator(60, 45, seed=8).generate()

        assert len(layout.connections) == len(layout.rooms) - 1

    def test_room_sizes_respect_limits(self) -> None:
        """Rooms stay within the configured size range."""
        layout = BSPGenerator(
            80, 60, seed=4, min_room_size=4, max_room_size=8
        ).generate()

        for room in layout.rooms:
            assert room.width <= 8
            assert room.height <= 8

    def test_without_connections_rooms_can_be_isolated(self) -> None:
        """connect_all_rooms=False carves no corridors."""
        layout = BSPGenerator(60, 45, seed=8, connect_all_rooms=False).generate()

        assert layout.connections == []
        assert len(walkable_regions(layout.grid)) == len(layout.rooms)

    def test_doors_are_stamped(self) -> None:
        """add_doors puts door markers where corridors leave rooms."""
        layout = BSPGenerator(
            60, 45, seed=8, add_doors=True, corridor_width=1
        ).generate()

        doors = [door for connection in layout.connections for door in connection.doors]
        assert doors
        for door in doors:
            assert layout.grid[door] == BinaryMarker.DOOR
            assert not any(room.contains(*door) for room in layout.rooms)
        assert is_fully_connected(layout.grid)


# =============================================================================
# Cave
# =============================================================================


class TestCaveGenerator:
    """Tests for CaveGenerator."""

    def test_single_region(self) -> None:
        """Only the largest floor region survives."""
        layout = CaveGenerator(60, 40, seed=31).generate()

        assert len(walkable_regions(layout.grid)) == 1
        assert layout.rooms == []

    def test_fill_probability_zero_gives_no_floor(self) -> None:
        """An all-wall start has nowhere to put stairs."""
        layout = CaveGenerator(20, 20, seed=1, fill_probability=0.0).generate()

        assert layout.floor_count() == 0
        assert layout.stairs == Stairs()

    def test_count_wall_neighbors_treats_edges_as_walls(self) -> None:
        """Off-grid neighbours count as walls."""
        grid = np.zeros((3, 3), dtype=np.uint8)
        grid[1, 1] = BinaryMarker.WALL

        counts = count_wall_neighbors(grid)

        assert counts[1, 1] == 0
        assert counts[0, 0] == 5 + 1
        assert counts[1, 0] == 3 + 1


# =============================================================================
# Random walk
# =============================================================================


class TestRandomWalkGenerator:
    """Tests for RandomWalkGenerator."""

    def test_reaches_floor_target(self) -> None:
        """The walker opens roughly floor_percent of the grid."""
        layout = RandomWalkGenerator(50, 40, seed=6, floor_percent=0.3).generate()

        assert layout.floor_count() >= int(50 * 40 * 0.3)

    def test_seed_room_is_central(self) -> None:
        """The first room is the seed room around the grid center."""
        layout = RandomWalkGenerator(50, 40, seed=6).generate()

        assert layout.rooms[0].contains(25, 20)

    def test_unreachable_target_terminates(self) -> None:
        """A floor target above what the margins allow still terminates."""
        layout = RandomWalkGenerator(12, 12, seed=2, floor_percent=0.99).generate()

        assert layout.floor_count() < 12 * 12
        assert is_fully_connected(layout.grid)


# =============================================================================
# Arena
# =============================================================================


class TestArenaGenerator:
    """Tests for ArenaGenerator."""

    def test_arena_and_satellites(self) -> None:
        """rooms[0] is the arena, followed by one satellite per side."""
        layout = ArenaGenerator(60, 50, seed=3).generate()

        assert layout.rooms[0].type == "arena"
        assert [room.type for room in layout.rooms[1:]] == [
            "top", "bottom", "left", "right"
        ]

    def test_stairs_only_in_satellites(self) -> None:
        """Neither staircase is in the arena."""
        layout = ArenaGenerator(60, 50, seed=3).generate()
        arena = layout.rooms[0]

        assert layout.stairs.up is not None
        assert layout.stairs.down is not None
        assert not arena.contains(*layout.stairs.up)
        assert not arena.contains(*layout.stairs.down)

    @pytest.mark.parametrize(("width", "height"), [(16, 12), (8, 8), (9, 13)])
    def test_small_grid_stairs_stay_out_of_arena(self, width: int, height: int) -> None:
        """Satellites overlap the arena on small grids; stairs still avoid it."""
        for seed in range(40):
            layout = ArenaGenerator(width, height, seed=seed).generate()
            arena = layout.rooms[0]
            up, down = layout.stairs.up, layout.stairs.down

            assert up is not None and down is not None, f"seed {seed}"
            assert up != down
            assert not arena.contains(*up), f"seed {seed}: up {up} in {arena}"
            assert not arena.contains(*down), f"seed {seed}: down {down} in {arena}"
            assert layout.grid[up] == BinaryMarker.STAIRS_UP
            assert layout.grid[down] == BinaryMarker.STAIRS_DOWN

    def test_center_stays_clear_of_pillars(self) -> None:
        """No pillar within the center clearance."""
        layout = ArenaGenerator(60, 50, seed=3, pillar_chance=1.0).generate()
        cx, cy = layout.rooms[0].center
        pillars = np.argwhere(layout.grid == BinaryMarker.PILLAR)

        assert len(pillars) > 0
        for px, py in pillars:
            assert np.hypot(px - cx, py - cy) > 3

    def test_without_pillars(self) -> None:
        """pillars=False leaves the arena open."""
        layout = ArenaGenerator(60, 50, seed=3, pillars=False).generate()

        assert not np.any(layout.grid == BinaryMarker.PILLAR)

    def test_surrounding_room_count_is_clamped(self) -> None:
        """At most four satellites, at least one."""
        many = ArenaGenerator(60, 50, seed=3, surrounding_rooms=9).generate()
        none = ArenaGenerator(60, 50, seed=3, surrounding_rooms=0).generate()

        assert len(many.rooms) == 5
        assert len(none.rooms) == 2


# =============================================================================
# Helpers
# =============================================================================


class TestLayoutHelpers:
    """Tests for the shared carving and stairs helpers."""

    def test_carve_room_keeps_outer_ring(self) -> None:
        """A room overlapping the border is clipped to the interior."""
        grid = np.ones((8, 8), dtype=np.uint8)

        carve_room(grid, Room(0, 0, 8, 8))

        assert np.all(grid[1:7, 1:7] == BinaryMarker.FLOOR)
        assert grid[0, 0] == BinaryMarker.WALL

    def test_single_room_stairs_split_apart(self) -> None:
        """With one room, down moves to the room cell farthest from up."""
        grid = np.ones((12, 12), dtype=np.uint8)
        room = Room(2, 2, 6, 6)
        carve_room(grid, room)

        stairs = place_stairs_in_rooms(grid, [room], SeededRandom(1))

        assert stairs.up == room.center
        assert stairs.down is not None
        assert stairs.down != stairs.up
        assert room.contains(*stairs.down)

    def test_stairs_move_off_avoided_center(self) -> None:
        """A covered center gives way to the nearest uncovered room cell."""
        grid = np.ones((12, 12), dtype=np.uint8)
        room = Room(2, 2, 6, 6)
        carve_room(grid, room)

        stairs = place_stairs_in_rooms(
            grid, [room], SeededRandom(1), avoid=Room(2, 2, 4, 6)
        )

        assert stairs == Stairs(up=(6, 5), down=(7, 2))

    def test_rooms_inside_avoided_area_are_skipped(self) -> None:
        """A room wholly inside the avoided area never gets stairs."""
        grid = np.ones((12, 12), dtype=np.uint8)
        inner = Room(3, 3, 2, 2)
        outer = Room(7, 7, 3, 3)
        carve_room(grid, inner)
        carve_room(grid, outer)

        stairs = place_stairs_in_rooms(
            grid, [inner, outer], SeededRandom(4), avoid=Room(2, 2, 4, 4)
        )

        assert stairs == Stairs(up=(8, 8), down=(7, 7))

    def test_no_rooms_no_stairs(self) -> None:
        """Empty room lists give empty stairs."""
        grid = np.ones((10, 10), dtype=np.uint8)

        assert place_stairs_in_rooms(grid, [], SeededRandom(1)) == Stairs()

    def test_visualize_layout(self) -> None:
        """The ASCII view has one row per y."""
        layout: GeneratedLayout = generate_layout("arena", 30, 24, seed=1)

        rows = visualize_layout(layout).split("\n")

        assert len(rows) == 24
        assert all(len(row) == 30 for row in rows)
        assert "<" in visualize_layout(layout)
