"""Tests for the MST connector and corridor carving."""

from __future__ import annotations

import math

import numpy as np
import pytest

from cryptforge.environment.generators.connector import (
    carve_corridor,
    connect_rooms,
    l_shape,
    minimum_spanning_tree,
    point_distance,
    room_anchor,
    room_exit,
)
from cryptforge.environment.tile_types import BinaryMarker
from cryptforge.util.coordinates import Room
from cryptforge.util.rng import SeededRandom
from cryptforge.util.sampling import poisson_disk_sampling
from tests.helpers import is_fully_connected, is_spanning_tree

# =============================================================================
# Minimum spanning tree
# =============================================================================


class TestMinimumSpanningTree:
    """Tests for minimum_spanning_tree."""

    @pytest.mark.parametrize("count", [0, 1])
    def test_fewer_than_two_points(self, count: int) -> None:
        """Nothing to connect gives no edges."""
        assert minimum_spanning_tree([(0.0, 0.0)] * count) == []

    @pytest.mark.parametrize("metric", ["euclidean", "manhattan"])
    def test_spans_without_cycles(self, metric: str) -> None:
        """n points give n-1 edges that connect everything without cycles."""
        points = poisson_disk_sampling(60, 60, 6, rng=SeededRandom(10))

        edges = minimum_spanning_tree(points, metric)  # type: ignore[arg-type]

        assert len(edges) == len(points) - 1
        assert is_spanning_tree(len(points), [(e.a, e.b) for e in edges])

    def test_total_weight_is_minimal_on_a_line(self) -> None:
        """Collinear points are chained neighbour to neighbour."""
        points = [(0.0, 0.0), (10.0, 0.0), (3.0, 0.0), (6.0, 0.0)]

        edges = minimum_spanning_tree(points)

        assert sum(edge.distance for edge in edges) == pytest.approx(10.0)
        assert {frozenset((e.a, e.b)) for e in edges} == {
            frozenset((0, 2)),
            frozenset((2, 3)),
            frozenset((3, 1)),
        }

    def test_edges_record_tree_side_first(self) -> None:
        """Edge.a is already in the tree; Edge.b is the point it brings in."""
        edges = minimum_spanning_tree([(0.0, 0.0), (5.0, 0.0), (5.0, 1.0)])

        assert [(e.a, e.b) for e in edges] == [(0, 1), (1, 2)]

    def test_ties_prefer_earliest_tree_point_then_lowest_index(self) -> None:
        """Equal distances resolve deterministically."""
        # A square: every side is 1, every diagonal sqrt(2)
        points = [(0.0, 0.0), (1.0, 0.0), (0.0, 1.0), (1.0, 1.0)]

        edges = minimum_spanning_tree(points)

        assert [(e.a, e.b) for e in edges] == [(0, 1), (0, 2), (1, 3)]

    def test_metric_changes_distances(self) -> None:
        """Manhattan and Euclidean weights differ off-axis."""
        points = [(0.0, 0.0), (3.0, 4.0)]

        assert minimum_spanning_tree(points, "euclidean")[0].distance == 5.0
        assert minimum_spanning_tree(points, "manhattan")[0].distance == 7.0

    def test_unknown_metric_raises(self) -> None:
        """Metrics other than euclidean and manhattan are rejected."""
        with pytest.raises(ValueError, match="Unknown distance metric"):
            point_distance((0, 0), (1, 1), "chebyshev")  # type: ignore[arg-type]


# =============================================================================
# Anchors and corridors
# =============================================================================


class TestAnchors:
    """Tests for room_anchor and room_exit."""

    def test_anchor_is_true_midpoint(self) -> None:
        """Anchors are float midpoints unless an explicit center is set."""
        assert room_anchor(Room(0, 0, 5, 3)) == (2.5, 1.5)
        assert room_anchor(Room(0, 0, 5, 3, center_x=4, center_y=1)) == (4.0, 1.0)

    @pytest.mark.parametrize(
        ("target", "expected"),
        [
            ((30.0, 12.0), (13, 12)),
            ((-5.0, 12.0), (10, 12)),
            ((12.0, 40.0), (12, 13)),
            ((12.0, -9.0), (12, 10)),
        ],
    )
    def test_exit_faces_target(
        self, target: tuple[float, float], expected: tuple[int, int]
    ) -> None:
        """The exit sits on the edge facing the target's dominant axis."""
        room = Room(10, 10, 4, 4)

        assert room_exit(room, target) == expected


class TestCorridors:
    """Tests for l_shape and carve_corridor."""

    @pytest.mark.parametrize("horizontal_first", [True, False])
    def test_l_shape_is_contiguous(self, horizontal_first: bool) -> None:
        """The centerline runs start to end in unit steps with one turn."""
        cells = l_shape((2, 8), (9, 3), horizontal_first)

        assert cells[0] == (2, 8)
        assert cells[-1] == (9, 3)
        assert len(cells) == 7 + 5 + 1
        for (ax, ay), (bx, by) in zip(cells, cells[1:], strict=False):
            assert abs(ax - bx) + abs(ay - by) == 1

    def test_carve_width_two_adds_lane(self) -> None:
        """A width-2 horizontal corridor opens the row above the centerline."""
        grid = np.ones((12, 8), dtype=np.uint8)

        carve_corridor(grid, (2, 4), (9, 4), width=2)

        assert np.all(grid[2:10, 4] == BinaryMarker.FLOOR)
        assert np.all(grid[2:10, 3] == BinaryMarker.FLOOR)
        assert np.all(grid[2:10, 5] == BinaryMarker.WALL)

    def test_carve_never_touches_border(self) -> None:
        """Corridor cells on the outer ring are skipped."""
        grid = np.ones((10, 10), dtype=np.uint8)

        carve_corridor(grid, (0, 5), (9, 5), width=3)

        assert grid[0, 5] == BinaryMarker.WALL
        assert grid[9, 5] == BinaryMarker.WALL
        assert grid[5, 5] == BinaryMarker.FLOOR

    def test_widen_turns_opens_inside_corner(self) -> None:
        """widen_turns carves the diagonal cell inside the bend."""
        plain = np.ones((12, 12), dtype=np.uint8)
        widened = np.ones((12, 12), dtype=np.uint8)

        carve_corridor(plain, (2, 2), (8, 8), width=1)
        carve_corridor(widened, (2, 2), (8, 8), width=1, widen_turns=True)

        assert plain[7, 3] == BinaryMarker.WALL
        assert widened[7, 3] == BinaryMarker.FLOOR


# =============================================================================
# connect_rooms
# =============================================================================


def _rooms_grid() -> tuple[np.ndarray, list[Room]]:
    grid = np.ones((40, 30), dtype=np.uint8, order="F")
    rooms = [Room(2, 2, 5, 5), Room(30, 3, 6, 5), Room(5, 20, 6, 6), Room(28, 20, 7, 6)]
    for room in rooms:
        grid[room.x : room.x + room.width, room.y : room.y + room.height] = (
            BinaryMarker.FLOOR
        )
    return grid, rooms


class TestConnectRooms:
    """Tests for connect_rooms."""

    def test_connects_everything(self) -> None:
        """After connecting, all rooms share one walkable region."""
        grid, rooms = _rooms_grid()

        connections = connect_rooms(grid, rooms, SeededRandom(1))

        assert len(connections) == len(rooms) - 1
        assert is_spanning_tree(len(rooms), [(c.source, c.target) for c in connections])
        assert is_fully_connected(grid)

    def test_deterministic(self) -> None:
        """Same rooms and seed carve the same corridors."""
        grid_a, rooms = _rooms_grid()
        grid_b, _ = _rooms_grid()

        connect_rooms(grid_a, rooms, SeededRandom(4))
        connect_rooms(grid_b, rooms, SeededRandom(4))

        assert np.array_equal(grid_a, grid_b)

    def test_single_room_does_nothing(self) -> None:
        """Fewer than two rooms carve nothing."""
        grid, rooms = _rooms_grid()
        before = grid.copy()

        assert connect_rooms(grid, rooms[:1], SeededRandom(1)) == []
        assert np.array_equal(grid, before)

    def test_routed_corridors_avoid_blocked_cells(self) -> None:
        """With a blocked mask, corridors route around it."""
        grid, rooms = _rooms_grid()
        blocked = np.zeros(grid.shape, dtype=bool)
        blocked[18:22, 0:26] = True

        connections = connect_rooms(
            grid, rooms, SeededRandom(2), corridor_width=1, blocked=blocked
        )

        assert all(connection.routed for connection in connections)
        for connection in connections:
            assert not any(blocked[cell] for cell in connection.cells)
        assert is_fully_connected(grid)

    def test_doors(self) -> None:
        """add_doors stamps doors just outside the rooms."""
        grid, rooms = _rooms_grid()

        connections = connect_rooms(
            grid, rooms, SeededRandom(1), corridor_width=1, add_doors=True
        )

        doors = [door for connection in connections for door in connection.doors]
        assert doors
        for door in doors:
            assert grid[door] == BinaryMarker.DOOR
            assert any(
                math.dist(door, cell) == 1
                for room in rooms
                for cell in room.rect.cells()
            )
