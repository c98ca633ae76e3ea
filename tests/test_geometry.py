"""Tests for grid positions, directions and rectangles."""

import pytest
from labyrinth.geometry import Bounds, Direction, Position


class TestPosition:
    def test_add_and_subtract(self):
        a = Position(row=2, column=3)
        b = Position(row=-1, column=4)
        assert a + b == Position(row=1, column=7)
        assert a - b == Position(row=3, column=-1)

    def test_positions_are_hashable(self):
        assert len({Position(1, 1), Position(1, 1), Position(1, 2)}) == 2


class TestDirection:
    @pytest.mark.parametrize("direction", list(Direction), ids=lambda d: d.name)
    def test_opposite_is_an_involution(self, direction: Direction):
        assert direction.opposite() != direction
        assert direction.opposite().opposite() == direction

    @pytest.mark.parametrize("direction", list(Direction), ids=lambda d: d.name)
    def test_step_then_opposite_step_returns_home(self, direction: Direction):
        start = Position(row=5, column=5)
        assert start + direction.step() + direction.opposite().step() == start

    def test_north_is_up(self):
        """Rows grow downwards, so north decreases the row."""
        assert Direction.NORTH.step() == Position(row=-1, column=0)
        assert Direction.EAST.step() == Position(row=0, column=1)

    def test_horizontal_walls(self):
        assert Direction.NORTH.is_horizontal_wall
        assert Direction.SOUTH.is_horizontal_wall
        assert not Direction.EAST.is_horizontal_wall
        assert not Direction.WEST.is_horizontal_wall


class TestBounds:
    def test_corners_are_inclusive(self):
        bounds = Bounds(lower=Position(0, 0), upper=Position(3, 9))
        assert bounds.width == 10
        assert bounds.height == 4
        assert bounds.contains(Position(3, 9))
        assert not bounds.contains(Position(4, 9))

    def test_single_tile(self):
        bounds = Bounds(lower=Position(2, 2), upper=Position(2, 2))
        assert bounds.width == 1
        assert bounds.height == 1

    def test_translate(self):
        bounds = Bounds(lower=Position(0, 0), upper=Position(1, 1)).translate(Position(10, -5))
        assert bounds.lower == Position(10, -5)
        assert bounds.upper == Position(11, -4)

    def test_sharing_a_tile_overlaps(self):
        a = Bounds(lower=Position(0, 0), upper=Position(4, 4))
        b = Bounds(lower=Position(4, 4), upper=Position(8, 8))
        assert a.overlaps(b)
        assert b.overlaps(a)

    def test_touching_edges_do_not_overlap(self):
        a = Bounds(lower=Position(0, 0), upper=Position(4, 4))
        b = Bounds(lower=Position(0, 5), upper=Position(4, 9))
        assert not a.overlaps(b)
        assert not b.overlaps(a)

    def test_padding_keeps_rooms_apart(self):
        a = Bounds(lower=Position(0, 0), upper=Position(4, 4))
        touching = Bounds(lower=Position(0, 5), upper=Position(4, 9))
        one_gap = Bounds(lower=Position(0, 6), upper=Position(4, 10))
        assert a.overlaps(touching, padding=1)
        assert not a.overlaps(one_gap, padding=1)
        assert a.overlaps(one_gap, padding=2)

    def test_far_apart_rectangles(self):
        a = Bounds(lower=Position(0, 0), upper=Position(1, 1))
        b = Bounds(lower=Position(-10, -10), upper=Position(-5, -5))
        assert not a.overlaps(b, padding=3)
