"""Tests for grid geometry and line of sight."""

import itertools

import pytest

from tactics.grid import (
    GRID_HEIGHT, GRID_WIDTH, Facing, Point,
    distance, facing_from_delta, in_bounds, line_of_sight_clear, neighbors,
)


SAMPLE_POINTS = [Point(0, 0), Point(14, 19), Point(3, 18), Point(7, 7), Point(12, 2)]


@pytest.mark.parametrize("p", SAMPLE_POINTS)
def test_distance_to_self_is_zero(p):
    assert distance(p, p) == 0


@pytest.mark.parametrize("a,b", list(itertools.combinations(SAMPLE_POINTS, 2)))
def test_distance_is_symmetric(a, b):
    assert distance(a, b) == distance(b, a)


def test_distance_is_manhattan():
    assert distance((3, 18), (3, 1)) == 17
    assert distance((0, 0), (4, 3)) == 7


def test_in_bounds_edges():
    assert in_bounds((0, 0))
    assert in_bounds((GRID_WIDTH - 1, GRID_HEIGHT - 1))
    assert not in_bounds((GRID_WIDTH, 0))
    assert not in_bounds((0, GRID_HEIGHT))
    assert not in_bounds((-1, 5))


def test_neighbors_order_and_clipping():
    assert neighbors((5, 5)) == [Point(6, 5), Point(4, 5), Point(5, 6), Point(5, 4)]
    assert neighbors((0, 0)) == [Point(1, 0), Point(0, 1)]


@pytest.mark.parametrize("a,b", list(itertools.combinations(SAMPLE_POINTS, 2)))
def test_line_of_sight_clear_without_obstacles(a, b):
    assert line_of_sight_clear(a, b, [])


def test_obstacle_in_the_middle_blocks():
    assert not line_of_sight_clear((3, 10), (3, 14), [(3, 12)])
    assert not line_of_sight_clear((2, 5), (8, 5), [(5, 5)])


def test_obstacle_off_the_line_does_not_block():
    assert line_of_sight_clear((3, 10), (3, 14), [(5, 12)])


def test_adjacent_tiles_always_clear():
    # Even a diagonal neighbour with cover on both shared sides
    assert line_of_sight_clear((4, 4), (5, 4), [(4, 5), (5, 5)])
    assert line_of_sight_clear((4, 4), (4, 3), [(3, 3)])


def test_endpoints_never_block():
    assert line_of_sight_clear((1, 1), (1, 6), [(1, 1), (1, 6)])


def test_facing_from_delta():
    assert facing_from_delta(1, 0) == Facing.RIGHT
    assert facing_from_delta(-2, 1) == Facing.LEFT
    assert facing_from_delta(0, 1) == Facing.DOWN
    assert facing_from_delta(1, -1) == Facing.UP
    assert facing_from_delta(0, 0, Facing.LEFT) == Facing.LEFT


def test_facing_delta_vectors():
    assert Facing.UP.delta == (0, -1)
    assert Facing.RIGHT.delta == (1, 0)
