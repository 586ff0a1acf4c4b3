"""
Grid geometry for the tactical map.

Square grid, origin at the top-left corner, x grows right and y grows down.
Distances are Manhattan; line of sight is a sampled raycast between tile centres.
"""

import math
from enum import Enum
from typing import Iterable, NamedTuple, Optional


GRID_WIDTH = 15
GRID_HEIGHT = 20

LOS_SAMPLES_PER_TILE = 10
LOS_ADJACENT_DISTANCE = 1.1


class Point(NamedTuple):
    x: int
    y: int


class Facing(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def delta(self) -> tuple[int, int]:
        return _FACING_DELTAS[self]


_FACING_DELTAS = {
    Facing.UP: (0, -1),
    Facing.DOWN: (0, 1),
    Facing.LEFT: (-1, 0),
    Facing.RIGHT: (1, 0),
}

# Expansion order for breadth-first search: right, left, down, up
NEIGHBOR_OFFSETS = [(1, 0), (-1, 0), (0, 1), (0, -1)]


def distance(a: tuple[int, int], b: tuple[int, int]) -> int:
    """Manhattan distance between two tiles."""
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def in_bounds(p: tuple[int, int], width: int = GRID_WIDTH, height: int = GRID_HEIGHT) -> bool:
    return 0 <= p[0] < width and 0 <= p[1] < height


def neighbors(p: tuple[int, int], width: int = GRID_WIDTH, height: int = GRID_HEIGHT) -> list[Point]:
    """In-bounds 4-connected neighbours, in search expansion order."""
    result = []
    for dx, dy in NEIGHBOR_OFFSETS:
        n = Point(p[0] + dx, p[1] + dy)
        if in_bounds(n, width, height):
            result.append(n)
    return result


def line_of_sight_clear(
    origin: tuple[int, int],
    target: tuple[int, int],
    obstacles: Iterable[tuple[int, int]],
) -> bool:
    """
    Check whether any obstacle sits between two tiles.

    Samples the segment between the two tile centres ten times per tile of
    length and truncates each sample to the tile containing it. The origin and
    target tiles never block. This is a sampling approximation, not an exact
    grid traversal: a segment that only grazes the corner of an obstacle tile
    may be reported clear.
    """
    x0 = origin[0] + 0.5
    y0 = origin[1] + 0.5
    dx = target[0] + 0.5 - x0
    dy = target[1] + 0.5 - y0
    length = math.sqrt(dx * dx + dy * dy)

    if length <= LOS_ADJACENT_DISTANCE:
        return True

    blocking = {(o[0], o[1]) for o in obstacles}
    if not blocking:
        return True

    start = (origin[0], origin[1])
    end = (target[0], target[1])
    steps = math.ceil(length * LOS_SAMPLES_PER_TILE)
    for i in range(1, steps):
        t = i / steps
        tile = (math.floor(x0 + dx * t), math.floor(y0 + dy * t))
        if tile == start or tile == end:
            continue
        if tile in blocking:
            return False
    return True


def facing_from_delta(dx: int, dy: int, current: Optional[Facing] = None) -> Optional[Facing]:
    """
    Facing implied by a movement delta.

    Horizontal wins only when |dx| > |dy|; a zero delta keeps the current facing.
    """
    if abs(dx) > abs(dy):
        return Facing.RIGHT if dx > 0 else Facing.LEFT
    if dy != 0:
        return Facing.DOWN if dy > 0 else Facing.UP
    return current


def empty_mask(width: int, height: int, value: bool) -> list[list[bool]]:
    """A height x width boolean matrix indexed as mask[y][x]."""
    return [[value] * width for _ in range(height)]
