"""
Movement legality and breadth-first pathfinding on the grid.

Obstacles with structure left and tiles held by other living units are
impassable. Every step costs one action point.
"""

import logging
from collections import deque
from typing import Optional

from .fog_of_war import refresh_visibility
from .grid import Facing, Point, distance, facing_from_delta, in_bounds, neighbors
from .state import GameState, Rejected, RejectReason, resolve_actor
from .units import Unit, living_unit_at

logger = logging.getLogger(__name__)


def can_move_to(state: GameState, unit: Unit, target: tuple[int, int]) -> bool:
    """Single-step legality: one tile away, in bounds, free of cover and units."""
    if not in_bounds(target, state.width, state.height):
        return False
    if distance(unit.position, target) != 1:
        return False
    if state.is_blocked(target):
        return False
    if living_unit_at(state.units, target) is not None:
        return False
    return True


def _impassable(state: GameState, unit: Unit) -> set[tuple[int, int]]:
    blocked = {(o.x, o.y) for o in state.blocking_obstacles()}
    for other in state.units:
        if other.is_alive() and other.id != unit.id:
            blocked.add((other.x, other.y))
    return blocked


def find_path(state: GameState, unit: Unit, target: tuple[int, int]) -> Optional[list[Point]]:
    """
    Shortest 4-connected route from the unit to an exact tile.

    Returns the steps excluding the start tile, an empty list when the unit is
    already there, or None when the tile cannot be reached. Among equally short
    routes the one found first by the right/left/down/up expansion wins.
    """
    start = unit.position
    goal = Point(target[0], target[1])
    if start == goal:
        return []

    blocked = _impassable(state, unit)
    came_from: dict[Point, Point] = {}
    seen = {start}
    queue = deque([start])

    while queue:
        current = queue.popleft()
        if current == goal:
            path = [current]
            while path[-1] in came_from and came_from[path[-1]] != start:
                path.append(came_from[path[-1]])
            return list(reversed(path))

        for n in neighbors(current, state.width, state.height):
            if n in seen or n in blocked:
                continue
            seen.add(n)
            came_from[n] = current
            queue.append(n)

    return None


def find_next_step_towards(state: GameState, unit: Unit, target: tuple[int, int]) -> Optional[Point]:
    """
    First step of a shortest route that ends next to the target.

    The search stops as soon as it reaches any tile within one step of the
    target, so an occupied target tile is fine. Returns None when the unit is
    already adjacent or nothing adjacent is reachable.
    """
    start = unit.position
    blocked = _impassable(state, unit)
    first_step: dict[Point, Optional[Point]] = {start: None}
    queue = deque([start])

    while queue:
        current = queue.popleft()
        if distance(current, target) <= 1:
            return first_step[current]

        for n in neighbors(current, state.width, state.height):
            if n in first_step or n in blocked:
                continue
            step = first_step[current] or n
            if distance(n, target) == 0:
                return step
            first_step[n] = step
            queue.append(n)

    return None


def apply_move(state: GameState, unit_id: str, target: tuple[int, int]) -> GameState | Rejected:
    """Walk a unit along the shortest path to target, one AP per step."""
    unit = resolve_actor(state, unit_id)
    if isinstance(unit, Rejected):
        return _reject(unit)
    if not in_bounds(target, state.width, state.height):
        return _reject(Rejected(RejectReason.OUT_OF_BOUNDS, f"{tuple(target)} is off the grid"))
    if unit.ap <= 0:
        return _reject(Rejected(RejectReason.INSUFFICIENT_AP, f"{unit_id} has no AP left"))

    path = find_path(state, unit, target)
    if not path:
        return _reject(Rejected(RejectReason.NO_PATH, f"No route for {unit_id} to {tuple(target)}"))
    if len(path) > unit.ap:
        return _reject(Rejected(
            RejectReason.INSUFFICIENT_AP,
            f"{unit_id} needs {len(path)} AP, has {unit.ap}",
        ))

    previous = path[-2] if len(path) > 1 else unit.position
    last = path[-1]

    new_state = state.copy()
    mover = new_state.get_unit(unit_id)
    mover.move_to(last)
    mover.spend_ap(len(path))
    mover.facing = facing_from_delta(last.x - previous.x, last.y - previous.y, mover.facing)
    refresh_visibility(new_state)
    logger.debug(f"{unit_id} moved {len(path)} to {tuple(last)}")
    return new_state


def apply_step(state: GameState, unit_id: str, step: tuple[int, int]) -> GameState | Rejected:
    """
    Move a unit exactly one tile.

    Facing follows the scripted-opponent convention: horizontal whenever the
    step has an x component, otherwise vertical.
    """
    unit = resolve_actor(state, unit_id)
    if isinstance(unit, Rejected):
        return _reject(unit)
    if unit.ap <= 0:
        return _reject(Rejected(RejectReason.INSUFFICIENT_AP, f"{unit_id} has no AP left"))
    if not in_bounds(step, state.width, state.height):
        return _reject(Rejected(RejectReason.OUT_OF_BOUNDS, f"{tuple(step)} is off the grid"))
    if not can_move_to(state, unit, step):
        return _reject(Rejected(RejectReason.NO_PATH, f"{unit_id} cannot step to {tuple(step)}"))

    dx, dy = step[0] - unit.x, step[1] - unit.y
    new_state = state.copy()
    mover = new_state.get_unit(unit_id)
    mover.move_to(step)
    mover.spend_ap(1)
    if dx != 0:
        mover.facing = Facing.RIGHT if dx > 0 else Facing.LEFT
    else:
        mover.facing = Facing.DOWN if dy > 0 else Facing.UP
    refresh_visibility(new_state)
    return new_state


def apply_rotate(state: GameState, unit_id: str, facing: Facing) -> GameState:
    """Turn a unit to a new facing. Free; illegal requests leave state unchanged."""
    unit = resolve_actor(state, unit_id)
    if isinstance(unit, Rejected):
        _reject(unit)
        return state
    try:
        facing = Facing(facing)
    except ValueError:
        _reject(Rejected(RejectReason.UNKNOWN_ACTION, f"Unknown facing {facing!r}"))
        return state

    new_state = state.copy()
    new_state.get_unit(unit_id).facing = facing
    refresh_visibility(new_state)
    return new_state


def _reject(rejection: Rejected) -> Rejected:
    logger.debug(f"Move rejected: {rejection.reason.value} ({rejection.message})")
    return rejection
