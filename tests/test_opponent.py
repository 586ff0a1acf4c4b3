"""Tests for the scripted opponent controller."""

import random

from tactics.grid import Facing, Point, distance
from tactics.opponent import IntentKind, choose_action, is_opponent_turn, run_opponent_step
from tactics.turn import end_turn
from tactics.units import Team

from conftest import build_state, build_unit


def _run_to_completion(state, rng, limit=200):
    steps = 0
    while is_opponent_turn(state):
        state = run_opponent_step(state, rng)
        steps += 1
        assert steps <= limit, "opponent turn did not terminate"
    return state, steps


def test_boxed_in_enemy_still_hands_the_turn_back(rng):
    box = {(6, 1): 2, (8, 1): 2, (7, 0): 2, (7, 2): 2}
    units = [
        build_unit("p0", Team.PLAYER, 7, 18),
        build_unit("e0", Team.ENEMY, 7, 1, Facing.DOWN),
    ]
    state = end_turn(build_state(units, obstacles=box))
    assert state.is_ai_turn

    result, steps = _run_to_completion(state, rng)

    assert steps == 1
    assert result.turn == Team.PLAYER
    assert not result.is_ai_turn
    assert result.turn_number == state.turn_number + 1
    assert result.get_unit("e0").position == Point(7, 1)
    assert result.opponent_queue is None


def test_each_call_performs_at_most_one_action(rng):
    units = [
        build_unit("p0", Team.PLAYER, 7, 18),
        build_unit("e0", Team.ENEMY, 3, 1, Facing.DOWN),
        build_unit("e1", Team.ENEMY, 11, 1, Facing.DOWN),
    ]
    state = end_turn(build_state(units))

    while is_opponent_turn(state):
        before = {u.id: (u.x, u.y, u.ap) for u in state.units}
        state = run_opponent_step(state, rng)
        after = {u.id: (u.x, u.y, u.ap) for u in state.units}
        if state.is_ai_turn:
            changed = [uid for uid in before if before[uid] != after[uid]]
            assert len(changed) == 1

    # Both enemies closed in by their full three steps
    target = Point(7, 18)
    assert distance(state.get_unit("e0").position, target) == 18
    assert distance(state.get_unit("e1").position, target) == 18
    assert state.turn_number == 2


def test_enemy_prefers_shooting_over_walking(rng):
    units = [
        build_unit("p0", Team.PLAYER, 5, 8),
        build_unit("e0", Team.ENEMY, 5, 5, Facing.DOWN),
    ]
    state = end_turn(build_state(units))

    intent = choose_action(state, state.get_unit("e0"))
    assert intent.kind == IntentKind.ATTACK
    assert intent.target_id == "p0"

    result, _ = _run_to_completion(state, rng)
    assert result.get_unit("p0").hp == 2
    assert result.get_unit("e0").position == Point(5, 5)


def test_enemy_walks_toward_first_living_opponent():
    units = [
        build_unit("p0", Team.PLAYER, 0, 18, hp=0),
        build_unit("p1", Team.PLAYER, 10, 18),
        build_unit("e0", Team.ENEMY, 10, 1, Facing.DOWN),
    ]
    state = end_turn(build_state(units))
    intent = choose_action(state, state.get_unit("e0"))
    assert intent.kind == IntentKind.STEP
    assert intent.position == Point(10, 2)


def test_enemy_can_finish_the_match(rng):
    units = [
        build_unit("p0", Team.PLAYER, 5, 8, hp=2),
        build_unit("e0", Team.ENEMY, 5, 5, Facing.DOWN),
    ]
    state = end_turn(build_state(units))
    result, _ = _run_to_completion(state, rng)

    assert result.get_unit("p0").hp == 0
    assert result.is_ai_turn
    assert run_opponent_step(result, rng) is result


def test_same_seed_same_turn():
    units = [build_unit("p0", Team.PLAYER, 7, 18)] + [
        build_unit(f"e{i}", Team.ENEMY, 3 + 2 * i, 1, Facing.DOWN) for i in range(5)
    ]
    state = end_turn(build_state(units, obstacles={(5, 6): 2, (9, 4): 2}))

    first, _ = _run_to_completion(state, random.Random(99))
    second, _ = _run_to_completion(state, random.Random(99))
    assert [(u.x, u.y, u.facing) for u in first.units] == [(u.x, u.y, u.facing) for u in second.units]


def test_outside_the_scripted_turn_nothing_happens(rng):
    state = build_state([build_unit("p0", Team.PLAYER, 7, 18), build_unit("e0", Team.ENEMY, 7, 1)])
    assert run_opponent_step(state, rng) is state
