"""Shared builders for engine tests."""

import random

import pytest

from tactics.fog_of_war import refresh_visibility
from tactics.grid import GRID_HEIGHT, GRID_WIDTH, Facing, Point, empty_mask
from tactics.state import GameState
from tactics.units import Inventory, Team, Unit


def build_unit(
    unit_id: str,
    team: Team,
    x: int,
    y: int,
    facing: Facing = Facing.UP,
    hp: int = 5,
    ap: int = 3,
    range: int = 5,
    **inventory,
) -> Unit:
    return Unit(
        id=unit_id,
        team=team,
        x=x,
        y=y,
        hp=hp,
        max_hp=5,
        ap=ap,
        max_ap=3,
        range=range,
        facing=facing,
        inventory=Inventory(**inventory),
    )


def build_state(units, obstacles=None, turn: Team = Team.PLAYER, is_ai_turn: bool = False) -> GameState:
    """Empty 15x20 board with the given units and {(x, y): hp} cover."""
    obstacles = obstacles or {}
    state = GameState(
        units=list(units),
        obstacles=[Point(*p) for p in obstacles],
        obstacle_hp={Point(*p): hp for p, hp in obstacles.items()},
        turn=turn,
        is_ai_turn=is_ai_turn,
        fog=empty_mask(GRID_WIDTH, GRID_HEIGHT, True),
        visited=empty_mask(GRID_WIDTH, GRID_HEIGHT, False),
    )
    return refresh_visibility(state)


@pytest.fixture
def make_unit():
    return build_unit


@pytest.fixture
def make_state():
    return build_state


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def duel_state():
    """One player at (3,18) facing up, one enemy at (3,1) facing down, no cover."""
    return build_state([
        build_unit("p0", Team.PLAYER, 3, 18, Facing.UP, grenades=6),
        build_unit("e0", Team.ENEMY, 3, 1, Facing.DOWN),
    ])
