"""Tests for mission setup."""

import random

from tactics.config import MissionConfig, UnitProfile
from tactics.grid import Facing, Point
from tactics.mission import create_initial_mission, scatter_obstacles
from tactics.units import Team


def test_squads_deploy_on_opposite_rows(rng):
    state = create_initial_mission(rng=rng)

    players = state.living(Team.PLAYER)
    enemies = state.living(Team.ENEMY)
    assert [u.id for u in players] == ["p0", "p1", "p2", "p3", "p4"]
    assert [u.id for u in enemies] == ["e0", "e1", "e2", "e3", "e4"]
    assert [u.position for u in players] == [Point(3 + 2 * i, 18) for i in range(5)]
    assert [u.position for u in enemies] == [Point(3 + 2 * i, 1) for i in range(5)]
    assert all(u.facing == Facing.UP for u in players)
    assert all(u.facing == Facing.DOWN for u in enemies)


def test_starting_stats_and_charges(rng):
    state = create_initial_mission(rng=rng)
    p0, e0 = state.get_unit("p0"), state.get_unit("e0")

    assert (p0.hp, p0.max_hp, p0.ap, p0.max_ap, p0.range) == (5, 5, 3, 3, 5)
    assert p0.inventory.grenades == 6
    assert p0.inventory.aims == 2
    assert (p0.inventory.walls, p0.inventory.stealth, p0.inventory.traps) == (1, 1, 2)
    assert e0.inventory.grenades == 0


def test_opening_state(rng):
    state = create_initial_mission(rng=rng)
    assert state.turn == Team.PLAYER
    assert state.turn_number == 1
    assert not state.is_ai_turn
    assert state.selected_unit_id is None
    assert state.history == ["Mission Start: Grid penetration successful."]
    # The squad sees its own row; the enemy row is out of sight
    assert state.fog[18][3] is False
    assert state.fog[1][3] is True
    assert state.visited[18][3] is True


def test_cover_stays_in_the_middle_band(rng):
    state = create_initial_mission(rng=rng)
    unit_tiles = {u.position for u in state.units}

    assert 0 < len(state.obstacles) <= 25
    assert len(set(state.obstacles)) == len(state.obstacles)
    for o in state.obstacles:
        assert 3 <= o.y < 17
        assert 0 <= o.x < 15
        assert o not in unit_tiles
        assert state.obstacle_hp[o] == 2


def test_same_seed_same_map():
    a = create_initial_mission(rng=random.Random(5))
    b = create_initial_mission(rng=random.Random(5))
    assert a.obstacles == b.obstacles
    assert a.obstacle_hp == b.obstacle_hp


def test_scatter_respects_config():
    config = MissionConfig(obstacle_attempts=200, obstacle_band=5, obstacle_hp=4)
    obstacles, obstacle_hp = scatter_obstacles(config, [], random.Random(0))
    assert all(5 <= o.y < 15 for o in obstacles)
    assert set(obstacle_hp.values()) == {4}


def test_config_drives_squads(rng):
    config = MissionConfig(
        width=12,
        height=16,
        squad_size=3,
        enemy=UnitProfile(hp=3, ap=2, range=4),
    )
    state = create_initial_mission(config, rng)
    assert (state.width, state.height) == (12, 16)
    assert len(state.fog) == 16 and len(state.fog[0]) == 12
    assert len(state.units) == 6
    assert state.get_unit("p2").position == Point(7, 14)
    e0 = state.get_unit("e0")
    assert (e0.hp, e0.max_ap, e0.range) == (3, 2, 4)
