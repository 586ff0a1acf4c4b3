"""
Mission setup: squads, scattered cover and the opening fog.
"""

import logging
import random
from typing import Optional

from .config import MissionConfig, UnitProfile
from .fog_of_war import refresh_visibility
from .grid import Facing, Point, empty_mask
from .state import GameState
from .units import Inventory, Team, Unit

logger = logging.getLogger(__name__)


def _make_squad(team: Team, profile: UnitProfile, size: int, row: int, facing: Facing) -> list[Unit]:
    prefix = "p" if team == Team.PLAYER else "e"
    return [
        Unit(
            id=f"{prefix}{i}",
            team=team,
            x=3 + i * 2,
            y=row,
            hp=profile.hp,
            max_hp=profile.hp,
            ap=profile.ap,
            max_ap=profile.ap,
            range=profile.range,
            facing=facing,
            inventory=Inventory(**profile.inventory),
        )
        for i in range(size)
    ]


def scatter_obstacles(
    config: MissionConfig,
    units: list[Unit],
    rng: random.Random,
) -> tuple[list[Point], dict[Point, int]]:
    """
    Drop cover at random tiles away from the deployment rows.

    Each attempt picks a tile in the middle band of the map; duplicates and
    tiles holding a unit are skipped, so fewer pieces than attempts may land.
    """
    occupied = {(u.x, u.y) for u in units}
    obstacles: list[Point] = []
    obstacle_hp: dict[Point, int] = {}
    band = config.height - 2 * config.obstacle_band

    for _ in range(config.obstacle_attempts):
        p = Point(rng.randrange(config.width), rng.randrange(band) + config.obstacle_band)
        if p in obstacle_hp or (p.x, p.y) in occupied:
            continue
        obstacles.append(p)
        obstacle_hp[p] = config.obstacle_hp

    return obstacles, obstacle_hp


def create_initial_mission(
    config: Optional[MissionConfig] = None,
    rng: Optional[random.Random] = None,
) -> GameState:
    """
    Build the opening state of a mission.

    Squads deploy symmetrically: the player along the second row from the
    bottom facing up, the enemy along the second row from the top facing down.
    Cover placement is the only random part; pass a seeded rng to reproduce it.
    """
    config = config or MissionConfig()
    rng = rng or random.Random()

    units = _make_squad(Team.PLAYER, config.player, config.squad_size, config.height - 2, Facing.UP)
    units += _make_squad(Team.ENEMY, config.enemy, config.squad_size, 1, Facing.DOWN)
    obstacles, obstacle_hp = scatter_obstacles(config, units, rng)

    state = GameState(
        units=units,
        obstacles=obstacles,
        obstacle_hp=obstacle_hp,
        width=config.width,
        height=config.height,
        vision_radius=config.vision_radius,
        cone_range=config.cone_range,
        fog=empty_mask(config.width, config.height, True),
        visited=empty_mask(config.width, config.height, False),
        history=[config.start_message],
    )
    refresh_visibility(state)
    logger.info(f"Mission created: {len(units)} units, {len(obstacles)} pieces of cover")
    return state
