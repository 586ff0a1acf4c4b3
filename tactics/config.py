"""
Mission configuration loaded from YAML.

Reads data/mission.yaml when present and falls back to built-in defaults for
anything the file leaves out.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .grid import GRID_HEIGHT, GRID_WIDTH

logger = logging.getLogger(__name__)


@dataclass
class UnitProfile:
    """Starting stats for every unit of one team."""
    hp: int = 5
    ap: int = 3
    range: int = 5
    inventory: dict[str, int] = field(default_factory=dict)


@dataclass
class MissionConfig:
    """Tunable mission constants."""
    width: int = GRID_WIDTH
    height: int = GRID_HEIGHT
    squad_size: int = 5
    player: UnitProfile = field(default_factory=lambda: UnitProfile(
        inventory={"grenades": 6, "aims": 2, "walls": 1, "stealth": 1, "traps": 2}
    ))
    enemy: UnitProfile = field(default_factory=UnitProfile)
    obstacle_attempts: int = 25
    obstacle_band: int = 3  # rows kept clear at the top and bottom edges
    obstacle_hp: int = 2
    vision_radius: float = 4.5
    cone_range: int = 7
    start_message: str = "Mission Start: Grid penetration successful."


def _load_profile(data: dict, default: UnitProfile) -> UnitProfile:
    return UnitProfile(
        hp=data.get("hp", default.hp),
        ap=data.get("ap", default.ap),
        range=data.get("range", default.range),
        inventory={**default.inventory, **data.get("inventory", {})},
    )


def load_mission_config(data_path: Path | str = "data") -> MissionConfig:
    """Load mission constants from <data_path>/mission.yaml."""
    config = MissionConfig()
    config_path = Path(data_path) / "mission.yaml"
    if not config_path.exists():
        logger.debug(f"No mission config at {config_path}, using defaults")
        return config

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    grid = data.get("grid", {})
    obstacles = data.get("obstacles", {})
    vision = data.get("vision", {})
    units = data.get("units", {})

    return MissionConfig(
        width=grid.get("width", config.width),
        height=grid.get("height", config.height),
        squad_size=units.get("squad_size", config.squad_size),
        player=_load_profile(units.get("player", {}), config.player),
        enemy=_load_profile(units.get("enemy", {}), config.enemy),
        obstacle_attempts=obstacles.get("attempts", config.obstacle_attempts),
        obstacle_band=obstacles.get("edge_band", config.obstacle_band),
        obstacle_hp=obstacles.get("hp", config.obstacle_hp),
        vision_radius=vision.get("radius", config.vision_radius),
        cone_range=vision.get("cone_range", config.cone_range),
        start_message=data.get("start_message", config.start_message),
    )
