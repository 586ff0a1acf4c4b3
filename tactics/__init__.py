"""
Rules engine for a turn-based squad tactics game on a fixed grid.

Core modules:
- grid: Geometry, Manhattan distance, sampled line of sight
- units: Unit state and special-action charges
- state: Game state value, rejections, win predicates
- fog_of_war: Visibility and visited memory
- movement: Step legality and breadth-first pathfinding
- combat: Shots, grenades and charge-gated specials
- opponent: Scripted enemy controller
- turn: Turn sequencing and match driver
- mission: Mission setup
- config: YAML mission constants
- persistence: JSON codec and battle logs
"""

from .grid import (
    GRID_WIDTH, GRID_HEIGHT, Point, Facing,
    distance, in_bounds, line_of_sight_clear,
)
from .units import Unit, Inventory, Team, SpecialKind
from .state import (
    GameState, Rejected, RejectReason, prune_resolved,
    winner, player_wins, enemy_wins, is_game_over,
)
from .config import MissionConfig, UnitProfile, load_mission_config
from .fog_of_war import FogOfWar
from .movement import can_move_to, find_path, find_next_step_towards, apply_move, apply_rotate
from .combat import can_attack, apply_attack_unit, apply_attack_obstacle, apply_special_action
from .opponent import Intent, IntentKind, choose_action, run_opponent_step
from .mission import create_initial_mission
from .turn import TurnManager, end_turn, select_unit
from .persistence import (
    MissionLoadError, state_to_dict, state_from_dict,
    save_battle, load_battle, battle_result,
)

__all__ = [
    # Grid
    "GRID_WIDTH", "GRID_HEIGHT", "Point", "Facing",
    "distance", "in_bounds", "line_of_sight_clear",
    # Units
    "Unit", "Inventory", "Team", "SpecialKind",
    # State
    "GameState", "Rejected", "RejectReason", "prune_resolved",
    "winner", "player_wins", "enemy_wins", "is_game_over",
    # Config
    "MissionConfig", "UnitProfile", "load_mission_config",
    # Fog of War
    "FogOfWar",
    # Movement
    "can_move_to", "find_path", "find_next_step_towards", "apply_move", "apply_rotate",
    # Combat
    "can_attack", "apply_attack_unit", "apply_attack_obstacle", "apply_special_action",
    # Opponent
    "Intent", "IntentKind", "choose_action", "run_opponent_step",
    # Turn Management
    "create_initial_mission", "TurnManager", "end_turn", "select_unit",
    # Persistence
    "MissionLoadError", "state_to_dict", "state_from_dict",
    "save_battle", "load_battle", "battle_result",
]
