"""
Game state value and action rejections.

Every state transition in the engine takes a GameState and returns either a
new GameState or a Rejected value. The returned state never shares mutable
structure with the input, so hosts can keep old states for replay and undo.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from .grid import GRID_HEIGHT, GRID_WIDTH, Point, empty_mask
from .units import Team, Unit, find_unit, living_units


class RejectReason(Enum):
    UNKNOWN_UNIT = "unknown_unit"
    UNIT_DOWN = "unit_down"
    NOT_YOUR_TURN = "not_your_turn"
    GAME_OVER = "game_over"
    OUT_OF_BOUNDS = "out_of_bounds"
    NO_PATH = "no_path"
    INSUFFICIENT_AP = "insufficient_ap"
    NO_CHARGES = "no_charges"
    SAME_TEAM = "same_team"
    OUT_OF_RANGE = "out_of_range"
    NO_LINE_OF_SIGHT = "no_line_of_sight"
    TARGET_DOWN = "target_down"
    NO_OBSTACLE = "no_obstacle"
    OBSTACLE_CLEARED = "obstacle_cleared"
    UNKNOWN_ACTION = "unknown_action"


@dataclass(frozen=True)
class Rejected:
    """An illegal action. The state it was checked against is unchanged."""
    reason: RejectReason
    message: str = ""

    def __bool__(self) -> bool:
        return False


@dataclass
class GameState:
    """Complete state of a mission."""
    units: list[Unit] = field(default_factory=list)
    obstacles: list[Point] = field(default_factory=list)
    obstacle_hp: dict[Point, int] = field(default_factory=dict)
    width: int = GRID_WIDTH
    height: int = GRID_HEIGHT
    vision_radius: float = 4.5
    cone_range: int = 7
    selected_unit_id: Optional[str] = None
    turn: Team = Team.PLAYER
    turn_number: int = 1
    fog: list[list[bool]] = field(default_factory=lambda: empty_mask(GRID_WIDTH, GRID_HEIGHT, True))
    visited: list[list[bool]] = field(default_factory=lambda: empty_mask(GRID_WIDTH, GRID_HEIGHT, False))
    is_ai_turn: bool = False
    history: list[str] = field(default_factory=list)
    # Opponent controller cursor: unit ids still to act, steps taken by the head unit
    opponent_queue: Optional[list[str]] = None
    opponent_steps: int = 0

    def copy(self) -> "GameState":
        """Independent deep copy; mutating it never touches this state."""
        return copy.deepcopy(self)

    def get_unit(self, unit_id: str) -> Optional[Unit]:
        return find_unit(self.units, unit_id)

    def living(self, team: Optional[Team] = None) -> list[Unit]:
        return living_units(self.units, team)

    def obstacle_health(self, p: tuple[int, int]) -> int:
        return self.obstacle_hp.get(Point(p[0], p[1]), 0)

    def blocking_obstacles(self) -> list[Point]:
        """Obstacles with structure left. Cleared rubble blocks nothing."""
        return [o for o in self.obstacles if self.obstacle_hp.get(o, 0) > 0]

    def is_blocked(self, p: tuple[int, int]) -> bool:
        key = Point(p[0], p[1])
        return self.obstacle_hp.get(key, 0) > 0 and key in self.obstacles

    def is_hidden(self, p: tuple[int, int]) -> bool:
        return self.fog[p[1]][p[0]]

    def log(self, message: str):
        self.history.append(message)


def prune_resolved(state: GameState, pinned: Iterable[tuple[int, int]] = ()) -> GameState:
    """
    Drop down units and cleared obstacles from a state.

    Positions in `pinned` are still referenced by an in-flight visual effect
    and keep their entities until the host stops pinning them. Health values
    are never changed; only presence is.
    """
    keep = {(p[0], p[1]) for p in pinned}
    new_state = state.copy()
    new_state.units = [
        u for u in new_state.units
        if u.is_alive() or (u.x, u.y) in keep
    ]
    new_state.obstacles = [
        o for o in new_state.obstacles
        if new_state.obstacle_hp.get(o, 0) > 0 or (o.x, o.y) in keep
    ]
    remaining = set(new_state.obstacles)
    new_state.obstacle_hp = {p: hp for p, hp in new_state.obstacle_hp.items() if p in remaining}
    return new_state


def winner(state: GameState) -> Optional[Team]:
    """The team that has wiped out the other, if any."""
    player_alive = bool(state.living(Team.PLAYER))
    enemy_alive = bool(state.living(Team.ENEMY))
    if player_alive and not enemy_alive:
        return Team.PLAYER
    if enemy_alive and not player_alive:
        return Team.ENEMY
    return None


def player_wins(state: GameState) -> bool:
    return winner(state) == Team.PLAYER


def enemy_wins(state: GameState) -> bool:
    return winner(state) == Team.ENEMY


def is_game_over(state: GameState) -> bool:
    """True once either side has no living units left."""
    return not state.living(Team.PLAYER) or not state.living(Team.ENEMY)


def resolve_actor(state: GameState, unit_id: str) -> Unit | Rejected:
    """Look up a unit and check it may act right now."""
    if is_game_over(state):
        return Rejected(RejectReason.GAME_OVER, "Mission is over")
    unit = state.get_unit(unit_id)
    if unit is None:
        return Rejected(RejectReason.UNKNOWN_UNIT, f"No unit {unit_id}")
    if not unit.is_alive():
        return Rejected(RejectReason.UNIT_DOWN, f"{unit_id} is down")
    if unit.team != state.turn:
        return Rejected(RejectReason.NOT_YOUR_TURN, f"It is the {state.turn.value} turn")
    return unit
