"""
Turn sequencing for the squad game.

States: player acting -> (end_turn) -> scripted enemy acting ->
(controller finishes, turn number +1) -> player acting -> ...
Once either squad is wiped out the match is over and no acting or
turn-advancing operation is accepted.
"""

import logging
import random
from typing import Callable, Optional

from .mission import create_initial_mission
from .movement import apply_move, apply_rotate
from .combat import apply_attack_obstacle, apply_attack_unit, apply_special_action
from .opponent import is_opponent_turn, run_opponent_step
from .state import (
    GameState, Rejected, RejectReason,
    enemy_wins, is_game_over, player_wins, winner,
)
from .units import Team

logger = logging.getLogger(__name__)

__all__ = [
    "end_turn", "select_unit", "winner", "player_wins", "enemy_wins",
    "is_game_over", "TurnManager",
]


def end_turn(state: GameState) -> GameState:
    """
    Pass control from the player to the scripted enemy.

    Clears the selection, flips the acting team and refills every unit's action
    points. Outside the player's turn, or once the match is over, the state is
    returned unchanged.
    """
    if is_game_over(state) or state.is_ai_turn or state.turn != Team.PLAYER:
        logger.debug("end_turn ignored: not the player's turn")
        return state

    new_state = state.copy()
    new_state.selected_unit_id = None
    new_state.turn = Team.ENEMY
    new_state.is_ai_turn = True
    new_state.opponent_queue = None
    new_state.opponent_steps = 0
    for unit in new_state.units:
        unit.refill_ap()
    logger.info(f"Turn {new_state.turn_number}: control passes to the enemy")
    return new_state


def select_unit(state: GameState, unit_id: Optional[str]) -> GameState:
    """Select one of the acting team's living units (None clears the selection)."""
    if unit_id is not None:
        unit = state.get_unit(unit_id)
        if unit is None or not unit.is_alive() or unit.team != state.turn:
            return state
    new_state = state.copy()
    new_state.selected_unit_id = unit_id
    return new_state


class TurnManager:
    """
    Drives a live match.

    Holds the current state and the match's random source, records every
    accepted state for replay and undo, and runs the scripted turn step by step.
    """

    def __init__(
        self,
        state: Optional[GameState] = None,
        rng_seed: Optional[int] = None,
        config=None,
    ):
        self.rng = random.Random(rng_seed)
        self.state = state if state is not None else create_initial_mission(config, self.rng)
        self.history: list[GameState] = [self.state.copy()]

        # Callbacks for host integration
        self.on_turn_start: Optional[Callable] = None
        self.on_step: Optional[Callable] = None
        self.on_turn_end: Optional[Callable] = None

    @property
    def game_over(self) -> bool:
        return is_game_over(self.state)

    @property
    def winner(self) -> Optional[Team]:
        return winner(self.state)

    def _commit(self, result: GameState | Rejected) -> GameState | Rejected:
        if isinstance(result, Rejected) or result is self.state:
            return result
        self.state = result
        self.history.append(result.copy())
        if self.on_step:
            self.on_step(result)
        return result

    def move(self, unit_id: str, target: tuple[int, int]) -> GameState | Rejected:
        return self._commit(apply_move(self.state, unit_id, target))

    def rotate(self, unit_id: str, facing) -> GameState:
        return self._commit(apply_rotate(self.state, unit_id, facing))

    def attack(self, attacker_id: str, target_id: str) -> GameState | Rejected:
        return self._commit(apply_attack_unit(self.state, attacker_id, target_id))

    def grenade(self, attacker_id: str, position: tuple[int, int]) -> GameState | Rejected:
        return self._commit(apply_attack_obstacle(self.state, attacker_id, position))

    def special(self, unit_id: str, kind) -> GameState | Rejected:
        return self._commit(apply_special_action(self.state, unit_id, kind))

    def select(self, unit_id: Optional[str]) -> GameState:
        self.state = select_unit(self.state, unit_id)
        return self.state

    def end_turn(self) -> GameState | Rejected:
        """End the player's turn. Does not run the opponent; see step_opponent."""
        if is_game_over(self.state):
            return Rejected(RejectReason.GAME_OVER, "Mission is over")
        if self.state.is_ai_turn:
            return Rejected(RejectReason.NOT_YOUR_TURN, "The enemy is acting")
        result = self._commit(end_turn(self.state))
        if self.on_turn_end:
            self.on_turn_end(self.state)
        return result

    def step_opponent(self) -> Optional[GameState]:
        """Run one scripted step. Returns None once the scripted turn is done."""
        if not is_opponent_turn(self.state):
            return None
        was_ai_turn = self.state.is_ai_turn
        self._commit(run_opponent_step(self.state, self.rng))
        if was_ai_turn and not self.state.is_ai_turn and self.on_turn_start:
            self.on_turn_start(self.state)
        return self.state

    def run_opponent_turn(self, max_steps: int = 1000) -> GameState:
        """Run the scripted turn to completion (or until the match ends)."""
        for _ in range(max_steps):
            if self.step_opponent() is None:
                break
        return self.state

    def undo(self) -> GameState:
        """
        Step back to the previous recorded state where the player was acting.

        Scripted steps are never undo points on their own: undoing after an
        enemy turn rewinds the whole enemy turn and the end_turn before it.
        """
        while len(self.history) > 1:
            self.history.pop()
            if not self.history[-1].is_ai_turn:
                break
        self.state = self.history[-1].copy()
        return self.state
