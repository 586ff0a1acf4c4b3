"""
Scripted opponent controller.

Each opponent unit, in a freshly shuffled order every turn, spends up to its
action points one at a time: shoot if anything is in range and sight,
otherwise step toward the enemy squad, otherwise stand down for the turn.

Target choice is deliberately naive. The unit shoots the first attackable
opponent in roster order (not the nearest or weakest) and walks toward the
first living opponent in roster order (not the nearest).

The turn is driven one action per call to run_opponent_step so a host can
pace presentation between steps.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .combat import apply_attack_unit, attackable_targets
from .movement import apply_step, can_move_to, find_next_step_towards
from .state import GameState, Rejected, is_game_over
from .units import Team, Unit

logger = logging.getLogger(__name__)


class IntentKind(Enum):
    ATTACK = "attack"
    STEP = "step"


@dataclass(frozen=True)
class Intent:
    """What a scripted unit wants to do next."""
    kind: IntentKind
    unit_id: str
    target_id: Optional[str] = None
    position: Optional[tuple[int, int]] = None


def choose_action(state: GameState, unit: Unit) -> Optional[Intent]:
    """Pick one action for a unit, or None when it can neither shoot nor move."""
    if not unit.is_alive() or unit.ap <= 0:
        return None

    opponents = state.living(unit.team.opponent)
    if not opponents:
        return None

    targets = attackable_targets(state, unit)
    if targets:
        return Intent(IntentKind.ATTACK, unit.id, target_id=targets[0].id)

    step = find_next_step_towards(state, unit, opponents[0].position)
    if step is not None and can_move_to(state, unit, step):
        return Intent(IntentKind.STEP, unit.id, position=step)
    return None


def apply_intent(state: GameState, intent: Intent) -> GameState | Rejected:
    if intent.kind == IntentKind.ATTACK:
        return apply_attack_unit(state, intent.unit_id, intent.target_id)
    return apply_step(state, intent.unit_id, intent.position)


def is_opponent_turn(state: GameState) -> bool:
    """True while the scripted side still has steps to run."""
    return state.is_ai_turn and not is_game_over(state)


def run_opponent_step(state: GameState, rng: Optional[random.Random] = None) -> GameState:
    """
    Advance the scripted turn by a single unit action.

    The first call of a turn shuffles the acting order with `rng`. Units that
    cannot act are skipped within the same call, so every call either performs
    one action or hands the turn back to the player. Calling this once the
    match is over, or outside the scripted turn, returns the state unchanged.
    """
    if not is_opponent_turn(state):
        return state

    new_state = state.copy()
    if new_state.opponent_queue is None:
        rng = rng or random.Random()
        order = [u.id for u in new_state.living(new_state.turn)]
        rng.shuffle(order)
        new_state.opponent_queue = order
        new_state.opponent_steps = 0
        logger.debug(f"Opponent order for turn {new_state.turn_number}: {order}")

    while new_state.opponent_queue:
        unit_id = new_state.opponent_queue[0]
        unit = new_state.get_unit(unit_id)
        new_state.selected_unit_id = unit_id

        if unit is None or new_state.opponent_steps >= unit.max_ap:
            _next_unit(new_state)
            continue

        intent = choose_action(new_state, unit)
        if intent is None:
            logger.debug(f"{unit_id} holds position")
            _next_unit(new_state)
            continue

        result = apply_intent(new_state, intent)
        if isinstance(result, Rejected):
            logger.debug(f"{unit_id} could not {intent.kind.value}: {result.message}")
            _next_unit(new_state)
            continue

        result.opponent_steps += 1
        return result

    return _finish_opponent_turn(new_state)


def _next_unit(state: GameState):
    state.opponent_queue = state.opponent_queue[1:]
    state.opponent_steps = 0


def _finish_opponent_turn(state: GameState) -> GameState:
    """Hand control back to the player and open the next turn."""
    state.opponent_queue = None
    state.opponent_steps = 0
    state.selected_unit_id = None
    state.turn = Team.PLAYER
    state.is_ai_turn = False
    state.turn_number += 1
    for unit in state.units:
        unit.refill_ap()
    logger.info(f"Opponent turn complete, turn {state.turn_number} begins")
    return state
