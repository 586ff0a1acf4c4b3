"""
Combat resolution for squad units.

Fixed damage model: every shot that is allowed to happen removes exactly one
point of health from a unit or one point of structure from cover. No dice.

Handles:
- Unit-on-unit fire, gated by range and line of sight
- Grenades against destructible cover
- Charge-gated special actions (walls, stealth, traps)
"""

import logging

from .fog_of_war import refresh_visibility
from .grid import Point, distance, in_bounds, line_of_sight_clear
from .state import GameState, Rejected, RejectReason, resolve_actor
from .units import SpecialKind, Unit

logger = logging.getLogger(__name__)

SHOT_DAMAGE = 1
GRENADE_DAMAGE = 1


def can_attack(attacker: Unit, target: Unit, obstacles: list[tuple[int, int]]) -> bool:
    """Range and line-of-sight check between two units of opposite teams."""
    if attacker.team == target.team:
        return False
    if distance(attacker.position, target.position) > attacker.range:
        return False
    return line_of_sight_clear(attacker.position, target.position, obstacles)


def attackable_targets(state: GameState, attacker: Unit) -> list[Unit]:
    """Living opponents the attacker could shoot right now, in roster order."""
    obstacles = state.blocking_obstacles()
    return [
        u for u in state.living(attacker.team.opponent)
        if can_attack(attacker, u, obstacles)
    ]


def apply_attack_unit(state: GameState, attacker_id: str, target_id: str) -> GameState | Rejected:
    """Fire one shot: 1 AP from the attacker, 1 HP from the target."""
    attacker = resolve_actor(state, attacker_id)
    if isinstance(attacker, Rejected):
        return _reject(attacker)

    target = state.get_unit(target_id)
    if target is None:
        return _reject(Rejected(RejectReason.UNKNOWN_UNIT, f"No unit {target_id}"))
    if not target.is_alive():
        return _reject(Rejected(RejectReason.TARGET_DOWN, f"{target_id} is already down"))
    if attacker.ap <= 0:
        return _reject(Rejected(RejectReason.INSUFFICIENT_AP, f"{attacker_id} has no AP left"))
    if attacker.team == target.team:
        return _reject(Rejected(RejectReason.SAME_TEAM, f"{attacker_id} and {target_id} are allies"))
    if distance(attacker.position, target.position) > attacker.range:
        return _reject(Rejected(RejectReason.OUT_OF_RANGE, f"{target_id} is beyond range {attacker.range}"))
    if not can_attack(attacker, target, state.blocking_obstacles()):
        return _reject(Rejected(RejectReason.NO_LINE_OF_SIGHT, f"No line of sight to {target_id}"))

    new_state = state.copy()
    shooter = new_state.get_unit(attacker_id)
    victim = new_state.get_unit(target_id)
    shooter.spend_ap(1)
    victim.take_hit(SHOT_DAMAGE)
    refresh_visibility(new_state)

    if victim.is_alive():
        new_state.log(f"{attacker_id} hit {target_id} ({victim.hp}/{victim.max_hp})")
    else:
        new_state.log(f"{attacker_id} took down {target_id}")
    logger.debug(new_state.history[-1])
    return new_state


def apply_attack_obstacle(state: GameState, attacker_id: str, position: tuple[int, int]) -> GameState | Rejected:
    """Throw a grenade at cover: 1 AP and 1 grenade for 1 point of structure."""
    attacker = resolve_actor(state, attacker_id)
    if isinstance(attacker, Rejected):
        return _reject(attacker)

    if not in_bounds(position, state.width, state.height):
        return _reject(Rejected(RejectReason.OUT_OF_BOUNDS, f"{tuple(position)} is off the grid"))
    key = Point(position[0], position[1])
    if key not in state.obstacles:
        return _reject(Rejected(RejectReason.NO_OBSTACLE, f"No cover at {tuple(key)}"))
    if state.obstacle_health(key) <= 0:
        return _reject(Rejected(RejectReason.OBSTACLE_CLEARED, f"Cover at {tuple(key)} is already rubble"))
    if attacker.ap <= 0:
        return _reject(Rejected(RejectReason.INSUFFICIENT_AP, f"{attacker_id} has no AP left"))
    if attacker.inventory.grenades <= 0:
        return _reject(Rejected(RejectReason.NO_CHARGES, f"{attacker_id} has no grenades"))
    if distance(attacker.position, key) > attacker.range:
        return _reject(Rejected(RejectReason.OUT_OF_RANGE, f"{tuple(key)} is beyond range {attacker.range}"))
    if not line_of_sight_clear(attacker.position, key, state.blocking_obstacles()):
        return _reject(Rejected(RejectReason.NO_LINE_OF_SIGHT, f"No line of sight to {tuple(key)}"))

    new_state = state.copy()
    thrower = new_state.get_unit(attacker_id)
    thrower.spend_ap(1)
    thrower.inventory.consume("grenades")
    remaining = max(0, new_state.obstacle_hp.get(key, 0) - GRENADE_DAMAGE)
    new_state.obstacle_hp[key] = remaining
    refresh_visibility(new_state)

    if remaining > 0:
        new_state.log(f"{attacker_id} cracked cover at {key.x},{key.y} ({remaining} left)")
    else:
        new_state.log(f"{attacker_id} levelled cover at {key.x},{key.y}")
    logger.debug(new_state.history[-1])
    return new_state


def apply_special_action(state: GameState, unit_id: str, kind: SpecialKind | str) -> GameState | Rejected:
    """
    Spend one charge of a special action.

    Walls, stealth and traps have no resolved effect on the battlefield: the
    only state change is the spent charge. Hosts that add a mechanic for them
    should hook in after this call succeeds.
    """
    unit = resolve_actor(state, unit_id)
    if isinstance(unit, Rejected):
        return _reject(unit)
    try:
        kind = SpecialKind(kind)
    except ValueError:
        return _reject(Rejected(RejectReason.UNKNOWN_ACTION, f"Unknown special action {kind!r}"))
    if unit.inventory.count(kind.value) <= 0:
        return _reject(Rejected(RejectReason.NO_CHARGES, f"{unit_id} has no {kind.value} left"))

    new_state = state.copy()
    new_state.get_unit(unit_id).inventory.consume(kind.value)
    new_state.log(f"{unit_id} used {kind.value}")
    return new_state


def _reject(rejection: Rejected) -> Rejected:
    logger.debug(f"Combat action rejected: {rejection.reason.value} ({rejection.message})")
    return rejection
