"""
JSON codec for game states and battle logs.

States are stored as plain JSON trees keyed by the state's field names; the
obstacle health map is keyed by "x,y" strings. Loading validates structure and
raises MissionLoadError rather than repairing anything.
"""

import json
import time
from dataclasses import asdict
from pathlib import Path
from typing import Any, Optional

from .grid import Facing, Point, in_bounds
from .state import GameState, enemy_wins, player_wins
from .units import Inventory, Team, Unit


class MissionLoadError(ValueError):
    """Persisted state is structurally invalid."""


BATTLE_RESULTS = ("WIN", "LOSS", "IN_PROGRESS")


def unit_to_dict(unit: Unit) -> dict:
    return {
        "id": unit.id,
        "team": unit.team.value,
        "x": unit.x,
        "y": unit.y,
        "hp": unit.hp,
        "max_hp": unit.max_hp,
        "ap": unit.ap,
        "max_ap": unit.max_ap,
        "range": unit.range,
        "facing": unit.facing.value,
        "inventory": asdict(unit.inventory),
    }


def state_to_dict(state: GameState) -> dict:
    """Serialize a state to a JSON-compatible dict."""
    return {
        "width": state.width,
        "height": state.height,
        "vision_radius": state.vision_radius,
        "cone_range": state.cone_range,
        "units": [unit_to_dict(u) for u in state.units],
        "obstacles": [{"x": o.x, "y": o.y} for o in state.obstacles],
        "obstacle_hp": {f"{p.x},{p.y}": hp for p, hp in state.obstacle_hp.items()},
        "selected_unit_id": state.selected_unit_id,
        "turn": state.turn.value,
        "turn_number": state.turn_number,
        "fog": [list(row) for row in state.fog],
        "visited": [list(row) for row in state.visited],
        "is_ai_turn": state.is_ai_turn,
        "history": list(state.history),
        "opponent_queue": list(state.opponent_queue) if state.opponent_queue is not None else None,
        "opponent_steps": state.opponent_steps,
    }


def _require(data: dict, key: str, kind: type | tuple) -> Any:
    if key not in data:
        raise MissionLoadError(f"Missing field '{key}'")
    value = data[key]
    # bool is an int subclass; reject it where a number is expected
    if isinstance(value, bool) and bool not in (kind if isinstance(kind, tuple) else (kind,)):
        raise MissionLoadError(f"Field '{key}' has wrong type bool")
    if not isinstance(value, kind):
        raise MissionLoadError(f"Field '{key}' has wrong type {type(value).__name__}")
    return value


def _optional(data: dict, key: str, kind: type | tuple, default):
    """Like _require for fields older records may leave out; must be non-negative."""
    if key not in data:
        return default
    value = _require(data, key, kind)
    if value < 0:
        raise MissionLoadError(f"Field '{key}' must not be negative")
    return value


def _enum(enum_cls, value, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise MissionLoadError(f"Invalid {field_name} '{value}'") from None


def _load_unit(data: dict, width: int, height: int) -> Unit:
    if not isinstance(data, dict):
        raise MissionLoadError("Unit entry is not an object")
    inventory_data = _require(data, "inventory", dict)
    try:
        inventory = Inventory(**inventory_data)
    except TypeError as e:
        raise MissionLoadError(f"Invalid inventory: {e}") from None
    for kind, count in asdict(inventory).items():
        if not isinstance(count, int) or count < 0:
            raise MissionLoadError(f"Invalid {kind} count {count!r}")

    unit = Unit(
        id=_require(data, "id", str),
        team=_enum(Team, _require(data, "team", str), "team"),
        x=_require(data, "x", int),
        y=_require(data, "y", int),
        hp=_require(data, "hp", int),
        max_hp=_require(data, "max_hp", int),
        ap=_require(data, "ap", int),
        max_ap=_require(data, "max_ap", int),
        range=_require(data, "range", int),
        facing=_enum(Facing, _require(data, "facing", str), "facing"),
        inventory=inventory,
    )
    if not in_bounds(unit.position, width, height):
        raise MissionLoadError(f"Unit {unit.id} is out of bounds at {tuple(unit.position)}")
    if unit.hp < 0:
        raise MissionLoadError(f"Unit {unit.id} has negative hp")
    if unit.hp > unit.max_hp:
        raise MissionLoadError(f"Unit {unit.id} has hp above max")
    if not 0 <= unit.ap <= unit.max_ap:
        raise MissionLoadError(f"Unit {unit.id} has ap outside 0..{unit.max_ap}")
    return unit


def _load_mask(data: dict, key: str, width: int, height: int) -> list[list[bool]]:
    mask = _require(data, key, list)
    if len(mask) != height or any(
        not isinstance(row, list) or len(row) != width for row in mask
    ):
        raise MissionLoadError(f"'{key}' must be a {height}x{width} grid")
    if any(not isinstance(cell, bool) for row in mask for cell in row):
        raise MissionLoadError(f"'{key}' must hold booleans")
    return [list(row) for row in mask]


def _parse_key(key: str) -> Point:
    try:
        x, y = key.split(",")
        return Point(int(x), int(y))
    except ValueError:
        raise MissionLoadError(f"Invalid obstacle key '{key}'") from None


def state_from_dict(data: dict) -> GameState:
    """Rebuild a state from state_to_dict output, validating as it goes."""
    if not isinstance(data, dict):
        raise MissionLoadError("State is not an object")

    width = _require(data, "width", int)
    height = _require(data, "height", int)
    if width <= 0 or height <= 0:
        raise MissionLoadError(f"Invalid grid size {width}x{height}")

    units = [_load_unit(u, width, height) for u in _require(data, "units", list)]
    ids = [u.id for u in units]
    if len(ids) != len(set(ids)):
        raise MissionLoadError("Duplicate unit ids")

    obstacles = []
    for entry in _require(data, "obstacles", list):
        if not isinstance(entry, dict):
            raise MissionLoadError("Obstacle entry is not an object")
        p = Point(_require(entry, "x", int), _require(entry, "y", int))
        if not in_bounds(p, width, height):
            raise MissionLoadError(f"Obstacle out of bounds at {tuple(p)}")
        obstacles.append(p)
    if len(obstacles) != len(set(obstacles)):
        raise MissionLoadError("Duplicate obstacle positions")

    obstacle_hp = {}
    for key, hp in _require(data, "obstacle_hp", dict).items():
        p = _parse_key(key)
        if not in_bounds(p, width, height):
            raise MissionLoadError(f"Obstacle health out of bounds at {key}")
        if not isinstance(hp, int) or isinstance(hp, bool) or hp < 0:
            raise MissionLoadError(f"Invalid obstacle health {hp!r} at {key}")
        obstacle_hp[p] = hp

    missing = [o for o in obstacles if o not in obstacle_hp]
    if missing:
        raise MissionLoadError(f"Obstacle at {tuple(missing[0])} has no health entry")
    orphans = [p for p in obstacle_hp if p not in obstacles]
    if orphans:
        raise MissionLoadError(f"Obstacle health at {orphans[0].x},{orphans[0].y} has no obstacle")

    queue = data.get("opponent_queue")
    if queue is not None and (not isinstance(queue, list) or any(i not in ids for i in queue)):
        raise MissionLoadError("Opponent queue references unknown units")

    selected = data.get("selected_unit_id")
    if selected is not None and selected not in ids:
        raise MissionLoadError(f"Selected unit {selected} does not exist")

    vision_radius = _optional(data, "vision_radius", (int, float), 4.5)
    cone_range = _optional(data, "cone_range", int, 7)
    opponent_steps = _optional(data, "opponent_steps", int, 0)

    return GameState(
        units=units,
        obstacles=obstacles,
        obstacle_hp=obstacle_hp,
        width=width,
        height=height,
        vision_radius=vision_radius,
        cone_range=cone_range,
        selected_unit_id=selected,
        turn=_enum(Team, _require(data, "turn", str), "turn"),
        turn_number=_require(data, "turn_number", int),
        fog=_load_mask(data, "fog", width, height),
        visited=_load_mask(data, "visited", width, height),
        is_ai_turn=_require(data, "is_ai_turn", bool),
        history=list(data.get("history", [])),
        opponent_queue=list(queue) if queue is not None else None,
        opponent_steps=opponent_steps,
    )


def dumps_state(state: GameState) -> str:
    return json.dumps(state_to_dict(state))


def loads_state(text: str) -> GameState:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MissionLoadError(f"Invalid JSON: {e}") from None
    return state_from_dict(data)


def battle_result(state: GameState) -> str:
    """Map the win predicate to a battle record result."""
    if player_wins(state):
        return "WIN"
    if enemy_wins(state):
        return "LOSS"
    return "IN_PROGRESS"


def save_battle(
    path: Path | str,
    history: list[GameState],
    result: Optional[str] = None,
    name: Optional[str] = None,
) -> Path:
    """Write a battle record (every recorded state in order) as JSON."""
    if not history:
        raise ValueError("Battle history is empty")
    result = result or battle_result(history[-1])
    if result not in BATTLE_RESULTS:
        raise ValueError(f"Invalid battle result {result}")

    timestamp = int(time.time() * 1000)
    record = {
        "id": f"mission_{timestamp}",
        "name": name or f"OP-{timestamp % 900 + 100}",
        "timestamp": timestamp,
        "result": result,
        "history": [state_to_dict(s) for s in history],
    }
    path = Path(path)
    with open(path, "w") as f:
        json.dump(record, f, indent=2)
    return path


def load_battle(path: Path | str) -> tuple[dict, list[GameState]]:
    """Read a battle record. Returns (metadata, states)."""
    with open(path) as f:
        try:
            record = json.load(f)
        except json.JSONDecodeError as e:
            raise MissionLoadError(f"Invalid JSON in {path}: {e}") from None

    if not isinstance(record, dict):
        raise MissionLoadError("Battle record is not an object")
    if record.get("result") not in BATTLE_RESULTS:
        raise MissionLoadError(f"Invalid battle result {record.get('result')!r}")
    states = [state_from_dict(s) for s in _require(record, "history", list)]
    meta = {k: v for k, v in record.items() if k != "history"}
    return meta, states
