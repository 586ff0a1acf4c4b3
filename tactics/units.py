"""
Unit state for the tactical squad game.

Each side fields a small squad. Units carry health, action points, an
engagement range and a handful of consumable charges for special actions.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .grid import Facing, Point


class Team(Enum):
    PLAYER = "player"
    ENEMY = "enemy"

    @property
    def opponent(self) -> "Team":
        return Team.ENEMY if self is Team.PLAYER else Team.PLAYER


class SpecialKind(Enum):
    """Charge-gated actions with no resolved battlefield effect yet."""
    WALL = "walls"
    STEALTH = "stealth"
    TRAP = "traps"


@dataclass
class Inventory:
    """Consumable charges, one spent per use."""
    grenades: int = 0
    aims: int = 0
    walls: int = 0
    stealth: int = 0
    traps: int = 0

    def count(self, kind: str) -> int:
        return getattr(self, kind)

    def consume(self, kind: str) -> bool:
        """Spend one charge. Returns False when none are left."""
        current = getattr(self, kind)
        if current <= 0:
            return False
        setattr(self, kind, current - 1)
        return True


@dataclass
class Unit:
    """A single squad member on the grid."""
    id: str
    team: Team
    x: int
    y: int
    hp: int
    max_hp: int
    ap: int
    max_ap: int
    range: int
    facing: Facing
    inventory: Inventory = field(default_factory=Inventory)

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)

    def is_alive(self) -> bool:
        return self.hp > 0

    def take_hit(self, damage: int = 1):
        """Apply damage, never dropping below zero."""
        self.hp = max(0, self.hp - damage)

    def spend_ap(self, amount: int = 1):
        self.ap = max(0, self.ap - amount)

    def refill_ap(self):
        self.ap = self.max_ap

    def move_to(self, p: tuple[int, int]):
        self.x, self.y = p[0], p[1]


def find_unit(units: list[Unit], unit_id: str) -> Optional[Unit]:
    for unit in units:
        if unit.id == unit_id:
            return unit
    return None


def living_units(units: list[Unit], team: Optional[Team] = None) -> list[Unit]:
    """Units with health left, optionally restricted to one team."""
    return [u for u in units if u.is_alive() and (team is None or u.team == team)]


def living_unit_at(units: list[Unit], p: tuple[int, int], exclude_id: Optional[str] = None) -> Optional[Unit]:
    for unit in units:
        if unit.x == p[0] and unit.y == p[1] and unit.is_alive() and unit.id != exclude_id:
            return unit
    return None
