"""
Fog of war for the player squad.

Handles:
- Per-turn visibility (radial peripheral vision plus a forward sight cone)
- Persistent "visited" memory of every tile ever seen

Only living player units see. The enemy is scripted and plays without fog.
"""

import math
from typing import Iterable

from .grid import GRID_HEIGHT, GRID_WIDTH, Facing, empty_mask
from .units import Team, Unit


class FogOfWar:
    """Computes visibility masks from unit positions and facings."""

    def __init__(
        self,
        width: int = GRID_WIDTH,
        height: int = GRID_HEIGHT,
        vision_radius: float = 4.5,
        cone_range: int = 7,
    ):
        self.width = width
        self.height = height
        self.vision_radius = vision_radius
        self.cone_range = cone_range

    @classmethod
    def from_config(cls, config) -> "FogOfWar":
        return cls(
            width=config.width,
            height=config.height,
            vision_radius=config.vision_radius,
            cone_range=config.cone_range,
        )

    def compute(
        self,
        units: Iterable[Unit],
        visited: list[list[bool]],
    ) -> tuple[list[list[bool]], list[list[bool]]]:
        """
        Recompute visibility from scratch.

        Returns (fog, visited). fog[y][x] is True when the tile is hidden this
        turn. The returned visited mask is a fresh copy of the previous one with
        every currently revealed tile set; nothing is ever cleared from it.
        """
        fog = empty_mask(self.width, self.height, True)
        new_visited = [list(row) for row in visited]

        for unit in units:
            if unit.team != Team.PLAYER or not unit.is_alive():
                continue
            for x, y in self._radial_tiles(unit):
                fog[y][x] = False
                new_visited[y][x] = True
            for x, y in self._cone_tiles(unit):
                fog[y][x] = False
                new_visited[y][x] = True

        return fog, new_visited

    def _radial_tiles(self, unit: Unit) -> list[tuple[int, int]]:
        reach = int(math.floor(self.vision_radius))
        tiles = []
        for dy in range(-reach, reach + 1):
            for dx in range(-reach, reach + 1):
                x, y = unit.x + dx, unit.y + dy
                if not (0 <= x < self.width and 0 <= y < self.height):
                    continue
                if math.sqrt(dx * dx + dy * dy) <= self.vision_radius:
                    tiles.append((x, y))
        return tiles

    def _cone_tiles(self, unit: Unit) -> list[tuple[int, int]]:
        """Widening triangle ahead of the unit: ring i spans 2i+1 tiles."""
        tiles = []
        for i in range(1, self.cone_range + 1):
            for j in range(-i, i + 1):
                if unit.facing == Facing.UP:
                    x, y = unit.x + j, unit.y - i
                elif unit.facing == Facing.DOWN:
                    x, y = unit.x + j, unit.y + i
                elif unit.facing == Facing.LEFT:
                    x, y = unit.x - i, unit.y + j
                else:
                    x, y = unit.x + i, unit.y + j
                if 0 <= x < self.width and 0 <= y < self.height:
                    tiles.append((x, y))
        return tiles


def refresh_visibility(state):
    """Recompute fog and visited on a state in place (used on fresh copies only)."""
    fog_of_war = FogOfWar(state.width, state.height, state.vision_radius, state.cone_range)
    state.fog, state.visited = fog_of_war.compute(state.units, state.visited)
    return state
