"""
Squad advisor - one-line suggestions for the player's turn.
"""

from tactics.state import GameState
from tactics.units import Team

from .base import TacticalAdvisor, AdvisorConfig


class SquadAdvisor(TacticalAdvisor):
    """
    Tactical advisor for the player squad.

    Sees only what the squad sees: enemies under fog are left out of the
    briefing.
    """

    @property
    def system_prompt(self) -> str:
        return (
            "You are a tactical AI advisor for a turn-based squad game on a grid. "
            "Answer with a single sharp sentence."
        )

    def build_prompt(self, state: GameState) -> str:
        players = state.living(Team.PLAYER)
        visible_enemies = [
            u for u in state.living(Team.ENEMY)
            if not state.is_hidden(u.position)
        ]

        prompt = f"""
## SITUATION - TURN {state.turn_number}
Grid: {state.width}x{state.height}
Acting side: {state.turn.value}

### SQUAD
"""
        for u in players:
            prompt += f"  - [ID:{u.id}, POS:({u.x},{u.y}), HP:{u.hp}/{u.max_hp}, AP:{u.ap}]\n"

        prompt += "\n### VISIBLE ENEMIES\n"
        if visible_enemies:
            for u in visible_enemies:
                prompt += f"  - [POS:({u.x},{u.y}), HP:{u.hp}]\n"
        else:
            prompt += "No contacts.\n"

        prompt += f"\nCover pieces standing: {len(state.blocking_obstacles())}\n"
        prompt += "The goal is to eliminate all enemies.\n"
        prompt += "Give a one-sentence, sharp tactical suggestion for the current turn.\n"
        return prompt

    @classmethod
    def create_default(cls, model: str = "gpt-4o") -> "SquadAdvisor":
        return cls(AdvisorConfig(model=model))
