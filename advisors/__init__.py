"""
Tactical advisors for the squad game.

Uses OpenAI (gpt-4o) for advice text.
"""

from .base import TacticalAdvisor, AdvisorConfig
from .squad import SquadAdvisor

__all__ = ["TacticalAdvisor", "AdvisorConfig", "SquadAdvisor"]
