"""
Base tactical advisor using OpenAI (gpt-4o).

Advisors only read game state. They never sit on the engine's critical path:
any failure is logged and replaced by a fixed fallback line.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from openai import OpenAI

from tactics.state import GameState

logger = logging.getLogger(__name__)


@dataclass
class AdvisorConfig:
    """Configuration for a tactical advisor."""
    model: str = "gpt-4o"
    temperature: float = 0.7
    max_tokens: int = 120
    default_advice: str = "Eyes on the target. Stay sharp."
    fallback_advice: str = "Tactical link unstable. Maintain formation and engage hostiles."


class TacticalAdvisor(ABC):
    """Base class for LLM-powered advice on the current board."""

    def __init__(self, config: Optional[AdvisorConfig] = None, client=None):
        self.config = config or AdvisorConfig()
        self._client = client
        self.last_prompt: Optional[str] = None

    @property
    def client(self):
        # Created lazily so a missing OPENAI_API_KEY only surfaces as a fallback
        if self._client is None:
            self._client = OpenAI()
        return self._client

    @property
    @abstractmethod
    def system_prompt(self) -> str:
        """Get the system prompt defining the advisor's role."""
        pass

    @abstractmethod
    def build_prompt(self, state: GameState) -> str:
        """Describe the board for the model."""
        pass

    def get_advice(self, state: GameState) -> str:
        """One line of advice for the current turn. Never raises."""
        try:
            self.last_prompt = self.build_prompt(state)
            response = self.client.chat.completions.create(
                model=self.config.model,
                messages=[
                    {"role": "system", "content": self.system_prompt},
                    {"role": "user", "content": self.last_prompt},
                ],
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
            )
            text = response.choices[0].message.content
            return text.strip() if text and text.strip() else self.config.default_advice
        except Exception as e:
            logger.warning(f"Advisor error: {e}")
            return self.config.fallback_advice
