"""Tests for the tactical advisor, with the OpenAI client replaced by a fake."""

from types import SimpleNamespace

from advisors import AdvisorConfig, SquadAdvisor
from tactics.grid import Facing
from tactics.units import Team

from conftest import build_state, build_unit


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(content=None, error=None):
    return SimpleNamespace(chat=SimpleNamespace(completions=FakeCompletions(content, error)))


def _state():
    return build_state([
        build_unit("p0", Team.PLAYER, 3, 18),
        build_unit("e0", Team.ENEMY, 3, 15, Facing.DOWN, hp=3),
        build_unit("e1", Team.ENEMY, 12, 1, Facing.DOWN),
    ])


def test_returns_model_text():
    client = fake_client("  Flank left through the rubble.  ")
    advisor = SquadAdvisor(AdvisorConfig(model="gpt-test"), client=client)

    assert advisor.get_advice(_state()) == "Flank left through the rubble."
    call = client.chat.completions.calls[0]
    assert call["model"] == "gpt-test"
    assert call["messages"][0]["role"] == "system"
    assert call["messages"][1]["content"] == advisor.last_prompt


def test_empty_reply_uses_default_line():
    advisor = SquadAdvisor(client=fake_client("   "))
    assert advisor.get_advice(_state()) == "Eyes on the target. Stay sharp."


def test_client_failure_uses_fallback_line():
    advisor = SquadAdvisor(client=fake_client(error=RuntimeError("connection reset")))
    assert advisor.get_advice(_state()) == "Tactical link unstable. Maintain formation and engage hostiles."


def test_prompt_only_lists_visible_enemies():
    prompt = SquadAdvisor(client=fake_client()).build_prompt(_state())
    assert "[ID:p0, POS:(3,18), HP:5/5, AP:3]" in prompt
    assert "[POS:(3,15), HP:3]" in prompt
    assert "(12,1)" not in prompt


def test_prompt_without_contacts():
    state = build_state([build_unit("p0", Team.PLAYER, 3, 18), build_unit("e0", Team.ENEMY, 12, 1)])
    prompt = SquadAdvisor(client=fake_client()).build_prompt(state)
    assert "No contacts." in prompt
