"""Tests for the headless runner and the websocket session wrapper."""

from pathlib import Path

import pytest

from game import MatchSimulation
from server import GameSession
from tactics import Rejected, RejectReason, load_battle

DATA_PATH = Path(__file__).parent.parent / "data"


def test_headless_match_writes_a_battle_log(tmp_path):
    sim = MatchSimulation(data_path=DATA_PATH, seed=21, log_dir=tmp_path)
    results = sim.run_game(max_turns=3)

    assert results["seed"] == 21
    assert 1 <= results["turns_played"] <= 3
    assert results["result"] in ("WIN", "LOSS", "IN_PROGRESS")
    assert results["states_recorded"] == len(sim.manager.history)

    logs = list(tmp_path.glob("battle_*.json"))
    assert len(logs) == 1
    meta, states = load_battle(logs[0])
    assert len(states) == results["states_recorded"]
    assert meta["result"] == results["result"]


def test_live_log_reads_mission_config_once(tmp_path, monkeypatch, capsys):
    import battle_log
    import game

    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "mission.yaml").write_text("grid:\n  width: 12\n  height: 16\n")

    calls = []
    original = game.load_mission_config

    def counting_loader(data_path):
        calls.append(data_path)
        return original(data_path)

    monkeypatch.setattr(game, "load_mission_config", counting_loader)
    monkeypatch.setattr(battle_log, "STEP_DELAY", 0)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("sys.argv", ["battle_log", "--seed", "3", "--turns", "1", "--data", str(data_dir)])

    battle_log.main()

    assert len(calls) == 1
    assert "OPERATION BEGINS - 12x16 GRID" in capsys.readouterr().out


def test_player_view_hides_fogged_enemies():
    session = GameSession(DATA_PATH, seed=4)
    view = session.get_player_view()

    ids = {u["id"] for u in view["units"]}
    assert {"p0", "p1", "p2", "p3", "p4"} <= ids
    assert not any(i.startswith("e") for i in ids)
    assert view["winner"] is None
    assert view["result"] == "IN_PROGRESS"


def test_session_actions_reach_the_engine():
    session = GameSession(DATA_PATH, seed=4)

    result = session.handle_action({"type": "rotate", "unit_id": "p0", "facing": "left"})
    assert not isinstance(result, Rejected)
    assert session.manager.state.get_unit("p0").facing.value == "left"

    result = session.handle_action({"type": "attack", "unit_id": "p0", "target_id": "e0"})
    assert isinstance(result, Rejected)
    assert result.reason == RejectReason.OUT_OF_RANGE

    session.handle_action({"type": "undo"})
    assert session.manager.state.get_unit("p0").facing.value == "up"


def test_session_refuses_unknown_messages():
    session = GameSession(DATA_PATH, seed=4)
    with pytest.raises(ValueError):
        session.handle_action({"type": "teleport"})
