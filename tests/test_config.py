"""Tests for YAML mission configuration."""

from pathlib import Path

from tactics.config import MissionConfig, load_mission_config


def test_missing_file_falls_back_to_defaults(tmp_path):
    assert load_mission_config(tmp_path) == MissionConfig()


def test_empty_file_falls_back_to_defaults(tmp_path):
    (tmp_path / "mission.yaml").write_text("")
    assert load_mission_config(tmp_path) == MissionConfig()


def test_partial_file_overrides_only_what_it_names(tmp_path):
    (tmp_path / "mission.yaml").write_text(
        "grid:\n"
        "  width: 11\n"
        "units:\n"
        "  player:\n"
        "    hp: 7\n"
        "    inventory:\n"
        "      grenades: 1\n"
        "vision:\n"
        "  cone_range: 5\n"
    )
    config = load_mission_config(tmp_path)

    assert config.width == 11
    assert config.height == 20
    assert config.player.hp == 7
    assert config.player.ap == 3
    assert config.player.inventory["grenades"] == 1
    assert config.player.inventory["traps"] == 2
    assert config.cone_range == 5
    assert config.vision_radius == 4.5
    assert config.obstacle_attempts == 25


def test_shipped_mission_file_matches_defaults():
    data_path = Path(__file__).parent.parent / "data"
    config = load_mission_config(data_path)
    defaults = MissionConfig()

    assert config.player == defaults.player
    assert (config.enemy.hp, config.enemy.ap, config.enemy.range) == (5, 3, 5)
    assert not any(config.enemy.inventory.values())
    assert (config.width, config.height, config.squad_size) == (15, 20, 5)
    assert config.obstacle_attempts == defaults.obstacle_attempts
    assert config.start_message == defaults.start_message
