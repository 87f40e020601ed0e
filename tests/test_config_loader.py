"""
Tests for YAML configuration loading and ruleset building.
"""

import logging
import pytest
from pathlib import Path
from dataclasses import replace

from avalon.config import GameConfig, apply_overrides
from avalon.config.config_loader import load_config, load_config_from_yaml
from avalon.config.game_config import default_config
from avalon.core import InvalidConfigError, LancelotVariant, RoleKey, TeamLimitMode

CONFIGS_DIR = Path(__file__).parent.parent / "configs"


def test_load_config_from_yaml(tmp_path):
    config_file = tmp_path / "game.yaml"
    config_file.write_text(
        "number_of_players: 8\n"
        "lady_of_the_lake: true\n"
        "lancelot: rule2\n"
        "team_limit_mode: whole\n"
        "max_team_proposals: 7\n"
        "random_seed: 99\n"
    )
    config = load_config_from_yaml(str(config_file))
    assert config.number_of_players == 8
    assert config.lady_of_the_lake is True
    assert config.lancelot == "rule2"
    assert config.team_limit_mode == "whole"
    assert config.max_team_proposals == 7
    assert config.random_seed == 99
    # Untouched keys keep their defaults
    assert config.excalibur is False
    assert config.recognizer == "merlin"


def test_empty_yaml_gives_defaults(tmp_path):
    config_file = tmp_path / "empty.yaml"
    config_file.write_text("")
    assert load_config_from_yaml(str(config_file)) == GameConfig()


def test_unknown_key_is_warned_and_ignored(tmp_path, caplog):
    config_file = tmp_path / "game.yaml"
    config_file.write_text("number_of_players: 6\nmodel: gpt\n")
    with caplog.at_level(logging.WARNING):
        config = load_config_from_yaml(str(config_file))
    assert config.number_of_players == 6
    assert not hasattr(config, "model")
    assert "Unknown config key 'model'" in caplog.text


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config_from_yaml(str(tmp_path / "missing.yaml"))


def test_load_config_without_path():
    assert load_config() is default_config


def test_bundled_configs_load():
    default = load_config(str(CONFIGS_DIR / "default.yaml"))
    assert default.to_ruleset().number_of_players == default.number_of_players
    lancelot = load_config(str(CONFIGS_DIR / "lancelot_7.yaml"))
    assert lancelot.to_ruleset().lancelot is not None


def test_to_ruleset_options():
    config = GameConfig(number_of_players=7, lady_of_the_lake=True, excalibur=True,
                        lancelot="rule3", max_team_proposals=4, team_limit_mode="whole",
                        recognizer="percival")
    rule = config.to_ruleset()
    assert rule.number_of_players == 7
    assert rule.has_lady_of_the_lake is True
    assert rule.enable_excalibur is True
    assert rule.lancelot == LancelotVariant.RULE3
    assert rule.team.max_proposals == 4
    assert rule.team.mode == TeamLimitMode.WHOLE_GAME
    assert rule.recognizer == RoleKey.PERCIVAL
    assert RoleKey.LANCELOT_GOOD in rule.roles


@pytest.mark.parametrize("overrides", [
    {"number_of_players": 4},
    {"number_of_players": 11},
    {"team_limit_mode": "forever"},
    {"recognizer": "king"},
    {"max_team_proposals": 0},
    {"lancelot": "rule9", "number_of_players": 7},
    {"lancelot": "rule1", "number_of_players": 6},
])
def test_to_ruleset_rejects_bad_values(overrides):
    config = replace(GameConfig(), **overrides)
    with pytest.raises(InvalidConfigError):
        config.to_ruleset()


def test_overrides_win_over_file(tmp_path):
    config_file = tmp_path / "game.yaml"
    config_file.write_text("number_of_players: 8\nexcalibur: false\n")
    config = load_config(str(config_file), overrides={
        "number_of_players": 9,
        "excalibur": True,
        "lancelot": None,
    })
    assert config.number_of_players == 9
    assert config.excalibur is True
    assert config.lancelot is None


def test_overrides_without_file_leave_defaults_alone():
    config = load_config(overrides={"random_seed": 3, "runs_dir": None})
    assert config.random_seed == 3
    assert config.runs_dir == default_config.runs_dir
    assert default_config.random_seed is None


def test_unknown_override_is_warned(caplog):
    with caplog.at_level(logging.WARNING):
        config = apply_overrides(GameConfig(), {"players": 7})
    assert config == GameConfig()
    assert "Unknown config key 'players'" in caplog.text


@pytest.mark.parametrize("content", ["- 5\n- 6\n", "just a string\n"])
def test_yaml_must_hold_a_mapping(tmp_path, content):
    config_file = tmp_path / "game.yaml"
    config_file.write_text(content)
    with pytest.raises(InvalidConfigError):
        load_config_from_yaml(str(config_file))
