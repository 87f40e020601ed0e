"""
End-to-end games driven by dummy agents.
"""

import pytest
from pathlib import Path
from dataclasses import replace

from main import AvalonGame, main
from avalon.config import GameConfig
from avalon.core import GamePhase, GameResult, InvalidConfigError, QuestState
from avalon.recording.replay import load_events, replay_events


@pytest.mark.parametrize("count", [5, 6, 7, 8, 9, 10])
def test_game_runs_to_completion(game_config, count):
    config = replace(game_config, number_of_players=count)
    game = AvalonGame(config=config, record=False)
    result = game.run_game()
    assert result in ("goodWin", "evilWin")
    assert game.game.stage == GamePhase.END
    assert game.game.result == GameResult(result)


@pytest.mark.parametrize("variant", ["rule1", "rule2", "rule3"])
def test_game_with_every_option(game_config, variant):
    config = replace(game_config, number_of_players=8, lancelot=variant,
                     lady_of_the_lake=True, excalibur=True)
    game = AvalonGame(config=config, record=False)
    assert game.run_game() in ("goodWin", "evilWin")
    holders = game.game.lady_of_the_lake_holders()
    assert len(holders) == len(set(holders))


def test_whole_game_team_limit(game_config):
    config = replace(game_config, team_limit_mode="whole", max_team_proposals=8)
    game = AvalonGame(config=config, record=False)
    game.run_game()
    rejected = sum(len(q.teams) - 1 for q in game.game.quests if q.state == QuestState.FINISHED)
    assert rejected < 8


def test_same_seed_same_game(game_config):
    first = AvalonGame(config=game_config, record=False)
    second = AvalonGame(config=game_config, record=False)
    first.run_game()
    second.run_game()
    assert first.game.to_dict() == second.game.to_dict()


def test_seed_is_generated_without_touching_config():
    config = GameConfig(use_announcements=False)
    game = AvalonGame(config=config, record=False)
    assert game.config.random_seed is not None
    assert config.random_seed is None


def test_unknown_agent_type(game_config):
    with pytest.raises(ValueError):
        AvalonGame(config=replace(game_config, agent_type="llm_agent"))
    assert not Path(game_config.runs_dir).exists()


def test_invalid_config_creates_no_run(game_config):
    with pytest.raises(InvalidConfigError):
        AvalonGame(config=replace(game_config, number_of_players=4))
    assert not Path(game_config.runs_dir).exists()


def test_recorded_game_replays(game_config):
    config = replace(game_config, number_of_players=7, lancelot="rule2", lady_of_the_lake=True)
    game = AvalonGame(config=config, run_name="replay_me")
    game.run_game()

    run_path = game.run_recorder.get_run_path()
    assert run_path.name == "replay_me"
    assert (run_path / "metadata.json").exists()

    events = load_events(run_path)
    assert events[0]["event_type"] == "game_start"
    assert events[-1]["event_type"] == "game_over"
    replayed = replay_events(events)
    assert replayed.to_dict() == game.game.to_dict()


def test_get_game_summary(game_config):
    game = AvalonGame(config=game_config, record=False)
    game.run_game()
    summary = game.get_game_summary()
    assert summary["result"] == game.game.result.value
    assert summary["final_state"]["stage"] == "end"
    assert len(summary["action_log"]) <= 10


def test_main_runs_a_game(tmp_path, capsys):
    config_file = tmp_path / "game.yaml"
    config_file.write_text(
        f"runs_dir: {tmp_path / 'runs'}\n"
        "use_announcements: false\n"
    )
    code = main(["--config", str(config_file), "--seed", "5", "--players", "7",
                 "--lancelot", "rule1", "--lady", "--excalibur", "--run-name", "cli"])
    assert code == 0
    assert (tmp_path / "runs" / "cli" / "events.jsonl").exists()
    assert "GAME OVER" in capsys.readouterr().out


def test_main_rejects_bad_config(tmp_path):
    config_file = tmp_path / "game.yaml"
    config_file.write_text(f"runs_dir: {tmp_path / 'runs'}\n")
    assert main(["--config", str(config_file), "--players", "5", "--lancelot", "rule1"]) == 2
    assert not (tmp_path / "runs").exists()


def test_main_rejects_yaml_without_mapping(tmp_path):
    config_file = tmp_path / "game.yaml"
    config_file.write_text("- 7\n")
    assert main(["--config", str(config_file)]) == 2
