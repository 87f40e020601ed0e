"""
Tests for the run viewer API.
"""

import pytest
from dataclasses import replace

from main import AvalonGame
from avalon import __version__
from avalon.web import ViewerServer
from viewer import build_parser, create_server, main as viewer_main


@pytest.fixture
def recorded_run(game_config):
    game = AvalonGame(config=game_config, run_name="viewer_run")
    game.run_game()
    return game


@pytest.fixture
def client(game_config):
    server = ViewerServer(runs_dir=game_config.runs_dir)
    server.app.config["TESTING"] = True
    return server.app.test_client()


def test_index(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.get_json()["version"] == __version__


def test_list_runs(recorded_run, client):
    runs = client.get("/api/runs").get_json()
    assert [r["name"] for r in runs] == ["viewer_run"]
    assert runs[0]["game_outcome"] in ("Good Wins", "Evil Wins")


def test_events_from_position(recorded_run, client):
    everything = client.get("/api/runs/viewer_run/events").get_json()
    assert everything["position"] == len(everything["events"])
    tail = client.get("/api/runs/viewer_run/events?last_position=2").get_json()
    assert tail["events"] == everything["events"][2:]
    assert tail["position"] == everything["position"]


def test_metadata(recorded_run, client):
    metadata = client.get("/api/runs/viewer_run/metadata").get_json()
    assert metadata["config"]["random_seed"] == 1234
    assert len(metadata["players"]) == 5


def test_state_replays_the_run(recorded_run, client):
    state = client.get("/api/runs/viewer_run/state").get_json()
    assert state["game"] == recorded_run.game.to_dict()
    assert state["summary"]["result"] == recorded_run.game.result.value


@pytest.mark.parametrize("path", ["events", "metadata", "state"])
def test_unknown_run(client, path):
    assert client.get(f"/api/runs/missing/{path}").status_code == 404


def test_state_of_broken_run(game_config, client):
    game = AvalonGame(config=replace(game_config, random_seed=3), run_name="broken")
    events_file = game.run_recorder.get_run_path() / "events.jsonl"
    events_file.write_text('{"event_type": "announcement", "data": {}}\n')
    response = client.get("/api/runs/broken/state")
    assert response.status_code == 500


def test_run_summary(recorded_run, client):
    summary = client.get("/api/runs/viewer_run").get_json()
    assert summary["name"] == "viewer_run"
    assert summary["score"] == [recorded_run.game.success_count(), recorded_run.game.failure_count()]
    assert client.get("/api/runs/missing").status_code == 404


def test_viewer_reads_runs_dir_from_config(tmp_path):
    config_file = tmp_path / "game.yaml"
    config_file.write_text(f"runs_dir: {tmp_path / 'from_config'}\n")
    server = create_server(build_parser().parse_args(["--config", str(config_file), "--port", "8123"]))
    assert server.runs_dir == tmp_path / "from_config"
    assert server.port == 8123


def test_viewer_runs_dir_flag_wins(tmp_path):
    config_file = tmp_path / "game.yaml"
    config_file.write_text(f"runs_dir: {tmp_path / 'from_config'}\n")
    args = build_parser().parse_args(["-c", str(config_file), "--runs-dir", str(tmp_path / "flag")])
    assert create_server(args).runs_dir == tmp_path / "flag"


def test_viewer_missing_config(tmp_path):
    assert viewer_main(["--config", str(tmp_path / "missing.yaml")]) == 2
