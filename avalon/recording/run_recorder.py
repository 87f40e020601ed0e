"""
Run directories: an ``events.jsonl`` stream plus ``metadata.json`` per game.

Every line of the stream is ``{"sequence", "timestamp", "event_type", "data"}``.
Two event types make up the replay contract: ``game_start`` carries the full
initial ``Game.to_dict()`` under ``data["game"]``, and each ``action`` carries
one ``Game.action_log`` entry. The other types are for people reading the run.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..core import Game, IllegalStateError

logger = logging.getLogger(__name__)

EVENTS_FILE = "events.jsonl"
METADATA_FILE = "metadata.json"

GAME_START = "game_start"
ACTION = "action"
PHASE_CHANGE = "phase_change"
ANNOUNCEMENT = "announcement"
GAME_OVER = "game_over"
FATAL_ERROR = "fatal_error"
EVENT_TYPES = (GAME_START, ACTION, PHASE_CHANGE, ANNOUNCEMENT, GAME_OVER, FATAL_ERROR)

OUTCOME_LABELS = {"goodWin": "Good Wins", "evilWin": "Evil Wins"}


def game_start_data(game: Game, seed: Optional[int]) -> Dict[str, Any]:
    return {"game": game.to_dict(), "seed": seed}


def action_data(action: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": action["type"], "stage": action["stage"], "data": action["data"]}


def replay_stream(events: Iterable[Dict[str, Any]]) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    """
    Split recorded events into the starting snapshot and the actions after it.

    A later ``game_start`` starts over, so only the last game of a stream counts.

    Raises:
        IllegalStateError: If an action comes before any game_start, or there is none
    """
    snapshot = None
    actions: List[Dict[str, Any]] = []
    for event in events:
        event_type = event.get("event_type")
        if event_type == GAME_START:
            snapshot = event["data"]["game"]
            actions = []
        elif event_type == ACTION:
            if snapshot is None:
                raise IllegalStateError("Action recorded before game_start")
            actions.append(event["data"])
    if snapshot is None:
        raise IllegalStateError("No game_start event in run")
    return snapshot, actions


class RunRecorder:
    """Writes the events of one run at a time under ``runs_dir``."""

    def __init__(self, runs_dir: str = "runs"):
        self.runs_dir = Path(runs_dir)
        self.run_dir: Optional[Path] = None
        self._sequence = 0

    def create_run(self, run_name: Optional[str] = None) -> str:
        """
        Open a fresh run directory and return its name.

        Without a name the run is named after the current time. A taken name
        gets a numeric suffix, so an earlier run is never appended to.
        """
        base = run_name or datetime.now().strftime("run_%Y%m%d_%H%M%S")
        name, suffix = base, 1
        while (self.runs_dir / name).exists():
            suffix += 1
            name = f"{base}_{suffix}"
        self.run_dir = self.runs_dir / name
        self.run_dir.mkdir(parents=True)
        self._sequence = 0
        return name

    def get_run_path(self) -> Optional[Path]:
        return self.run_dir

    def record_event(self, event_type: str, data: Dict[str, Any]) -> None:
        """
        Append one event to the current run. Does nothing before ``create_run``.

        Raises:
            ValueError: If ``event_type`` is not one of EVENT_TYPES
        """
        if event_type not in EVENT_TYPES:
            raise ValueError(f"Unknown event type: {event_type}")
        if self.run_dir is None:
            return

        event = {
            "sequence": self._sequence,
            "timestamp": datetime.now().isoformat(),
            "event_type": event_type,
            "data": data,
        }
        with open(self.run_dir / EVENTS_FILE, 'a') as f:
            f.write(json.dumps(event) + '\n')
        self._sequence += 1

    def save_metadata(self, game: Game, config: Dict[str, Any]) -> None:
        """Write who sat where with which role, the ruleset, and the settings used."""
        if self.run_dir is None:
            return
        metadata = {
            "players": [p.to_dict() for p in game.players],
            "rule": game.rule.to_dict(),
            "config": config,
        }
        with open(self.run_dir / METADATA_FILE, 'w') as f:
            json.dump(metadata, f, indent=2)

    def list_runs(self) -> List[Dict[str, Any]]:
        """Summaries of every run under ``runs_dir``, newest name first."""
        if not self.runs_dir.exists():
            return []
        return [summarize_run(run_dir)
                for run_dir in sorted(self.runs_dir.iterdir(), reverse=True)
                if run_dir.is_dir()]


def summarize_run(run_dir: Path) -> Dict[str, Any]:
    """Name, file presence, metadata, event count and outcome of one run."""
    metadata_file = run_dir / METADATA_FILE
    events_file = run_dir / EVENTS_FILE
    info: Dict[str, Any] = {
        "name": run_dir.name,
        "path": str(run_dir),
        "has_metadata": metadata_file.exists(),
        "has_events": events_file.exists(),
    }

    if metadata_file.exists():
        try:
            with open(metadata_file, 'r') as f:
                info["metadata"] = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Unreadable metadata in %s: %s", run_dir, e)

    if events_file.exists():
        events = read_events(events_file)
        info["event_count"] = len(events)
        for event in events:
            if event.get("event_type") == GAME_OVER:
                data = event.get("data", {})
                info["game_outcome"] = OUTCOME_LABELS.get(data.get("result"), data.get("result"))
                info["score"] = [data.get("successes"), data.get("failures")]
            elif event.get("event_type") == FATAL_ERROR:
                info["game_outcome"] = "Failed"
    return info


def read_events(events_file: Path) -> List[Dict[str, Any]]:
    """Read every event of an events.jsonl file, skipping corrupt lines."""
    events = []
    with open(events_file, 'r') as f:
        for line_number, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                events.append(json.loads(line))
            except json.JSONDecodeError:
                logger.warning("Skipping corrupt event on line %d of %s", line_number, events_file)
    return events
