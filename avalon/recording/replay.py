"""
Rebuild a game from its recorded events.

A run holds a ``game_start`` snapshot followed by ``action`` events; applying
the actions to the snapshot in order reproduces every later state.
"""

from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Union

from .run_recorder import EVENTS_FILE, read_events, replay_stream
from ..core import Game, InvalidInputError, TeamVote


def _vote_team(game: Game, data: Dict[str, Any]) -> None:
    game.vote_team([TeamVote.from_dict(v) for v in data["votes"]])


ACTIONS: Dict[str, Callable[[Game, Dict[str, Any]], None]] = {
    "propose_team": lambda game, data: game.propose_team(data["members"]),
    "vote_team": _vote_team,
    "vote_quest": lambda game, data: game.vote_quest(data["votes"], data.get("excalibur_target")),
    "set_next_lady_of_the_lake": lambda game, data: game.set_next_lady_of_the_lake(data["seat"]),
    "set_excalibur": lambda game, data: game.set_excalibur(data["seat"]),
    "force_assassinate": lambda game, data: game.force_assassinate(),
    "assassinate": lambda game, data: game.assassinate(data["seat"]),
}


def apply_action(game: Game, action_type: str, data: Dict[str, Any]) -> None:
    """
    Apply one logged action to a game.

    Raises:
        InvalidInputError: If the action type is unknown
        AvalonError: Whatever the engine raises for the action itself
    """
    handler = ACTIONS.get(action_type)
    if handler is None:
        raise InvalidInputError(f"Unknown action type: {action_type}")
    handler(game, data)


def replay_actions(game: Game, actions: Iterable[Dict[str, Any]]) -> Game:
    """Apply entries shaped like ``Game.action_log`` to ``game`` in order."""
    for action in actions:
        apply_action(game, action["type"], action["data"])
    return game


def replay_events(events: Iterable[Dict[str, Any]]) -> Game:
    """
    Rebuild the latest game state from recorded events.

    Raises:
        IllegalStateError: If there is no game_start event before the first action
    """
    snapshot, actions = replay_stream(events)
    return replay_actions(Game.from_dict(snapshot), actions)


def load_events(run_dir: Union[str, Path]) -> List[Dict[str, Any]]:
    """Read the events of a recorded run directory."""
    events_file = Path(run_dir) / EVENTS_FILE
    if not events_file.exists():
        raise FileNotFoundError(f"Run not found: {run_dir}")
    return read_events(events_file)
