"""
Event emitter for recording game events to files.
"""

import logging
from typing import Any, Dict, Optional

from .run_recorder import (
    ACTION, ANNOUNCEMENT, FATAL_ERROR, GAME_OVER, GAME_START, PHASE_CHANGE,
    RunRecorder, action_data, game_start_data,
)
from ..core import Game

logger = logging.getLogger(__name__)


class EventEmitter:
    """Event emitter that records game events to files."""

    def __init__(self, run_recorder: Optional[RunRecorder] = None):
        self.run_recorder = run_recorder or RunRecorder()

    def _emit(self, event_type: str, data: Dict[str, Any]) -> None:
        """Emit an event by recording it to file."""
        try:
            self.run_recorder.record_event(event_type, data)
        except OSError as e:
            # Don't let recording errors break the game
            logger.error("Error recording event %s: %s", event_type, e)

    def emit_game_start(self, game: Game, seed: Optional[int] = None) -> None:
        """Emit game start event with a full snapshot of the new game."""
        self._emit(GAME_START, game_start_data(game, seed))

    def emit_action(self, action: Dict[str, Any]) -> None:
        """Emit one entry of the game's action log."""
        self._emit(ACTION, action_data(action))

    def emit_phase_change(self, stage: str, quest_number: Optional[int]) -> None:
        self._emit(PHASE_CHANGE, {
            "stage": stage,
            "quest_number": quest_number,
        })

    def emit_announcement(self, message: str, stage: str) -> None:
        self._emit(ANNOUNCEMENT, {
            "message": message,
            "stage": stage,
        })

    def emit_game_over(self, result: Optional[str], kill: Optional[int],
                       successes: int, failures: int) -> None:
        self._emit(GAME_OVER, {
            "result": result,
            "kill": kill,
            "successes": successes,
            "failures": failures,
        })

    def emit_fatal_error(self, error_message: str, action_type: Optional[str] = None) -> None:
        self._emit(FATAL_ERROR, {
            "error_message": error_message,
            "action_type": action_type,
        })
