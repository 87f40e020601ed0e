"""
Recording of game runs and replay of recorded runs.
"""

from .event_emitter import EventEmitter
from .run_recorder import EVENT_TYPES, RunRecorder, read_events, summarize_run
from .replay import apply_action, replay_events, replay_actions, load_events

__all__ = [
    'EventEmitter',
    'RunRecorder',
    'EVENT_TYPES',
    'read_events',
    'summarize_run',
    'apply_action',
    'replay_events',
    'replay_actions',
    'load_events',
]
