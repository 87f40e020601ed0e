"""
Web server for viewing saved game runs.
"""

import json
import logging
from pathlib import Path

from flask import Flask, jsonify, request

from .. import __version__
from ..core import AvalonError
from ..recording.replay import replay_events
from ..recording.run_recorder import (
    EVENTS_FILE, METADATA_FILE, RunRecorder, read_events, summarize_run,
)

logger = logging.getLogger(__name__)


class ViewerServer:
    """JSON API over the runs recorded by RunRecorder."""

    def __init__(self, port: int = 5000, host: str = '127.0.0.1', runs_dir: str = "runs"):
        self.port = port
        self.host = host
        self.runs_dir = Path(runs_dir)
        self.run_recorder = RunRecorder(runs_dir=runs_dir)

        self.app = Flask(__name__)

        self._setup_routes()

    def _events_file(self, run_name: str) -> Path:
        return self.runs_dir / run_name / EVENTS_FILE

    def _setup_routes(self):
        """Setup Flask routes."""
        @self.app.route('/')
        def index():
            return jsonify({"name": "avalon-viewer", "version": __version__})

        @self.app.route('/api/runs')
        def list_runs():
            """List all available runs."""
            return jsonify(self.run_recorder.list_runs())

        @self.app.route('/api/runs/<run_name>')
        def get_run(run_name: str):
            """Summary of one run."""
            run_dir = self.runs_dir / run_name
            if not run_dir.is_dir():
                return jsonify({"error": "Run not found"}), 404
            return jsonify(summarize_run(run_dir))

        @self.app.route('/api/runs/<run_name>/events')
        def get_events(run_name: str):
            """Get events for a specific run, optionally after a position."""
            events_file = self._events_file(run_name)
            if not events_file.exists():
                return jsonify({"error": "Run not found"}), 404

            last_position = request.args.get('last_position', 0, type=int)
            try:
                events = read_events(events_file)
            except OSError as e:
                return jsonify({"error": str(e)}), 500

            return jsonify({
                "events": events[last_position:],
                "position": len(events),
            })

        @self.app.route('/api/runs/<run_name>/metadata')
        def get_metadata(run_name: str):
            """Get metadata for a specific run."""
            metadata_file = self.runs_dir / run_name / METADATA_FILE
            if not metadata_file.exists():
                return jsonify({"error": "Run not found"}), 404

            try:
                with open(metadata_file, 'r') as f:
                    metadata = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                return jsonify({"error": str(e)}), 500
            return jsonify(metadata)

        @self.app.route('/api/runs/<run_name>/state')
        def get_state(run_name: str):
            """Replay a run and return the resulting game state."""
            events_file = self._events_file(run_name)
            if not events_file.exists():
                return jsonify({"error": "Run not found"}), 404

            try:
                game = replay_events(read_events(events_file))
            except AvalonError as e:
                logger.warning("Cannot replay run %s: %s", run_name, e.message)
                return jsonify({"error": e.message}), 500
            return jsonify({
                "summary": game.get_game_summary(),
                "game": game.to_dict(),
            })

    def start(self) -> None:
        """Start the web server."""
        print(f"\n{'='*60}")
        print(f"Starting viewer server on http://{self.host}:{self.port}")
        print(f"Runs directory: {self.runs_dir}")
        print(f"{'='*60}\n")
        self.app.run(host=self.host, port=self.port, debug=False, use_reloader=False)
