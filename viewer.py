"""
Browse recorded Avalon runs over the viewer's JSON API.

The runs directory comes from --runs-dir, else from the game config given with
--config (the same file main.py plays with), else the GameConfig default.
"""

import argparse
import logging
import sys
from typing import List, Optional

from avalon.config import load_config
from avalon.web.viewer_server import ViewerServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Serve recorded Avalon runs as JSON",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python viewer.py                                  # Runs of the default config on port 5000
  python viewer.py --config configs/lancelot_7.yaml # Runs recorded with that config
  python viewer.py --runs-dir old_runs --port 8080
        """
    )
    parser.add_argument("--config", "-c", type=str, default=None,
                        help="Game config whose runs_dir and log_level to use")
    parser.add_argument("--runs-dir", type=str, default=None,
                        help="Directory containing game runs (overrides the config)")
    parser.add_argument("--port", "-p", type=int, default=5000, help="Port (default: 5000)")
    parser.add_argument("--host", type=str, default='127.0.0.1',
                        help="Host to bind to (default: 127.0.0.1)")
    return parser


def create_server(args: argparse.Namespace) -> ViewerServer:
    """Viewer for the runs directory the arguments point at."""
    config = load_config(args.config, overrides={"runs_dir": args.runs_dir})
    logging.basicConfig(level=config.log_level.upper(),
                        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    return ViewerServer(port=args.port, host=args.host, runs_dir=config.runs_dir)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        server = create_server(args)
    except FileNotFoundError as e:
        print(e, file=sys.stderr)
        return 2
    server.start()
    return 0


if __name__ == "__main__":
    sys.exit(main())
