"""
=============================================================================
SWITCHYARD CLI ENTRY POINT
=============================================================================

Runs an application setup function over HTTP or once from the terminal.

=============================================================================
USAGE
=============================================================================

    # Development HTTP server (wsgiref)
    python -m switchyard serve shop.app:setup
    python -m switchyard serve shop.app:setup --host 0.0.0.0 --port 3000

    # One command line call: path first, then options and arguments
    python -m switchyard call shop.app:setup /report/daily --format=csv

    # Verbose framework logs
    python -m switchyard --log-level DEBUG call shop.app:setup /

Configuration comes from SWITCHYARD_* environment variables (see
Config.from_env) and the mode from SWITCHYARD_ENV.

=============================================================================
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .app import App
from .cli import CliInput, CliOutput
from .config import LOG_LEVELS, Config
from .http.wsgi import WSGIApplication, serve
from .utils import import_string


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="switchyard",
        description="Run a switchyard application over HTTP or from the command line",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m switchyard serve shop.app:setup                 # http://127.0.0.1:8000
  python -m switchyard serve shop.app:setup --port 3000     # Custom port
  python -m switchyard call shop.app:setup /hello/Bob       # One CLI call
        """,
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=list(LOG_LEVELS),
        default=None,
        help="Logging level (default: SWITCHYARD_LOG_LEVEL or WARNING)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"switchyard {__version__}",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    # ─────────────────────────────────────────────────────────────────────
    # serve
    # ─────────────────────────────────────────────────────────────────────

    serve_parser = commands.add_parser("serve", help="Serve the app with the development server")
    serve_parser.add_argument("target", help="Setup function, as module:function")
    serve_parser.add_argument(
        "--host", "-H",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1, use 0.0.0.0 for containers)",
    )
    serve_parser.add_argument(
        "--port", "-p",
        type=int,
        default=8000,
        help="Port to listen on (default: 8000)",
    )

    # ─────────────────────────────────────────────────────────────────────
    # call
    # ─────────────────────────────────────────────────────────────────────

    call_parser = commands.add_parser("call", help="Dispatch one path from the command line")
    call_parser.add_argument("target", help="Setup function, as module:function")
    call_parser.add_argument(
        "argv",
        nargs=argparse.REMAINDER,
        help="Route path followed by --options and arguments",
    )

    return parser


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def call(target: str, argv: List[str], config: Config) -> int:
    """Run the app once for `argv`; returns the process exit code."""
    setup = import_string(target)
    output = CliOutput()
    app = App(config, input=CliInput(argv), output=output)
    setup(app)
    try:
        app.run()
    finally:
        app.shutdown()
    return output.exit_code


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = Config.from_env()
    if args.log_level:
        config.set("log_level", args.log_level)
    config.validate()
    setup_logging(config.get("log_level") or "WARNING")

    if args.command == "serve":
        application = WSGIApplication(args.target, config)
        serve(application, host=args.host, port=args.port)
        return 0

    return call(args.target, args.argv, config)


if __name__ == "__main__":
    sys.exit(main())
