from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from .core import settings as settings_module
from .core.errors import ConfigError
from .core.scoring import ScoreBoard
from .data.catalog import load_sections
from .progression import ProgressionGraph
from .ui.presenters import MapPresenter

_LOG_LEVELS = ("debug", "info", "warning", "error")


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--catalog", type=Path, default=None, help="Catalog JSON to load instead of the bundled map")
    p.add_argument("--log-level", choices=_LOG_LEVELS, default="warning", help="Logging verbosity")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="musclepath", description="Skill-map workout trainer")
    sub = parser.add_subparsers(dest="command", required=True)

    map_cmd = sub.add_parser("map", help="Print the skill map")
    _add_common_args(map_cmd)
    map_cmd.add_argument("--no-color", action="store_true", help="Disable colored output (default is colored)")

    serve_cmd = sub.add_parser("serve", help="Run the HTTP API")
    _add_common_args(serve_cmd)
    serve_cmd.add_argument("--host", default=None, help="Bind address (default: $BIND or 127.0.0.1)")
    serve_cmd.add_argument("--port", type=int, default=None, help="Port (default: $PORT or 8000)")
    return parser


def _run_map(args: argparse.Namespace) -> None:
    current = settings_module.load_settings()
    graph = ProgressionGraph.build(load_sections(args.catalog or current.catalog_path))
    presenter = MapPresenter(no_color=args.no_color)
    presenter.show_score(ScoreBoard().snapshot())
    presenter.show_map(graph.sections())


def _run_serve(args: argparse.Namespace) -> None:
    from .features.session import TrainerManager

    overrides = {"catalog_path": args.catalog} if args.catalog is not None else {}
    with settings_module.override(**overrides):
        manager = TrainerManager()
    from .web.app import create_app, main as serve

    serve(host=args.host, port=args.port, application=create_app(manager))


def main(argv: Sequence[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else sys.argv[1:])
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    try:
        if args.command == "map":
            _run_map(args)
        else:
            _run_serve(args)
    except ConfigError as exc:
        parser.exit(2, f"musclepath: {exc}\n")


if __name__ == "__main__":
    main()
