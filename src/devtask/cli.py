"""devtask command line entry point."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from pydantic import ValidationError

from . import __version__
from .config import DevtaskSettings, get_settings
from .dispatcher import DIAGNOSTIC_PREFIX, EXIT_FAILURE, Dispatcher
from .tasks import build_registry


def configure_logging(level: str) -> None:
    """Configure root logging for devtask."""

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="devtask",
        description="Build, check and run the project binary.",
        epilog="Run 'devtask help' to list the available tasks.",
    )
    parser.add_argument("task", nargs="?", default="help", help="Task to run (default: help)")
    parser.add_argument("--project-dir", type=Path, help="Project root (default: current directory)")
    parser.add_argument(
        "--log-level",
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        type=str.upper,
        help="Override DEVTASK_LOG_LEVEL",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def load_settings(args: argparse.Namespace) -> DevtaskSettings:
    settings = get_settings()
    overrides = {}
    if args.project_dir is not None:
        overrides["project_dir"] = args.project_dir.expanduser().resolve()
    if args.log_level is not None:
        overrides["log_level"] = args.log_level
    if overrides:
        settings = settings.model_copy(update=overrides)
    return settings


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args)
    except ValidationError as exc:
        print(f"{DIAGNOSTIC_PREFIX} invalid configuration: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    configure_logging(settings.log_level)
    logging.getLogger(__name__).debug(
        "devtask %s in %s", __version__, settings.project_dir
    )

    registry = build_registry(settings)
    return Dispatcher(registry).run(args.task)


if __name__ == "__main__":
    raise SystemExit(main())
