"""Render the task registry as an aligned help listing."""

from __future__ import annotations

import sys
from typing import Iterable, TextIO

from .registry import Task

NAME_STYLE = "\033[36m"
RESET = "\033[0m"
MIN_NAME_WIDTH = 30


def render_help(tasks: Iterable[Task], *, color: bool = False) -> str:
    """Return one ``name  description`` line per task, sorted by name.

    Names are padded to the widest name, and never to less than
    ``MIN_NAME_WIDTH`` columns. With ``color`` the names are wrapped in a cyan
    escape sequence; padding is applied to the bare name so columns still
    line up.
    """

    ordered = sorted(tasks, key=lambda task: task.name)
    if not ordered:
        return ""

    width = max(MIN_NAME_WIDTH, *(len(task.name) for task in ordered))
    lines = []
    for task in ordered:
        padded = task.name.ljust(width)
        if color:
            padded = f"{NAME_STYLE}{padded}{RESET}"
        lines.append(f"{padded} {task.description}")
    return "\n".join(lines) + "\n"


def print_help(tasks: Iterable[Task], stream: TextIO | None = None) -> None:
    """Write the listing to ``stream``, colorized only when it is a terminal."""

    stream = stream or sys.stdout
    isatty = getattr(stream, "isatty", None)
    color = bool(isatty and isatty())
    stream.write(render_help(tasks, color=color))
    stream.flush()
