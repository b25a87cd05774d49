from __future__ import annotations

import io

from devtask.tasks import TaskRegistry, print_help, render_help
from devtask.tasks.help import MIN_NAME_WIDTH, NAME_STYLE, RESET


async def _ok() -> int:
    return 0


def _registry(*names: str) -> TaskRegistry:
    registry = TaskRegistry()
    for name in names:
        registry.register(name, f"describe {name}", _ok)
    return registry


class _TTY(io.StringIO):
    def isatty(self) -> bool:
        return True


def test_one_sorted_line_per_task() -> None:
    registry = _registry("run", "install", "build-watch", "build", "check", "help")

    lines = render_help(registry.all()).splitlines()

    assert len(lines) == len(registry)
    assert [line.split()[0] for line in lines] == sorted(task.name for task in registry)


def test_columns_padded_to_minimum_width() -> None:
    lines = render_help(_registry("run", "build").all()).splitlines()

    assert lines[0] == "build".ljust(MIN_NAME_WIDTH) + " describe build"
    assert lines[1] == "run".ljust(MIN_NAME_WIDTH) + " describe run"


def test_columns_follow_widest_name() -> None:
    long_name = "x" * (MIN_NAME_WIDTH + 5)
    lines = render_help(_registry("run", long_name).all()).splitlines()

    offsets = {line.index("describe") for line in lines}
    assert offsets == {len(long_name) + 1}


def test_empty_registry_renders_empty_listing() -> None:
    assert render_help(TaskRegistry().all()) == ""


def test_color_only_on_terminals() -> None:
    registry = _registry("build")

    plain = io.StringIO()
    print_help(registry.all(), plain)
    assert "\033[" not in plain.getvalue()

    tty = _TTY()
    print_help(registry.all(), tty)
    assert tty.getvalue().startswith(NAME_STYLE + "build")
    assert RESET + " describe build" in tty.getvalue()
