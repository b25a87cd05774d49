"""Task registry, help rendering and the built-in project tasks."""

from .builtin import ProjectTasks, build_registry
from .help import print_help, render_help
from .registry import DuplicateTaskError, Task, TaskRegistry, UnknownTaskError

__all__ = [
    "DuplicateTaskError",
    "ProjectTasks",
    "Task",
    "TaskRegistry",
    "UnknownTaskError",
    "build_registry",
    "print_help",
    "render_help",
]
