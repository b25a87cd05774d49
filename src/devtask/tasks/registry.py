"""Named task registry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Iterator

TaskAction = Callable[[], Awaitable[int]]


class DuplicateTaskError(RuntimeError):
    """Raised when a task name is registered twice."""


class UnknownTaskError(RuntimeError):
    """Raised when a requested task name is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown task '{name}'")
        self.name = name


@dataclass(frozen=True, slots=True)
class Task:
    """A named, described, invokable unit of work.

    ``action`` is a coroutine function returning the exit status to propagate.
    """

    name: str
    description: str
    action: TaskAction


class TaskRegistry:
    """Owns every Task; iteration yields them in registration order."""

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}

    def register(self, name: str, description: str, action: TaskAction) -> Task:
        name = name.strip()
        description = description.strip()
        if not name:
            raise ValueError("Task name must not be empty")
        if not description:
            raise ValueError(f"Task '{name}' needs a description")
        if name in self._tasks:
            raise DuplicateTaskError(f"Task '{name}' is already registered")
        task = Task(name=name, description=description, action=action)
        self._tasks[name] = task
        return task

    def lookup(self, name: str) -> Task:
        try:
            return self._tasks[name]
        except KeyError:
            raise UnknownTaskError(name) from None

    def all(self) -> Iterator[Task]:
        return iter(list(self._tasks.values()))

    def __iter__(self) -> Iterator[Task]:
        return self.all()

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)
