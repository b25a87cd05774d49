"""Resolve a task name and run it, turning the outcome into an exit status."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import TextIO

from .project import ProjectLoadError
from .runner import ExternalToolError, ToolNotFoundError
from .sources import ScanError
from .tasks import TaskRegistry, UnknownTaskError, print_help

logger = logging.getLogger(__name__)

DIAGNOSTIC_PREFIX = "devtask:"

EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_NOT_FOUND = 127
EXIT_INTERRUPTED = 130


class Dispatcher:
    """Looks tasks up in a registry it does not own."""

    def __init__(self, registry: TaskRegistry, *, err: TextIO | None = None) -> None:
        self._registry = registry
        self._err = err

    @property
    def err(self) -> TextIO:
        return self._err or sys.stderr

    def _diagnose(self, message: str) -> None:
        print(f"{DIAGNOSTIC_PREFIX} {message}", file=self.err)

    async def dispatch(self, name: str) -> int:
        """Run task ``name`` and return its exit status.

        A failing collaborator's exit status is returned as is. Unknown names
        raise ``UnknownTaskError``.
        """

        task = self._registry.lookup(name)
        logger.debug("Dispatching task %s", task.name)
        try:
            return await task.action()
        except ExternalToolError as exc:
            logger.debug("%s", exc)
            return exc.returncode

    def run(self, name: str) -> int:
        """Dispatch ``name`` on a fresh event loop, reporting failures on stderr."""

        try:
            return asyncio.run(self.dispatch(name))
        except UnknownTaskError as exc:
            self._diagnose(str(exc))
            print_help(self._registry.all(), self.err)
            return EXIT_USAGE
        except ScanError as exc:
            self._diagnose(f"scan failed: {exc}")
            return EXIT_FAILURE
        except ProjectLoadError as exc:
            self._diagnose(str(exc))
            return EXIT_FAILURE
        except ToolNotFoundError as exc:
            self._diagnose(str(exc))
            return EXIT_NOT_FOUND
        except KeyboardInterrupt:
            logger.info("Interrupted")
            return EXIT_INTERRUPTED


__all__ = ["DIAGNOSTIC_PREFIX", "Dispatcher"]
