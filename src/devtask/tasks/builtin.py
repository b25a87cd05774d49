"""The project's build/check/run tasks and their registration."""

from __future__ import annotations

import asyncio
import logging
import shlex
import sys
from pathlib import Path
from typing import TextIO

from ..config import DevtaskSettings
from ..freshness import is_stale
from ..project import artifact_path, load_project
from ..runner import ToolRunner
from ..sources import scan
from ..watch import watch_sources
from .help import print_help
from .registry import TaskRegistry

logger = logging.getLogger(__name__)


class ProjectTasks:
    """Actions behind the built-in tasks for one project."""

    def __init__(
        self,
        settings: DevtaskSettings,
        runner: ToolRunner,
        registry: TaskRegistry,
        *,
        stream: TextIO | None = None,
    ) -> None:
        self.settings = settings
        self.runner = runner
        self.registry = registry
        self._stream = stream
        self._artifact: Path | None = None
        self._app: asyncio.subprocess.Process | None = None

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    @property
    def artifact(self) -> Path:
        if self._artifact is None:
            metadata = load_project(self.settings.project_dir, self.settings.manifest)
            self._artifact = artifact_path(
                self.settings.project_dir, self.settings.target_dir, metadata
            )
        return self._artifact

    async def help(self) -> int:
        print_help(self.registry.all(), self.stream)
        return 0

    async def install(self) -> int:
        if not self.settings.install_command:
            print("no deps yet", file=self.stream)
            return 0
        program, *args = shlex.split(self.settings.install_command)
        (await self.runner.command(program, *args)).check()
        return 0

    async def check(self) -> int:
        (await self.runner.run(*self.settings.check_args)).check()
        return 0

    async def build(self) -> int:
        sources = scan(self.settings.source_root, self.settings.source_extensions)
        artifact = self.artifact
        if not is_stale(artifact, sources):
            logger.info("%s is up to date", artifact)
            return 0
        logger.info("Building %s", artifact.name)
        (await self.runner.run(*self.settings.release_args)).check()
        return 0

    async def run(self) -> int:
        (await self.runner.execute(self.artifact)).check()
        return 0

    async def build_watch(self) -> int:
        try:
            await watch_sources(
                self.settings.source_root,
                self.settings.source_extensions,
                self._rebuild,
                debounce=self.settings.debounce_seconds,
                polling=self.settings.watch_polling,
                poll_interval=self.settings.poll_interval,
            )
        finally:
            await self._stop_app()
        return 0

    async def _rebuild(self, changes: frozenset[Path]) -> int:
        await self._stop_app()
        await self.build()
        if self.settings.watch_run:
            self._app = await self.runner.start(self.artifact)
        return 0

    async def _stop_app(self) -> None:
        if self._app is None:
            return
        app, self._app = self._app, None
        returncode = await self.runner.stop_process(app)
        logger.debug("Stopped %s (status %s)", self.artifact.name, returncode)


def build_registry(
    settings: DevtaskSettings,
    runner: ToolRunner | None = None,
    *,
    stream: TextIO | None = None,
) -> TaskRegistry:
    """Create the registry holding every built-in task."""

    registry = TaskRegistry()
    runner = runner or ToolRunner(settings.build_tool, cwd=settings.project_dir)
    tasks = ProjectTasks(settings, runner, registry, stream=stream)

    registry.register("help", "Show this help", tasks.help)
    registry.register("install", "Install dependencies", tasks.install)
    registry.register("check", "Check code", tasks.check)
    registry.register("build", "Build the release binary if sources changed", tasks.build)
    registry.register("build-watch", "Rebuild and rerun on every source change", tasks.build_watch)
    registry.register("run", "Run the built app", tasks.run)
    return registry


__all__ = ["ProjectTasks", "build_registry"]
