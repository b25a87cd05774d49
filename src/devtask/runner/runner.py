"""Async runner for the external build tool and the built artifact."""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Sequence

logger = logging.getLogger(__name__)

TERMINATE_GRACE_SECONDS = 5.0


class RunnerError(RuntimeError):
    """Base class for runner errors."""


class ToolNotFoundError(RunnerError):
    """Raised when an executable cannot be located."""


class ExternalToolError(RunnerError):
    """Raised when a collaborator process exits non-zero."""

    def __init__(self, returncode: int, args: Sequence[str]) -> None:
        super().__init__(f"{' '.join(args)} exited with status {returncode}")
        self.returncode = returncode
        self.command = tuple(args)


@dataclass(slots=True)
class ExecutionResult:
    """Holds the outcome of a subprocess invocation.

    Output is not captured; it went straight to the terminal.
    """

    args: tuple[str, ...]
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def check(self) -> "ExecutionResult":
        if not self.ok:
            raise ExternalToolError(self.returncode, self.args)
        return self


class ToolRunner:
    """Execute the build tool and the artifact with inherited stdio."""

    def __init__(
        self,
        tool: str | Path = "cargo",
        *,
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        self._tool_name = str(tool)
        self._tool_path: Path | None = None
        self._cwd = cwd
        self._env = env

    @staticmethod
    def _resolve_executable(explicit: str) -> Path:
        candidate = Path(explicit)
        if candidate.parent != Path(".") or candidate.is_absolute():
            if candidate.exists() and candidate.is_file():
                return candidate
            raise ToolNotFoundError(f"Executable not found at {candidate}")

        binary = shutil.which(explicit)
        if binary is None:
            raise ToolNotFoundError(f"{explicit} executable not found on PATH")
        return Path(binary)

    def _environment(self) -> dict[str, str] | None:
        """Child environment: inherited as is, with ``env`` layered on top when given."""

        if not self._env:
            return None
        return {**os.environ, **self._env}

    @property
    def tool(self) -> Path:
        """Resolved build tool path, looked up on first use."""

        if self._tool_path is None:
            self._tool_path = self._resolve_executable(self._tool_name)
        return self._tool_path

    async def run(self, *args: str) -> ExecutionResult:
        """Invoke the build tool with ``args``."""

        return await self._invoke(str(self.tool), *args)

    async def command(self, program: str, *args: str) -> ExecutionResult:
        """Invoke an arbitrary program, resolved the same way as the build tool."""

        return await self._invoke(str(self._resolve_executable(program)), *args)

    async def execute(self, path: Path, *args: str) -> ExecutionResult:
        """Run an executable file directly, without a PATH lookup."""

        path = Path(path)
        if not path.is_file():
            raise ToolNotFoundError(f"artifact not built: {path}")
        return await self._invoke(str(path), *args)

    async def start(self, path: Path, *args: str) -> asyncio.subprocess.Process:
        """Launch an executable in the background and return its process handle."""

        path = Path(path)
        if not path.is_file():
            raise ToolNotFoundError(f"artifact not built: {path}")
        logger.info("Starting %s", path)
        return await asyncio.create_subprocess_exec(
            str(path), *args, cwd=self._cwd, env=self._environment()
        )

    async def stop_process(self, process: asyncio.subprocess.Process) -> int | None:
        """Terminate ``process`` and wait for it, escalating to kill after a grace period."""

        if process.returncode is not None:
            return process.returncode
        try:
            process.terminate()
        except ProcessLookupError:
            return process.returncode
        try:
            return await asyncio.wait_for(process.wait(), TERMINATE_GRACE_SECONDS)
        except asyncio.TimeoutError:
            logger.warning("Process %s ignored SIGTERM; killing", process.pid)
            process.kill()
            return await process.wait()

    async def _invoke(self, *cmd: str) -> ExecutionResult:
        logger.debug("Running %s", " ".join(cmd))
        process = await asyncio.create_subprocess_exec(
            *cmd, cwd=self._cwd, env=self._environment()
        )
        try:
            returncode = await process.wait()
        except asyncio.CancelledError:
            await asyncio.shield(self.stop_process(process))
            raise
        return ExecutionResult(args=tuple(cmd), returncode=returncode)


@dataclass(slots=True)
class FakeProcess:
    """Handle returned by ``FakeToolRunner.start`` in place of a real process."""

    path: Path
    args: tuple[str, ...]
    returncode: int | None = None


class FakeToolRunner(ToolRunner):
    """Test double that records invocations and replays scripted exit codes."""

    def __init__(  # type: ignore[override]
        self,
        returncodes: Iterable[int] | None = None,
        *,
        on_invoke: Callable[[tuple[str, ...]], None] | None = None,
    ) -> None:
        super().__init__("fake-tool")
        self._tool_path = Path("/tmp/fake-tool")
        self._returncodes = list(returncodes or [])
        self._invocations: list[tuple[str, ...]] = []
        self._on_invoke = on_invoke

    @staticmethod
    def _resolve_executable(explicit: str) -> Path:  # type: ignore[override]
        return Path(explicit)

    async def start(self, path: Path, *args: str):  # type: ignore[override]
        self._invocations.append(("start", str(path), *args))
        return FakeProcess(Path(path), tuple(args))

    async def stop_process(self, process) -> int | None:  # type: ignore[override]
        self._invocations.append(("stop", str(process.path)))
        process.returncode = -15
        return process.returncode

    async def _invoke(self, *cmd: str) -> ExecutionResult:  # type: ignore[override]
        self._invocations.append(tuple(cmd))
        if self._on_invoke is not None:
            self._on_invoke(tuple(cmd))
        returncode = self._returncodes.pop(0) if self._returncodes else 0
        return ExecutionResult(args=tuple(cmd), returncode=returncode)

    @property
    def invocations(self) -> list[tuple[str, ...]]:
        return self._invocations
