"""Debounced rebuild loop driven by source tree changes."""

from __future__ import annotations

import asyncio
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Iterable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

from .runner import ExternalToolError
from .sources import matches, scan

logger = logging.getLogger(__name__)

ChangeAction = Callable[[frozenset[Path]], Awaitable[int]]

_CHANGE_EVENTS = {"created", "modified", "deleted", "moved"}


class WatchState(str, Enum):
    IDLE = "idle"
    BUILDING = "building"
    STOPPED = "stopped"


class WatchLoop:
    """Serialize rebuilds triggered by change notifications.

    ``notify`` records a changed path and must be called on the event loop
    thread. Paths are coalesced in a pending set; once no new change has
    arrived for ``debounce`` seconds the whole set is handed to ``action`` in
    a single call. Changes that arrive while ``action`` runs are kept and
    trigger the next build as soon as the current one finishes.

    A non-zero status or ``ExternalToolError`` from ``action`` is logged and
    the loop goes back to idle. Any other exception stops the loop.
    """

    def __init__(
        self,
        action: ChangeAction,
        *,
        debounce: float = 0.3,
        initial_build: bool = False,
    ) -> None:
        self._action = action
        self._debounce = max(0.0, float(debounce))
        self._initial_build = initial_build
        self._pending: set[Path] = set()
        self._changed = asyncio.Event()
        self._stopping = False
        self.state = WatchState.IDLE
        self.builds = 0
        self.failures = 0

    def notify(self, path: str | Path) -> None:
        if self.state is WatchState.STOPPED:
            return
        self._pending.add(Path(path))
        self._changed.set()

    def stop(self) -> None:
        """Ask the loop to exit; an in-flight build is allowed to finish."""

        self._stopping = True
        self._changed.set()

    async def run(self) -> None:
        try:
            if self._initial_build:
                await self._build(frozenset())
            while not self._stopping:
                await self._changed.wait()
                if self._stopping:
                    break
                await self._settle()
                if self._stopping:
                    break
                changes = frozenset(self._pending)
                self._pending.clear()
                await self._build(changes)
        finally:
            self.state = WatchState.STOPPED
            logger.debug("Watch loop stopped after %d build(s)", self.builds)

    async def _settle(self) -> None:
        while True:
            self._changed.clear()
            try:
                await asyncio.wait_for(self._changed.wait(), self._debounce)
            except asyncio.TimeoutError:
                return
            if self._stopping:
                return

    async def _build(self, changes: frozenset[Path]) -> None:
        self.state = WatchState.BUILDING
        self.builds += 1
        if changes:
            logger.info("%d file(s) changed, rebuilding", len(changes))
            for path in sorted(changes):
                logger.debug("changed: %s", path)

        try:
            status = await self._action(changes)
        except ExternalToolError as exc:
            status = exc.returncode

        if status:
            self.failures += 1
            logger.error("Build failed with exit status %s; waiting for changes", status)
        else:
            logger.info("Build finished; waiting for changes")
        self.state = WatchState.IDLE


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, callback: Callable[[Path], None], extensions: Iterable[str]) -> None:
        super().__init__()
        self._callback = callback
        self._extensions = tuple(extensions)

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in _CHANGE_EVENTS:
            return
        paths = [event.src_path]
        dest = getattr(event, "dest_path", "")
        if dest:
            paths.append(dest)
        for raw in paths:
            path = os.fsdecode(raw)
            if matches(path, self._extensions):
                self._callback(Path(path))


class SourceWatcher:
    """Forward filesystem events under ``root`` to ``notify`` on ``loop``.

    Native notifications are used unless ``polling`` is set, in which case the
    tree is re-scanned every ``poll_interval`` seconds.
    """

    def __init__(
        self,
        root: Path,
        extensions: Iterable[str],
        notify: Callable[[Path], None],
        *,
        loop: asyncio.AbstractEventLoop,
        polling: bool = False,
        poll_interval: float = 1.0,
    ) -> None:
        self.root = Path(root)
        self._loop = loop
        self._notify = notify
        self._handler = _ChangeHandler(self._forward, extensions)
        if polling:
            self._observer = PollingObserver(timeout=poll_interval)
        else:
            self._observer = Observer()

    def _forward(self, path: Path) -> None:
        if self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self._notify, path)

    def start(self) -> None:
        self._observer.schedule(self._handler, str(self.root), recursive=True)
        self._observer.start()
        logger.debug("Watching %s with %s", self.root, type(self._observer).__name__)

    async def stop(self) -> None:
        """Unsubscribe and wait for the observer thread off the event loop thread."""

        self._observer.stop()
        await asyncio.to_thread(self._observer.join)

    @property
    def running(self) -> bool:
        return self._observer.is_alive()

    async def __aenter__(self) -> "SourceWatcher":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()


async def watch_sources(
    root: Path,
    extensions: Iterable[str],
    action: ChangeAction,
    *,
    debounce: float = 0.3,
    polling: bool = False,
    poll_interval: float = 1.0,
    initial_build: bool = True,
) -> WatchLoop:
    """Run ``action`` on every debounced change under ``root`` until cancelled."""

    scan(root, extensions)  # fail fast on a missing or unreadable tree

    watch_loop = WatchLoop(action, debounce=debounce, initial_build=initial_build)
    watcher = SourceWatcher(
        root,
        extensions,
        watch_loop.notify,
        loop=asyncio.get_running_loop(),
        polling=polling,
        poll_interval=poll_interval,
    )
    async with watcher:
        logger.info("Watching %s for changes. Ctrl+C to stop.", root)
        await watch_loop.run()
    return watch_loop


__all__ = ["SourceWatcher", "WatchLoop", "WatchState", "watch_sources"]
