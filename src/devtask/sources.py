"""Enumerate tracked source files under a project's source tree."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator

logger = logging.getLogger(__name__)


class ScanError(RuntimeError):
    """Raised when the source tree is missing or cannot be read."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


def _normalize_extensions(extensions: Iterable[str]) -> frozenset[str]:
    normalized = set()
    for ext in extensions:
        ext = ext.strip().lower()
        if ext and not ext.startswith("."):
            ext = "." + ext
        if ext:
            normalized.add(ext)
    return frozenset(normalized)


def matches(path: str | Path, extensions: Iterable[str]) -> bool:
    """Return True when ``path`` carries one of the tracked ``extensions``."""

    return Path(path).suffix.lower() in _normalize_extensions(extensions)


class SourceScan:
    """Restartable view of the tracked files under ``root``.

    Every iteration walks the tree afresh, so a single instance can be reused
    across freshness checks. Symlinked directories are followed once; a link
    that points back into an already visited directory is skipped.
    """

    def __init__(self, root: Path, extensions: Iterable[str]) -> None:
        self.root = Path(root)
        self.extensions = _normalize_extensions(extensions)
        if not self.root.is_dir():
            raise ScanError(self.root, "source directory does not exist")
        if not os.access(self.root, os.R_OK | os.X_OK):
            raise ScanError(self.root, "source directory is not readable")

    def __iter__(self) -> Iterator[Path]:
        visited: set[tuple[int, int]] = set()

        def _on_error(exc: OSError) -> None:
            failed = Path(exc.filename) if exc.filename else self.root
            if isinstance(exc, FileNotFoundError) and failed != self.root:
                logger.debug("Directory vanished during scan: %s", failed)
                return
            raise ScanError(failed, exc.strerror or str(exc))

        for dirpath, dirnames, filenames in os.walk(self.root, onerror=_on_error, followlinks=True):
            try:
                st = os.stat(dirpath)
            except FileNotFoundError:
                if Path(dirpath) == self.root:
                    raise ScanError(self.root, "source directory does not exist") from None
                dirnames[:] = []
                continue
            key = (st.st_dev, st.st_ino)
            if key in visited:
                logger.debug("Skipping symlink cycle at %s", dirpath)
                dirnames[:] = []
                continue
            visited.add(key)
            dirnames.sort()
            for name in sorted(filenames):
                if os.path.splitext(name)[1].lower() in self.extensions:
                    path = Path(dirpath) / name
                    if path.is_file():
                        yield path


def scan(root: Path, extensions: Iterable[str]) -> SourceScan:
    """Return the tracked files under ``root`` whose extension is in ``extensions``."""

    return SourceScan(root, extensions)


__all__ = ["ScanError", "SourceScan", "matches", "scan"]
