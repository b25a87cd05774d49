"""Decide whether the artifact has to be rebuilt."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)


def is_stale(artifact: Path, sources: Iterable[Path]) -> bool:
    """Return True when ``artifact`` is missing or older than any source.

    A source whose mtime equals the artifact's does not force a rebuild.
    Sources that disappear while being checked are ignored.
    """

    try:
        artifact_mtime = Path(artifact).stat().st_mtime_ns
    except FileNotFoundError:
        logger.debug("Artifact %s does not exist", artifact)
        return True

    for source in sources:
        try:
            source_mtime = Path(source).stat().st_mtime_ns
        except FileNotFoundError:
            continue
        if source_mtime > artifact_mtime:
            logger.debug("%s is newer than %s", source, artifact)
            return True
    return False


__all__ = ["is_stale"]
