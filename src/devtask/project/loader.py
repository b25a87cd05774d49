"""Project manifest loading utilities."""

from __future__ import annotations

import sys
import tomllib
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import ProjectMetadata


class ProjectLoadError(RuntimeError):
    """Raised when the project manifest cannot be read or lacks a name."""


_TOML_SECTIONS = ("package", "project")


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        document = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ProjectLoadError(f"Failed to parse TOML in {path}: {exc}") from exc

    for section in _TOML_SECTIONS:
        table = document.get(section)
        if isinstance(table, dict) and "name" in table:
            return table
    raise ProjectLoadError(f"No [package] or [project] name declared in {path}")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:  # pragma: no cover - library type
        raise ProjectLoadError(f"Failed to parse YAML in {path}: {exc}") from exc

    if not isinstance(document, dict):
        raise ProjectLoadError(f"Expected a mapping at the top of {path}")
    return document


def load_project(project_dir: Path, manifest: str = "Cargo.toml") -> ProjectMetadata:
    """Read the artifact's logical name from the project manifest."""

    path = Path(project_dir) / manifest
    if not path.is_file():
        raise ProjectLoadError(f"Project manifest not found: {path}")

    if path.suffix.lower() in {".yml", ".yaml"}:
        document = _read_yaml(path)
    else:
        document = _read_toml(path)

    version = document.get("version")
    try:
        return ProjectMetadata.model_validate(
            {
                "name": document.get("name"),
                "version": str(version) if version is not None else None,
            }
        )
    except ValidationError as exc:
        raise ProjectLoadError(f"Project metadata validation error in {path}: {exc}") from exc


def artifact_path(project_dir: Path, target_dir: Path, metadata: ProjectMetadata) -> Path:
    """Return the path the release build writes its binary to."""

    name = metadata.name
    if sys.platform == "win32":
        name += ".exe"
    return Path(project_dir) / target_dir / name


__all__ = ["ProjectLoadError", "artifact_path", "load_project"]
