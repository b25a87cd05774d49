from __future__ import annotations

import sys
from pathlib import Path

import pytest

from devtask.project import ProjectLoadError, ProjectMetadata, artifact_path, load_project


def test_load_cargo_manifest(project: Path) -> None:
    metadata = load_project(project)

    assert metadata.name == "bevy-sandbox"
    assert metadata.version == "0.1.0"


def test_load_pyproject_style_manifest(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        '[project]\nname = "tool"\nversion = "2.0"\n', encoding="utf-8"
    )

    assert load_project(tmp_path, "pyproject.toml").name == "tool"


def test_load_yaml_manifest(tmp_path: Path) -> None:
    (tmp_path / "project.yml").write_text("name: game\nversion: 3\n", encoding="utf-8")

    metadata = load_project(tmp_path, "project.yml")

    assert metadata.name == "game"
    assert metadata.version == "3"


def test_missing_manifest(tmp_path: Path) -> None:
    with pytest.raises(ProjectLoadError, match="not found"):
        load_project(tmp_path)


def test_manifest_without_name(tmp_path: Path) -> None:
    (tmp_path / "Cargo.toml").write_text("[workspace]\nmembers = []\n", encoding="utf-8")

    with pytest.raises(ProjectLoadError, match="name"):
        load_project(tmp_path)


def test_manifest_with_blank_name(tmp_path: Path) -> None:
    (tmp_path / "Cargo.toml").write_text('[package]\nname = "  "\n', encoding="utf-8")

    with pytest.raises(ProjectLoadError, match="validation"):
        load_project(tmp_path)


def test_invalid_toml(tmp_path: Path) -> None:
    (tmp_path / "Cargo.toml").write_text("[package\nname = ", encoding="utf-8")

    with pytest.raises(ProjectLoadError, match="TOML"):
        load_project(tmp_path)


def test_yaml_must_be_mapping(tmp_path: Path) -> None:
    (tmp_path / "project.yaml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ProjectLoadError, match="mapping"):
        load_project(tmp_path, "project.yaml")


def test_artifact_path(tmp_path: Path) -> None:
    path = artifact_path(tmp_path, Path("target/release"), ProjectMetadata(name="app"))

    expected = "app.exe" if sys.platform == "win32" else "app"
    assert path == tmp_path / "target" / "release" / expected
