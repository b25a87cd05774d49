from __future__ import annotations

import os
from pathlib import Path

import pytest

from devtask.config import DevtaskSettings, get_settings


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("DEVTASK_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A minimal cargo-style project with three source files and no build output."""

    (tmp_path / "Cargo.toml").write_text(
        '[package]\nname = "bevy-sandbox"\nversion = "0.1.0"\nedition = "2021"\n',
        encoding="utf-8",
    )
    src = tmp_path / "src"
    (src / "plugins").mkdir(parents=True)
    for relative in ("main.rs", "lib.rs", "plugins/camera.rs"):
        path = src / relative
        path.write_text("// source\n", encoding="utf-8")
        os.utime(path, (1_000, 1_000))
    return tmp_path


@pytest.fixture
def settings(project: Path) -> DevtaskSettings:
    return DevtaskSettings(project_dir=project, _env_file=None)
