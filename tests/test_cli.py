from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import pytest

from devtask.cli import build_parser, main


def test_default_task_is_help(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    status = main(["--project-dir", str(project)])

    out = capsys.readouterr().out
    assert status == 0
    assert len(out.splitlines()) == 6
    assert [line.split()[0] for line in out.splitlines()] == [
        "build",
        "build-watch",
        "check",
        "help",
        "install",
        "run",
    ]


def test_install_placeholder(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["install", "--project-dir", str(project)]) == 0
    assert "no deps yet" in capsys.readouterr().out


def test_build_tool_exit_status_propagates(
    project: Path, tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> None:
    bin_dir = tmp_path_factory.mktemp("bin")
    tool = bin_dir / "cargo"
    tool.write_text("#!/bin/sh\necho \"compiling $@\"\nexit 101\n", encoding="utf-8")
    tool.chmod(0o755)
    monkeypatch.setenv("DEVTASK_BUILD_TOOL", str(tool))

    assert main(["build", "--project-dir", str(project)]) == 101


def test_missing_manifest(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "src").mkdir()

    assert main(["build", "--project-dir", str(tmp_path)]) == 1
    assert "devtask: Project manifest not found" in capsys.readouterr().err


def test_log_level_flag_is_case_insensitive() -> None:
    args = build_parser().parse_args(["check", "--log-level", "debug"])
    assert args.task == "check"
    assert args.log_level == "DEBUG"


def test_unknown_task_via_module_entry_point(project: Path) -> None:
    repo_root = Path(__file__).resolve().parents[1]
    env = os.environ.copy()
    env["PYTHONPATH"] = f"{repo_root / 'src'}" + os.pathsep + env.get("PYTHONPATH", "")
    process = subprocess.run(
        [sys.executable, "-m", "devtask", "frobnicate", "--project-dir", str(project)],
        cwd=str(project),
        capture_output=True,
        text=True,
        env=env,
    )

    assert process.returncode != 0
    assert "devtask: unknown task 'frobnicate'" in process.stderr
    assert "build-watch" in process.stderr
    assert "\033[" not in process.stderr


def test_invalid_configuration_reported_with_prefix(
    project: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("DEVTASK_DEBOUNCE_MS", "-1")

    assert main(["build", "--project-dir", str(project)]) == 1
    err = capsys.readouterr().err
    assert err.startswith("devtask: invalid configuration")
    assert "DEVTASK_DEBOUNCE_MS must be >= 0" in err
