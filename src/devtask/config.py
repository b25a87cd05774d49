"""Configuration management for devtask."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated
import os
import shlex

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class DevtaskSettings(BaseSettings):
    """Runtime configuration sourced from environment variables and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    project_dir: Path = Field(default=Path("."), validation_alias="DEVTASK_PROJECT_DIR")
    manifest: str = Field(default="Cargo.toml", validation_alias="DEVTASK_MANIFEST")
    source_dir: Path = Field(default=Path("src"), validation_alias="DEVTASK_SOURCE_DIR")
    source_extensions: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(".rs",), validation_alias="DEVTASK_SOURCE_EXTENSIONS"
    )
    build_tool: str = Field(default="cargo", validation_alias="DEVTASK_BUILD_TOOL")
    release_args: Annotated[tuple[str, ...], NoDecode] = Field(
        default=("build", "--release"), validation_alias="DEVTASK_RELEASE_ARGS"
    )
    check_args: Annotated[tuple[str, ...], NoDecode] = Field(
        default=("check",), validation_alias="DEVTASK_CHECK_ARGS"
    )
    target_dir: Path = Field(default=Path("target/release"), validation_alias="DEVTASK_TARGET_DIR")
    install_command: str | None = Field(default=None, validation_alias="DEVTASK_INSTALL_COMMAND")
    debounce_ms: int = Field(default=300, validation_alias="DEVTASK_DEBOUNCE_MS")
    watch_polling: bool = Field(default=False, validation_alias="DEVTASK_WATCH_POLLING")
    poll_interval: float = Field(default=1.0, validation_alias="DEVTASK_POLL_INTERVAL")
    watch_run: bool = Field(default=True, validation_alias="DEVTASK_WATCH_RUN")
    log_level: str = Field(default="INFO", validation_alias="DEVTASK_LOG_LEVEL")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(
                "DEVTASK_LOG_LEVEL must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG"
            )
        return normalized

    @field_validator("source_extensions", mode="before")
    @classmethod
    def _parse_extensions(cls, value):
        if isinstance(value, str):
            value = [part for part in value.replace(os.pathsep, ",").split(",")]
        if not isinstance(value, (list, tuple, set, frozenset)):
            raise TypeError("DEVTASK_SOURCE_EXTENSIONS must be a list or a comma-separated string")
        extensions = []
        for item in value:
            ext = str(item).strip().lower()
            if not ext:
                continue
            if not ext.startswith("."):
                ext = "." + ext
            if ext not in extensions:
                extensions.append(ext)
        if not extensions:
            raise ValueError("DEVTASK_SOURCE_EXTENSIONS must name at least one extension")
        return tuple(extensions)

    @field_validator("release_args", "check_args", mode="before")
    @classmethod
    def _split_args(cls, value):
        if isinstance(value, str):
            return tuple(shlex.split(value))
        return value

    @field_validator("debounce_ms")
    @classmethod
    def _validate_debounce(cls, value: int) -> int:
        if value < 0:
            raise ValueError("DEVTASK_DEBOUNCE_MS must be >= 0")
        return value

    @field_validator("poll_interval")
    @classmethod
    def _validate_poll_interval(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("DEVTASK_POLL_INTERVAL must be > 0")
        return value

    @property
    def source_root(self) -> Path:
        return self.project_dir / self.source_dir

    @property
    def manifest_path(self) -> Path:
        return self.project_dir / self.manifest

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    def resolved(self) -> "DevtaskSettings":
        """Return a copy whose project directory is absolute."""

        return self.model_copy(update={"project_dir": self.project_dir.expanduser().resolve()})


@lru_cache(maxsize=1)
def get_settings() -> DevtaskSettings:
    """Return cached settings instance."""

    return DevtaskSettings().resolved()


__all__ = ["DevtaskSettings", "get_settings"]
