"""Project metadata models."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class ProjectMetadata(BaseModel):
    """The slice of a project manifest devtask cares about."""

    name: str = Field(..., description="Logical name of the compiled artifact.")
    version: str | None = Field(default=None, description="Declared project version, if any.")

    @field_validator("name")
    @classmethod
    def _normalize_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Project name must not be empty")
        return normalized
