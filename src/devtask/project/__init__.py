"""Project manifest model and loader exports."""

from .loader import ProjectLoadError, artifact_path, load_project
from .models import ProjectMetadata

__all__ = [
    "ProjectLoadError",
    "ProjectMetadata",
    "artifact_path",
    "load_project",
]
