"""External tool orchestration utilities."""

from .runner import (
    ExecutionResult,
    ExternalToolError,
    FakeProcess,
    FakeToolRunner,
    RunnerError,
    ToolNotFoundError,
    ToolRunner,
)

__all__ = [
    "ExecutionResult",
    "ExternalToolError",
    "FakeProcess",
    "FakeToolRunner",
    "RunnerError",
    "ToolNotFoundError",
    "ToolRunner",
]
