"""devtask: a small developer task runner for a single compiled artifact."""

__version__ = "0.1.0"

__all__ = ["__version__"]
