"""Process execution for the original and corrected commands."""

from .runner import (
    SPAWN_FAILURE_EXIT_CODE,
    CommandExecutor,
    ExecutionResult,
    Invocation,
    normalize_returncode,
)

__all__ = [
    "SPAWN_FAILURE_EXIT_CODE",
    "CommandExecutor",
    "ExecutionResult",
    "Invocation",
    "normalize_returncode",
]
