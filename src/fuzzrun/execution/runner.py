"""Child-process execution for invocations."""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

# Exit status reported when the process never started
SPAWN_FAILURE_EXIT_CODE = 1


@dataclass(frozen=True)
class Invocation:
    """One command to execute: a base command and its arguments."""

    base: str
    args: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))

    @classmethod
    def from_argv(cls, argv: list[str] | tuple[str, ...]) -> Invocation:
        """Split an argv sequence into base and arguments."""
        if not argv:
            raise ValueError("argv must contain at least the base command")
        return cls(base=argv[0], args=tuple(argv[1:]))

    @property
    def argv(self) -> list[str]:
        return [self.base, *self.args]

    def with_base(self, base: str) -> Invocation:
        """Copy with a different base command."""
        return Invocation(base=base, args=self.args)

    def with_arg(self, index: int, value: str) -> Invocation:
        """Copy with ``args[index]`` replaced."""
        args = list(self.args)
        args[index] = value
        return Invocation(base=self.base, args=tuple(args))

    def __str__(self) -> str:
        return " ".join(self.argv)


@dataclass
class ExecutionResult:
    """Captured outcome of running an invocation."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""
    spawn_error: OSError | None = None

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and self.spawn_error is None

    @property
    def not_found(self) -> bool:
        """Whether the executable itself could not be located."""
        return isinstance(self.spawn_error, FileNotFoundError)

    @property
    def combined_output(self) -> str:
        return f"{self.stderr}\n{self.stdout}"


def normalize_returncode(returncode: int) -> int:
    """Map a signal-terminated child (negative code) to ``128 + signal``."""
    if returncode < 0:
        return 128 - returncode
    return returncode


class CommandExecutor:
    """Runs invocations to completion, capturing both output streams.

    Standard input is inherited so interactive commands still work. No
    timeout is applied.
    """

    def __init__(self, cwd: str | Path | None = None, windows: bool | None = None) -> None:
        """Initialize executor.

        Args:
            cwd: Working directory for child processes
            windows: Resolve bases through PATHEXT before spawning
        """
        self.cwd = cwd
        self.windows = sys.platform.startswith("win") if windows is None else windows

    def _resolve(self, base: str) -> str:
        if not self.windows:
            return base
        # CreateProcess does not apply PATHEXT, so npm.cmd and friends need a lookup
        return shutil.which(base) or base

    def execute(self, invocation: Invocation) -> ExecutionResult:
        """Run an invocation and wait for it to exit.

        Args:
            invocation: Command to run

        Returns:
            Captured exit code and output; spawn failures are recorded, not raised
        """
        logger.debug(f"Executing: {invocation}")
        try:
            completed = subprocess.run(
                [self._resolve(invocation.base), *invocation.args],
                cwd=self.cwd,
                stdin=None,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            logger.debug(f"Failed to start {invocation.base}: {e}")
            return ExecutionResult(
                exit_code=SPAWN_FAILURE_EXIT_CODE,
                spawn_error=e,
            )

        return ExecutionResult(
            exit_code=normalize_returncode(completed.returncode),
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

    __call__ = execute
