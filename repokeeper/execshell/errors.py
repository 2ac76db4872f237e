"""Errors raised while running external commands."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from .models import ExecutionResult, ShellCommand


class ExecutionCancelledError(RuntimeError):
    """Raised when the execution context was cancelled or ran out of time."""

    def __init__(self, message: str, *, deadline_exceeded: bool = False) -> None:
        """Record whether the stop was caused by the deadline."""
        self.deadline_exceeded = deadline_exceeded
        super().__init__(message)

    @classmethod
    def cancelled(cls) -> ExecutionCancelledError:
        """Return an error for an explicit cancellation."""
        return cls("execution cancelled")

    @classmethod
    def expired(cls) -> ExecutionCancelledError:
        """Return an error for an expired deadline."""
        return cls("execution deadline exceeded", deadline_exceeded=True)


class CommandFailedError(RuntimeError):
    """Raised when a command exits with a non-zero status."""

    def __init__(self, command: ShellCommand, result: ExecutionResult) -> None:
        """Keep the command and its captured result for callers."""
        self.command = command
        self.result = result
        super().__init__(
            f"{command.name} command exited with code {result.exit_code}"
        )

    @property
    def stderr(self) -> str:
        """Captured standard error, stripped."""
        return self.result.standard_error.strip()


class CommandExecutionError(RuntimeError):
    """Raised when a command could not be run at all."""

    def __init__(self, command: ShellCommand, message: str | None = None) -> None:
        """Store the command; the underlying error is kept as ``__cause__``."""
        self.command = command
        super().__init__(message or f"{command.name} command execution failed")


class CommandTimeoutError(CommandExecutionError):
    """Raised when a command outlives its timeout or the run deadline."""

    def __init__(self, command: ShellCommand, timeout: float | None) -> None:
        """Store the timeout that was exceeded."""
        self.timeout = timeout
        super().__init__(command, f"{command.name} command timed out after {timeout}s")
