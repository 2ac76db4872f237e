"""Command execution for git and the GitHub CLI.

Everything repokeeper does to a repository goes through a
:class:`GitExecutor`. The production implementation is
:class:`ShellExecutor`; tests substitute recording fakes.

Example
-------
>>> from repokeeper.execshell import CommandDetails, ExecutionContext, ShellExecutor
>>> executor = ShellExecutor()
>>> result = executor.execute_git(
...     ExecutionContext.background(),
...     CommandDetails.of("status", "--porcelain", cwd="/src/project"),
... )
"""

from __future__ import annotations

from .context import ExecutionContext
from .errors import (
    CommandExecutionError,
    CommandFailedError,
    CommandTimeoutError,
    ExecutionCancelledError,
)
from .executor import (
    DEFAULT_COMMAND_TIMEOUT,
    CommandRunner,
    GitExecutor,
    ShellExecutor,
    SubprocessRunner,
)
from .models import CommandDetails, CommandName, ExecutionResult, ShellCommand

__all__ = [
    "DEFAULT_COMMAND_TIMEOUT",
    "CommandDetails",
    "CommandExecutionError",
    "CommandFailedError",
    "CommandName",
    "CommandRunner",
    "CommandTimeoutError",
    "ExecutionCancelledError",
    "ExecutionContext",
    "ExecutionResult",
    "GitExecutor",
    "ShellCommand",
    "ShellExecutor",
    "SubprocessRunner",
]
