"""Run ``git`` and ``gh`` as subprocesses with logging and timeouts."""

from __future__ import annotations

import os
import subprocess
import typing as typ

from repokeeper.logging import get_logger, log_debug, log_warning

from .errors import CommandExecutionError, CommandFailedError, CommandTimeoutError
from .models import CommandDetails, CommandName, ExecutionResult, ShellCommand

if typ.TYPE_CHECKING:
    from .context import ExecutionContext

logger = get_logger(__name__)

DEFAULT_COMMAND_TIMEOUT = 120.0


class GitExecutor(typ.Protocol):
    """Runs git and GitHub CLI commands on behalf of workflow code."""

    def execute_git(
        self, ctx: ExecutionContext, details: CommandDetails
    ) -> ExecutionResult: ...

    def execute_github_cli(
        self, ctx: ExecutionContext, details: CommandDetails
    ) -> ExecutionResult: ...


class CommandRunner(typ.Protocol):
    """Low-level process runner; raises ``OSError``/``TimeoutExpired``."""

    def run(
        self, command: ShellCommand, *, timeout: float | None
    ) -> ExecutionResult: ...


class SubprocessRunner:
    """Run commands with :func:`subprocess.run`."""

    def __init__(
        self, executables: typ.Mapping[CommandName, str] | None = None
    ) -> None:
        """Map command names to executables; names are resolved on ``PATH``."""
        self._executables = dict(executables or {})

    def run(self, command: ShellCommand, *, timeout: float | None) -> ExecutionResult:
        """Run ``command`` and capture its output without raising on exit code."""
        details = command.details
        executable = self._executables.get(command.name, command.name.value)
        environment = None
        if details.environment:
            environment = {**os.environ, **details.environment}
        completed = subprocess.run(  # noqa: S603  # argv built from fixed executables
            [executable, *details.arguments],
            cwd=details.working_directory,
            env=environment,
            input=details.standard_input,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            timeout=timeout,
        )
        return ExecutionResult(
            standard_output=completed.stdout or "",
            standard_error=completed.stderr or "",
            exit_code=completed.returncode,
        )


class ShellExecutor:
    """Execute commands through a runner, logging each lifecycle step.

    Non-zero exits raise :class:`CommandFailedError`, runner failures raise
    :class:`CommandExecutionError` and expired timeouts raise
    :class:`CommandTimeoutError`. The execution context is checked before each
    command and caps the subprocess timeout.
    """

    def __init__(
        self,
        runner: CommandRunner | None = None,
        *,
        timeout: float = DEFAULT_COMMAND_TIMEOUT,
    ) -> None:
        """Create an executor; defaults to :class:`SubprocessRunner`."""
        self._runner = runner or SubprocessRunner()
        self._timeout = timeout

    def execute(self, ctx: ExecutionContext, command: ShellCommand) -> ExecutionResult:
        """Run ``command`` and return its result."""
        ctx.check()
        timeout = self._effective_timeout(ctx)
        working_directory = command.details.working_directory or "."
        log_debug(
            logger,
            "command execution starting: %s (cwd=%s)",
            command.describe(),
            working_directory,
        )
        try:
            result = self._runner.run(command, timeout=timeout)
        except subprocess.TimeoutExpired as exc:
            raise CommandTimeoutError(command, timeout) from exc
        except OSError as exc:
            raise CommandExecutionError(command) from exc

        if result.exit_code != 0:
            log_warning(
                logger,
                "command returned non-zero status: %s (cwd=%s, exit_code=%d): %s",
                command.describe(),
                working_directory,
                result.exit_code,
                result.standard_error.strip(),
            )
            raise CommandFailedError(command, result)

        log_debug(logger, "command execution completed: %s", command.describe())
        return result

    def execute_git(
        self, ctx: ExecutionContext, details: CommandDetails
    ) -> ExecutionResult:
        """Run ``git`` with ``details``."""
        return self.execute(ctx, ShellCommand(CommandName.GIT, details))

    def execute_github_cli(
        self, ctx: ExecutionContext, details: CommandDetails
    ) -> ExecutionResult:
        """Run ``gh`` with ``details``."""
        return self.execute(ctx, ShellCommand(CommandName.GITHUB, details))

    def _effective_timeout(self, ctx: ExecutionContext) -> float:
        remaining = ctx.remaining()
        if remaining is None:
            return self._timeout
        return min(self._timeout, remaining)
