"""Unit tests for the command execution layer."""

from __future__ import annotations

import subprocess
import typing as typ

import pytest

from repokeeper.execshell import (
    CommandDetails,
    CommandExecutionError,
    CommandFailedError,
    CommandName,
    CommandTimeoutError,
    ExecutionCancelledError,
    ExecutionContext,
    ExecutionResult,
    ShellCommand,
    ShellExecutor,
    SubprocessRunner,
)

if typ.TYPE_CHECKING:
    from pathlib import Path

    from cmd_mox import CmdMox


class _Clock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class _ScriptedRunner:
    """CommandRunner double returning one result or raising one error."""

    def __init__(
        self,
        result: ExecutionResult | None = None,
        error: BaseException | None = None,
    ) -> None:
        self.result = result or ExecutionResult()
        self.error = error
        self.calls: list[tuple[ShellCommand, float | None]] = []

    def run(self, command: ShellCommand, *, timeout: float | None) -> ExecutionResult:
        self.calls.append((command, timeout))
        if self.error is not None:
            raise self.error
        return self.result


class TestExecutionContext:
    """Tests for cancellation and deadlines."""

    def test_background_never_expires(self) -> None:
        """A background context has no deadline and passes checks."""
        ctx = ExecutionContext.background()

        ctx.check()

        assert ctx.remaining() is None
        assert ctx.deadline is None

    def test_cancel_stops_the_next_check(self) -> None:
        """cancel() makes check() raise a non-deadline error."""
        ctx = ExecutionContext.background()
        ctx.cancel()

        with pytest.raises(ExecutionCancelledError) as excinfo:
            ctx.check()

        assert excinfo.value.deadline_exceeded is False

    def test_deadline_expiry_is_reported(self) -> None:
        """Passing the deadline raises with deadline_exceeded set."""
        clock = _Clock()
        ctx = ExecutionContext(timeout=5, clock=clock)
        assert ctx.remaining() == pytest.approx(5.0)

        clock.now += 10

        assert ctx.remaining() == 0.0
        with pytest.raises(ExecutionCancelledError, match="deadline") as excinfo:
            ctx.check()
        assert excinfo.value.deadline_exceeded is True


class TestShellExecutor:
    """Tests for ShellExecutor error mapping and timeouts."""

    def test_successful_command_returns_result(self) -> None:
        """Exit code zero returns the captured output."""
        runner = _ScriptedRunner(ExecutionResult(standard_output="main\n"))
        executor = ShellExecutor(runner, timeout=30)

        result = executor.execute_git(
            ExecutionContext.background(),
            CommandDetails.of("rev-parse", "--abbrev-ref", "HEAD", cwd="/src/demo"),
        )

        assert result.standard_output == "main\n"
        command, timeout = runner.calls[0]
        assert command.name is CommandName.GIT
        assert command.details.working_directory == "/src/demo"
        assert timeout == 30

    def test_non_zero_exit_raises_command_failed(self) -> None:
        """A non-zero exit raises CommandFailedError carrying stderr."""
        runner = _ScriptedRunner(
            ExecutionResult(standard_error="fatal: not a repo\n", exit_code=128)
        )
        executor = ShellExecutor(runner)

        with pytest.raises(CommandFailedError) as excinfo:
            executor.execute_github_cli(
                ExecutionContext.background(), CommandDetails.of("repo", "view")
            )

        assert excinfo.value.stderr == "fatal: not a repo"
        assert excinfo.value.result.exit_code == 128
        assert "gh command exited with code 128" in str(excinfo.value)

    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (subprocess.TimeoutExpired(["git"], 1), CommandTimeoutError),
            (FileNotFoundError("git"), CommandExecutionError),
        ],
        ids=("timeout", "missing-binary"),
    )
    def test_runner_errors_are_mapped(
        self, error: BaseException, expected: type[Exception]
    ) -> None:
        """Runner failures surface as execution errors."""
        executor = ShellExecutor(_ScriptedRunner(error=error))

        with pytest.raises(expected):
            executor.execute_git(
                ExecutionContext.background(), CommandDetails.of("status")
            )

    def test_timeout_is_capped_by_remaining_time(self) -> None:
        """The context deadline shortens the per-command timeout."""
        clock = _Clock()
        ctx = ExecutionContext(timeout=3, clock=clock)
        runner = _ScriptedRunner()

        ShellExecutor(runner, timeout=60).execute_git(ctx, CommandDetails.of("status"))

        assert runner.calls[0][1] == pytest.approx(3.0)

    def test_cancelled_context_runs_nothing(self) -> None:
        """A cancelled context stops before the runner is invoked."""
        ctx = ExecutionContext.background()
        ctx.cancel()
        runner = _ScriptedRunner()

        with pytest.raises(ExecutionCancelledError):
            ShellExecutor(runner).execute_git(ctx, CommandDetails.of("status"))

        assert runner.calls == []


class TestSubprocessRunner:
    """Tests for SubprocessRunner using cmd-mox."""

    def test_runs_git_and_captures_output(self, cmd_mox: CmdMox) -> None:
        """Output and exit code come from the real process."""
        cmd_mox.mock("git").with_args("remote", "get-url", "origin").returns(
            exit_code=0,
            stdout="git@github.com:octo/demo.git\n",
        )

        result = SubprocessRunner().run(
            ShellCommand(
                CommandName.GIT, CommandDetails.of("remote", "get-url", "origin")
            ),
            timeout=10,
        )

        assert result.exit_code == 0
        assert result.standard_output == "git@github.com:octo/demo.git\n"

    def test_non_zero_exit_is_returned_not_raised(self, cmd_mox: CmdMox) -> None:
        """The runner reports failures; the executor decides what they mean."""
        cmd_mox.mock("gh").with_args("repo", "view", "octo/demo").returns(
            exit_code=1,
            stderr="HTTP 404: Not Found",
        )

        result = SubprocessRunner().run(
            ShellCommand(
                CommandName.GITHUB, CommandDetails.of("repo", "view", "octo/demo")
            ),
            timeout=10,
        )

        assert result.exit_code == 1
        assert "HTTP 404" in result.standard_error

    def test_undecodable_output_is_replaced(self, tmp_path: Path) -> None:
        """Bytes that are not UTF-8 become replacement characters."""
        script = tmp_path / "git"
        script.write_text("#!/bin/sh\nprintf ' M caf\\351.txt\\n'\n")
        script.chmod(0o755)
        executor = ShellExecutor(SubprocessRunner({CommandName.GIT: str(script)}))

        result = executor.execute_git(
            ExecutionContext.background(), CommandDetails.of("status", "--porcelain")
        )

        assert result.standard_output == " M caf�.txt\n"
