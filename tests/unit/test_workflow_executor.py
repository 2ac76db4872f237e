"""Unit tests for WorkflowExecutor and TaskRunner."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import pytest

from repokeeper.execshell import ExecutionCancelledError, ExecutionContext
from repokeeper.repos import RepositoryOperationError
from repokeeper.workflow import (
    InspectionFailedError,
    RenameOperation,
    RuntimeOptions,
    TaskRunner,
    WorkflowDependencyError,
    WorkflowExecutor,
    WorkflowOperationError,
    apply_defaults,
    sanitize_roots,
)
from repokeeper.workflow.tasks import TaskOperation, parse_task_definition
from tests.unit.fakes import Harness, make_harness, make_inspection

if typ.TYPE_CHECKING:
    from repokeeper.workflow import Environment, Operation, State


class _NoDiscovery:
    def discover(self, roots: typ.Sequence[str]) -> list[str]:
        raise AssertionError(roots)


@dc.dataclass(slots=True)
class _RecordingOperation:
    name: str = "record"
    failure: Exception | None = None
    seen: list[tuple[list[str], list[str], bool]] = dc.field(default_factory=list)

    def execute(self, ctx: ExecutionContext, env: Environment, state: State) -> None:
        self.seen.append(
            (
                state.roots,
                [repository.path for repository in state.repositories],
                env.dry_run,
            )
        )
        if self.failure is not None:
            raise self.failure


def _executor(harness: Harness, *operations: Operation) -> WorkflowExecutor:
    return WorkflowExecutor(
        operations,
        discoverer=_NoDiscovery(),
        executor=harness.executor,
        manager=harness.env.manager,
        github=harness.github,
        inspector=harness.inspector,
        file_system=harness.file_system,
        output=harness.output,
        errors=harness.errors,
    )


class TestSanitizeRoots:
    """Tests for sanitize_roots."""

    def test_blank_and_duplicate_roots(self) -> None:
        """Blanks, duplicates and nested roots are dropped."""
        roots = ["/src/a", "  ", "/src/a/", "/src/a/b", "/other"]

        assert sanitize_roots(roots) == ["/src/a", "/other"]

    def test_empty_falls_back_to_current_directory(self) -> None:
        """No usable root means the current directory."""
        assert sanitize_roots(["", "   "]) == ["."]

    def test_expands_home(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A leading ~ is expanded."""
        monkeypatch.setenv("HOME", "/home/tester")

        assert sanitize_roots(["~/src"]) == ["/home/tester/src"]


class TestWorkflowExecutor:
    """Tests for WorkflowExecutor.execute."""

    def test_requires_dependencies(self) -> None:
        """Missing collaborators are rejected before anything runs."""
        executor = WorkflowExecutor(
            [], discoverer=None, executor=None, manager=None, github=None
        )

        with pytest.raises(WorkflowDependencyError, match="requires repository"):
            executor.execute(ExecutionContext.background(), ["/src"])

    def test_runs_operations_in_order_on_shared_state(self) -> None:
        """Every operation sees the inspected repositories and flags."""
        harness = make_harness(
            make_inspection("/src/beta"), make_inspection("/src/alpha")
        )
        first = _RecordingOperation(name="first")
        second = _RecordingOperation(name="second")

        _executor(harness, first, second).execute(
            ExecutionContext.background(), ["/src"], RuntimeOptions(dry_run=True)
        )

        expected = (["/src"], ["/src/alpha", "/src/beta"], True)
        assert first.seen == [expected]
        assert second.seen == [expected]
        assert harness.inspector.calls == [("/src",)]

    def test_inspection_failure(self) -> None:
        """Inspection failures abort before any operation."""
        harness = make_harness()
        harness.inspector.failure = OSError("disk gone")
        operation = _RecordingOperation()

        with pytest.raises(InspectionFailedError, match="disk gone"):
            _executor(harness, operation).execute(
                ExecutionContext.background(), ["/src"]
            )

        assert operation.seen == []

    def test_operation_failure_stops_run(self) -> None:
        """The first failing operation is wrapped and later ones are skipped."""
        harness = make_harness(make_inspection("/src/demo"))
        failing = _RecordingOperation(
            name="canonical-remote",
            failure=RepositoryOperationError("/src/demo", "boom"),
        )
        later = _RecordingOperation()

        with pytest.raises(WorkflowOperationError) as excinfo:
            _executor(harness, failing, later).execute(
                ExecutionContext.background(), ["/src"]
            )

        assert str(excinfo.value) == "workflow operation canonical-remote failed: boom"
        assert isinstance(excinfo.value.cause, RepositoryOperationError)
        assert later.seen == []

    @pytest.mark.parametrize(
        "failure",
        [ExecutionCancelledError.cancelled(), ExecutionCancelledError.expired()],
        ids=("cancelled", "expired"),
    )
    def test_cancellation_passes_through(
        self, failure: ExecutionCancelledError
    ) -> None:
        """Cancellation is never wrapped."""
        harness = make_harness(make_inspection("/src/demo"))

        with pytest.raises(ExecutionCancelledError):
            _executor(harness, _RecordingOperation(failure=failure)).execute(
                ExecutionContext.background(), ["/src"]
            )

    def test_cancelled_context_runs_nothing(self) -> None:
        """A cancelled context stops before the first operation."""
        harness = make_harness(make_inspection("/src/demo"))
        operation = _RecordingOperation()
        ctx = ExecutionContext.background()
        ctx.cancel()

        with pytest.raises(ExecutionCancelledError):
            _executor(harness, operation).execute(ctx, ["/src"])

        assert operation.seen == []

    def test_dry_run_changes_nothing(self) -> None:
        """Dry run performs no mutation through any collaborator."""
        harness = make_harness(
            make_inspection("/src/demo-old", desired_folder_name="demo")
        )
        tasks = TaskOperation(
            tasks=(
                parse_task_definition(
                    {"name": "docs", "files": [{"path": "README.md", "content": "x"}]}
                ),
            )
        )

        _executor(harness, RenameOperation(), tasks).execute(
            ExecutionContext.background(), ["/src"], RuntimeOptions(dry_run=True)
        )

        assert harness.executor.mutating_git_arguments() == []
        assert harness.file_system.renames == []
        assert harness.file_system.files == {}
        assert harness.github.calls == []


class TestApplyDefaults:
    """Tests for apply_defaults."""

    @pytest.mark.parametrize(
        ("operation", "expected"),
        [
            (RenameOperation(), True),
            (RenameOperation(require_clean_explicit=True), False),
        ],
        ids=("implicit", "explicit"),
    )
    def test_rename_require_clean(
        self, operation: RenameOperation, *, expected: bool
    ) -> None:
        """Only renames without an explicit setting receive the default."""
        apply_defaults([operation, _RecordingOperation()], require_clean=True)

        assert operation.require_clean is expected


class TestTaskRunner:
    """Tests for TaskRunner.run."""

    def test_no_definitions_is_a_no_op(self) -> None:
        """Nothing is inspected when there are no tasks."""
        harness = make_harness(make_inspection("/src/demo"))
        runner = TaskRunner(
            discoverer=None, executor=None, manager=None, github=None
        )

        runner.run(ExecutionContext.background(), ["/src"], [])

        assert harness.inspector.calls == []

    def test_runs_tasks(self) -> None:
        """Definitions run as a single apply-tasks operation."""
        harness = make_harness(make_inspection("/src/demo"))
        runner = TaskRunner(
            discoverer=_NoDiscovery(),
            executor=harness.executor,
            manager=harness.env.manager,
            github=harness.github,
            inspector=harness.inspector,
            file_system=harness.file_system,
            output=harness.output,
            errors=harness.errors,
        )
        definition = parse_task_definition(
            {"name": "docs", "files": [{"path": "README.md", "content": "x"}]}
        )

        runner.run(
            ExecutionContext.background(),
            ["/src"],
            [definition],
            RuntimeOptions(dry_run=True),
        )

        assert harness.output.getvalue() == (
            "TASK-PLAN: docs /src/demo branch=automation-docs base=main "
            "files=[README.md]\n"
        )
