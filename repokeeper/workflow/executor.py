"""Run compiled workflow operations across discovered repositories.

:class:`WorkflowExecutor` resolves the roots, inspects every repository
beneath them and hands the shared :class:`State` to each operation in
configuration order. The first operation that raises aborts the run.
"""

from __future__ import annotations

import sys
import typing as typ
from pathlib import Path

from repokeeper.audit import InspectionDepth, InspectionService
from repokeeper.logging import get_logger, log_info
from repokeeper.propagation import is_cancellation
from repokeeper.repos import OSFileSystem, PromptState

from .errors import (
    InspectionFailedError,
    WorkflowDependencyError,
    WorkflowOperationError,
)
from .operations import RenameOperation
from .state import Environment, RepositoryState, RuntimeOptions, State
from .tasks import TaskOperation

if typ.TYPE_CHECKING:
    from repokeeper.audit import InspectionProvider
    from repokeeper.execshell import ExecutionContext, GitExecutor
    from repokeeper.github import GitHubClient
    from repokeeper.gitrepo import RepositoryManager
    from repokeeper.repos import (
        ConfirmationPrompter,
        FileSystem,
        RepositoryDiscoverer,
    )

    from .operations import Operation
    from .tasks import TaskDefinition

logger = get_logger(__name__)

DEFAULT_ROOT = "."


def _contains(parent: str, child: str) -> bool:
    return child != parent and Path(child).is_relative_to(parent)


def sanitize_roots(roots: typ.Sequence[str]) -> list[str]:
    """Normalise ``roots`` for discovery.

    Blank entries are dropped, ``~`` is expanded and duplicates removed.
    A root nested inside another root is pruned because discovery of the
    outer root already covers it. An empty result falls back to the
    current directory.
    """
    cleaned: list[str] = []
    for root in roots:
        candidate = root.strip()
        if not candidate:
            continue
        normalized = str(Path(candidate).expanduser().resolve())
        if normalized not in cleaned:
            cleaned.append(normalized)
    if not cleaned:
        return [DEFAULT_ROOT]
    return [
        root
        for root in cleaned
        if not any(_contains(other, root) for other in cleaned)
    ]


def apply_defaults(
    operations: typ.Iterable[Operation], *, require_clean: bool = True
) -> None:
    """Fill in run-wide defaults the steps left unspecified."""
    for operation in operations:
        if isinstance(operation, RenameOperation):
            operation.apply_require_clean_default(require_clean)


class WorkflowExecutor:
    """Execute a list of operations against the repositories under roots.

    Parameters
    ----------
    operations
        Compiled operations, run in order.
    discoverer
        Finds repository directories.
    executor
        Runs git and gh commands.
    manager
        Git queries and remote updates.
    github
        GitHub operations.
    inspector
        Inspection provider; defaults to an :class:`InspectionService` built
        from the other collaborators.
    file_system
        Disk access; defaults to :class:`OSFileSystem`.
    prompter
        Confirmation prompts; ``None`` never prompts.
    output, errors
        Progress and warning sinks; default to stdout and stderr.

    """

    def __init__(  # noqa: PLR0913
        self,
        operations: typ.Sequence[Operation],
        *,
        discoverer: RepositoryDiscoverer | None,
        executor: GitExecutor | None,
        manager: RepositoryManager | None,
        github: GitHubClient | None,
        inspector: InspectionProvider | None = None,
        file_system: FileSystem | None = None,
        prompter: ConfirmationPrompter | None = None,
        output: typ.TextIO | None = None,
        errors: typ.TextIO | None = None,
    ) -> None:
        """Store the operations and collaborators."""
        self._operations = list(operations)
        self._discoverer = discoverer
        self._executor = executor
        self._manager = manager
        self._github = github
        self._inspector = inspector
        self._file_system = file_system
        self._prompter = prompter
        self._output = output
        self._errors = errors

    def execute(
        self,
        ctx: ExecutionContext,
        roots: typ.Sequence[str],
        options: RuntimeOptions | None = None,
    ) -> None:
        """Inspect repositories under ``roots`` and run every operation.

        Raises
        ------
        WorkflowDependencyError
            If the discoverer, git executor, manager or GitHub client is
            missing.
        InspectionFailedError
            If the initial inspection fails.
        WorkflowOperationError
            Wrapping the first operation failure.
        ExecutionCancelledError
            If ``ctx`` is cancelled or its deadline passes.

        """
        if (
            self._discoverer is None
            or self._executor is None
            or self._manager is None
            or self._github is None
        ):
            raise WorkflowDependencyError
        options = options or RuntimeOptions()
        sanitized = sanitize_roots(roots)
        inspector = self._inspector or InspectionService(
            discoverer=self._discoverer,
            executor=self._executor,
            manager=self._manager,
            github=self._github,
        )
        try:
            inspections = inspector.inspect(ctx, sanitized, InspectionDepth.FULL)
        except Exception as exc:
            if is_cancellation(exc):
                raise
            raise InspectionFailedError(exc) from exc

        state = State(
            roots=sanitized,
            repositories=[RepositoryState.from_inspection(i) for i in inspections],
        )
        env = Environment(
            executor=self._executor,
            manager=self._manager,
            github=self._github,
            inspector=inspector,
            file_system=self._file_system or OSFileSystem(),
            prompter=self._prompter,
            prompt_state=PromptState(assume_yes=options.assume_yes),
            output=self._output or sys.stdout,
            errors=self._errors or sys.stderr,
            dry_run=options.dry_run,
        )
        log_info(
            logger,
            "running %d operations across %d repositories",
            len(self._operations),
            len(state.repositories),
        )
        for operation in self._operations:
            ctx.check()
            try:
                operation.execute(ctx, env, state)
            except Exception as exc:
                if is_cancellation(exc):
                    raise
                raise WorkflowOperationError(operation.name, exc) from exc


class TaskRunner:
    """Run task definitions without a workflow configuration file."""

    def __init__(  # noqa: PLR0913
        self,
        *,
        discoverer: RepositoryDiscoverer | None,
        executor: GitExecutor | None,
        manager: RepositoryManager | None,
        github: GitHubClient | None,
        inspector: InspectionProvider | None = None,
        file_system: FileSystem | None = None,
        prompter: ConfirmationPrompter | None = None,
        output: typ.TextIO | None = None,
        errors: typ.TextIO | None = None,
    ) -> None:
        """Store the collaborators handed to each :class:`WorkflowExecutor`."""
        self._collaborators: dict[str, typ.Any] = {
            "discoverer": discoverer,
            "executor": executor,
            "manager": manager,
            "github": github,
            "inspector": inspector,
            "file_system": file_system,
            "prompter": prompter,
            "output": output,
            "errors": errors,
        }

    def run(
        self,
        ctx: ExecutionContext,
        roots: typ.Sequence[str],
        definitions: typ.Sequence[TaskDefinition],
        options: RuntimeOptions | None = None,
    ) -> None:
        """Apply ``definitions`` to every repository under ``roots``."""
        if not definitions:
            return
        operation = TaskOperation(tasks=tuple(definitions))
        WorkflowExecutor([operation], **self._collaborators).execute(
            ctx, roots, options
        )


__all__ = [
    "DEFAULT_ROOT",
    "TaskRunner",
    "WorkflowExecutor",
    "apply_defaults",
    "sanitize_roots",
]
