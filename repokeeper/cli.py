"""Command-line entry point for repokeeper.

Commands
--------
``workflow CONFIG [ROOTS...]``
    Run a declarative workflow file.
``migrate [ROOTS...]``
    Move every discovered repository from one default branch to another.
``audit [ROOTS...]``
    Write the CSV audit report.

Settings such as the log level and command timeout come from the
``REPOKEEPER_*`` environment variables read by
:class:`~repokeeper.config.RepokeeperSettings`.
"""

from __future__ import annotations

import dataclasses as dc
import sys
import typing as typ

from cyclopts import App, Parameter

from repokeeper.config import RepokeeperSettings
from repokeeper.execshell import (
    CommandExecutionError,
    CommandFailedError,
    CommandName,
    ExecutionCancelledError,
    ExecutionContext,
    ShellExecutor,
    SubprocessRunner,
)
from repokeeper.github import GitHubCLIClient
from repokeeper.gitrepo import DEFAULT_REMOTE_NAME, RepositoryManager
from repokeeper.logging import (
    configure_logging,
    get_logger,
    log_exception,
    log_warning,
)
from repokeeper.migrate import MigrationError, MigrationInputError
from repokeeper.repos import (
    FilesystemRepositoryDiscoverer,
    IOConfirmationPrompter,
    RepositoryOperationError,
)
from repokeeper.workflow import (
    AuditReportOperation,
    BranchMigrationOperation,
    BranchMigrationTarget,
    InspectionFailedError,
    MigrationTargetError,
    RepositoryRefreshError,
    RuntimeOptions,
    State,
    WorkflowConfigurationError,
    WorkflowDependencyError,
    WorkflowExecutor,
    WorkflowOperationError,
    apply_defaults,
    build_operations,
    load_configuration,
)
from repokeeper.workflow.config import OperationType
from repokeeper.workflow.migration import (
    DEFAULT_SOURCE_BRANCH,
    DEFAULT_TARGET_BRANCH,
    DEFAULT_WORKFLOWS_DIRECTORY,
)

if typ.TYPE_CHECKING:
    from repokeeper.audit import InspectionProvider
    from repokeeper.execshell import GitExecutor
    from repokeeper.github import GitHubClient
    from repokeeper.repos import (
        ConfirmationPrompter,
        FileSystem,
        RepositoryDiscoverer,
    )
    from repokeeper.workflow import Environment, Operation

logger = get_logger(__name__)

app = App(
    name="repokeeper",
    help="Declarative maintenance workflows across many Git/GitHub repositories",
    version="0.1.0",
)

_RUN_ERRORS: tuple[type[BaseException], ...] = (
    WorkflowConfigurationError,
    WorkflowDependencyError,
    WorkflowOperationError,
    InspectionFailedError,
    ExecutionCancelledError,
    CommandExecutionError,
    OSError,
)

_MIGRATION_ERRORS: tuple[type[BaseException], ...] = (
    MigrationError,
    MigrationInputError,
    MigrationTargetError,
    RepositoryOperationError,
    RepositoryRefreshError,
    CommandFailedError,
)


@dc.dataclass(slots=True)
class Collaborators:
    """Process-wide collaborators shared by every command."""

    discoverer: RepositoryDiscoverer
    executor: GitExecutor
    manager: RepositoryManager
    github: GitHubClient
    inspector: InspectionProvider | None = None
    file_system: FileSystem | None = None
    prompter: ConfirmationPrompter | None = None
    output: typ.TextIO | None = None
    errors: typ.TextIO | None = None

    def workflow_executor(
        self, operations: typ.Sequence[Operation]
    ) -> WorkflowExecutor:
        """Bind ``operations`` to these collaborators."""
        return WorkflowExecutor(
            operations,
            discoverer=self.discoverer,
            executor=self.executor,
            manager=self.manager,
            github=self.github,
            inspector=self.inspector,
            file_system=self.file_system,
            prompter=self.prompter,
            output=self.output,
            errors=self.errors,
        )


def build_collaborators(settings: RepokeeperSettings) -> Collaborators:
    """Wire subprocess-backed collaborators from ``settings``."""
    runner = SubprocessRunner(
        {
            CommandName.GIT: settings.git_executable,
            CommandName.GITHUB: settings.gh_executable,
        }
    )
    executor = ShellExecutor(runner, timeout=float(settings.command_timeout))
    return Collaborators(
        discoverer=FilesystemRepositoryDiscoverer(),
        executor=executor,
        manager=RepositoryManager(executor),
        github=GitHubCLIClient(executor),
        prompter=IOConfirmationPrompter(),
    )


def _fail(exc: BaseException) -> int:
    print(f"repokeeper: {exc}", file=sys.stderr)
    log_exception(logger, "repokeeper command failed", exc)
    return 1


@dc.dataclass(slots=True)
class _MigrateEveryRepository:
    """Migrate each repository in the run, continuing past failures."""

    template: BranchMigrationTarget
    failures: int = 0

    @property
    def name(self) -> str:
        return OperationType.BRANCH_MIGRATION.value

    def execute(self, ctx: ExecutionContext, env: Environment, state: State) -> None:
        for repository in state.repositories:
            target = dc.replace(self.template, repository_path=repository.path)
            operation = BranchMigrationOperation(targets=(target,))
            try:
                operation.execute(ctx, env, State.single(repository))
            except _MIGRATION_ERRORS as exc:
                self.failures += 1
                env.warn(f"MIGRATE-ERROR: {repository.path}: {exc}")


@app.command
def workflow(
    config: str,
    *roots: str,
    dry_run: bool = False,
    yes: bool = False,
) -> int:
    """Run the workflow described by CONFIG against repositories under ROOTS.

    Args:
        config: Path to the workflow YAML file.
        roots: Directories to search for repositories (default: current).
        dry_run: Print the plan without changing anything.
        yes: Answer yes to every confirmation prompt.

    Returns:
        Exit code (0 for success, 1 for failure).

    """
    settings = RepokeeperSettings.from_env()
    try:
        operations = build_operations(load_configuration(config))
        apply_defaults(operations, require_clean=True)
        build_collaborators(settings).workflow_executor(operations).execute(
            ExecutionContext.background(),
            list(roots),
            RuntimeOptions(dry_run=dry_run, assume_yes=yes),
        )
    except _RUN_ERRORS as exc:
        return _fail(exc)
    return 0


@app.command
def migrate(  # noqa: PLR0913
    *roots: str,
    source: typ.Annotated[str, Parameter(name="--from")] = DEFAULT_SOURCE_BRANCH,
    target: typ.Annotated[str, Parameter(name="--to")] = DEFAULT_TARGET_BRANCH,
    remote: str = DEFAULT_REMOTE_NAME,
    workflows: str = DEFAULT_WORKFLOWS_DIRECTORY,
    push: bool = True,
    dry_run: bool = False,
) -> int:
    """Switch the default branch of every repository under ROOTS.

    Args:
        roots: Directories to search for repositories (default: current).
        source: Current default branch.
        target: New default branch.
        remote: Remote receiving the workflow commit.
        workflows: CI workflow directory relative to each repository.
        push: Push the workflow commit (``--no-push`` to skip).
        dry_run: Print the plan without changing anything.

    Returns:
        Exit code (0 when every repository migrated, 1 otherwise).

    """
    settings = RepokeeperSettings.from_env()
    operation = _MigrateEveryRepository(
        template=BranchMigrationTarget(
            remote_name=remote,
            source_branch=source,
            target_branch=target,
            workflows_directory=workflows,
            push_updates=push,
        )
    )
    try:
        build_collaborators(settings).workflow_executor([operation]).execute(
            ExecutionContext.background(),
            list(roots),
            RuntimeOptions(dry_run=dry_run, assume_yes=True),
        )
    except _RUN_ERRORS as exc:
        return _fail(exc)
    return 1 if operation.failures else 0


@app.command
def audit(*roots: str, output: str = "") -> int:
    """Write the CSV audit report for repositories under ROOTS.

    Args:
        roots: Directories to search for repositories (default: current).
        output: File to write; standard output when omitted.

    Returns:
        Exit code (0 for success, 1 for failure).

    """
    settings = RepokeeperSettings.from_env()
    try:
        build_collaborators(settings).workflow_executor(
            [AuditReportOperation(output_path=output)]
        ).execute(ExecutionContext.background(), list(roots), RuntimeOptions())
    except _RUN_ERRORS as exc:
        return _fail(exc)
    return 0


def main() -> int:
    """Entry point for the CLI."""
    settings = RepokeeperSettings.from_env()
    level, invalid = configure_logging(settings.log_level)
    if invalid:
        log_warning(
            logger, "unknown log level %r; using %s", settings.log_level, level
        )
    return app()


if __name__ == "__main__":
    sys.exit(main())
