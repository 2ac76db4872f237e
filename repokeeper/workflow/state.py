"""Shared run state: repository handles, the state arena and the environment."""

from __future__ import annotations

import dataclasses as dc
import sys
import typing as typ
from pathlib import Path

from repokeeper.audit import InspectionDepth
from repokeeper.logging import get_logger, log_warning
from repokeeper.propagation import Severity, classify_error
from repokeeper.repos import LeafDependencies, OSFileSystem, PromptState

from .errors import RepositoryRefreshError

if typ.TYPE_CHECKING:
    from repokeeper.audit import InspectionProvider, RepositoryInspection
    from repokeeper.execshell import ExecutionContext, GitExecutor
    from repokeeper.github import GitHubClient
    from repokeeper.gitrepo import RepositoryManager
    from repokeeper.logging import _SupportsLog
    from repokeeper.repos import ConfirmationPrompter, FileSystem

logger = get_logger(__name__)


@dc.dataclass(frozen=True, slots=True)
class RuntimeOptions:
    """Caller-supplied run modifiers."""

    dry_run: bool = False
    assume_yes: bool = False


@dc.dataclass(slots=True)
class RepositoryState:
    """Live handle on one repository.

    ``path`` follows renames; ``inspection`` is the snapshot taken by the
    most recent :meth:`refresh`.
    """

    path: str
    inspection: RepositoryInspection

    @classmethod
    def from_inspection(cls, inspection: RepositoryInspection) -> RepositoryState:
        """Start tracking the repository described by ``inspection``."""
        return cls(path=inspection.path, inspection=inspection)

    def refresh(self, ctx: ExecutionContext, provider: InspectionProvider) -> None:
        """Re-inspect the repository at ``path`` and replace ``inspection``.

        Raises
        ------
        RepositoryRefreshError
            If the provider no longer reports a repository at ``path``.

        """
        target = Path(self.path)
        for candidate in provider.inspect(ctx, [self.path], InspectionDepth.FULL):
            if Path(candidate.path) == target:
                self.inspection = candidate
                return
        raise RepositoryRefreshError.missing(self.path)


@dc.dataclass(slots=True)
class State:
    """Roots and repositories of one run, in discovery order."""

    roots: list[str]
    repositories: list[RepositoryState] = dc.field(default_factory=list)

    @classmethod
    def single(cls, repository: RepositoryState) -> State:
        """Wrap one repository so an operation can run against it alone."""
        return cls(roots=[repository.path], repositories=[repository])

    def update_repository_path(self, index: int, new_path: str) -> None:
        """Record that the repository at ``index`` now lives at ``new_path``."""
        self.repositories[index].path = str(Path(new_path))


@dc.dataclass(slots=True)
class Environment:
    """Collaborators and run-wide flags handed to every operation.

    Attributes
    ----------
    executor
        Runs git and gh commands.
    manager
        Git queries and remote updates.
    github
        GitHub operations.
    inspector
        Produces :class:`RepositoryInspection` records for refreshes.
    file_system
        Disk access for renames and task files.
    prompter
        Confirmation prompts; ``None`` never prompts.
    prompt_state
        Run-wide assume-yes decision.
    output
        Sink for progress lines.
    errors
        Sink for warnings and recoverable failures.
    dry_run
        Plan only; no mutation and no refresh.
    audit_report_executed
        Set once the audit report has been produced in this run.

    """

    executor: GitExecutor
    manager: RepositoryManager
    github: GitHubClient
    inspector: InspectionProvider
    file_system: FileSystem = dc.field(default_factory=OSFileSystem)
    prompter: ConfirmationPrompter | None = None
    prompt_state: PromptState = dc.field(default_factory=PromptState)
    output: typ.TextIO = dc.field(default_factory=lambda: sys.stdout)
    errors: typ.TextIO = dc.field(default_factory=lambda: sys.stderr)
    logger: _SupportsLog = dc.field(default_factory=lambda: logger)
    dry_run: bool = False
    audit_report_executed: bool = False

    def say(self, line: str) -> None:
        """Write a progress line."""
        self.output.write(f"{line}\n")

    def warn(self, line: str) -> None:
        """Write a warning line to the error sink and the log."""
        self.errors.write(f"{line}\n")
        log_warning(self.logger, "%s", line)

    def leaf_dependencies(self) -> LeafDependencies:
        """Collaborators for the per-repository leaf executors."""
        return LeafDependencies(
            manager=self.manager,
            output=self.output,
            errors=self.errors,
            prompter=self.prompter,
            prompt_state=self.prompt_state,
            file_system=self.file_system,
        )

    def report_recoverable(self, exc: BaseException) -> bool:
        """Report ``exc`` if it is confined to one repository.

        Returns
        -------
        bool
            ``True`` when the failure was recoverable and has been written to
            the error sink; ``False`` when the caller must re-raise it.

        """
        if classify_error(exc) is not Severity.RECOVERABLE:
            return False
        self.warn(str(exc))
        return True

    def refresh(
        self, ctx: ExecutionContext, repository: RepositoryState, action: str
    ) -> None:
        """Refresh ``repository`` after ``action``; never in dry run.

        Raises
        ------
        RepositoryRefreshError
            If re-inspection fails.

        """
        if self.dry_run:
            return
        try:
            repository.refresh(ctx, self.inspector)
        except RepositoryRefreshError as exc:
            raise RepositoryRefreshError.after(action, exc) from exc


__all__ = ["Environment", "RepositoryState", "RuntimeOptions", "State"]
