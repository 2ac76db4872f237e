"""Per-repository workflow operations.

Each operation walks :attr:`State.repositories` in order, skips repositories
whose inspection lacks the data it needs and hands the rest to a leaf
executor from :mod:`repokeeper.repos`. Failures confined to one repository
are written to the error sink and the loop moves on; anything else aborts
the operation.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path

from repokeeper.audit import write_audit_report
from repokeeper.common.slug import parse_repo_slug
from repokeeper.gitrepo import RemoteProtocol
from repokeeper.repos import (
    DirectoryPlanner,
    LeafOutcome,
    ProtocolConversionOptions,
    RemoteUpdateOptions,
    RenameOptions,
    RepositoryOperationError,
    convert_protocol,
    rename_completed,
    rename_repository,
    update_canonical_remote,
)

from .config import OperationType

if typ.TYPE_CHECKING:
    from repokeeper.execshell import ExecutionContext

    from .state import Environment, RepositoryState, State

AUDIT_STDOUT_DESTINATION = "stdout"


class Operation(typ.Protocol):
    """One unit of declarative work applied across repositories."""

    @property
    def name(self) -> str:
        """Operation type used in error messages."""
        ...

    def execute(self, ctx: ExecutionContext, env: Environment, state: State) -> None:
        """Apply the operation to every repository in ``state``."""
        ...


def _checked_owner_repo(repository: RepositoryState, value: str) -> str:
    stripped = value.strip()
    if not stripped:
        return ""
    try:
        owner, name = parse_repo_slug(stripped)
    except ValueError as exc:
        raise RepositoryOperationError(
            repository.path, f"{repository.path}: {exc}"
        ) from exc
    return f"{owner}/{name}"


@dc.dataclass(slots=True)
class CanonicalRemoteOperation:
    """Point ``origin`` at the canonical repository GitHub reports.

    ``owner_constraint`` limits updates to canonical repositories owned by
    that account.
    """

    owner_constraint: str = ""

    @property
    def name(self) -> str:
        """Operation type."""
        return OperationType.CANONICAL_REMOTE.value

    def execute(self, ctx: ExecutionContext, env: Environment, state: State) -> None:
        """Update remotes; refresh each repository whose origin changed."""
        for repository in state.repositories:
            inspection = repository.inspection
            if not inspection.origin_owner_repo.strip() and not (
                inspection.canonical_owner_repo.strip()
            ):
                continue
            ctx.check()
            try:
                outcome = update_canonical_remote(
                    ctx,
                    env.leaf_dependencies(),
                    RemoteUpdateOptions(
                        repository_path=repository.path,
                        current_origin_url=inspection.origin_url,
                        origin_owner_repo=_checked_owner_repo(
                            repository, inspection.origin_owner_repo
                        ),
                        canonical_owner_repo=_checked_owner_repo(
                            repository, inspection.canonical_owner_repo
                        ),
                        protocol=inspection.remote_protocol,
                        dry_run=env.dry_run,
                        owner_constraint=self.owner_constraint,
                    ),
                )
            except Exception as exc:
                if env.report_recoverable(exc):
                    continue
                raise
            if outcome is LeafOutcome.APPLIED:
                env.refresh(ctx, repository, "canonical remote update")


@dc.dataclass(slots=True)
class ProtocolConversionOperation:
    """Convert ``origin`` URLs from one protocol to another."""

    from_protocol: RemoteProtocol
    to_protocol: RemoteProtocol

    @property
    def name(self) -> str:
        """Operation type."""
        return OperationType.PROTOCOL_CONVERSION.value

    def execute(self, ctx: ExecutionContext, env: Environment, state: State) -> None:
        """Convert repositories currently using :attr:`from_protocol`."""
        for repository in state.repositories:
            inspection = repository.inspection
            if inspection.remote_protocol != self.from_protocol:
                continue
            ctx.check()
            try:
                outcome = convert_protocol(
                    ctx,
                    env.leaf_dependencies(),
                    ProtocolConversionOptions(
                        repository_path=repository.path,
                        origin_owner_repo=_checked_owner_repo(
                            repository, inspection.origin_owner_repo
                        ),
                        canonical_owner_repo=_checked_owner_repo(
                            repository, inspection.canonical_owner_repo
                        ),
                        current_protocol=self.from_protocol,
                        target_protocol=self.to_protocol,
                        dry_run=env.dry_run,
                    ),
                )
            except Exception as exc:
                if env.report_recoverable(exc):
                    continue
                raise
            if outcome is LeafOutcome.APPLIED:
                env.refresh(ctx, repository, "protocol conversion")


@dc.dataclass(slots=True)
class RenameOperation:
    """Rename repository directories to their canonical names.

    ``require_clean_explicit`` records whether the step set
    ``require_clean`` itself; :func:`apply_defaults` only fills in the value
    when it did not.
    """

    require_clean: bool = False
    include_owner: bool = False
    require_clean_explicit: bool = False

    @property
    def name(self) -> str:
        """Operation type."""
        return OperationType.RENAME_DIRECTORIES.value

    def apply_require_clean_default(self, require_clean: bool) -> None:  # noqa: FBT001
        """Use ``require_clean`` unless the step configured it."""
        if not self.require_clean_explicit:
            self.require_clean = require_clean

    def execute(self, ctx: ExecutionContext, env: Environment, state: State) -> None:
        """Rename, verify the move on disk, then track the new path."""
        planner = DirectoryPlanner()
        for index, repository in enumerate(state.repositories):
            inspection = repository.inspection
            plan = planner.plan(
                include_owner=self.include_owner,
                final_owner_repo=inspection.final_owner_repo,
                desired_folder_name=inspection.desired_folder_name,
            )
            if not plan.folder_name.strip():
                continue
            if plan.is_noop(repository.path, inspection.folder_name):
                continue
            ctx.check()
            dependencies = env.leaf_dependencies()
            try:
                result = rename_repository(
                    ctx,
                    dependencies,
                    RenameOptions(
                        repository_path=repository.path,
                        desired_folder_name=plan.folder_name,
                        dry_run=env.dry_run,
                        require_clean=self.require_clean,
                        ensure_parent_directories=plan.include_owner,
                    ),
                )
            except Exception as exc:
                if env.report_recoverable(exc):
                    continue
                raise
            if result.outcome is not LeafOutcome.APPLIED:
                continue
            if not rename_completed(dependencies, result.old_path, result.new_path):
                continue
            state.update_repository_path(index, result.new_path)
            env.refresh(ctx, repository, "rename")


@dc.dataclass(slots=True)
class AuditReportOperation:
    """Write the CSV audit report for the repositories in the run.

    The report goes to ``output_path`` when set and to the output sink
    otherwise. It is produced at most once per run.
    """

    output_path: str = ""

    @property
    def name(self) -> str:
        """Operation type."""
        return OperationType.AUDIT_REPORT.value

    def execute(self, ctx: ExecutionContext, env: Environment, state: State) -> None:
        """Write (or, in dry run, announce) the report."""
        if env.audit_report_executed:
            return
        ctx.check()
        destination = self.output_path or AUDIT_STDOUT_DESTINATION
        inspections = [repository.inspection for repository in state.repositories]
        if env.dry_run:
            env.say(f"WORKFLOW-PLAN: audit report → {destination}")
        elif self.output_path:
            report_path = Path(self.output_path)
            with report_path.open("w", encoding="utf-8", newline="") as stream:
                write_audit_report(stream, inspections)
            env.say(f"WORKFLOW-AUDIT: wrote report to {destination}")
        else:
            write_audit_report(env.output, inspections)
        env.audit_report_executed = True


__all__ = [
    "AUDIT_STDOUT_DESTINATION",
    "AuditReportOperation",
    "CanonicalRemoteOperation",
    "Operation",
    "ProtocolConversionOperation",
    "RenameOperation",
]
