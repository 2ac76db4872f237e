"""The ``migrate-branch`` workflow operation."""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path

from repokeeper.common.slug import slugs_match
from repokeeper.gitrepo import DEFAULT_REMOTE_NAME
from repokeeper.migrate import MigrationOptions, MigrationService

from .config import OperationType
from .errors import MigrationTargetError

if typ.TYPE_CHECKING:
    from repokeeper.execshell import ExecutionContext

    from .state import Environment, RepositoryState, State

DEFAULT_SOURCE_BRANCH = "main"
DEFAULT_TARGET_BRANCH = "master"
DEFAULT_WORKFLOWS_DIRECTORY = ".github/workflows"


@dc.dataclass(frozen=True, slots=True)
class BranchMigrationTarget:
    """A repository to migrate, addressed by path or ``owner/repo``."""

    repository_identifier: str = ""
    repository_path: str = ""
    remote_name: str = DEFAULT_REMOTE_NAME
    source_branch: str = DEFAULT_SOURCE_BRANCH
    target_branch: str = DEFAULT_TARGET_BRANCH
    workflows_directory: str = DEFAULT_WORKFLOWS_DIRECTORY
    push_updates: bool = True

    def describe(self) -> str:
        """Human-readable reference used in error messages."""
        return self.repository_path or self.repository_identifier or "unknown"


def _identifier_matches(repository: RepositoryState, identifier: str) -> bool:
    inspection = repository.inspection
    return any(
        slugs_match(candidate.strip(), identifier)
        for candidate in (
            inspection.canonical_owner_repo,
            inspection.final_owner_repo,
            inspection.origin_owner_repo,
        )
    )


def resolve_migration_target(
    repositories: typ.Sequence[RepositoryState], target: BranchMigrationTarget
) -> RepositoryState:
    """Find the repository ``target`` refers to.

    A path match wins over an identifier match; identifiers compare
    case-insensitively against the canonical, final and origin owner/repo.

    Raises
    ------
    MigrationTargetError
        If no repository matches.

    """
    path = target.repository_path.strip()
    if path:
        wanted = Path(path)
        for repository in repositories:
            if Path(repository.path) == wanted:
                return repository

    identifier = target.repository_identifier.strip()
    if identifier:
        for repository in repositories:
            if _identifier_matches(repository, identifier):
                return repository

    raise MigrationTargetError.not_found(target.describe())


@dc.dataclass(slots=True)
class BranchMigrationOperation:
    """Run :class:`~repokeeper.migrate.MigrationService` for each target."""

    targets: tuple[BranchMigrationTarget, ...] = ()

    @property
    def name(self) -> str:
        """Operation type."""
        return OperationType.BRANCH_MIGRATION.value

    def execute(self, ctx: ExecutionContext, env: Environment, state: State) -> None:
        """Migrate every target in order; any failure aborts the operation."""
        service = MigrationService(
            executor=env.executor, manager=env.manager, github=env.github
        )
        for target in self.targets:
            ctx.check()
            repository = resolve_migration_target(state.repositories, target)
            inspection = repository.inspection
            identifier = (
                target.repository_identifier.strip()
                or inspection.canonical_owner_repo.strip()
                or inspection.origin_owner_repo.strip()
            )
            if not identifier:
                raise MigrationTargetError.identifier_missing(repository.path)

            branches = f"{target.source_branch} → {target.target_branch}"
            summary = f"{repository.path} ({branches})"
            if env.dry_run:
                env.say(f"WORKFLOW-PLAN: migrate {summary}")
                continue

            result = service.execute(
                ctx,
                MigrationOptions(
                    repository_path=repository.path,
                    remote_name=target.remote_name,
                    repository_identifier=identifier,
                    workflows_directory=target.workflows_directory,
                    source_branch=target.source_branch,
                    target_branch=target.target_branch,
                    push_updates=target.push_updates,
                ),
            )
            safe = str(result.safety_status.safe_to_delete).lower()
            env.say(f"WORKFLOW-MIGRATE: {summary} safe_to_delete={safe}")
            for warning in result.warnings:
                env.errors.write(f"{warning}\n")
            for reason in result.safety_status.blocking_reasons:
                env.errors.write(f"MIGRATE-BLOCKED: {repository.path}: {reason}\n")
            env.refresh(ctx, repository, "branch migration")


__all__ = [
    "DEFAULT_SOURCE_BRANCH",
    "DEFAULT_TARGET_BRANCH",
    "DEFAULT_WORKFLOWS_DIRECTORY",
    "BranchMigrationOperation",
    "BranchMigrationTarget",
    "resolve_migration_target",
]
