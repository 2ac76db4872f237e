"""Rename repository directories to their canonical GitHub names.

:class:`DirectoryPlanner` decides the folder a repository should live in;
:func:`rename_repository` moves it there, printing ``PLAN-*`` lines in dry
run and ``Renamed a → b`` once the move succeeds.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path, PurePath

from repokeeper.common.slug import parse_repo_slug
from repokeeper.execshell import CommandFailedError

from .errors import RepositoryOperationError
from .shared import LeafOutcome

if typ.TYPE_CHECKING:
    from repokeeper.execshell import ExecutionContext

    from .shared import LeafDependencies

PARENT_DIRECTORY_PERMISSIONS = 0o755
_INTERMEDIATE_ATTEMPTS = 5


@dc.dataclass(frozen=True, slots=True)
class DirectoryPlan:
    """Target folder for a repository.

    ``folder_name`` is ``owner/repo`` when the owner is included and a plain
    name otherwise.
    """

    folder_name: str
    repository_segment: str
    owner_segment: str = ""
    include_owner: bool = False

    def is_noop(self, repository_path: str, current_folder_name: str) -> bool:
        """Whether the repository already lives where the plan wants it."""
        target = self.folder_name.strip()
        if not target:
            return True
        if self.include_owner:
            wanted = PurePath(target).parts
            return PurePath(repository_path).parts[-len(wanted) :] == wanted
        return target == current_folder_name.strip()


class DirectoryPlanner:
    """Derive :class:`DirectoryPlan` values from inspection data."""

    def plan(
        self,
        *,
        include_owner: bool,
        final_owner_repo: str,
        desired_folder_name: str,
    ) -> DirectoryPlan:
        """Plan a folder name, nesting under the owner when requested."""
        default_name = desired_folder_name.strip()
        fallback = DirectoryPlan(
            folder_name=default_name, repository_segment=default_name
        )
        if not include_owner:
            return fallback
        try:
            owner, repository = parse_repo_slug(final_owner_repo)
        except ValueError:
            return fallback
        return DirectoryPlan(
            folder_name=str(PurePath(owner, repository)),
            repository_segment=repository,
            owner_segment=owner,
            include_owner=True,
        )


@dc.dataclass(frozen=True, slots=True)
class RenameOptions:
    """Inputs for :func:`rename_repository`."""

    repository_path: str
    desired_folder_name: str
    dry_run: bool = False
    require_clean: bool = True
    ensure_parent_directories: bool = False


@dc.dataclass(frozen=True, slots=True)
class RenameResult:
    """Outcome of a rename plus the directory it targeted."""

    outcome: LeafOutcome
    old_path: str = ""
    new_path: str = ""


def _is_case_only(old_path: str, new_path: str) -> bool:
    return old_path != new_path and old_path.casefold() == new_path.casefold()


class _RenameCheck(typ.NamedTuple):
    skip_line: str | None
    error: str | None


def _check(
    ctx: ExecutionContext,
    dependencies: LeafDependencies,
    old_path: str,
    new_path: str,
    options: RenameOptions,
) -> _RenameCheck:
    file_system = dependencies.file_system
    parent = str(Path(new_path).parent)
    if old_path == new_path:
        return _RenameCheck(f"PLAN-SKIP (already named): {old_path}", None)
    if options.require_clean and not _is_clean(ctx, dependencies, old_path):
        return _RenameCheck(f"PLAN-SKIP (dirty worktree): {old_path}", None)
    parent_exists = file_system.exists(parent)
    if parent_exists and not file_system.is_dir(parent):
        return _RenameCheck(None, f"target parent is not a directory: {parent}")
    if not parent_exists and not options.ensure_parent_directories:
        return _RenameCheck(None, f"target parent missing: {parent}")
    if file_system.exists(new_path) and not _is_case_only(old_path, new_path):
        return _RenameCheck(None, f"target exists: {new_path}")
    return _RenameCheck(None, None)


def _is_clean(ctx: ExecutionContext, dependencies: LeafDependencies, path: str) -> bool:
    try:
        return dependencies.manager.check_clean_worktree(ctx, path)
    except CommandFailedError:
        return False


def _move(dependencies: LeafDependencies, old_path: str, new_path: str) -> None:
    file_system = dependencies.file_system
    try:
        file_system.rename(old_path, new_path)
    except OSError as direct_error:
        last_error: OSError = direct_error
        for attempt in range(_INTERMEDIATE_ATTEMPTS):
            intermediate = f"{old_path}.rename.{attempt}"
            try:
                file_system.rename(old_path, intermediate)
            except OSError as exc:
                last_error = exc
                continue
            try:
                file_system.rename(intermediate, new_path)
            except OSError as exc:
                last_error = exc
                file_system.rename(intermediate, old_path)
                continue
            return
        raise RepositoryOperationError(
            old_path, f"rename failed for {old_path} → {new_path}: {last_error}"
        ) from last_error


def rename_repository(
    ctx: ExecutionContext,
    dependencies: LeafDependencies,
    options: RenameOptions,
) -> RenameResult:
    """Move a repository directory to ``desired_folder_name``.

    ``desired_folder_name`` is resolved against the repository's parent
    directory, so ``owner/repo`` nests the repository under an owner folder.

    Raises
    ------
    RepositoryOperationError
        If the target is blocked or the move fails.

    """
    desired = options.desired_folder_name.strip()
    if not desired:
        return RenameResult(LeafOutcome.SKIPPED)

    file_system = dependencies.file_system
    old_path = file_system.abs(options.repository_path)
    new_path = str(Path(old_path).parent / desired)
    check = _check(ctx, dependencies, old_path, new_path, options)

    if options.dry_run:
        if check.skip_line or check.error:
            dependencies.say(check.skip_line or f"PLAN-SKIP ({check.error})")
        elif _is_case_only(old_path, new_path):
            dependencies.say(
                f"PLAN-CASE-ONLY: {old_path} → {new_path} (two-step move required)"
            )
        else:
            dependencies.say(f"PLAN-OK: {old_path} → {new_path}")
        return RenameResult(LeafOutcome.PLANNED, old_path, new_path)

    if check.error:
        raise RepositoryOperationError(old_path, check.error)
    if check.skip_line:
        dependencies.say(check.skip_line.replace("PLAN-SKIP", "SKIP", 1))
        return RenameResult(LeafOutcome.SKIPPED, old_path, new_path)

    if not dependencies.confirm(f"Rename '{old_path}' → '{new_path}'? [a/N/y] "):
        dependencies.say(f"SKIP: {old_path}")
        return RenameResult(LeafOutcome.DECLINED, old_path, new_path)

    if options.ensure_parent_directories:
        parent = str(Path(new_path).parent)
        try:
            file_system.mkdir_all(parent, PARENT_DIRECTORY_PERMISSIONS)
        except OSError as exc:
            raise RepositoryOperationError.wrap(
                old_path, "parent creation", exc
            ) from exc

    _move(dependencies, old_path, new_path)
    dependencies.say(f"Renamed {old_path} → {new_path}")
    return RenameResult(LeafOutcome.APPLIED, old_path, new_path)


def rename_completed(
    dependencies: LeafDependencies, old_path: str, new_path: str
) -> bool:
    """Whether ``new_path`` now holds the repository that was at ``old_path``.

    True when the new path exists and the old one is gone, or when both
    names resolve to the same directory after a case-only rename.
    """
    file_system = dependencies.file_system
    if not file_system.exists(new_path):
        return False
    if not file_system.exists(old_path):
        return True
    return file_system.same_file(old_path, new_path)
