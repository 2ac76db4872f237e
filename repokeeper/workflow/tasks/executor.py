"""Apply a :class:`TaskPlan` to a repository as a guarded git sequence.

The sequence is fixed:

1. require a clean worktree when the task asks for one;
2. stop if the task branch already exists;
3. remember the checked-out branch;
4. check out the start point and create the task branch from it;
5. write the changed files;
6. stage and commit them;
7. push the branch and open the pull request, if any;
8. check the remembered branch out again, whatever happened before.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

from repokeeper.execshell import (
    CommandDetails,
    CommandExecutionError,
    CommandFailedError,
)
from repokeeper.github import GitHubOperationError, PullRequestCreateOptions
from repokeeper.logging import get_logger, log_info, log_warning
from repokeeper.propagation import is_cancellation
from repokeeper.repos import LeafOutcome, RepositoryOperationError

if typ.TYPE_CHECKING:
    from repokeeper.execshell import ExecutionContext
    from repokeeper.workflow.state import Environment, RepositoryState

    from .models import TaskPlan

logger = get_logger(__name__)

TASK_DIRECTORY_PERMISSIONS = 0o755


class TaskExecutor:
    """Execute one plan against one repository."""

    def __init__(
        self, env: Environment, repository: RepositoryState, plan: TaskPlan
    ) -> None:
        """Bind the executor to its environment, repository and plan."""
        self._env = env
        self._repository = repository
        self._plan = plan

    @property
    def _path(self) -> str:
        return self._repository.path

    def _git(self, ctx: ExecutionContext, *arguments: str) -> None:
        self._env.executor.execute_git(
            ctx, CommandDetails.of(*arguments, cwd=self._path)
        )

    def _fail(self, action: str, exc: BaseException) -> RepositoryOperationError:
        return RepositoryOperationError.wrap(
            self._path, f"task {self._plan.task_name} {action}", exc
        )

    def execute(self, ctx: ExecutionContext) -> LeafOutcome:
        """Run the sequence; return ``skipped`` or ``applied``.

        Raises
        ------
        RepositoryOperationError
            If the worktree is dirty or a git, file or GitHub step fails.

        """
        plan = self._plan
        if plan.skipped:
            return LeafOutcome.SKIPPED

        manager = self._env.manager
        try:
            if plan.ensure_clean and not manager.check_clean_worktree(ctx, self._path):
                raise RepositoryOperationError(
                    self._path,
                    f"task {plan.task_name} requires a clean worktree in {self._path}",
                )
            if manager.branch_exists(ctx, self._path, plan.branch_name):
                self._env.say(
                    f"TASK-SKIP: {plan.task_name} {self._path} "
                    f"(branch {plan.branch_name} exists)"
                )
                return LeafOutcome.SKIPPED
            original_branch = manager.get_current_branch(ctx, self._path)
        except CommandFailedError as exc:
            raise self._fail("preparation", exc) from exc

        try:
            self._apply(ctx)
        except BaseException as exc:
            self._restore(ctx, original_branch, pending=exc)
            raise
        self._restore(ctx, original_branch, pending=None)
        self._env.say(
            f"TASK-APPLY: {plan.task_name} {self._path} branch={plan.branch_name}"
        )
        return LeafOutcome.APPLIED

    def _apply(self, ctx: ExecutionContext) -> None:
        plan = self._plan
        try:
            if plan.start_point:
                self._git(ctx, "checkout", plan.start_point)
                self._git(ctx, "checkout", "-B", plan.branch_name, plan.start_point)
            else:
                self._git(ctx, "checkout", "-B", plan.branch_name)
        except CommandFailedError as exc:
            raise self._fail("branch creation", exc) from exc

        file_system = self._env.file_system
        for change in plan.applicable_changes:
            try:
                file_system.mkdir_all(
                    str(Path(change.absolute_path).parent),
                    TASK_DIRECTORY_PERMISSIONS,
                )
                file_system.write_file(
                    change.absolute_path, change.content, change.permissions
                )
            except OSError as exc:
                raise self._fail(f"writing {change.relative_path}", exc) from exc

        try:
            for change in plan.applicable_changes:
                self._git(ctx, "add", change.relative_path)
            self._git(ctx, "commit", "-m", plan.commit_message)
            if plan.push_remote:
                self._git(
                    ctx, "push", "--set-upstream", plan.push_remote, plan.branch_name
                )
        except CommandFailedError as exc:
            raise self._fail("commit", exc) from exc

        if plan.pull_request is not None:
            self._open_pull_request(ctx)

    def _open_pull_request(self, ctx: ExecutionContext) -> None:
        plan = self._plan
        request = plan.pull_request
        if request is None:
            return
        inspection = self._repository.inspection
        repository = (
            inspection.final_owner_repo.strip()
            or inspection.canonical_owner_repo.strip()
            or inspection.origin_owner_repo.strip()
        )
        if not repository:
            raise RepositoryOperationError(
                self._path,
                f"task {plan.task_name} cannot open a pull request: owner/repo unknown",
            )
        try:
            url = self._env.github.create_pull_request(
                ctx,
                repository,
                PullRequestCreateOptions(
                    title=request.title or plan.commit_message,
                    body=request.body,
                    base=request.base,
                    head=plan.branch_name,
                    draft=request.draft,
                ),
                working_directory=self._path,
            )
        except GitHubOperationError as exc:
            raise self._fail("pull request", exc) from exc
        self._env.say(f"TASK-PR: {plan.task_name} {self._path} {url}")

    def _restore(
        self,
        ctx: ExecutionContext,
        branch: str,
        *,
        pending: BaseException | None,
    ) -> None:
        """Check ``branch`` out again.

        While another failure is propagating, a restore failure is only
        logged; otherwise it is raised as a repository error.
        """
        if not branch:
            return
        try:
            self._git(ctx, "checkout", branch)
        except (CommandFailedError, CommandExecutionError) as exc:
            if pending is None and not is_cancellation(exc):
                raise self._fail("branch restore", exc) from exc
            if pending is None:
                raise
            log_warning(
                logger, "could not restore %s to %s: %s", self._path, branch, exc
            )
        except Exception as exc:
            if pending is None:
                raise
            log_info(logger, "skipped restoring %s after failure: %s", self._path, exc)


__all__ = ["TASK_DIRECTORY_PERMISSIONS", "TaskExecutor"]
