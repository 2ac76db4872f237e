"""Repository-level git queries and mutations."""

from __future__ import annotations

import typing as typ

from repokeeper.execshell import CommandDetails, CommandFailedError

if typ.TYPE_CHECKING:
    from pathlib import Path

    from repokeeper.execshell import ExecutionContext, GitExecutor

DEFAULT_REMOTE_NAME = "origin"


class RepositoryManager:
    """Answer questions about a working copy by running git.

    Parameters
    ----------
    executor:
        Executor used for every git call.

    """

    def __init__(self, executor: GitExecutor) -> None:
        """Bind the manager to ``executor``."""
        self._executor = executor

    def _git(
        self, ctx: ExecutionContext, path: str | Path, *arguments: str
    ) -> str:
        result = self._executor.execute_git(
            ctx, CommandDetails.of(*arguments, cwd=path)
        )
        return result.standard_output.strip()

    def check_clean_worktree(self, ctx: ExecutionContext, path: str | Path) -> bool:
        """Return ``True`` when ``git status --porcelain`` prints nothing."""
        return not self._git(ctx, path, "status", "--porcelain")

    def get_current_branch(self, ctx: ExecutionContext, path: str | Path) -> str:
        """Return the checked-out branch name (``HEAD`` when detached)."""
        return self._git(ctx, path, "rev-parse", "--abbrev-ref", "HEAD")

    def get_remote_url(
        self,
        ctx: ExecutionContext,
        path: str | Path,
        remote: str = DEFAULT_REMOTE_NAME,
    ) -> str:
        """Return the URL configured for ``remote``."""
        return self._git(ctx, path, "remote", "get-url", remote)

    def set_remote_url(
        self,
        ctx: ExecutionContext,
        path: str | Path,
        url: str,
        remote: str = DEFAULT_REMOTE_NAME,
    ) -> None:
        """Point ``remote`` at ``url``."""
        self._git(ctx, path, "remote", "set-url", remote, url)

    def branch_exists(
        self, ctx: ExecutionContext, path: str | Path, branch: str
    ) -> bool:
        """Return ``True`` when ``git rev-parse --verify`` resolves ``branch``."""
        try:
            self._git(ctx, path, "rev-parse", "--verify", branch)
        except CommandFailedError:
            return False
        return True

    def is_work_tree(self, ctx: ExecutionContext, path: str | Path) -> bool:
        """Return ``True`` when ``path`` is inside a git work tree."""
        try:
            output = self._git(ctx, path, "rev-parse", "--is-inside-work-tree")
        except CommandFailedError:
            return False
        return output == "true"

    def remote_head_branch(
        self,
        ctx: ExecutionContext,
        path: str | Path,
        remote: str = DEFAULT_REMOTE_NAME,
    ) -> str:
        """Return the branch ``refs/remotes/<remote>/HEAD`` points at, or ``""``."""
        try:
            output = self._git(
                ctx, path, "symbolic-ref", "--short", f"refs/remotes/{remote}/HEAD"
            )
        except CommandFailedError:
            return ""
        return output.removeprefix(f"{remote}/")
