"""Unit tests for RepositoryManager."""

from __future__ import annotations

import typing as typ

from repokeeper.gitrepo import RepositoryManager

if typ.TYPE_CHECKING:
    from repokeeper.execshell import ExecutionContext
    from tests.unit.fakes import RecordingGitExecutor


class TestRepositoryManager:
    """Tests for the git queries used across operations."""

    def test_clean_worktree_checks_porcelain_status(
        self, ctx: ExecutionContext, git_executor: RecordingGitExecutor
    ) -> None:
        """Any porcelain output means the worktree is dirty."""
        manager = RepositoryManager(git_executor)
        assert manager.check_clean_worktree(ctx, "/src/demo") is True

        git_executor.on_git("status", "--porcelain", stdout=" M README.md\n")
        assert manager.check_clean_worktree(ctx, "/src/demo") is False
        assert git_executor.commands[0].details.working_directory == "/src/demo"

    def test_current_branch_and_remote_url_are_stripped(
        self, ctx: ExecutionContext, git_executor: RecordingGitExecutor
    ) -> None:
        """Trailing newlines are removed from git output."""
        git_executor.on_git("rev-parse", "--abbrev-ref", "HEAD", stdout="main\n")
        git_executor.on_git(
            "remote", "get-url", "origin", stdout="git@github.com:octo/demo.git\n"
        )
        manager = RepositoryManager(git_executor)

        assert manager.get_current_branch(ctx, "/src/demo") == "main"
        assert (
            manager.get_remote_url(ctx, "/src/demo") == "git@github.com:octo/demo.git"
        )

    def test_set_remote_url_targets_origin_by_default(
        self, ctx: ExecutionContext, git_executor: RecordingGitExecutor
    ) -> None:
        """set_remote_url issues ``git remote set-url origin URL``."""
        RepositoryManager(git_executor).set_remote_url(
            ctx, "/src/demo", "https://github.com/octo/demo.git"
        )

        assert git_executor.git_arguments == [
            ("remote", "set-url", "origin", "https://github.com/octo/demo.git")
        ]

    def test_branch_exists_maps_failures_to_false(
        self, ctx: ExecutionContext, git_executor: RecordingGitExecutor
    ) -> None:
        """A failed rev-parse means the branch is absent."""
        git_executor.on_git("rev-parse", "--verify", "gone", exit_code=128)
        manager = RepositoryManager(git_executor)

        assert manager.branch_exists(ctx, "/src/demo", "main") is True
        assert manager.branch_exists(ctx, "/src/demo", "gone") is False

    def test_is_work_tree(
        self, ctx: ExecutionContext, git_executor: RecordingGitExecutor
    ) -> None:
        """Only a literal ``true`` counts as a work tree."""
        git_executor.on_git("rev-parse", "--is-inside-work-tree", stdout="true\n")
        manager = RepositoryManager(git_executor)
        assert manager.is_work_tree(ctx, "/src/demo") is True

        git_executor.on_git("rev-parse", "--is-inside-work-tree", exit_code=128)
        assert manager.is_work_tree(ctx, "/src/demo") is False

    def test_remote_head_branch_strips_remote_prefix(
        self, ctx: ExecutionContext, git_executor: RecordingGitExecutor
    ) -> None:
        """The symbolic ref is reported without ``origin/``."""
        git_executor.on_git(
            "symbolic-ref",
            "--short",
            "refs/remotes/origin/HEAD",
            stdout="origin/trunk\n",
        )
        manager = RepositoryManager(git_executor)

        assert manager.remote_head_branch(ctx, "/src/demo") == "trunk"
        assert manager.remote_head_branch(ctx, "/src/demo", "upstream") == ""
