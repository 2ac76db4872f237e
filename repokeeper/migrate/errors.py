"""Errors raised by the branch migration service."""

from __future__ import annotations


class MigrationInputError(ValueError):
    """Raised when a required migration option is empty."""

    def __init__(self, field: str, message: str = "required") -> None:
        """Name the offending field."""
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class MigrationError(RuntimeError):
    """Base class for migration failures that stop the migration."""


class CleanWorktreeRequiredError(MigrationError):
    """Raised when the repository has uncommitted changes."""

    def __init__(self, repository_path: str) -> None:
        """Record the dirty repository."""
        self.repository_path = repository_path
        super().__init__("repository worktree must be clean before migration")


class WorkflowRewriteError(MigrationError):
    """Raised when workflow files cannot be read or written."""

    @classmethod
    def wrap(cls, cause: BaseException) -> WorkflowRewriteError:
        """Wrap the underlying I/O failure."""
        return cls(f"workflow rewrite failed: {cause}")


class MigrationStepError(MigrationError):
    """Raised when a git step of the migration fails."""

    @classmethod
    def stage(cls, cause: BaseException) -> MigrationStepError:
        """Return an error for ``git add`` failing."""
        return cls(f"unable to stage workflow updates: {cause}")

    @classmethod
    def push(cls, cause: BaseException) -> MigrationStepError:
        """Return an error for ``git push`` failing."""
        return cls(f"unable to push workflow updates: {cause}")

    @classmethod
    def list_pull_requests(cls, cause: BaseException) -> MigrationStepError:
        """Return an error for the open pull request lookup failing."""
        return cls(f"unable to list pull requests: {cause}")


class DefaultBranchUpdateError(MigrationError):
    """Raised when GitHub refuses the new default branch."""

    def __init__(
        self,
        *,
        repository_path: str,
        repository_identifier: str,
        source_branch: str,
        target_branch: str,
        cause: str,
    ) -> None:
        """Record everything needed to retry the update by hand."""
        self.repository_path = repository_path
        self.repository_identifier = repository_identifier
        self.source_branch = source_branch
        self.target_branch = target_branch
        self.cause = cause
        super().__init__(
            f"unable to update default branch for {repository_identifier} "
            f"({repository_path}) from {source_branch} to {target_branch}: {cause}"
        )
