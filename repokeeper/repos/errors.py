"""Errors raised by per-repository leaf operations."""

from __future__ import annotations


class RepositoryOperationError(RuntimeError):
    """A failure confined to one repository.

    Workflow operations report these to the error sink and move on to the
    next repository instead of aborting the run.
    """

    def __init__(self, repository_path: str, message: str) -> None:
        """Record the repository the failure belongs to."""
        self.repository_path = repository_path
        self.message = message
        super().__init__(message)

    @classmethod
    def wrap(
        cls, repository_path: str, action: str, cause: BaseException
    ) -> RepositoryOperationError:
        """Build an error for ``action`` failing because of ``cause``."""
        return cls(repository_path, f"{action} failed for {repository_path}: {cause}")
