"""How failures travel through a workflow run.

Every failure falls into one of three severities:

``advisory``
    A best-effort step failed; the caller records a warning and carries on.
``recoverable``
    One repository could not be processed; the operation reports it and
    moves to the next repository.
``fatal``
    The run stops. Cancellation and deadline errors are always fatal.

Callers ask :func:`classify_error` instead of inspecting exception types
themselves, so the policy lives in one place.
"""

from __future__ import annotations

import enum

from repokeeper.execshell import (
    CommandExecutionError,
    CommandFailedError,
    CommandTimeoutError,
    ExecutionCancelledError,
)
from repokeeper.github import (
    GitHubOperationError,
    InvalidInputError,
    PayloadEncodingError,
    ResponseDecodingError,
)
from repokeeper.repos import RepositoryOperationError

_CANCELLATION_TYPES: tuple[type[BaseException], ...] = (
    ExecutionCancelledError,
    CommandTimeoutError,
    KeyboardInterrupt,
)

_BEST_EFFORT_TYPES: tuple[type[BaseException], ...] = (
    GitHubOperationError,
    ResponseDecodingError,
    PayloadEncodingError,
    InvalidInputError,
    CommandFailedError,
    CommandExecutionError,
)


class Severity(enum.StrEnum):
    """Propagation class of a failure."""

    ADVISORY = "advisory"
    RECOVERABLE = "recoverable"
    FATAL = "fatal"


def is_cancellation(exc: BaseException) -> bool:
    """Whether ``exc`` means the run was cancelled or ran out of time."""
    return isinstance(exc, _CANCELLATION_TYPES)


def classify_error(exc: BaseException, *, best_effort: bool = False) -> Severity:
    """Classify ``exc`` for the step that raised it.

    Parameters
    ----------
    exc
        The failure.
    best_effort
        ``True`` when the failing step is advisory (Pages continuity, pull
        request retargeting, branch-protection lookup).

    Returns
    -------
    Severity
        ``fatal`` for cancellation regardless of ``best_effort``;
        ``advisory`` for command and GitHub failures in best-effort steps;
        ``recoverable`` for :class:`RepositoryOperationError`; ``fatal``
        otherwise.

    """
    if is_cancellation(exc):
        return Severity.FATAL
    if best_effort and isinstance(exc, _BEST_EFFORT_TYPES):
        return Severity.ADVISORY
    if isinstance(exc, RepositoryOperationError):
        return Severity.RECOVERABLE
    return Severity.FATAL


__all__ = ["Severity", "classify_error", "is_cancellation"]
