"""Inputs and outputs of a branch migration."""

from __future__ import annotations

import dataclasses as dc
import enum


class BranchProtection(enum.StrEnum):
    """Protection state of the source branch; ``unknown`` blocks deletion."""

    PROTECTED = "protected"
    UNPROTECTED = "unprotected"
    UNKNOWN = "unknown"


@dc.dataclass(frozen=True, slots=True)
class MigrationOptions:
    """What to migrate and where.

    Attributes
    ----------
    repository_path
        Working copy to migrate.
    remote_name
        Remote to push workflow updates to.
    repository_identifier
        GitHub ``owner/repo``.
    workflows_directory
        Directory holding CI workflow files, relative to the repository.
    source_branch
        Current default branch.
    target_branch
        New default branch.
    push_updates
        Push the workflow commit to ``remote_name``.

    """

    repository_path: str
    remote_name: str
    repository_identifier: str
    workflows_directory: str
    source_branch: str
    target_branch: str
    push_updates: bool = True


@dc.dataclass(frozen=True, slots=True)
class WorkflowRewriteConfig:
    """Inputs for :meth:`WorkflowRewriter.rewrite`."""

    repository_path: str
    workflows_directory: str
    source_branch: str
    target_branch: str


@dc.dataclass(frozen=True, slots=True)
class WorkflowOutcome:
    """Result of rewriting workflow files.

    ``updated_files`` are repository-relative POSIX paths.
    """

    updated_files: tuple[str, ...] = ()
    remaining_main_references: bool = False


@dc.dataclass(frozen=True, slots=True)
class SafetyInputs:
    """Facts the safety evaluator needs."""

    open_pull_request_count: int = 0
    branch_protection: BranchProtection = BranchProtection.UNPROTECTED
    workflow_mentions: bool = False


@dc.dataclass(frozen=True, slots=True)
class SafetyStatus:
    """Whether the source branch can be deleted, and why not."""

    blocking_reasons: tuple[str, ...] = ()

    @property
    def safe_to_delete(self) -> bool:
        """``True`` exactly when nothing blocks deletion."""
        return not self.blocking_reasons


@dc.dataclass(frozen=True, slots=True)
class MigrationResult:
    """Everything a migration changed or learned."""

    workflow_outcome: WorkflowOutcome = dc.field(default_factory=WorkflowOutcome)
    workflow_committed: bool = False
    pages_configuration_updated: bool = False
    default_branch_updated: bool = False
    retargeted_pull_requests: tuple[int, ...] = ()
    safety_status: SafetyStatus = dc.field(default_factory=SafetyStatus)
    warnings: tuple[str, ...] = ()
