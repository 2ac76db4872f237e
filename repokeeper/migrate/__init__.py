"""Default-branch migration with workflow rewriting and safety gates.

Example
-------
>>> from repokeeper.migrate import MigrationOptions, MigrationService
>>> service = MigrationService(executor=executor, manager=manager, github=client)
>>> result = service.execute(
...     ctx,
...     MigrationOptions(
...         repository_path="/src/sample",
...         remote_name="origin",
...         repository_identifier="octocat/sample",
...         workflows_directory=".github/workflows",
...         source_branch="main",
...         target_branch="master",
...     ),
... )
>>> result.safety_status.safe_to_delete
False
"""

from __future__ import annotations

from .errors import (
    CleanWorktreeRequiredError,
    DefaultBranchUpdateError,
    MigrationError,
    MigrationInputError,
    MigrationStepError,
    WorkflowRewriteError,
)
from .models import (
    BranchProtection,
    MigrationOptions,
    MigrationResult,
    SafetyInputs,
    SafetyStatus,
    WorkflowOutcome,
    WorkflowRewriteConfig,
)
from .pages import PagesManager, PagesUpdateConfig
from .safety import SafetyEvaluator
from .service import MigrationService
from .workflows import WorkflowPatterns, WorkflowRewriter, rewrite_content

__all__ = [
    "BranchProtection",
    "CleanWorktreeRequiredError",
    "DefaultBranchUpdateError",
    "MigrationError",
    "MigrationInputError",
    "MigrationOptions",
    "MigrationResult",
    "MigrationService",
    "MigrationStepError",
    "PagesManager",
    "PagesUpdateConfig",
    "SafetyEvaluator",
    "SafetyInputs",
    "SafetyStatus",
    "WorkflowOutcome",
    "WorkflowPatterns",
    "WorkflowRewriteConfig",
    "WorkflowRewriter",
    "rewrite_content",
]
