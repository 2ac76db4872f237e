"""Move a repository's default branch and report whether the old one can go.

The migration runs in a fixed order:

1. validate options and require a clean worktree;
2. rewrite CI workflow branch filters, commit them and optionally push;
3. keep GitHub Pages pointing at the new branch (best effort);
4. set the new default branch on GitHub (must succeed);
5. retarget open pull requests (best effort, one by one);
6. check protection of the old branch (best effort);
7. evaluate the deletion safety gates.

Best-effort failures become ``PAGES-SKIP``, ``PR-RETARGET-SKIP`` and
``PROTECTION-SKIP`` warnings on the result.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from repokeeper.execshell import CommandDetails, CommandFailedError
from repokeeper.github import GitHubOperationError, PullRequestListOptions
from repokeeper.logging import get_logger, log_info, log_warning
from repokeeper.propagation import Severity, classify_error

from .errors import (
    CleanWorktreeRequiredError,
    DefaultBranchUpdateError,
    MigrationInputError,
    MigrationStepError,
    WorkflowRewriteError,
)
from .models import (
    BranchProtection,
    MigrationOptions,
    MigrationResult,
    SafetyInputs,
    WorkflowOutcome,
    WorkflowRewriteConfig,
)
from .pages import PagesManager, PagesUpdateConfig
from .safety import SafetyEvaluator
from .workflows import WorkflowRewriter

if typ.TYPE_CHECKING:
    from repokeeper.execshell import ExecutionContext, GitExecutor
    from repokeeper.github import GitHubClient, PullRequest
    from repokeeper.gitrepo import RepositoryManager

logger = get_logger(__name__)

PULL_REQUEST_QUERY_LIMIT = 100
WORKFLOW_COMMIT_MESSAGE = "CI: switch workflow branch filters to {target}"

_REQUIRED_FIELDS: tuple[tuple[str, str], ...] = (
    ("repository_path", "repository_path"),
    ("remote_name", "remote_name"),
    ("repository_identifier", "repository_identifier"),
    ("workflows_directory", "workflows_directory"),
    ("source_branch", "source_branch"),
    ("target_branch", "target_branch"),
)

T = typ.TypeVar("T")


@dc.dataclass(slots=True)
class _Advisories:
    """Warnings collected from best-effort steps."""

    warnings: list[str] = dc.field(default_factory=list)

    def attempt(
        self, tag: str, subject: str, step: typ.Callable[[], T]
    ) -> tuple[bool, T | None]:
        """Run ``step``; advisory failures become a ``tag`` warning."""
        try:
            return (True, step())
        except Exception as exc:
            if classify_error(exc, best_effort=True) is not Severity.ADVISORY:
                raise
            warning = f"{tag}: {subject}: {exc}"
            log_warning(logger, "%s", warning)
            self.warnings.append(warning)
            return (False, None)


class MigrationService:
    """Run branch migrations for one repository at a time."""

    def __init__(
        self,
        *,
        executor: GitExecutor,
        manager: RepositoryManager,
        github: GitHubClient,
        rewriter: WorkflowRewriter | None = None,
        pages: PagesManager | None = None,
        safety: SafetyEvaluator | None = None,
    ) -> None:
        """Wire the service; rewriter, Pages manager and evaluator default."""
        self._executor = executor
        self._manager = manager
        self._github = github
        self._rewriter = rewriter or WorkflowRewriter()
        self._pages = pages or PagesManager(github)
        self._safety = safety or SafetyEvaluator()

    def execute(
        self, ctx: ExecutionContext, options: MigrationOptions
    ) -> MigrationResult:
        """Migrate ``options.source_branch`` to ``options.target_branch``.

        Raises
        ------
        MigrationInputError
            If a required option is empty.
        CleanWorktreeRequiredError
            If the worktree has uncommitted changes.
        WorkflowRewriteError, MigrationStepError
            If workflow files cannot be rewritten, staged or pushed, or open
            pull requests cannot be listed.
        DefaultBranchUpdateError
            If GitHub rejects the new default branch.

        """
        _validate(options)
        if not self._manager.check_clean_worktree(ctx, options.repository_path):
            raise CleanWorktreeRequiredError(options.repository_path)

        outcome = self._rewrite(ctx, options)
        committed = self._commit(ctx, options, outcome)
        if committed and options.push_updates:
            self._push(ctx, options)

        identifier = options.repository_identifier
        advisories = _Advisories()
        _, pages_updated = advisories.attempt(
            "PAGES-SKIP",
            identifier,
            lambda: self._pages.ensure_legacy_branch(
                ctx,
                PagesUpdateConfig(
                    repository_identifier=identifier,
                    source_branch=options.source_branch,
                    target_branch=options.target_branch,
                ),
            ),
        )

        self._set_default_branch(ctx, options)

        pull_requests = self._open_pull_requests(ctx, options)
        retargeted: list[int] = []
        for pull_request in pull_requests:
            succeeded, _ = advisories.attempt(
                "PR-RETARGET-SKIP",
                f"{identifier}#{pull_request.number}",
                lambda number=pull_request.number: (
                    self._github.update_pull_request_base(
                        ctx, identifier, number, options.target_branch
                    )
                ),
            )
            if succeeded:
                retargeted.append(pull_request.number)

        protection = self._branch_protection(ctx, options, advisories)
        status = self._safety.evaluate(
            SafetyInputs(
                open_pull_request_count=len(pull_requests),
                branch_protection=protection,
                workflow_mentions=outcome.remaining_main_references,
            )
        )
        return MigrationResult(
            workflow_outcome=outcome,
            workflow_committed=committed,
            pages_configuration_updated=bool(pages_updated),
            default_branch_updated=True,
            retargeted_pull_requests=tuple(retargeted),
            safety_status=status,
            warnings=tuple(advisories.warnings),
        )

    def _rewrite(
        self, ctx: ExecutionContext, options: MigrationOptions
    ) -> WorkflowOutcome:
        try:
            return self._rewriter.rewrite(
                ctx,
                WorkflowRewriteConfig(
                    repository_path=options.repository_path,
                    workflows_directory=options.workflows_directory,
                    source_branch=options.source_branch,
                    target_branch=options.target_branch,
                ),
            )
        except (OSError, UnicodeDecodeError) as exc:
            raise WorkflowRewriteError.wrap(exc) from exc

    def _commit(
        self,
        ctx: ExecutionContext,
        options: MigrationOptions,
        outcome: WorkflowOutcome,
    ) -> bool:
        if not outcome.updated_files:
            return False
        path = options.repository_path
        try:
            self._executor.execute_git(
                ctx,
                CommandDetails.of("add", "-A", options.workflows_directory, cwd=path),
            )
        except CommandFailedError as exc:
            raise MigrationStepError.stage(exc) from exc

        message = WORKFLOW_COMMIT_MESSAGE.format(target=options.target_branch)
        try:
            self._executor.execute_git(
                ctx, CommandDetails.of("commit", "-m", message, cwd=path)
            )
        except CommandFailedError:
            log_info(
                logger,
                "No workflow changes to commit in %s (%s)",
                path,
                options.workflows_directory,
            )
            return False
        return True

    def _push(self, ctx: ExecutionContext, options: MigrationOptions) -> None:
        try:
            self._executor.execute_git(
                ctx,
                CommandDetails.of(
                    "push",
                    options.remote_name,
                    options.target_branch,
                    cwd=options.repository_path,
                ),
            )
        except CommandFailedError as exc:
            raise MigrationStepError.push(exc) from exc

    def _set_default_branch(
        self, ctx: ExecutionContext, options: MigrationOptions
    ) -> None:
        try:
            self._github.set_default_branch(
                ctx, options.repository_identifier, options.target_branch
            )
        except GitHubOperationError as exc:
            raise DefaultBranchUpdateError(
                repository_path=options.repository_path,
                repository_identifier=options.repository_identifier,
                source_branch=options.source_branch,
                target_branch=options.target_branch,
                cause=str(exc),
            ) from exc

    def _open_pull_requests(
        self, ctx: ExecutionContext, options: MigrationOptions
    ) -> list[PullRequest]:
        try:
            return self._github.list_pull_requests(
                ctx,
                options.repository_identifier,
                PullRequestListOptions(
                    base_branch=options.source_branch, limit=PULL_REQUEST_QUERY_LIMIT
                ),
            )
        except GitHubOperationError as exc:
            raise MigrationStepError.list_pull_requests(exc) from exc

    def _branch_protection(
        self,
        ctx: ExecutionContext,
        options: MigrationOptions,
        advisories: _Advisories,
    ) -> BranchProtection:
        succeeded, protected = advisories.attempt(
            "PROTECTION-SKIP",
            f"{options.repository_identifier}@{options.source_branch}",
            lambda: self._github.check_branch_protection(
                ctx, options.repository_identifier, options.source_branch
            ),
        )
        if not succeeded:
            return BranchProtection.UNKNOWN
        return BranchProtection.PROTECTED if protected else BranchProtection.UNPROTECTED


def _validate(options: MigrationOptions) -> None:
    for attribute, field in _REQUIRED_FIELDS:
        if not str(getattr(options, attribute)).strip():
            raise MigrationInputError(field)
