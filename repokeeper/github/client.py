"""GitHub operations implemented on top of the ``gh`` CLI.

The client never talks HTTP itself: every call is a ``gh`` invocation run
through a :class:`~repokeeper.execshell.GitExecutor`, and JSON output is
decoded into msgspec models.
"""

from __future__ import annotations

import typing as typ

import msgspec

from repokeeper.execshell import CommandDetails, CommandFailedError
from repokeeper.logging import get_logger, log_debug

from .errors import (
    GitHubOperationError,
    InvalidInputError,
    PayloadEncodingError,
    ResponseDecodingError,
)
from .models import (
    BranchStatus,
    PagesConfiguration,
    PagesSource,
    PullRequest,
    PullRequestCreateOptions,
    PullRequestListOptions,
    RepositoryMetadata,
)

if typ.TYPE_CHECKING:
    from repokeeper.execshell import ExecutionContext, ExecutionResult, GitExecutor

logger = get_logger(__name__)

_ACCEPT_HEADER = "Accept: application/vnd.github+json"
_REPO_VIEW_FIELDS = "defaultBranchRef,nameWithOwner,description"
_PULL_REQUEST_FIELDS = "number,title,headRefName"

T = typ.TypeVar("T")


class GitHubClient(typ.Protocol):
    """GitHub operations the workflow engine depends on."""

    def resolve_repo_metadata(
        self, ctx: ExecutionContext, repository: str
    ) -> RepositoryMetadata: ...

    def list_pull_requests(
        self,
        ctx: ExecutionContext,
        repository: str,
        options: PullRequestListOptions,
    ) -> list[PullRequest]: ...

    def update_pull_request_base(
        self, ctx: ExecutionContext, repository: str, number: int, base: str
    ) -> None: ...

    def set_default_branch(
        self, ctx: ExecutionContext, repository: str, branch: str
    ) -> None: ...

    def check_branch_protection(
        self, ctx: ExecutionContext, repository: str, branch: str
    ) -> bool: ...

    def get_pages_config(
        self, ctx: ExecutionContext, repository: str
    ) -> PagesConfiguration: ...

    def update_pages_config(
        self, ctx: ExecutionContext, repository: str, source: PagesSource
    ) -> None: ...

    def create_pull_request(
        self,
        ctx: ExecutionContext,
        repository: str,
        options: PullRequestCreateOptions,
        *,
        working_directory: str | None = None,
    ) -> str: ...


def _require(field: str, value: str) -> str:
    stripped = value.strip()
    if not stripped:
        raise InvalidInputError(field)
    return stripped


class GitHubCLIClient:
    """:class:`GitHubClient` backed by ``gh``.

    Failed invocations raise :class:`GitHubOperationError`; cancellation and
    timeouts raised by the executor propagate unchanged.
    """

    def __init__(self, executor: GitExecutor) -> None:
        """Bind the client to ``executor``."""
        self._executor = executor

    def _run(
        self,
        ctx: ExecutionContext,
        operation: str,
        *arguments: str,
        stdin: str | None = None,
        cwd: str | None = None,
    ) -> ExecutionResult:
        log_debug(logger, "gh %s: %s", operation, " ".join(arguments))
        try:
            return self._executor.execute_github_cli(
                ctx, CommandDetails.of(*arguments, cwd=cwd, stdin=stdin)
            )
        except CommandFailedError as exc:
            raise GitHubOperationError.from_command(operation, exc) from exc

    @staticmethod
    def _decode(operation: str, raw: str, model: type[T]) -> T:
        try:
            return msgspec.json.decode(raw.strip() or "null", type=model)
        except (msgspec.DecodeError, msgspec.ValidationError) as exc:
            raise ResponseDecodingError(operation, str(exc)) from exc

    def resolve_repo_metadata(
        self, ctx: ExecutionContext, repository: str
    ) -> RepositoryMetadata:
        """Return canonical name, default branch and description."""
        repository = _require("repository", repository)
        result = self._run(
            ctx, "repo view", "repo", "view", repository, "--json", _REPO_VIEW_FIELDS
        )
        return self._decode("repo view", result.standard_output, RepositoryMetadata)

    def list_pull_requests(
        self,
        ctx: ExecutionContext,
        repository: str,
        options: PullRequestListOptions,
    ) -> list[PullRequest]:
        """List pull requests filtered by state and base branch."""
        repository = _require("repository", repository)
        base_branch = _require("base_branch", options.base_branch)
        result = self._run(
            ctx,
            "pr list",
            "pr",
            "list",
            "--repo",
            repository,
            "--state",
            options.state.value,
            "--base",
            base_branch,
            "--json",
            _PULL_REQUEST_FIELDS,
            "--limit",
            str(options.limit),
        )
        return self._decode("pr list", result.standard_output, list[PullRequest])

    def update_pull_request_base(
        self, ctx: ExecutionContext, repository: str, number: int, base: str
    ) -> None:
        """Retarget pull request ``number`` onto ``base``."""
        repository = _require("repository", repository)
        base = _require("base_branch", base)
        self._run(
            ctx,
            "pr edit",
            "pr",
            "edit",
            str(number),
            "--repo",
            repository,
            "--base",
            base,
        )

    def set_default_branch(
        self, ctx: ExecutionContext, repository: str, branch: str
    ) -> None:
        """Make ``branch`` the repository's default branch."""
        repository = _require("repository", repository)
        branch = _require("branch", branch)
        self._run(
            ctx, "repo edit", "repo", "edit", repository, "--default-branch", branch
        )

    def check_branch_protection(
        self, ctx: ExecutionContext, repository: str, branch: str
    ) -> bool:
        """Return whether ``branch`` is protected."""
        repository = _require("repository", repository)
        branch = _require("source_branch", branch)
        result = self._run(
            ctx,
            "branch protection",
            "api",
            f"repos/{repository}/branches/{branch}",
            "-H",
            _ACCEPT_HEADER,
        )
        status = self._decode("branch protection", result.standard_output, BranchStatus)
        return status.protected

    def get_pages_config(
        self, ctx: ExecutionContext, repository: str
    ) -> PagesConfiguration:
        """Return the Pages configuration; disabled Pages is not an error."""
        repository = _require("repository", repository)
        try:
            result = self._run(
                ctx,
                "pages view",
                "api",
                f"repos/{repository}/pages",
                "-H",
                _ACCEPT_HEADER,
            )
        except GitHubOperationError as exc:
            if exc.not_found:
                return PagesConfiguration(enabled=False)
            raise
        return self._decode("pages view", result.standard_output, PagesConfiguration)

    def update_pages_config(
        self, ctx: ExecutionContext, repository: str, source: PagesSource
    ) -> None:
        """Point GitHub Pages at ``source``."""
        repository = _require("repository", repository)
        _require("source_branch", source.branch)
        try:
            payload = msgspec.json.encode({"source": source}).decode("utf-8")
        except (msgspec.EncodeError, TypeError) as exc:
            raise PayloadEncodingError("pages update", str(exc)) from exc
        self._run(
            ctx,
            "pages update",
            "api",
            f"repos/{repository}/pages",
            "-X",
            "PUT",
            "--input",
            "-",
            "-H",
            _ACCEPT_HEADER,
            stdin=payload,
        )

    def create_pull_request(
        self,
        ctx: ExecutionContext,
        repository: str,
        options: PullRequestCreateOptions,
        *,
        working_directory: str | None = None,
    ) -> str:
        """Open a pull request and return the URL printed by ``gh``."""
        repository = _require("repository", repository)
        arguments = [
            "pr",
            "create",
            "--repo",
            repository,
            "--base",
            _require("base_branch", options.base),
            "--head",
            _require("head_branch", options.head),
            "--title",
            _require("title", options.title),
            "--body",
            options.body,
        ]
        if options.draft:
            arguments.append("--draft")
        result = self._run(ctx, "pr create", *arguments, cwd=working_directory)
        return result.standard_output.strip()
