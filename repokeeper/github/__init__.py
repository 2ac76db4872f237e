"""GitHub access through the ``gh`` command-line client.

Example
-------
>>> from repokeeper.execshell import ExecutionContext, ShellExecutor
>>> from repokeeper.github import GitHubCLIClient
>>> client = GitHubCLIClient(ShellExecutor())
>>> metadata = client.resolve_repo_metadata(
...     ExecutionContext.background(), "octocat/hello-world"
... )
>>> metadata.default_branch
'main'
"""

from __future__ import annotations

from .client import GitHubClient, GitHubCLIClient
from .errors import (
    GitHubOperationError,
    InvalidInputError,
    PayloadEncodingError,
    ResponseDecodingError,
)
from .models import (
    BranchRef,
    BranchStatus,
    PagesConfiguration,
    PagesSource,
    PullRequest,
    PullRequestCreateOptions,
    PullRequestListOptions,
    PullRequestState,
    RepositoryMetadata,
)

__all__ = [
    "BranchRef",
    "BranchStatus",
    "GitHubCLIClient",
    "GitHubClient",
    "GitHubOperationError",
    "InvalidInputError",
    "PagesConfiguration",
    "PagesSource",
    "PayloadEncodingError",
    "PullRequest",
    "PullRequestCreateOptions",
    "PullRequestListOptions",
    "PullRequestState",
    "RepositoryMetadata",
    "ResponseDecodingError",
]
