"""msgspec models for ``gh`` JSON output."""

from __future__ import annotations

import enum

import msgspec


class PullRequestState(enum.StrEnum):
    """Pull request states accepted by ``gh pr list --state``."""

    OPEN = "open"
    CLOSED = "closed"
    MERGED = "merged"
    ALL = "all"


class BranchRef(msgspec.Struct, kw_only=True):
    """Reference to a branch by name."""

    name: str = ""


class RepositoryMetadata(msgspec.Struct, kw_only=True, rename="camel"):
    """Fields returned by ``gh repo view --json``.

    Attributes
    ----------
    name_with_owner
        Canonical ``owner/name`` after GitHub resolves renames and transfers.
    default_branch_ref
        The repository's default branch.
    description
        Free-form repository description.

    """

    name_with_owner: str = ""
    default_branch_ref: BranchRef = msgspec.field(default_factory=BranchRef)
    description: str = ""

    @property
    def default_branch(self) -> str:
        """Name of the default branch."""
        return self.default_branch_ref.name


class PullRequest(msgspec.Struct, kw_only=True, rename="camel"):
    """A pull request summary from ``gh pr list``."""

    number: int
    title: str = ""
    head_ref_name: str = ""


class PagesSource(msgspec.Struct, kw_only=True):
    """Branch and path GitHub Pages builds from."""

    branch: str = ""
    path: str = "/"


class PagesConfiguration(msgspec.Struct, kw_only=True):
    """GitHub Pages settings for a repository.

    ``enabled`` is ``False`` when the Pages endpoint answers 404.
    """

    enabled: bool = True
    build_type: str = ""
    source: PagesSource = msgspec.field(default_factory=PagesSource)


class BranchStatus(msgspec.Struct, kw_only=True):
    """Subset of the REST branch payload."""

    name: str = ""
    protected: bool = False


class PullRequestListOptions(msgspec.Struct, kw_only=True, frozen=True):
    """Filters for :meth:`GitHubCLIClient.list_pull_requests`."""

    state: PullRequestState = PullRequestState.OPEN
    base_branch: str = ""
    limit: int = 100


class PullRequestCreateOptions(msgspec.Struct, kw_only=True, frozen=True):
    """Inputs for :meth:`GitHubCLIClient.create_pull_request`."""

    title: str
    body: str = ""
    base: str
    head: str
    draft: bool = False
