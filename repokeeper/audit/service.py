"""Build :class:`RepositoryInspection` records for discovered repositories."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from repokeeper.common.slug import repo_name, slugs_match
from repokeeper.execshell import CommandDetails, CommandFailedError
from repokeeper.github import GitHubOperationError, ResponseDecodingError
from repokeeper.gitrepo import (
    GITHUB_HOST,
    RemoteProtocol,
    detect_protocol,
    owner_repo_from_remote,
)
from repokeeper.logging import get_logger, log_debug, log_warning

from .models import InspectionDepth, RepositoryInspection, Ternary

if typ.TYPE_CHECKING:
    from repokeeper.execshell import ExecutionContext, GitExecutor
    from repokeeper.github import GitHubClient
    from repokeeper.gitrepo import RepositoryManager
    from repokeeper.repos import RepositoryDiscoverer

logger = get_logger(__name__)


class InspectionProvider(typ.Protocol):
    """Source of repository inspections for the workflow engine."""

    def inspect(
        self,
        ctx: ExecutionContext,
        roots: typ.Sequence[str],
        depth: InspectionDepth = InspectionDepth.FULL,
    ) -> list[RepositoryInspection]: ...


class NotGitHubRemoteError(ValueError):
    """Raised when ``origin`` does not point at GitHub."""


class InspectionService:
    """Discover repositories and describe each of them.

    Repositories whose origin cannot be read, which are not hosted on GitHub
    or whose owner/repo cannot be determined are logged and left out.
    """

    def __init__(
        self,
        *,
        discoverer: RepositoryDiscoverer,
        executor: GitExecutor,
        manager: RepositoryManager,
        github: GitHubClient,
    ) -> None:
        """Wire the service to its collaborators."""
        self._discoverer = discoverer
        self._executor = executor
        self._manager = manager
        self._github = github

    def inspect(
        self,
        ctx: ExecutionContext,
        roots: typ.Sequence[str],
        depth: InspectionDepth = InspectionDepth.FULL,
    ) -> list[RepositoryInspection]:
        """Return inspections for repositories below ``roots`` in path order."""
        paths = self._discoverer.discover(roots)
        log_debug(logger, "discovered %d repositories under %s", len(paths), roots)
        inspections: list[RepositoryInspection] = []
        for path in paths:
            if not self._manager.is_work_tree(ctx, path):
                continue
            try:
                inspection = self.inspect_repository(ctx, path, depth)
            except (CommandFailedError, NotGitHubRemoteError) as exc:
                log_warning(logger, "skipping %s: %s", path, exc)
                continue
            if not inspection.origin_owner_repo and not inspection.canonical_owner_repo:
                log_warning(logger, "skipping %s: owner/repo not detected", path)
                continue
            inspections.append(inspection)
        return inspections

    def inspect_repository(
        self,
        ctx: ExecutionContext,
        path: str,
        depth: InspectionDepth = InspectionDepth.FULL,
    ) -> RepositoryInspection:
        """Inspect a single working copy.

        Raises
        ------
        CommandFailedError
            If ``origin`` cannot be read.
        NotGitHubRemoteError
            If ``origin`` is not a GitHub URL.

        """
        origin_url = self._manager.get_remote_url(ctx, path)
        if GITHUB_HOST not in origin_url.lower():
            msg = f"origin is not a GitHub remote: {origin_url}"
            raise NotGitHubRemoteError(msg)

        origin_owner_repo = owner_repo_from_remote(origin_url)
        protocol = detect_protocol(origin_url)
        canonical, default_branch = self._resolve_metadata(ctx, origin_owner_repo)
        if not default_branch:
            default_branch = self._default_branch_from_git(ctx, path)

        local_branch = ""
        in_sync = Ternary.NOT_APPLICABLE
        if depth is InspectionDepth.FULL:
            try:
                local_branch = self._manager.get_current_branch(ctx, path)
            except CommandFailedError:
                local_branch = ""
            else:
                in_sync = self._in_sync(
                    ctx, path, default_branch, local_branch, protocol
                )

        final_owner_repo = canonical or origin_owner_repo
        return RepositoryInspection(
            path=str(Path(path)),
            folder_name=Path(path).name,
            origin_url=origin_url,
            origin_owner_repo=origin_owner_repo,
            canonical_owner_repo=canonical,
            final_owner_repo=final_owner_repo,
            desired_folder_name=repo_name(final_owner_repo),
            remote_protocol=protocol,
            remote_default_branch=default_branch,
            local_branch=local_branch,
            in_sync_status=in_sync,
            origin_matches_canonical=_matches_canonical(origin_owner_repo, canonical),
        )

    def _resolve_metadata(
        self, ctx: ExecutionContext, owner_repo: str
    ) -> tuple[str, str]:
        if not owner_repo:
            return ("", "")
        try:
            metadata = self._github.resolve_repo_metadata(ctx, owner_repo)
        except (GitHubOperationError, ResponseDecodingError) as exc:
            log_warning(logger, "metadata lookup failed for %s: %s", owner_repo, exc)
            return ("", "")
        return (metadata.name_with_owner.strip(), metadata.default_branch.strip())

    def _git(self, ctx: ExecutionContext, path: str, *arguments: str) -> str:
        result = self._executor.execute_git(
            ctx, CommandDetails.of(*arguments, cwd=path)
        )
        return result.standard_output.strip()

    def _default_branch_from_git(self, ctx: ExecutionContext, path: str) -> str:
        try:
            output = self._git(ctx, path, "ls-remote", "--symref", "origin", "HEAD")
        except CommandFailedError:
            return ""
        for line in output.splitlines():
            if not line.startswith("ref:"):
                continue
            parts = line.split()
            if len(parts) >= 2:  # noqa: PLR2004
                return parts[1].removeprefix("refs/heads/")
        return ""

    def _in_sync(
        self,
        ctx: ExecutionContext,
        path: str,
        default_branch: str,
        local_branch: str,
        protocol: RemoteProtocol,
    ) -> Ternary:
        if not default_branch or not local_branch:
            return Ternary.NOT_APPLICABLE
        if default_branch.casefold() != local_branch.casefold():
            return Ternary.NOT_APPLICABLE
        if protocol not in {RemoteProtocol.GIT, RemoteProtocol.SSH}:
            return Ternary.NOT_APPLICABLE
        try:
            self._git(ctx, path, "fetch", "-q", "--no-tags", "origin", default_branch)
            head = self._git(ctx, path, "rev-parse", "HEAD")
            remote = self._git(ctx, path, "rev-parse", f"origin/{default_branch}")
        except CommandFailedError:
            return Ternary.NOT_APPLICABLE
        return Ternary.of(head == remote)


def _matches_canonical(origin: str, canonical: str) -> Ternary:
    if not origin.strip() or not canonical.strip():
        return Ternary.NOT_APPLICABLE
    return Ternary.of(slugs_match(origin, canonical))
