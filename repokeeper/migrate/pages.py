"""Keep GitHub Pages publishing after the default branch moves."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from repokeeper.github import PagesSource

if typ.TYPE_CHECKING:
    from repokeeper.execshell import ExecutionContext
    from repokeeper.github import GitHubClient

LEGACY_BUILD_TYPE = "legacy"


@dc.dataclass(frozen=True, slots=True)
class PagesUpdateConfig:
    """Inputs for :meth:`PagesManager.ensure_legacy_branch`."""

    repository_identifier: str
    source_branch: str
    target_branch: str


class PagesManager:
    """Move branch-built Pages sites from the old branch to the new one."""

    def __init__(self, github: GitHubClient) -> None:
        """Bind to a GitHub client."""
        self._github = github

    def ensure_legacy_branch(
        self, ctx: ExecutionContext, config: PagesUpdateConfig
    ) -> bool:
        """Repoint Pages when it builds from ``source_branch``.

        Returns
        -------
        bool
            ``True`` when the Pages source was updated. Sites that are
            disabled, built by Actions or published from another branch are
            left alone.

        """
        pages = self._github.get_pages_config(ctx, config.repository_identifier)
        if not pages.enabled or pages.build_type not in {"", LEGACY_BUILD_TYPE}:
            return False
        if pages.source.branch != config.source_branch:
            return False
        self._github.update_pages_config(
            ctx,
            config.repository_identifier,
            PagesSource(branch=config.target_branch, path=pages.source.path or "/"),
        )
        return True
