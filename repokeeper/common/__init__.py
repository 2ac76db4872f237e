"""Small helpers shared across repokeeper packages."""

from __future__ import annotations

from .slug import parse_repo_slug, repo_name, repo_slug, slugs_match

__all__ = ["parse_repo_slug", "repo_name", "repo_slug", "slugs_match"]
