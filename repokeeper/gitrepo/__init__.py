"""Git working-copy helpers: remote URL values and the repository manager."""

from __future__ import annotations

from .manager import DEFAULT_REMOTE_NAME, RepositoryManager
from .remote_url import (
    GITHUB_HOST,
    RemoteProtocol,
    RemoteURL,
    RemoteURLParseError,
    build_remote_url,
    detect_protocol,
    owner_repo_from_remote,
    parse_remote_url,
)

__all__ = [
    "DEFAULT_REMOTE_NAME",
    "GITHUB_HOST",
    "RemoteProtocol",
    "RemoteURL",
    "RemoteURLParseError",
    "RepositoryManager",
    "build_remote_url",
    "detect_protocol",
    "owner_repo_from_remote",
    "parse_remote_url",
]
