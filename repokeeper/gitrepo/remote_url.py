"""Parse and format GitHub remote URLs.

Three shapes are understood::

    git@github.com:owner/repo.git        (git)
    ssh://git@github.com/owner/repo.git  (ssh)
    https://github.com/owner/repo.git    (https)
"""

from __future__ import annotations

import dataclasses as dc
import enum

from repokeeper.common.slug import parse_repo_slug, repo_slug

GITHUB_HOST = "github.com"


class RemoteProtocol(enum.StrEnum):
    """Remote URL styles; ``OTHER`` covers anything unrecognised."""

    GIT = "git"
    SSH = "ssh"
    HTTPS = "https"
    OTHER = "other"

    @classmethod
    def parse(cls, value: str) -> RemoteProtocol:
        """Parse a user-supplied protocol name (``git``, ``ssh`` or ``https``).

        Raises
        ------
        ValueError
            If ``value`` is empty, unknown or ``other``.

        """
        normalized = value.strip().lower()
        if normalized in {cls.GIT, cls.SSH, cls.HTTPS}:
            return cls(normalized)
        msg = f"unsupported protocol value: {value}"
        raise ValueError(msg)


_PREFIXES: tuple[tuple[str, RemoteProtocol], ...] = (
    (f"git@{GITHUB_HOST}:", RemoteProtocol.GIT),
    (f"ssh://git@{GITHUB_HOST}/", RemoteProtocol.SSH),
    (f"https://{GITHUB_HOST}/", RemoteProtocol.HTTPS),
)

_TEMPLATES: dict[RemoteProtocol, str] = {
    RemoteProtocol.GIT: f"git@{GITHUB_HOST}:{{}}.git",
    RemoteProtocol.SSH: f"ssh://git@{GITHUB_HOST}/{{}}.git",
    RemoteProtocol.HTTPS: f"https://{GITHUB_HOST}/{{}}.git",
}


class RemoteURLParseError(ValueError):
    """Raised when a remote URL is not a recognised GitHub URL."""

    def __init__(self, remote: str, reason: str) -> None:
        """Keep the offending input alongside the reason."""
        self.remote = remote
        self.reason = reason
        super().__init__(f"{remote}: {reason}")


@dc.dataclass(frozen=True, slots=True)
class RemoteURL:
    """A parsed GitHub remote."""

    protocol: RemoteProtocol
    owner: str
    repository: str
    host: str = GITHUB_HOST

    @property
    def owner_repo(self) -> str:
        """``owner/repository`` for this remote."""
        return repo_slug(self.owner, self.repository)


def detect_protocol(remote: str) -> RemoteProtocol:
    """Classify ``remote`` by prefix without validating the path."""
    candidate = remote.strip()
    for prefix, protocol in _PREFIXES:
        if candidate.startswith(prefix):
            return protocol
    return RemoteProtocol.OTHER


def parse_remote_url(remote: str) -> RemoteURL:
    """Parse a GitHub remote URL into owner, repository and protocol.

    Raises
    ------
    RemoteURLParseError
        If the URL is empty, uses an unknown prefix or lacks ``owner/repo``.

    """
    candidate = remote.strip()
    if not candidate:
        raise RemoteURLParseError(remote, "value required")
    for prefix, protocol in _PREFIXES:
        if not candidate.startswith(prefix):
            continue
        path = candidate.removeprefix(prefix).rstrip("/")
        try:
            owner, repository = parse_repo_slug(path)
        except ValueError as exc:
            raise RemoteURLParseError(remote, "invalid remote url") from exc
        return RemoteURL(protocol=protocol, owner=owner, repository=repository)
    raise RemoteURLParseError(remote, "invalid remote url")


def owner_repo_from_remote(remote: str) -> str:
    """Return ``owner/repo`` for ``remote`` or ``""`` when it cannot be parsed."""
    try:
        return parse_remote_url(remote).owner_repo
    except RemoteURLParseError:
        return ""


def build_remote_url(protocol: RemoteProtocol, owner_repo: str) -> str:
    """Format ``owner/repo`` as a remote URL for ``protocol``.

    Raises
    ------
    ValueError
        If ``protocol`` is :attr:`RemoteProtocol.OTHER` or the slug is invalid.

    """
    template = _TEMPLATES.get(protocol)
    if template is None:
        msg = f"{protocol}: unsupported remote protocol"
        raise ValueError(msg)
    owner, repository = parse_repo_slug(owner_repo)
    return template.format(repo_slug(owner, repository))
