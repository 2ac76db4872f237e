"""Repository slug utilities.

Slugs are GitHub identifiers in ``owner/name`` form. They name remote
repositories rather than directories, so they are parsed with these helpers
and never with ``pathlib``.
"""

from __future__ import annotations


def repo_slug(owner: str, name: str) -> str:
    """Join owner and repository name into ``owner/name``.

    Examples
    --------
    >>> repo_slug("octocat", "hello-world")
    'octocat/hello-world'

    """
    return f"{owner}/{name}"


def parse_repo_slug(slug: str) -> tuple[str, str]:
    """Split an ``owner/name`` slug.

    Surrounding whitespace and a trailing ``.git`` suffix are ignored.

    Parameters
    ----------
    slug:
        Repository slug in ``owner/name`` format.

    Returns
    -------
    tuple[str, str]
        ``(owner, name)``.

    Raises
    ------
    ValueError
        If the slug is not in ``owner/name`` format.

    Examples
    --------
    >>> parse_repo_slug("octocat/hello-world.git")
    ('octocat', 'hello-world')

    """
    candidate = slug.strip().removesuffix(".git")
    owner, separator, name = candidate.partition("/")
    if not separator or not owner or not name or "/" in name:
        msg = f"Invalid repository slug: expected 'owner/name', got {slug!r}"
        raise ValueError(msg)
    return owner, name


def repo_name(slug: str) -> str:
    """Return the repository part of a slug, or ``""`` when it is malformed."""
    try:
        _, name = parse_repo_slug(slug)
    except ValueError:
        return ""
    return name


def slugs_match(left: str, right: str) -> bool:
    """Compare two slugs case-insensitively; empty slugs never match."""
    left_value = left.strip()
    right_value = right.strip()
    if not left_value or not right_value:
        return False
    return left_value.casefold() == right_value.casefold()
