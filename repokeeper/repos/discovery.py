"""Locate git repositories beneath a set of roots."""

from __future__ import annotations

import typing as typ
from pathlib import Path

GIT_METADATA_NAME = ".git"


class RepositoryDiscoverer(typ.Protocol):
    """Finds repository directories under roots."""

    def discover(self, roots: typ.Sequence[str]) -> list[str]: ...


class FilesystemRepositoryDiscoverer:
    """Walk roots and return every directory containing a ``.git`` entry.

    ``.git`` may be a directory or a worktree/submodule file. The walk never
    descends into ``.git`` itself but does continue into the working tree, so
    nested repositories are found too. Results are absolute, de-duplicated and
    sorted.
    """

    def discover(self, roots: typ.Sequence[str]) -> list[str]:
        """Return repository paths found under ``roots``."""
        found: set[str] = set()
        for root in roots:
            top = Path(root).expanduser().resolve()
            for directory, dirnames, filenames in top.walk():
                if GIT_METADATA_NAME in dirnames or GIT_METADATA_NAME in filenames:
                    found.add(str(directory))
                dirnames[:] = [name for name in dirnames if name != GIT_METADATA_NAME]
        return sorted(found)
