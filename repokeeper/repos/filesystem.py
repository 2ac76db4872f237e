"""File-system access used by rename, task and audit code."""

from __future__ import annotations

import os
import typing as typ
from pathlib import Path


class FileSystem(typ.Protocol):
    """File operations the workflow engine performs."""

    def stat(self, path: str) -> os.stat_result: ...

    def exists(self, path: str) -> bool: ...

    def is_dir(self, path: str) -> bool: ...

    def read_file(self, path: str) -> bytes: ...

    def write_file(self, path: str, data: bytes, permissions: int) -> None: ...

    def rename(self, old_path: str, new_path: str) -> None: ...

    def mkdir_all(self, path: str, permissions: int) -> None: ...

    def abs(self, path: str) -> str: ...

    def same_file(self, left: str, right: str) -> bool: ...


class OSFileSystem:
    """:class:`FileSystem` backed by the local disk."""

    def stat(self, path: str) -> os.stat_result:
        """Return ``os.stat`` for ``path``; raises ``FileNotFoundError``."""
        return Path(path).stat()

    def exists(self, path: str) -> bool:
        """Return whether ``path`` exists."""
        return Path(path).exists()

    def is_dir(self, path: str) -> bool:
        """Return whether ``path`` is a directory."""
        return Path(path).is_dir()

    def read_file(self, path: str) -> bytes:
        """Read ``path`` as bytes."""
        return Path(path).read_bytes()

    def write_file(self, path: str, data: bytes, permissions: int) -> None:
        """Write ``data`` to ``path`` and apply ``permissions``."""
        target = Path(path)
        target.write_bytes(data)
        target.chmod(permissions)

    def rename(self, old_path: str, new_path: str) -> None:
        """Rename ``old_path`` to ``new_path``."""
        Path(old_path).rename(new_path)

    def mkdir_all(self, path: str, permissions: int) -> None:
        """Create ``path`` and any missing parents."""
        Path(path).mkdir(mode=permissions, parents=True, exist_ok=True)

    def abs(self, path: str) -> str:
        """Return ``path`` expanded and resolved to an absolute path."""
        return str(Path(path).expanduser().resolve())

    def same_file(self, left: str, right: str) -> bool:
        """Return whether both paths refer to the same file."""
        try:
            return Path(left).samefile(right)
        except OSError:
            return False
