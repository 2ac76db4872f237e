"""Per-repository leaf operations and their collaborators.

The workflow engine decides *which* repositories to touch; the functions here
perform one mutation on one repository: canonical remote update, protocol
conversion and directory rename. Failures confined to a repository raise
:class:`RepositoryOperationError`.
"""

from __future__ import annotations

from .discovery import FilesystemRepositoryDiscoverer, RepositoryDiscoverer
from .errors import RepositoryOperationError
from .filesystem import FileSystem, OSFileSystem
from .prompt import (
    ConfirmationPrompter,
    ConfirmationResult,
    IOConfirmationPrompter,
    PromptState,
    confirm_action,
)
from .protocol import ProtocolConversionOptions, convert_protocol
from .remotes import RemoteUpdateOptions, update_canonical_remote
from .rename import (
    DirectoryPlan,
    DirectoryPlanner,
    RenameOptions,
    RenameResult,
    rename_completed,
    rename_repository,
)
from .shared import LeafDependencies, LeafOutcome

__all__ = [
    "ConfirmationPrompter",
    "ConfirmationResult",
    "DirectoryPlan",
    "DirectoryPlanner",
    "FileSystem",
    "FilesystemRepositoryDiscoverer",
    "IOConfirmationPrompter",
    "LeafDependencies",
    "LeafOutcome",
    "OSFileSystem",
    "PromptState",
    "ProtocolConversionOptions",
    "RemoteUpdateOptions",
    "RenameOptions",
    "RenameResult",
    "RepositoryDiscoverer",
    "RepositoryOperationError",
    "confirm_action",
    "convert_protocol",
    "rename_completed",
    "rename_repository",
    "update_canonical_remote",
]
