"""Collaborators and outcomes shared by the leaf executors."""

from __future__ import annotations

import dataclasses as dc
import enum
import sys
import typing as typ

from .filesystem import FileSystem, OSFileSystem
from .prompt import ConfirmationPrompter, PromptState, confirm_action

if typ.TYPE_CHECKING:
    from repokeeper.gitrepo import RepositoryManager


class LeafOutcome(enum.StrEnum):
    """What a leaf executor did to a repository."""

    SKIPPED = "skipped"
    PLANNED = "planned"
    DECLINED = "declined"
    APPLIED = "applied"


@dc.dataclass(slots=True)
class LeafDependencies:
    """Everything a leaf executor may touch.

    Attributes
    ----------
    manager
        Git queries and remote updates.
    output
        Sink for progress lines.
    errors
        Sink for problems that do not stop the run.
    prompter
        Asks before mutating; ``None`` disables prompting.
    prompt_state
        Run-wide assume-yes flag.
    file_system
        Disk access for renames.

    """

    manager: RepositoryManager
    output: typ.TextIO = dc.field(default_factory=lambda: sys.stdout)
    errors: typ.TextIO = dc.field(default_factory=lambda: sys.stderr)
    prompter: ConfirmationPrompter | None = None
    prompt_state: PromptState = dc.field(default_factory=PromptState)
    file_system: FileSystem = dc.field(default_factory=OSFileSystem)

    def say(self, line: str) -> None:
        """Write a progress line."""
        self.output.write(f"{line}\n")

    def confirm(self, prompt: str) -> bool:
        """Ask ``prompt`` unless assume-yes is active."""
        return confirm_action(self.prompter, self.prompt_state, prompt)
