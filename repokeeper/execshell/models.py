"""Value types describing a command invocation and its result."""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path


class CommandName(enum.StrEnum):
    """Executables repokeeper is allowed to run."""

    GIT = "git"
    GITHUB = "gh"


@dc.dataclass(frozen=True, slots=True)
class CommandDetails:
    """Arguments and process settings for one invocation.

    Attributes
    ----------
    arguments
        Arguments after the executable name.
    working_directory
        Directory to run in; ``None`` keeps the current directory.
    environment
        Extra environment variables layered over ``os.environ``.
    standard_input
        Text piped to the process, if any.

    """

    arguments: tuple[str, ...] = ()
    working_directory: str | Path | None = None
    environment: typ.Mapping[str, str] = dc.field(default_factory=dict)
    standard_input: str | None = None

    @classmethod
    def of(
        cls,
        *arguments: str,
        cwd: str | Path | None = None,
        stdin: str | None = None,
    ) -> CommandDetails:
        """Build details from positional arguments."""
        return cls(arguments=arguments, working_directory=cwd, standard_input=stdin)


@dc.dataclass(frozen=True, slots=True)
class ShellCommand:
    """A fully qualified invocation: executable plus details."""

    name: CommandName
    details: CommandDetails

    def describe(self) -> str:
        """Render the command for log messages."""
        return " ".join((self.name.value, *self.details.arguments))


@dc.dataclass(frozen=True, slots=True)
class ExecutionResult:
    """Observable outcome of a finished command."""

    standard_output: str = ""
    standard_error: str = ""
    exit_code: int = 0
