"""Process-level settings for repokeeper.

Settings are read from environment variables so the CLI, the workflow
executor and the shell executor agree on log level, executable names and
command timeouts.

Usage
-----
>>> settings = RepokeeperSettings()
>>> settings.command_timeout
120

>>> import os
>>> os.environ["REPOKEEPER_COMMAND_TIMEOUT"] = "30"
>>> RepokeeperSettings.from_env().command_timeout
30

"""

from __future__ import annotations

import dataclasses as dc
import os

from repokeeper.logging import DEFAULT_LOG_LEVEL

LOG_LEVEL_ENV = "REPOKEEPER_LOG_LEVEL"
COMMAND_TIMEOUT_ENV = "REPOKEEPER_COMMAND_TIMEOUT"
GIT_EXECUTABLE_ENV = "REPOKEEPER_GIT"
GH_EXECUTABLE_ENV = "REPOKEEPER_GH"


@dc.dataclass(frozen=True, slots=True)
class RepokeeperSettings:
    """Runtime settings shared by the CLI and its collaborators.

    Attributes
    ----------
    log_level
        Raw log level handed to :func:`repokeeper.logging.configure_logging`.
    command_timeout
        Seconds a single ``git``/``gh`` invocation may run before it is
        treated as a deadline failure.
    git_executable
        Name or path of the git binary.
    gh_executable
        Name or path of the GitHub CLI binary.

    """

    log_level: str = DEFAULT_LOG_LEVEL
    command_timeout: int = 120
    git_executable: str = "git"
    gh_executable: str = "gh"

    @staticmethod
    def _parse_positive_int(env_var: str, default: int) -> int:
        """Read a positive integer env var, falling back to a default."""
        raw = os.environ.get(env_var, "").strip()
        if not raw:
            return default
        try:
            value = int(raw)
        except ValueError:
            return default
        return value if value > 0 else default

    @staticmethod
    def _parse_text(env_var: str, default: str) -> str:
        return os.environ.get(env_var, "").strip() or default

    @classmethod
    def from_env(cls) -> RepokeeperSettings:
        """Build settings from ``REPOKEEPER_*`` environment variables."""
        return cls(
            log_level=cls._parse_text(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL),
            command_timeout=cls._parse_positive_int(COMMAND_TIMEOUT_ENV, 120),
            git_executable=cls._parse_text(GIT_EXECUTABLE_ENV, "git"),
            gh_executable=cls._parse_text(GH_EXECUTABLE_ENV, "gh"),
        )


__all__ = [
    "COMMAND_TIMEOUT_ENV",
    "GH_EXECUTABLE_ENV",
    "GIT_EXECUTABLE_ENV",
    "LOG_LEVEL_ENV",
    "RepokeeperSettings",
]
