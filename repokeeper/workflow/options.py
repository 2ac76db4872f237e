"""Typed access to the free-form ``with`` options of workflow steps."""

from __future__ import annotations

import typing as typ

from .errors import OptionTypeError

TOOL_REFERENCE_KEY = "tool_ref"

FROM_KEY = "from"
TO_KEY = "to"
OWNER_KEY = "owner"
REQUIRE_CLEAN_KEY = "require_clean"
INCLUDE_OWNER_KEY = "include_owner"
TARGETS_KEY = "targets"
REPOSITORY_KEY = "repository"
PATH_KEY = "path"
REMOTE_NAME_KEY = "remote_name"
SOURCE_BRANCH_KEY = "source_branch"
TARGET_BRANCH_KEY = "target_branch"
WORKFLOWS_DIRECTORY_KEY = "workflows_directory"
PUSH_TO_REMOTE_KEY = "push_to_remote"
OUTPUT_KEY = "output"
TASKS_KEY = "tasks"

_TRUE = "true"
_FALSE = "false"


def normalize_key(key: object) -> str:
    """Trim and lower-case an option key."""
    return str(key).strip().lower()


class OptionReader:
    """Read typed values from an option mapping.

    Keys are matched after :func:`normalize_key`. Each accessor returns
    ``None`` when the key is absent and raises :class:`OptionTypeError` when
    the value has the wrong type.

    Examples
    --------
    >>> reader = OptionReader({" From ": " https ", "push_to_remote": "false"})
    >>> reader.string("from")
    'https'
    >>> reader.boolean("push_to_remote")
    False
    >>> reader.string("to") is None
    True

    """

    def __init__(self, raw: typ.Mapping[str, typ.Any] | None) -> None:
        """Normalise the keys of ``raw``."""
        self._entries = {
            normalize_key(key): value for key, value in (raw or {}).items()
        }

    def __contains__(self, key: str) -> bool:
        """Whether ``key`` was supplied."""
        return key in self._entries

    def raw(self, key: str) -> typ.Any:  # noqa: ANN401
        """Return the untyped value, or ``None``."""
        return self._entries.get(key)

    def string(self, key: str) -> str | None:
        """Return a trimmed string value."""
        if key not in self._entries:
            return None
        value = self._entries[key]
        if value is None:
            return ""
        if not isinstance(value, str):
            raise OptionTypeError(key, "a string")
        return value.strip()

    def string_or(self, key: str, default: str) -> str:
        """Return the string value, or ``default`` when absent or blank."""
        return self.string(key) or default

    def boolean(self, key: str) -> bool | None:
        """Return a boolean; ``"true"``/``"false"`` strings are accepted."""
        if key not in self._entries:
            return None
        value = self._entries[key]
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered == _TRUE:
                return True
            if lowered == _FALSE:
                return False
        raise OptionTypeError(key, "a boolean")

    def boolean_or(self, key: str, *, default: bool) -> bool:
        """Return the boolean value, or ``default`` when absent."""
        value = self.boolean(key)
        return default if value is None else value

    def mappings(self, key: str) -> list[dict[str, typ.Any]] | None:
        """Return a list of mappings."""
        if key not in self._entries:
            return None
        value = self._entries[key]
        if not isinstance(value, list):
            raise OptionTypeError(key, "a list")
        if not all(isinstance(entry, dict) for entry in value):
            raise OptionTypeError(key, "a list of maps")
        return [dict(entry) for entry in value]

    def as_dict(self) -> dict[str, typ.Any]:
        """Return the normalised options."""
        return dict(self._entries)


def merge_options(
    defaults: typ.Mapping[str, typ.Any] | None,
    overrides: typ.Mapping[str, typ.Any] | None,
) -> dict[str, typ.Any]:
    """Overlay ``overrides`` on ``defaults`` key by key after normalisation."""
    merged = OptionReader(defaults).as_dict()
    merged.update(OptionReader(overrides).as_dict())
    return merged


__all__ = [
    "FROM_KEY",
    "INCLUDE_OWNER_KEY",
    "OUTPUT_KEY",
    "OWNER_KEY",
    "PATH_KEY",
    "PUSH_TO_REMOTE_KEY",
    "REMOTE_NAME_KEY",
    "REPOSITORY_KEY",
    "REQUIRE_CLEAN_KEY",
    "SOURCE_BRANCH_KEY",
    "TARGETS_KEY",
    "TARGET_BRANCH_KEY",
    "TASKS_KEY",
    "TOOL_REFERENCE_KEY",
    "TO_KEY",
    "WORKFLOWS_DIRECTORY_KEY",
    "OptionReader",
    "merge_options",
    "normalize_key",
]
