"""Workflow documents: msgspec models and the YAML 1.2 loader.

A workflow document names reusable tools and an ordered list of steps::

    tools:
      - name: shared-protocol
        operation: convert-protocol
        with: {from: https, to: ssh}
    steps:
      - with: {tool_ref: shared-protocol}
      - operation: audit-report
        with: {output: audit.csv}

``workflow_tools`` and ``workflow`` are accepted as aliases of ``tools`` and
``steps``. JSON documents load unchanged because JSON is valid YAML 1.2.
"""

from __future__ import annotations

import enum
import typing as typ
from pathlib import Path

import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import WorkflowConfigurationError
from .options import TOOL_REFERENCE_KEY, OptionReader

YAML_VERSION = (1, 2)

_TOOLS_KEYS = ("tools", "workflow_tools")
_STEPS_KEYS = ("steps", "workflow")
_PARSE_PREFIX = "failed to parse workflow configuration"


class OperationType(enum.StrEnum):
    """Operation types a workflow step may name."""

    PROTOCOL_CONVERSION = "convert-protocol"
    CANONICAL_REMOTE = "update-canonical-remote"
    RENAME_DIRECTORIES = "rename-directories"
    BRANCH_MIGRATION = "migrate-branch"
    AUDIT_REPORT = "audit-report"
    APPLY_TASKS = "apply-tasks"


class ToolConfiguration(msgspec.Struct, kw_only=True):
    """Named operation template that steps can reference.

    Attributes
    ----------
    name : str
        Unique, case-sensitive tool name.
    operation : str
        Operation type the tool runs.
    options : dict[str, Any] | None
        Default options, read from the ``with`` key.

    """

    name: str
    operation: str = ""
    options: dict[str, typ.Any] | None = msgspec.field(default=None, name="with")


class StepConfiguration(msgspec.Struct, kw_only=True):
    """One declared workflow step.

    ``operation`` may be empty when ``options`` carries a ``tool_ref``.
    """

    operation: str = ""
    options: dict[str, typ.Any] | None = msgspec.field(default=None, name="with")

    @property
    def tool_reference(self) -> str:
        """Referenced tool name, or ``""``."""
        value = OptionReader(self.options).raw(TOOL_REFERENCE_KEY)
        return value.strip() if isinstance(value, str) else ""


class WorkflowConfiguration(msgspec.Struct, kw_only=True):
    """Tools and ordered steps of a workflow document."""

    tools: list[ToolConfiguration] = msgspec.field(default_factory=list)
    steps: list[StepConfiguration] = msgspec.field(default_factory=list)


def load_configuration(path: Path | str) -> WorkflowConfiguration:
    """Read and validate the workflow document at ``path``.

    Raises
    ------
    WorkflowConfigurationError
        If the file cannot be read or parsed, or fails validation.

    """
    if not str(path).strip():
        raise WorkflowConfigurationError(
            ["workflow configuration path must be provided"]
        )
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise WorkflowConfigurationError(
            [f"failed to load workflow configuration: {exc}"]
        ) from exc
    return parse_configuration(text)


def parse_configuration(text: str) -> WorkflowConfiguration:
    """Parse a YAML or JSON workflow document held in memory."""
    try:
        document = _yaml().load(text)
    except YAMLError as exc:
        raise WorkflowConfigurationError([f"{_PARSE_PREFIX}: {exc}"]) from exc
    return build_configuration(document)


def build_configuration(document: object) -> WorkflowConfiguration:
    """Validate an already-decoded document.

    Raises
    ------
    WorkflowConfigurationError
        If the document is not a mapping, the steps block is not a sequence,
        the schema does not match, no steps are defined, tool names repeat or
        a step has neither an operation nor a tool reference.

    """
    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise WorkflowConfigurationError(
            [f"{_PARSE_PREFIX}: document must be a mapping"]
        )

    steps = _first_present(document, _STEPS_KEYS)
    if steps is not None and not isinstance(steps, list):
        raise WorkflowConfigurationError(
            [f"{_PARSE_PREFIX}: workflow block must be defined as a sequence of steps"]
        )
    tools = _first_present(document, _TOOLS_KEYS)

    try:
        configuration = msgspec.convert(
            {"tools": tools or [], "steps": steps or []},
            type=WorkflowConfiguration,
        )
    except msgspec.ValidationError as exc:
        raise WorkflowConfigurationError([f"{_PARSE_PREFIX}: {exc}"]) from exc

    return validate_configuration(configuration)


def validate_configuration(
    configuration: WorkflowConfiguration,
) -> WorkflowConfiguration:
    """Trim operation names and check the structural rules."""
    if not configuration.steps:
        raise WorkflowConfigurationError(
            ["workflow configuration must define at least one step"]
        )

    issues: list[str] = []
    seen: set[str] = set()
    for tool in configuration.tools:
        tool.name = tool.name.strip()
        tool.operation = tool.operation.strip()
        if not tool.name:
            issues.append("workflow tool missing name")
        elif tool.name in seen:
            issues.append(f"duplicate workflow tool name: {tool.name}")
        seen.add(tool.name)
        if not tool.operation:
            issues.append(f"workflow tool {tool.name} missing operation name")

    for step in configuration.steps:
        step.operation = step.operation.strip()
        if not step.operation and not step.tool_reference:
            issues.append("workflow step missing operation name")

    if issues:
        raise WorkflowConfigurationError(issues)
    return configuration


def _first_present(
    document: dict[str, typ.Any], keys: tuple[str, ...]
) -> typ.Any:  # noqa: ANN401
    for key in keys:
        if key in document:
            return document[key]
    return None


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    yaml.allow_duplicate_keys = False
    return yaml


__all__ = [
    "OperationType",
    "StepConfiguration",
    "ToolConfiguration",
    "WorkflowConfiguration",
    "build_configuration",
    "load_configuration",
    "parse_configuration",
    "validate_configuration",
]
