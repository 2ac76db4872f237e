"""Compile workflow steps into :class:`Operation` instances.

Operation types map to factories through an :class:`OperationRegistry`.
A step that carries ``tool_ref`` inherits the tool's operation type and
options; the step's own options override the tool's key by key.
"""

from __future__ import annotations

import typing as typ

from repokeeper.gitrepo import DEFAULT_REMOTE_NAME, RemoteProtocol

from .config import OperationType
from .errors import (
    ToolOperationMismatchError,
    ToolReferenceNotFoundError,
    UnsupportedOperationError,
    WorkflowConfigurationError,
)
from .migration import (
    DEFAULT_SOURCE_BRANCH,
    DEFAULT_TARGET_BRANCH,
    DEFAULT_WORKFLOWS_DIRECTORY,
    BranchMigrationOperation,
    BranchMigrationTarget,
)
from .operations import (
    AuditReportOperation,
    CanonicalRemoteOperation,
    ProtocolConversionOperation,
    RenameOperation,
)
from .options import (
    FROM_KEY,
    INCLUDE_OWNER_KEY,
    OUTPUT_KEY,
    OWNER_KEY,
    PATH_KEY,
    PUSH_TO_REMOTE_KEY,
    REMOTE_NAME_KEY,
    REPOSITORY_KEY,
    REQUIRE_CLEAN_KEY,
    SOURCE_BRANCH_KEY,
    TARGET_BRANCH_KEY,
    TARGETS_KEY,
    TO_KEY,
    TOOL_REFERENCE_KEY,
    WORKFLOWS_DIRECTORY_KEY,
    OptionReader,
    merge_options,
)
from .tasks import build_task_operation

if typ.TYPE_CHECKING:
    from .config import StepConfiguration, ToolConfiguration, WorkflowConfiguration
    from .operations import Operation

OperationFactory = typ.Callable[[OptionReader], "Operation"]


class OperationRegistry:
    """Map operation type names to factories."""

    def __init__(self) -> None:
        """Start with no registered operation types."""
        self._factories: dict[str, OperationFactory] = {}

    def register(self, operation_type: str, factory: OperationFactory) -> None:
        """Register ``factory`` for ``operation_type``, replacing any previous one."""
        self._factories[operation_type] = factory

    def __contains__(self, operation_type: str) -> bool:
        """Whether ``operation_type`` has a factory."""
        return operation_type in self._factories

    def build(self, operation_type: str, options: OptionReader) -> Operation:
        """Create an operation.

        Raises
        ------
        UnsupportedOperationError
            If no factory is registered for ``operation_type``.

        """
        factory = self._factories.get(operation_type)
        if factory is None:
            raise UnsupportedOperationError(operation_type)
        return factory(options)


def _protocol_option(options: OptionReader, key: str) -> RemoteProtocol:
    value = options.string(key)
    if not value:
        msg = f"convert-protocol step requires a valid '{key}' protocol"
        raise WorkflowConfigurationError([msg])
    try:
        return RemoteProtocol.parse(value)
    except ValueError as exc:
        raise WorkflowConfigurationError([str(exc)]) from exc


def build_protocol_conversion(options: OptionReader) -> ProtocolConversionOperation:
    """Require distinct, valid ``from`` and ``to`` protocols."""
    from_protocol = _protocol_option(options, FROM_KEY)
    to_protocol = _protocol_option(options, TO_KEY)
    if from_protocol is to_protocol:
        raise WorkflowConfigurationError(
            ["convert-protocol step requires distinct source and target protocols"]
        )
    return ProtocolConversionOperation(
        from_protocol=from_protocol, to_protocol=to_protocol
    )


def build_canonical_remote(options: OptionReader) -> CanonicalRemoteOperation:
    """Read the optional ``owner`` constraint."""
    return CanonicalRemoteOperation(owner_constraint=options.string_or(OWNER_KEY, ""))


def build_rename(options: OptionReader) -> RenameOperation:
    """Read ``require_clean`` and ``include_owner``."""
    require_clean = options.boolean(REQUIRE_CLEAN_KEY)
    return RenameOperation(
        require_clean=bool(require_clean),
        include_owner=options.boolean_or(INCLUDE_OWNER_KEY, default=False),
        require_clean_explicit=require_clean is not None,
    )


def _migration_target(entry: dict[str, typ.Any]) -> BranchMigrationTarget:
    target = OptionReader(entry)
    return BranchMigrationTarget(
        repository_identifier=target.string_or(REPOSITORY_KEY, ""),
        repository_path=target.string_or(PATH_KEY, ""),
        remote_name=target.string_or(REMOTE_NAME_KEY, DEFAULT_REMOTE_NAME),
        source_branch=target.string_or(SOURCE_BRANCH_KEY, DEFAULT_SOURCE_BRANCH),
        target_branch=target.string_or(TARGET_BRANCH_KEY, DEFAULT_TARGET_BRANCH),
        workflows_directory=target.string_or(
            WORKFLOWS_DIRECTORY_KEY, DEFAULT_WORKFLOWS_DIRECTORY
        ),
        push_updates=target.boolean_or(PUSH_TO_REMOTE_KEY, default=True),
    )


def build_branch_migration(options: OptionReader) -> BranchMigrationOperation:
    """Require at least one target and apply per-target defaults."""
    entries = options.mappings(TARGETS_KEY)
    if not entries:
        raise WorkflowConfigurationError(
            ["migrate-branch step requires at least one target"]
        )
    return BranchMigrationOperation(
        targets=tuple(_migration_target(entry) for entry in entries)
    )


def build_audit_report(options: OptionReader) -> AuditReportOperation:
    """Read the optional ``output`` path."""
    return AuditReportOperation(output_path=options.string_or(OUTPUT_KEY, ""))


def default_registry() -> OperationRegistry:
    """Registry holding every built-in operation type."""
    registry = OperationRegistry()
    registry.register(OperationType.PROTOCOL_CONVERSION, build_protocol_conversion)
    registry.register(OperationType.CANONICAL_REMOTE, build_canonical_remote)
    registry.register(OperationType.RENAME_DIRECTORIES, build_rename)
    registry.register(OperationType.BRANCH_MIGRATION, build_branch_migration)
    registry.register(OperationType.AUDIT_REPORT, build_audit_report)
    registry.register(OperationType.APPLY_TASKS, build_task_operation)
    return registry


def _resolve_step(
    step: StepConfiguration, tools: typ.Mapping[str, ToolConfiguration]
) -> tuple[str, dict[str, typ.Any]]:
    operation_type = step.operation.strip()
    tool_name = step.tool_reference
    if not tool_name:
        if not operation_type:
            raise WorkflowConfigurationError(["workflow step missing operation name"])
        return (operation_type, OptionReader(step.options).as_dict())

    tool = tools.get(tool_name)
    if tool is None:
        raise ToolReferenceNotFoundError(tool_name)
    tool_operation = tool.operation.strip()
    if operation_type and operation_type != tool_operation:
        raise ToolOperationMismatchError(tool_name, tool_operation, operation_type)
    options = merge_options(tool.options, step.options)
    options.pop(TOOL_REFERENCE_KEY, None)
    return (tool_operation, options)


def build_operations(
    configuration: WorkflowConfiguration,
    registry: OperationRegistry | None = None,
) -> list[Operation]:
    """Compile every step of ``configuration`` in order.

    Raises
    ------
    WorkflowConfigurationError
        If a step is incomplete, references an unknown tool, conflicts with
        its tool, names an unsupported operation or has invalid options.

    """
    registry = registry or default_registry()
    tools = {tool.name: tool for tool in configuration.tools}
    operations: list[Operation] = []
    for step in configuration.steps:
        operation_type, options = _resolve_step(step, tools)
        operations.append(registry.build(operation_type, OptionReader(options)))
    return operations


__all__ = [
    "OperationFactory",
    "OperationRegistry",
    "build_audit_report",
    "build_branch_migration",
    "build_canonical_remote",
    "build_operations",
    "build_protocol_conversion",
    "build_rename",
    "default_registry",
]
