"""Declarative workflows: configuration, operations and the executor.

A workflow file lists reusable ``tools`` and ordered ``steps``. Steps are
compiled into operations that run, in order, against every repository
discovered under the given roots.

Example
-------
>>> from repokeeper.workflow import (
...     RuntimeOptions,
...     WorkflowExecutor,
...     build_operations,
...     load_configuration,
... )
>>> operations = build_operations(load_configuration("maintenance.yaml"))
>>> WorkflowExecutor(
...     operations,
...     discoverer=discoverer,
...     executor=executor,
...     manager=manager,
...     github=client,
... ).execute(ctx, ["~/src"], RuntimeOptions(dry_run=True))
"""

from __future__ import annotations

from .builder import OperationRegistry, build_operations, default_registry
from .config import (
    OperationType,
    StepConfiguration,
    ToolConfiguration,
    WorkflowConfiguration,
    build_configuration,
    load_configuration,
    parse_configuration,
    validate_configuration,
)
from .errors import (
    InspectionFailedError,
    MigrationTargetError,
    OptionTypeError,
    RepositoryRefreshError,
    TaskTemplateError,
    ToolOperationMismatchError,
    ToolReferenceNotFoundError,
    UnsupportedOperationError,
    UnsupportedTaskActionError,
    WorkflowConfigurationError,
    WorkflowDependencyError,
    WorkflowOperationError,
)
from .executor import TaskRunner, WorkflowExecutor, apply_defaults, sanitize_roots
from .migration import BranchMigrationOperation, BranchMigrationTarget
from .operations import (
    AuditReportOperation,
    CanonicalRemoteOperation,
    Operation,
    ProtocolConversionOperation,
    RenameOperation,
)
from .options import OptionReader, merge_options
from .state import Environment, RepositoryState, RuntimeOptions, State
from .tasks import TaskDefinition, TaskOperation

__all__ = [
    "AuditReportOperation",
    "BranchMigrationOperation",
    "BranchMigrationTarget",
    "CanonicalRemoteOperation",
    "Environment",
    "InspectionFailedError",
    "MigrationTargetError",
    "Operation",
    "OperationRegistry",
    "OperationType",
    "OptionReader",
    "OptionTypeError",
    "ProtocolConversionOperation",
    "RenameOperation",
    "RepositoryRefreshError",
    "RepositoryState",
    "RuntimeOptions",
    "State",
    "StepConfiguration",
    "TaskDefinition",
    "TaskOperation",
    "TaskRunner",
    "TaskTemplateError",
    "ToolConfiguration",
    "ToolOperationMismatchError",
    "ToolReferenceNotFoundError",
    "UnsupportedOperationError",
    "UnsupportedTaskActionError",
    "WorkflowConfiguration",
    "WorkflowConfigurationError",
    "WorkflowDependencyError",
    "WorkflowExecutor",
    "WorkflowOperationError",
    "apply_defaults",
    "build_configuration",
    "build_operations",
    "default_registry",
    "load_configuration",
    "merge_options",
    "parse_configuration",
    "sanitize_roots",
    "validate_configuration",
]
