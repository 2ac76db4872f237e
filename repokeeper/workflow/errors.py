"""Errors raised while loading, compiling and running workflows."""

from __future__ import annotations


class WorkflowConfigurationError(ValueError):
    """Raised when a workflow document or step cannot be used.

    The message joins every issue on its own line; ``issues`` keeps them
    separate for callers that report them individually.
    """

    def __init__(self, issues: list[str]) -> None:
        """Capture the issues and build the aggregated message."""
        super().__init__("\n".join(issues))
        self.issues = issues


class ToolReferenceNotFoundError(WorkflowConfigurationError):
    """Raised when a step references a tool that is not defined."""

    def __init__(self, tool_name: str) -> None:
        """Record the missing tool name."""
        self.tool_name = tool_name
        super().__init__([f"workflow step references unknown tool {tool_name}"])


class ToolOperationMismatchError(WorkflowConfigurationError):
    """Raised when a step's explicit operation disagrees with its tool."""

    def __init__(
        self, tool_name: str, tool_operation: str, step_operation: str
    ) -> None:
        """Record both operation types."""
        self.tool_name = tool_name
        self.tool_operation = tool_operation
        self.step_operation = step_operation
        super().__init__(
            [
                f"workflow step references tool {tool_name} expecting operation "
                f"{tool_operation} but step configured {step_operation}"
            ]
        )


class UnsupportedOperationError(WorkflowConfigurationError):
    """Raised for operation types the registry does not know."""

    def __init__(self, operation: str) -> None:
        """Record the unknown operation type."""
        self.operation = operation
        super().__init__([f"unsupported workflow operation: {operation}"])


class UnsupportedTaskActionError(WorkflowConfigurationError):
    """Raised for task action types without a handler."""

    def __init__(self, action_type: str) -> None:
        """Record the unknown action type."""
        self.action_type = action_type
        super().__init__([f"unsupported task action {action_type}"])


class OptionTypeError(WorkflowConfigurationError):
    """Raised when an option value has the wrong type."""

    def __init__(self, key: str, expected: str) -> None:
        """Name the option and the expected type."""
        self.key = key
        self.expected = expected
        super().__init__([f"option {key} must be {expected}"])


class TaskTemplateError(WorkflowConfigurationError):
    """Raised when a task template cannot be compiled or rendered."""

    def __init__(self, task_name: str, field: str, cause: str) -> None:
        """Record the task, template field and Jinja error."""
        self.task_name = task_name
        self.field = field
        super().__init__([f"task {task_name}: cannot render {field}: {cause}"])


class WorkflowDependencyError(RuntimeError):
    """Raised when the executor is missing a required collaborator."""

    def __init__(self) -> None:
        """Use the fixed dependency message."""
        super().__init__(
            "workflow executor requires repository discovery, git, "
            "and GitHub dependencies"
        )


class InspectionFailedError(RuntimeError):
    """Raised when the initial repository inspection fails."""

    def __init__(self, cause: BaseException) -> None:
        """Describe the inspection failure."""
        super().__init__(f"failed to inspect repositories: {cause}")


class WorkflowOperationError(RuntimeError):
    """Raised when an operation aborts the run."""

    def __init__(self, name: str, cause: BaseException) -> None:
        """Name the failing operation and keep the cause."""
        self.name = name
        self.cause = cause
        super().__init__(f"workflow operation {name} failed: {cause}")


class RepositoryRefreshError(RuntimeError):
    """Raised when a repository cannot be re-inspected after a mutation."""

    @classmethod
    def missing(cls, path: str) -> RepositoryRefreshError:
        """Return an error for a repository absent from the new inspection."""
        return cls(f"repository {path} not found during refresh")

    @classmethod
    def after(cls, action: str, cause: BaseException) -> RepositoryRefreshError:
        """Wrap a refresh failure that followed ``action``."""
        return cls(f"failed to refresh repository after {action}: {cause}")


class MigrationTargetError(LookupError):
    """Raised when a ``migrate-branch`` target cannot be resolved."""

    @classmethod
    def not_found(cls, description: str) -> MigrationTargetError:
        """Return an error for a target matching no repository."""
        return cls(
            f"migrate-branch target did not match any repository ({description})"
        )

    @classmethod
    def identifier_missing(cls, path: str) -> MigrationTargetError:
        """Return an error for a repository without an owner/repo."""
        return cls(f"repository identifier unavailable for migration target ({path})")


__all__ = [
    "InspectionFailedError",
    "MigrationTargetError",
    "OptionTypeError",
    "RepositoryRefreshError",
    "TaskTemplateError",
    "ToolOperationMismatchError",
    "ToolReferenceNotFoundError",
    "UnsupportedOperationError",
    "UnsupportedTaskActionError",
    "WorkflowConfigurationError",
    "WorkflowDependencyError",
    "WorkflowOperationError",
]
