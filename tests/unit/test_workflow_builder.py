"""Unit tests for compiling workflow steps into operations."""

from __future__ import annotations

import typing as typ

import pytest

from repokeeper.gitrepo import RemoteProtocol
from repokeeper.workflow import (
    AuditReportOperation,
    BranchMigrationOperation,
    CanonicalRemoteOperation,
    ProtocolConversionOperation,
    RenameOperation,
    WorkflowConfigurationError,
    build_operations,
)
from repokeeper.workflow.builder import OperationRegistry, default_registry
from repokeeper.workflow.config import build_configuration
from repokeeper.workflow.errors import (
    ToolOperationMismatchError,
    ToolReferenceNotFoundError,
    UnsupportedOperationError,
)
from repokeeper.workflow.tasks import TaskOperation

if typ.TYPE_CHECKING:
    from repokeeper.workflow import Operation


def _compile(
    steps: list[dict[str, typ.Any]], tools: list[dict[str, typ.Any]] | None = None
) -> list[Operation]:
    return build_operations(
        build_configuration({"tools": tools or [], "steps": steps})
    )


class TestBuildOperations:
    """Tests for build_operations with the default registry."""

    def test_every_builtin_operation_type(self) -> None:
        """Each registered type compiles to its operation class."""
        operations = _compile(
            [
                {
                    "operation": "convert-protocol",
                    "with": {"from": "https", "to": "ssh"},
                },
                {"operation": "update-canonical-remote", "with": {"owner": "octo"}},
                {"operation": "rename-directories"},
                {
                    "operation": "migrate-branch",
                    "with": {"targets": [{"repository": "octo/demo"}]},
                },
                {"operation": "audit-report", "with": {"output": "audit.csv"}},
                {
                    "operation": "apply-tasks",
                    "with": {
                        "tasks": [
                            {
                                "name": "docs",
                                "files": [{"path": "README.md", "content": "x"}],
                            }
                        ]
                    },
                },
            ]
        )

        assert [type(operation) for operation in operations] == [
            ProtocolConversionOperation,
            CanonicalRemoteOperation,
            RenameOperation,
            BranchMigrationOperation,
            AuditReportOperation,
            TaskOperation,
        ]
        conversion = typ.cast("ProtocolConversionOperation", operations[0])
        assert conversion.from_protocol is RemoteProtocol.HTTPS
        assert conversion.to_protocol is RemoteProtocol.SSH
        assert typ.cast("CanonicalRemoteOperation", operations[1]).owner_constraint == (
            "octo"
        )

    def test_tool_reference_merges_options(self) -> None:
        """Steps inherit tool options and override them key by key."""
        [operation] = _compile(
            [{"with": {"tool_ref": "proto", "TO": "git"}}],
            tools=[
                {
                    "name": "proto",
                    "operation": "convert-protocol",
                    "with": {"from": "https", "to": "ssh"},
                }
            ],
        )

        conversion = typ.cast("ProtocolConversionOperation", operation)
        assert conversion.from_protocol is RemoteProtocol.HTTPS
        assert conversion.to_protocol is RemoteProtocol.GIT

    def test_migration_target_defaults(self) -> None:
        """Unspecified target fields take the migration defaults."""
        [operation] = _compile(
            [
                {
                    "operation": "migrate-branch",
                    "with": {
                        "targets": [
                            {"path": "/src/demo", "push_to_remote": "false"}
                        ]
                    },
                }
            ]
        )

        [target] = typ.cast("BranchMigrationOperation", operation).targets
        assert target.repository_path == "/src/demo"
        assert target.remote_name == "origin"
        assert (target.source_branch, target.target_branch) == ("main", "master")
        assert target.workflows_directory == ".github/workflows"
        assert target.push_updates is False

    @pytest.mark.parametrize(
        ("options", "require_clean", "explicit"),
        [({}, False, False), ({"require_clean": False}, False, True)],
        ids=("default", "explicit-false"),
    )
    def test_rename_records_explicit_require_clean(
        self,
        options: dict[str, typ.Any],
        *,
        require_clean: bool,
        explicit: bool,
    ) -> None:
        """Whether require_clean was configured is kept for apply_defaults."""
        [operation] = _compile(
            [{"operation": "rename-directories", "with": options}]
        )

        rename = typ.cast("RenameOperation", operation)
        assert rename.require_clean is require_clean
        assert rename.require_clean_explicit is explicit

    @pytest.mark.parametrize(
        ("step", "error", "message"),
        [
            (
                {"with": {"tool_ref": "ghost"}},
                ToolReferenceNotFoundError,
                "unknown tool ghost",
            ),
            (
                {"operation": "audit-report", "with": {"tool_ref": "proto"}},
                ToolOperationMismatchError,
                "expecting operation convert-protocol but step configured audit-report",
            ),
            ({"operation": "explode"}, UnsupportedOperationError, "explode"),
            (
                {"operation": "convert-protocol", "with": {"from": "https"}},
                WorkflowConfigurationError,
                "requires a valid 'to' protocol",
            ),
            (
                {"operation": "convert-protocol", "with": {"from": "ssh", "to": "SSH"}},
                WorkflowConfigurationError,
                "distinct source and target protocols",
            ),
            (
                {"operation": "convert-protocol", "with": {"from": "ftp", "to": "ssh"}},
                WorkflowConfigurationError,
                "unsupported protocol value: ftp",
            ),
            (
                {"operation": "migrate-branch", "with": {"targets": []}},
                WorkflowConfigurationError,
                "at least one target",
            ),
        ],
        ids=(
            "unknown-tool",
            "tool-mismatch",
            "unsupported",
            "missing-to",
            "same-protocol",
            "bad-protocol",
            "no-targets",
        ),
    )
    def test_invalid_steps(
        self,
        step: dict[str, typ.Any],
        error: type[Exception],
        message: str,
    ) -> None:
        """Compilation errors are configuration errors naming the problem."""
        tools = [
            {
                "name": "proto",
                "operation": "convert-protocol",
                "with": {"from": "https", "to": "ssh"},
            }
        ]

        with pytest.raises(error, match=message):
            _compile([step], tools=tools)


class TestOperationRegistry:
    """Tests for custom registries."""

    def test_registered_factory_receives_options(self) -> None:
        """Custom operation types can be added."""
        registry = OperationRegistry()
        registry.register(
            "noop", lambda options: AuditReportOperation(options.string_or("x", ""))
        )

        operations = build_operations(
            build_configuration({"steps": [{"operation": "noop", "with": {"x": "y"}}]}),
            registry,
        )

        assert "noop" in registry
        assert typ.cast("AuditReportOperation", operations[0]).output_path == "y"

    def test_default_registry_knows_every_type(self) -> None:
        """Every documented operation type is registered."""
        registry = default_registry()

        for name in (
            "convert-protocol",
            "update-canonical-remote",
            "rename-directories",
            "migrate-branch",
            "audit-report",
            "apply-tasks",
        ):
            assert name in registry, f"{name} should be registered"
