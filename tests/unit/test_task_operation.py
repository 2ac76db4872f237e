"""Unit tests for the apply-tasks operation."""

from __future__ import annotations

import typing as typ

import pytest

from repokeeper.workflow import (
    OptionReader,
    OptionTypeError,
    State,
    UnsupportedTaskActionError,
    WorkflowConfigurationError,
)
from repokeeper.workflow.tasks import (
    TaskFileMode,
    TaskOperation,
    build_task_operation,
    parse_task_definition,
)
from tests.unit.fakes import (
    Harness,
    background,
    make_harness,
    make_inspection,
    repository_state,
)

_DOCS_TASK: dict[str, typ.Any] = {
    "name": "docs",
    "files": [{"path": "README.md", "content": "# {{ .Repository.FullName }}\n"}],
}


def _execute(harness: Harness, *tasks: dict[str, typ.Any]) -> None:
    operation = TaskOperation(tasks=tuple(parse_task_definition(t) for t in tasks))
    repositories = [
        repository_state(inspection)
        for _, inspection in sorted(harness.inspector.by_path.items())
    ]
    state = State(roots=["/src"], repositories=repositories)
    operation.execute(background(), harness.env, state)


class TestParseTaskDefinition:
    """Tests for parse_task_definition."""

    def test_full_definition(self) -> None:
        """Every nested section is read."""
        definition = parse_task_definition(
            {
                "name": "license",
                "ensure_clean": True,
                "branch": {
                    "name_template": "chore/{{ .Task.Name }}",
                    "start_point": "develop",
                    "push_remote": "upstream",
                },
                "files": [
                    {
                        "path": "LICENSE",
                        "content": "MIT",
                        "mode": "Skip-If-Exists",
                        "permissions": "0600",
                    }
                ],
                "commit": {"message_template": "Add license"},
                "pull_request": {"title": "License", "base": "main", "draft": True},
                "actions": [{"type": "repo.release.tag", "options": {"tag": "v1"}}],
            }
        )

        assert definition.name == "license"
        assert definition.ensure_clean is True
        assert definition.branch.start_point == "develop"
        assert definition.branch.push_remote == "upstream"
        [file_definition] = definition.files
        assert file_definition.mode is TaskFileMode.SKIP_IF_EXISTS
        assert file_definition.permissions == 0o600
        assert definition.commit.message_template == "Add license"
        assert definition.pull_request is not None
        assert definition.pull_request.draft is True
        assert definition.pull_request.base == "main"
        [action] = definition.actions
        assert action.action_type == "repo.release.tag"
        assert action.options == {"tag": "v1"}

    def test_defaults(self) -> None:
        """Omitted sections fall back to their defaults."""
        definition = parse_task_definition({"name": "bare"})

        assert definition.branch.name_template == "automation/{{ .Task.Name }}"
        assert definition.branch.push_remote == "origin"
        assert definition.commit.message_template == "Apply task {{ .Task.Name }}"
        assert definition.files == ()
        assert definition.pull_request is None

    @pytest.mark.parametrize(
        ("entry", "error", "message"),
        [
            ({"files": []}, WorkflowConfigurationError, "requires 'name'"),
            (
                {"name": "t", "files": [{"content": "x"}]},
                WorkflowConfigurationError,
                "requires 'path'",
            ),
            (
                {"name": "t", "files": [{"path": "a", "mode": "append"}]},
                WorkflowConfigurationError,
                "unsupported task file mode: append",
            ),
            (
                {"name": "t", "files": [{"path": "a", "permissions": "rw"}]},
                OptionTypeError,
                "option permissions must be",
            ),
            ({"name": "t", "branch": "main"}, OptionTypeError, "option branch must be"),
            (
                {"name": "t", "actions": [{"type": "repo.delete"}]},
                UnsupportedTaskActionError,
                "unsupported task action repo.delete",
            ),
        ],
        ids=(
            "no-name",
            "no-path",
            "bad-mode",
            "bad-permissions",
            "branch-not-map",
            "bad-action",
        ),
    )
    def test_invalid_definitions(
        self, entry: dict[str, typ.Any], error: type[Exception], message: str
    ) -> None:
        """Malformed task entries are configuration errors."""
        with pytest.raises(error, match=message):
            parse_task_definition(entry)

    def test_build_requires_tasks(self) -> None:
        """An apply-tasks step needs at least one task."""
        with pytest.raises(WorkflowConfigurationError, match="at least one task"):
            build_task_operation(OptionReader({}))


class TestTaskOperation:
    """Tests for TaskOperation.execute."""

    def test_dry_run_prints_plan(self) -> None:
        """Dry run prints one plan line and changes nothing."""
        harness = make_harness(make_inspection("/src/demo"), dry_run=True)

        _execute(harness, _DOCS_TASK)

        assert harness.output.getvalue() == (
            "TASK-PLAN: docs /src/demo branch=automation-docs base=main "
            "files=[README.md]\n"
        )
        assert harness.executor.commands == []
        assert harness.file_system.files == {}

    def test_unchanged_repository_is_skipped(self) -> None:
        """Repositories already holding the content are skipped."""
        harness = make_harness(make_inspection("/src/demo"))
        harness.file_system.add_file("/src/demo/README.md", b"# octo/demo\n")

        _execute(harness, _DOCS_TASK)

        assert harness.output.getvalue() == "TASK-SKIP: docs /src/demo (no changes)\n"
        assert harness.executor.commands == []

    def test_task_without_files_runs_actions_only(self) -> None:
        """Actions run even when the task writes no files."""
        harness = make_harness(make_inspection("/src/demo"), dry_run=True)

        _execute(
            harness,
            {
                "name": "release",
                "actions": [{"type": "repo.release.tag", "options": {"tag": "v1"}}],
            },
        )

        assert harness.output.getvalue() == "PLAN-RELEASE: /src/demo -> v1\n"

    def test_recoverable_failure_moves_to_next_repository(self) -> None:
        """A failure in one repository is reported and the next one runs."""
        harness = make_harness(
            make_inspection("/src/alpha"), make_inspection("/src/beta")
        )
        harness.file_system.read_errors["/src/alpha/README.md"] = PermissionError(
            "denied"
        )
        harness.executor.on_git("rev-parse", "--verify", "automation-docs", exit_code=1)
        harness.executor.on_git("rev-parse", "--abbrev-ref", "HEAD", stdout="main")

        _execute(harness, _DOCS_TASK)

        assert "reading /src/alpha/README.md failed" in harness.errors.getvalue()
        assert harness.output.getvalue() == (
            "TASK-APPLY: docs /src/beta branch=automation-docs\n"
        )
        assert harness.file_system.files["/src/beta/README.md"] == b"# octo/demo\n"

    def test_template_errors_abort(self) -> None:
        """Template failures are configuration errors and stop the run."""
        harness = make_harness(make_inspection("/src/demo"))
        task = {"name": "bad", "files": [{"path": "{{ .Nope }}", "content": ""}]}

        with pytest.raises(WorkflowConfigurationError, match="cannot render"):
            _execute(harness, task)
