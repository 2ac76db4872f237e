"""Unit tests for the migrate-branch workflow operation."""

from __future__ import annotations

import pytest

from repokeeper.github import GitHubOperationError, PullRequest
from repokeeper.migrate import DefaultBranchUpdateError
from repokeeper.workflow import (
    BranchMigrationOperation,
    BranchMigrationTarget,
    MigrationTargetError,
    State,
)
from repokeeper.workflow.migration import resolve_migration_target
from tests.unit.fakes import background, make_harness, make_inspection, repository_state


def _state(*paths: str) -> State:
    return State(
        roots=["/src"],
        repositories=[repository_state(make_inspection(path)) for path in paths],
    )


class TestResolveMigrationTarget:
    """Tests for resolve_migration_target."""

    def test_path_match_wins(self) -> None:
        """A matching path is preferred over the identifier."""
        state = _state("/src/a", "/src/b")

        repository = resolve_migration_target(
            state.repositories,
            BranchMigrationTarget(
                repository_identifier="octo/demo", repository_path="/src/b/"
            ),
        )

        assert repository.path == "/src/b"

    def test_identifier_matches_case_insensitively(self) -> None:
        """Identifiers are compared against inspection slugs with casefold."""
        state = _state("/src/a")

        repository = resolve_migration_target(
            state.repositories, BranchMigrationTarget(repository_identifier="OCTO/Demo")
        )

        assert repository.path == "/src/a"

    def test_unmatched_target_raises(self) -> None:
        """A target matching nothing names itself in the error."""
        with pytest.raises(MigrationTargetError, match="elsewhere/repo"):
            resolve_migration_target(
                _state("/src/a").repositories,
                BranchMigrationTarget(repository_identifier="elsewhere/repo"),
            )


class TestBranchMigrationOperation:
    """Tests for BranchMigrationOperation.execute."""

    def test_dry_run_plans_each_target(self) -> None:
        """Dry run prints a plan and never calls GitHub."""
        harness = make_harness(make_inspection("/src/demo"), dry_run=True)
        operation = BranchMigrationOperation(
            targets=(BranchMigrationTarget(repository_path="/src/demo"),)
        )

        operation.execute(background(), harness.env, _state("/src/demo"))

        assert harness.output.getvalue() == (
            "WORKFLOW-PLAN: migrate /src/demo (main → master)\n"
        )
        assert harness.github.calls == []

    def test_migrates_and_reports_safety(self) -> None:
        """The summary line carries the deletion verdict."""
        harness = make_harness(make_inspection("/src/demo"))
        operation = BranchMigrationOperation(
            targets=(BranchMigrationTarget(repository_identifier="octo/demo"),)
        )

        operation.execute(background(), harness.env, _state("/src/demo"))

        assert harness.github.called("set_default_branch") == [("octo/demo", "master")]
        assert harness.output.getvalue() == (
            "WORKFLOW-MIGRATE: /src/demo (main → master) safe_to_delete=true\n"
        )
        assert harness.errors.getvalue() == ""
        assert harness.inspector.calls == [("/src/demo",)]

    def test_blocking_reasons_and_warnings_go_to_error_sink(self) -> None:
        """Advisories and blocking reasons are written as separate lines."""
        harness = make_harness(make_inspection("/src/demo"))
        harness.github.pull_requests = [PullRequest(number=3)]
        harness.github.retarget_failures[3] = GitHubOperationError("pr edit", "boom")

        BranchMigrationOperation(
            targets=(BranchMigrationTarget(repository_path="/src/demo"),)
        ).execute(background(), harness.env, _state("/src/demo"))

        errors = harness.errors.getvalue().splitlines()
        assert errors[0].startswith("PR-RETARGET-SKIP: octo/demo#3: ")
        assert errors[1] == (
            "MIGRATE-BLOCKED: /src/demo: open pull requests still target source branch"
        )
        assert "safe_to_delete=false" in harness.output.getvalue()

    def test_missing_identifier_is_an_error(self) -> None:
        """A repository with no owner/repo cannot be migrated."""
        inspection = make_inspection(
            "/src/demo", origin_owner_repo="", canonical_owner_repo=""
        )
        harness = make_harness(inspection)
        state = State(roots=["/src"], repositories=[repository_state(inspection)])

        with pytest.raises(MigrationTargetError, match="identifier unavailable"):
            BranchMigrationOperation(
                targets=(BranchMigrationTarget(repository_path="/src/demo"),)
            ).execute(background(), harness.env, state)

    def test_service_failures_abort(self) -> None:
        """Migration errors are not swallowed by the operation."""
        harness = make_harness(make_inspection("/src/demo"))
        harness.github.failures["set_default_branch"] = GitHubOperationError(
            "repo edit", "HTTP 403"
        )

        with pytest.raises(DefaultBranchUpdateError):
            BranchMigrationOperation(
                targets=(BranchMigrationTarget(repository_path="/src/demo"),)
            ).execute(background(), harness.env, _state("/src/demo"))
