"""Unit tests for repository inspection and the CSV audit report."""

from __future__ import annotations

import io
import typing as typ

from repokeeper.audit import (
    AUDIT_REPORT_HEADER,
    InspectionDepth,
    InspectionService,
    Ternary,
    report_row,
    write_audit_report,
)
from repokeeper.github import BranchRef, RepositoryMetadata
from repokeeper.gitrepo import RemoteProtocol, RepositoryManager
from tests.unit.fakes import make_inspection

if typ.TYPE_CHECKING:
    from repokeeper.execshell import ExecutionContext
    from tests.unit.fakes import FakeGitHubClient, RecordingGitExecutor


class _StaticDiscoverer:
    def __init__(self, *paths: str) -> None:
        self.paths = list(paths)

    def discover(self, roots: typ.Sequence[str]) -> list[str]:
        del roots
        return list(self.paths)


def _service(
    executor: RecordingGitExecutor, github: FakeGitHubClient, *paths: str
) -> InspectionService:
    return InspectionService(
        discoverer=_StaticDiscoverer(*paths),
        executor=executor,
        manager=RepositoryManager(executor),
        github=github,
    )


def _script_repository(
    executor: RecordingGitExecutor, origin: str, branch: str = "main"
) -> None:
    executor.on_git("rev-parse", "--is-inside-work-tree", stdout="true\n")
    executor.on_git("remote", "get-url", "origin", stdout=f"{origin}\n")
    executor.on_git("rev-parse", "--abbrev-ref", "HEAD", stdout=f"{branch}\n")


class TestAuditReport:
    """Tests for CSV rendering."""

    def test_row_columns_follow_header(self) -> None:
        """Rows line up with the fixed header."""
        inspection = make_inspection(
            "/src/demo-old",
            canonical_owner_repo="octo/demo",
            origin_matches_canonical=Ternary.NO,
            remote_protocol=RemoteProtocol.HTTPS,
        )

        assert report_row(inspection) == [
            "octo/demo",
            "demo-old",
            "no",
            "main",
            "main",
            "yes",
            "https",
            "no",
        ]

    def test_origin_slug_is_used_without_canonical(self) -> None:
        """The origin slug stands in when GitHub was not consulted."""
        inspection = make_inspection("/src/demo", canonical_owner_repo="")

        assert report_row(inspection)[0] == "octo/demo"
        assert report_row(inspection)[2] == "yes"

    def test_write_report_counts_rows(self) -> None:
        """The header comes first and the row count is returned."""
        stream = io.StringIO()

        count = write_audit_report(
            stream, [make_inspection("/src/a"), make_inspection("/src/b")]
        )

        lines = stream.getvalue().splitlines()
        assert count == 2
        assert lines[0] == ",".join(AUDIT_REPORT_HEADER)
        assert len(lines) == 3


class TestInspectionService:
    """Tests for InspectionService."""

    def test_full_inspection_uses_github_metadata(
        self,
        ctx: ExecutionContext,
        git_executor: RecordingGitExecutor,
        github: FakeGitHubClient,
    ) -> None:
        """Canonical slug and default branch come from GitHub."""
        _script_repository(git_executor, "git@github.com:old/demo.git")
        git_executor.on_git("rev-parse", "HEAD", stdout="abc\n")
        git_executor.on_git("rev-parse", "origin/trunk", stdout="abc\n")
        git_executor.on_git("rev-parse", "--abbrev-ref", "HEAD", stdout="trunk\n")
        github.metadata["old/demo"] = RepositoryMetadata(
            name_with_owner="octo/demo-renamed",
            default_branch_ref=BranchRef(name="trunk"),
        )

        [inspection] = _service(git_executor, github, "/src/demo").inspect(
            ctx, ["/src"]
        )

        assert inspection.origin_owner_repo == "old/demo"
        assert inspection.final_owner_repo == "octo/demo-renamed"
        assert inspection.desired_folder_name == "demo-renamed"
        assert inspection.remote_default_branch == "trunk"
        assert inspection.origin_matches_canonical is Ternary.NO
        assert inspection.in_sync_status is Ternary.YES
        assert ("fetch", "-q", "--no-tags", "origin", "trunk") in (
            git_executor.git_arguments
        )

    def test_metadata_failure_falls_back_to_ls_remote(
        self,
        ctx: ExecutionContext,
        git_executor: RecordingGitExecutor,
        github: FakeGitHubClient,
    ) -> None:
        """Without GitHub metadata the remote HEAD symref is used."""
        _script_repository(git_executor, "https://github.com/octo/demo.git")
        git_executor.on_git(
            "ls-remote",
            "--symref",
            "origin",
            "HEAD",
            stdout="ref: refs/heads/develop\tHEAD\nabc\tHEAD\n",
        )

        [inspection] = _service(git_executor, github, "/src/demo").inspect(
            ctx, ["/src"], InspectionDepth.FULL
        )

        assert inspection.canonical_owner_repo == ""
        assert inspection.final_owner_repo == "octo/demo"
        assert inspection.remote_default_branch == "develop"
        assert inspection.origin_matches_canonical is Ternary.NOT_APPLICABLE
        assert inspection.in_sync_status is Ternary.NOT_APPLICABLE

    def test_minimal_inspection_skips_branch_checks(
        self,
        ctx: ExecutionContext,
        git_executor: RecordingGitExecutor,
        github: FakeGitHubClient,
    ) -> None:
        """Minimal depth reads neither the local branch nor sync state."""
        _script_repository(git_executor, "git@github.com:octo/demo.git")
        github.metadata["octo/demo"] = RepositoryMetadata(
            name_with_owner="octo/demo", default_branch_ref=BranchRef(name="main")
        )

        [inspection] = _service(git_executor, github, "/src/demo").inspect(
            ctx, ["/src"], InspectionDepth.MINIMAL
        )

        assert inspection.local_branch == ""
        assert ("rev-parse", "--abbrev-ref", "HEAD") not in git_executor.git_arguments

    def test_non_github_and_non_repositories_are_skipped(
        self,
        ctx: ExecutionContext,
        git_executor: RecordingGitExecutor,
        github: FakeGitHubClient,
    ) -> None:
        """Only GitHub work trees are inspected."""
        git_executor.on_git("rev-parse", "--is-inside-work-tree", stdout="true\n")
        git_executor.on_git(
            "remote", "get-url", "origin", stdout="https://gitlab.com/octo/demo.git"
        )

        inspections = _service(git_executor, github, "/src/demo").inspect(
            ctx, ["/src"]
        )

        assert inspections == []
        assert github.calls == []
