"""Unit-test fixtures for repokeeper."""

from __future__ import annotations

import typing as typ

import pytest

from repokeeper.execshell import ExecutionContext
from tests.unit.fakes import (
    FakeGitHubClient,
    InMemoryFileSystem,
    RecordingGitExecutor,
)

if typ.TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def ctx() -> ExecutionContext:
    """Return an execution context without a deadline."""
    return ExecutionContext.background()


@pytest.fixture
def git_executor() -> RecordingGitExecutor:
    """Return a git executor that records every command."""
    return RecordingGitExecutor()


@pytest.fixture
def github() -> FakeGitHubClient:
    """Return a GitHub client double."""
    return FakeGitHubClient()


@pytest.fixture
def file_system() -> InMemoryFileSystem:
    """Return an empty in-memory file system."""
    return InMemoryFileSystem()


@pytest.fixture
def workflows_repo(tmp_path: Path) -> Path:
    """Return a repository directory holding two CI workflow files."""
    workflows = tmp_path / "repo" / ".github" / "workflows"
    workflows.mkdir(parents=True)
    (workflows / "ci.yml").write_text(
        "on:\n  push:\n    branches: [main]\n  pull_request:\n    branches:\n"
        "      - main\n      - release\n",
        encoding="utf-8",
    )
    (workflows / "docs.yaml").write_text(
        "on:\n  push:\n    branches: [main-docs]\n",
        encoding="utf-8",
    )
    return tmp_path / "repo"
