"""Task definitions and the per-repository plans built from them."""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ

from repokeeper.gitrepo import DEFAULT_REMOTE_NAME

DEFAULT_TASK_FILE_PERMISSIONS = 0o644
DEFAULT_BRANCH_TEMPLATE = "automation/{{ .Task.Name }}"
SKIP_REASON_NO_CHANGES = "no changes"
SKIP_REASON_UNCHANGED = "unchanged"
SKIP_REASON_EXISTS = "exists"


class TaskFileMode(enum.StrEnum):
    """How an existing file at the target path is treated."""

    OVERWRITE = "overwrite"
    SKIP_IF_EXISTS = "skip-if-exists"


@dc.dataclass(frozen=True, slots=True)
class TaskBranchDefinition:
    """Branch a task commits to.

    ``start_point`` defaults to the repository's remote default branch.
    """

    name_template: str = DEFAULT_BRANCH_TEMPLATE
    start_point: str = ""
    push_remote: str = DEFAULT_REMOTE_NAME


@dc.dataclass(frozen=True, slots=True)
class TaskFileDefinition:
    """File written by a task; path and content are templates."""

    path_template: str
    content_template: str = ""
    mode: TaskFileMode = TaskFileMode.OVERWRITE
    permissions: int = DEFAULT_TASK_FILE_PERMISSIONS


@dc.dataclass(frozen=True, slots=True)
class TaskCommitDefinition:
    """Commit message template."""

    message_template: str = "Apply task {{ .Task.Name }}"


@dc.dataclass(frozen=True, slots=True)
class TaskPullRequestDefinition:
    """Pull request opened after a task branch is pushed.

    ``base`` defaults to the plan's start point.
    """

    title_template: str
    body_template: str = ""
    base: str = ""
    draft: bool = False


@dc.dataclass(frozen=True, slots=True)
class TaskActionDefinition:
    """Follow-up action run for each repository after the task's files."""

    action_type: str
    options: typ.Mapping[str, typ.Any] = dc.field(default_factory=dict)


@dc.dataclass(frozen=True, slots=True)
class TaskDefinition:
    """A declarative change: branch, files, commit and optional extras."""

    name: str
    ensure_clean: bool = False
    branch: TaskBranchDefinition = dc.field(default_factory=TaskBranchDefinition)
    files: tuple[TaskFileDefinition, ...] = ()
    commit: TaskCommitDefinition = dc.field(default_factory=TaskCommitDefinition)
    pull_request: TaskPullRequestDefinition | None = None
    actions: tuple[TaskActionDefinition, ...] = ()


@dc.dataclass(frozen=True, slots=True)
class TaskFileChange:
    """Rendered file and whether it needs writing.

    ``skip_reason`` is ``unchanged`` or ``exists`` when ``apply`` is false.
    """

    relative_path: str
    absolute_path: str
    content: bytes
    permissions: int
    apply: bool
    skip_reason: str = ""


@dc.dataclass(frozen=True, slots=True)
class TaskPullRequestPlan:
    """Rendered pull request inputs."""

    title: str
    body: str
    base: str
    draft: bool = False


@dc.dataclass(frozen=True, slots=True)
class TaskPlan:
    """What a task will do to one repository.

    ``skipped`` is true exactly when no file change has ``apply`` set; a
    skipped plan performs no git action.
    """

    task_name: str
    repository_path: str
    ensure_clean: bool
    branch_name: str
    start_point: str
    push_remote: str
    commit_message: str
    file_changes: tuple[TaskFileChange, ...] = ()
    pull_request: TaskPullRequestPlan | None = None
    skipped: bool = False
    skip_reason: str = ""

    @property
    def applicable_changes(self) -> tuple[TaskFileChange, ...]:
        """File changes that will be written."""
        return tuple(change for change in self.file_changes if change.apply)


__all__ = [
    "DEFAULT_BRANCH_TEMPLATE",
    "DEFAULT_TASK_FILE_PERMISSIONS",
    "SKIP_REASON_EXISTS",
    "SKIP_REASON_NO_CHANGES",
    "SKIP_REASON_UNCHANGED",
    "TaskActionDefinition",
    "TaskBranchDefinition",
    "TaskCommitDefinition",
    "TaskDefinition",
    "TaskFileChange",
    "TaskFileDefinition",
    "TaskFileMode",
    "TaskPlan",
    "TaskPullRequestDefinition",
    "TaskPullRequestPlan",
]
