"""Turn a task definition into a per-repository :class:`TaskPlan`."""

from __future__ import annotations

import typing as typ
from pathlib import Path, PurePath

from repokeeper.repos import RepositoryOperationError

from .models import (
    SKIP_REASON_EXISTS,
    SKIP_REASON_NO_CHANGES,
    SKIP_REASON_UNCHANGED,
    TaskDefinition,
    TaskFileChange,
    TaskFileMode,
    TaskPlan,
    TaskPullRequestPlan,
)
from .templates import TemplateData, TemplateRenderer, slugify_branch

if typ.TYPE_CHECKING:
    from repokeeper.repos import FileSystem
    from repokeeper.workflow.state import Environment, RepositoryState


class TaskPlanner:
    """Render one task's templates against one repository.

    Parameters
    ----------
    definition
        Task to plan.
    template_data
        Values from :func:`build_task_template_data`.

    """

    def __init__(self, definition: TaskDefinition, template_data: TemplateData) -> None:
        """Bind the planner to a task and its template data."""
        self._definition = definition
        self._data = template_data
        self._renderer = TemplateRenderer(definition.name)

    def _render(self, field: str, template: str) -> str:
        return self._renderer.render(field, template, self._data)

    def build_plan(self, env: Environment, repository: RepositoryState) -> TaskPlan:
        """Render the branch, files and commit and diff files against disk.

        Raises
        ------
        TaskTemplateError
            If a template fails to render or a file path renders empty.
        RepositoryOperationError
            If an existing file cannot be read.

        """
        definition = self._definition
        branch_name = slugify_branch(
            self._render("branch", definition.branch.name_template)
        )
        if not branch_name:
            raise RepositoryOperationError(
                repository.path,
                f"task {definition.name} branch name rendered empty",
            )
        start_point = (
            definition.branch.start_point.strip()
            or repository.inspection.remote_default_branch.strip()
        )
        changes = tuple(
            self._plan_file(env.file_system, repository, index)
            for index in range(len(definition.files))
        )
        pull_request = None
        if definition.pull_request is not None:
            pull_request = TaskPullRequestPlan(
                title=self._render(
                    "pull request title", definition.pull_request.title_template
                ).strip(),
                body=self._render(
                    "pull request body", definition.pull_request.body_template
                ),
                base=definition.pull_request.base.strip() or start_point,
                draft=definition.pull_request.draft,
            )
        skipped = not any(change.apply for change in changes)
        return TaskPlan(
            task_name=definition.name,
            repository_path=repository.path,
            ensure_clean=definition.ensure_clean,
            branch_name=branch_name,
            start_point=start_point,
            push_remote=definition.branch.push_remote.strip(),
            commit_message=self._render(
                "commit message", definition.commit.message_template
            ).strip(),
            file_changes=changes,
            pull_request=pull_request,
            skipped=skipped,
            skip_reason=SKIP_REASON_NO_CHANGES if skipped else "",
        )

    def _plan_file(
        self, file_system: FileSystem, repository: RepositoryState, index: int
    ) -> TaskFileChange:
        file_definition = self._definition.files[index]
        relative_path = self._render(
            f"files[{index}].path", file_definition.path_template
        ).strip()
        if not relative_path:
            raise RepositoryOperationError(
                repository.path,
                f"task {self._definition.name} file {index} path rendered empty",
            )
        relative_path = _contained_path(
            repository.path, self._definition.name, index, relative_path
        )
        absolute_path = str(Path(repository.path, relative_path))
        content = self._render(
            f"files[{index}].content", file_definition.content_template
        )
        data = content.encode("utf-8")
        existing = _read_existing(file_system, repository.path, absolute_path)

        skip_reason = ""
        if existing is not None and file_definition.mode is TaskFileMode.SKIP_IF_EXISTS:
            skip_reason = SKIP_REASON_EXISTS
        elif existing == data:
            skip_reason = SKIP_REASON_UNCHANGED
        return TaskFileChange(
            relative_path=relative_path,
            absolute_path=absolute_path,
            content=data,
            permissions=file_definition.permissions,
            apply=not skip_reason,
            skip_reason=skip_reason,
        )


def _contained_path(
    repository_path: str, task_name: str, index: int, relative_path: str
) -> str:
    """Collapse ``relative_path`` and reject anything outside the repository.

    Absolute paths and ``..`` segments climbing above the repository root
    raise :class:`RepositoryOperationError`; the collapsed relative path
    is returned otherwise.
    """
    candidate = PurePath(relative_path)
    parts: list[str] = []
    escapes = candidate.is_absolute()
    for part in candidate.parts:
        if escapes:
            break
        if part == "..":
            escapes = not parts
            if parts:
                parts.pop()
        elif part != ".":
            parts.append(part)
    if escapes or not parts:
        raise RepositoryOperationError(
            repository_path,
            f"task {task_name} file {index} path {relative_path!r} "
            "must stay inside the repository",
        )
    return str(PurePath(*parts))


def _read_existing(
    file_system: FileSystem, repository_path: str, path: str
) -> bytes | None:
    try:
        return file_system.read_file(path)
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise RepositoryOperationError.wrap(
            repository_path, f"reading {path}", exc
        ) from exc


__all__ = ["TaskPlanner"]
