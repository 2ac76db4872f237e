"""The ``apply-tasks`` workflow operation and task definition parsing."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from repokeeper.gitrepo import DEFAULT_REMOTE_NAME
from repokeeper.workflow.config import OperationType
from repokeeper.workflow.errors import (
    OptionTypeError,
    UnsupportedTaskActionError,
    WorkflowConfigurationError,
)
from repokeeper.workflow.options import TASKS_KEY, OptionReader

from .actions import DEFAULT_HANDLERS, TaskActionExecutor, normalize_action_type
from .executor import TaskExecutor
from .models import (
    DEFAULT_BRANCH_TEMPLATE,
    DEFAULT_TASK_FILE_PERMISSIONS,
    TaskActionDefinition,
    TaskBranchDefinition,
    TaskCommitDefinition,
    TaskDefinition,
    TaskFileDefinition,
    TaskFileMode,
    TaskPlan,
    TaskPullRequestDefinition,
)
from .planner import TaskPlanner
from .templates import build_task_template_data

if typ.TYPE_CHECKING:
    from repokeeper.execshell import ExecutionContext
    from repokeeper.workflow.state import Environment, RepositoryState, State


def _describe_plan(plan: TaskPlan) -> str:
    files = ", ".join(
        change.relative_path
        if change.apply
        else f"{change.relative_path} ({change.skip_reason})"
        for change in plan.file_changes
    )
    return (
        f"TASK-PLAN: {plan.task_name} {plan.repository_path} "
        f"branch={plan.branch_name} base={plan.start_point or 'HEAD'} files=[{files}]"
    )


@dc.dataclass(slots=True)
class TaskOperation:
    """Plan and apply each task to every repository in order."""

    tasks: tuple[TaskDefinition, ...] = ()

    @property
    def name(self) -> str:
        """Operation type."""
        return OperationType.APPLY_TASKS.value

    def execute(self, ctx: ExecutionContext, env: Environment, state: State) -> None:
        """Run every task against every repository.

        Failures confined to one repository are reported and the next
        repository is processed.
        """
        actions = TaskActionExecutor(env)
        for repository in state.repositories:
            for task in self.tasks:
                ctx.check()
                try:
                    self._run_task(ctx, env, repository, task)
                    for action in task.actions:
                        actions.execute(ctx, repository, action)
                except Exception as exc:
                    if env.report_recoverable(exc):
                        continue
                    raise

    @staticmethod
    def _run_task(
        ctx: ExecutionContext,
        env: Environment,
        repository: RepositoryState,
        task: TaskDefinition,
    ) -> None:
        if not task.files:
            return
        planner = TaskPlanner(task, build_task_template_data(repository, task))
        plan = planner.build_plan(env, repository)
        if plan.skipped:
            env.say(f"TASK-SKIP: {task.name} {repository.path} ({plan.skip_reason})")
            return
        if env.dry_run:
            env.say(_describe_plan(plan))
            return
        TaskExecutor(env, repository, plan).execute(ctx)


def _text(reader: OptionReader, key: str, default: str = "") -> str:
    value = reader.raw(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise OptionTypeError(key, "a string")
    return value


def _mapping(reader: OptionReader, key: str) -> OptionReader | None:
    value = reader.raw(key)
    if value is None:
        return None
    if not isinstance(value, dict):
        raise OptionTypeError(key, "a map")
    return OptionReader(value)


def _permissions(reader: OptionReader) -> int:
    value = reader.raw("permissions")
    if value is None:
        return DEFAULT_TASK_FILE_PERMISSIONS
    if isinstance(value, bool):
        raise OptionTypeError("permissions", "an octal string or integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip(), 8)
        except ValueError as exc:
            raise OptionTypeError("permissions", "an octal string or integer") from exc
    raise OptionTypeError("permissions", "an octal string or integer")


def _file_definition(entry: dict[str, typ.Any]) -> TaskFileDefinition:
    reader = OptionReader(entry)
    path = reader.string("path")
    if not path:
        raise WorkflowConfigurationError(["task file requires 'path'"])
    mode_value = reader.string_or("mode", TaskFileMode.OVERWRITE.value).lower()
    try:
        mode = TaskFileMode(mode_value)
    except ValueError as exc:
        raise WorkflowConfigurationError(
            [f"unsupported task file mode: {mode_value}"]
        ) from exc
    return TaskFileDefinition(
        path_template=path,
        content_template=_text(reader, "content"),
        mode=mode,
        permissions=_permissions(reader),
    )


def _action_definition(entry: dict[str, typ.Any]) -> TaskActionDefinition:
    reader = OptionReader(entry)
    action_type = reader.string("type") or ""
    if normalize_action_type(action_type) not in DEFAULT_HANDLERS:
        raise UnsupportedTaskActionError(action_type)
    options = _mapping(reader, "options")
    return TaskActionDefinition(
        action_type=action_type,
        options=options.as_dict() if options is not None else {},
    )


def parse_task_definition(entry: dict[str, typ.Any]) -> TaskDefinition:
    """Build a :class:`TaskDefinition` from a configuration mapping.

    Raises
    ------
    WorkflowConfigurationError
        If the name is missing or a nested value has the wrong shape.

    """
    reader = OptionReader(entry)
    name = reader.string("name")
    if not name:
        raise WorkflowConfigurationError(["task definition requires 'name'"])

    branch = _mapping(reader, "branch") or OptionReader({})
    commit = _mapping(reader, "commit") or OptionReader({})
    pull_request = _mapping(reader, "pull_request")
    pull_request_definition = None
    if pull_request is not None:
        pull_request_definition = TaskPullRequestDefinition(
            title_template=_text(pull_request, "title"),
            body_template=_text(pull_request, "body"),
            base=pull_request.string_or("base", ""),
            draft=pull_request.boolean_or("draft", default=False),
        )

    return TaskDefinition(
        name=name,
        ensure_clean=reader.boolean_or("ensure_clean", default=False),
        branch=TaskBranchDefinition(
            name_template=branch.string_or("name_template", DEFAULT_BRANCH_TEMPLATE),
            start_point=branch.string_or("start_point", ""),
            push_remote=branch.string_or("push_remote", DEFAULT_REMOTE_NAME),
        ),
        files=tuple(_file_definition(item) for item in reader.mappings("files") or []),
        commit=TaskCommitDefinition(
            message_template=commit.string_or(
                "message_template", TaskCommitDefinition().message_template
            )
        ),
        pull_request=pull_request_definition,
        actions=tuple(
            _action_definition(item) for item in reader.mappings("actions") or []
        ),
    )


def build_task_operation(options: OptionReader) -> TaskOperation:
    """Build an ``apply-tasks`` operation from step options."""
    entries = options.mappings(TASKS_KEY)
    if not entries:
        raise WorkflowConfigurationError(
            ["apply-tasks step requires at least one task"]
        )
    return TaskOperation(tasks=tuple(parse_task_definition(entry) for entry in entries))


__all__ = ["TaskOperation", "build_task_operation", "parse_task_definition"]
