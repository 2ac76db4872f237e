"""Declarative tasks: template rendering, planning, execution and actions."""

from __future__ import annotations

from .actions import TaskActionExecutor, TaskActionHandler
from .executor import TaskExecutor
from .models import (
    DEFAULT_TASK_FILE_PERMISSIONS,
    TaskActionDefinition,
    TaskBranchDefinition,
    TaskCommitDefinition,
    TaskDefinition,
    TaskFileChange,
    TaskFileDefinition,
    TaskFileMode,
    TaskPlan,
    TaskPullRequestDefinition,
    TaskPullRequestPlan,
)
from .operation import TaskOperation, build_task_operation, parse_task_definition
from .planner import TaskPlanner
from .templates import (
    TemplateRenderer,
    build_task_template_data,
    normalize_go_references,
    slugify_branch,
)

__all__ = [
    "DEFAULT_TASK_FILE_PERMISSIONS",
    "TaskActionDefinition",
    "TaskActionExecutor",
    "TaskActionHandler",
    "TaskBranchDefinition",
    "TaskCommitDefinition",
    "TaskDefinition",
    "TaskExecutor",
    "TaskFileChange",
    "TaskFileDefinition",
    "TaskFileMode",
    "TaskOperation",
    "TaskPlan",
    "TaskPlanner",
    "TaskPullRequestDefinition",
    "TaskPullRequestPlan",
    "TemplateRenderer",
    "build_task_operation",
    "build_task_template_data",
    "normalize_go_references",
    "parse_task_definition",
    "slugify_branch",
]
