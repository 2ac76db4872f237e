"""Render task templates with Jinja2.

Templates may use Go-style field references with a leading dot
(``{{ .Repository.Name }}``); the dot is dropped before Jinja compiles the
template, so ``{{ Repository.Name }}`` works as well.
"""

from __future__ import annotations

import re
import typing as typ
from pathlib import Path

import jinja2

from repokeeper.common.slug import repo_name
from repokeeper.workflow.errors import TaskTemplateError

if typ.TYPE_CHECKING:
    from repokeeper.workflow.state import RepositoryState

    from .models import TaskDefinition

_TAG = re.compile(r"(\{\{|\{%)(.*?)(\}\}|%\})", re.DOTALL)
_LEADING_DOT = re.compile(r"(?<![\w\])'\"])\.(?=[A-Za-z_])")
_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")

TemplateData = dict[str, dict[str, str]]


def normalize_go_references(template: str) -> str:
    """Strip leading dots from field references inside template tags."""

    def _strip(match: re.Match[str]) -> str:
        return f"{match[1]}{_LEADING_DOT.sub('', match[2])}{match[3]}"

    return _TAG.sub(_strip, template)


def slugify_branch(value: str) -> str:
    """Lower-case ``value`` and collapse non-alphanumeric runs to ``-``.

    >>> slugify_branch("feature/sample/docs update")
    'feature-sample-docs-update'
    """
    return _NON_ALPHANUMERIC.sub("-", value.lower()).strip("-")


def build_task_template_data(
    repository: RepositoryState, definition: TaskDefinition
) -> TemplateData:
    """Values templates can reference under ``Repository`` and ``Task``."""
    inspection = repository.inspection
    full_name = inspection.final_owner_repo.strip()
    folder = Path(repository.path).name
    name = repo_name(full_name) or folder
    return {
        "Repository": {
            "Path": repository.path,
            "Name": name,
            "FullName": full_name,
            "Owner": full_name.partition("/")[0] if "/" in full_name else "",
            "FolderName": inspection.folder_name,
            "DefaultBranch": inspection.remote_default_branch,
            "LocalBranch": inspection.local_branch,
            "OriginURL": inspection.origin_url,
            "Protocol": inspection.remote_protocol.value,
        },
        "Task": {"Name": definition.name},
    }


class TemplateRenderer:
    """Compile and render templates for one task."""

    def __init__(self, task_name: str) -> None:
        """Create a strict, non-escaping Jinja environment."""
        self._task_name = task_name
        self._environment = jinja2.Environment(  # noqa: S701
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False,
        )

    def render(self, field: str, template: str, data: TemplateData) -> str:
        """Render ``template``; ``field`` names it in errors.

        Raises
        ------
        TaskTemplateError
            If the template is malformed or references an unknown value.

        """
        try:
            compiled = self._environment.from_string(normalize_go_references(template))
            return compiled.render(data)
        except jinja2.TemplateError as exc:
            raise TaskTemplateError(self._task_name, field, str(exc)) from exc


__all__ = [
    "TemplateData",
    "TemplateRenderer",
    "build_task_template_data",
    "normalize_go_references",
    "slugify_branch",
]
