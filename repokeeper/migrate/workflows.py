"""Rewrite branch filters in GitHub Actions workflow files.

Two edits are made, each limited to an exact branch entry:

* inline lists holding only the branch: ``branches: [main]``
* sequence items consisting only of the branch: ``- main``

Afterwards every workflow file is scanned for leftover references. A
reference is the branch name not joined to a neighbouring word character or
hyphen, so ``main-docs`` or ``pre-main`` do not count while
``refs/heads/main`` does.
"""

from __future__ import annotations

import re
import stat
import typing as typ
from pathlib import Path

from repokeeper.logging import get_logger, log_debug

from .models import WorkflowOutcome, WorkflowRewriteConfig

if typ.TYPE_CHECKING:
    from repokeeper.execshell import ExecutionContext

logger = get_logger(__name__)

WORKFLOW_SUFFIXES = frozenset({".yml", ".yaml"})


class WorkflowPatterns(typ.NamedTuple):
    """Compiled patterns for one source branch."""

    inline: re.Pattern[str]
    list_item: re.Pattern[str]
    reference: re.Pattern[str]

    @classmethod
    def for_branch(cls, branch: str) -> WorkflowPatterns:
        """Compile patterns matching ``branch`` literally."""
        escaped = re.escape(branch)
        return cls(
            inline=re.compile(
                rf"(?m)(\s*branches\s*:\s*\[\s*)([\"']?)({escaped})([\"']?)(\s*\])"
            ),
            list_item=re.compile(rf"(?m)^(\s*-\s*)([\"']?)({escaped})([\"']?)[ \t]*$"),
            reference=re.compile(rf"(?<![\w-]){escaped}(?![\w-])"),
        )


def rewrite_content(
    content: str, patterns: WorkflowPatterns, target_branch: str
) -> str:
    """Return ``content`` with branch filters pointing at ``target_branch``."""

    def _inline(match: re.Match[str]) -> str:
        return f"{match[1]}{match[2]}{target_branch}{match[4]}{match[5]}"

    def _item(match: re.Match[str]) -> str:
        return f"{match[1]}{match[2]}{target_branch}{match[4]}"

    rewritten = patterns.inline.sub(_inline, content)
    return patterns.list_item.sub(_item, rewritten)


class WorkflowRewriter:
    """Apply :func:`rewrite_content` to every workflow file in a directory."""

    def rewrite(
        self, ctx: ExecutionContext, config: WorkflowRewriteConfig
    ) -> WorkflowOutcome:
        """Rewrite workflow files in place, preserving their permissions.

        A missing workflows directory yields an empty outcome.

        Raises
        ------
        NotADirectoryError
            If the workflows path exists but is not a directory.
        OSError
            If a workflow file cannot be read or written.

        """
        repository = Path(config.repository_path)
        directory = repository / config.workflows_directory
        if not directory.exists():
            return WorkflowOutcome()
        if not directory.is_dir():
            msg = f"workflows path is not a directory: {directory}"
            raise NotADirectoryError(msg)

        patterns = WorkflowPatterns.for_branch(config.source_branch)
        updated: list[str] = []
        remaining = False
        for path in sorted(directory.rglob("*")):
            if not path.is_file() or path.suffix.lower() not in WORKFLOW_SUFFIXES:
                continue
            ctx.check()
            original = path.read_text(encoding="utf-8")
            rewritten = rewrite_content(original, patterns, config.target_branch)
            if rewritten != original:
                mode = stat.S_IMODE(path.stat().st_mode)
                path.write_text(rewritten, encoding="utf-8")
                path.chmod(mode)
                updated.append(path.relative_to(repository).as_posix())
                log_debug(logger, "rewrote branch filters in %s", path)
            if patterns.reference.search(rewritten):
                remaining = True
        return WorkflowOutcome(
            updated_files=tuple(updated), remaining_main_references=remaining
        )
