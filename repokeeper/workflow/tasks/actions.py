"""Follow-up actions a task runs against each repository.

Actions reuse the workflow operations on a single-repository state, so they
honour dry run, prompting and error reporting exactly like the steps they
mirror.
"""

from __future__ import annotations

import typing as typ

from repokeeper.execshell import CommandDetails, CommandFailedError
from repokeeper.gitrepo import DEFAULT_REMOTE_NAME, RemoteProtocol
from repokeeper.repos import RepositoryOperationError
from repokeeper.workflow.errors import (
    UnsupportedTaskActionError,
    WorkflowConfigurationError,
)
from repokeeper.workflow.migration import (
    DEFAULT_SOURCE_BRANCH,
    DEFAULT_TARGET_BRANCH,
    BranchMigrationOperation,
    BranchMigrationTarget,
)
from repokeeper.workflow.operations import (
    CanonicalRemoteOperation,
    ProtocolConversionOperation,
    RenameOperation,
)
from repokeeper.workflow.options import (
    FROM_KEY,
    INCLUDE_OWNER_KEY,
    OWNER_KEY,
    REQUIRE_CLEAN_KEY,
    TO_KEY,
    OptionReader,
)
from repokeeper.workflow.state import State

if typ.TYPE_CHECKING:
    from repokeeper.execshell import ExecutionContext
    from repokeeper.workflow.state import Environment, RepositoryState

    from .models import TaskActionDefinition

ACTION_CANONICAL_REMOTE = "repo.remote.update"
ACTION_PROTOCOL_CONVERSION = "repo.remote.convert-protocol"
ACTION_RENAME_DIRECTORIES = "repo.folder.rename"
ACTION_BRANCH_DEFAULT = "branch.default"
ACTION_RELEASE_TAG = "repo.release.tag"

TaskActionHandler = typ.Callable[
    ["ExecutionContext", "Environment", "RepositoryState", OptionReader], None
]


def normalize_action_type(action_type: str) -> str:
    """Trim and lower-case an action type."""
    return action_type.strip().lower()


def _parse_protocol(value: str) -> RemoteProtocol:
    try:
        return RemoteProtocol.parse(value)
    except ValueError as exc:
        raise WorkflowConfigurationError([str(exc)]) from exc


def handle_canonical_remote(
    ctx: ExecutionContext,
    env: Environment,
    repository: RepositoryState,
    options: OptionReader,
) -> None:
    """Run the canonical remote update, optionally limited to an owner."""
    operation = CanonicalRemoteOperation(
        owner_constraint=options.string_or(OWNER_KEY, "")
    )
    operation.execute(ctx, env, State.single(repository))


def handle_protocol_conversion(
    ctx: ExecutionContext,
    env: Environment,
    repository: RepositoryState,
    options: OptionReader,
) -> None:
    """Convert origin to ``to``; ``from`` defaults to the current protocol."""
    target = options.string(TO_KEY)
    if not target:
        raise WorkflowConfigurationError(["protocol conversion action requires 'to'"])
    source = options.string(FROM_KEY)
    operation = ProtocolConversionOperation(
        from_protocol=(
            _parse_protocol(source) if source else repository.inspection.remote_protocol
        ),
        to_protocol=_parse_protocol(target),
    )
    operation.execute(ctx, env, State.single(repository))


def handle_rename(
    ctx: ExecutionContext,
    env: Environment,
    repository: RepositoryState,
    options: OptionReader,
) -> None:
    """Rename the repository directory; a clean worktree is required by default."""
    explicit = options.boolean(REQUIRE_CLEAN_KEY)
    operation = RenameOperation(
        require_clean=True if explicit is None else explicit,
        include_owner=options.boolean_or(INCLUDE_OWNER_KEY, default=False),
        require_clean_explicit=explicit is not None,
    )
    operation.execute(ctx, env, State.single(repository))


def handle_branch_default(
    ctx: ExecutionContext,
    env: Environment,
    repository: RepositoryState,
    options: OptionReader,
) -> None:
    """Migrate the repository's default branch."""
    source = options.string_or(
        "source",
        repository.inspection.remote_default_branch.strip() or DEFAULT_SOURCE_BRANCH,
    )
    target = BranchMigrationTarget(
        repository_path=repository.path,
        remote_name=options.string_or("remote", DEFAULT_REMOTE_NAME),
        source_branch=source,
        target_branch=options.string_or("target", DEFAULT_TARGET_BRANCH),
        push_updates=options.boolean_or("push", default=True),
    )
    BranchMigrationOperation(targets=(target,)).execute(
        ctx, env, State.single(repository)
    )


def handle_release_tag(
    ctx: ExecutionContext,
    env: Environment,
    repository: RepositoryState,
    options: OptionReader,
) -> None:
    """Create an annotated tag and push it when a remote is given.

    Raises
    ------
    WorkflowConfigurationError
        If ``tag`` is missing.
    RepositoryOperationError
        If ``git tag`` or ``git push`` fails.

    """
    tag = options.string("tag")
    if not tag:
        raise WorkflowConfigurationError(["release action requires 'tag'"])
    message = options.string_or("message", tag)
    remote = options.string_or("remote", "")
    path = repository.path

    if env.dry_run:
        suffix = f" (push to {remote})" if remote else ""
        env.say(f"PLAN-RELEASE: {path} -> {tag}{suffix}")
        return

    try:
        env.executor.execute_git(
            ctx, CommandDetails.of("tag", "-a", tag, "-m", message, cwd=path)
        )
        if remote:
            env.executor.execute_git(
                ctx, CommandDetails.of("push", remote, tag, cwd=path)
            )
    except CommandFailedError as exc:
        raise RepositoryOperationError.wrap(path, f"release {tag}", exc) from exc
    env.say(f"RELEASED: {path} -> {tag}")


DEFAULT_HANDLERS: typ.Mapping[str, TaskActionHandler] = {
    ACTION_CANONICAL_REMOTE: handle_canonical_remote,
    ACTION_PROTOCOL_CONVERSION: handle_protocol_conversion,
    ACTION_RENAME_DIRECTORIES: handle_rename,
    ACTION_BRANCH_DEFAULT: handle_branch_default,
    ACTION_RELEASE_TAG: handle_release_tag,
}


class TaskActionExecutor:
    """Dispatch task actions to their handlers."""

    def __init__(
        self,
        env: Environment,
        handlers: typ.Mapping[str, TaskActionHandler] | None = None,
    ) -> None:
        """Use ``handlers`` or the built-in set."""
        self._env = env
        self._handlers = dict(DEFAULT_HANDLERS if handlers is None else handlers)

    def supports(self, action_type: str) -> bool:
        """Whether a handler exists for ``action_type``."""
        return normalize_action_type(action_type) in self._handlers

    def execute(
        self,
        ctx: ExecutionContext,
        repository: RepositoryState,
        action: TaskActionDefinition,
    ) -> None:
        """Run ``action`` against ``repository``; blank types are ignored.

        Raises
        ------
        UnsupportedTaskActionError
            If no handler exists for the action type.

        """
        action_type = normalize_action_type(action.action_type)
        if not action_type:
            return
        handler = self._handlers.get(action_type)
        if handler is None:
            raise UnsupportedTaskActionError(action.action_type)
        handler(ctx, self._env, repository, OptionReader(action.options))


__all__ = [
    "ACTION_BRANCH_DEFAULT",
    "ACTION_CANONICAL_REMOTE",
    "ACTION_PROTOCOL_CONVERSION",
    "ACTION_RELEASE_TAG",
    "ACTION_RENAME_DIRECTORIES",
    "DEFAULT_HANDLERS",
    "TaskActionExecutor",
    "TaskActionHandler",
    "normalize_action_type",
]
