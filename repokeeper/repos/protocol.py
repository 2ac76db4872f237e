"""Convert ``origin`` between git, ssh and https URL styles."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from repokeeper.execshell import CommandFailedError
from repokeeper.gitrepo import RemoteProtocol, build_remote_url, detect_protocol

from .errors import RepositoryOperationError
from .shared import LeafOutcome

if typ.TYPE_CHECKING:
    from repokeeper.execshell import ExecutionContext

    from .shared import LeafDependencies


@dc.dataclass(frozen=True, slots=True)
class ProtocolConversionOptions:
    """Inputs for :func:`convert_protocol`."""

    repository_path: str
    origin_owner_repo: str
    canonical_owner_repo: str
    current_protocol: RemoteProtocol
    target_protocol: RemoteProtocol
    dry_run: bool = False


def convert_protocol(
    ctx: ExecutionContext,
    dependencies: LeafDependencies,
    options: ProtocolConversionOptions,
) -> LeafOutcome:
    """Rewrite ``origin`` to ``target_protocol`` if it uses ``current_protocol``.

    The canonical owner/repo is preferred over the one parsed from origin.

    Raises
    ------
    RepositoryOperationError
        If origin cannot be read or updated, or no owner/repo is known.

    """
    path = options.repository_path
    try:
        current_url = dependencies.manager.get_remote_url(ctx, path)
    except CommandFailedError as exc:
        raise RepositoryOperationError.wrap(path, "origin lookup", exc) from exc

    if detect_protocol(current_url) != options.current_protocol:
        return LeafOutcome.SKIPPED

    owner_repo = (
        options.canonical_owner_repo.strip() or options.origin_owner_repo.strip()
    )
    if not owner_repo:
        raise RepositoryOperationError(
            path, f"cannot derive owner/repo for protocol conversion in {path}"
        )
    try:
        target_url = build_remote_url(options.target_protocol, owner_repo)
    except ValueError as exc:
        raise RepositoryOperationError(
            path,
            f"cannot build target URL for protocol "
            f"'{options.target_protocol}' in {path}",
        ) from exc

    if options.dry_run:
        dependencies.say(f"PLAN-CONVERT: {path} origin {current_url} → {target_url}")
        return LeafOutcome.PLANNED

    prompt = (
        f"Convert 'origin' in '{path}' "
        f"({options.current_protocol} → {options.target_protocol})? [a/N/y] "
    )
    if not dependencies.confirm(prompt):
        dependencies.say(f"CONVERT-SKIP: user declined for {path}")
        return LeafOutcome.DECLINED

    try:
        dependencies.manager.set_remote_url(ctx, path, target_url)
    except CommandFailedError as exc:
        raise RepositoryOperationError.wrap(path, "origin update", exc) from exc
    dependencies.say(f"CONVERT-DONE: {path} origin now {target_url}")
    return LeafOutcome.APPLIED
