"""Point ``origin`` at the canonical GitHub repository."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from repokeeper.common.slug import slugs_match
from repokeeper.execshell import CommandFailedError
from repokeeper.gitrepo import RemoteProtocol, build_remote_url

from .errors import RepositoryOperationError
from .shared import LeafOutcome

if typ.TYPE_CHECKING:
    from repokeeper.execshell import ExecutionContext

    from .shared import LeafDependencies


@dc.dataclass(frozen=True, slots=True)
class RemoteUpdateOptions:
    """Inputs for :func:`update_canonical_remote`."""

    repository_path: str
    current_origin_url: str
    origin_owner_repo: str
    canonical_owner_repo: str
    protocol: RemoteProtocol
    dry_run: bool = False
    owner_constraint: str = ""


def update_canonical_remote(
    ctx: ExecutionContext,
    dependencies: LeafDependencies,
    options: RemoteUpdateOptions,
) -> LeafOutcome:
    """Rewrite ``origin`` when GitHub reports a different canonical name.

    Raises
    ------
    RepositoryOperationError
        If the target URL cannot be built or ``git remote set-url`` fails.

    """
    path = options.repository_path
    origin = options.origin_owner_repo.strip()
    canonical = options.canonical_owner_repo.strip()
    if not origin:
        dependencies.say(
            f"UPDATE-REMOTE-SKIP: {path} (error: could not parse origin owner/repo)"
        )
        return LeafOutcome.SKIPPED
    if not canonical:
        dependencies.say(
            f"UPDATE-REMOTE-SKIP: {path} (no upstream: no canonical redirect found)"
        )
        return LeafOutcome.SKIPPED
    if slugs_match(origin, canonical):
        dependencies.say(f"UPDATE-REMOTE-SKIP: {path} (already canonical)")
        return LeafOutcome.SKIPPED
    required_owner = options.owner_constraint.strip()
    canonical_owner = canonical.partition("/")[0]
    if required_owner and required_owner.casefold() != canonical_owner.casefold():
        dependencies.say(
            f"UPDATE-REMOTE-SKIP: {path} (owner constraint unmet: required "
            f"{required_owner}, canonical {canonical_owner})"
        )
        return LeafOutcome.SKIPPED

    try:
        target_url = build_remote_url(options.protocol, canonical)
    except ValueError as exc:
        raise RepositoryOperationError(
            path, f"could not construct target URL for {path}: {exc}"
        ) from exc

    if options.dry_run:
        dependencies.say(
            f"PLAN-UPDATE-REMOTE: {path} origin "
            f"{options.current_origin_url} → {target_url}"
        )
        return LeafOutcome.PLANNED

    prompt = (
        f"Update 'origin' in '{path}' to canonical "
        f"({origin} → {canonical})? [a/N/y] "
    )
    if not dependencies.confirm(prompt):
        dependencies.say(f"UPDATE-REMOTE-SKIP: user declined for {path}")
        return LeafOutcome.DECLINED

    try:
        dependencies.manager.set_remote_url(ctx, path, target_url)
    except CommandFailedError as exc:
        raise RepositoryOperationError.wrap(path, "origin update", exc) from exc
    dependencies.say(f"UPDATE-REMOTE-DONE: {path} origin now {target_url}")
    return LeafOutcome.APPLIED
