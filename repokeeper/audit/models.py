"""Inspection records produced for each discovered repository."""

from __future__ import annotations

import enum

import msgspec

from repokeeper.gitrepo import RemoteProtocol


class Ternary(enum.StrEnum):
    """Three-valued answer used in inspections and the audit report."""

    YES = "yes"
    NO = "no"
    NOT_APPLICABLE = "n/a"

    @classmethod
    def of(cls, value: bool) -> Ternary:  # noqa: FBT001
        """Map a boolean onto ``yes``/``no``."""
        return cls.YES if value else cls.NO


class InspectionDepth(enum.StrEnum):
    """How much work an inspection does.

    ``minimal`` skips local-branch and in-sync checks, which need a fetch.
    """

    MINIMAL = "minimal"
    FULL = "full"


class RepositoryInspection(msgspec.Struct, kw_only=True, frozen=True):
    """Point-in-time facts about one repository.

    Attributes
    ----------
    path
        Absolute path of the working copy.
    folder_name
        Last path component of ``path``.
    origin_url
        URL configured for ``origin``.
    origin_owner_repo
        ``owner/repo`` parsed from ``origin_url``; empty when unparseable.
    canonical_owner_repo
        ``owner/repo`` reported by GitHub; empty when the lookup failed.
    final_owner_repo
        Canonical owner/repo when known, otherwise the origin one.
    desired_folder_name
        Repository part of ``final_owner_repo``.
    remote_protocol
        URL style of ``origin``.
    remote_default_branch
        Default branch on GitHub, falling back to ``origin/HEAD``.
    local_branch
        Checked-out branch (full inspections only).
    in_sync_status
        Whether the local default branch matches the remote.
    origin_matches_canonical
        Whether origin already points at the canonical repository.

    """

    path: str
    folder_name: str
    origin_url: str = ""
    origin_owner_repo: str = ""
    canonical_owner_repo: str = ""
    final_owner_repo: str = ""
    desired_folder_name: str = ""
    remote_protocol: RemoteProtocol = RemoteProtocol.OTHER
    remote_default_branch: str = ""
    local_branch: str = ""
    in_sync_status: Ternary = Ternary.NOT_APPLICABLE
    origin_matches_canonical: Ternary = Ternary.NOT_APPLICABLE
