"""CSV audit report over repository inspections."""

from __future__ import annotations

import csv
import typing as typ

from .models import Ternary

if typ.TYPE_CHECKING:
    from .models import RepositoryInspection

AUDIT_REPORT_HEADER: tuple[str, ...] = (
    "final_github_repo",
    "folder_name",
    "name_matches",
    "remote_default_branch",
    "local_branch",
    "in_sync",
    "remote_protocol",
    "origin_matches_canonical",
)


def report_row(inspection: RepositoryInspection) -> list[str]:
    """Render one inspection as a CSV row matching :data:`AUDIT_REPORT_HEADER`."""
    final_repo = inspection.canonical_owner_repo or inspection.origin_owner_repo
    desired = inspection.desired_folder_name
    name_matches = Ternary.of(bool(desired) and desired == inspection.folder_name)
    return [
        final_repo,
        inspection.folder_name,
        name_matches.value,
        inspection.remote_default_branch,
        inspection.local_branch,
        inspection.in_sync_status.value,
        inspection.remote_protocol.value,
        inspection.origin_matches_canonical.value,
    ]


def write_audit_report(
    stream: typ.TextIO, inspections: typ.Iterable[RepositoryInspection]
) -> int:
    """Write the header and one row per inspection; return the row count."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(AUDIT_REPORT_HEADER)
    count = 0
    for inspection in inspections:
        writer.writerow(report_row(inspection))
        count += 1
    return count
