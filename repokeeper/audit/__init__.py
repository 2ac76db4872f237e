"""Repository inspection and the CSV audit report.

Example
-------
>>> import sys
>>> from repokeeper.audit import InspectionService, write_audit_report
>>> service = InspectionService(
...     discoverer=discoverer, executor=executor, manager=manager, github=client
... )
>>> inspections = service.inspect(ctx, ["~/src"])
>>> write_audit_report(sys.stdout, inspections)
"""

from __future__ import annotations

from .models import InspectionDepth, RepositoryInspection, Ternary
from .report import AUDIT_REPORT_HEADER, report_row, write_audit_report
from .service import InspectionProvider, InspectionService, NotGitHubRemoteError

__all__ = [
    "AUDIT_REPORT_HEADER",
    "InspectionDepth",
    "InspectionProvider",
    "InspectionService",
    "NotGitHubRemoteError",
    "RepositoryInspection",
    "Ternary",
    "report_row",
    "write_audit_report",
]
