from __future__ import annotations

from ..models.report import BUCKETS, Report, ReportStatus

"""Human readable message for a Report.

One renderer per status; the ``done`` message lists every non-empty bucket
in canonical order, e.g. "Import completed: 3 created, 1 failed to update".
"""

__all__ = [
    "bucket_label",
    "render_message",
]


def bucket_label(bucket: str) -> str:
    """``create_skipped_rows`` -> ``create skipped``."""
    return bucket.removesuffix("_rows").replace("_", " ")


def _import_details(report: Report) -> str:
    parts = []
    for bucket in BUCKETS:
        size = len(report.bucket(bucket))
        if size > 0:
            parts.append(f"{size} {bucket_label(bucket)}")
    return ", ".join(parts)


def render_message(report: Report) -> str:
    status = report.status
    if status is ReportStatus.PENDING:
        return "Import hasn't started yet"
    if status is ReportStatus.IN_PROGRESS:
        return "Import in progress"
    if status is ReportStatus.INVALID_HEADER:
        return f"The following columns are required: {', '.join(report.missing_columns)}"
    if status is ReportStatus.INVALID_CSV_FILE:
        return report.parser_error or ""
    if status is ReportStatus.ABORTED:
        return "Import aborted"
    return "Import completed: " + _import_details(report)
