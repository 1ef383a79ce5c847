from __future__ import annotations

from ..models.report import BUCKETS, Report

"""SUMMARY line rendering for an import Report.

Format:
SUMMARY status={status} rows={processed} created={n} updated={n}
failed_to_create={n} failed_to_update={n} create_skipped={n} update_skipped={n}
"""


def render_summary_line(report: Report) -> str:
    """Render a single SUMMARY line from a Report.

    Args:
        report: Report returned by an import

    Returns:
        Formatted SUMMARY line; ``rows`` counts every row placed in a bucket

    Examples:
        >>> from csv_importer.models.report import Report
        >>> render_summary_line(Report(status="done"))  # doctest: +ELLIPSIS
        'SUMMARY status=done rows=0 created=0 updated=0 ...'
    """
    counts = report.counts()
    processed = sum(counts.values())
    buckets = " ".join(f"{name.removesuffix('_rows')}={counts[name]}" for name in BUCKETS)
    return f"SUMMARY status={report.status.value} rows={processed} {buckets}"
