from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .row import Row

"""Report: the outcome of one import.

- status: pending -> in_progress -> (done | aborted); invalid_header and
  invalid_csv_file are set before any row is processed
- missing / extra column names and the parser error, if any
- six row buckets: (created | updated) x (success | failure | skip)
- a human readable ``message``
"""

__all__ = [
    "BUCKETS",
    "Report",
    "ReportStatus",
]


class ReportStatus(Enum):
    PENDING = "pending"
    INVALID_HEADER = "invalid_header"
    INVALID_CSV_FILE = "invalid_csv_file"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    ABORTED = "aborted"


# Canonical bucket order, used by the report message and the summary line.
BUCKETS: tuple[str, ...] = (
    "created_rows",
    "updated_rows",
    "failed_to_create_rows",
    "failed_to_update_rows",
    "create_skipped_rows",
    "update_skipped_rows",
)


@dataclass
class Report:
    status: ReportStatus = ReportStatus.PENDING
    missing_columns: list[str] = field(default_factory=list)
    extra_columns: list[str] = field(default_factory=list)
    parser_error: str | None = None

    created_rows: list[Row] = field(default_factory=list)
    updated_rows: list[Row] = field(default_factory=list)
    failed_to_create_rows: list[Row] = field(default_factory=list)
    failed_to_update_rows: list[Row] = field(default_factory=list)
    create_skipped_rows: list[Row] = field(default_factory=list)
    update_skipped_rows: list[Row] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.status = ReportStatus(self.status)

    @property
    def valid_rows(self) -> list[Row]:
        return self.created_rows + self.updated_rows

    @property
    def invalid_rows(self) -> list[Row]:
        return self.failed_to_create_rows + self.failed_to_update_rows

    @property
    def all_rows(self) -> list[Row]:
        return self.valid_rows + self.invalid_rows

    @property
    def success(self) -> bool:
        return self.done and not self.invalid_rows

    @property
    def pending(self) -> bool:
        return self.status is ReportStatus.PENDING

    @property
    def in_progress(self) -> bool:
        return self.status is ReportStatus.IN_PROGRESS

    @property
    def done(self) -> bool:
        return self.status is ReportStatus.DONE

    @property
    def aborted(self) -> bool:
        return self.status is ReportStatus.ABORTED

    @property
    def invalid_header(self) -> bool:
        return self.status is ReportStatus.INVALID_HEADER

    @property
    def invalid_csv_file(self) -> bool:
        return self.status is ReportStatus.INVALID_CSV_FILE

    def mark(self, status: ReportStatus | str) -> Report:
        self.status = ReportStatus(status)
        return self

    def bucket(self, name: str) -> list[Row]:
        if name not in BUCKETS:
            raise KeyError(name)
        return getattr(self, name)

    def counts(self) -> dict[str, int]:
        return {name: len(self.bucket(name)) for name in BUCKETS}

    @property
    def message(self) -> str:
        from ..services.report_message import render_message

        return render_message(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "message": self.message,
            "missing_columns": list(self.missing_columns),
            "extra_columns": list(self.extra_columns),
            "parser_error": self.parser_error,
            **{name: [row.line_number for row in self.bucket(name)] for name in BUCKETS},
        }
