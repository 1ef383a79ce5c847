from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord
from ..models.report import Report

"""Error log generation & buffering.

- JSON Lines with a fixed schema (see ErrorRecord)
- one ``logs/errors-YYYYMMDD-HHMMSS.log`` (UTC) per process, created on first flush
- records are buffered and written in one go by flush()
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
    "records_from_report",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer for error records. Flush appends JSON Lines.

    Not thread safe; one import runs on one thread.
    """
    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir or LOGS_DIR

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def extend(self, records: list[ErrorRecord]) -> None:
        self._records.extend(records)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the log path, or None when nothing was buffered."""
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp


def records_from_report(report: Report, file: str) -> list[ErrorRecord]:
    """One record per invalid row, or a single file-level record for a rejected file."""
    if report.invalid_header:
        return [ErrorRecord.create(file, -1, report.status.value, {"missing_columns": report.missing_columns})]
    if report.invalid_csv_file:
        return [ErrorRecord.create(file, -1, report.status.value, {"parser_error": [report.parser_error or ""]})]

    records = []
    for bucket in ("failed_to_create_rows", "failed_to_update_rows"):
        for row in report.bucket(bucket):
            records.append(ErrorRecord.create(file, row.line_number, bucket.removesuffix("_rows"), row.errors))
    records.sort(key=lambda r: r.line)
    return records
