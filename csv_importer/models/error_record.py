from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from typing import Any

"""ErrorRecord model for the JSON Lines error log.

One record per row that failed to create or update. ``line`` is the 1-based
line number in the input (header = 1); -1 marks file-level problems such as
an invalid header or a malformed file.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: input file name
        line: 1-based input line number, -1 when unknown
        bucket: report bucket (failed_to_create, failed_to_update) or report status
        errors: error messages keyed by input column name (or model attribute)
    """
    timestamp: str
    file: str
    line: int
    bucket: str
    errors: dict[str, Any]

    @staticmethod
    def create(file: str, line: int, bucket: str, errors: dict[str, Any]) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            line=line,
            bucket=bucket,
            errors={str(k): _messages(v) for k, v in errors.items()},
        )

    def to_json_line(self) -> str:
        """Serialize to one JSON line, no keys beyond the dataclass fields."""
        return json.dumps(asdict(self), ensure_ascii=False)


def _messages(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    try:
        return [str(v) for v in value]
    except TypeError:
        return [str(value)]
