from __future__ import annotations

import io
import math
import re
from functools import cached_property
from pathlib import Path
from typing import IO, Any

import pandas as pd

from ..errors import CSVImporterError

"""CSV reader: reads, sanitizes and parses the input into a header and rows.

Steps:
1. Read raw content from ``content``, ``file`` or ``path`` (first one given)
2. Decode bytes with the source encoding, dropping invalid byte sequences
3. Normalize Windows / old Mac line endings to "\\n"
4. Detect the delimiter among "," ";" and tab
5. Parse with pandas as strings (no NA inference), pad/truncate rows to the
   header width and strip every cell
"""

__all__ = [
    "CSVReader",
    "MalformedCSVError",
    "SEPARATORS",
    "detect_separator",
]

SEPARATORS: tuple[str, ...] = (",", ";", "\t")

_LINE_ENDINGS = re.compile(r"\r\r?\n?")


class MalformedCSVError(CSVImporterError):
    """Raised when the tokenizer cannot parse the content."""


def detect_separator(content: str) -> str:
    """Pick the separator whose per-line count deviates least from the first line.

    A separator absent from the first line is never chosen over one that is
    present; ties go to the earlier entry of SEPARATORS.
    """
    lines = content.split("\n")
    first = lines[0] if lines else ""

    def score(separator: str) -> float:
        base = first.count(separator)
        if base == 0:
            return math.inf
        return sum(abs(line.count(separator) - base) for line in lines if line)

    return min(SEPARATORS, key=score)


class CSVReader:
    def __init__(
        self,
        content: str | bytes | None = None,
        file: IO[Any] | None = None,
        path: str | Path | None = None,
        *,
        quote_char: str = '"',
        encoding: str = "utf-8",
    ) -> None:
        self.content = content
        self.file = file
        self.path = path
        self.quote_char = quote_char
        self.encoding = encoding

    @cached_property
    def csv_rows(self) -> list[list[str]]:
        text = self.sanitize_content(self.read_content())
        if not text.strip():
            return []
        return self._parse(text)

    @property
    def header(self) -> list[str]:
        rows = self.csv_rows
        return rows[0] if rows else []

    @property
    def rows(self) -> list[list[str]]:
        return self.csv_rows[1:]

    @cached_property
    def separator(self) -> str:
        return detect_separator(self.sanitize_content(self.read_content()))

    def read_content(self) -> str:
        if self.content:
            raw = self.content
        elif self.file is not None:
            raw = self.file.read()
        elif self.path:
            raw = Path(self.path).read_bytes()
        else:
            raise CSVImporterError("Please provide content, file, or path")
        # Cache so a file object is only read once.
        self.content = raw if isinstance(raw, str) else self._decode(raw)
        self.file = None
        return self.content

    def sanitize_content(self, content: str) -> str:
        return _LINE_ENDINGS.sub("\n", content)

    def _decode(self, raw: bytes) -> str:
        return raw.decode(self.encoding, errors="ignore")

    def _parse(self, text: str) -> list[list[str]]:
        options: dict[str, Any] = {
            "sep": self.separator,
            "quotechar": self.quote_char,
            "header": None,
            "dtype": object,
            "keep_default_na": False,
            "na_filter": False,
            "skip_blank_lines": True,
        }
        try:
            width = pd.read_csv(io.StringIO(text), nrows=1, **options).shape[1]
            # usecols makes the tokenizer drop cells beyond the header width.
            df = pd.read_csv(io.StringIO(text), usecols=list(range(width)), **options)
        except pd.errors.ParserError as e:
            raise MalformedCSVError(str(e)) from e

        return [
            ["" if pd.isna(cell) else str(cell).strip() for cell in values]
            for values in df.values.tolist()
        ]
