from __future__ import annotations

import logging
from functools import cached_property
from pathlib import Path
from typing import IO, Any

from ..errors import CSVImporterError
from ..models.config_models import ImporterConfig
from ..models.header import Header
from ..models.report import Report, ReportStatus
from ..models.row import Row
from ..reader.csv_reader import CSVReader, MalformedCSVError
from . import runner

"""Importer: reads one input, validates its header and runs the rows.

Example::

    config = ImporterConfig(
        model=User,
        column_definitions=[column("email", to=str.lower, required=True), column("first_name", to="f_name")],
        identifiers=["email"],
    )
    report = Importer(config, path="users.csv").run()
    print(report.message)

Malformed input never escapes: it becomes an ``invalid_csv_file`` report.
Misconfiguration (bad match query, unsupported arity) is raised.
"""

__all__ = [
    "Importer",
]

logger = logging.getLogger(__name__)


class Importer:
    """One import of one input against one configuration.

    Keyword overrides (``when_invalid="abort"``, ``model=...``) are merged into
    a copy of ``config`` for this import only.
    """

    def __init__(
        self,
        config: ImporterConfig,
        *,
        content: str | bytes | None = None,
        file: IO[Any] | None = None,
        path: str | Path | None = None,
        quote_char: str = '"',
        encoding: str = "utf-8",
        **overrides: Any,
    ) -> None:
        self.csv = CSVReader(content=content, file=file, path=path, quote_char=quote_char, encoding=encoding)
        self.config = config.merge(**overrides)
        self.report = Report()

    @cached_property
    def header(self) -> Header:
        return Header(column_definitions=self.config.column_definitions, column_names=self.csv.header)

    def rows(self) -> list[Row]:
        """Build fresh rows for the input; line numbers start at 2 (header is line 1)."""
        if self.config.model is None:
            raise CSVImporterError("No model configured for this importer")
        return [
            Row(
                header=self.header,
                line_number=line_number,
                row_array=row_array,
                model_klass=self.config.model,
                identifiers=self.config.identifiers,
                after_build_blocks=self.config.after_build,
            )
            for line_number, row_array in enumerate(self.csv.rows, start=2)
        ]

    def valid_header(self) -> bool:
        """Check the header once, recording the outcome on the report."""
        try:
            if self.report.pending:
                if self.header.valid():
                    self.report = Report(status=ReportStatus.PENDING, extra_columns=self.header.extra_columns)
                    if self.header.extra_columns:
                        logger.info("ignoring extra columns: %s", ", ".join(self.header.extra_columns))
                else:
                    self.report = Report(
                        status=ReportStatus.INVALID_HEADER,
                        missing_columns=self.header.missing_required_columns,
                        extra_columns=self.header.extra_columns,
                    )
                    logger.warning(
                        "invalid header, missing required columns: %s",
                        ", ".join(self.header.missing_required_columns),
                    )
            return self.header.valid()
        except MalformedCSVError as e:
            self._invalid_csv_file(e)
            return False

    def run(self) -> Report:
        """Run the import and return its Report."""
        try:
            if not self.valid_header():
                return self.report
            self.report = runner.run(
                self.rows(),
                when_invalid=self.config.when_invalid,
                after_save=self.config.after_save,
                sql_transaction=self.config.sql_transaction,
                report=self.report,
            )
        except MalformedCSVError as e:
            self._invalid_csv_file(e)
        return self.report

    def _invalid_csv_file(self, error: MalformedCSVError) -> None:
        logger.error("malformed input: %s", error)
        self.report = Report(status=ReportStatus.INVALID_CSV_FILE, parser_error=str(error))
