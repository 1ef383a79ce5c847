"""CSV -> model importer.

Example::

    from csv_importer import Importer, ImporterConfig, column

    config = ImporterConfig(
        model=User,
        column_definitions=[column("email", required=True), column("first_name", to="f_name")],
        identifiers=["email"],
    )
    report = Importer(config, path="users.csv").run()
    print(report.message)
"""

from .config.loader import ConfigError, load_config, parse_config
from .errors import CSVImporterError
from .models import (
    AttributeName,
    Column,
    ColumnDefinition,
    Converter,
    Header,
    ImporterConfig,
    InvalidMatchQuery,
    Report,
    ReportStatus,
    Row,
    SqlTransaction,
    UnsupportedHookArity,
    UnsupportedTransformArity,
    WhenInvalid,
    column,
)
from .reader.csv_reader import CSVReader, MalformedCSVError
from .services.importer import Importer
from .services.runner import UnknownOutcome

__version__ = "0.1.0"

__all__ = [
    "AttributeName",
    "CSVImporterError",
    "CSVReader",
    "Column",
    "ColumnDefinition",
    "ConfigError",
    "Converter",
    "Header",
    "Importer",
    "ImporterConfig",
    "InvalidMatchQuery",
    "MalformedCSVError",
    "Report",
    "ReportStatus",
    "Row",
    "SqlTransaction",
    "UnknownOutcome",
    "UnsupportedHookArity",
    "UnsupportedTransformArity",
    "WhenInvalid",
    "column",
    "load_config",
    "parse_config",
]
