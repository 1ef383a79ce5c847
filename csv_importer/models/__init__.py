"""Domain models for the CSV importer.

Column definitions and converters describe how input columns map onto model
attributes; Header, Row and Report carry one import from input to outcome.
"""

from .column import Column
from .column_definition import AttributeName, ColumnDefinition, InvalidMatchQuery, column
from .config_models import ImporterConfig, SqlTransaction, WhenInvalid
from .converter import Converter, UnsupportedTransformArity
from .header import Header
from .hooks import UnsupportedHookArity
from .report import Report, ReportStatus
from .row import Row
from .store import ModelClass, ModelInstance

__all__ = [
    # Configuration models
    "AttributeName",
    "ColumnDefinition",
    "Converter",
    "ImporterConfig",
    "SqlTransaction",
    "WhenInvalid",
    "column",
    # Processing models
    "Column",
    "Header",
    "Report",
    "ReportStatus",
    "Row",
    # Model store contract
    "ModelClass",
    "ModelInstance",
    # Errors
    "InvalidMatchQuery",
    "UnsupportedHookArity",
    "UnsupportedTransformArity",
]
