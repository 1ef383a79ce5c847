from __future__ import annotations

"""Exception base for the csv_importer package.

Concrete errors live next to the code that raises them; they all derive from
CSVImporterError so host applications can catch misconfiguration in one place.
"""

__all__ = [
    "CSVImporterError",
]


class CSVImporterError(Exception):
    """Base class for every error raised by csv_importer."""
