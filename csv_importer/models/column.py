from __future__ import annotations

import re
from dataclasses import dataclass

from .column_definition import ColumnDefinition

"""Column: one input column name paired with the definition that matched it."""

__all__ = [
    "Column",
]

_KEYED = re.compile(r".*\[(.*)\]")


@dataclass(frozen=True)
class Column:
    name: str  # sanitized input column name
    definition: ColumnDefinition | None = None

    @property
    def data(self) -> str | None:
        """Key of a keyed column, e.g. ``"colour"`` for ``"tag[colour]"``."""
        match = _KEYED.match(self.name)
        return match.group(1) if match else None
