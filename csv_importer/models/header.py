from __future__ import annotations

from collections.abc import Sequence
from functools import cached_property

from .column import Column
from .column_definition import ColumnDefinition

"""Header resolution: pairs every input column with its column definition.

Each input name is matched against the definitions in declaration order and
the first match wins, so a column matching two definitions only satisfies the
first one. Missing/extra sets are derived from that pairing rather than by
re-scanning the input.
"""

__all__ = [
    "Header",
    "sanitize_column_name",
]


def sanitize_column_name(name: str) -> str:
    """Strip non-printable characters (BOM, zero-width spaces, control chars)."""
    return "".join(ch for ch in name if ch.isprintable())


class Header:
    """The resolved header of one input file; reused by every row of an import."""

    def __init__(
        self,
        column_definitions: Sequence[ColumnDefinition],
        column_names: Sequence[str | None],
    ) -> None:
        self._column_definitions = tuple(column_definitions)
        self._column_names = tuple(sanitize_column_name(name or "") for name in column_names)

    @property
    def column_definitions(self) -> tuple[ColumnDefinition, ...]:
        return self._column_definitions

    @property
    def column_names(self) -> tuple[str, ...]:
        return self._column_names

    @cached_property
    def columns(self) -> tuple[Column, ...]:
        return tuple(
            Column(name=name, definition=self._find_column_definition(name))
            for name in self._column_names
        )

    def column_name_for_model_attribute(self, attribute: str) -> str | None:
        for col in self.columns:
            if col.definition is not None and col.definition.attribute == attribute:
                return col.name
        return None

    def valid(self) -> bool:
        return not self.missing_required_columns

    @property
    def required_columns(self) -> list[str]:
        return [d.name for d in self._column_definitions if d.required]

    @property
    def extra_columns(self) -> list[str]:
        return [col.name for col in self.columns if col.definition is None]

    @property
    def missing_required_columns(self) -> list[str]:
        return [d.name for d in self._unmatched_definitions() if d.required]

    @property
    def missing_columns(self) -> list[str]:
        return [d.name for d in self._unmatched_definitions()]

    def _unmatched_definitions(self) -> list[ColumnDefinition]:
        matched = {id(col.definition) for col in self.columns if col.definition is not None}
        return [d for d in self._column_definitions if id(d) not in matched]

    def _find_column_definition(self, name: str) -> ColumnDefinition | None:
        for definition in self._column_definitions:
            if definition.match(name):
                return definition
        return None
