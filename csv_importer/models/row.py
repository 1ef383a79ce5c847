from __future__ import annotations

import copy
import logging
from collections.abc import Sequence
from functools import cached_property
from typing import Any

from ..errors import CSVImporterError
from .column import Column
from .column_definition import ColumnDefinition
from .config_models import IdentifierSpec, NoIdentifiers, identifier_spec
from .header import Header
from .hooks import BuildHook
from .store import ModelClass, ModelInstance

"""Row: one data record and the model it materializes into.

Using the header, the model class and the identifier specification it finds
or builds the model to be persisted. The model is memoized: find/build,
transforms and after_build hooks run once per row.
"""

__all__ = [
    "Row",
]

logger = logging.getLogger(__name__)


class Row:
    def __init__(
        self,
        header: Header,
        line_number: int,
        row_array: Sequence[Any],
        model_klass: ModelClass,
        identifiers: IdentifierSpec | Any = None,
        after_build_blocks: Sequence[BuildHook] = (),
    ) -> None:
        self.header = header
        self.line_number = line_number  # 1-based, header is line 1
        self.row_array = list(row_array)
        self.model_klass = model_klass
        self.identifiers = identifier_spec(identifiers) if identifiers is not None else NoIdentifiers()
        self.after_build_blocks = tuple(after_build_blocks)
        self.skip = False

    def __repr__(self) -> str:
        return f"Row(line_number={self.line_number}, skip={self.skip})"

    def mark_skipped(self) -> None:
        """Exclude this row from persistence; it will land in a *_skipped bucket."""
        self.skip = True

    @cached_property
    def csv_attributes(self) -> dict[str, Any]:
        """Input column name -> raw cell value."""
        return dict(zip(self.header.column_names, self.row_array))

    @cached_property
    def model(self) -> ModelInstance:
        """The model to be persisted."""
        model = self.find_or_build_model()
        if not isinstance(model, ModelInstance):
            raise CSVImporterError(
                f"{type(model).__name__} cannot be imported into: it needs persisted, errors and save()"
            )
        self.set_attributes(model)
        for hook in self.after_build_blocks:
            hook(model, self)
        return model

    @property
    def errors(self) -> dict[str, Any]:
        """Model errors keyed by input column name where a column maps to the attribute."""
        mapped: dict[str, Any] = {}
        for attribute, messages in dict(getattr(self.model, "errors", None) or {}).items():
            column_name = self.header.column_name_for_model_attribute(attribute)
            mapped[column_name or attribute] = messages
        return mapped

    def set_attributes(self, model: Any) -> Any:
        for column in self.header.columns:
            if column.definition is None:
                continue
            value = self.csv_attributes.get(column.name)
            try:
                value = copy.copy(value)
            except (TypeError, copy.Error):
                pass
            self.set_attribute(model, column.definition, value, column)
        return model

    def set_attribute(
        self, model: Any, column_definition: ColumnDefinition, csv_value: Any, column: Column | None = None
    ) -> Any:
        column_definition.converter.convert(csv_value, model, column_definition.attribute, column)
        return model

    def find_or_build_model(self) -> ModelInstance:
        found = self.find_model()
        return found if found is not None else self.build_model()

    def find_model(self) -> ModelInstance | None:
        if not self.identifiers:
            return None

        scratch = self.build_model()
        self.set_attributes(scratch)

        names = self.identifiers.resolve(scratch)
        if not names:
            return None

        query = {name: getattr(scratch, name, None) for name in names}
        found = self.model_klass.find_by(**query)
        logger.debug("line=%d find_by %s -> %s", self.line_number, query, "found" if found is not None else "none")
        return found

    def build_model(self) -> ModelInstance:
        return self.model_klass()
