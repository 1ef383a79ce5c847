from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .column_definition import ColumnDefinition
from .hooks import BuildHook, SaveHook, build_hook, save_hook
from .store import ModelClass

"""Importer configuration value.

An ImporterConfig is built once by the host application (directly, or from
YAML via csv_importer.config.loader) and handed to each import. It is frozen;
per-run overrides produce a new value through ``merge``.
"""

__all__ = [
    "AttributeIdentifiers",
    "DerivedIdentifiers",
    "IdentifierSpec",
    "ImporterConfig",
    "NoIdentifiers",
    "SqlTransaction",
    "WhenInvalid",
    "identifier_spec",
]


class WhenInvalid(Enum):
    """What to do when a row fails to save."""
    SKIP = "skip"
    ABORT = "abort"


class SqlTransaction(Enum):
    """Transaction granularity requested from the model store."""
    NONE = "none"
    EACH_ROW = "each_row"
    ALL_ROWS = "all_rows"


@dataclass(frozen=True)
class NoIdentifiers:
    def resolve(self, model: Any) -> list[str]:
        return []

    def __bool__(self) -> bool:
        return False


@dataclass(frozen=True)
class AttributeIdentifiers:
    names: tuple[str, ...]

    def resolve(self, model: Any) -> list[str]:
        return list(self.names)


@dataclass(frozen=True)
class DerivedIdentifiers:
    """Identifier attribute names computed from the scratch model."""
    fn: Callable[[Any], Any]

    def resolve(self, model: Any) -> list[str]:
        return list(_flatten(self.fn(model)))


IdentifierSpec = NoIdentifiers | AttributeIdentifiers | DerivedIdentifiers


def _flatten(value: Any) -> Iterable[str]:
    if value is None:
        return
    if isinstance(value, str):
        yield value
        return
    if isinstance(value, Iterable):
        for item in value:
            yield from _flatten(item)
        return
    yield str(value)


def identifier_spec(value: Any) -> IdentifierSpec:
    """Normalize None / a name / a list of names / a callable into an IdentifierSpec."""
    if isinstance(value, (NoIdentifiers, AttributeIdentifiers, DerivedIdentifiers)):
        return value
    if value is None:
        return NoIdentifiers()
    if isinstance(value, str):
        return AttributeIdentifiers((value,))
    if callable(value):
        return DerivedIdentifiers(value)
    names = tuple(_flatten(value))
    return AttributeIdentifiers(names) if names else NoIdentifiers()


@dataclass(frozen=True)
class ImporterConfig:
    model: ModelClass | None = None
    column_definitions: tuple[ColumnDefinition, ...] = ()
    identifiers: IdentifierSpec = field(default_factory=NoIdentifiers)
    when_invalid: WhenInvalid = WhenInvalid.SKIP
    after_build: tuple[BuildHook, ...] = ()
    after_save: tuple[SaveHook, ...] = ()
    sql_transaction: SqlTransaction = SqlTransaction.NONE

    def __post_init__(self) -> None:
        # Normalize loose inputs (lists, strings, bare callables) in place.
        object.__setattr__(self, "column_definitions", tuple(self.column_definitions))
        object.__setattr__(self, "identifiers", identifier_spec(self.identifiers))
        object.__setattr__(self, "when_invalid", WhenInvalid(self.when_invalid))
        object.__setattr__(self, "sql_transaction", SqlTransaction(self.sql_transaction))
        object.__setattr__(self, "after_build", tuple(build_hook(h) for h in _as_sequence(self.after_build)))
        object.__setattr__(self, "after_save", tuple(save_hook(h) for h in _as_sequence(self.after_save)))

    def merge(self, **overrides: Any) -> ImporterConfig:
        """Return a copy with ``overrides`` applied (per-run configuration)."""
        if not overrides:
            return self
        return dataclasses.replace(self, **overrides)


def _as_sequence(value: Any) -> Sequence[Any]:
    if value is None:
        return ()
    if callable(value):
        return (value,)
    return tuple(value)
