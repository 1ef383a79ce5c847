from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from ..errors import CSVImporterError
from .converter import Converter, infer_converter

"""ColumnDefinition: declares which input column feeds which model attribute.

Examples::

    # the input column "email" is assigned to the `email` attribute
    ColumnDefinition("email")

    # the input column matching /email/i is assigned to `email`
    ColumnDefinition("email", as_=re.compile("email", re.I))

    # "First name" or "Prénom" are both assigned to `first_name`
    ColumnDefinition("first_name", as_=[re.compile("first ?name", re.I), re.compile("pr(é|e)nom", re.I)])

    # "first_name" is assigned to the `f_name` attribute
    ColumnDefinition("first_name", to="f_name")

    # email is lower-cased before assignment
    ColumnDefinition("email", to=str.lower)
"""

__all__ = [
    "AttributeName",
    "ColumnDefinition",
    "InvalidMatchQuery",
    "column",
]

_WHITESPACE = re.compile(r"\s+")


class InvalidMatchQuery(CSVImporterError):
    """Raised when a match query is not a name, string, pattern or list of those."""


class AttributeName(str):
    """Identifier-style match query.

    Compared against the lower-cased column name with whitespace runs
    collapsed to ``_``, so ``AttributeName("first_name")`` matches
    "First Name", "first_name" and "FIRST NAME".
    """

    __slots__ = ()


@dataclass(eq=False)
class ColumnDefinition:
    """One declared column.

    Attributes:
        name: canonical identifier, used for required/missing reporting
        to: target attribute name, a transform callable, or a Converter
        as_: match query overriding ``name`` for matching purposes
        required: whether a header lacking this column is invalid

    Definitions compare by identity: two declarations with the same options
    are still two distinct columns.
    """

    name: str
    to: Any = None
    as_: Any = None
    required: bool = False
    converter: Converter = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.name = str(self.name)
        self.converter = infer_converter(self.to)

    @property
    def attribute(self) -> str:
        """The model attribute this column targets."""
        if isinstance(self.to, str):
            return self.to
        return self.name

    def match(self, column_name: str | None, query: Any = None) -> bool:
        """Return True if this definition matches the input column name."""
        if column_name is None:
            return False
        if query is None:
            query = self.as_ if self.as_ is not None else AttributeName(self.name)

        downcased = column_name.lower()
        if isinstance(query, AttributeName):
            return _WHITESPACE.sub("_", downcased) == str(query)
        if isinstance(query, str):
            return downcased == query.lower()
        if isinstance(query, re.Pattern):
            return query.search(column_name) is not None
        if isinstance(query, (list, tuple)):
            return any(self.match(column_name, item) for item in query)
        raise InvalidMatchQuery(
            f"Invalid `as`. Should be an AttributeName, str, re.Pattern or list - was {query!r}"
        )


def column(name: str, *, to: Any = None, as_: Any = None, required: bool = False) -> ColumnDefinition:
    """Shorthand used when declaring importer columns."""
    return ColumnDefinition(name=name, to=to, as_=as_, required=required)
