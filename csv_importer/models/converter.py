from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ..errors import CSVImporterError

if TYPE_CHECKING:
    from .column import Column

"""Value transforms applied when a cell is written onto a model.

The shape of a column's ``to`` option is resolved once, when the column
definition is built, into one of four converters:

- ``Converter``        plain assignment of the cell value (``to`` absent or an attribute name)
- ``ValueConverter``   ``fn(value) -> new value`` assigned to the target attribute
- ``ModelConverter``   ``fn(value, model)`` mutates the model itself
- ``ColumnConverter``  ``fn(value, model, column)`` also receives the matched input column

Reusable conversions can subclass ``Converter`` and override ``parse``.
"""

__all__ = [
    "Converter",
    "ValueConverter",
    "ModelConverter",
    "ColumnConverter",
    "UnsupportedTransformArity",
    "infer_converter",
    "positional_arity",
]


class UnsupportedTransformArity(CSVImporterError):
    """Raised when a ``to`` callable does not take 1, 2 or 3 positional arguments."""


def positional_arity(fn: Callable[..., Any]) -> int | None:
    """Number of required positional parameters of ``fn``.

    Returns None when the signature cannot be inspected (some builtins such
    as ``int``), and -1 when ``fn`` cannot be called positionally alone: it
    accepts ``*args`` without any required positional parameter, or it has a
    keyword-only parameter without a default.
    """
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return None

    required = 0
    var_positional = False
    for param in signature.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            var_positional = True
        elif param.kind is inspect.Parameter.KEYWORD_ONLY and param.default is inspect.Parameter.empty:
            return -1
        elif (
            param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
            and param.default is inspect.Parameter.empty
        ):
            required += 1
    if var_positional and required == 0:
        return -1
    return required


class Converter:
    """Assigns the (parsed) cell value to the target attribute."""

    def parse(self, value: Any) -> Any:
        return value

    def convert(self, value: Any, model: Any, attribute: str, column: Column | None = None) -> None:
        setattr(model, attribute, self.parse(value))


class ValueConverter(Converter):
    def __init__(self, fn: Callable[[Any], Any]) -> None:
        self.fn = fn

    def parse(self, value: Any) -> Any:
        return self.fn(value)


class ModelConverter(Converter):
    # The callable owns the assignment; nothing is written by the framework.
    def __init__(self, fn: Callable[[Any, Any], Any]) -> None:
        self.fn = fn

    def convert(self, value: Any, model: Any, attribute: str, column: Column | None = None) -> None:
        self.fn(value, model)


class ColumnConverter(Converter):
    def __init__(self, fn: Callable[[Any, Any, Any], Any]) -> None:
        self.fn = fn

    def convert(self, value: Any, model: Any, attribute: str, column: Column | None = None) -> None:
        self.fn(value, model, column)


_BY_ARITY: dict[int, type[Converter]] = {
    1: ValueConverter,
    2: ModelConverter,
    3: ColumnConverter,
}


def infer_converter(to: Any) -> Converter:
    """Resolve a column's ``to`` option into a converter instance.

    Raises:
        UnsupportedTransformArity: ``to`` is callable with an arity other than 1, 2 or 3
        CSVImporterError: ``to`` is neither None, a name, a converter nor a callable
    """
    if to is None or isinstance(to, str):
        return Converter()
    if isinstance(to, Converter):
        return to
    if isinstance(to, type) and issubclass(to, Converter):
        return to()
    if isinstance(to, type):
        # int, float, Decimal, ...: constructors take the cell value
        return ValueConverter(to)
    if callable(to):
        arity = positional_arity(to)
        if arity is None:
            return ValueConverter(to)
        converter_cls = _BY_ARITY.get(arity)
        if converter_cls is None:
            raise UnsupportedTransformArity(
                f"`to` callable must take 1, 2 or 3 positional arguments - {to!r} takes {arity}"
            )
        return converter_cls(to)
    raise CSVImporterError(
        f"Invalid `to`. Should be an attribute name, a Converter or a callable - was {to!r}"
    )
