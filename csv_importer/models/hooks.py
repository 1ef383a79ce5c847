from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..errors import CSVImporterError
from .converter import positional_arity

if TYPE_CHECKING:
    from .row import Row

"""after_build / after_save hooks with their calling convention fixed at registration.

- BuildHook: ``fn(model)`` or ``fn(model, row)``. The two-argument form is the
  only place a hook may change pipeline control flow, via ``row.mark_skipped()``.
- SaveHook: ``fn()``, ``fn(model)`` or ``fn(model, csv_attributes)``.
"""

__all__ = [
    "BuildHook",
    "SaveHook",
    "UnsupportedHookArity",
    "build_hook",
    "save_hook",
]


class UnsupportedHookArity(CSVImporterError):
    """Raised when a hook callable takes an unsupported number of arguments."""


@dataclass(frozen=True)
class BuildHook:
    fn: Callable[..., Any]
    arity: int

    def __call__(self, model: Any, row: Row) -> None:
        if self.arity == 1:
            self.fn(model)
        else:
            self.fn(model, row)


@dataclass(frozen=True)
class SaveHook:
    fn: Callable[..., Any]
    arity: int

    def __call__(self, model: Any, csv_attributes: Mapping[str, Any]) -> None:
        if self.arity == 0:
            self.fn()
        elif self.arity == 1:
            self.fn(model)
        else:
            self.fn(model, csv_attributes)


def build_hook(fn: Callable[..., Any] | BuildHook) -> BuildHook:
    if isinstance(fn, BuildHook):
        return fn
    arity = positional_arity(fn)
    if arity not in (1, 2):
        raise UnsupportedHookArity(f"after_build hook must take (model) or (model, row) - {fn!r} takes {arity}")
    return BuildHook(fn=fn, arity=arity)


def save_hook(fn: Callable[..., Any] | SaveHook) -> SaveHook:
    if isinstance(fn, SaveHook):
        return fn
    arity = positional_arity(fn)
    if arity not in (0, 1, 2):
        raise UnsupportedHookArity(
            f"after_save hook must take (), (model) or (model, csv_attributes) - {fn!r} takes {arity}"
        )
    return SaveHook(fn=fn, arity=arity)
