from __future__ import annotations

from collections.abc import Mapping, Sequence
from contextlib import AbstractContextManager
from typing import Any, Protocol, runtime_checkable

"""Model store contract expected from ``ImporterConfig.model``.

Any class can act as the import target as long as it provides these members.
csv_importer.db.record.PgRecord is a ready-made implementation over psycopg2.
"""

__all__ = [
    "ModelClass",
    "ModelInstance",
]


@runtime_checkable
class ModelInstance(Protocol):
    @property
    def persisted(self) -> bool: ...

    @property
    def errors(self) -> Mapping[str, Sequence[str]]: ...

    def save(self) -> bool: ...


class ModelClass(Protocol):
    def __call__(self) -> ModelInstance: ...

    def find_by(self, **attributes: Any) -> ModelInstance | None: ...

    # Only required when sql_transaction is not "none".
    def transaction(self) -> AbstractContextManager[Any]: ...
