from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, ClassVar

import psycopg2

from ..errors import CSVImporterError

"""PostgreSQL record store (psycopg2) usable as an importer model.

Example::

    class Subscriber(PgRecord):
        __table__ = "subscribers"
        __fields__ = ("email", "first_name", "confirmed_at")

        def validate(self):
            return {} if self.email and "@" in self.email else {"email": ["is invalid"]}

    PgRecord.bind(psycopg2.connect(dsn))

Transaction handling:
- outside ``transaction()`` every save commits (or rolls back) on its own
- inside, each save runs in a savepoint so one failing row does not abort
  the enclosing transaction; the outermost block commits or rolls back
"""

__all__ = [
    "NotBoundError",
    "PgRecord",
]

logger = logging.getLogger(__name__)

_SAVEPOINT = "csv_importer_save"


class NotBoundError(CSVImporterError):
    pass


@dataclass
class _Binding:
    connection: Any
    depth: int = 0


def _quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


class PgRecord:
    __table__: ClassVar[str] = ""
    __fields__: ClassVar[tuple[str, ...]] = ()
    __primary_key__: ClassVar[str] = "id"

    _binding: ClassVar[_Binding | None] = None

    def __init__(self, **values: Any) -> None:
        unknown = set(values) - set(self.__fields__) - {self.__primary_key__}
        if unknown:
            raise TypeError(f"{type(self).__name__} has no fields {sorted(unknown)}")
        setattr(self, self.__primary_key__, values.get(self.__primary_key__))
        for name in self.__fields__:
            setattr(self, name, values.get(name))
        self.errors: dict[str, list[str]] = {}
        self._persisted = False

    def __repr__(self) -> str:
        pk = getattr(self, self.__primary_key__)
        return f"<{type(self).__name__} {self.__primary_key__}={pk!r}>"

    # ── binding ────────────────────────────────────────────────────────

    @classmethod
    def bind(cls, connection: Any) -> None:
        """Attach a psycopg2 connection to this class and its subclasses."""
        cls._binding = _Binding(connection=connection)

    @classmethod
    def connection(cls) -> Any:
        if cls._binding is None:
            raise NotBoundError(f"{cls.__name__} is not bound to a connection - call bind() first")
        return cls._binding.connection

    # ── model store contract ───────────────────────────────────────────

    @property
    def persisted(self) -> bool:
        return self._persisted

    def validate(self) -> dict[str, list[str]]:
        """Return attribute -> messages; override in subclasses."""
        return {}

    def values(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.__fields__}

    @classmethod
    def find_by(cls, **attributes: Any) -> PgRecord | None:
        columns = [cls.__primary_key__, *cls.__fields__]
        clauses = []
        params = []
        for name, value in attributes.items():
            if value is None:
                clauses.append(f"{_quote(name)} IS NULL")
            else:
                clauses.append(f"{_quote(name)} = %s")
                params.append(value)
        where = " AND ".join(clauses) or "TRUE"
        sql = f"SELECT {', '.join(_quote(c) for c in columns)} FROM {_quote(cls.__table__)} WHERE {where} LIMIT 1"

        with cls.connection().cursor() as cur:
            cur.execute(sql, params)
            found = cur.fetchone()
        if found is None:
            return None
        record = cls(**dict(zip(columns, found)))
        record._persisted = True
        return record

    def save(self) -> bool:
        self.errors = {k: list(v) for k, v in self.validate().items() if v}
        if self.errors:
            return False

        binding = type(self)._bound()
        in_transaction = binding.depth > 0
        conn = binding.connection
        try:
            with conn.cursor() as cur:
                if in_transaction:
                    cur.execute(f"SAVEPOINT {_SAVEPOINT}")
                if self._persisted:
                    self._update(cur)
                else:
                    self._insert(cur)
                if in_transaction:
                    cur.execute(f"RELEASE SAVEPOINT {_SAVEPOINT}")
            if not in_transaction:
                conn.commit()
        except psycopg2.Error as e:
            message = (getattr(e, "pgerror", None) or str(e)).strip()
            logger.debug("save failed table=%s: %s", self.__table__, message)
            if in_transaction:
                with conn.cursor() as cur:
                    cur.execute(f"ROLLBACK TO SAVEPOINT {_SAVEPOINT}")
            else:
                conn.rollback()
            self.errors = {"base": [message]}
            return False

        self._persisted = True
        return True

    @classmethod
    @contextmanager
    def transaction(cls) -> Iterator[Any]:
        """Commit on normal exit, roll back and re-raise on error; nested blocks join the outer one."""
        binding = cls._bound()
        outermost = binding.depth == 0
        binding.depth += 1
        try:
            yield binding.connection
        except BaseException:
            if outermost:
                binding.connection.rollback()
            raise
        else:
            if outermost:
                binding.connection.commit()
        finally:
            binding.depth -= 1

    # ── helpers ────────────────────────────────────────────────────────

    @classmethod
    def _bound(cls) -> _Binding:
        cls.connection()
        assert cls._binding is not None
        return cls._binding

    def _insert(self, cur: Any) -> None:
        values = self.values()
        cols = ", ".join(_quote(c) for c in values)
        placeholders = ", ".join(["%s"] * len(values))
        sql = (
            f"INSERT INTO {_quote(self.__table__)} ({cols}) VALUES ({placeholders}) "
            f"RETURNING {_quote(self.__primary_key__)}"
        )
        cur.execute(sql, list(values.values()))
        returned = cur.fetchone()
        if returned is not None:
            setattr(self, self.__primary_key__, returned[0])

    def _update(self, cur: Any) -> None:
        values = self.values()
        assignments = ", ".join(f"{_quote(c)} = %s" for c in values)
        sql = f"UPDATE {_quote(self.__table__)} SET {assignments} WHERE {_quote(self.__primary_key__)} = %s"
        cur.execute(sql, [*values.values(), getattr(self, self.__primary_key__)])
