# Shared pytest fixtures
from __future__ import annotations

import sys
import tempfile
from contextlib import contextmanager
from pathlib import Path

import pytest

from csv_importer.logging.init import reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def user_model():
    """In-memory model store: validates email, finds by equality, journals transactions."""

    class User:
        store: list = []
        journal: list = []

        def __init__(self):
            self.email = None
            self.f_name = None
            self.last_name = None
            self.tags = {}
            self.errors = {}
            self.persisted = False
            self.saves = 0

        def __repr__(self):
            return f"<User email={self.email!r}>"

        def save(self):
            type(self).journal.append(f"save {self.email}")
            self.errors = {}
            if not self.email or "@" not in str(self.email):
                self.errors = {"email": ["is invalid"]}
                return False
            if not self.persisted:
                type(self).store.append(self)
                self.persisted = True
            self.saves += 1
            return True

        @classmethod
        def find_by(cls, **attributes):
            cls.journal.append(f"find_by {sorted(attributes.items())}")
            for record in cls.store:
                if all(getattr(record, k, None) == v for k, v in attributes.items()):
                    return record
            return None

        @classmethod
        @contextmanager
        def transaction(cls):
            cls.journal.append("begin")
            snapshot = list(cls.store)
            try:
                yield
            except BaseException:
                cls.store[:] = snapshot
                cls.journal.append("rollback")
                raise
            cls.journal.append("commit")

        @classmethod
        def seed(cls, **attributes):
            record = cls()
            for k, v in attributes.items():
                setattr(record, k, v)
            record.persisted = True
            cls.store.append(record)
            return record

    User.store = []
    User.journal = []
    return User


IMPORT_APP = '''
from contextlib import contextmanager

from csv_importer.db.record import PgRecord


class Member:
    store = []

    def __init__(self):
        self.email = None
        self.name = None
        self.errors = {}
        self.persisted = False

    def save(self):
        if not self.email or "@" not in self.email:
            self.errors = {"email": ["is invalid"]}
            return False
        if not self.persisted:
            Member.store.append(self)
            self.persisted = True
        return True

    @classmethod
    def find_by(cls, **attributes):
        for record in cls.store:
            if all(getattr(record, k) == v for k, v in attributes.items()):
                return record
        return None

    @classmethod
    @contextmanager
    def transaction(cls):
        snapshot = list(cls.store)
        try:
            yield
        except BaseException:
            cls.store[:] = snapshot
            raise


def downcase(value):
    return value.lower()


class Account(PgRecord):
    __table__ = "accounts"
    __fields__ = ("email", "name")
'''

IMPORT_CONFIG = """\
model: csv_import_app:Member
columns:
  - name: email
    required: true
    to: csv_import_app:downcase
  - name: name
    as:
      - Full Name
      - attribute: name
identifiers:
  - email
"""


@pytest.fixture()
def import_app(temp_workdir: Path, monkeypatch):
    """Importable ``csv_import_app`` module plus config/importer.yml in the temp workdir."""
    (temp_workdir / "csv_import_app.py").write_text(IMPORT_APP, encoding="utf-8")
    (temp_workdir / "config" / "importer.yml").write_text(IMPORT_CONFIG, encoding="utf-8")
    monkeypatch.syspath_prepend(str(temp_workdir))
    import csv_import_app

    yield csv_import_app
    sys.modules.pop("csv_import_app", None)
