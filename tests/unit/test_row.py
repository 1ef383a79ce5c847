from __future__ import annotations

import re

import pytest

from csv_importer.errors import CSVImporterError
from csv_importer.models.column_definition import ColumnDefinition
from csv_importer.models.header import Header
from csv_importer.models.hooks import build_hook
from csv_importer.models.row import Row
from csv_importer.models.store import ModelInstance


def make_row(model_klass, definitions, names, values, **kwargs):
    header = Header(column_definitions=definitions, column_names=names)
    return Row(header=header, line_number=2, row_array=values, model_klass=model_klass, **kwargs)


def test_builds_model_with_attributes(user_model):
    row = make_row(
        user_model,
        [ColumnDefinition("email"), ColumnDefinition("first_name", to="f_name")],
        ["Email", "First Name"],
        ["bob@x.com", "Bob"],
    )
    model = row.model
    assert isinstance(model, user_model)
    assert (model.email, model.f_name) == ("bob@x.com", "Bob")
    assert model.persisted is False


def test_model_is_memoized_and_hooks_run_once(user_model):
    calls = []
    row = make_row(
        user_model,
        [ColumnDefinition("email")],
        ["email"],
        ["bob@x.com"],
        after_build_blocks=[build_hook(lambda model: calls.append(model))],
    )
    first = row.model
    second = row.model
    assert first is second
    assert calls == [first]


def test_hooks_run_in_declaration_order(user_model):
    order = []
    hooks = [build_hook(lambda m: order.append("a")), build_hook(lambda m: order.append("b"))]
    row = make_row(user_model, [ColumnDefinition("email")], ["email"], ["x@y.z"], after_build_blocks=hooks)
    row.model
    assert order == ["a", "b"]


def test_hook_can_mark_row_skipped(user_model):
    def skip_example_domain(model, row):
        if model.email.endswith("@example.com"):
            row.mark_skipped()

    row = make_row(
        user_model,
        [ColumnDefinition("email")],
        ["email"],
        ["bob@example.com"],
        after_build_blocks=[build_hook(skip_example_domain)],
    )
    assert row.skip is False
    row.model
    assert row.skip is True


def test_csv_attributes(user_model):
    row = make_row(user_model, [ColumnDefinition("email")], ["email", "extra"], ["a@b.c", "x"])
    assert row.csv_attributes == {"email": "a@b.c", "extra": "x"}


def test_extra_columns_are_not_assigned(user_model):
    row = make_row(user_model, [ColumnDefinition("email")], ["email", "nickname"], ["a@b.c", "bobby"])
    assert not hasattr(row.model, "nickname")


def test_finds_existing_record(user_model):
    existing = user_model.seed(email="bob@x.com", f_name="Old")
    row = make_row(
        user_model,
        [ColumnDefinition("email", to=str.lower), ColumnDefinition("first_name", to="f_name")],
        ["email", "first_name"],
        ["BOB@X.COM", "Bob"],
        identifiers=["email"],
    )
    assert row.model is existing
    assert existing.f_name == "Bob"
    assert existing.persisted is True
    assert "find_by [('email', 'bob@x.com')]" in user_model.journal


def test_builds_when_not_found(user_model):
    user_model.seed(email="alice@x.com")
    row = make_row(user_model, [ColumnDefinition("email")], ["email"], ["bob@x.com"], identifiers="email")
    assert row.model.persisted is False
    assert row.model.email == "bob@x.com"


def test_no_lookup_without_identifiers(user_model):
    row = make_row(user_model, [ColumnDefinition("email")], ["email"], ["bob@x.com"])
    row.model
    assert not any(entry.startswith("find_by") for entry in user_model.journal)


def test_derived_identifiers(user_model):
    existing = user_model.seed(email="bob@x.com", f_name="Bob")
    row = make_row(
        user_model,
        [ColumnDefinition("email"), ColumnDefinition("first_name", to="f_name")],
        ["email", "first_name"],
        ["bob@x.com", "Bob"],
        identifiers=lambda model: ["email", ["f_name"]] if model.f_name else [],
    )
    assert row.model is existing


def test_derived_identifiers_empty_skips_lookup(user_model):
    user_model.seed(email="bob@x.com")
    row = make_row(
        user_model,
        [ColumnDefinition("email")],
        ["email"],
        ["bob@x.com"],
        identifiers=lambda model: [],
    )
    assert row.model.persisted is False
    assert not any(entry.startswith("find_by") for entry in user_model.journal)


def test_cell_value_is_copied(user_model):
    shared = ["a"]
    row = make_row(
        user_model,
        [ColumnDefinition("tags", to=lambda v: v)],
        ["tags"],
        [shared],
    )
    assert row.model.tags == ["a"]
    assert row.model.tags is not shared


def test_model_converter_mutates_model(user_model):
    def split(value, model):
        model.f_name, model.last_name = value.split(" ", 1)

    row = make_row(user_model, [ColumnDefinition("name", to=split)], ["name"], ["Ada Lovelace"])
    assert (row.model.f_name, row.model.last_name) == ("Ada", "Lovelace")


def test_column_converter_uses_keyed_column(user_model):
    def tag(value, model, column):
        model.tags[column.data] = value

    definition = ColumnDefinition("tags", to=tag, as_=[re.compile(r"^tag\[")])
    row = make_row(user_model, [definition], ["tag[colour]", "tag[size]"], ["red", "L"])
    assert row.model.tags == {"colour": "red", "size": "L"}


def test_transform_errors_propagate(user_model):
    def boom(value):
        raise RuntimeError("bad value")

    row = make_row(user_model, [ColumnDefinition("email", to=boom)], ["email"], ["x"])
    with pytest.raises(RuntimeError, match="bad value"):
        row.model


def test_errors_keyed_by_input_column(user_model):
    row = make_row(
        user_model,
        [ColumnDefinition("mail", to="email", as_="E-mail"), ColumnDefinition("first_name", to="f_name")],
        ["E-mail", "first_name"],
        ["not-an-email", "Bob"],
    )
    assert row.model.save() is False
    row.model.errors["base"] = ["record is locked"]
    assert row.errors == {"E-mail": ["is invalid"], "base": ["record is locked"]}


def test_built_model_satisfies_store_contract(user_model):
    row = make_row(user_model, [ColumnDefinition("email")], ["email"], ["bob@x.com"])
    assert isinstance(row.model, ModelInstance)


def test_model_without_save_is_rejected():
    class Plain:
        @classmethod
        def find_by(cls, **attributes):
            return None

    row = make_row(Plain, [ColumnDefinition("email")], ["email"], ["bob@x.com"])
    with pytest.raises(CSVImporterError, match="Plain cannot be imported into"):
        row.model
