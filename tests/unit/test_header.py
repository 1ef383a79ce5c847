from __future__ import annotations

import re

from csv_importer.models.column import Column
from csv_importer.models.column_definition import ColumnDefinition
from csv_importer.models.header import Header, sanitize_column_name


def test_missing_required_column_invalidates_header():
    header = Header(
        column_definitions=[
            ColumnDefinition("email", required=True),
            ColumnDefinition("first_name"),
            ColumnDefinition("last_name", required=True),
        ],
        column_names=["email", "first_name"],
    )
    assert header.missing_required_columns == ["last_name"]
    assert header.valid() is False


def test_extra_columns_do_not_affect_validity():
    header = Header(
        column_definitions=[ColumnDefinition("email", required=True), ColumnDefinition("age")],
        column_names=["Email", "Nickname", "Notes"],
    )
    assert header.valid() is True
    assert header.extra_columns == ["Nickname", "Notes"]
    assert header.missing_columns == ["age"]
    assert header.missing_required_columns == []


def test_columns_pair_names_with_definitions():
    email = ColumnDefinition("email")
    name = ColumnDefinition("first_name", as_=re.compile("first", re.I))
    header = Header(column_definitions=[email, name], column_names=["First Name", "email", "other"])

    assert [c.name for c in header.columns] == ["First Name", "email", "other"]
    assert header.columns[0].definition is name
    assert header.columns[1].definition is email
    assert header.columns[2].definition is None


def test_first_declared_definition_wins():
    first = ColumnDefinition("email", as_=re.compile("mail"))
    second = ColumnDefinition("backup_email", as_=re.compile("mail"), required=True)
    header = Header(column_definitions=[first, second], column_names=["email"])

    assert header.columns[0].definition is first
    assert header.missing_required_columns == ["backup_email"]


def test_required_columns():
    header = Header(
        column_definitions=[ColumnDefinition("a", required=True), ColumnDefinition("b")],
        column_names=[],
    )
    assert header.required_columns == ["a"]


def test_sanitizes_invisible_characters():
    header = Header(
        column_definitions=[ColumnDefinition("email", required=True)],
        column_names=["\ufeffemail\u200b"],
    )
    assert header.column_names == ("email",)
    assert header.valid() is True


def test_sanitize_column_name():
    assert sanitize_column_name("na\x00me\t") == "name"
    assert sanitize_column_name("Prénom") == "Prénom"


def test_none_column_name_becomes_empty():
    header = Header(column_definitions=[], column_names=[None])
    assert header.column_names == ("",)


def test_column_name_for_model_attribute():
    header = Header(
        column_definitions=[ColumnDefinition("first_name", to="f_name"), ColumnDefinition("email")],
        column_names=["First Name", "E-mail"],
    )
    assert header.column_name_for_model_attribute("f_name") == "First Name"
    assert header.column_name_for_model_attribute("email") is None


def test_column_data():
    assert Column("tag[colour]").data == "colour"
    assert Column("tag").data is None
