from __future__ import annotations

import io
from pathlib import Path

import pytest

from csv_importer.errors import CSVImporterError
from csv_importer.reader.csv_reader import CSVReader, MalformedCSVError, detect_separator


@pytest.mark.parametrize(
    "content,separator",
    [
        ("email,name\na@x.com,A\n", ","),
        ("email;name\na@x.com;A, Jr.\n", ";"),
        ("email\tname\na@x.com\tA; B\n", "\t"),
        ("email\n", ","),
    ],
)
def test_detect_separator(content, separator):
    assert detect_separator(content) == separator


def test_detect_separator_prefers_consistent_counts():
    content = "a;b,c\n1;2\n3;4\n"
    assert detect_separator(content) == ";"


def test_header_and_rows():
    reader = CSVReader(content="email,first_name\nbob@x.com,Bob\nalice@x.com,Alice\n")
    assert reader.header == ["email", "first_name"]
    assert reader.rows == [["bob@x.com", "Bob"], ["alice@x.com", "Alice"]]


def test_semicolon_and_tab_content():
    assert CSVReader(content="a;b\n1;2\n").rows == [["1", "2"]]
    assert CSVReader(content="a\tb\n1\t2\n").rows == [["1", "2"]]


def test_cells_are_strings_and_stripped():
    reader = CSVReader(content="id,zip,flag\n 007 ,01234,NA\n")
    assert reader.rows == [["007", "01234", "NA"]]


def test_blank_cells_become_empty_strings():
    reader = CSVReader(content="a,b,c\n1,,3\n4\n")
    assert reader.rows == [["1", "", "3"], ["4", "", ""]]


def test_long_rows_truncated_to_header_width():
    reader = CSVReader(content="a,b\n1,2,3,4\n")
    assert reader.rows == [["1", "2"]]


def test_blank_lines_skipped():
    reader = CSVReader(content="a,b\n\n1,2\n\n")
    assert reader.rows == [["1", "2"]]


@pytest.mark.parametrize("newline", ["\r\n", "\r", "\r\r\n"])
def test_line_endings_normalized(newline):
    reader = CSVReader(content=newline.join(["email,name", "a@x.com,A", "b@x.com,B"]))
    assert reader.rows == [["a@x.com", "A"], ["b@x.com", "B"]]


def test_quoted_fields():
    reader = CSVReader(content='name,notes\n"Lovelace, Ada","said ""hi""\nthen left"\n')
    assert reader.rows == [["Lovelace, Ada", 'said "hi"\nthen left']]


def test_custom_quote_char():
    reader = CSVReader(content="name,notes\n'Lovelace, Ada',x\n", quote_char="'")
    assert reader.rows == [["Lovelace, Ada", "x"]]


def test_invalid_bytes_are_dropped():
    reader = CSVReader(content=b"email,name\nbob@x.com,B\xffob\n")
    assert reader.rows == [["bob@x.com", "Bob"]]


def test_source_encoding():
    reader = CSVReader(content="nom,prénom\nLovelace,Adé\n".encode("latin-1"), encoding="latin-1")
    assert reader.header == ["nom", "prénom"]
    assert reader.rows == [["Lovelace", "Adé"]]


def test_reads_file_object_once():
    stream = io.BytesIO(b"a,b\n1,2\n")
    reader = CSVReader(file=stream)
    assert reader.header == ["a", "b"]
    assert reader.rows == [["1", "2"]]
    assert reader.read_content() == "a,b\n1,2\n"


def test_reads_path(tmp_path: Path):
    path = tmp_path / "users.csv"
    path.write_bytes(b"email\r\nbob@x.com\r\n")
    reader = CSVReader(path=path)
    assert reader.header == ["email"]
    assert reader.rows == [["bob@x.com"]]


def test_empty_content():
    reader = CSVReader(content=b"   \n")
    assert reader.header == []
    assert reader.rows == []


def test_no_source():
    with pytest.raises(CSVImporterError, match="Please provide content, file, or path"):
        CSVReader().header


def test_malformed_quoting():
    reader = CSVReader(content='a,b\n"unterminated,1\n')
    with pytest.raises(MalformedCSVError):
        reader.rows
