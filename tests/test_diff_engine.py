from pathlib import Path

from csvdiffpack.core import Table
from csvdiffpack.diff import diff_tables
from csvdiffpack.source import read_csv_file

TABLES = Path("examples/tables")


def test_diff_engine_reports_fixture_changes() -> None:
    old = read_csv_file(TABLES / "inventory_base.csv")
    new = read_csv_file(TABLES / "inventory_changed.csv")

    result = diff_tables(old, new, old_label="base", new_label="changed")

    assert result.identical is False
    assert result.summary() == {
        "added_columns": 1,
        "removed_columns": 1,
        "moved_columns": 0,
        "added_rows": 1,
        "deleted_rows": 1,
        "moved_rows": 1,
        "matched_rows": 3,
    }
    assert result.columns.added_columns == ("origin",)
    assert result.columns.removed_columns == ("price",)
    assert result.columns.moved_columns == ()

    moved = result.rows.moved_rows[0]
    assert (moved.identifier, moved.old_index, moved.new_index) == ("3", 3, 1)
    assert [row.identifier for row in result.rows.added_rows] == ["5"]
    assert [row.identifier for row in result.rows.deleted_rows] == ["4"]

    assert result.merged.column_names == ["id", "name", "qty", "price", "origin"]
    assert [(row.identifier, row.status) for row in result.merged.rows] == [
        ("3", "moved"),
        ("1", "normal"),
        ("2", "normal"),
        ("4", "removed"),
        ("5", "added"),
    ]
    assert result.merged.rows[0].values["price"] == "3.00"


def test_diff_engine_identical_tables() -> None:
    table = read_csv_file(TABLES / "inventory_base.csv")

    result = diff_tables(table, table)

    assert result.identical is True
    assert result.summary()["matched_rows"] == 4
    assert all(row.status == "normal" for row in result.merged.rows)


def test_diff_engine_column_append_scenario() -> None:
    old = Table.from_rows([["A", "B", "C"]])
    new = Table.from_rows([["A", "B", "C", "D"]])

    result = diff_tables(old, new)

    assert result.columns.added_columns == ("D",)
    assert result.columns.removed_columns == ()
    assert result.columns.moved_columns == ()


def test_diff_engine_empty_tables() -> None:
    result = diff_tables(Table(), Table())

    assert result.identical is True
    assert result.old_header == ()
    assert result.merged.rows == ()


def test_diff_engine_against_empty_old_table_adds_everything() -> None:
    new = Table.from_rows([["id", "v"], ["1", "x"]])

    result = diff_tables(Table(), new)

    assert result.columns.added_columns == ("id", "v")
    assert [row.index for row in result.rows.added_rows] == [1]
    assert [row.status for row in result.merged.rows] == ["added"]


def test_diff_result_payload_is_json_ready() -> None:
    old = Table.from_rows([["id"], ["1"]])
    new = Table.from_rows([["id"], ["2"]])

    payload = diff_tables(old, new, old_label="a.csv", new_label="b.csv").to_dict()

    assert payload["old_label"] == "a.csv"
    assert payload["new_label"] == "b.csv"
    assert payload["identical"] is False
    assert payload["rows"]["added_rows"] == [{"index": 1, "identifier": "2", "cells": ["2"]}]
    assert payload["merged"]["columns"] == [{"name": "id", "status": "normal"}]


def test_diff_engine_ignores_environment(monkeypatch, tmp_path: Path) -> None:
    old = Table.from_rows([["id", "v"], ["1", "x"], ["2", "y"]])
    new = Table.from_rows([["id", "v"], ["2", "y"], ["1", "x"]])
    baseline = diff_tables(old, new).to_dict()

    monkeypatch.setenv("CSVDIFFKIT_PLUGIN_CONFIG", str(tmp_path / "missing.json"))
    monkeypatch.setenv("CSVDIFFKIT_DELIMITER", ",")

    assert diff_tables(old, new).to_dict() == baseline
