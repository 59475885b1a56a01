"""Stable public API surface for CsvDiffKit.

This module is the supported import path for library users.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Sequence

from csvdiffpack.core.models import Table
from csvdiffpack.diff import diff_tables
from csvdiffpack.diff.models import TableDiffResult
from csvdiffpack.report import render_html_report
from csvdiffpack.source import (
    DEFAULT_DIALECT,
    DEFAULT_REV,
    CsvDialect,
    list_changed_csv_files,
    load_head_and_current,
    read_csv_file,
)

__version__ = "0.1.0"


def diff(
    old: Table | Iterable[Sequence[str]],
    new: Table | Iterable[Sequence[str]],
    *,
    old_label: str = "old",
    new_label: str = "new",
) -> TableDiffResult:
    """Diff two in-memory tables.

    Args:
        old: Before snapshot, as a `Table` or rows of string cells (header first).
        new: After snapshot, in the same forms as `old`.
        old_label: Display label for the before snapshot.
        new_label: Display label for the after snapshot.

    Returns:
        Structured column, row and merged-view diff.
    """
    return diff_tables(
        _as_table(old),
        _as_table(new),
        old_label=old_label,
        new_label=new_label,
    )


def diff_files(
    old: str | Path,
    new: str | Path,
    *,
    dialect: CsvDialect = DEFAULT_DIALECT,
) -> TableDiffResult:
    """Diff two CSV files on disk.

    Args:
        old: Path to the before file.
        new: Path to the after file.
        dialect: Delimiter, quote character and encoding of both files.

    Returns:
        Structured diff labelled with both paths.

    Raises:
        FileNotFoundError: If either file does not exist.
        csvdiffpack.source.CsvParseError: If either file is malformed.
    """
    return diff_tables(
        read_csv_file(old, dialect),
        read_csv_file(new, dialect),
        old_label=str(old),
        new_label=str(new),
    )


def diff_head(
    path: str | Path,
    *,
    rev: str = DEFAULT_REV,
    dialect: CsvDialect = DEFAULT_DIALECT,
) -> TableDiffResult:
    """Diff the working copy of a CSV file against its committed version.

    Args:
        path: CSV file inside a git work tree.
        rev: Revision holding the before version.
        dialect: Delimiter, quote character and encoding of the file.

    Returns:
        Structured diff; a file new since `rev` diffs against an empty table.

    Raises:
        csvdiffpack.source.GitError: If git is unavailable or the path is not
            inside a work tree.
    """
    old_table, new_table = load_head_and_current(path, rev=rev, dialect=dialect)
    return diff_tables(old_table, new_table, old_label=f"{rev}:{path}", new_label=str(path))


def changed_files(root: str | Path = ".") -> list[Path]:
    """CSV files under `root` with uncommitted changes, sorted."""
    return list_changed_csv_files(root)


def _as_table(value: Table | Iterable[Sequence[str]]) -> Table:
    if isinstance(value, Table):
        return value
    return Table.from_rows(value)


__all__ = [
    "__version__",
    "Table",
    "TableDiffResult",
    "CsvDialect",
    "diff_tables",
    "diff",
    "diff_files",
    "diff_head",
    "changed_files",
    "render_html_report",
]
