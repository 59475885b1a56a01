"""Table diff engine: columns, then rows, then the merged view."""

from __future__ import annotations

from csvdiffpack.core.models import Table
from csvdiffpack.diff.columns import match_columns
from csvdiffpack.diff.merge import build_merged_view
from csvdiffpack.diff.models import TableDiffResult
from csvdiffpack.diff.rows import match_rows


def diff_tables(
    old: Table,
    new: Table,
    *,
    old_label: str = "old",
    new_label: str = "new",
) -> TableDiffResult:
    """Diff two versions of a table.

    Column identity comes from header names; row identity comes from cell
    content in the columns both versions keep. Never raises on well-formed
    tables: empty tables and short rows are valid input.
    """
    columns = match_columns(old.header, new.header)
    rows = match_rows(old, new, columns)
    return TableDiffResult(
        old_label=old_label,
        new_label=new_label,
        old_header=old.header,
        new_header=new.header,
        columns=columns,
        rows=rows,
        merged=build_merged_view(old, new, columns, rows),
    )
