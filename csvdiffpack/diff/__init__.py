"""Diff subsystem for CsvDiffKit."""

from csvdiffpack.diff.columns import match_columns
from csvdiffpack.diff.engine import diff_tables
from csvdiffpack.diff.formatting import render_diff_report, render_diff_summary
from csvdiffpack.diff.merge import build_merged_view
from csvdiffpack.diff.models import (
    ColumnDiff,
    ColumnMove,
    MergedCell,
    MergedColumn,
    MergedRow,
    MergedView,
    RowDiff,
    RowMatch,
    RowRef,
    TableDiffResult,
)
from csvdiffpack.diff.rows import match_rows, normalized_row_key, kept_column_indices

__all__ = [
    "ColumnMove",
    "ColumnDiff",
    "RowRef",
    "RowMatch",
    "RowDiff",
    "MergedColumn",
    "MergedCell",
    "MergedRow",
    "MergedView",
    "TableDiffResult",
    "match_columns",
    "match_rows",
    "normalized_row_key",
    "kept_column_indices",
    "build_merged_view",
    "diff_tables",
    "render_diff_summary",
    "render_diff_report",
]
