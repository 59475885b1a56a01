"""Core models and deterministic primitives for CsvDiffKit."""

from csvdiffpack.core.lis import longest_increasing_subsequence, stable_positions
from csvdiffpack.core.models import Table, cell_at, row_identifier
from csvdiffpack.core.types import DIFF_STATUSES, DiffStatus, Header, Row

__all__ = [
    "Table",
    "Header",
    "Row",
    "DIFF_STATUSES",
    "DiffStatus",
    "cell_at",
    "row_identifier",
    "longest_increasing_subsequence",
    "stable_positions",
]
