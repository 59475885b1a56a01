"""Type definitions for CsvDiffKit core models."""

from typing import Literal

DiffStatus = Literal[
    "added",
    "removed",
    "moved",
    "normal",
]

DIFF_STATUSES: tuple[str, ...] = (
    "added",
    "removed",
    "moved",
    "normal",
)

Header = tuple[str, ...]
Row = tuple[str, ...]
