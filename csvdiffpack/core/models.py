"""Core data model for CsvDiffKit tables."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from csvdiffpack.core.types import Header, Row


def cell_at(row: Row, index: int) -> str:
    """Read a cell, treating cells past the end of a short row as empty."""
    if 0 <= index < len(row):
        return row[index]
    return ""


def row_identifier(row: Row) -> str:
    """Human-readable label for a row: its first cell. Display only."""
    return cell_at(row, 0)


@dataclass(frozen=True, slots=True)
class Table:
    """Ordered rows of string cells; row 0 is the header."""

    rows: tuple[Row, ...] = field(default_factory=tuple)

    @classmethod
    def from_rows(cls, rows: Iterable[Iterable[Any]]) -> "Table":
        return cls(rows=tuple(tuple(str(cell) for cell in row) for row in rows))

    @property
    def header(self) -> Header:
        if not self.rows:
            return ()
        return self.rows[0]

    @property
    def data_rows(self) -> tuple[Row, ...]:
        return self.rows[1:]

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def cell(self, row_index: int, column_index: int) -> str:
        """Cell at table position `row_index` (header = 0)."""
        if not 0 <= row_index < len(self.rows):
            return ""
        return cell_at(self.rows[row_index], column_index)

    def to_dict(self) -> dict[str, Any]:
        return {
            "header": list(self.header),
            "rows": [list(row) for row in self.data_rows],
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Table":
        header = raw.get("header") or []
        rows = raw.get("rows") or []
        if not header and not rows:
            return cls()
        return cls.from_rows([header, *rows])
