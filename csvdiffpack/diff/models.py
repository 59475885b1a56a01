"""Data models for column, row and merged-view table diffs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from csvdiffpack.core.types import DiffStatus, Header, Row


@dataclass(frozen=True, slots=True)
class ColumnMove:
    """A shared column outside the stable column order."""

    name: str
    old_index: int
    new_index: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "old_index": self.old_index,
            "new_index": self.new_index,
        }


@dataclass(frozen=True, slots=True)
class ColumnDiff:
    """Header-level changes between two table versions."""

    added_columns: tuple[str, ...] = ()
    removed_columns: tuple[str, ...] = ()
    moved_columns: tuple[ColumnMove, ...] = ()

    @property
    def moved_names(self) -> frozenset[str]:
        return frozenset(move.name for move in self.moved_columns)

    def to_dict(self) -> dict[str, Any]:
        return {
            "added_columns": list(self.added_columns),
            "removed_columns": list(self.removed_columns),
            "moved_columns": [move.to_dict() for move in self.moved_columns],
        }


@dataclass(frozen=True, slots=True)
class RowRef:
    """A row present in only one table version.

    `index` is the table row position, so the first data row is 1.
    """

    index: int
    identifier: str
    cells: Row

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "identifier": self.identifier,
            "cells": list(self.cells),
        }


@dataclass(frozen=True, slots=True)
class RowMatch:
    """A row found in both versions by content over the shared columns."""

    old_index: int
    new_index: int
    identifier: str
    row_data: Row

    def to_dict(self) -> dict[str, Any]:
        return {
            "old_index": self.old_index,
            "new_index": self.new_index,
            "identifier": self.identifier,
            "row_data": list(self.row_data),
        }


@dataclass(frozen=True, slots=True)
class RowDiff:
    """Row-level changes between two table versions."""

    added_rows: tuple[RowRef, ...] = ()
    deleted_rows: tuple[RowRef, ...] = ()
    matches: tuple[RowMatch, ...] = ()
    moved_rows: tuple[RowMatch, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "added_rows": [row.to_dict() for row in self.added_rows],
            "deleted_rows": [row.to_dict() for row in self.deleted_rows],
            "moved_rows": [row.to_dict() for row in self.moved_rows],
            "matched_rows": len(self.matches),
        }


@dataclass(frozen=True, slots=True)
class MergedColumn:
    name: str
    status: DiffStatus

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "status": self.status}


@dataclass(frozen=True, slots=True)
class MergedCell:
    """Displayed cell value with the flags a renderer needs.

    `void` marks positions where no value exists at all, such as an added row
    under a removed column.
    """

    column: str
    value: str
    removed_column: bool = False
    void: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "column": self.column,
            "value": self.value,
            "removed_column": self.removed_column,
            "void": self.void,
        }


@dataclass(frozen=True, slots=True)
class MergedRow:
    status: DiffStatus
    old_index: int | None
    new_index: int | None
    identifier: str
    cells: tuple[MergedCell, ...] = ()

    @property
    def values(self) -> dict[str, str]:
        return {cell.column: cell.value for cell in self.cells}

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "old_index": self.old_index,
            "new_index": self.new_index,
            "identifier": self.identifier,
            "cells": [cell.to_dict() for cell in self.cells],
        }


@dataclass(frozen=True, slots=True)
class MergedView:
    """Single reconciled grid covering both table versions."""

    columns: tuple[MergedColumn, ...] = ()
    rows: tuple[MergedRow, ...] = ()

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]

    def to_dict(self) -> dict[str, Any]:
        return {
            "columns": [column.to_dict() for column in self.columns],
            "rows": [row.to_dict() for row in self.rows],
        }


@dataclass(frozen=True, slots=True)
class TableDiffResult:
    """Structured diff for two table versions."""

    old_label: str
    new_label: str
    old_header: Header
    new_header: Header
    columns: ColumnDiff = field(default_factory=ColumnDiff)
    rows: RowDiff = field(default_factory=RowDiff)
    merged: MergedView = field(default_factory=MergedView)

    @property
    def identical(self) -> bool:
        summary = self.summary()
        return all(count == 0 for key, count in summary.items() if key != "matched_rows")

    def summary(self) -> dict[str, int]:
        return {
            "added_columns": len(self.columns.added_columns),
            "removed_columns": len(self.columns.removed_columns),
            "moved_columns": len(self.columns.moved_columns),
            "added_rows": len(self.rows.added_rows),
            "deleted_rows": len(self.rows.deleted_rows),
            "moved_rows": len(self.rows.moved_rows),
            "matched_rows": len(self.rows.matches),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "old_label": self.old_label,
            "new_label": self.new_label,
            "old_header": list(self.old_header),
            "new_header": list(self.new_header),
            "identical": self.identical,
            "summary": self.summary(),
            "columns": self.columns.to_dict(),
            "rows": self.rows.to_dict(),
            "merged": self.merged.to_dict(),
        }
