"""Merged view: one ordered grid showing both table versions."""

from __future__ import annotations

from csvdiffpack.core.models import Table, cell_at, row_identifier
from csvdiffpack.core.types import DiffStatus
from csvdiffpack.diff.columns import first_positions
from csvdiffpack.diff.models import (
    ColumnDiff,
    MergedCell,
    MergedColumn,
    MergedRow,
    MergedView,
    RowDiff,
)


def build_merged_view(
    old: Table,
    new: Table,
    columns: ColumnDiff,
    rows: RowDiff,
) -> MergedView:
    """Combine column and row diffs into a displayable grid.

    Removed columns and deleted rows are emitted just before whatever now
    occupies their old position, so they stay near where they used to live.
    """
    merged_columns = _merge_columns(old.header, new.header, columns)

    old_positions = first_positions(old.header)
    new_positions = first_positions(new.header)
    removed = set(columns.removed_columns)
    added = set(columns.added_columns)

    old_rows = old.data_rows
    new_rows = new.data_rows

    deleted_positions = {row.index - 1 for row in rows.deleted_rows}
    added_positions = {row.index - 1 for row in rows.added_rows}
    moved_positions = {match.new_index - 1 for match in rows.moved_rows}
    old_by_new = {match.new_index - 1: match.old_index - 1 for match in rows.matches}

    merged_rows: list[MergedRow] = []
    emitted_old: set[int] = set()
    emitted_new: set[int] = set()

    for position in range(max(len(old_rows), len(new_rows))):
        if position in deleted_positions and position not in emitted_old:
            emitted_old.add(position)
            old_row = old_rows[position]
            cells = []
            for column in merged_columns:
                if column.name in added:
                    cells.append(MergedCell(column=column.name, value="", void=True))
                    continue
                cells.append(
                    MergedCell(
                        column=column.name,
                        value=cell_at(old_row, old_positions[column.name]),
                        removed_column=column.name in removed,
                    )
                )
            merged_rows.append(
                MergedRow(
                    status="removed",
                    old_index=position + 1,
                    new_index=None,
                    identifier=row_identifier(old_row),
                    cells=tuple(cells),
                )
            )

        if position < len(new_rows) and position not in emitted_new:
            emitted_new.add(position)
            new_row = new_rows[position]
            matched_old = old_by_new.get(position)
            status: DiffStatus
            if position in added_positions:
                status = "added"
            elif position in moved_positions:
                status = "moved"
            else:
                status = "normal"

            cells = []
            for column in merged_columns:
                if column.name not in removed:
                    cells.append(
                        MergedCell(
                            column=column.name,
                            value=cell_at(new_row, new_positions[column.name]),
                        )
                    )
                elif matched_old is not None:
                    cells.append(
                        MergedCell(
                            column=column.name,
                            value=cell_at(old_rows[matched_old], old_positions[column.name]),
                            removed_column=True,
                        )
                    )
                else:
                    cells.append(
                        MergedCell(column=column.name, value="", removed_column=True, void=True)
                    )
            merged_rows.append(
                MergedRow(
                    status=status,
                    old_index=matched_old + 1 if matched_old is not None else None,
                    new_index=position + 1,
                    identifier=row_identifier(new_row),
                    cells=tuple(cells),
                )
            )

    return MergedView(columns=tuple(merged_columns), rows=tuple(merged_rows))


def _merge_columns(
    old_header: tuple[str, ...],
    new_header: tuple[str, ...],
    columns: ColumnDiff,
) -> list[MergedColumn]:
    removed = set(columns.removed_columns)
    added = set(columns.added_columns)
    moved = columns.moved_names

    merged: list[MergedColumn] = []
    emitted: set[str] = set()
    for index in range(max(len(old_header), len(new_header))):
        if index < len(old_header):
            name = old_header[index]
            if name in removed and name not in emitted:
                emitted.add(name)
                merged.append(MergedColumn(name=name, status="removed"))

        if index < len(new_header):
            name = new_header[index]
            if name in emitted:
                continue
            emitted.add(name)
            if name in added:
                merged.append(MergedColumn(name=name, status="added"))
            elif name in moved:
                merged.append(MergedColumn(name=name, status="moved"))
            else:
                merged.append(MergedColumn(name=name, status="normal"))

    return merged
