"""Row reconciliation by content over the columns both versions share."""

from __future__ import annotations

from collections import defaultdict, deque
from typing import Sequence

from csvdiffpack.core.lis import stable_positions
from csvdiffpack.core.models import Table, cell_at, row_identifier
from csvdiffpack.core.types import Row
from csvdiffpack.diff.models import ColumnDiff, RowDiff, RowMatch, RowRef


def kept_column_indices(
    old_header: Sequence[str],
    new_header: Sequence[str],
    columns: ColumnDiff,
) -> tuple[list[int], list[int]]:
    """Positions that take part in row keys, each in its own header's order.

    Old positions skip removed columns and new positions skip added ones, so
    a key survives columns being added or removed but not shared columns
    being reordered.
    """
    removed = set(columns.removed_columns)
    added = set(columns.added_columns)
    old_keep = [index for index, name in enumerate(old_header) if name not in removed]
    new_keep = [index for index, name in enumerate(new_header) if name not in added]
    return old_keep, new_keep


def normalized_row_key(row: Row, keep_indices: Sequence[int]) -> tuple[str, ...]:
    """Reduce a row to its cells at `keep_indices`; short rows read as empty."""
    return tuple(cell_at(row, index) for index in keep_indices)


def match_rows(old: Table, new: Table, columns: ColumnDiff) -> RowDiff:
    """Pair old rows to new rows by content and flag the pairs that moved.

    Pairing is greedy in old-row order: each old row claims the first
    unclaimed new row with an equal key.
    """
    old_rows = old.data_rows
    new_rows = new.data_rows

    old_keep, new_keep = kept_column_indices(old.header, new.header, columns)

    unclaimed: defaultdict[tuple[str, ...], deque[int]] = defaultdict(deque)
    for new_position, row in enumerate(new_rows):
        unclaimed[normalized_row_key(row, new_keep)].append(new_position)

    pairs: list[tuple[int, int]] = []
    deleted: list[RowRef] = []
    for old_position, row in enumerate(old_rows):
        candidates = unclaimed.get(normalized_row_key(row, old_keep))
        if candidates:
            pairs.append((old_position, candidates.popleft()))
            continue
        deleted.append(_row_ref(row, old_position))

    claimed = {new_position for _, new_position in pairs}
    added = tuple(
        _row_ref(row, new_position)
        for new_position, row in enumerate(new_rows)
        if new_position not in claimed
    )

    matches = tuple(
        RowMatch(
            old_index=old_position + 1,
            new_index=new_position + 1,
            identifier=row_identifier(old_rows[old_position]),
            row_data=new_rows[new_position],
        )
        for old_position, new_position in pairs
    )
    stable = set(stable_positions([new_position for _, new_position in pairs]))
    moved = tuple(match for position, match in enumerate(matches) if position not in stable)

    return RowDiff(
        added_rows=added,
        deleted_rows=tuple(deleted),
        matches=matches,
        moved_rows=moved,
    )


def _row_ref(row: Row, position: int) -> RowRef:
    # +1: table positions count the header row.
    return RowRef(index=position + 1, identifier=row_identifier(row), cells=row)
