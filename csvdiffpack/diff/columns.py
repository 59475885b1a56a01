"""Header reconciliation: added, removed and moved columns."""

from __future__ import annotations

from typing import Sequence

from csvdiffpack.core.lis import stable_positions
from csvdiffpack.diff.models import ColumnDiff, ColumnMove


def first_positions(header: Sequence[str]) -> dict[str, int]:
    """Map each name to its first position in `header`."""
    positions: dict[str, int] = {}
    for index, name in enumerate(header):
        positions.setdefault(name, index)
    return positions


def match_columns(old_header: Sequence[str], new_header: Sequence[str]) -> ColumnDiff:
    """Classify header entries and find the columns whose position changed.

    A duplicated name is reported once and only its first occurrence takes
    part in position matching.
    """
    old_positions = first_positions(old_header)
    new_positions = first_positions(new_header)

    added = tuple(name for name in new_positions if name not in old_positions)
    removed = tuple(name for name in old_positions if name not in new_positions)

    shared: list[tuple[str, int, int]] = []
    for old_index, name in enumerate(old_header):
        if old_positions[name] != old_index:
            continue
        new_index = new_positions.get(name)
        if new_index is None:
            continue
        shared.append((name, old_index, new_index))

    stable = set(stable_positions([new_index for _, _, new_index in shared]))
    moved = tuple(
        ColumnMove(name=name, old_index=old_index, new_index=new_index)
        for position, (name, old_index, new_index) in enumerate(shared)
        if position not in stable
    )

    return ColumnDiff(
        added_columns=added,
        removed_columns=removed,
        moved_columns=moved,
    )
