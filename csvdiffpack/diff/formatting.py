"""CLI-friendly rendering for table diff results."""

from __future__ import annotations

from csvdiffpack.diff.models import TableDiffResult


def render_diff_summary(diff: TableDiffResult) -> str:
    summary = diff.summary()
    return (
        f"old={diff.old_label} new={diff.new_label} "
        f"added_columns={summary['added_columns']} "
        f"removed_columns={summary['removed_columns']} "
        f"moved_columns={summary['moved_columns']} "
        f"added_rows={summary['added_rows']} "
        f"deleted_rows={summary['deleted_rows']} "
        f"moved_rows={summary['moved_rows']}"
    )


def render_diff_report(diff: TableDiffResult, *, max_items: int = 20) -> str:
    """Sectioned text report; each section lists at most `max_items` entries."""
    if diff.identical:
        return "no differences detected"

    limit = max(1, max_items)
    columns = diff.columns
    rows = diff.rows
    sections: list[tuple[str, list[str]]] = [
        ("added columns", [f"+ {name}" for name in columns.added_columns]),
        ("removed columns", [f"- {name}" for name in columns.removed_columns]),
        (
            "moved columns",
            [
                f"~ {move.name}: position {move.old_index} -> {move.new_index}"
                for move in columns.moved_columns
            ],
        ),
        (
            "moved rows",
            [
                f'~ row "{match.identifier}": line {match.old_index} -> {match.new_index}'
                for match in rows.moved_rows
            ],
        ),
        (
            "added rows",
            [f'+ row "{row.identifier}": line {row.index}' for row in rows.added_rows],
        ),
        (
            "deleted rows",
            [f'- row "{row.identifier}": line {row.index}' for row in rows.deleted_rows],
        ),
    ]

    lines: list[str] = []
    for title, entries in sections:
        if not entries:
            continue
        lines.append(f"{title} ({len(entries)}):")
        lines.extend(f"  {entry}" for entry in entries[:limit])
        if len(entries) > limit:
            lines.append(f"  ... {len(entries) - limit} more not shown")
    return "\n".join(lines)
