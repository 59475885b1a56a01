"""Standalone HTML report for a table diff."""

from __future__ import annotations

from html import escape

from csvdiffpack.diff.models import MergedView, TableDiffResult

_STYLE = """
    :root {
      --bg: #f7f4ed;
      --panel: #fffdfa;
      --ink: #1f2933;
      --added: #047857;
      --removed: #b91c1c;
      --moved: #b45309;
      --muted: #6b7280;
      --border: #d6d3d1;
    }
    body { font-family: "IBM Plex Sans", "Segoe UI", sans-serif; background: var(--bg);
           color: var(--ink); margin: 0; padding: 24px; }
    h1 { border-bottom: 1px solid var(--border); padding-bottom: 10px; }
    .section { background: var(--panel); border: 1px solid var(--border); border-radius: 6px;
               margin: 16px 0; padding: 12px 16px; }
    .section ul { list-style: none; padding-left: 0; }
    .section li { padding: 3px 0; }
    .count { font-weight: bold; margin-left: 8px; }
    .no-changes { color: var(--muted); font-style: italic; }
    .added { color: var(--added); }
    .removed { color: var(--removed); }
    .moved { color: var(--moved); }
    table.grid { border-collapse: collapse; font-family: "IBM Plex Mono", monospace; font-size: 13px; }
    table.grid th, table.grid td { border: 1px solid var(--border); padding: 4px 8px; }
    table.grid tr.row-added { background: #ecfdf5; }
    table.grid tr.row-removed { background: #fef2f2; text-decoration: line-through; }
    table.grid tr.row-moved { background: #fffbeb; }
    table.grid td.removed-column { color: var(--muted); }
    table.grid td.void { background: repeating-linear-gradient(45deg, #f5f5f4, #f5f5f4 4px, #e7e5e4 4px, #e7e5e4 8px); }
"""


def render_html_report(diff: TableDiffResult, *, title: str | None = None) -> str:
    heading = title or f"{diff.old_label} -> {diff.new_label}"
    columns = diff.columns
    rows = diff.rows

    sections = [
        _render_section(
            "Added columns",
            "added",
            [escape(name) for name in columns.added_columns],
            empty="No columns added",
        ),
        _render_section(
            "Removed columns",
            "removed",
            [escape(name) for name in columns.removed_columns],
            empty="No columns removed",
        ),
        _render_section(
            "Moved columns",
            "moved",
            [
                f"{escape(move.name)}: position {move.old_index} &rarr; {move.new_index}"
                for move in columns.moved_columns
            ],
            empty="No columns moved",
        ),
        _render_section(
            "Moved rows",
            "moved",
            [
                f"Row &quot;{escape(match.identifier)}&quot;: line {match.old_index} "
                f"&rarr; {match.new_index}"
                for match in rows.moved_rows
            ],
            empty="No rows moved",
        ),
        _render_section(
            "Added rows",
            "added",
            [f"Row &quot;{escape(row.identifier)}&quot;: line {row.index}" for row in rows.added_rows],
            empty="No rows added",
        ),
        _render_section(
            "Deleted rows",
            "removed",
            [
                f"Row &quot;{escape(row.identifier)}&quot;: line {row.index}"
                for row in rows.deleted_rows
            ],
            empty="No rows deleted",
        ),
    ]
    sections_html = "".join(sections)
    grid_html = render_merged_grid(diff.merged)

    return f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>CSV Diff Report</title>
  <style>{_STYLE}  </style>
</head>
<body>
  <h1>CSV Diff Report</h1>
  <p><strong>Compared:</strong> {escape(heading)}</p>
{sections_html}
  <div class="section">
    <h2>Merged view</h2>
{grid_html}
  </div>
</body>
</html>
"""


def render_merged_grid(view: MergedView) -> str:
    if not view.columns:
        return '    <p class="no-changes">Both tables are empty</p>\n'

    header_cells = "".join(
        f'<th class="{column.status}">{escape(column.name)}</th>' for column in view.columns
    )
    lines = [
        '    <table class="grid">',
        f"      <thead><tr><th>line</th>{header_cells}</tr></thead>",
        "      <tbody>",
    ]
    for row in view.rows:
        line = row.new_index if row.new_index is not None else row.old_index
        cells: list[str] = []
        for cell in row.cells:
            classes = []
            if cell.removed_column:
                classes.append("removed-column")
            if cell.void:
                classes.append("void")
            class_attr = ' class="' + " ".join(classes) + '"' if classes else ""
            cells.append(f"<td{class_attr}>{escape(cell.value)}</td>")
        row_cells = "".join(cells)
        lines.append(f'        <tr class="row-{row.status}"><td>{line}</td>{row_cells}</tr>')
    lines.append("      </tbody>")
    lines.append("    </table>")
    return "\n".join(lines) + "\n"


def _render_section(title: str, css_class: str, items: list[str], *, empty: str) -> str:
    if items:
        body = "<ul>" + "".join(f'<li class="{css_class}">{item}</li>' for item in items) + "</ul>"
    else:
        body = f'<p class="no-changes">{empty}</p>'
    return (
        '  <div class="section">\n'
        f'    <h2 class="{css_class}">{title} <span class="count">({len(items)})</span></h2>\n'
        f"    {body}\n"
        "  </div>\n"
    )
