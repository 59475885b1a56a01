"""HTML rendering for table diffs."""

from csvdiffpack.report.html import render_html_report, render_merged_grid

__all__ = [
    "render_html_report",
    "render_merged_grid",
]
