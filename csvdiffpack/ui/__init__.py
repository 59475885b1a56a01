"""Local UI subsystem for CsvDiffKit."""

from csvdiffpack.ui.server import (
    UIServerConfig,
    build_ui_url,
    create_ui_server,
    list_changed_files,
    start_ui_server,
)

__all__ = [
    "UIServerConfig",
    "build_ui_url",
    "create_ui_server",
    "list_changed_files",
    "start_ui_server",
]
