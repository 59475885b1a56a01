"""Local-first UI server for browsing CSV diffs of the working tree."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
import json
from pathlib import Path
import threading
from typing import Any, Iterator
from urllib.parse import parse_qs, quote, unquote, urlparse

from csvdiffpack.diff import TableDiffResult, diff_tables
from csvdiffpack.report import render_html_report
from csvdiffpack.source import (
    DEFAULT_DIALECT,
    DEFAULT_REV,
    CsvDialect,
    GitError,
    SourceError,
    list_changed_csv_files,
    load_head_and_current,
    read_csv_file,
)

_SUPPORTED_SUFFIXES = {".csv"}


@dataclass(slots=True)
class UIServerConfig:
    host: str = "127.0.0.1"
    port: int = 4320
    base_dir: Path = field(default_factory=Path.cwd)
    rev: str = DEFAULT_REV
    dialect: CsvDialect = DEFAULT_DIALECT


def build_ui_url(host: str, port: int, *, path: str | None = None) -> str:
    suffix = f"/?path={quote(path)}" if path else "/"
    return f"http://{host}:{port}{suffix}"


def list_changed_files(base_dir: Path) -> list[str]:
    """Changed CSV files under `base_dir`, relative to it; empty outside git."""
    try:
        changed = list_changed_csv_files(base_dir)
    except GitError:
        return []
    return [_display_path(base_dir, path) for path in changed]


def create_ui_server(config: UIServerConfig) -> ThreadingHTTPServer:
    base_dir = config.base_dir.resolve()

    class Handler(BaseHTTPRequestHandler):
        def do_GET(self) -> None:  # noqa: N802
            parsed = urlparse(self.path)
            route = parsed.path
            query = parse_qs(parsed.query)

            if route == "/":
                self._write_html(200, _render_index_html())
                return

            if route == "/api/files":
                self._write_json(200, {"files": list_changed_files(base_dir)})
                return

            if route == "/api/diff":
                self._handle_diff(query)
                return

            if route == "/api/compare":
                self._handle_compare(query)
                return

            if route == "/report":
                self._handle_report(query)
                return

            self._write_json(404, {"status": "error", "message": "Not found"})

        def _handle_diff(self, query: dict[str, list[str]]) -> None:
            raw_path = _first(query.get("path"))
            if not raw_path:
                self._write_json(
                    400,
                    {"status": "error", "message": "Missing required query param: path"},
                )
                return
            try:
                path, result = self._diff_against_rev(raw_path, _first(query.get("rev")))
            except (FileNotFoundError, SourceError, ValueError) as error:
                self._write_json(400, {"status": "error", "message": str(error)})
                return

            payload = result.to_dict()
            payload["path"] = _display_path(base_dir, path)
            self._write_json(200, payload)

        def _handle_compare(self, query: dict[str, list[str]]) -> None:
            old_raw = _first(query.get("old"))
            new_raw = _first(query.get("new"))
            if not old_raw or not new_raw:
                self._write_json(
                    400,
                    {"status": "error", "message": "Missing required query params: old and new"},
                )
                return
            try:
                result = self._diff_files(old_raw, new_raw)
            except (FileNotFoundError, SourceError, ValueError) as error:
                self._write_json(400, {"status": "error", "message": str(error)})
                return
            self._write_json(200, result.to_dict())

        def _handle_report(self, query: dict[str, list[str]]) -> None:
            raw_path = _first(query.get("path"))
            old_raw = _first(query.get("old"))
            new_raw = _first(query.get("new"))
            try:
                if raw_path:
                    _path, result = self._diff_against_rev(raw_path, _first(query.get("rev")))
                elif old_raw and new_raw:
                    result = self._diff_files(old_raw, new_raw)
                else:
                    raise ValueError("Missing required query params: path, or old and new")
            except (FileNotFoundError, SourceError, ValueError) as error:
                self._write_json(400, {"status": "error", "message": str(error)})
                return
            self._write_html(200, render_html_report(result))

        def _diff_against_rev(
            self,
            raw_path: str,
            raw_rev: str | None,
        ) -> tuple[Path, TableDiffResult]:
            path = _resolve_csv_path(base_dir, raw_path, must_exist=False)
            rev = raw_rev or config.rev
            old, new = load_head_and_current(path, rev=rev, dialect=config.dialect)
            display = _display_path(base_dir, path)
            return path, diff_tables(old, new, old_label=f"{rev}:{display}", new_label=display)

        def _diff_files(self, old_raw: str, new_raw: str) -> TableDiffResult:
            old_path = _resolve_csv_path(base_dir, old_raw)
            new_path = _resolve_csv_path(base_dir, new_raw)
            return diff_tables(
                read_csv_file(old_path, config.dialect),
                read_csv_file(new_path, config.dialect),
                old_label=_display_path(base_dir, old_path),
                new_label=_display_path(base_dir, new_path),
            )

        def _write_html(self, status_code: int, html: str) -> None:
            body = html.encode("utf-8")
            self.send_response(status_code)
            self.send_header("Content-Type", "text/html; charset=utf-8")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def _write_json(self, status_code: int, payload: dict[str, Any]) -> None:
            body = json.dumps(payload, ensure_ascii=True, sort_keys=True).encode("utf-8")
            self.send_response(status_code)
            self.send_header("Content-Type", "application/json; charset=utf-8")
            self.send_header("Cache-Control", "no-store")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, _format: str, *_args: object) -> None:
            return

    return ThreadingHTTPServer((config.host, config.port), Handler)


@contextmanager
def start_ui_server(config: UIServerConfig) -> Iterator[tuple[ThreadingHTTPServer, threading.Thread]]:
    server = create_ui_server(config)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server, thread
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=2)


def _resolve_csv_path(base_dir: Path, raw_path: str, *, must_exist: bool = True) -> Path:
    candidate = Path(unquote(raw_path))
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    candidate = candidate.resolve()

    if candidate.suffix.lower() not in _SUPPORTED_SUFFIXES:
        raise ValueError("Only .csv files are supported")
    if must_exist and not candidate.is_file():
        raise FileNotFoundError(f"CSV file not found: {candidate}")
    return candidate


def _display_path(base_dir: Path, path: Path) -> str:
    try:
        return path.relative_to(base_dir).as_posix()
    except ValueError:
        return str(path)


def _first(values: list[str] | None) -> str | None:
    if not values:
        return None
    return values[0]


def _render_index_html() -> str:
    return """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>CsvDiffKit Local UI</title>
  <style>
    body { margin: 0; font-family: "IBM Plex Sans", "Segoe UI", sans-serif; background: #f7f4ed; color: #1f2933; }
    header { padding: 12px 20px; border-bottom: 1px solid #d6d3d1; display: flex; gap: 12px; align-items: center; }
    main { display: grid; grid-template-columns: 280px 1fr; height: calc(100vh - 58px); }
    nav { border-right: 1px solid #d6d3d1; overflow-y: auto; padding: 8px; }
    nav button { display: block; width: 100%; text-align: left; padding: 6px 8px; margin: 2px 0;
                 border: 1px solid transparent; background: none; cursor: pointer; font: inherit; }
    nav button[aria-current="true"] { border-color: #0f766e; background: #ecfdf5; }
    iframe { width: 100%; height: 100%; border: 0; background: #fffdfa; }
    .muted { color: #6b7280; font-style: italic; padding: 8px; }
  </style>
</head>
<body>
  <header>
    <h1>CsvDiffKit Local Diff UI</h1>
    <button id="refreshButton" type="button" aria-label="Refresh changed files">Refresh</button>
  </header>
  <main>
    <nav id="fileList" aria-label="Changed CSV files"></nav>
    <iframe id="report" title="CSV diff report"></iframe>
  </main>
  <script>
    const fileList = document.getElementById("fileList");
    const report = document.getElementById("report");
    const refreshButton = document.getElementById("refreshButton");

    function showReport(path) {
      for (const button of fileList.querySelectorAll("button")) {
        button.setAttribute("aria-current", button.dataset.path === path ? "true" : "false");
      }
      report.src = "/report?path=" + encodeURIComponent(path);
    }

    async function refreshFiles() {
      const response = await fetch("/api/files");
      const payload = await response.json();
      fileList.replaceChildren();
      if (!payload.files.length) {
        const empty = document.createElement("p");
        empty.className = "muted";
        empty.textContent = "No modified CSV files";
        fileList.appendChild(empty);
        return;
      }
      for (const path of payload.files) {
        const button = document.createElement("button");
        button.type = "button";
        button.dataset.path = path;
        button.textContent = path;
        button.title = path;
        button.addEventListener("click", () => showReport(path));
        fileList.appendChild(button);
      }
      const requested = new URLSearchParams(window.location.search).get("path");
      if (requested) {
        showReport(requested);
      }
    }

    refreshButton.addEventListener("click", refreshFiles);
    refreshFiles();
  </script>
</body>
</html>
"""
