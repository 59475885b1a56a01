import json
from importlib.metadata import PackageNotFoundError, version as package_version
from pathlib import Path
import time
import webbrowser
from dataclasses import dataclass
from typing import Any

import typer

from csvdiffpack.diff import (
    TableDiffResult,
    diff_tables,
    render_diff_report,
    render_diff_summary,
)
from csvdiffpack.report import render_html_report
from csvdiffpack.source import (
    DEFAULT_REV,
    CsvDialect,
    SourceError,
    build_dialect,
    dialect_from_env,
    list_changed_csv_files,
    load_dialect_from_file,
    load_head_and_current,
    read_csv_file,
)
from csvdiffpack.ui import UIServerConfig, build_ui_url, start_ui_server
from csvdiffpack.watch import FileChange, watch as watch_loop

app = typer.Typer(help="CsvDiffKit CLI")


@dataclass(slots=True)
class _OutputOptions:
    quiet: bool = False
    no_color: bool = False
    stable_json: bool = True


_OUTPUT_OPTIONS = _OutputOptions()

_DELIMITER_HELP = "Field delimiter (overrides CSVDIFFKIT_DELIMITER and --dialect-config)."
_DIALECT_CONFIG_HELP = "Path to JSON dialect config with delimiter/quotechar/encoding keys."


def _resolve_cli_version() -> str:
    try:
        return package_version("csvdiffkit")
    except PackageNotFoundError:
        from csvdiffpack import __version__ as local_version

        return local_version


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(_resolve_cli_version(), color=False)
    raise typer.Exit()


def _resolve_dialect(delimiter: str | None, dialect_config: Path | None) -> CsvDialect:
    dialect = dialect_from_env()
    if dialect_config is not None:
        dialect = load_dialect_from_file(dialect_config, base=dialect)
    if delimiter is not None:
        dialect = build_dialect(delimiter=delimiter, base=dialect)
    return dialect


@app.callback()
def app_options(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show CsvDiffKit version and exit.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        help="Suppress non-error text output.",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable ANSI color output.",
    ),
    stable_json: bool = typer.Option(
        True,
        "--stable-json/--pretty-json",
        help="Emit stable compact JSON (or pretty JSON).",
    ),
) -> None:
    """Global output controls for all CLI commands."""
    _OUTPUT_OPTIONS.quiet = quiet
    _OUTPUT_OPTIONS.no_color = no_color
    _OUTPUT_OPTIONS.stable_json = stable_json


def _echo(message: str, *, err: bool = False, force: bool = False) -> None:
    if _OUTPUT_OPTIONS.quiet and not err and not force:
        return
    typer.echo(message, err=err, color=not _OUTPUT_OPTIONS.no_color)


def _echo_json(payload: dict[str, Any], *, err: bool = False) -> None:
    if _OUTPUT_OPTIONS.stable_json:
        rendered = json.dumps(
            payload,
            ensure_ascii=True,
            sort_keys=True,
            separators=(",", ":"),
        )
    else:
        rendered = json.dumps(
            payload,
            ensure_ascii=True,
            sort_keys=True,
            indent=2,
        )
    typer.echo(rendered, err=err, color=not _OUTPUT_OPTIONS.no_color)


def _fail(
    command: str,
    error: Exception,
    *,
    json_output: bool,
    details: dict[str, Any] | None = None,
) -> typer.Exit:
    message = f"{command} failed: {error}"
    if json_output:
        _echo_json(
            {
                "status": "error",
                "exit_code": 1,
                "message": message,
                **(details or {}),
            }
        )
    else:
        _echo(message, err=True)
    return typer.Exit(code=1)


def _emit_diff(
    result: TableDiffResult,
    *,
    json_output: bool,
    max_items: int,
    fail_on_diff: bool,
    details: dict[str, Any],
) -> None:
    exit_code = 1 if fail_on_diff and not result.identical else 0
    if json_output:
        _echo_json(
            {
                **result.to_dict(),
                "diff_status": "identical" if result.identical else "different",
                "status": "ok",
                "exit_code": exit_code,
                "message": "diff completed",
                **details,
            }
        )
    else:
        _echo(render_diff_summary(result))
        _echo(render_diff_report(result, max_items=max_items))

    if exit_code:
        raise typer.Exit(code=exit_code)


@app.command()
def diff(
    old: Path = typer.Argument(..., help="Path to the old (before) CSV file."),
    new: Path = typer.Argument(..., help="Path to the new (after) CSV file."),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit machine-readable diff output.",
    ),
    max_items: int = typer.Option(
        20,
        "--max-items",
        help="Maximum number of entries per section in text mode.",
    ),
    fail_on_diff: bool = typer.Option(
        False,
        "--fail-on-diff",
        help="Exit with code 1 when the tables differ.",
    ),
    delimiter: str | None = typer.Option(None, "--delimiter", help=_DELIMITER_HELP),
    dialect_config: Path | None = typer.Option(
        None,
        "--dialect-config",
        help=_DIALECT_CONFIG_HELP,
    ),
) -> None:
    """Diff two CSV files on disk."""
    details = {"old_path": str(old), "new_path": str(new)}
    try:
        dialect = _resolve_dialect(delimiter, dialect_config)
        old_table = read_csv_file(old, dialect)
        new_table = read_csv_file(new, dialect)
    except (SourceError, ValueError, FileNotFoundError) as error:
        raise _fail("diff", error, json_output=json_output, details=details) from error

    result = diff_tables(old_table, new_table, old_label=str(old), new_label=str(new))
    _emit_diff(
        result,
        json_output=json_output,
        max_items=max_items,
        fail_on_diff=fail_on_diff,
        details=details,
    )


@app.command(name="head-diff")
def head_diff(
    path: Path = typer.Argument(..., help="Path to a CSV file inside a git work tree."),
    rev: str = typer.Option(
        DEFAULT_REV,
        "--rev",
        help="Git revision holding the old version of the file.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit machine-readable diff output.",
    ),
    max_items: int = typer.Option(
        20,
        "--max-items",
        help="Maximum number of entries per section in text mode.",
    ),
    fail_on_diff: bool = typer.Option(
        False,
        "--fail-on-diff",
        help="Exit with code 1 when the working copy differs from the revision.",
    ),
    delimiter: str | None = typer.Option(None, "--delimiter", help=_DELIMITER_HELP),
    dialect_config: Path | None = typer.Option(
        None,
        "--dialect-config",
        help=_DIALECT_CONFIG_HELP,
    ),
) -> None:
    """Diff the working copy of a CSV file against a git revision."""
    details = {"path": str(path), "rev": rev}
    try:
        dialect = _resolve_dialect(delimiter, dialect_config)
        old_table, new_table = load_head_and_current(path, rev=rev, dialect=dialect)
    except (SourceError, ValueError) as error:
        raise _fail("head-diff", error, json_output=json_output, details=details) from error

    result = diff_tables(old_table, new_table, old_label=f"{rev}:{path}", new_label=str(path))
    _emit_diff(
        result,
        json_output=json_output,
        max_items=max_items,
        fail_on_diff=fail_on_diff,
        details=details,
    )


@app.command()
def changed(
    root: Path = typer.Argument(
        Path("."),
        help="Directory inside a git work tree to scan for changed CSV files.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit machine-readable file list.",
    ),
) -> None:
    """List CSV files with uncommitted changes."""
    try:
        files = list_changed_csv_files(root)
    except SourceError as error:
        raise _fail("changed", error, json_output=json_output, details={"root": str(root)}) from error

    if json_output:
        _echo_json(
            {
                "status": "ok",
                "exit_code": 0,
                "message": "changed files listed",
                "root": str(root),
                "files": [str(path) for path in files],
            }
        )
        return

    if not files:
        _echo("no modified CSV files")
        return
    for path in files:
        _echo(str(path))


@app.command()
def report(
    path: Path = typer.Argument(..., help="CSV file to report on (the new version)."),
    out: Path = typer.Option(..., "--out", help="Output path for the HTML report."),
    against: Path | None = typer.Option(
        None,
        "--against",
        help="Old CSV file to compare with instead of the git revision.",
    ),
    rev: str = typer.Option(
        DEFAULT_REV,
        "--rev",
        help="Git revision holding the old version when --against is not given.",
    ),
    title: str | None = typer.Option(None, "--title", help="Heading shown in the report."),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit machine-readable command result.",
    ),
    delimiter: str | None = typer.Option(None, "--delimiter", help=_DELIMITER_HELP),
    dialect_config: Path | None = typer.Option(
        None,
        "--dialect-config",
        help=_DIALECT_CONFIG_HELP,
    ),
) -> None:
    """Write a standalone HTML diff report."""
    details = {"path": str(path), "out": str(out)}
    try:
        dialect = _resolve_dialect(delimiter, dialect_config)
        if against is not None:
            old_table = read_csv_file(against, dialect)
            new_table = read_csv_file(path, dialect)
            old_label = str(against)
        else:
            old_table, new_table = load_head_and_current(path, rev=rev, dialect=dialect)
            old_label = f"{rev}:{path}"
        result = diff_tables(old_table, new_table, old_label=old_label, new_label=str(path))
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(render_html_report(result, title=title), encoding="utf-8")
    except (SourceError, ValueError, OSError) as error:
        raise _fail("report", error, json_output=json_output, details=details) from error

    if json_output:
        _echo_json(
            {
                "status": "ok",
                "exit_code": 0,
                "message": "report written",
                "identical": result.identical,
                "summary": result.summary(),
                **details,
            }
        )
        return
    _echo(f"report written: {out}")


@app.command()
def watch(
    root: Path = typer.Argument(Path("."), help="Directory to watch for CSV changes."),
    rev: str = typer.Option(
        DEFAULT_REV,
        "--rev",
        help="Git revision each changed file is compared against.",
    ),
    interval: float = typer.Option(
        1.0,
        "--interval",
        help="Seconds between polls.",
    ),
    debounce: float = typer.Option(
        0.5,
        "--debounce",
        help="Seconds a file must stay quiet before it is re-diffed.",
    ),
    max_polls: int | None = typer.Option(
        None,
        "--max-polls",
        help="Stop after this many polls (default: run until interrupted).",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit one JSON line per changed file.",
    ),
    delimiter: str | None = typer.Option(None, "--delimiter", help=_DELIMITER_HELP),
    dialect_config: Path | None = typer.Option(
        None,
        "--dialect-config",
        help=_DIALECT_CONFIG_HELP,
    ),
) -> None:
    """Re-diff CSV files against a git revision whenever they change."""
    try:
        dialect = _resolve_dialect(delimiter, dialect_config)
    except ValueError as error:
        raise _fail("watch", error, json_output=json_output) from error
    if not root.is_dir():
        raise _fail(
            "watch",
            NotADirectoryError(f"not a directory: {root}"),
            json_output=json_output,
        )

    def on_changes(changes: list[FileChange]) -> None:
        for change in changes:
            try:
                old_table, new_table = load_head_and_current(change.path, rev=rev, dialect=dialect)
            except (SourceError, ValueError) as error:
                if json_output:
                    _echo_json({**change.to_dict(), "status": "error", "message": str(error)})
                else:
                    _echo(f"{change.kind} {change.path}: {error}", err=True)
                continue

            result = diff_tables(
                old_table,
                new_table,
                old_label=f"{rev}:{change.path}",
                new_label=str(change.path),
            )
            if json_output:
                _echo_json(
                    {
                        **change.to_dict(),
                        "status": "ok",
                        "identical": result.identical,
                        "summary": result.summary(),
                    }
                )
            else:
                _echo(f"{change.kind} {change.path}")
                _echo(render_diff_summary(result))

    _echo(f"watching {root} (interval {interval}s)")
    try:
        polls = watch_loop(
            root,
            on_changes,
            interval=interval,
            debounce_seconds=debounce,
            max_polls=max_polls,
        )
    except KeyboardInterrupt:
        _echo("watch stopped")
        return
    _echo(f"watch stopped after {polls} polls")


@app.command()
def ui(
    host: str = typer.Option(
        "127.0.0.1",
        "--host",
        help="Host interface to bind local UI server.",
    ),
    port: int = typer.Option(
        4320,
        "--port",
        help="Port for local UI server (0 selects an ephemeral port).",
    ),
    path: Path | None = typer.Option(
        None,
        "--path",
        help="Optional CSV file to open when the UI loads.",
    ),
    rev: str = typer.Option(
        DEFAULT_REV,
        "--rev",
        help="Git revision changed files are compared against.",
    ),
    browser: bool = typer.Option(
        False,
        "--browser/--no-browser",
        help="Open the local UI URL in default browser.",
    ),
    check: bool = typer.Option(
        False,
        "--check",
        help="Start server, verify startup path, then exit.",
    ),
    delimiter: str | None = typer.Option(None, "--delimiter", help=_DELIMITER_HELP),
    dialect_config: Path | None = typer.Option(
        None,
        "--dialect-config",
        help=_DIALECT_CONFIG_HELP,
    ),
) -> None:
    """Launch the local browser UI for changed CSV files."""
    try:
        dialect = _resolve_dialect(delimiter, dialect_config)
    except ValueError as error:
        raise _fail("ui", error, json_output=False) from error

    # Check mode binds an ephemeral port so parallel runs never collide.
    effective_port = 0 if check else port
    config = UIServerConfig(
        host=host,
        port=effective_port,
        base_dir=Path.cwd(),
        rev=rev,
        dialect=dialect,
    )

    with start_ui_server(config) as (server, _thread):
        bound_host, bound_port = server.server_address[:2]
        ui_url = build_ui_url(bound_host, bound_port, path=str(path) if path else None)

        if check:
            _echo(f"ui check ok: {ui_url}")
            return

        _echo(f"ui running: {ui_url}")

        if browser:
            webbrowser.open(ui_url)

        try:
            while True:
                time.sleep(0.25)
        except KeyboardInterrupt:
            _echo("ui stopped")


def main() -> None:
    app()
