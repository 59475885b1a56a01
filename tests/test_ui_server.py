import json
from pathlib import Path
import shutil
import subprocess
from urllib.error import HTTPError
from urllib.parse import quote
from urllib.request import urlopen

import pytest

from csvdiffpack.ui import UIServerConfig, build_ui_url, start_ui_server


def _get_json(url: str) -> tuple[int, dict]:
    try:
        with urlopen(url, timeout=5) as response:  # noqa: S310 (local test server)
            return response.getcode(), json.loads(response.read().decode("utf-8"))
    except HTTPError as error:
        return error.code, json.loads(error.read().decode("utf-8"))


def _get_text(url: str) -> str:
    with urlopen(url, timeout=5) as response:  # noqa: S310 (local test server)
        return response.read().decode("utf-8")


def test_ui_server_index_and_compare_routes() -> None:
    config = UIServerConfig(host="127.0.0.1", port=0, base_dir=Path.cwd())

    with start_ui_server(config) as (server, _thread):
        host, port = server.server_address[:2]
        base_url = f"http://{host}:{port}"

        html = _get_text(base_url + "/")
        assert "<h1>CsvDiffKit Local Diff UI</h1>" in html
        assert 'aria-label="Changed CSV files"' in html
        assert 'aria-label="Refresh changed files"' in html
        assert 'fetch("/api/files")' in html

        old = quote("examples/tables/inventory_base.csv")
        new = quote("examples/tables/inventory_changed.csv")
        status_code, payload = _get_json(base_url + f"/api/compare?old={old}&new={new}")
        assert status_code == 200
        assert payload["old_label"] == "examples/tables/inventory_base.csv"
        assert payload["summary"]["moved_columns"] == 0
        assert payload["summary"]["matched_rows"] == 3

        report = _get_text(base_url + f"/report?old={old}&new={new}")
        assert "<h1>CSV Diff Report</h1>" in report
        assert '<table class="grid">' in report


def test_ui_server_validation_errors() -> None:
    config = UIServerConfig(host="127.0.0.1", port=0, base_dir=Path.cwd())

    with start_ui_server(config) as (server, _thread):
        host, port = server.server_address[:2]
        base_url = f"http://{host}:{port}"

        status_code, payload = _get_json(base_url + "/api/diff")
        assert status_code == 400
        assert payload["status"] == "error"
        assert "path" in payload["message"]

        status_code, payload = _get_json(base_url + "/api/compare?old=README.md&new=README.md")
        assert status_code == 400
        assert "Only .csv files are supported" in payload["message"]

        status_code, payload = _get_json(
            base_url + "/api/compare?old=missing.csv&new=examples/tables/quoted.csv"
        )
        assert status_code == 400
        assert "CSV file not found" in payload["message"]

        status_code, payload = _get_json(base_url + "/report")
        assert status_code == 400

        status_code, payload = _get_json(base_url + "/nope")
        assert status_code == 404


def test_ui_server_empty_state_lists_no_files(tmp_path: Path) -> None:
    config = UIServerConfig(host="127.0.0.1", port=0, base_dir=tmp_path)

    with start_ui_server(config) as (server, _thread):
        host, port = server.server_address[:2]
        status_code, payload = _get_json(f"http://{host}:{port}/api/files")

    assert status_code == 200
    assert payload["files"] == []


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_ui_server_lists_and_diffs_changed_files(tmp_path: Path) -> None:
    def git(*args: str) -> None:
        subprocess.run(
            ["git", "-c", "user.email=tests@example.com", "-c", "user.name=CsvDiffKit Tests", *args],
            cwd=tmp_path,
            capture_output=True,
            text=True,
            check=True,
        )

    table = tmp_path / "tables" / "stock.csv"
    table.parent.mkdir()
    table.write_text("sku;qty\na;1\nb;2\n", encoding="utf-8")
    git("init", "-q")
    git("add", ".")
    git("-c", "commit.gpgsign=false", "commit", "-q", "-m", "stock")
    table.write_text("sku;qty\nb;2\na;1\nc;3\n", encoding="utf-8")

    config = UIServerConfig(host="127.0.0.1", port=0, base_dir=tmp_path)
    with start_ui_server(config) as (server, _thread):
        host, port = server.server_address[:2]
        base_url = f"http://{host}:{port}"

        status_code, files = _get_json(base_url + "/api/files")
        assert status_code == 200
        assert files["files"] == ["tables/stock.csv"]

        status_code, payload = _get_json(base_url + "/api/diff?path=tables/stock.csv")
        assert status_code == 200
        assert payload["path"] == "tables/stock.csv"
        assert payload["old_label"] == "HEAD:tables/stock.csv"
        assert payload["summary"]["added_rows"] == 1
        assert payload["summary"]["moved_rows"] == 1

        report = _get_text(base_url + "/report?path=tables/stock.csv")
        assert "Row &quot;c&quot;: line 3" in report


def test_build_ui_url_encodes_path() -> None:
    assert build_ui_url("127.0.0.1", 4320) == "http://127.0.0.1:4320/"
    assert build_ui_url("127.0.0.1", 4320, path="a b.csv") == "http://127.0.0.1:4320/?path=a%20b.csv"
