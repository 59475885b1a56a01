import json
from pathlib import Path
import shutil
import subprocess

import pytest
from typer.testing import CliRunner

from csvdiffpack.cli.app import app

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def _git(repo: Path, *args: str) -> None:
    subprocess.run(
        ["git", "-c", "user.email=tests@example.com", "-c", "user.name=CsvDiffKit Tests", *args],
        cwd=repo,
        capture_output=True,
        text=True,
        check=True,
    )


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    root = tmp_path / "repo"
    root.mkdir()
    (root / "people.csv").write_text("id;name\n1;ada\n2;alan\n", encoding="utf-8")
    _git(root, "init", "-q")
    _git(root, "add", ".")
    _git(root, "-c", "commit.gpgsign=false", "commit", "-q", "-m", "add people")
    return root


def test_cli_head_diff_against_committed_version(repo: Path) -> None:
    path = repo / "people.csv"
    path.write_text("id;name;role\n2;alan;math\n1;ada;code\n3;grace;navy\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(app, ["head-diff", str(path), "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout.strip())
    assert payload["rev"] == "HEAD"
    assert payload["old_label"] == f"HEAD:{path}"
    assert payload["summary"]["added_columns"] == 1
    assert payload["summary"]["added_rows"] == 1
    assert payload["summary"]["moved_rows"] == 1


def test_cli_head_diff_clean_file_reports_no_differences(repo: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["head-diff", str(repo / "people.csv")])

    assert result.exit_code == 0
    assert "no differences detected" in result.stdout


def test_cli_head_diff_outside_repository_fails(tmp_path: Path) -> None:
    path = tmp_path / "loose.csv"
    path.write_text("id\n1\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(app, ["head-diff", str(path)])

    assert result.exit_code == 1
    assert "head-diff failed: not a git repository" in result.output


def test_cli_changed_lists_modified_csv_files(repo: Path) -> None:
    (repo / "people.csv").write_text("id;name\n1;ada\n", encoding="utf-8")
    (repo / "extra.csv").write_text("id\n1\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(app, ["changed", str(repo), "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout.strip())
    resolved = repo.resolve()
    assert payload["files"] == [str(resolved / "extra.csv"), str(resolved / "people.csv")]


def test_cli_changed_clean_tree(repo: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["changed", str(repo)])

    assert result.exit_code == 0
    assert "no modified CSV files" in result.stdout


def test_cli_report_against_head(repo: Path, tmp_path: Path) -> None:
    path = repo / "people.csv"
    path.write_text("id;name\n2;alan\n", encoding="utf-8")
    out_path = tmp_path / "people.html"

    runner = CliRunner()
    result = runner.invoke(app, ["report", str(path), "--out", str(out_path)])

    assert result.exit_code == 0
    html = out_path.read_text(encoding="utf-8")
    assert "Deleted rows" in html
    assert "Row &quot;1&quot;: line 1" in html


def test_cli_watch_with_poll_limit(repo: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["watch", str(repo), "--interval", "0", "--max-polls", "1"],
    )

    assert result.exit_code == 0
    assert f"watching {repo}" in result.stdout
    assert "watch stopped after 1 polls" in result.stdout


def test_cli_watch_rejects_missing_directory(tmp_path: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["watch", str(tmp_path / "missing")])

    assert result.exit_code == 1
    assert "watch failed: not a directory" in result.output
