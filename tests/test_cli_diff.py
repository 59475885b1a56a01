import json
from pathlib import Path

from typer.testing import CliRunner

from csvdiffpack.cli.app import app

BASE = "examples/tables/inventory_base.csv"
CHANGED = "examples/tables/inventory_changed.csv"


def test_cli_diff_text_output() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["diff", BASE, CHANGED])

    assert result.exit_code == 0
    assert "added_columns=1 removed_columns=1 moved_columns=0" in result.stdout
    assert "  + origin" in result.stdout
    assert "moved columns" not in result.stdout
    assert '  ~ row "3": line 3 -> 1' in result.stdout
    assert '  - row "4": line 4' in result.stdout


def test_cli_diff_json_output() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["diff", BASE, CHANGED, "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout.strip())
    assert payload["status"] == "ok"
    assert payload["exit_code"] == 0
    assert payload["diff_status"] == "different"
    assert payload["old_path"] == BASE
    assert payload["new_path"] == CHANGED
    assert payload["summary"]["moved_rows"] == 1
    assert payload["columns"]["added_columns"] == ["origin"]
    assert [column["name"] for column in payload["merged"]["columns"]] == [
        "id",
        "name",
        "qty",
        "price",
        "origin",
    ]


def test_cli_diff_identical_files() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["diff", BASE, BASE, "--fail-on-diff"])

    assert result.exit_code == 0
    assert "no differences detected" in result.stdout


def test_cli_diff_fail_on_diff_exits_nonzero() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["diff", BASE, CHANGED, "--fail-on-diff", "--json"])

    assert result.exit_code == 1
    payload = json.loads(result.stdout.strip())
    assert payload["status"] == "ok"
    assert payload["exit_code"] == 1


def test_cli_diff_missing_file_reports_failure(tmp_path: Path) -> None:
    missing = tmp_path / "missing.csv"
    runner = CliRunner()

    result = runner.invoke(app, ["diff", BASE, str(missing)])
    assert result.exit_code == 1
    assert "diff failed:" in result.output

    result = runner.invoke(app, ["diff", BASE, str(missing), "--json"])
    assert result.exit_code == 1
    payload = json.loads(result.stdout.strip())
    assert payload["status"] == "error"
    assert payload["message"].startswith("diff failed:")
    assert payload["new_path"] == str(missing)


def test_cli_diff_custom_delimiter(tmp_path: Path) -> None:
    old = tmp_path / "old.csv"
    new = tmp_path / "new.csv"
    old.write_text("id,v\n1,x\n2,y\n", encoding="utf-8")
    new.write_text("id,v\n2,y\n1,x\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(app, ["diff", str(old), str(new), "--delimiter", ",", "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout.strip())
    assert payload["old_header"] == ["id", "v"]
    assert payload["summary"]["moved_rows"] == 1


def test_cli_diff_dialect_config_and_env(tmp_path: Path, monkeypatch) -> None:
    old = tmp_path / "old.csv"
    new = tmp_path / "new.csv"
    old.write_text("id|v\n1|x\n", encoding="utf-8")
    new.write_text("id|v\n1|x\n3|z\n", encoding="utf-8")
    config = tmp_path / "dialect.json"
    config.write_text(json.dumps({"delimiter": "|"}), encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(
        app,
        ["diff", str(old), str(new), "--dialect-config", str(config), "--json"],
    )
    assert result.exit_code == 0
    assert json.loads(result.stdout.strip())["summary"]["added_rows"] == 1

    monkeypatch.setenv("CSVDIFFKIT_DELIMITER", "|")
    result = runner.invoke(app, ["diff", str(old), str(new), "--json"])
    assert result.exit_code == 0
    assert json.loads(result.stdout.strip())["new_header"] == ["id", "v"]


def test_cli_diff_invalid_dialect_config(tmp_path: Path) -> None:
    config = tmp_path / "dialect.json"
    config.write_text(json.dumps({"separator": ","}), encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(app, ["diff", BASE, CHANGED, "--dialect-config", str(config)])

    assert result.exit_code == 1
    assert "Unsupported dialect config keys" in result.output


def test_cli_report_writes_html_against_file(tmp_path: Path) -> None:
    out_path = tmp_path / "reports" / "inventory.html"
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["report", CHANGED, "--against", BASE, "--out", str(out_path), "--title", "Inventory"],
    )

    assert result.exit_code == 0
    assert f"report written: {out_path}" in result.stdout
    html = out_path.read_text(encoding="utf-8")
    assert "<h1>CSV Diff Report</h1>" in html
    assert "Inventory" in html
    assert '<li class="added">origin</li>' in html


def test_cli_report_json_output(tmp_path: Path) -> None:
    out_path = tmp_path / "inventory.html"
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["report", CHANGED, "--against", BASE, "--out", str(out_path), "--json"],
    )

    assert result.exit_code == 0
    payload = json.loads(result.stdout.strip())
    assert payload["status"] == "ok"
    assert payload["identical"] is False
    assert payload["out"] == str(out_path)
