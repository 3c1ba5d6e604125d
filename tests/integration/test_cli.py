"""Integration tests for the sqlexplorer CLI."""
import json
import subprocess
import sys


def run_cli(args):
    """Helper to run the CLI as a subprocess."""
    return subprocess.run(
        [sys.executable, "-m", "sqlexplorer.cli.main"] + args,
        capture_output=True,
        text=True,
        check=False
    )


def test_cli_report_from_snapshot(snapshot_file, tmp_path):
    """Reports are written and their paths printed."""
    out_dir = tmp_path / "reports"
    result = run_cli(["report", "--source", str(snapshot_file), "--output-dir", str(out_dir)])

    assert result.returncode == 0, result.stderr
    assert "Sales_DB_Dependency.txt" in result.stdout
    assert sorted(p.name for p in out_dir.iterdir()) == [
        "Sales_DB_Dependency.txt",
        "Sales_DB_Routines.csv",
        "Sales_DB_Tables.csv",
        "Sales_DB_Views.csv",
    ]
    text = (out_dir / "Sales_DB_Dependency.txt").read_text(encoding="utf-8")
    assert text.splitlines()[0] == "dbo.Customers"


def test_cli_report_formats(snapshot_file, tmp_path):
    """Repeated --format options add report files."""
    result = run_cli([
        "report", "--source", str(snapshot_file), "--output-dir", str(tmp_path),
        "--format", "json", "--format", "markdown"
    ])

    assert result.returncode == 0, result.stderr
    data = json.loads((tmp_path / "Sales_DB_Dependency.json").read_text(encoding="utf-8"))
    assert [t["table"] for t in data["tables"]] == [
        "dbo.Customers", "dbo.Orders", "dbo.OrderItems"
    ]
    assert (tmp_path / "Sales_DB_Dependency.md").exists()
    assert not (tmp_path / "Sales_DB_Dependency.txt").exists()


def test_cli_report_sqlglot_detector(snapshot_file, tmp_path):
    """The parser-based detector finds the same dependents here."""
    result = run_cli([
        "report", "--source", str(snapshot_file), "--output-dir", str(tmp_path),
        "--detector", "sqlglot", "--format", "json"
    ])

    assert result.returncode == 0, result.stderr
    data = json.loads((tmp_path / "Sales_DB_Dependency.json").read_text(encoding="utf-8"))
    assert data["tables"][0]["views"] == ["dbo.CustomerOrders"]


def test_cli_report_existing_file(snapshot_file, tmp_path):
    """A second run fails unless --overwrite is given."""
    args = ["report", "--source", str(snapshot_file), "--output-dir", str(tmp_path)]
    assert run_cli(args).returncode == 0

    result = run_cli(args)
    assert result.returncode == 1
    assert "Error:" in result.stderr
    assert "--overwrite" in result.stderr

    assert run_cli(args + ["--overwrite"]).returncode == 0


def test_cli_verbose_logs_to_stderr(snapshot_file, tmp_path):
    """--verbose enables debug logging on stderr."""
    result = run_cli([
        "--verbose", "report", "--source", str(snapshot_file), "--output-dir", str(tmp_path)
    ])

    assert result.returncode == 0
    assert "DEBUG" in result.stderr
