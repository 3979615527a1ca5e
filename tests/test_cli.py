from __future__ import annotations

import csv
import io
from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

from reconciliation_tool.cli import app, cmd_inspect, cmd_reconcile
from reconciliation_tool.config import ReconcileSettings

runner = CliRunner()

INTERNAL_CSV = """
transaction_reference,amount,status
TX-1,100,paid
TX-2,50,pending
TX-3,10,paid
"""

PROVIDER_CSV = """
 transaction_reference , amount , status
TX-1,100,paid
TX-2,55,pending
TX-4,70,failed
"""


@pytest.fixture
def inputs(write_csv) -> tuple[Path, Path]:
    return write_csv("internal.csv", INTERNAL_CSV), write_csv("provider.csv", PROVIDER_CSV)


def _console() -> tuple[Console, io.StringIO]:
    buf = io.StringIO()
    return Console(file=buf, width=200, color_system=None), buf


def test_cmd_reconcile_renders_sections_and_summary(inputs):
    internal, provider = inputs
    console, buf = _console()

    code = cmd_reconcile(
        internal, provider, settings=ReconcileSettings.from_env({}), console=console
    )

    out = buf.getvalue()
    assert code == 0
    assert "3 internal transactions loaded" in out
    assert "Matched Transactions (2)" in out
    assert "Amount mismatch" in out
    assert "Present only in Internal file (1)" in out
    assert "Present only in Provider file (1)" in out
    assert "2 matched (1 with discrepancies), 1 internal only, 1 provider only" in out


def test_cmd_reconcile_hides_agreeing_rows(inputs):
    internal, provider = inputs
    console, buf = _console()

    cmd_reconcile(
        internal,
        provider,
        settings=ReconcileSettings.from_env({}),
        show_agreeing=False,
        console=console,
    )

    assert "TX-1" not in buf.getvalue()
    assert "TX-2" in buf.getvalue()


def test_reconcile_command_exports_csvs(inputs, tmp_path):
    internal, provider = inputs
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        ["reconcile", "--internal", str(internal), "--provider", str(provider), "--out-dir", str(out_dir)],
    )

    assert result.exit_code == 0, result.output
    with (out_dir / "matched_transactions.csv").open(encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    assert [r["transaction_reference"] for r in rows] == ["TX-1", "TX-2"]
    assert rows[1]["provider_amount"] == "55"
    assert (out_dir / "internal_only_transactions.csv").exists()
    assert (out_dir / "provider_only_transactions.csv").exists()


def test_reconcile_command_reads_out_dir_from_env(inputs, tmp_path, monkeypatch):
    internal, provider = inputs
    monkeypatch.setenv("RECON_OUT_DIR", str(tmp_path / "env-out"))

    result = runner.invoke(app, ["reconcile", "--internal", str(internal), "--provider", str(provider)])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "env-out" / "matched_transactions.csv").exists()


def test_empty_collection_exits_non_zero(write_csv, inputs):
    internal, _ = inputs
    empty = write_csv("empty.csv", "transaction_reference,amount,status\n")

    result = runner.invoke(app, ["reconcile", "--internal", str(internal), "--provider", str(empty)])

    assert result.exit_code == 1
    assert "nothing to reconcile" in result.output


def test_missing_file_exits_non_zero(inputs, tmp_path):
    internal, _ = inputs

    result = runner.invoke(
        app, ["reconcile", "--internal", str(internal), "--provider", str(tmp_path / "nope.csv")]
    )

    assert result.exit_code == 1
    assert "File not found" in result.output


def test_reject_duplicates_exits_non_zero(write_csv, inputs):
    _, provider = inputs
    dup = write_csv("dup.csv", "transaction_reference,amount,status\nA,1,paid\nA,2,paid\n")

    result = runner.invoke(
        app,
        ["reconcile", "--internal", str(dup), "--provider", str(provider), "--duplicates", "reject"],
    )

    assert result.exit_code == 1
    assert "duplicate reference 'A'" in result.output


def test_strict_mode_exits_on_missing_reference(write_csv, inputs):
    _, provider = inputs
    bad = write_csv("bad.csv", "transaction_reference,amount,status\n,1,paid\n")

    lenient = runner.invoke(app, ["reconcile", "--internal", str(bad), "--provider", str(provider)])
    strict = runner.invoke(
        app, ["reconcile", "--internal", str(bad), "--provider", str(provider), "--strict"]
    )

    assert lenient.exit_code == 0, lenient.output
    assert strict.exit_code == 1


def test_invalid_setting_exits_non_zero(inputs):
    internal, provider = inputs

    result = runner.invoke(
        app,
        [
            "reconcile",
            "--internal",
            str(internal),
            "--provider",
            str(provider),
            "--amount-compare",
            "fuzzy",
        ],
    )

    assert result.exit_code == 1
    assert "invalid settings" in result.output


def test_cmd_inspect_reports_duplicates_and_unkeyed(write_csv):
    path = write_csv(
        "internal.csv",
        """
        transaction_reference,amount,status
        A,1,paid
        A,2,paid
        ,3,paid
        B,4,paid
        """,
    )
    console, buf = _console()

    code = cmd_inspect(path, settings=ReconcileSettings.from_env({}), console=console)

    out = buf.getvalue()
    assert code == 0
    assert "Distinct references" in out
    assert "Duplicated" in out
    assert "Rows without reference" in out
