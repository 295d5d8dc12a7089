"""Unit tests for the CLI — Typer command registration and behavior.

Exercises the commands end to end against a temp local ledger via
typer.testing.CliRunner.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from agritrace.cli.app import app

runner = CliRunner()


@pytest.fixture
def ledger_db(tmp_path: Path) -> str:
    """A temp ledger seeded with one batch (id 1)."""
    db = str(tmp_path / "ledger.db")
    result = runner.invoke(app, ["new-batch", "Cocoa beans", "--ledger", db])
    assert result.exit_code == 0, result.output
    return db


# ---------------------------------------------------------------------------
# Test: CLI help and registration
# ---------------------------------------------------------------------------


class TestCliApp:
    """The CLI must register all expected commands and show help."""

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        # Typer's no_args_is_help may exit with 0 or 2 depending on version
        assert result.exit_code in (0, 2)
        assert "usage" in result.output.lower()

    def test_help_flag(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("batches", "show", "record", "new-batch", "event-types", "verify"):
            assert command in result.output

    @pytest.mark.parametrize(
        "command", ["batches", "show", "record", "new-batch", "event-types", "verify"]
    )
    def test_command_help(self, command):
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0


# ---------------------------------------------------------------------------
# Test: commands
# ---------------------------------------------------------------------------


class TestEventTypes:
    def test_processor(self):
        result = runner.invoke(app, ["event-types", "--role", "2"])
        assert result.exit_code == 0
        assert "Processing" in result.output
        assert "Quality Check" in result.output
        assert "Sale" not in result.output

    def test_unknown_role(self):
        result = runner.invoke(app, ["event-types", "--role", "9"])
        assert result.exit_code == 0
        assert "No event types available" in result.output


class TestBatchCommands:
    def test_missing_ledger(self, tmp_path: Path):
        result = runner.invoke(app, ["batches", "--ledger", str(tmp_path / "none.db")])
        assert result.exit_code == 1
        assert "Ledger not found" in result.output

    def test_new_batch_prints_id(self, ledger_db: str):
        result = runner.invoke(app, ["new-batch", "Maize", "--ledger", ledger_db])
        assert result.exit_code == 0
        assert result.output.strip().splitlines()[-1] == "2"

    def test_batches_lists(self, ledger_db: str):
        result = runner.invoke(app, ["batches", "--ledger", ledger_db])
        assert result.exit_code == 0
        assert "Cocoa beans" in result.output

    def test_show(self, ledger_db: str):
        result = runner.invoke(app, ["show", "1", "--ledger", ledger_db])
        assert result.exit_code == 0
        assert "Harvest" in result.output

    def test_show_not_found(self, ledger_db: str):
        result = runner.invoke(app, ["show", "999", "--ledger", ledger_db])
        assert result.exit_code == 1
        assert "Batch Not Found" in result.output

    def test_show_with_chain_verification(self, ledger_db: str):
        result = runner.invoke(app, ["show", "1", "--verify-chain", "--ledger", ledger_db])
        assert result.exit_code == 0
        assert "valid" in result.output

    def test_verify(self, ledger_db: str):
        result = runner.invoke(app, ["verify", "1", "--ledger", ledger_db])
        assert result.exit_code == 0
        assert "valid" in result.output

    def test_verify_missing_batch(self, ledger_db: str):
        result = runner.invoke(app, ["verify", "999", "--ledger", ledger_db])
        assert result.exit_code == 1


class TestRecordCommand:
    def test_processor_records_quality_check(self, ledger_db: str):
        result = runner.invoke(app, [
            "record", "1", "--type", "quality-check", "--role", "2",
            "--location", "Ibadan Plant", "--quality-score", "8",
            "--ledger", ledger_db,
        ])
        assert result.exit_code == 0, result.output
        assert "Quality Check event recorded" in result.output

        shown = runner.invoke(app, ["show", "1", "--ledger", ledger_db])
        assert "Quality Check" in shown.output

    def test_retailer_cannot_record_processing(self, ledger_db: str):
        result = runner.invoke(app, [
            "record", "1", "--type", "processing", "--role", "3", "--ledger", ledger_db,
        ])
        assert result.exit_code == 1
        assert "may not record" in result.output

    def test_event_type_by_code(self, ledger_db: str):
        result = runner.invoke(app, [
            "record", "1", "--type", "4", "--role", "3", "--ledger", ledger_db,
        ])
        assert result.exit_code == 0, result.output
        assert "Sale event recorded" in result.output

    def test_unknown_event_type(self, ledger_db: str):
        result = runner.invoke(app, [
            "record", "1", "--type", "teleport", "--role", "3", "--ledger", ledger_db,
        ])
        assert result.exit_code != 0

    def test_bad_quality_score(self, ledger_db: str):
        result = runner.invoke(app, [
            "record", "1", "--type", "quality-check", "--role", "4",
            "--quality-score", "11", "--ledger", ledger_db,
        ])
        assert result.exit_code == 1
        assert "between 1 and 10" in result.output


class TestLedgerFaults:
    def test_bracketed_product_name(self, tmp_path: Path):
        db = str(tmp_path / "ledger.db")
        created = runner.invoke(app, ["new-batch", "Wheat [/]", "--ledger", db])
        assert created.exit_code == 0, created.output
        listed = runner.invoke(app, ["batches", "--ledger", db])
        assert listed.exit_code == 0, listed.output
        assert "Wheat [/]" in listed.output
        shown = runner.invoke(app, ["show", "1", "--ledger", db])
        assert shown.exit_code == 0, shown.output

    def test_show_unopenable_ledger(self, tmp_path: Path):
        # An existing directory passes the exists check but cannot be opened.
        result = runner.invoke(app, ["show", "1", "--ledger", str(tmp_path)])
        assert result.exit_code == 1
        assert "Failed to load batch" in result.output
        assert isinstance(result.exception, SystemExit)

    def test_new_batch_unopenable_ledger(self, tmp_path: Path):
        result = runner.invoke(app, ["new-batch", "Maize", "--ledger", str(tmp_path)])
        assert result.exit_code == 1
        assert "Failed to create batch" in result.output
        assert isinstance(result.exception, SystemExit)
