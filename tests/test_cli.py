"""Tests for CLI commands."""

import shutil
from datetime import date
from pathlib import Path

from typer.testing import CliRunner

from reschedule.cli import app
from reschedule.loader import load_work_plan

runner = CliRunner()

FIXTURE = "tests/fixtures/simple_plan.yaml"


def copy_fixture(tmp_path: Path) -> Path:
    target = tmp_path / "plan.yaml"
    shutil.copy(FIXTURE, target)
    return target


class TestShowCommand:
    """Test the show CLI command."""

    def test_show_lists_items(self) -> None:
        result = runner.invoke(app, ["show", FIXTURE])

        assert result.exit_code == 0
        assert "ID" in result.output
        assert "impl             2024-01-04  2024-01-08     5  parent=epic" in result.output
        assert "audit" in result.output
        assert "(manual)" in result.output

    def test_show_missing_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["show", str(tmp_path / "nope.yaml")])

        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_show_invalid_plan(self, tmp_path: Path) -> None:
        path = tmp_path / "plan.yaml"
        path.write_text("items:\n  a:\n    parent: ghost\n")

        result = runner.invoke(app, ["show", str(path)])

        assert result.exit_code == 1
        assert "unknown parent: ghost" in result.output


class TestMoveCommand:
    """Test the move CLI command."""

    def test_move_due_date(self) -> None:
        """Moving impl's due date reschedules its parent and successor."""
        result = runner.invoke(app, ["move", FIXTURE, "impl", "--due", "2024-01-10"])

        assert result.exit_code == 0
        assert "Edited:" in result.output
        assert "impl             2024-01-04  2024-01-10" in result.output
        assert "Rescheduled:" in result.output
        assert "epic             2024-01-01  2024-01-10" in result.output
        assert "docs             2024-01-13  2024-01-14" in result.output
        assert "audit" not in result.output.split("Rescheduled:")[1]

    def test_move_without_side_effects(self) -> None:
        result = runner.invoke(app, ["move", FIXTURE, "spec", "--start", "2024-01-01"])

        assert result.exit_code == 0
        assert "No other items were rescheduled" in result.output

    def test_move_to_new_parent(self) -> None:
        result = runner.invoke(app, ["move", FIXTURE, "docs", "--parent", "epic"])

        assert result.exit_code == 0
        assert "parent=epic" in result.output
        assert "epic             2024-01-01  2024-01-12" in result.output

    def test_move_does_not_write_by_default(self, tmp_path: Path) -> None:
        path = copy_fixture(tmp_path)
        before = path.read_text()

        result = runner.invoke(app, ["move", str(path), "impl", "--due", "2024-01-10"])

        assert result.exit_code == 0
        assert path.read_text() == before

    def test_move_write(self, tmp_path: Path) -> None:
        path = copy_fixture(tmp_path)

        result = runner.invoke(app, ["move", str(path), "impl", "--due", "2024-01-10", "--write"])

        assert result.exit_code == 0
        assert "Wrote 5 items" in result.output
        plan = load_work_plan(path)
        docs = plan.require_item("docs")
        assert (docs.start_date, docs.due_date) == (date(2024, 1, 13), date(2024, 1, 14))
        assert "# Plan used by parser, loader and CLI tests" in path.read_text()

    def test_parent_and_no_parent_conflict(self) -> None:
        result = runner.invoke(app, ["move", FIXTURE, "docs", "--parent", "epic", "--no-parent"])

        assert result.exit_code == 1
        assert "Cannot specify both --parent and --no-parent" in result.output

    def test_invalid_date(self) -> None:
        result = runner.invoke(app, ["move", FIXTURE, "impl", "--start", "next week"])

        assert result.exit_code == 1
        assert "Invalid start format" in result.output

    def test_unknown_item(self) -> None:
        result = runner.invoke(app, ["move", FIXTURE, "ghost", "--due", "2024-01-10"])

        assert result.exit_code == 1
        assert "Unknown work item: ghost" in result.output

    def test_inverted_dates(self) -> None:
        result = runner.invoke(app, ["move", FIXTURE, "impl", "--due", "2024-01-01"])

        assert result.exit_code == 1
        assert "before its start date" in result.output

    def test_verbose_reports_changes(self) -> None:
        result = runner.invoke(app, ["-v", "1", "move", FIXTURE, "impl", "--due", "2024-01-10"])

        assert result.exit_code == 0
        assert "docs: 2024-01-11..2024-01-12 -> 2024-01-13..2024-01-14" in result.output

    def test_explicit_config(self, tmp_path: Path) -> None:
        """Durations shown follow the configured default calendar."""
        config = tmp_path / "custom.yaml"
        config.write_text("scheduling:\n  default_calendar: weekdays\n")

        result = runner.invoke(app, ["--config", str(config), "show", FIXTURE])

        assert result.exit_code == 0
        # 2024-01-04 (Thu) .. 2024-01-08 (Mon) has three weekdays
        assert "impl             2024-01-04  2024-01-08     3  parent=epic" in result.output
