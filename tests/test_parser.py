"""Tests for YAML parsing, loading and write-back."""

from datetime import date
from pathlib import Path

import pytest

from reschedule.exceptions import (
    CircularDependencyError,
    MissingReferenceError,
    ParseError,
    ValidationError,
)
from reschedule.loader import load_work_plan, validate_work_plan, write_work_plan
from reschedule.models import FollowsRelation
from reschedule.parser import WorkPlanParser
from tests.conftest import follows, make_item, make_plan


class TestWorkPlanParser:
    """Test WorkPlanParser."""

    def test_parse_fixture(self, fixtures_dir: Path) -> None:
        plan = WorkPlanParser().parse_file(fixtures_dir / "simple_plan.yaml")

        assert plan.metadata.version == "1.0"
        assert plan.metadata.project == "Test project"
        assert plan.metadata.last_updated == "2024-01-15"
        assert [item.id for item in plan.items] == ["epic", "spec", "impl", "docs", "audit"]

        impl = plan.require_item("impl")
        assert impl.name == "Implement"
        assert impl.parent_id == "epic"
        assert (impl.start_date, impl.due_date) == (date(2024, 1, 4), date(2024, 1, 8))
        assert plan.require_item("audit").manually_scheduled
        assert FollowsRelation("impl", "docs", 2) in plan.relations
        assert FollowsRelation("spec", "impl") in plan.relations

    def test_minimal_items(self) -> None:
        """Bodies may be empty and IDs numeric; the name defaults to the ID."""
        plan = WorkPlanParser().parse_data({"items": {"a": None, 42: {"parent": "a"}}})

        assert plan.require_item("a").name == "a"
        assert plan.require_item("42").parent_id == "a"
        assert plan.relations == []

    def test_meta_kept(self) -> None:
        plan = WorkPlanParser().parse_data({"items": {"a": {"meta": {"owner": "ops"}}}})

        assert plan.require_item("a").meta == {"owner": "ops"}

    def test_inverted_dates_rejected(self) -> None:
        data = {"items": {"a": {"start_date": "2024-01-05", "due_date": "2024-01-01"}}}

        with pytest.raises(ValidationError, match="before start_date"):
            WorkPlanParser().parse_data(data)

    def test_bad_date_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Invalid YAML structure"):
            WorkPlanParser().parse_data({"items": {"a": {"start_date": "soon"}}})

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ParseError, match="File not found"):
            WorkPlanParser().parse_file(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("items: [unclosed\n")

        with pytest.raises(ParseError, match="Failed to parse YAML"):
            WorkPlanParser().parse_file(path)

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ParseError, match="dictionary at the root"):
            WorkPlanParser().parse_file(path)


class TestLoader:
    """Validation and duration computation on load."""

    def test_load_computes_durations(self, fixtures_dir: Path) -> None:
        plan = load_work_plan(fixtures_dir / "simple_plan.yaml")

        assert plan.require_item("spec").duration == 3
        assert plan.require_item("impl").duration == 5
        assert plan.require_item("epic").duration is None

    def test_unknown_parent(self) -> None:
        plan = make_plan([make_item("a", parent_id="ghost")])

        with pytest.raises(MissingReferenceError, match="unknown parent: ghost"):
            validate_work_plan(plan)

    def test_unknown_predecessor(self) -> None:
        plan = make_plan([make_item("a")], [follows("a", "ghost")])

        with pytest.raises(MissingReferenceError, match="follows unknown item: ghost"):
            validate_work_plan(plan)

    def test_self_follow(self) -> None:
        plan = make_plan([make_item("a")], [follows("a", "a")])

        with pytest.raises(CircularDependencyError, match="follows itself"):
            validate_work_plan(plan)

    def test_follows_cycle(self) -> None:
        plan = make_plan(
            [make_item("a"), make_item("b"), make_item("c")],
            [follows("b", "a"), follows("c", "b"), follows("a", "c")],
        )

        with pytest.raises(CircularDependencyError, match="Circular follows relation"):
            validate_work_plan(plan)

    def test_parent_cycle(self) -> None:
        plan = make_plan([make_item("a", parent_id="b"), make_item("b", parent_id="a")])

        with pytest.raises(CircularDependencyError, match="Circular parent chain"):
            validate_work_plan(plan)

    def test_load_with_weekday_default(self, tmp_path: Path) -> None:
        """A config next to the plan sets the default calendar."""
        (tmp_path / "reschedule_config.yaml").write_text(
            "scheduling:\n  default_calendar: weekdays\n"
        )
        plan_path = tmp_path / "plan.yaml"
        plan_path.write_text(
            "items:\n  a:\n    start_date: 2024-01-05\n    due_date: 2024-01-08\n"
        )

        plan = load_work_plan(plan_path)

        assert plan.require_item("a").duration == 2


class TestWriteWorkPlan:
    """Round-trip write-back of dates and parents."""

    def test_preserves_comments_and_updates_dates(self, tmp_path: Path) -> None:
        path = tmp_path / "plan.yaml"
        path.write_text(
            "# Team plan\n"
            "items:\n"
            "  a:\n"
            "    name: Alpha  # first\n"
            "    start_date: 2024-01-01\n"
            "    due_date: 2024-01-05\n"
            "  b:\n"
            "    follows: [a]\n"
        )
        plan = load_work_plan(path)
        b = plan.require_item("b")
        b.start_date = date(2024, 1, 6)
        b.due_date = date(2024, 1, 8)
        b.parent_id = "a"

        count = write_work_plan(path, plan)

        text = path.read_text()
        assert count == 2
        assert "# Team plan" in text
        assert "# first" in text
        reloaded = load_work_plan(path)
        reloaded_b = reloaded.require_item("b")
        assert (reloaded_b.start_date, reloaded_b.due_date) == (date(2024, 1, 6), date(2024, 1, 8))
        assert reloaded_b.parent_id == "a"
        assert reloaded.relations == [FollowsRelation("a", "b")]

    def test_cleared_dates_removed(self, tmp_path: Path) -> None:
        path = tmp_path / "plan.yaml"
        path.write_text("items:\n  a:\n    start_date: 2024-01-01\n    due_date: 2024-01-05\n")
        plan = load_work_plan(path)
        plan.require_item("a").due_date = None

        write_work_plan(path, plan)

        assert "due_date" not in path.read_text()
        assert load_work_plan(path).require_item("a").start_date == date(2024, 1, 1)

    def test_empty_item_body_filled(self, tmp_path: Path) -> None:
        path = tmp_path / "plan.yaml"
        path.write_text("items:\n  a:\n")
        plan = load_work_plan(path)
        plan.require_item("a").start_date = date(2024, 2, 1)

        write_work_plan(path, plan)

        assert load_work_plan(path).require_item("a").start_date == date(2024, 2, 1)

    def test_missing_items_section(self, tmp_path: Path) -> None:
        path = tmp_path / "plan.yaml"
        path.write_text("metadata:\n  version: 1\n")

        with pytest.raises(ParseError, match="No 'items' section"):
            write_work_plan(path, make_plan([]))
