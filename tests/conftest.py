"""Pytest configuration and fixtures for reschedule tests."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date
from pathlib import Path
from typing import Any

import pytest

from reschedule.logger import reset_logger
from reschedule.models import FollowsRelation, WorkItem, WorkPlan, WorkPlanMetadata
from reschedule.scheduler import Days


@pytest.fixture(autouse=True)
def clean_logger() -> Iterator[None]:
    """Return the logger to silent mode after each test."""
    yield
    reset_logger()


@pytest.fixture
def fixtures_dir() -> Path:
    """Get the fixtures directory."""
    return Path(__file__).parent / "fixtures"


def make_item(
    item_id: str,
    start_date: date | None = None,
    due_date: date | None = None,
    **kwargs: Any,
) -> WorkItem:
    """Create a work item whose duration matches its dates on an all-days calendar.

    Example:
        make_item("a", date(2024, 1, 1), date(2024, 1, 3), parent_id="p")
    """
    item = WorkItem(id=item_id, name=item_id, start_date=start_date, due_date=due_date, **kwargs)
    item.duration = Days().duration(item, start_date, due_date)
    return item


def follows(successor_id: str, predecessor_id: str, lag_days: int = 0) -> FollowsRelation:
    """Create a relation in which ``successor_id`` follows ``predecessor_id``."""
    return FollowsRelation(predecessor_id, successor_id, lag_days)


def make_plan(items: list[WorkItem], relations: list[FollowsRelation] | None = None) -> WorkPlan:
    """Wrap items and relations into a WorkPlan."""
    return WorkPlan(metadata=WorkPlanMetadata(), items=items, relations=relations or [])
