"""Protocol definitions for the scheduler's collaborators."""

from collections.abc import Iterator
from datetime import date
from typing import TYPE_CHECKING, Protocol

from .core import ScheduleDependency

if TYPE_CHECKING:
    from reschedule.models import WorkItem


class DurationCalculator(Protocol):
    """Calendar-aware conversion between date ranges and working days."""

    def duration(
        self, item: "WorkItem", start_date: date | None, due_date: date | None
    ) -> int | None:
        """Working days in ``start_date..due_date``, or None if a date is missing."""
        ...

    def due_date_for(self, item: "WorkItem", start_date: date, duration: int) -> date:
        """Due date reached after ``duration`` working days from ``start_date``."""
        ...


class DependencyProvider(Protocol):
    """Discovers and orders the items affected by an edit."""

    def in_schedule_order(self) -> Iterator[tuple["WorkItem", ScheduleDependency]]:
        """Yield every dependent item with its facts, predecessors and descendants first."""
        ...

    def soonest_start(self, item_id: str) -> date | None:
        """Earliest start the item's own and inherited follows relations allow."""
        ...
