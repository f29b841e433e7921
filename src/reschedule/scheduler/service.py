"""Rescheduling of the items that depend on an edited item."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta
from typing import TYPE_CHECKING

from reschedule.exceptions import CalendarError
from reschedule.logger import format_span, get_logger
from reschedule.models import DateSnapshot

from .calendar import Days
from .core import (
    DEFAULT_CHANGED_KINDS,
    PROPAGATING_KINDS,
    ChangeKind,
    ScheduleDependency,
    ServiceResult,
)
from .dependency import PlanIndex, ScheduleDependencyGraph

logger = get_logger()

ScheduleState = tuple[date | None, date | None, int | None]

if TYPE_CHECKING:
    from reschedule.models import WorkItem, WorkPlan

    from .protocols import DependencyProvider, DurationCalculator


class SetScheduleService:
    """Propagates date changes of edited items to the items depending on them.

    Parents take the envelope of their descendants' dates. Leaves are moved
    along with their moving predecessors, or snapped to the earliest date their
    (possibly inherited) follows relations allow.

    The service mutates dates and durations in place and persists nothing. If a
    duration cannot be computed, every change made during the call is undone
    before the error propagates.
    """

    def __init__(
        self,
        plan: WorkPlan,
        work_items: WorkItem | list[WorkItem],
        snapshot: dict[str, DateSnapshot] | None = None,
        days: DurationCalculator | None = None,
    ):
        """Initialize the service.

        Args:
            plan: Plan containing the edited items and everything depending on them
            work_items: The edited item(s); the first one is the primary result
            snapshot: Dates of all items before the edit session. Items missing
                from it are treated as not having moved.
            days: Duration calculator (defaults to an all-days calendar)
        """
        self.plan = plan
        self.work_items = work_items if isinstance(work_items, list) else [work_items]
        self.snapshot = snapshot or {}
        self.days: DurationCalculator = days or Days()
        self._originals: dict[str, tuple[WorkItem, ScheduleState]] = {}

    def call(self, changed_kinds: Iterable[ChangeKind | str] | None = None) -> ServiceResult:
        """Reschedule everything affected by the given kinds of change.

        Args:
            changed_kinds: What changed on the edited items. Defaults to start
                and due date.

        Returns:
            Success result for the primary item with one dependent success per
            altered item

        Raises:
            CalendarError: If a duration could not be computed; no item is left changed
        """
        if changed_kinds is None:
            kinds = set(DEFAULT_CHANGED_KINDS)
        else:
            kinds = ChangeKind.coerce(changed_kinds)
        self._originals = {}
        altered: list[WorkItem] = []

        graph = ScheduleDependencyGraph(PlanIndex(self.plan), self.work_items, self.snapshot)

        try:
            if ChangeKind.PARENT in kinds:
                altered += self._schedule_by_parent(graph)

            if kinds & PROPAGATING_KINDS:
                altered += self._schedule_following(graph)
        except CalendarError:
            self.restore()
            logger.error(f"Rescheduling aborted; restored {len(self._originals)} item(s)")
            raise

        result = ServiceResult.succeeded(self.work_items[0] if self.work_items else None)
        for item in altered:
            result.add_dependent(ServiceResult.succeeded(item))

        return result

    def _schedule_by_parent(self, graph: DependencyProvider) -> list[WorkItem]:
        """Give undated items with a parent the parent's earliest possible start."""
        inherited: list[WorkItem] = []
        for item in self.work_items:
            if item.start_date is not None or item.parent_id is None:
                continue

            soonest = graph.soonest_start(item.parent_id)
            logger.checks(f"Inheriting start of {item.id} from parent {item.parent_id}: {soonest}")
            if soonest is None:
                continue

            self._remember(item)
            item.start_date = soonest
            logger.changes(f"{item.id}: start {soonest} (inherited from {item.parent_id})")
            inherited.append(item)
        return inherited

    def _schedule_following(self, graph: DependencyProvider) -> list[WorkItem]:
        """Reschedule dependents in schedule order.

        Successors are scheduled after their predecessors and ancestors after
        their descendants, because their dates are derived from those.
        """
        altered: list[WorkItem] = []

        for scheduled, dependency in graph.in_schedule_order():
            before = scheduled.schedule_state
            self._reschedule(scheduled, dependency)

            if scheduled.schedule_state != before:
                logger.changes(
                    f"{scheduled.id}: {format_span(before[0], before[1])} -> "
                    f"{format_span(scheduled.start_date, scheduled.due_date)}"
                )
                altered.append(scheduled)

        return altered

    def _reschedule(self, scheduled: WorkItem, dependency: ScheduleDependency) -> None:
        if dependency.has_descendants:
            self._reschedule_by_descendants(scheduled, dependency)
        else:
            self._reschedule_by_predecessors(scheduled, dependency)

    def _reschedule_by_descendants(
        self, scheduled: WorkItem, dependency: ScheduleDependency
    ) -> None:
        """Take start (earliest) and due (latest) over all descendants' dates."""
        logger.checks(f"Aggregating {scheduled.id} from its descendants")
        self._set_dates(scheduled, dependency.start_date, dependency.due_date)

    def _reschedule_by_predecessors(
        self, scheduled: WorkItem, dependency: ScheduleDependency
    ) -> None:
        """Derive a leaf's dates from its follows relations and those of its ancestors.

        Predecessor moved later (delta positive): the item only moves if its floor
        now lies after its start, and then only as far as the floor. Any buffer
        between the two absorbs the move.

        Predecessor moved earlier (delta negative): the item moves by the same
        amount unless a follows relation limits it, in which case it moves to
        the earliest date possible.
        """
        delta = self._follows_delta(dependency)
        min_start_date = dependency.soonest_start_date

        if delta == 0 and min_start_date:
            logger.checks(f"Snapping {scheduled.id} to its earliest start {min_start_date}")
            self._reschedule_to_date(scheduled, min_start_date)
        elif scheduled.start_date is None and min_start_date:
            logger.checks(f"Filling missing start of {scheduled.id} with {min_start_date}")
            self._schedule_on_missing_dates(scheduled, min_start_date)
        elif delta != 0:
            logger.checks(f"Shifting {scheduled.id} by up to {delta} days")
            self._reschedule_by_delta(scheduled, delta, min_start_date)
        else:
            logger.checks(f"Leaving {scheduled.id} unchanged")

    def _reschedule_to_date(self, scheduled: WorkItem, min_start_date: date) -> None:
        new_start_date = max(scheduled.start_date or min_start_date, min_start_date)

        if new_start_date == scheduled.start_date:
            new_due_date = scheduled.due_date
        else:
            new_due_date = self._due_date_keeping_duration(scheduled, new_start_date)

        self._set_dates(scheduled, new_start_date, new_due_date)

    def _due_date_keeping_duration(self, scheduled: WorkItem, new_start_date: date) -> date | None:
        """Due date that keeps the item's working-day duration when it starts on a new date."""
        if scheduled.due_date is None:
            return None

        duration = scheduled.duration
        if duration is None and scheduled.start_date is not None:
            duration = self.days.duration(scheduled, scheduled.start_date, scheduled.due_date)
        if duration is None:
            return max(scheduled.due_date, new_start_date)
        return self.days.due_date_for(scheduled, new_start_date, duration)

    def _schedule_on_missing_dates(self, scheduled: WorkItem, min_start_date: date) -> None:
        """Start an undated item at its floor; a due date before that floor is moved onto it."""
        due_date = scheduled.due_date
        if due_date is not None and due_date < min_start_date:
            due_date = min_start_date

        self._set_dates(scheduled, min_start_date, due_date)

    def _reschedule_by_delta(
        self, scheduled: WorkItem, delta: int, min_start_date: date | None
    ) -> None:
        if min_start_date is None:
            required_delta = min(delta, 0)
        else:
            slack = (min_start_date - (scheduled.start_date or min_start_date)).days
            required_delta = max(slack, min(delta, 0))

        if required_delta == 0:
            return

        shift = timedelta(days=required_delta)
        if scheduled.start_date is None:
            # No start, so no duration to keep
            new_due_date = scheduled.due_date + shift if scheduled.due_date else None
            self._set_dates(scheduled, None, new_due_date)
            return

        new_start_date = scheduled.start_date + shift
        self._set_dates(
            scheduled,
            new_start_date,
            self._due_date_keeping_duration(scheduled, new_start_date),
        )

    def _follows_delta(self, dependency: ScheduleDependency) -> int:
        if dependency.moving_predecessors:
            return self._date_rescheduling_delta(dependency.moving_predecessors[0])
        return 0

    def _date_rescheduling_delta(self, predecessor: WorkItem) -> int:
        """Days the predecessor moved: by its due date, else by its start date."""
        before = self.snapshot.get(predecessor.id, DateSnapshot())
        if predecessor.due_date is not None:
            return (predecessor.due_date - (before.due_date or predecessor.due_date)).days
        if predecessor.start_date is not None:
            return (predecessor.start_date - (before.start_date or predecessor.start_date)).days
        return 0

    def _set_dates(self, item: WorkItem, start_date: date | None, due_date: date | None) -> None:
        self._remember(item)
        duration = self.days.duration(item, start_date, due_date)
        item.start_date = start_date
        item.due_date = due_date
        item.duration = duration

    def _remember(self, item: WorkItem) -> None:
        if item.id not in self._originals:
            self._originals[item.id] = (item, item.schedule_state)

    def restore(self) -> None:
        """Put back the dates and durations of every item the last call touched."""
        for item, (start_date, due_date, duration) in self._originals.values():
            item.start_date = start_date
            item.due_date = due_date
            item.duration = duration
