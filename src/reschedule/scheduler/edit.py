"""Edit sessions: apply one user edit and propagate it."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Final

from reschedule.exceptions import CalendarError, ValidationError
from reschedule.logger import get_logger

from .calendar import Days
from .core import ChangeKind, ServiceResult
from .service import SetScheduleService

logger = get_logger()

if TYPE_CHECKING:
    from reschedule.models import WorkPlan

    from .protocols import DurationCalculator


class Unset(Enum):
    """Marker for 'leave this attribute alone' (None means 'clear it')."""

    UNSET = "UNSET"


UNSET: Final = Unset.UNSET


class EditSession:
    """One logical edit of a work plan yields one propagation pass.

    The dates of every item are captured when the session is created; moves
    of predecessors are measured against that capture.
    """

    def __init__(self, plan: WorkPlan, days: DurationCalculator | None = None):
        self.plan = plan
        self.days: DurationCalculator = days or Days()
        self.snapshot = plan.snapshot()

    def change(
        self,
        item_id: str,
        *,
        start_date: date | None | Unset = UNSET,
        due_date: date | None | Unset = UNSET,
        parent_id: str | None | Unset = UNSET,
    ) -> ServiceResult:
        """Edit one item and reschedule everything depending on it.

        Args:
            item_id: Item to edit
            start_date: New start date; None clears it; omitted leaves it alone
            due_date: New due date; None clears it; omitted leaves it alone
            parent_id: New parent; None removes the parent; omitted leaves it alone

        Returns:
            The scheduling result; its dependents are every item altered as a side effect

        Raises:
            MissingReferenceError: If an item or parent does not exist
            ValidationError: If the edit inverts the item's dates or nests it in itself
            CalendarError: If a duration cannot be computed; the whole edit is undone
        """
        item = self.plan.require_item(item_id)
        new_start = item.start_date if isinstance(start_date, Unset) else start_date
        new_due = item.due_date if isinstance(due_date, Unset) else due_date
        if new_start and new_due and new_due < new_start:
            raise ValidationError(
                f"Due date {new_due} of {item_id} is before its start date {new_start}"
            )

        original = (item.start_date, item.due_date, item.duration, item.parent_id)
        changed: set[ChangeKind] = set()
        former_parent_id: str | None = None

        if not isinstance(parent_id, Unset) and parent_id != item.parent_id:
            former_parent_id = self.plan.set_parent(item_id, parent_id)
            changed.add(ChangeKind.PARENT)
        if new_start != item.start_date:
            item.start_date = new_start
            changed.add(ChangeKind.START_DATE)
        if new_due != item.due_date:
            item.due_date = new_due
            changed.add(ChangeKind.DUE_DATE)

        logger.checks(f"Edit of {item_id} changed: {sorted(kind.value for kind in changed)}")

        service = SetScheduleService(self.plan, item, self.snapshot, self.days)
        try:
            result = service.call(changed)
            # The edited item's own shape is the caller's; parent inheritance may have set its start
            item.duration = self.days.duration(item, item.start_date, item.due_date)

            if former_parent_id is not None:
                self._reschedule_former_parent(former_parent_id, result)
        except CalendarError:
            service.restore()
            item.start_date, item.due_date, item.duration, item.parent_id = original
            logger.error(f"Edit of {item_id} undone")
            raise

        return result

    def _reschedule_former_parent(self, former_parent_id: str, result: ServiceResult) -> None:
        """Re-aggregate the former parent by rescheduling from its remaining children."""
        siblings = self.plan.children_of(former_parent_id)
        if not siblings:
            logger.checks(f"Former parent {former_parent_id} has no children left")
            return

        former = SetScheduleService(self.plan, siblings, self.snapshot, self.days).call()
        known = set(result.altered_ids)
        for dependent in former.dependent_results:
            if dependent.result is not None and dependent.result.id not in known:
                result.add_dependent(dependent)
