"""Working calendars and the duration calculator.

A duration is the number of working days in the inclusive range
``start_date..due_date``. Which days count is decided by the item's
working calendar: a set of working weekdays minus any non-working periods.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, field_validator, model_validator

from reschedule.exceptions import CalendarError

if TYPE_CHECKING:
    from reschedule.models import WorkItem

ALL_DAYS = "all_days"
WEEKDAYS = "weekdays"


class NonWorkingPeriod(BaseModel):
    """A span of days (inclusive) on which no work happens, e.g. holidays."""

    start: date
    end: date

    @model_validator(mode="after")
    def validate_end_after_start(self) -> NonWorkingPeriod:
        """Ensure end date is not before start date."""
        if self.end < self.start:
            raise ValueError("end date must not be before start date")
        return self


class WorkingCalendar(BaseModel):
    """Named working calendar."""

    name: str
    working_days: set[int] = Field(default_factory=lambda: {1, 2, 3, 4, 5, 6, 7})  # ISO weekdays
    non_working_periods: list[NonWorkingPeriod] = Field(default_factory=list[NonWorkingPeriod])

    @field_validator("working_days")
    @classmethod
    def validate_working_days(cls, v: set[int]) -> set[int]:
        """Require at least one working weekday, each in 1..7."""
        if not v:
            raise ValueError("a calendar needs at least one working weekday")
        invalid = sorted(day for day in v if not 1 <= day <= 7)  # noqa: PLR2004
        if invalid:
            raise ValueError(f"invalid ISO weekdays: {invalid}")
        return v

    def is_working_day(self, day: date) -> bool:
        """Check whether work happens on the given day."""
        if day.isoweekday() not in self.working_days:
            return False
        return not any(p.start <= day <= p.end for p in self.non_working_periods)

    def count_working_days(self, start_date: date, due_date: date) -> int:
        """Count working days in ``start_date..due_date`` (inclusive)."""
        count = 0
        current = start_date
        while current <= due_date:
            if self.is_working_day(current):
                count += 1
            current += timedelta(days=1)
        return count

    def due_date_for(self, start_date: date, duration: int) -> date:
        """Find the due date on which ``duration`` working days from start are used up.

        A duration of zero or less yields the start date itself.
        """
        if duration <= 0:
            return start_date

        remaining = duration
        current = start_date
        while True:
            if self.is_working_day(current):
                remaining -= 1
                if remaining == 0:
                    return current
            current += timedelta(days=1)


def builtin_calendars() -> list[WorkingCalendar]:
    """Calendars that are always available."""
    return [
        WorkingCalendar(name=ALL_DAYS),
        WorkingCalendar(name=WEEKDAYS, working_days={1, 2, 3, 4, 5}),
    ]


class Days:
    """Duration calculator over a set of named working calendars.

    Items name their calendar; items without one use the default calendar.
    Looking up an unknown calendar raises CalendarError.
    """

    def __init__(
        self,
        calendars: list[WorkingCalendar] | None = None,
        default_calendar: str = ALL_DAYS,
    ):
        """Initialize with extra calendars on top of the built-ins.

        Args:
            calendars: Calendars to register; a name clash replaces the built-in
            default_calendar: Calendar used by items that do not name one
        """
        self.calendars = {cal.name: cal for cal in builtin_calendars()}
        for calendar in calendars or []:
            self.calendars[calendar.name] = calendar
        self.default_calendar = default_calendar

    def for_item(self, item: WorkItem) -> WorkingCalendar:
        """Get the working calendar of an item."""
        name = item.calendar or self.default_calendar
        calendar = self.calendars.get(name)
        if calendar is None:
            raise CalendarError(f"Item {item.id} uses unknown calendar '{name}'")
        return calendar

    def duration(
        self, item: WorkItem, start_date: date | None, due_date: date | None
    ) -> int | None:
        """Working days between the dates, or None when either is missing."""
        calendar = self.for_item(item)
        if start_date is None or due_date is None:
            return None
        return calendar.count_working_days(start_date, due_date)

    def due_date_for(self, item: WorkItem, start_date: date, duration: int) -> date:
        """Inverse of duration(): the due date for a start and working-day count."""
        return self.for_item(item).due_date_for(start_date, duration)
