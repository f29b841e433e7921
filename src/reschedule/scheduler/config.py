"""Configuration classes for the scheduling system."""

from pydantic import BaseModel, Field, field_validator, model_validator

from .calendar import ALL_DAYS, Days, WorkingCalendar, builtin_calendars
from .core import DEFAULT_CHANGED_KINDS, ChangeKind


class SchedulingConfig(BaseModel):
    """Configuration for working calendars and propagation defaults."""

    # Calendar used by items that do not name one
    default_calendar: str = ALL_DAYS
    # Extra calendars; built-ins are all_days and weekdays
    calendars: list[WorkingCalendar] = Field(default_factory=list[WorkingCalendar])
    # Kinds of change assumed when a caller does not say what changed
    default_changed_kinds: set[ChangeKind] = Field(
        default_factory=lambda: set(DEFAULT_CHANGED_KINDS)
    )

    @field_validator("default_changed_kinds", mode="before")
    @classmethod
    def coerce_changed_kinds(cls, v: object) -> object:
        """Accept ``parent_id`` as an alias of ``parent``."""
        if isinstance(v, (list, set, tuple)):
            return ["parent" if kind == "parent_id" else kind for kind in v]
        return v

    @model_validator(mode="after")
    def validate_default_calendar(self) -> "SchedulingConfig":
        """Ensure the default calendar is defined."""
        names = {cal.name for cal in builtin_calendars()} | {cal.name for cal in self.calendars}
        if self.default_calendar not in names:
            raise ValueError(f"default_calendar '{self.default_calendar}' is not defined")
        return self

    def create_days(self) -> Days:
        """Build the duration calculator for these calendars."""
        return Days(self.calendars, self.default_calendar)
