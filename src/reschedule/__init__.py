"""reschedule - date propagation for work items linked by hierarchy and follows relations."""

from .exceptions import (
    CalendarError,
    CircularDependencyError,
    MissingReferenceError,
    ParseError,
    RescheduleError,
    ValidationError,
)
from .models import DateSnapshot, FollowsRelation, WorkItem, WorkPlan, WorkPlanMetadata

__version__ = "0.1.0"

__all__ = [
    "CalendarError",
    "CircularDependencyError",
    "DateSnapshot",
    "FollowsRelation",
    "MissingReferenceError",
    "ParseError",
    "RescheduleError",
    "ValidationError",
    "WorkItem",
    "WorkPlan",
    "WorkPlanMetadata",
]
