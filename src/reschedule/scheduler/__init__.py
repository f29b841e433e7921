"""Scheduler package - date propagation over work item hierarchies and follows relations.

Main entry points:
- EditSession: apply one edit to a work plan and propagate it
- SetScheduleService: reschedule everything depending on already-edited items
- ScheduleDependencyGraph: discover and order the dependent items
- Days: calendar-aware duration calculator

Configuration:
- SchedulingConfig: working calendars and propagation defaults
"""

from .calendar import ALL_DAYS, WEEKDAYS, Days, NonWorkingPeriod, WorkingCalendar
from .config import SchedulingConfig
from .core import ChangeKind, ScheduleDependency, ServiceResult
from .dependency import PlanIndex, ScheduleDependencyGraph
from .edit import UNSET, EditSession, Unset
from .protocols import DependencyProvider, DurationCalculator
from .service import SetScheduleService

__all__ = [
    # Core types
    "ChangeKind",
    "ScheduleDependency",
    "ServiceResult",
    # Calendars
    "ALL_DAYS",
    "WEEKDAYS",
    "Days",
    "NonWorkingPeriod",
    "WorkingCalendar",
    # Configuration
    "SchedulingConfig",
    # Dependency graph
    "PlanIndex",
    "ScheduleDependencyGraph",
    # Protocols
    "DependencyProvider",
    "DurationCalculator",
    # Services
    "SetScheduleService",
    "EditSession",
    "UNSET",
    "Unset",
]
