"""Data models for reschedule."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any

from .exceptions import MissingReferenceError, ValidationError

# Lag unit conversion
DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class DateSnapshot:
    """The dates an item had before the current edit session began."""

    start_date: date | None = None
    due_date: date | None = None


@dataclass(frozen=True)
class FollowsRelation:
    """Precedence edge: the successor follows (starts after) the predecessor.

    The lag is the number of days that must pass after the predecessor ends
    before the successor may start.
    """

    predecessor_id: str
    successor_id: str
    lag_days: int = 0

    @classmethod
    def parse(cls, successor_id: str, follows_str: str) -> FollowsRelation:
        """Parse a ``follows`` entry of the item ``successor_id``.

        Supported formats:
        - "item_id" - no lag
        - "item_id + 2d" - 2 days lag
        - "item_id + 1w" - 1 week (7 days) lag
        """
        follows_str = follows_str.strip()

        match = re.match(r"^(.+?)\s*\+\s*(\d+)([dw])$", follows_str)
        if match:
            predecessor_id, value, unit = match.groups()
            lag_days = int(value) * (DAYS_PER_WEEK if unit == "w" else 1)
            return cls(predecessor_id.strip(), successor_id, lag_days)

        return cls(follows_str, successor_id)

    def successor_soonest_start(self, predecessor: WorkItem) -> date | None:
        """Earliest start this relation allows the successor, if the predecessor is dated."""
        anchor = predecessor.due_date or predecessor.start_date
        if anchor is None:
            return None
        return anchor + timedelta(days=1 + self.lag_days)

    def __str__(self) -> str:
        """Return the ``follows`` entry as written in YAML."""
        if self.lag_days == 0:
            return self.predecessor_id
        if self.lag_days % DAYS_PER_WEEK == 0:
            return f"{self.predecessor_id} + {self.lag_days // DAYS_PER_WEEK}w"
        return f"{self.predecessor_id} + {self.lag_days}d"


def _default_dict() -> dict[str, Any]:
    return {}


@dataclass
class WorkItem:
    """A schedulable unit of work."""

    id: str
    name: str = ""
    start_date: date | None = None
    due_date: date | None = None
    duration: int | None = None  # Working days between start and due, inclusive
    parent_id: str | None = None
    manually_scheduled: bool = False
    calendar: str | None = None  # None uses the configured default calendar
    meta: dict[str, Any] = field(default_factory=_default_dict)

    @property
    def schedule_state(self) -> tuple[date | None, date | None, int | None]:
        """The fields the scheduler may alter, for change detection."""
        return (self.start_date, self.due_date, self.duration)

    def snapshot(self) -> DateSnapshot:
        """Capture the current dates."""
        return DateSnapshot(self.start_date, self.due_date)


@dataclass
class WorkPlanMetadata:
    """Metadata for the work plan."""

    version: str = "1.0"
    project: str | None = None
    last_updated: str | None = None


def _default_relations() -> list[FollowsRelation]:
    return []


@dataclass
class WorkPlan:
    """All work items of a project and the follows relations between them."""

    metadata: WorkPlanMetadata
    items: list[WorkItem]
    relations: list[FollowsRelation] = field(default_factory=_default_relations)

    def get_all_ids(self) -> set[str]:
        """Get all item IDs in the plan."""
        return {item.id for item in self.items}

    def get_item(self, item_id: str) -> WorkItem | None:
        """Get an item by its ID."""
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def require_item(self, item_id: str) -> WorkItem:
        """Get an item by its ID, raising if it does not exist."""
        item = self.get_item(item_id)
        if item is None:
            raise MissingReferenceError(f"Unknown work item: {item_id}")
        return item

    def children_of(self, item_id: str) -> list[WorkItem]:
        """Get the direct children of an item, in plan order."""
        return [item for item in self.items if item.parent_id == item_id]

    def relations_to(self, successor_id: str) -> list[FollowsRelation]:
        """Get the follows relations in which the item is the successor."""
        return [rel for rel in self.relations if rel.successor_id == successor_id]

    def relations_from(self, predecessor_id: str) -> list[FollowsRelation]:
        """Get the follows relations in which the item is the predecessor."""
        return [rel for rel in self.relations if rel.predecessor_id == predecessor_id]

    def ancestor_ids(self, item_id: str) -> list[str]:
        """Get the parent chain of an item, nearest first."""
        ancestors: list[str] = []
        current = self.require_item(item_id).parent_id
        while current is not None:
            if current == item_id or current in ancestors:
                raise ValidationError(f"Item {item_id} is its own ancestor")
            ancestors.append(current)
            current = self.require_item(current).parent_id
        return ancestors

    def set_parent(self, item_id: str, parent_id: str | None) -> str | None:
        """Re-parent an item and return its former parent ID."""
        item = self.require_item(item_id)
        if parent_id is not None:
            self.require_item(parent_id)
            if parent_id == item_id or item_id in self.ancestor_ids(parent_id):
                raise ValidationError(
                    f"Cannot make {parent_id} the parent of {item_id}: "
                    "it would become its own ancestor"
                )
        former = item.parent_id
        item.parent_id = parent_id
        return former

    def snapshot(self) -> dict[str, DateSnapshot]:
        """Capture the dates of every item, keyed by item ID."""
        return {item.id: item.snapshot() for item in self.items}
