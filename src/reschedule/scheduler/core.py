"""Core types shared by the scheduling components."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reschedule.models import WorkItem


class ChangeKind(str, Enum):
    """Which attribute of the edited item(s) changed."""

    PARENT = "parent"
    START_DATE = "start_date"
    DUE_DATE = "due_date"

    @classmethod
    def coerce(cls, kinds: Iterable[ChangeKind | str]) -> set[ChangeKind]:
        """Convert names (``parent_id`` is an alias of ``parent``) into ChangeKinds."""
        result: set[ChangeKind] = set()
        for kind in kinds:
            if kind == "parent_id":
                result.add(cls.PARENT)
            else:
                result.add(cls(kind))
        return result


DEFAULT_CHANGED_KINDS = frozenset({ChangeKind.START_DATE, ChangeKind.DUE_DATE})
PROPAGATING_KINDS = frozenset({ChangeKind.PARENT, ChangeKind.START_DATE, ChangeKind.DUE_DATE})


def _default_items() -> list[WorkItem]:
    return []


@dataclass
class ScheduleDependency:
    """What the scheduler needs to know about one item it reschedules.

    start_date/due_date are the envelope of the item's descendants and only
    meaningful when has_descendants is True.
    """

    has_descendants: bool
    start_date: date | None = None
    due_date: date | None = None
    soonest_start_date: date | None = None  # Floor imposed by (inherited) predecessors
    # Predecessors that moved in this edit session, most binding first
    moving_predecessors: list[WorkItem] = field(default_factory=_default_items)


def _default_results() -> list[ServiceResult]:
    return []


@dataclass
class ServiceResult:
    """Outcome of a service call plus the outcomes of its side effects."""

    result: WorkItem | None
    success: bool = True
    dependent_results: list[ServiceResult] = field(default_factory=_default_results)

    @classmethod
    def succeeded(cls, result: WorkItem | None) -> ServiceResult:
        return cls(result=result, success=True)

    def add_dependent(self, dependent: ServiceResult) -> None:
        """Attach the result of a side effect."""
        self.dependent_results.append(dependent)

    @property
    def all_results(self) -> list[WorkItem]:
        """The primary item followed by every dependent item."""
        items = [self.result] if self.result is not None else []
        items.extend(dep.result for dep in self.dependent_results if dep.result is not None)
        return items

    @property
    def altered_ids(self) -> list[str]:
        """IDs of the items altered as side effects, in the order they were altered."""
        return [dep.result.id for dep in self.dependent_results if dep.result is not None]
