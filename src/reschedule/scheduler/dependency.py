"""Dependency discovery and ordering for rescheduling.

Items are held in an indexed table and both edge kinds (hierarchy and
follows) are adjacency lists of indices, so traversal never chases object
references.
"""

from __future__ import annotations

import heapq
from collections.abc import Iterator
from datetime import date
from typing import TYPE_CHECKING

from reschedule.exceptions import CircularDependencyError, MissingReferenceError
from reschedule.logger import get_logger

from .core import ScheduleDependency

logger = get_logger()

if TYPE_CHECKING:
    from reschedule.models import DateSnapshot, FollowsRelation, WorkItem, WorkPlan


class PlanIndex:
    """Index-based view of a work plan's hierarchy and follows edges."""

    def __init__(self, plan: WorkPlan):
        """Build the adjacency lists.

        Raises:
            MissingReferenceError: If a parent or relation names an unknown item
        """
        self.items: list[WorkItem] = list(plan.items)
        self.position: dict[str, int] = {item.id: i for i, item in enumerate(self.items)}

        count = len(self.items)
        self.parent: list[int | None] = [None] * count
        self.children: list[list[int]] = [[] for _ in range(count)]
        self.predecessors: list[list[tuple[int, FollowsRelation]]] = [[] for _ in range(count)]
        self.successors: list[list[int]] = [[] for _ in range(count)]

        for i, item in enumerate(self.items):
            if item.parent_id is not None:
                parent = self.index_of(item.parent_id)
                self.parent[i] = parent
                self.children[parent].append(i)

        for relation in plan.relations:
            pred = self.index_of(relation.predecessor_id)
            succ = self.index_of(relation.successor_id)
            self.predecessors[succ].append((pred, relation))
            self.successors[pred].append(succ)

    def index_of(self, item_id: str) -> int:
        """Get the table index of an item."""
        try:
            return self.position[item_id]
        except KeyError:
            raise MissingReferenceError(f"Unknown work item: {item_id}") from None

    def ancestors(self, i: int) -> list[int]:
        """Parent chain of an item, nearest first."""
        result: list[int] = []
        current = self.parent[i]
        while current is not None:
            if current == i or current in result:
                raise CircularDependencyError(f"Item {self.items[i].id} is its own ancestor")
            result.append(current)
            current = self.parent[current]
        return result

    def descendants(self, i: int) -> list[int]:
        """All items below an item in the hierarchy."""
        result: list[int] = []
        to_process = list(self.children[i])
        while to_process:
            current = to_process.pop()
            if current == i or current in result:
                raise CircularDependencyError(f"Item {self.items[i].id} is its own descendant")
            result.append(current)
            to_process.extend(self.children[current])
        return result

    def scheduling_relations(self, i: int) -> list[tuple[int, FollowsRelation]]:
        """Follows relations constraining an item: its own and its ancestors'."""
        relations = list(self.predecessors[i])
        for ancestor in self.ancestors(i):
            relations.extend(self.predecessors[ancestor])
        return relations

    def soonest_start_at(self, i: int) -> date | None:
        """Latest floor among the item's own and inherited follows relations."""
        floors = [
            floor
            for pred, relation in self.scheduling_relations(i)
            if (floor := relation.successor_soonest_start(self.items[pred])) is not None
        ]
        return max(floors) if floors else None

    def soonest_start(self, item_id: str) -> date | None:
        """Earliest permissible start of the item with the given ID."""
        return self.soonest_start_at(self.index_of(item_id))


class ScheduleDependencyGraph:
    """Finds every item depending on the edited ones and yields them in schedule order.

    An item depends on an edited item when it follows it (directly, or because an
    ancestor follows it) or when it is one of its ancestors. Manually scheduled
    items are neither yielded nor traversed; the edited items themselves are
    traversed but not yielded.
    """

    def __init__(
        self,
        index: PlanIndex,
        work_items: list[WorkItem],
        snapshot: dict[str, DateSnapshot] | None = None,
    ):
        """Initialize the graph.

        Args:
            index: Index of the plan the items belong to
            work_items: The edited items
            snapshot: Dates of every item before the edit session, for move detection
        """
        self.index = index
        self.seeds = {index.index_of(item.id) for item in work_items}
        self.snapshot = snapshot or {}

    def soonest_start(self, item_id: str) -> date | None:
        """Earliest permissible start of an item."""
        return self.index.soonest_start(item_id)

    def in_schedule_order(self) -> Iterator[tuple[WorkItem, ScheduleDependency]]:
        """Yield dependent items, each after its predecessors and descendants.

        Dependency facts are computed when an item is yielded so they reflect
        dates already changed for earlier items.
        """
        for i in self.schedule_order():
            yield self.index.items[i], self.dependency_for(i)

    def dependent_indices(self) -> set[int]:
        """Transitive closure of items affected by the edited items."""
        found: set[int] = set()
        to_process = list(self.seeds)

        while to_process:
            current = to_process.pop()
            for affected in self._directly_affected(current):
                if affected in self.seeds or affected in found:
                    continue
                if self.index.items[affected].manually_scheduled:
                    continue
                found.add(affected)
                to_process.append(affected)

        return found

    def _directly_affected(self, i: int) -> list[int]:
        affected: list[int] = []
        parent = self.index.parent[i]
        if parent is not None:
            affected.append(parent)
        for successor in self.index.successors[i]:
            affected.append(successor)
            affected.extend(self.index.descendants(successor))
        return affected

    def schedule_order(self) -> list[int]:
        """Topological order of the dependent items, ties broken by plan order.

        Raises:
            CircularDependencyError: If the dependent items cannot be ordered
        """
        dependents = self.dependent_indices()

        # required_before[i]: dependents that must be scheduled before i
        required_before: dict[int, set[int]] = {}
        for i in dependents:
            before = {pred for pred, _ in self.index.scheduling_relations(i) if pred in dependents}
            before.update(d for d in self.index.descendants(i) if d in dependents)
            before.discard(i)
            required_before[i] = before

        unblocks: dict[int, list[int]] = {i: [] for i in dependents}
        for i, before in required_before.items():
            for blocker in before:
                unblocks[blocker].append(i)

        pending = {i: len(before) for i, before in required_before.items()}
        ready = [i for i, count in pending.items() if count == 0]
        heapq.heapify(ready)
        order: list[int] = []

        while ready:
            current = heapq.heappop(ready)
            order.append(current)
            for dependent in unblocks[current]:
                pending[dependent] -= 1
                if pending[dependent] == 0:
                    heapq.heappush(ready, dependent)

        if len(order) != len(dependents):
            stuck = sorted(self.index.items[i].id for i in dependents if pending[i] > 0)
            raise CircularDependencyError(
                f"Circular dependency detected among: {', '.join(stuck)}"
            )

        logger.debug(
            f"Schedule order: {', '.join(self.index.items[i].id for i in order) or '(none)'}"
        )
        return order

    def has_moved(self, item: WorkItem) -> bool:
        """Check whether an item's dates differ from its pre-edit snapshot."""
        before = self.snapshot.get(item.id)
        if before is None:
            return False
        return (before.start_date, before.due_date) != (item.start_date, item.due_date)

    def dependency_for(self, i: int) -> ScheduleDependency:
        """Compute the scheduling facts of one item from the current dates."""
        items = self.index.items
        has_descendants = bool(self.index.children[i])

        start_date: date | None = None
        due_date: date | None = None
        if has_descendants:
            dates = [
                d
                for desc in self.index.descendants(i)
                for d in (items[desc].start_date, items[desc].due_date)
                if d is not None
            ]
            if dates:
                start_date = min(dates)
                due_date = max(dates)

        floors: list[date] = []
        moving: dict[int, date | None] = {}
        for pred, relation in self.index.scheduling_relations(i):
            floor = relation.successor_soonest_start(items[pred])
            if floor is not None:
                floors.append(floor)
            if self.has_moved(items[pred]):
                known = moving.get(pred)
                if pred not in moving or (floor is not None and (known is None or floor > known)):
                    moving[pred] = floor

        # Most binding first: latest floor, undated predecessors last, then plan order
        ranked = sorted(moving.items(), key=_binding_rank)

        dependency = ScheduleDependency(
            has_descendants=has_descendants,
            start_date=start_date,
            due_date=due_date,
            soonest_start_date=max(floors) if floors else None,
            moving_predecessors=[items[pred] for pred, _ in ranked],
        )
        logger.debug(
            f"  {items[i].id}: descendants={has_descendants} "
            f"envelope={start_date}..{due_date} floor={dependency.soonest_start_date} "
            f"moving={[p.id for p in dependency.moving_predecessors]}"
        )
        return dependency


def _binding_rank(entry: tuple[int, date | None]) -> tuple[bool, int, int]:
    pred, floor = entry
    return (floor is None, -floor.toordinal() if floor else 0, pred)
