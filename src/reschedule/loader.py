"""Work plan loading, validation and write-back."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from .config import ProjectConfig, discover_config
from .exceptions import CircularDependencyError, MissingReferenceError, ParseError
from .models import WorkPlan
from .parser import WorkPlanParser
from .scheduler import Days


def load_work_plan(
    path: Path | str,
    config_path: Path | None = None,
    *,
    config: ProjectConfig | None = None,
) -> WorkPlan:
    """Load, validate and prepare a work plan.

    This handles:
    1. YAML parsing
    2. Validation (references and cycles)
    3. Duration computation for every item with both dates

    Args:
        path: Path to the work plan YAML file
        config_path: Optional explicit path to config file
        config: Optional explicit config (overrides discovery)

    Returns:
        Fully processed WorkPlan
    """
    path = Path(path)

    if config is None:
        config = discover_config(path, config_path)

    plan = WorkPlanParser().parse_file(path)
    validate_work_plan(plan)
    compute_durations(plan, config.scheduling.create_days())

    return plan


def compute_durations(plan: WorkPlan, days: Days) -> None:
    """Derive every item's duration from its dates."""
    for item in plan.items:
        item.duration = days.duration(item, item.start_date, item.due_date)


def validate_work_plan(plan: WorkPlan) -> None:
    """Validate the work plan for reference integrity and cycles."""
    all_ids = plan.get_all_ids()

    for item in plan.items:
        if item.parent_id is not None and item.parent_id not in all_ids:
            raise MissingReferenceError(f"Item {item.id} has unknown parent: {item.parent_id}")

    for relation in plan.relations:
        if relation.predecessor_id not in all_ids:
            raise MissingReferenceError(
                f"Item {relation.successor_id} follows unknown item: {relation.predecessor_id}"
            )
        if relation.predecessor_id == relation.successor_id:
            raise CircularDependencyError(f"Item {relation.successor_id} follows itself")

    _check_hierarchy_cycles(plan)
    _check_follows_cycles(plan)


def _check_hierarchy_cycles(plan: WorkPlan) -> None:
    for item in plan.items:
        seen = [item.id]
        current = item.parent_id
        while current is not None:
            if current in seen:
                cycle = " -> ".join(seen[seen.index(current) :] + [current])
                raise CircularDependencyError(f"Circular parent chain detected: {cycle}")
            seen.append(current)
            current = plan.require_item(current).parent_id


def _check_follows_cycles(plan: WorkPlan) -> None:
    for item in plan.items:
        visited: set[str] = set()
        path: list[str] = []
        if _has_follows_cycle(plan, item.id, visited, path):
            cycle = " -> ".join(path[path.index(item.id) :] + [item.id])
            raise CircularDependencyError(f"Circular follows relation detected: {cycle}")


def _has_follows_cycle(plan: WorkPlan, item_id: str, visited: set[str], path: list[str]) -> bool:
    """Recursively walk predecessors looking for the start item."""
    if item_id in path:
        return True

    if item_id in visited:
        return False

    visited.add(item_id)
    path.append(item_id)

    for relation in plan.relations_to(item_id):
        if _has_follows_cycle(plan, relation.predecessor_id, visited, path):
            return True

    path.pop()
    return False


def write_work_plan(file_path: Path, plan: WorkPlan) -> int:
    """Write dates and parents back into the YAML file, preserving its formatting.

    Only ``start_date``, ``due_date`` and ``parent`` are touched; comments and
    key order survive.

    Returns:
        Number of items written
    """
    yaml_rt = YAML()
    yaml_rt.preserve_quotes = True  # type: ignore[assignment]

    with file_path.open(encoding="utf-8") as f:
        data: Any = yaml_rt.load(f)  # type: ignore[no-untyped-call]

    if not data or "items" not in data:
        raise ParseError(f"No 'items' section found in {file_path}")

    yaml_items = data["items"]
    written = 0
    for item in plan.items:
        if item.id not in yaml_items:
            continue
        entry = yaml_items[item.id]
        if entry is None:
            entry = CommentedMap()
            yaml_items[item.id] = entry
        _set_or_remove(entry, "start_date", item.start_date)
        _set_or_remove(entry, "due_date", item.due_date)
        _set_or_remove(entry, "parent", item.parent_id)
        written += 1

    with file_path.open("w", encoding="utf-8") as f:
        yaml_rt.dump(data, f)  # type: ignore[no-untyped-call]

    return written


def _set_or_remove(entry: Any, key: str, value: Any) -> None:
    if value is None:
        if key in entry:
            del entry[key]
    else:
        entry[key] = value
