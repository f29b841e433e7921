"""YAML parser for work plans."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ParseError, ValidationError
from .models import FollowsRelation, WorkItem, WorkPlan, WorkPlanMetadata
from .schemas import WorkPlanSchema


class WorkPlanParser:
    """Parser for work plan YAML files.

    This parser only turns YAML into model objects. Reference and cycle checks
    and duration computation happen in reschedule.loader.
    """

    def parse_file(self, file_path: Path | str) -> WorkPlan:
        """Parse a YAML file into a WorkPlan."""
        path = Path(file_path)
        if not path.exists():
            raise ParseError(f"File not found: {file_path}")

        try:
            with path.open(encoding="utf-8") as f:
                data: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ParseError(f"Failed to parse YAML: {e}") from e

        if not isinstance(data, dict):
            raise ParseError("YAML must contain a dictionary at the root level")

        return self.parse_data(data)  # type: ignore[arg-type]

    def parse_data(self, data: dict[str, Any]) -> WorkPlan:
        """Convert already-loaded YAML data into a WorkPlan."""
        try:
            schema = WorkPlanSchema(**data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid YAML structure: {e}") from e

        metadata = WorkPlanMetadata(
            version=schema.metadata.version,
            project=schema.metadata.project,
            last_updated=schema.metadata.last_updated,
        )

        items: list[WorkItem] = []
        relations: list[FollowsRelation] = []

        for item_id, item_data in schema.items.items():
            items.append(
                WorkItem(
                    id=item_id,
                    name=item_data.name or item_id,
                    start_date=item_data.start_date,
                    due_date=item_data.due_date,
                    parent_id=item_data.parent,
                    manually_scheduled=item_data.manually_scheduled,
                    calendar=item_data.calendar,
                    meta=item_data.meta.copy(),
                )
            )
            relations.extend(FollowsRelation.parse(item_id, entry) for entry in item_data.follows)

        return WorkPlan(metadata=metadata, items=items, relations=relations)
