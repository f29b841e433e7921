"""Pydantic schemas for work plan YAML data."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


class WorkItemSchema(BaseModel):
    """Schema for one work item in YAML."""

    name: str = ""
    start_date: date | None = None
    due_date: date | None = None
    parent: str | None = None
    follows: list[str] = Field(default_factory=list)
    manually_scheduled: bool = False
    calendar: str | None = None
    meta: dict[str, Any] = Field(default_factory=dict)

    @field_validator("follows", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str]:
        """Ensure value is a list."""
        if v is None:
            return []
        if isinstance(v, list):
            return [str(item) for item in v]  # type: ignore[misc]
        return [str(v)]

    @field_validator("parent", mode="before")
    @classmethod
    def coerce_parent_to_string(cls, v: Any) -> str | None:
        """Allow numeric IDs."""
        if v is None:
            return None
        return str(v)

    @model_validator(mode="after")
    def validate_date_order(self) -> WorkItemSchema:
        """Ensure the due date is not before the start date."""
        if self.start_date and self.due_date and self.due_date < self.start_date:
            raise ValueError(f"due_date {self.due_date} is before start_date {self.start_date}")
        return self


class MetadataSchema(BaseModel):
    """Schema for metadata YAML data."""

    version: str = "1.0"
    project: str | None = None
    last_updated: str | None = None

    @field_validator("version", mode="before")
    @classmethod
    def coerce_version_to_string(cls, v: Any) -> str:
        """Ensure version is a string."""
        return str(v)

    @field_validator("last_updated", mode="before")
    @classmethod
    def coerce_date_to_string(cls, v: Any) -> str | None:
        """Convert date objects to string."""
        if v is None:
            return None
        return str(v)


class WorkPlanSchema(BaseModel):
    """Schema for the entire work plan YAML data."""

    metadata: MetadataSchema = Field(default_factory=MetadataSchema)
    items: dict[str, WorkItemSchema] = Field(default_factory=dict)

    @field_validator("items", mode="before")
    @classmethod
    def coerce_item_keys(cls, v: Any) -> Any:
        """Allow numeric IDs and empty item bodies."""
        if isinstance(v, dict):
            items: dict[Any, Any] = v  # type: ignore[assignment]
            return {str(k): ({} if body is None else body) for k, body in items.items()}
        return v
