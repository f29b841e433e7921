"""Project configuration file (reschedule_config.yaml)."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ValidationError
from .scheduler import SchedulingConfig

CONFIG_FILENAME = "reschedule_config.yaml"


class ProjectConfig(BaseModel):
    """Top-level configuration."""

    scheduling: SchedulingConfig = Field(default_factory=SchedulingConfig)


def load_config(config_path: Path | str) -> ProjectConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to reschedule_config.yaml

    Returns:
        The validated configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValidationError: If config is empty or invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open(encoding="utf-8") as f:
        data: Any = yaml.safe_load(f)

    if not data:
        raise ValidationError(f"Empty configuration file: {config_path}")
    if not isinstance(data, dict):
        raise ValidationError(f"Configuration must be a mapping: {config_path}")

    try:
        return ProjectConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid configuration in {config_path}: {e}") from e


def discover_config(plan_path: Path | str, config_path: Path | None = None) -> ProjectConfig:
    """Find and load the configuration for a work plan.

    Search order:
    1. Explicit config_path argument
    2. Work plan directory / reschedule_config.yaml
    3. Current directory / reschedule_config.yaml

    Falls back to defaults when none exists.
    """
    if config_path is not None:
        return load_config(config_path)

    for candidate in (Path(plan_path).parent / CONFIG_FILENAME, Path(CONFIG_FILENAME)):
        if candidate.exists():
            return load_config(candidate)

    return ProjectConfig()
