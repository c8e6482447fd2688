"""Configuration loading for tasklane.

A single YAML file (tasklane_config.yaml) holds timeline, network diagram and
import settings, plus the project's custom field definitions.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .models import CustomField, FieldType

DEFAULT_CONFIG_NAME = "tasklane_config.yaml"

SUNDAY = 6  # date.weekday() numbering


class TimelineConfig(BaseModel):
    """Configuration for the timeline layout."""

    week_starts_on: int = SUNDAY  # 0=Monday ... 6=Sunday
    empty_axis_days: int = 30  # Axis length when there are no tasks

    @field_validator("week_starts_on")
    @classmethod
    def check_weekday(cls, v: int) -> int:
        if not 0 <= v <= 6:  # noqa: PLR2004
            raise ValueError("week_starts_on must be between 0 (Monday) and 6 (Sunday)")
        return v


class NetworkConfig(BaseModel):
    """Configuration for network diagram node placement."""

    node_spacing: float = 250.0
    level_height: float = 150.0


class ImportConfig(BaseModel):
    """Configuration for CSV import."""

    day_first_slashes: bool = False  # Read 02/03/2024 as 2 March instead of 3 February


class CustomFieldConfig(BaseModel):
    """A custom field definition as written in the config file."""

    id: str
    name: str
    type: FieldType = FieldType.TEXT
    required: bool = False
    options: list[str] = Field(default_factory=list)
    default_value: Any = None

    def to_custom_field(self) -> CustomField:
        return CustomField(
            id=self.id,
            name=self.name,
            field_type=self.type,
            required=self.required,
            options=tuple(self.options),
            default_value=self.default_value,
        )


class TasklaneConfig(BaseModel):
    """Top-level configuration."""

    timeline: TimelineConfig = Field(default_factory=TimelineConfig)
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    import_: ImportConfig = Field(default_factory=ImportConfig, alias="import")
    custom_fields: list[CustomFieldConfig] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    def get_custom_fields(self) -> list[CustomField]:
        return [cf.to_custom_field() for cf in self.custom_fields]


def load_config(config_path: Path | str) -> TasklaneConfig:
    """Load configuration from a YAML file.

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the config is not a mapping or fails validation
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open(encoding="utf-8") as f:
        data: Any = yaml.safe_load(f)

    if data is None:
        return TasklaneConfig()
    if not isinstance(data, dict):
        raise ValueError("Config must contain a mapping at the root level")

    try:
        return TasklaneConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid config {config_path}: {e}") from e


class _Context:
    """Process-wide settings chosen on the command line."""

    def __init__(self) -> None:
        self.config_path: Path | None = None


_context = _Context()


def get_config_path() -> Path | None:
    """Get the config path selected with --config."""
    return _context.config_path


def set_config_path(path: Path | None) -> None:
    """Set the config path selected with --config."""
    _context.config_path = path


def discover_config(config_path: Path | None = None) -> TasklaneConfig:
    """Find and load configuration.

    Search order:
    1. Explicit config_path argument (must exist)
    2. Path set via the CLI --config option (must exist)
    3. Current directory / tasklane_config.yaml
    4. Built-in defaults
    """
    if config_path is not None:
        return load_config(config_path)

    ctx_config = get_config_path()
    if ctx_config is not None:
        return load_config(ctx_config)

    cwd_config = Path(DEFAULT_CONFIG_NAME)
    if cwd_config.exists():
        return load_config(cwd_config)

    return TasklaneConfig()
