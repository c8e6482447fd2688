"""YAML reading and writing for task files."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ParseError, ValidationError
from .models import Task
from .schemas import TaskFileSchema, TaskSchema


def task_from_schema(schema: TaskSchema) -> Task:
    """Convert a validated schema entry to the domain model."""
    return Task(
        id=schema.id,
        name=schema.name,
        start_date=schema.start_date,
        end_date=schema.end_date,
        task_type=schema.type,
        status=schema.status,
        priority=schema.priority,
        progress=schema.progress,
        dependencies=tuple(schema.dependencies),
        assignee=schema.assignee,
        developer=schema.developer,
        description=schema.description,
        work_item_link=schema.work_item_link,
        custom_fields=dict(schema.custom_fields),
    )


class TaskFileParser:
    """Parser for YAML task files."""

    def parse_file(self, file_path: Path | str) -> list[Task]:
        """Parse a YAML file into a list of tasks."""
        path = Path(file_path)
        if not path.exists():
            raise ParseError(f"File not found: {file_path}")

        try:
            with path.open(encoding="utf-8") as f:
                data: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ParseError(f"Failed to parse YAML: {e}") from e

        return self.parse_data(data)

    def parse_data(self, data: Any) -> list[Task]:
        """Validate already-loaded YAML data and build tasks."""
        if data is None:
            return []
        if not isinstance(data, dict):
            raise ParseError("YAML must contain a dictionary at the root level")

        try:
            schema = TaskFileSchema.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid task file: {e}") from e

        return [task_from_schema(entry) for entry in schema.tasks]


def load_tasks(path: Path | str) -> list[Task]:
    """Load tasks from a YAML task file."""
    return TaskFileParser().parse_file(path)


def dump_tasks(tasks: Sequence[Task]) -> str:
    """Serialize tasks to YAML in the task file format."""
    data = {"tasks": [task.to_dict() for task in tasks]}
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
