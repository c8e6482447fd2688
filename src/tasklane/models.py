"""Data models for tasklane."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any


class TaskType(str, Enum):
    """Kinds of schedulable work."""

    TASK = "task"
    MILESTONE = "milestone"
    DELIVERABLE = "deliverable"


class TaskStatus(str, Enum):
    """Task lifecycle states."""

    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    ON_HOLD = "on-hold"
    # Extended variants, accepted but not specially handled
    IMPACTED = "impacted"
    CONTINGENCY = "contingency"


# Statuses a CSV import may produce; extended variants are left to the editing UI
IMPORTABLE_STATUSES = (
    TaskStatus.NOT_STARTED,
    TaskStatus.IN_PROGRESS,
    TaskStatus.COMPLETED,
    TaskStatus.ON_HOLD,
)


class TaskPriority(str, Enum):
    """Task priority, most urgent first."""

    BLOCKER = "Blocker"
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class FieldType(str, Enum):
    """Value types a custom field can carry."""

    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    SELECT = "select"
    BOOLEAN = "boolean"


CUSTOM_FIELD_PREFIX = "custom_"


def _default_dict() -> dict[str, Any]:
    return {}


@dataclass(frozen=True)
class Task:
    """A schedulable unit of work.

    Tasks are never mutated by tasklane; every derived view is recomputed
    from the list it is given.
    """

    id: str
    name: str
    start_date: date
    end_date: date
    task_type: TaskType = TaskType.TASK
    status: TaskStatus = TaskStatus.NOT_STARTED
    priority: TaskPriority = TaskPriority.MEDIUM
    progress: int = 0
    dependencies: tuple[str, ...] = ()
    assignee: str | None = None
    developer: str | None = None
    description: str | None = None
    work_item_link: str | None = None
    custom_fields: dict[str, Any] = field(default_factory=_default_dict, hash=False)

    @property
    def is_milestone(self) -> bool:
        return self.task_type is TaskType.MILESTONE

    @property
    def duration_days(self) -> int:
        """Inclusive calendar-day duration, never less than one day."""
        return max(1, (self.end_date - self.start_date).days + 1)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain mapping with ISO dates, suitable for YAML output."""
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.task_type.value,
            "status": self.status.value,
            "priority": self.priority.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "progress": self.progress,
            "dependencies": list(self.dependencies),
        }
        for key in ("assignee", "developer", "description", "work_item_link"):
            value = getattr(self, key)
            if value:
                result[key] = value
        if self.custom_fields:
            result["custom_fields"] = dict(self.custom_fields)
        return result


@dataclass(frozen=True)
class CustomField:
    """A project-defined, typed extension attribute."""

    id: str
    name: str
    field_type: FieldType = FieldType.TEXT
    required: bool = False
    options: tuple[str, ...] = ()
    default_value: Any = None

    @property
    def app_field(self) -> str:
        """Key under which this field appears in a field mapping."""
        return f"{CUSTOM_FIELD_PREFIX}{self.id}"


@dataclass(frozen=True)
class AppField:
    """An application field a CSV column can be mapped onto."""

    value: str
    label: str
    required: bool = False


@dataclass(frozen=True)
class FieldMapping:
    """Pairing of a CSV column with an application field.

    An empty csv_column means the field is unmapped.
    """

    csv_column: str
    app_field: str

    @property
    def is_mapped(self) -> bool:
        return bool(self.csv_column.strip())
