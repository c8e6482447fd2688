"""Typed accessors for the task fields that views can group and filter on."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any

from .models import CustomField, Task

EMPTY_VALUE = "N/A"


class TaskField(str, Enum):
    """Task attributes available for pivoting and filtering."""

    STATUS = "status"
    PRIORITY = "priority"
    TASK_TYPE = "task_type"
    ASSIGNEE = "assignee"
    DEVELOPER = "developer"


FIELD_LABELS: dict[TaskField, str] = {
    TaskField.STATUS: "Status",
    TaskField.PRIORITY: "Priority",
    TaskField.TASK_TYPE: "Task Type",
    TaskField.ASSIGNEE: "Assignee",
    TaskField.DEVELOPER: "Developer",
}

FIELD_GETTERS: dict[TaskField, Callable[[Task], str | None]] = {
    TaskField.STATUS: lambda task: task.status.value,
    TaskField.PRIORITY: lambda task: task.priority.value,
    TaskField.TASK_TYPE: lambda task: task.task_type.value,
    TaskField.ASSIGNEE: lambda task: task.assignee,
    TaskField.DEVELOPER: lambda task: task.developer,
}


def field_value(task: Task, task_field: TaskField) -> str:
    """Grouping key for ``task`` under ``task_field``; empty values become N/A."""
    return FIELD_GETTERS[task_field](task) or EMPTY_VALUE


def custom_field_value(task: Task, custom_field: CustomField) -> Any:
    """Value of a custom field on ``task``, or the field's default when unset."""
    return task.custom_fields.get(custom_field.id, custom_field.default_value)
