"""Pydantic schemas for task file validation."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from .models import TaskPriority, TaskStatus, TaskType


class TaskSchema(BaseModel):
    """Schema for one task entry in a YAML task file."""

    id: str
    name: str = Field(min_length=1)
    type: TaskType = TaskType.TASK
    status: TaskStatus = TaskStatus.NOT_STARTED
    priority: TaskPriority = TaskPriority.MEDIUM
    start_date: date
    end_date: date
    progress: int = Field(default=0, ge=0, le=100)
    dependencies: list[str] = Field(default_factory=list)
    assignee: str | None = None
    developer: str | None = None
    description: str | None = None
    work_item_link: str | None = None
    custom_fields: dict[str, Any] = Field(default_factory=dict)

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        """Allow numeric ids in YAML."""
        if isinstance(v, int):
            return str(v)
        return v

    @field_validator("dependencies", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[str]:
        """Accept a single id or a comma separated string as well as a list."""
        if v is None:
            return []
        if isinstance(v, list):
            return [str(item) for item in v]  # type: ignore[misc]
        return [part.strip() for part in str(v).split(",") if part.strip()]


class TaskFileSchema(BaseModel):
    """Schema for a complete task file."""

    tasks: list[TaskSchema] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_unique_ids(self) -> TaskFileSchema:
        seen: set[str] = set()
        for task in self.tasks:
            if task.id in seen:
                raise ValueError(f"Duplicate task id: {task.id}")
            seen.add(task.id)
        return self
