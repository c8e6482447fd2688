"""Pytest configuration and fixtures for tasklane tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import date
from typing import Any

import pytest

from tasklane.logger import reset_logger
from tasklane.models import Task

TEMPLATE_CSV = (
    "Task Name,Type,Status,Start Date,End Date,Assignee,Progress (%),Dependencies,Description\n"
    '"Setup Project Environment",task,not-started,2024-01-15,2024-01-17,"John Doe",0,"",'
    '"Initialize development environment"\n'
    '"Requirements Analysis",milestone,in-progress,2024-01-18,2024-01-25,"Jane Smith",50,"",'
    '"Gather and analyze project requirements"\n'
    '"Database Design",deliverable,not-started,2024-01-26,2024-02-02,"Mike Johnson",0,'
    '"Requirements Analysis","Design database schema"\n'
)


@pytest.fixture(autouse=True)
def clean_logger() -> Iterator[None]:
    """Give every test a logger without handlers left over from CLI runs."""
    reset_logger()
    yield
    reset_logger()


@pytest.fixture
def make_task() -> Callable[..., Task]:
    """Factory for tasks with sensible defaults."""

    def _make(
        task_id: str,
        start: date = date(2024, 1, 15),
        end: date | None = None,
        *,
        dependencies: tuple[str, ...] | list[str] = (),
        **kwargs: Any,
    ) -> Task:
        return Task(
            id=task_id,
            name=kwargs.pop("name", f"Task {task_id}"),
            start_date=start,
            end_date=end or start,
            dependencies=tuple(dependencies),
            **kwargs,
        )

    return _make


@pytest.fixture
def template_csv() -> str:
    """The three-row import template."""
    return TEMPLATE_CSV
