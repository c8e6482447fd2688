"""Project analytics and task filtering."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any

from .models import Task, TaskStatus, TaskType

UPCOMING_WINDOW_DAYS = 7


def _percent(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole else 0


def _default_task_list() -> list[Task]:
    return []


@dataclass
class AssigneeStats:
    """Per-assignee task counts."""

    total: int = 0
    completed: int = 0
    in_progress: int = 0

    @property
    def completion_rate(self) -> int:
        return _percent(self.completed, self.total)


def _default_team() -> dict[str, AssigneeStats]:
    return {}


@dataclass
class ProjectReport:
    """Snapshot of project health for a task list."""

    total_tasks: int = 0
    status_counts: dict[TaskStatus, int] = field(default_factory=dict)
    type_counts: dict[TaskType, int] = field(default_factory=dict)
    completed_milestones: int = 0
    completed_deliverables: int = 0
    overdue_tasks: list[Task] = field(default_factory=_default_task_list)
    upcoming_tasks: list[Task] = field(default_factory=_default_task_list)
    team_performance: dict[str, AssigneeStats] = field(default_factory=_default_team)

    @property
    def completed_tasks(self) -> int:
        return self.status_counts.get(TaskStatus.COMPLETED, 0)

    @property
    def milestones(self) -> int:
        return self.type_counts.get(TaskType.MILESTONE, 0)

    @property
    def deliverables(self) -> int:
        return self.type_counts.get(TaskType.DELIVERABLE, 0)

    @property
    def completion_rate(self) -> int:
        return _percent(self.completed_tasks, self.total_tasks)

    @property
    def milestone_completion_rate(self) -> int:
        return _percent(self.completed_milestones, self.milestones)

    @property
    def deliverable_completion_rate(self) -> int:
        return _percent(self.completed_deliverables, self.deliverables)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_tasks": self.total_tasks,
            "completion_rate": self.completion_rate,
            "status": {status.value: count for status, count in self.status_counts.items()},
            "types": {task_type.value: count for task_type, count in self.type_counts.items()},
            "milestones": {
                "total": self.milestones,
                "completed": self.completed_milestones,
                "completion_rate": self.milestone_completion_rate,
            },
            "deliverables": {
                "total": self.deliverables,
                "completed": self.completed_deliverables,
                "completion_rate": self.deliverable_completion_rate,
            },
            "overdue": [task.id for task in self.overdue_tasks],
            "upcoming": [task.id for task in self.upcoming_tasks],
            "team": {
                name: {
                    "total": stats.total,
                    "completed": stats.completed,
                    "in_progress": stats.in_progress,
                    "completion_rate": stats.completion_rate,
                }
                for name, stats in self.team_performance.items()
            },
        }


def build_report(tasks: Sequence[Task], *, today: date | None = None) -> ProjectReport:
    """Compute status/type distribution, deadlines and team performance.

    Overdue: not completed and ending before ``today``.
    Upcoming: not started and starting within the next seven days.
    """
    today = today or date.today()  # noqa: DTZ011
    horizon = today + timedelta(days=UPCOMING_WINDOW_DAYS)

    report = ProjectReport(
        total_tasks=len(tasks),
        status_counts={status: 0 for status in TaskStatus},
        type_counts={task_type: 0 for task_type in TaskType},
    )

    for task in tasks:
        report.status_counts[task.status] += 1
        report.type_counts[task.task_type] += 1
        completed = task.status is TaskStatus.COMPLETED

        if completed and task.task_type is TaskType.MILESTONE:
            report.completed_milestones += 1
        if completed and task.task_type is TaskType.DELIVERABLE:
            report.completed_deliverables += 1

        if not completed and task.end_date < today:
            report.overdue_tasks.append(task)
        if task.status is TaskStatus.NOT_STARTED and today < task.start_date <= horizon:
            report.upcoming_tasks.append(task)

        if task.assignee:
            stats = report.team_performance.setdefault(task.assignee, AssigneeStats())
            stats.total += 1
            if completed:
                stats.completed += 1
            elif task.status is TaskStatus.IN_PROGRESS:
                stats.in_progress += 1

    return report


@dataclass(frozen=True)
class TaskFilter:
    """Criteria for narrowing a task list; None means any value."""

    search: str | None = None
    status: TaskStatus | None = None
    task_type: TaskType | None = None
    assignee: str | None = None

    @property
    def is_active(self) -> bool:
        return any(
            value is not None and value != ""
            for value in (self.search, self.status, self.task_type, self.assignee)
        )

    def matches(self, task: Task) -> bool:
        if self.search:
            needle = self.search.lower()
            haystack = (task.name, task.description or "", task.assignee or "")
            if not any(needle in text.lower() for text in haystack):
                return False
        if self.status is not None and task.status is not self.status:
            return False
        if self.task_type is not None and task.task_type is not self.task_type:
            return False
        return not (self.assignee and task.assignee != self.assignee)


def filter_tasks(tasks: Sequence[Task], task_filter: TaskFilter) -> list[Task]:
    """Tasks matching every active criterion, in input order."""
    return [task for task in tasks if task_filter.matches(task)]


def unique_assignees(tasks: Sequence[Task]) -> list[str]:
    """Distinct non-empty assignees in first-seen order."""
    return list(dict.fromkeys(task.assignee for task in tasks if task.assignee))
