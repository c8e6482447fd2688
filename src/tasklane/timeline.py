"""Timeline layout: place tasks on a shared, week-aligned day axis."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any

from .config import TimelineConfig
from .logger import debug_enabled, get_logger
from .models import Task


def _default_day_list() -> list[date]:
    return []


def _default_row_list() -> list[TimelineRow]:
    return []


@dataclass(frozen=True)
class TimelineRow:
    """Horizontal geometry for one task, as percentages of the axis width."""

    task: Task
    offset_pct: float
    width_pct: float
    duration_days: int  # Effective duration before clipping to the axis

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.task.id,
            "name": self.task.name,
            "offset_pct": round(self.offset_pct, 4),
            "width_pct": round(self.width_pct, 4),
            "duration_days": self.duration_days,
        }


@dataclass(frozen=True)
class TimelineLayout:
    """Shared date axis plus per-task rows, in input order."""

    axis_start: date
    axis_end: date
    days: list[date] = field(default_factory=_default_day_list)
    rows: list[TimelineRow] = field(default_factory=_default_row_list)

    @property
    def total_days(self) -> int:
        return len(self.days)

    def to_dict(self) -> dict[str, Any]:
        return {
            "axis_start": self.axis_start.isoformat(),
            "axis_end": self.axis_end.isoformat(),
            "total_days": self.total_days,
            "rows": [row.to_dict() for row in self.rows],
        }


def days_between(start: date, end: date) -> int:
    """Signed whole-day difference ``end - start``."""
    return (end - start).days


def week_start(day: date, week_starts_on: int = 6) -> date:
    """First day of the week containing ``day`` (weekday numbering: 0=Monday)."""
    return day - timedelta(days=(day.weekday() - week_starts_on) % 7)


def week_end(day: date, week_starts_on: int = 6) -> date:
    """Last day of the week containing ``day``."""
    return week_start(day, week_starts_on) + timedelta(days=6)


def layout_timeline(
    tasks: Sequence[Task],
    *,
    today: date | None = None,
    config: TimelineConfig | None = None,
) -> TimelineLayout:
    """Compute the axis and per-task offsets/widths for a Gantt view.

    The axis runs from the start of the week holding the earliest date to the
    end of the week holding the latest one, so every task date lies on it.
    Each task's width covers at least one day and is clipped to the axis.

    Args:
        tasks: Tasks to lay out; row order follows this order
        today: Start of the placeholder axis when there are no tasks
        config: Week start and empty-axis length

    Returns:
        TimelineLayout with one row per task
    """
    config = config or TimelineConfig()
    logger = get_logger()

    if not tasks:
        start = today or date.today()  # noqa: DTZ011
        return TimelineLayout(
            axis_start=start, axis_end=start + timedelta(days=config.empty_axis_days)
        )

    all_dates = [d for task in tasks for d in (task.start_date, task.end_date)]
    axis_start = week_start(min(all_dates), config.week_starts_on)
    axis_end = week_end(max(all_dates), config.week_starts_on)

    total_days = days_between(axis_start, axis_end) + 1
    days = [axis_start + timedelta(days=i) for i in range(total_days)]

    rows: list[TimelineRow] = []
    for task in tasks:
        raw_offset = max(0, days_between(axis_start, task.start_date))
        raw_duration = max(1, days_between(task.start_date, task.end_date) + 1)
        raw_width = min(raw_duration, total_days - raw_offset)
        rows.append(
            TimelineRow(
                task=task,
                offset_pct=raw_offset / total_days * 100,
                width_pct=raw_width / total_days * 100,
                duration_days=raw_duration,
            )
        )
        if debug_enabled():
            logger.debug(
                "Task %s: offset %d day(s), width %d day(s) of %d",
                task.id,
                raw_offset,
                raw_width,
                total_days,
            )

    logger.checks(
        "Timeline axis %s..%s (%d days, %d rows)", axis_start, axis_end, total_days, len(rows)
    )
    return TimelineLayout(axis_start=axis_start, axis_end=axis_end, days=days, rows=rows)
