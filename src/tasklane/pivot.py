"""Pivot tables over task lists."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from .fields import FIELD_LABELS, TaskField, field_value
from .models import Task


class PivotValue(str, Enum):
    """Aggregate shown in each pivot cell."""

    COUNT = "count"
    AVG_PROGRESS = "avg_progress"


def _default_task_list() -> list[Task]:
    return []


@dataclass
class PivotCell:
    """Tasks sharing one (row, column) key pair."""

    tasks: list[Task] = field(default_factory=_default_task_list)

    @property
    def count(self) -> int:
        return len(self.tasks)

    @property
    def avg_progress(self) -> float:
        if not self.tasks:
            return 0.0
        return sum(task.progress for task in self.tasks) / len(self.tasks)


@dataclass
class PivotTable:
    """Cross-tabulation of tasks by two fields."""

    row_field: TaskField
    column_field: TaskField
    value: PivotValue
    row_keys: list[str]
    column_keys: list[str]
    cells: dict[tuple[str, str], PivotCell]

    def cell_tasks(self, row_key: str, column_key: str) -> list[Task]:
        cell = self.cells.get((row_key, column_key))
        return list(cell.tasks) if cell else []

    def value_at(self, row_key: str, column_key: str) -> int:
        """Displayed cell value: count, or rounded average progress."""
        cell = self.cells.get((row_key, column_key))
        if cell is None:
            return 0
        if self.value is PivotValue.AVG_PROGRESS:
            return round(cell.avg_progress)
        return cell.count

    def row_total(self, row_key: str) -> int:
        return sum(self.value_at(row_key, col) for col in self.column_keys)

    def column_total(self, column_key: str) -> int:
        return sum(self.value_at(row, column_key) for row in self.row_keys)

    def grand_total(self) -> int:
        return sum(self.row_total(row) for row in self.row_keys)

    def to_rows(self) -> list[list[str | int]]:
        """Header row, one row per row key, and a totals row."""
        header: list[str | int] = [
            f"{FIELD_LABELS[self.row_field]} / {FIELD_LABELS[self.column_field]}",
            *self.column_keys,
            "Total",
        ]
        rows: list[list[str | int]] = [header]
        for row_key in self.row_keys:
            values: list[str | int] = [self.value_at(row_key, col) for col in self.column_keys]
            rows.append([row_key, *values, self.row_total(row_key)])
        totals: list[str | int] = [self.column_total(col) for col in self.column_keys]
        rows.append(["Total", *totals, self.grand_total()])
        return rows


def build_pivot(
    tasks: Sequence[Task],
    row_field: TaskField = TaskField.STATUS,
    column_field: TaskField = TaskField.PRIORITY,
    value: PivotValue = PivotValue.COUNT,
) -> PivotTable:
    """Group tasks by two fields; row and column keys are sorted."""
    cells: dict[tuple[str, str], PivotCell] = {}
    for task in tasks:
        key = (field_value(task, row_field), field_value(task, column_field))
        cells.setdefault(key, PivotCell()).tasks.append(task)

    return PivotTable(
        row_field=row_field,
        column_field=column_field,
        value=value,
        row_keys=sorted({row for row, _ in cells}),
        column_keys=sorted({col for _, col in cells}),
        cells=cells,
    )
