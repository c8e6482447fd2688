"""CSV import: turn user-mapped CSV columns into validated tasks."""

from __future__ import annotations

import csv
import io
import re
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from .dates import format_date, parse_date
from .exceptions import CSVStructureError
from .logger import checks_enabled, get_logger
from .mapping import APP_FIELDS, field_label, validate_mappings
from .models import (
    IMPORTABLE_STATUSES,
    AppField,
    CustomField,
    FieldMapping,
    FieldType,
    Task,
    TaskPriority,
    TaskStatus,
    TaskType,
)

TEMPLATE_HEADERS = (
    "Task Name",
    "Type",
    "Status",
    "Start Date",
    "End Date",
    "Assignee",
    "Progress (%)",
    "Dependencies",
    "Description",
)

TEMPLATE_ROWS = (
    (
        "Setup Project Environment",
        "task",
        "not-started",
        "2024-01-15",
        "2024-01-17",
        "John Doe",
        "0",
        "",
        "Initialize development environment",
    ),
    (
        "Requirements Analysis",
        "milestone",
        "in-progress",
        "2024-01-18",
        "2024-01-25",
        "Jane Smith",
        "50",
        "",
        "Gather and analyze project requirements",
    ),
    (
        "Database Design",
        "deliverable",
        "not-started",
        "2024-01-26",
        "2024-02-02",
        "Mike Johnson",
        "0",
        "Requirements Analysis",
        "Design database schema",
    ),
)

_TEMPLATE_SAMPLES = {
    FieldType.TEXT: "Sample text",
    FieldType.NUMBER: "100",
    FieldType.DATE: "2024-01-15",
    FieldType.BOOLEAN: "true",
}

_DEPENDENCY_SPLIT_RE = re.compile(r"[,;]")
_WHITESPACE_RE = re.compile(r"\s+")
_LEADING_NUMBER_RE = re.compile(r"\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def _default_task_list() -> list[Task]:
    return []


def _default_skipped_list() -> list[SkippedRow]:
    return []


@dataclass(frozen=True)
class SkippedRow:
    """A data row that was dropped, with the reason."""

    line_number: int  # 1-based, header is line 1
    reason: str


@dataclass
class ImportResult:
    """Tasks produced by an import plus the rows that were dropped."""

    tasks: list[Task] = field(default_factory=_default_task_list)
    skipped: list[SkippedRow] = field(default_factory=_default_skipped_list)


def parse_csv_row(line: str) -> list[str]:
    """Split one CSV line, honouring double quotes and ``""`` escapes."""
    return next(csv.reader([line]), [])


def parse_csv_headers(csv_text: str) -> list[str]:
    """Return the header cells of the first line of ``csv_text``."""
    lines = csv_text.strip().splitlines()
    if not lines:
        return []
    return parse_csv_row(lines[0])


def _parse_task_type(value: str) -> TaskType:
    try:
        return TaskType(value.strip().lower())
    except ValueError:
        return TaskType.TASK


def _parse_status(value: str) -> TaskStatus:
    normalized = _WHITESPACE_RE.sub("-", value.strip().lower())
    for status in IMPORTABLE_STATUSES:
        if status.value == normalized:
            return status
    return TaskStatus.NOT_STARTED


def _parse_priority(value: str) -> TaskPriority:
    lowered = value.strip().lower()
    for priority in TaskPriority:
        if priority.value.lower() == lowered:
            return priority
    return TaskPriority.MEDIUM


def _parse_float(value: str) -> float | None:
    """Read the leading number of ``value``, ignoring any trailing text."""
    match = _LEADING_NUMBER_RE.match(value)
    if match is None:
        return None
    return float(match.group(0))


def _parse_progress(value: str) -> int:
    if not value:
        return 0
    number = _parse_float(value.replace("%", "").strip())
    if number is None:
        return 0
    return round(max(0.0, min(100.0, number)))


def _parse_dependencies(value: str) -> tuple[str, ...]:
    return tuple(token.strip() for token in _DEPENDENCY_SPLIT_RE.split(value) if token.strip())


def coerce_custom_value(
    value: str, field_type: FieldType, *, day_first_slashes: bool = False
) -> Any:
    """Convert raw CSV text to the Python value for a custom field type.

    Unparsable numbers and dates become None.
    """
    if field_type is FieldType.NUMBER:
        return _parse_float(value)
    if field_type is FieldType.BOOLEAN:
        return value.lower() in ("true", "1")
    if field_type is FieldType.DATE:
        parsed = parse_date(value, day_first_slashes=day_first_slashes)
        return format_date(parsed) if parsed is not None else None
    return value


def _build_row_accessor(row: list[str], column_of: dict[str, int]) -> Callable[[str], str]:
    def get_value(app_field: str) -> str:
        index = column_of.get(app_field)
        if index is None or index >= len(row):
            return ""
        return row[index].strip()

    return get_value


def import_csv(  # noqa: PLR0913 - import options are keyword-only
    csv_text: str,
    mappings: Sequence[FieldMapping],
    registry: Sequence[AppField] = APP_FIELDS,
    custom_fields: Sequence[CustomField] = (),
    *,
    day_first_slashes: bool = False,
    id_factory: Callable[[], str] | None = None,
) -> ImportResult:
    """Import tasks from CSV text using a confirmed field mapping.

    Args:
        csv_text: Raw CSV, header row first
        mappings: Column-to-field assignments (typically from auto_map + overrides)
        registry: Application fields; required entries must be mapped
        custom_fields: Custom field definitions to read and coerce
        day_first_slashes: Read slash dates as D/M/YYYY instead of M/D/YYYY
        id_factory: Produces ids for new tasks (defaults to random UUIDs)

    Returns:
        ImportResult with the accepted tasks and the skipped rows

    Raises:
        CSVStructureError: If the text has fewer than two lines, or a required
            field is not mapped. Nothing is imported in either case.
    """
    logger = get_logger()
    make_id = id_factory or (lambda: str(uuid.uuid4()))

    lines = csv_text.strip().splitlines()
    if len(lines) < 2:  # noqa: PLR2004
        raise CSVStructureError("CSV file must contain at least a header row and one data row")

    validation = validate_mappings(mappings, registry, custom_fields)
    if not validation.ok:
        labels = ", ".join(
            field_label(key, registry, custom_fields) for key in validation.missing_required
        )
        raise CSVStructureError(f"Please map the following required fields: {labels}")

    headers = [h.strip() for h in parse_csv_row(lines[0])]
    column_of: dict[str, int] = {}
    for mapping in mappings:
        if not mapping.is_mapped:
            continue
        column = mapping.csv_column.strip()
        if column in headers:
            column_of[mapping.app_field] = headers.index(column)
        else:
            logger.warning("Mapped column '%s' not found in CSV header", column)

    result = ImportResult()
    # Each physical line is one record, so a stray quote stays within its row
    for line_number, line in enumerate(lines[1:], start=2):
        row = parse_csv_row(line)
        if not any(cell.strip() for cell in row):
            continue

        get_value = _build_row_accessor(row, column_of)

        name = get_value("name")
        if not name:
            _skip(result, line_number, "missing task name")
            continue

        start_date = parse_date(get_value("start_date"), day_first_slashes=day_first_slashes)
        end_date = parse_date(get_value("end_date"), day_first_slashes=day_first_slashes)
        if start_date is None or end_date is None:
            _skip(result, line_number, "invalid date format")
            continue

        custom_values: dict[str, Any] = {}
        for custom_field in custom_fields:
            raw = get_value(custom_field.app_field)
            if raw:
                custom_values[custom_field.id] = coerce_custom_value(
                    raw, custom_field.field_type, day_first_slashes=day_first_slashes
                )

        task = Task(
            id=make_id(),
            name=name,
            start_date=start_date,
            end_date=end_date,
            task_type=_parse_task_type(get_value("task_type")),
            status=_parse_status(get_value("status")),
            priority=_parse_priority(get_value("priority")),
            progress=_parse_progress(get_value("progress")),
            dependencies=_parse_dependencies(get_value("dependencies")),
            assignee=get_value("assignee") or None,
            developer=get_value("developer") or None,
            description=get_value("description") or None,
            work_item_link=get_value("work_item_link") or None,
            custom_fields=custom_values,
        )
        if checks_enabled():
            logger.checks("Line %d: imported '%s' as %s", line_number, name, task.id)
        result.tasks.append(task)

    logger.changes(
        "%d tasks imported, %d rows skipped", len(result.tasks), len(result.skipped)
    )
    return result


def _skip(result: ImportResult, line_number: int, reason: str) -> None:
    get_logger().warning("Skipping row %d: %s", line_number, reason)
    result.skipped.append(SkippedRow(line_number=line_number, reason=reason))


def import_rows(
    csv_text: str,
    mappings: Sequence[FieldMapping],
    registry: Sequence[AppField] = APP_FIELDS,
    custom_fields: Sequence[CustomField] = (),
    *,
    day_first_slashes: bool = False,
) -> list[Task]:
    """Import tasks from CSV text, returning only the accepted tasks."""
    return import_csv(
        csv_text, mappings, registry, custom_fields, day_first_slashes=day_first_slashes
    ).tasks


def build_template(custom_fields: Sequence[CustomField] = ()) -> str:
    """Build the downloadable CSV template, one column per custom field appended."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow([*TEMPLATE_HEADERS, *(cf.name for cf in custom_fields)])
    samples = [
        (cf.options[0] if cf.options else "")
        if cf.field_type is FieldType.SELECT
        else _TEMPLATE_SAMPLES[cf.field_type]
        for cf in custom_fields
    ]
    for row in TEMPLATE_ROWS:
        writer.writerow([*row, *samples])

    return buffer.getvalue().rstrip("\n")
