"""Resolve application fields against CSV column headers."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from .exceptions import MappingError
from .models import AppField, CustomField, FieldMapping

APP_FIELDS: tuple[AppField, ...] = (
    AppField("name", "Task Name", required=True),
    AppField("task_type", "Type"),
    AppField("status", "Status"),
    AppField("start_date", "Start Date", required=True),
    AppField("end_date", "End Date", required=True),
    AppField("assignee", "Assignee"),
    AppField("progress", "Progress (%)"),
    AppField("dependencies", "Dependencies"),
    AppField("description", "Description"),
)

# Task fields the importer reads that auto_map does not offer; set them with
# an explicit override.
EXTRA_IMPORT_FIELDS: tuple[str, ...] = ("priority", "developer", "work_item_link")

# Lower-cased header synonyms per field, in priority order
MATCH_PATTERNS: dict[str, tuple[str, ...]] = {
    "name": ("task name", "name", "title"),
    "task_type": ("type", "task type"),
    "status": ("status", "task status"),
    "start_date": ("start date", "start", "start_date"),
    "end_date": ("end date", "end", "end_date", "due date"),
    "assignee": ("assignee", "assigned to", "owner"),
    "progress": ("progress", "progress (%)", "completion"),
    "dependencies": ("dependencies", "depends on"),
    "description": ("description", "notes", "details"),
}


def _default_str_list() -> list[str]:
    return []


@dataclass(frozen=True)
class MappingValidation:
    """Outcome of checking a mapping set for required-field coverage."""

    ok: bool
    missing_required: list[str] = field(default_factory=_default_str_list)


def find_best_match(
    headers: Sequence[str], patterns: Iterable[str], used: set[str] | None = None
) -> str | None:
    """Return the first header matching a pattern, comparing trimmed and lower-cased.

    Patterns are tried in order, so the pattern list defines priority.
    Headers in ``used`` are skipped.
    """
    lowered = [h.strip().lower() for h in headers]
    for pattern in patterns:
        for index, header in enumerate(lowered):
            if header == pattern and (used is None or headers[index] not in used):
                return headers[index]
    return None


def auto_map(
    headers: Sequence[str],
    registry: Sequence[AppField] = APP_FIELDS,
    custom_fields: Sequence[CustomField] = (),
) -> list[FieldMapping]:
    """Build a best-effort mapping of every field onto the CSV headers.

    Registry fields come first, in registry order, followed by one entry per
    custom field (matched on its lower-cased name). Unmatched fields get an
    empty column. A column is never assigned to two fields.
    """
    used: set[str] = set()
    mappings: list[FieldMapping] = []

    for app_field in registry:
        patterns = MATCH_PATTERNS.get(app_field.value, (app_field.value,))
        column = find_best_match(headers, patterns, used)
        if column is not None:
            used.add(column)
        mappings.append(FieldMapping(csv_column=column or "", app_field=app_field.value))

    for custom_field in custom_fields:
        column = find_best_match(headers, (custom_field.name.strip().lower(),), used)
        if column is not None:
            used.add(column)
        mappings.append(FieldMapping(csv_column=column or "", app_field=custom_field.app_field))

    return mappings


def used_columns(mappings: Iterable[FieldMapping]) -> set[str]:
    """Columns currently assigned to some field."""
    return {m.csv_column for m in mappings if m.is_mapped}


def available_columns(
    mappings: Sequence[FieldMapping], headers: Sequence[str], app_field: str
) -> list[str]:
    """Headers selectable for ``app_field``: unused, or already assigned to it."""
    used = used_columns(mappings)
    current = next((m.csv_column for m in mappings if m.app_field == app_field), "")
    return [h for h in headers if h not in used or h == current]


def update_mapping(
    mappings: Sequence[FieldMapping], app_field: str, csv_column: str
) -> list[FieldMapping]:
    """Return a new mapping list with ``app_field`` pointed at ``csv_column``.

    An empty column clears the mapping. Fields not yet present are appended.

    Raises:
        MappingError: If the column is already assigned to a different field
    """
    if csv_column:
        for mapping in mappings:
            if mapping.csv_column == csv_column and mapping.app_field != app_field:
                raise MappingError(
                    f"Column '{csv_column}' is already mapped to '{mapping.app_field}'"
                )

    updated = [
        FieldMapping(csv_column=csv_column, app_field=m.app_field)
        if m.app_field == app_field
        else m
        for m in mappings
    ]
    if not any(m.app_field == app_field for m in mappings):
        updated.append(FieldMapping(csv_column=csv_column, app_field=app_field))
    return updated


def known_fields(
    registry: Sequence[AppField] = APP_FIELDS, custom_fields: Sequence[CustomField] = ()
) -> list[str]:
    """Every field key a mapping may target."""
    keys = [f.value for f in registry]
    keys.extend(key for key in EXTRA_IMPORT_FIELDS if key not in keys)
    keys.extend(cf.app_field for cf in custom_fields)
    return keys


def check_field(
    app_field: str,
    registry: Sequence[AppField] = APP_FIELDS,
    custom_fields: Sequence[CustomField] = (),
) -> None:
    """Raise MappingError unless ``app_field`` is a field a mapping may target."""
    known = known_fields(registry, custom_fields)
    if app_field not in known:
        raise MappingError(f"Unknown field '{app_field}'; expected one of: {', '.join(known)}")


def required_fields(
    registry: Sequence[AppField] = APP_FIELDS, custom_fields: Sequence[CustomField] = ()
) -> list[str]:
    """Field keys that must be mapped before an import may run."""
    keys = [f.value for f in registry if f.required]
    keys.extend(cf.app_field for cf in custom_fields if cf.required)
    return keys


def field_label(
    app_field: str,
    registry: Sequence[AppField] = APP_FIELDS,
    custom_fields: Sequence[CustomField] = (),
) -> str:
    """Human-readable label for a field key, falling back to the key itself."""
    for entry in registry:
        if entry.value == app_field:
            return entry.label
    for custom_field in custom_fields:
        if custom_field.app_field == app_field:
            return custom_field.name
    return app_field


def validate_mappings(
    mappings: Iterable[FieldMapping],
    registry: Sequence[AppField] = APP_FIELDS,
    custom_fields: Sequence[CustomField] = (),
) -> MappingValidation:
    """Check that every required field has a non-empty column."""
    mapped = {m.app_field for m in mappings if m.is_mapped}
    missing = [key for key in required_fields(registry, custom_fields) if key not in mapped]
    return MappingValidation(ok=not missing, missing_required=missing)
