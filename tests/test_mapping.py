"""Tests for CSV field mapping."""

import pytest

from tasklane.exceptions import MappingError
from tasklane.mapping import (
    APP_FIELDS,
    auto_map,
    available_columns,
    check_field,
    field_label,
    required_fields,
    update_mapping,
    validate_mappings,
)
from tasklane.models import CustomField, FieldMapping, FieldType

TEMPLATE_HEADERS = [
    "Task Name",
    "Type",
    "Status",
    "Start Date",
    "End Date",
    "Assignee",
    "Progress (%)",
    "Dependencies",
    "Description",
]


def _as_dict(mappings: list[FieldMapping]) -> dict[str, str]:
    return {m.app_field: m.csv_column for m in mappings}


class TestAutoMap:
    """Test automatic header matching."""

    def test_template_headers_fully_mapped(self) -> None:
        mapped = _as_dict(auto_map(TEMPLATE_HEADERS))

        assert mapped == {
            "name": "Task Name",
            "task_type": "Type",
            "status": "Status",
            "start_date": "Start Date",
            "end_date": "End Date",
            "assignee": "Assignee",
            "progress": "Progress (%)",
            "dependencies": "Dependencies",
            "description": "Description",
        }

    def test_one_entry_per_registry_field_in_order(self) -> None:
        mappings = auto_map(["Title"])
        assert [m.app_field for m in mappings] == [f.value for f in APP_FIELDS]

    def test_case_and_whitespace_insensitive(self) -> None:
        """Original header text is preserved in the mapping."""
        mapped = _as_dict(auto_map(["  TITLE ", "START", "Due Date"]))

        assert mapped["name"] == "  TITLE "
        assert mapped["start_date"] == "START"
        assert mapped["end_date"] == "Due Date"

    def test_pattern_priority(self) -> None:
        """Earlier synonyms win over later ones regardless of column order."""
        mapped = _as_dict(auto_map(["Title", "Name", "Task Name"]))
        assert mapped["name"] == "Task Name"

    def test_unmatched_fields_are_empty(self) -> None:
        mapped = _as_dict(auto_map(["Task Name", "Whatever"]))

        assert mapped["name"] == "Task Name"
        assert mapped["start_date"] == ""
        assert mapped["description"] == ""

    def test_custom_fields_matched_by_name(self) -> None:
        custom = [
            CustomField(id="cf1", name="Budget", field_type=FieldType.NUMBER),
            CustomField(id="cf2", name="Reviewed", field_type=FieldType.BOOLEAN),
        ]
        mapped = _as_dict(auto_map(["Task Name", "budget"], custom_fields=custom))

        assert mapped["custom_cf1"] == "budget"
        assert mapped["custom_cf2"] == ""

    def test_column_not_assigned_twice(self) -> None:
        """A custom field named like a standard column does not steal it."""
        custom = [CustomField(id="cf1", name="Status")]
        mapped = _as_dict(auto_map(["Task Name", "Status"], custom_fields=custom))

        assert mapped["status"] == "Status"
        assert mapped["custom_cf1"] == ""


class TestUpdateMapping:
    """Test user overrides."""

    def test_override_to_unused_column(self) -> None:
        mappings = auto_map(["Task Name", "Kickoff", "Start Date"])
        updated = update_mapping(mappings, "start_date", "Kickoff")

        assert _as_dict(updated)["start_date"] == "Kickoff"
        # Input is left untouched
        assert _as_dict(mappings)["start_date"] == "Start Date"

    def test_clear_mapping(self) -> None:
        mappings = auto_map(TEMPLATE_HEADERS)
        updated = update_mapping(mappings, "assignee", "")
        assert _as_dict(updated)["assignee"] == ""

    def test_duplicate_column_rejected(self) -> None:
        mappings = auto_map(TEMPLATE_HEADERS)
        with pytest.raises(MappingError, match="already mapped to 'name'"):
            update_mapping(mappings, "description", "Task Name")

    def test_reassigning_same_column_to_same_field(self) -> None:
        mappings = auto_map(TEMPLATE_HEADERS)
        assert update_mapping(mappings, "name", "Task Name") == mappings

    def test_new_field_appended(self) -> None:
        mappings = auto_map(["Task Name", "Priority"])
        updated = update_mapping(mappings, "priority", "Priority")
        assert updated[-1] == FieldMapping(csv_column="Priority", app_field="priority")


class TestCheckField:
    """Test which field keys an override may target."""

    def test_registry_and_extra_fields_accepted(self) -> None:
        for key in ("name", "start_date", "priority", "developer", "work_item_link"):
            check_field(key)

    def test_custom_field_accepted(self) -> None:
        budget = CustomField(id="budget", name="Budget", field_type=FieldType.NUMBER)
        check_field("custom_budget", APP_FIELDS, [budget])

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(MappingError, match="Unknown field 'foo'"):
            check_field("foo")

    def test_custom_field_requires_definition(self) -> None:
        with pytest.raises(MappingError):
            check_field("custom_budget")


class TestAvailableColumns:
    """Test column choices offered per field."""

    def test_unused_or_own_column(self) -> None:
        headers = ["Task Name", "Start Date", "Notes", "Extra"]
        mappings = auto_map(headers)

        assert available_columns(mappings, headers, "start_date") == ["Start Date", "Extra"]
        assert available_columns(mappings, headers, "assignee") == ["Extra"]


class TestValidateMappings:
    """Test required-field gating."""

    def test_dates_missing(self) -> None:
        mappings = [FieldMapping(csv_column="Task Name", app_field="name")]
        result = validate_mappings(mappings)

        assert not result.ok
        assert result.missing_required == ["start_date", "end_date"]

    def test_required_fields_mapped(self) -> None:
        """Optional fields do not matter once the required three are mapped."""
        mappings = [
            FieldMapping(csv_column="Task Name", app_field="name"),
            FieldMapping(csv_column="Start", app_field="start_date"),
            FieldMapping(csv_column="End", app_field="end_date"),
            FieldMapping(csv_column="", app_field="assignee"),
        ]
        result = validate_mappings(mappings)

        assert result.ok
        assert result.missing_required == []

    def test_blank_column_counts_as_missing(self) -> None:
        mappings = [
            FieldMapping(csv_column="Task Name", app_field="name"),
            FieldMapping(csv_column="  ", app_field="start_date"),
            FieldMapping(csv_column="End", app_field="end_date"),
        ]
        assert validate_mappings(mappings).missing_required == ["start_date"]

    def test_required_custom_field(self) -> None:
        custom = [CustomField(id="cf1", name="Cost Center", required=True)]
        mappings = auto_map(TEMPLATE_HEADERS, custom_fields=custom)
        result = validate_mappings(mappings, custom_fields=custom)

        assert result.missing_required == ["custom_cf1"]
        assert field_label("custom_cf1", custom_fields=custom) == "Cost Center"


def test_required_fields_default_registry() -> None:
    assert required_fields() == ["name", "start_date", "end_date"]


def test_field_label_fallback() -> None:
    assert field_label("start_date") == "Start Date"
    assert field_label("unknown") == "unknown"
