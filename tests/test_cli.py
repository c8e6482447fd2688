"""Tests for CLI commands."""

from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from tasklane.cli import app
from tasklane.config import set_config_path

runner = CliRunner()

TASKS_FILE = """\
tasks:
  - id: a
    name: Plan
    status: completed
    priority: High
    start_date: 2024-01-15
    end_date: 2024-01-17
    progress: 100
    assignee: Ann
  - id: b
    name: Build
    start_date: 2024-01-18
    end_date: 2024-01-25
    dependencies: [a]
    assignee: Bob
  - id: c
    name: Ship
    type: milestone
    start_date: 2024-01-26
    end_date: 2024-01-26
    dependencies: [b, missing]
"""


@pytest.fixture(autouse=True)
def isolated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every command from an empty directory with no config selected."""
    monkeypatch.chdir(tmp_path)
    set_config_path(None)


@pytest.fixture
def tasks_file(tmp_path: Path) -> Path:
    path = tmp_path / "tasks.yaml"
    path.write_text(TASKS_FILE)
    return path


class TestTimelineCommand:
    """Test the timeline command."""

    def test_basic_output(self, tasks_file: Path) -> None:
        result = runner.invoke(app, ["timeline", str(tasks_file)])

        assert result.exit_code == 0
        data = yaml.safe_load(result.stdout)
        assert data["axis_start"] == "2024-01-14"
        assert data["axis_end"] == "2024-01-27"
        assert [row["id"] for row in data["rows"]] == ["a", "b", "c"]

    def test_default_file_name(self, tasks_file: Path) -> None:
        result = runner.invoke(app, ["timeline"])
        assert result.exit_code == 0
        assert "axis_start" in result.stdout

    def test_output_to_file(self, tasks_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "timeline.yaml"
        result = runner.invoke(app, ["timeline", str(tasks_file), "-o", str(output)])

        assert result.exit_code == 0
        assert yaml.safe_load(output.read_text())["total_days"] == 14

    def test_config_week_start(self, tasks_file: Path, tmp_path: Path) -> None:
        config = tmp_path / "custom.yaml"
        config.write_text("timeline:\n  week_starts_on: 0\n")
        result = runner.invoke(app, ["--config", str(config), "timeline", str(tasks_file)])

        assert result.exit_code == 0
        assert yaml.safe_load(result.stdout)["axis_start"] == "2024-01-15"

    def test_missing_file(self) -> None:
        result = runner.invoke(app, ["timeline", "nope.yaml"])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_bad_today(self, tasks_file: Path) -> None:
        result = runner.invoke(app, ["timeline", str(tasks_file), "--today", "soon"])
        assert result.exit_code == 1


class TestNetworkCommand:
    """Test the network command."""

    def test_levels_and_positions(self, tasks_file: Path) -> None:
        result = runner.invoke(app, ["network", str(tasks_file)])

        assert result.exit_code == 0
        data = yaml.safe_load(result.stdout)
        assert data["levels"] == {"a": 0, "b": 1, "c": 2}
        assert data["edges"] == [{"from": "a", "to": "b"}, {"from": "b", "to": "c"}]
        assert data["broken_edges"] == []
        assert data["positions"]["c"] == {"x": 0.0, "y": 300.0}


class TestImportCommands:
    """Test mapping, import and template commands."""

    @pytest.fixture
    def csv_file(self, tmp_path: Path, template_csv: str) -> Path:
        path = tmp_path / "tasks.csv"
        path.write_text(template_csv)
        return path

    def test_mapping(self, csv_file: Path) -> None:
        result = runner.invoke(app, ["mapping", str(csv_file)])

        assert result.exit_code == 0
        assert "Task Name: Task Name" in result.stdout
        assert "Progress (%): Progress (%)" in result.stdout

    def test_mapping_reports_missing(self, tmp_path: Path) -> None:
        path = tmp_path / "partial.csv"
        path.write_text("Title,When\nA,2024-01-01\n")
        result = runner.invoke(app, ["mapping", str(path)])

        assert result.exit_code == 1
        assert "Missing required fields: Start Date, End Date" in result.output

    def test_import(self, csv_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "imported.yaml"
        result = runner.invoke(app, ["import", str(csv_file), "--output", str(output)])

        assert result.exit_code == 0
        assert "3 tasks imported" in result.output
        tasks = yaml.safe_load(output.read_text())["tasks"]
        assert [t["name"] for t in tasks] == [
            "Setup Project Environment",
            "Requirements Analysis",
            "Database Design",
        ]
        assert tasks[1]["status"] == "in-progress"

    def test_import_with_override(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.csv"
        path.write_text("Title,Kickoff,Finish\nA,2024-01-01,2024-01-03\n")
        output = tmp_path / "out.yaml"
        result = runner.invoke(
            app,
            [
                "import",
                str(path),
                "--map",
                "start_date=Kickoff",
                "--map",
                "end_date=Finish",
                "-o",
                str(output),
            ],
        )

        assert result.exit_code == 0
        task = yaml.safe_load(output.read_text())["tasks"][0]
        assert (task["start_date"], task["end_date"]) == ("2024-01-01", "2024-01-03")

    def test_import_missing_required(self, tmp_path: Path) -> None:
        path = tmp_path / "partial.csv"
        path.write_text("Title,When\nA,2024-01-01\n")
        result = runner.invoke(app, ["import", str(path)])

        assert result.exit_code == 1
        assert "Error: Please map the following required fields" in result.output

    def test_import_duplicate_override(self, csv_file: Path) -> None:
        result = runner.invoke(app, ["import", str(csv_file), "--map", "description=Task Name"])

        assert result.exit_code == 1
        assert "already mapped" in result.output

    def test_import_unknown_override_field(self, csv_file: Path) -> None:
        result = runner.invoke(app, ["import", str(csv_file), "--map", "foo=Task Name"])

        assert result.exit_code == 1
        assert "Unknown field 'foo'" in result.output

    def test_import_header_only(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.csv"
        path.write_text("Task Name,Start Date,End Date\n")
        result = runner.invoke(app, ["import", str(path)])

        assert result.exit_code == 1
        assert "at least a header row" in result.output

    def test_template_round_trip(self, tmp_path: Path) -> None:
        template = tmp_path / "template.csv"
        result = runner.invoke(app, ["template", "-o", str(template)])
        assert result.exit_code == 0

        output = tmp_path / "out.yaml"
        result = runner.invoke(app, ["import", str(template), "-o", str(output)])
        assert result.exit_code == 0
        assert len(yaml.safe_load(output.read_text())["tasks"]) == 3

    def test_template_with_custom_fields(self, tmp_path: Path) -> None:
        (tmp_path / "tasklane_config.yaml").write_text(
            "custom_fields:\n  - id: b\n    name: Budget\n    type: number\n"
        )
        result = runner.invoke(app, ["template"])

        assert result.exit_code == 0
        assert result.stdout.splitlines()[0].endswith(",Description,Budget")


class TestReportCommands:
    """Test pivot and report commands."""

    def test_pivot(self, tasks_file: Path) -> None:
        result = runner.invoke(
            app, ["pivot", str(tasks_file), "--rows", "assignee", "--columns", "status"]
        )

        assert result.exit_code == 0
        lines = result.stdout.splitlines()
        assert lines[0] == "Assignee / Status,completed,not-started,Total"
        assert lines[-1] == "Total,1,2,3"

    def test_report(self, tasks_file: Path) -> None:
        result = runner.invoke(app, ["report", str(tasks_file), "--today", "2024-01-20"])

        assert result.exit_code == 0
        data = yaml.safe_load(result.stdout)
        assert data["total_tasks"] == 3
        assert data["completion_rate"] == 33
        assert data["overdue"] == []
        assert data["upcoming"] == ["c"]
