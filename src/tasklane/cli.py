"""Command-line interface for tasklane."""

from __future__ import annotations

import csv
import io
from datetime import date
from pathlib import Path
from typing import Annotated, Any

import typer
import yaml

from .config import TasklaneConfig, discover_config, set_config_path
from .csv_import import build_template, import_csv, parse_csv_headers
from .exceptions import TasklaneError
from .fields import TaskField
from .graph import assign_levels, layout_positions
from .logger import setup_logger
from .mapping import (
    APP_FIELDS,
    auto_map,
    check_field,
    field_label,
    update_mapping,
    validate_mappings,
)
from .models import Task
from .parser import dump_tasks, load_tasks
from .pivot import PivotValue, build_pivot
from .reports import build_report
from .timeline import layout_timeline

app = typer.Typer(
    name="tasklane",
    help="Project task timelines, dependency networks, reports and CSV import",
    add_completion=False,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=warnings (default), 1=summaries, 2=per-row checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: tasklane_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for tasklane commands."""
    setup_logger(verbose)
    set_config_path(config)


def _fail(message: str) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(1)


def _load_config() -> TasklaneConfig:
    try:
        return discover_config()
    except (FileNotFoundError, ValueError) as e:
        raise _fail(str(e)) from e


def _load_tasks(file: Path) -> list[Task]:
    try:
        return load_tasks(file)
    except TasklaneError as e:
        raise _fail(str(e)) from e


def _parse_date_option(value: str | None, option: str) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise _fail(f"{option} must be YYYY-MM-DD, got '{value}'") from e


def _write_output(content: str, output: Path | None) -> None:
    if output:
        output.write_text(content, encoding="utf-8")
        typer.echo(f"Output written to {output}", err=True)
    else:
        typer.echo(content, nl=not content.endswith("\n"))


def _dump_yaml(data: Any) -> str:
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)


@app.command()
def timeline(
    file: Annotated[Path, typer.Argument(help="Path to the task YAML file")] = Path("tasks.yaml"),
    *,
    today: Annotated[
        str | None, typer.Option("--today", help="Axis start when there are no tasks (YYYY-MM-DD)")
    ] = None,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
) -> None:
    """Compute the Gantt axis and per-task bar geometry."""
    config = _load_config()
    tasks = _load_tasks(file)
    layout = layout_timeline(
        tasks, today=_parse_date_option(today, "--today"), config=config.timeline
    )
    _write_output(_dump_yaml(layout.to_dict()), output)


@app.command()
def network(
    file: Annotated[Path, typer.Argument(help="Path to the task YAML file")] = Path("tasks.yaml"),
    *,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
) -> None:
    """Compute dependency levels, edges and node positions."""
    config = _load_config()
    graph = assign_levels(_load_tasks(file))
    data = graph.to_dict()
    data["positions"] = {
        task_id: {"x": x, "y": y}
        for task_id, (x, y) in layout_positions(graph, config.network).items()
    }
    _write_output(_dump_yaml(data), output)


def _read_csv(file: Path) -> str:
    if not file.exists():
        raise _fail(f"File not found: {file}")
    return file.read_text(encoding="utf-8-sig")


@app.command()
def mapping(
    file: Annotated[Path, typer.Argument(help="Path to the CSV file")],
) -> None:
    """Show the automatic column mapping for a CSV file."""
    config = _load_config()
    custom_fields = config.get_custom_fields()
    mappings = auto_map(parse_csv_headers(_read_csv(file)), APP_FIELDS, custom_fields)

    for entry in mappings:
        label = field_label(entry.app_field, APP_FIELDS, custom_fields)
        typer.echo(f"{label}: {entry.csv_column or '-- No mapping --'}")

    validation = validate_mappings(mappings, APP_FIELDS, custom_fields)
    if not validation.ok:
        missing = ", ".join(
            field_label(key, APP_FIELDS, custom_fields) for key in validation.missing_required
        )
        typer.echo(f"Missing required fields: {missing}", err=True)
        raise typer.Exit(1)


@app.command("import")
def import_command(
    file: Annotated[Path, typer.Argument(help="Path to the CSV file")],
    *,
    map_: Annotated[
        list[str] | None,
        typer.Option(
            "--map",
            "-m",
            help="Override a mapping as FIELD=COLUMN (empty COLUMN clears it); repeatable",
        ),
    ] = None,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
) -> None:
    """Import tasks from CSV and print them as a task YAML file."""
    config = _load_config()
    custom_fields = config.get_custom_fields()
    csv_text = _read_csv(file)

    try:
        mappings = auto_map(parse_csv_headers(csv_text), APP_FIELDS, custom_fields)
        for override in map_ or []:
            app_field, sep, column = override.partition("=")
            if not sep:
                raise _fail(f"--map expects FIELD=COLUMN, got '{override}'")
            app_field = app_field.strip()
            check_field(app_field, APP_FIELDS, custom_fields)
            mappings = update_mapping(mappings, app_field, column.strip())

        result = import_csv(
            csv_text,
            mappings,
            APP_FIELDS,
            custom_fields,
            day_first_slashes=config.import_.day_first_slashes,
        )
    except TasklaneError as e:
        raise _fail(str(e)) from e

    _write_output(dump_tasks(result.tasks), output)
    typer.echo(f"{len(result.tasks)} tasks imported", err=True)


@app.command()
def template(
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
) -> None:
    """Write the CSV import template."""
    config = _load_config()
    _write_output(build_template(config.get_custom_fields()) + "\n", output)


@app.command()
def pivot(
    file: Annotated[Path, typer.Argument(help="Path to the task YAML file")] = Path("tasks.yaml"),
    *,
    rows: Annotated[TaskField, typer.Option("--rows", help="Row field")] = TaskField.STATUS,
    columns: Annotated[
        TaskField, typer.Option("--columns", help="Column field")
    ] = TaskField.PRIORITY,
    value: Annotated[PivotValue, typer.Option("--value", help="Cell value")] = PivotValue.COUNT,
) -> None:
    """Print a pivot table as CSV."""
    table = build_pivot(_load_tasks(file), rows, columns, value)
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\n").writerows(table.to_rows())
    typer.echo(buffer.getvalue(), nl=False)


@app.command()
def report(
    file: Annotated[Path, typer.Argument(help="Path to the task YAML file")] = Path("tasks.yaml"),
    *,
    today: Annotated[
        str | None, typer.Option("--today", help="Reference date (YYYY-MM-DD)")
    ] = None,
) -> None:
    """Print project analytics."""
    result = build_report(_load_tasks(file), today=_parse_date_option(today, "--today"))
    typer.echo(_dump_yaml(result.to_dict()), nl=False)


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()
