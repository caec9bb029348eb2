"""Command-line interface for ganttplan."""

from __future__ import annotations

from datetime import date
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import typer
import yaml

from . import context
from .config import PlanConfig
from .exceptions import GanttplanError, TaskNotFoundError
from .hierarchy import calculate_summary_date_ranges
from .loader import discover_config, load_project
from .logger import setup_logger
from .models import Project, TaskId
from .scheduler import (
    CriticalPathEntry,
    CriticalPathMode,
    ScheduleOptions,
    ScheduleResult,
    calculate_critical_path,
    detect_circular_dependencies,
    remove_invalid_links,
    reschedule_from_task,
    schedule_tasks,
)
from .scheduler.validator import link_removal_reason

app = typer.Typer(
    name="ganttplan",
    help="Dependency-driven project scheduling and critical path analysis",
    add_completion=False,
)


class OutputFormat(str, Enum):
    """Output format for command results."""

    TEXT = "text"
    YAML = "yaml"


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show changes, 2=show all checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: ganttplan_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for ganttplan commands."""
    setup_logger(verbose)
    context.set_config_path(config)


def _fail(message: str) -> typer.Exit:
    typer.echo(f"Error: {message}", err=True)
    return typer.Exit(1)


def _parse_date_option(date_str: str | None, option_name: str) -> date | None:
    """Parse a date string from CLI option.

    Args:
        date_str: Date string in YYYY-MM-DD format or None
        option_name: Name of the option for error messages

    Returns:
        Parsed date object or None if date_str is None
    """
    if date_str is None:
        return None

    try:
        return date.fromisoformat(date_str)
    except ValueError:
        raise _fail(
            f"Invalid date format '{date_str}' for --{option_name}. Use YYYY-MM-DD format."
        ) from None


def _load(file: Path) -> tuple[Project, PlanConfig]:
    """Load the project file and its discovered config, exiting on errors."""
    try:
        project = load_project(file)
        config = discover_config(file) or PlanConfig()
    except GanttplanError as e:
        raise _fail(str(e)) from None
    return project, config


def _build_options(
    config: PlanConfig,
    project_start: str | None,
    project_end: str | None,
    mode: CriticalPathMode | None = None,
) -> ScheduleOptions:
    """Overlay CLI options on the configured scheduler defaults."""
    values: dict[str, Any] = config.scheduler.model_dump()
    parsed_start = _parse_date_option(project_start, "project-start")
    parsed_end = _parse_date_option(project_end, "project-end")
    if parsed_start is not None:
        values["project_start"] = parsed_start
    if parsed_end is not None:
        values["project_end"] = parsed_end
    if mode is not None:
        values["critical_path"] = {"type": mode}

    try:
        return ScheduleOptions.model_validate(values)
    except ValueError as e:
        raise _fail(str(e)) from None


def _resolve_task_id(project: Project, raw: str) -> TaskId:
    """Match a CLI task ID against the project, which may use numeric IDs."""
    if project.get_task(raw) is None and raw.lstrip("-").isdigit():
        numeric = int(raw)
        if project.get_task(numeric) is not None:
            return numeric
    return raw


def _format_date(day: date | None) -> str:
    return day.isoformat() if day is not None else "-"


def _schedule_to_dict(project: Project, result: ScheduleResult) -> dict[str, Any]:
    summaries = calculate_summary_date_ranges(project.tasks, result.tasks)
    return {
        "tasks": [
            {
                "id": task_id,
                "start": dates.start.isoformat(),
                "end": dates.end.isoformat(),
                "changed": dates.changed,
            }
            for task_id, dates in result.tasks.items()
        ],
        "summaries": [
            {"id": task_id, "start": _format_date(span.start), "end": _format_date(span.end)}
            for task_id, span in summaries.items()
        ],
        "affected": sorted(result.affected_task_ids, key=str),
        "conflicts": [
            {"kind": c.kind.value, "tasks": list(c.task_ids), "message": c.message}
            for c in result.conflicts
        ],
    }


def _display_schedule(project: Project, result: ScheduleResult) -> str:
    lines = ["Schedule", "=" * 60]
    for task in project.tasks:
        dates = result.tasks.get(task.id)
        label = f"{task.name} ({task.id})" if task.name else str(task.id)
        if dates is None:
            lines.append(f"{label}: unscheduled")
            continue
        marker = "  *" if dates.changed else ""
        lines.append(f"{label}: {dates.start} - {dates.end}{marker}")

    summaries = calculate_summary_date_ranges(project.tasks, result.tasks)
    if summaries:
        lines.append("")
        lines.append("Summaries")
        for task_id, span in summaries.items():
            lines.append(f"{task_id}: {_format_date(span.start)} - {_format_date(span.end)}")

    lines.append("")
    lines.append(f"{len(result.affected_task_ids)} task(s) changed (*)")
    return "\n".join(lines)


def _emit(text: str, output: Path | None) -> None:
    if output is None:
        typer.echo(text)
        return
    output.write_text(text if text.endswith("\n") else text + "\n", encoding="utf-8")
    typer.echo(f"Written to {output}")


@app.command()
def schedule(  # noqa: PLR0913 - CLI command needs multiple options
    file: Annotated[Path, typer.Argument(help="Path to the project YAML file")],
    project_start: Annotated[
        str | None,
        typer.Option("--project-start", help="Nothing is scheduled before this date (YYYY-MM-DD)"),
    ] = None,
    project_end: Annotated[
        str | None,
        typer.Option("--project-end", help="Tasks finishing later are pulled back (YYYY-MM-DD)"),
    ] = None,
    from_task: Annotated[
        str | None,
        typer.Option("--from-task", help="Only recompute this task and its successors"),
    ] = None,
    format: Annotated[  # noqa: A002 - 'format' is appropriate name for CLI option
        OutputFormat, typer.Option("--format", "-f", help="Output format")
    ] = OutputFormat.TEXT,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
) -> None:
    """Compute task dates from dependencies and the work calendar."""
    project, config = _load(file)
    options = _build_options(config, project_start, project_end)
    calendar = config.work_calendar()

    if from_task is None:
        result = schedule_tasks(project.tasks, project.links, calendar, options=options)
    else:
        try:
            result = reschedule_from_task(
                _resolve_task_id(project, from_task),
                project.tasks,
                project.links,
                calendar,
                options=options,
            )
        except TaskNotFoundError as e:
            raise _fail(str(e)) from None

    if format == OutputFormat.YAML:
        text = yaml.safe_dump(_schedule_to_dict(project, result), sort_keys=False)
    else:
        text = _display_schedule(project, result)
    _emit(text, output)

    if result.conflicts:
        typer.echo("\nConflicts:", err=True)
        for conflict in result.conflicts:
            typer.echo(f"  - [{conflict.kind.value}] {conflict.message}", err=True)


def _display_critical_path(entries: list[CriticalPathEntry], mode: CriticalPathMode) -> str:
    header = f"{'Task':<16} {'ES':<10} {'EF':<10} {'LS':<10} {'LF':<10} {'Slack':>5}"
    lines = [f"Critical Path ({mode.value})", "=" * len(header), header]
    for entry in entries:
        marker = "  *" if entry.is_critical else ""
        lines.append(
            f"{entry.task_id!s:<16} {_format_date(entry.early_start):<10} "
            f"{_format_date(entry.early_finish):<10} {_format_date(entry.late_start):<10} "
            f"{_format_date(entry.late_finish):<10} {entry.slack:>5}{marker}"
        )
    critical = [str(e.task_id) for e in entries if e.is_critical]
    lines.append("")
    lines.append(f"Critical: {' -> '.join(critical) if critical else '(none)'}")
    return "\n".join(lines)


@app.command("critical-path")
def critical_path(
    file: Annotated[Path, typer.Argument(help="Path to the project YAML file")],
    mode: Annotated[
        CriticalPathMode | None,
        typer.Option("--mode", "-m", help="strict: all zero-slack tasks; flexible: one chain"),
    ] = None,
    project_start: Annotated[
        str | None, typer.Option("--project-start", help="Forward pass start (YYYY-MM-DD)")
    ] = None,
    project_end: Annotated[
        str | None, typer.Option("--project-end", help="Backward pass end (YYYY-MM-DD)")
    ] = None,
    format: Annotated[  # noqa: A002 - 'format' is appropriate name for CLI option
        OutputFormat, typer.Option("--format", "-f", help="Output format")
    ] = OutputFormat.TEXT,
) -> None:
    """Compute slack for every task and mark the critical path."""
    project, config = _load(file)
    options = _build_options(config, project_start, project_end, mode)
    entries = calculate_critical_path(project.tasks, project.links, options)

    if format == OutputFormat.YAML:
        data = [
            {
                "id": e.task_id,
                "early_start": _format_date(e.early_start),
                "early_finish": _format_date(e.early_finish),
                "late_start": _format_date(e.late_start),
                "late_finish": _format_date(e.late_finish),
                "slack": e.slack,
                "critical": e.is_critical,
            }
            for e in entries
        ]
        typer.echo(yaml.safe_dump({"critical_path": data}, sort_keys=False), nl=False)
    else:
        typer.echo(_display_critical_path(entries, options.critical_path.type))


@app.command()
def check(
    file: Annotated[Path, typer.Argument(help="Path to the project YAML file")],
) -> None:
    """Report invalid links and circular dependencies. Exits 1 on any cycle."""
    project, _ = _load(file)

    task_ids = {task.id for task in project.tasks}
    parents = {task.id: task.parent for task in project.tasks if task.parent is not None}
    validation = remove_invalid_links(project.tasks, project.links)
    cycles = detect_circular_dependencies(project.tasks, validation.valid_links)

    for link in validation.removed_links:
        typer.echo(f"Ignored link {link}: {link_removal_reason(link, task_ids, parents)}")
    for cycle in cycles:
        loop = " -> ".join(str(task_id) for task_id in [*cycle, cycle[0]])
        typer.echo(f"Circular dependency: {loop}")

    if cycles:
        raise typer.Exit(1)
    if not validation.removed_links:
        typer.echo(f"OK: {len(project.tasks)} tasks, {len(project.links)} links")


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()
