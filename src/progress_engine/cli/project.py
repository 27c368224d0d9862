"""Project calculation CLI commands.

This module provides CLI commands that load a project JSON document and
print its progress report, critical path, resource conflicts, Gantt data
or baseline comparison.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from progress_engine.engine import (
    build_gantt_data,
    calculate_critical_path,
    compare_to_baseline,
    detect_conflicts,
    generate_progress_report,
)
from progress_engine.errors import ProgressEngineError
from progress_engine.loader import load_project
from progress_engine.logging import bind_project_context, get_logger
from progress_engine.models.project import Project

app = typer.Typer(help="Project calculation commands")
console = Console()
logger = get_logger(__name__)

ProjectFile = Annotated[
    Path,
    typer.Argument(
        help="Path to project JSON file",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
]
FormatOption = Annotated[
    Optional[str],
    typer.Option(
        "--format",
        "-f",
        help="Output format (table or json); defaults to the configured format",
    ),
]

HEALTH_COLORS = {
    "healthy": "green",
    "at_risk": "yellow",
    "critical": "red",
}


def _resolve_format(format: str | None) -> str:
    from progress_engine.main import get_app_context

    resolved = (format or get_app_context().config.report.format).lower()
    if resolved not in ("table", "json"):
        console.print(f"[red]Invalid format:[/red] {format}. Valid values: table, json")
        raise typer.Exit(code=1)
    return resolved


def _decimals() -> int:
    from progress_engine.main import get_app_context

    return get_app_context().config.report.decimals


def _load(path: Path) -> Project:
    try:
        project = load_project(path)
    except ProgressEngineError as e:
        logger.warning("project_load_failed", path=str(path), error=str(e))
        console.print(f"[red]Error loading project:[/red] {e}")
        raise typer.Exit(code=1)
    bind_project_context(project.project_id)
    logger.info(
        "project_loaded",
        path=str(path),
        phases=len(project.phases),
        activities=sum(len(phase.activities) for phase in project.phases),
    )
    return project


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2))


@app.command()
def report(
    project_file: ProjectFile,
    now: Annotated[
        Optional[datetime],
        typer.Option("--now", help="Reference time for schedule checks (default: now)"),
    ] = None,
    format: FormatOption = None,
) -> None:
    """Print the progress report of a project.

    Args:
        project_file: Path to project JSON file
        now: Optional reference time
        format: Output format (table or json)
    """
    output_format = _resolve_format(format)
    project = _load(project_file)

    try:
        result = generate_progress_report(project, now=now)
    except ProgressEngineError as e:
        console.print(f"[red]Error calculating progress:[/red] {e}")
        raise typer.Exit(code=1)

    if output_format == "json":
        _echo_json(result.model_dump(mode="json", by_alias=True))
        return

    decimals = _decimals()
    health = result.project_health
    color = HEALTH_COLORS.get(health.status.value, "white")

    table = Table(title=f"Progress: {project.project_name}")
    table.add_column("Phase", style="bold")
    table.add_column("Weight", justify="right")
    table.add_column("Completion", justify="right")
    table.add_column("Contribution", justify="right")
    table.add_column("On schedule")
    table.add_column("Days ahead", justify="right")

    for pc in result.phase_completions:
        table.add_row(
            pc.phase_name,
            f"{pc.weight:.{decimals}f}",
            f"{pc.completion * 100:.{decimals}f}%",
            f"{pc.contribution_to_overall:.{decimals}f}",
            "[green]yes[/green]" if pc.on_schedule else "[red]no[/red]",
            f"{pc.days_ahead:+.{decimals}f}",
        )

    console.print(table)

    lines = [
        f"[bold]Overall completion:[/bold] {result.overall_completion * 100:.{decimals}f}%",
        f"[bold]Health:[/bold] [{color}]{health.status.value}[/{color}]",
        f"[bold]Schedule variance:[/bold] {health.schedule_variance:+.{decimals}f} days",
        f"[bold]Critical path:[/bold] {', '.join(result.critical_path) or '-'}",
    ]
    for factor, recommendation in zip(health.risk_factors, health.recommendations):
        lines.append(f"[{color}]- {factor}[/{color}]: {recommendation}")

    console.print(Panel("\n".join(lines), title="Project Health", border_style=color))


@app.command("critical-path")
def critical_path(
    project_file: ProjectFile,
    format: FormatOption = None,
) -> None:
    """Print the CPM schedule and critical path of a project.

    Args:
        project_file: Path to project JSON file
        format: Output format (table or json)
    """
    output_format = _resolve_format(format)
    project = _load(project_file)

    try:
        result = calculate_critical_path(project)
    except ProgressEngineError as e:
        console.print(f"[red]Error calculating critical path:[/red] {e}")
        raise typer.Exit(code=1)

    if output_format == "json":
        _echo_json(result.model_dump(mode="json", by_alias=True))
        return

    if not result.schedule:
        console.print("[yellow]No activities found[/yellow]")
        return

    decimals = _decimals()
    table = Table(title=f"Critical path ({result.project_duration:g} days)")
    table.add_column("Activity", style="cyan", no_wrap=True)
    table.add_column("ES", justify="right")
    table.add_column("EF", justify="right")
    table.add_column("LS", justify="right")
    table.add_column("LF", justify="right")
    table.add_column("Float", justify="right")

    for entry in result.schedule.values():
        style = "bold red" if entry.is_critical else None
        table.add_row(
            entry.activity_id,
            f"{entry.early_start:.{decimals}f}",
            f"{entry.early_finish:.{decimals}f}",
            f"{entry.late_start:.{decimals}f}",
            f"{entry.late_finish:.{decimals}f}",
            f"{entry.total_float:.{decimals}f}",
            style=style,
        )

    console.print(table)


@app.command()
def conflicts(
    project_file: ProjectFile,
    format: FormatOption = None,
) -> None:
    """Print resource double-bookings of a project.

    Args:
        project_file: Path to project JSON file
        format: Output format (table or json)
    """
    output_format = _resolve_format(format)
    project = _load(project_file)
    found = detect_conflicts(project)

    if output_format == "json":
        _echo_json([c.model_dump(mode="json", by_alias=True) for c in found])
        return

    if not found:
        console.print("[green]No resource conflicts found[/green]")
        return

    table = Table(title="Resource conflicts")
    table.add_column("Resource", style="cyan")
    table.add_column("Activities", style="bold")
    table.add_column("From", style="dim")
    table.add_column("To", style="dim")

    for conflict in found:
        table.add_row(
            conflict.resource_id,
            " / ".join(conflict.conflicting_activities),
            conflict.conflict_period.start.strftime("%Y-%m-%d %H:%M"),
            conflict.conflict_period.end.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


@app.command()
def gantt(project_file: ProjectFile) -> None:
    """Print the Gantt chart data of a project as JSON.

    Args:
        project_file: Path to project JSON file
    """
    project = _load(project_file)

    try:
        data = build_gantt_data(project)
    except ProgressEngineError as e:
        console.print(f"[red]Error building Gantt data:[/red] {e}")
        raise typer.Exit(code=1)

    _echo_json(data.model_dump(mode="json", by_alias=True))


@app.command()
def baseline(
    project_file: ProjectFile,
    baseline_file: Annotated[
        Path,
        typer.Argument(
            help="Path to baseline project JSON file",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    format: FormatOption = None,
) -> None:
    """Compare a project with its baseline.

    Args:
        project_file: Path to current project JSON file
        baseline_file: Path to baseline project JSON file
        format: Output format (table or json)
    """
    output_format = _resolve_format(format)
    current = _load(project_file)
    reference = _load(baseline_file)
    comparison = compare_to_baseline(current, reference)

    if output_format == "json":
        _echo_json(comparison.model_dump(mode="json", by_alias=True))
        return

    decimals = _decimals()
    lines = [
        f"[bold]Schedule variance:[/bold] "
        f"{comparison.schedule_variance_days:+.{decimals}f} days",
        f"[bold]Milestones at risk:[/bold] {', '.join(comparison.milestones_at_risk) or '-'}",
    ]
    if comparison.scope_changes:
        lines.append("[bold]Scope changes:[/bold]")
        lines.extend(f"- {change}" for change in comparison.scope_changes)
    else:
        lines.append("[bold]Scope changes:[/bold] none")

    console.print(Panel("\n".join(lines), title="Baseline Comparison", border_style="blue"))
