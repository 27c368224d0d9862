"""Project template CLI commands.

This module provides CLI commands for generating projects from the
built-in templates and for sizing a solar installation.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.panel import Panel

from progress_engine.templates import (
    create_solar_project,
    estimate_project_duration,
    get_recommended_resources,
)

app = typer.Typer(help="Project template commands")
console = Console()


@app.command()
def solar(
    name: Annotated[str, typer.Argument(help="Project name")],
    start: Annotated[
        datetime,
        typer.Option("--start", "-s", help="Planned start date"),
    ],
    end: Annotated[
        datetime,
        typer.Option("--end", "-e", help="Planned end date"),
    ],
    owner: Annotated[str, typer.Option("--owner", help="Project owner")] = "",
    contractor: Annotated[
        str, typer.Option("--contractor", help="Main contractor")
    ] = "",
    project_id: Annotated[
        Optional[str],
        typer.Option("--id", help="Project identifier (default: generated UUID)"),
    ] = None,
    output: Annotated[
        Optional[Path],
        typer.Option(
            "--output",
            "-o",
            help="Write the project JSON to this file instead of stdout",
            dir_okay=False,
        ),
    ] = None,
) -> None:
    """Generate a solar installation project from the template.

    Args:
        name: Project name
        start: Planned start date
        end: Planned end date
        owner: Project owner
        contractor: Main contractor
        project_id: Optional project identifier
        output: Optional output file path
    """
    try:
        project = create_solar_project(
            project_name=name,
            planned_start_date=start,
            planned_end_date=end,
            project_owner=owner,
            main_contractor=contractor,
            project_id=project_id,
        )
    except ValueError as e:
        console.print(f"[red]Error creating project:[/red] {e}")
        raise typer.Exit(code=1)

    document = json.dumps(project.model_dump(mode="json", by_alias=True), indent=2)

    if output is None:
        typer.echo(document)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(document, encoding="utf-8")

    activity_count = sum(len(phase.activities) for phase in project.phases)
    panel = Panel(
        f"[green]Project written successfully![/green]\n\n"
        f"[bold]ID:[/bold] {project.project_id}\n"
        f"[bold]Name:[/bold] {project.project_name}\n"
        f"[bold]Phases:[/bold] {len(project.phases)}\n"
        f"[bold]Activities:[/bold] {activity_count}\n"
        f"[bold]File:[/bold] {output}",
        title="Project Created",
        border_style="green",
    )
    console.print(panel)


@app.command()
def estimate(
    capacity_kw: Annotated[
        float,
        typer.Argument(help="System capacity in kW", min=0.0),
    ],
) -> None:
    """Estimate duration and resources for a solar installation.

    Args:
        capacity_kw: System capacity in kW
    """
    duration = estimate_project_duration(capacity_kw)
    resources = get_recommended_resources(capacity_kw)

    panel = Panel(
        f"[bold]Capacity:[/bold] {capacity_kw:g} kW\n"
        f"[bold]Estimated duration:[/bold] {duration} days\n"
        f"[bold]Recommended resources:[/bold]\n"
        + "\n".join(f"- {resource}" for resource in resources),
        title="Solar Estimate",
        border_style="cyan",
    )
    console.print(panel)
