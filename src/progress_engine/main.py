"""Main CLI entry point for Progress Engine.

This module provides the main Typer application with sub-commands for
project calculations and project templates.

Usage:
    progress-engine project report project.json --now 2024-06-01
    progress-engine project critical-path project.json --format json
    progress-engine project conflicts project.json
    progress-engine template solar "Rooftop 1" --start 2024-01-01 --end 2024-06-30
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console

from progress_engine.cli import project as project_cli
from progress_engine.cli import template as template_cli
from progress_engine.config import EngineConfig, load_config
from progress_engine.logging import get_logger, setup_logging, start_run

app = typer.Typer(
    name="progress-engine",
    help="Progress Engine: project progress and critical path calculations",
    no_args_is_help=True,
)

app.add_typer(project_cli.app, name="project", help="Calculate project metrics")
app.add_typer(template_cli.app, name="template", help="Generate projects from templates")

console = Console()
logger = get_logger(__name__)


class AppContext:
    """Application context shared across CLI commands.

    Attributes:
        config: Loaded Progress Engine configuration
    """

    def __init__(self, config: EngineConfig):
        self.config = config


_app_context: AppContext | None = None


def get_app_context() -> AppContext:
    """Get the shared application context.

    Raises:
        RuntimeError: If context has not been initialized
    """
    if _app_context is None:
        raise RuntimeError("Application context not initialized. Call initialize_context first.")
    return _app_context


def initialize_context(config: EngineConfig) -> AppContext:
    """Initialize the global application context.

    Args:
        config: Progress Engine configuration

    Returns:
        Initialized AppContext instance
    """
    global _app_context
    _app_context = AppContext(config)
    return _app_context


@app.callback()
def main_callback(
    config_path: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file (TOML format)",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Configure global options and initialize application context.

    Args:
        config_path: Optional path to TOML configuration file
        verbose: Enable debug-level logging
    """
    try:
        config = load_config(config_path)
    except Exception as e:
        console.print(f"[red]Error loading configuration:[/red] {e}")
        raise typer.Exit(code=1)

    if verbose:
        config.logging.level = "DEBUG"

    # Logs go to stderr so JSON output on stdout stays parseable
    setup_logging(config.logging, stream=sys.stderr)
    start_run()
    initialize_context(config)
    logger.debug(
        "cli_started",
        config_path=str(config_path) if config_path else None,
    )


if __name__ == "__main__":
    app()
