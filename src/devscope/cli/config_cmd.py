"""devscope config -- print the effective recorder configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from devscope.models.config import CONFIG_FILENAME, find_config_file, load_config


def config(
    project: Optional[Path] = typer.Option(
        None,
        "--project",
        "-p",
        help="Project directory or devscope.yaml path (default: search upward from cwd)",
    ),
) -> None:
    """Show the configuration DevTools.from_project() would use."""
    console = Console()

    try:
        effective = load_config(project)
    except (yaml.YAMLError, ValidationError) as exc:
        console.print(f"[bold red]Error:[/bold red] Invalid {CONFIG_FILENAME}:\n{escape(str(exc))}")
        raise typer.Exit(code=1)

    if project is not None and project.is_file():
        source: Path | None = project
    else:
        source = find_config_file(project)
    origin = str(source) if source is not None else "built-in defaults"
    console.print(f"[dim]# source: {origin}[/dim]")
    typer.echo(yaml.safe_dump(effective.model_dump(mode="json"), sort_keys=False).rstrip())
