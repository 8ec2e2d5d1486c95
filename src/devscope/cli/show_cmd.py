"""devscope show -- render an exported recorder document.

Accepts a network export (JSON array of calls), a log export (JSON
array of events), a performance export (JSON object), or the bundle
written by DevTools.export_all(). Network and log lists are shown
newest first, as in the inspection panel.
"""

from __future__ import annotations

import json
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Optional

import typer
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.markup import escape

from devscope.cli.output import (
    render_log_lines,
    render_network_summary,
    render_network_table,
    render_performance,
)
from devscope.logs.models import LogLevel, LogRecord
from devscope.network.models import NetworkRecord, NetworkStatusFilter, filter_by_status
from devscope.performance.models import PerformanceReport

_NETWORK_LIST = TypeAdapter(list[NetworkRecord])
_LOG_LIST = TypeAdapter(list[LogRecord])


class ExportKind(str, Enum):
    network = "network"
    logs = "logs"
    performance = "performance"


def detect_kind(data: Any) -> ExportKind | None:
    """Guess which recorder produced a decoded export document."""
    if isinstance(data, dict):
        if "current_fps" in data:
            return ExportKind.performance
        return None
    if isinstance(data, list):
        if not data:
            return None
        first = data[0]
        if isinstance(first, dict) and "method" in first:
            return ExportKind.network
        if isinstance(first, dict) and "level" in first:
            return ExportKind.logs
    return None


def _show_network(data: Any, status: NetworkStatusFilter, console: Console) -> None:
    records = list(reversed(_NETWORK_LIST.validate_python(data)))
    render_network_summary(records, console)
    render_network_table(filter_by_status(records, status), console)


def _show_logs(data: Any, level: Optional[LogLevel], console: Console) -> None:
    records = list(reversed(_LOG_LIST.validate_python(data)))
    if level is not None:
        records = [r for r in records if r.level == level]
    render_log_lines(records, console)


def show(
    file: Path = typer.Argument(..., help="Exported JSON file to display"),
    kind: Optional[ExportKind] = typer.Option(
        None, "--kind", "-k", help="Export kind (default: detect from content)"
    ),
    status: NetworkStatusFilter = typer.Option(
        NetworkStatusFilter.all, "--status", help="Network status filter"
    ),
    level: Optional[str] = typer.Option(
        None, "--level", help="Only show log events at this level"
    ),
    as_json: bool = typer.Option(
        False, "--json", help="Re-emit the validated document as JSON"
    ),
) -> None:
    """Display an exported network, log, or performance document."""
    console = Console()

    if not file.exists():
        console.print(f"[bold red]Error:[/bold red] File not found: {file}")
        raise typer.Exit(code=1)

    log_level: Optional[LogLevel] = None
    if level is not None:
        try:
            log_level = LogLevel[level.lower()]
        except KeyError:
            console.print(f"[bold red]Error:[/bold red] Unknown log level '{escape(level)}'")
            raise typer.Exit(code=1)

    try:
        data = json.loads(file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        console.print(f"[bold red]Error:[/bold red] Invalid JSON in {file}: {escape(str(exc))}")
        raise typer.Exit(code=1)

    # A bundle from DevTools.export_all() holds all three sections.
    if isinstance(data, dict) and {"network", "logs", "performance"} <= data.keys():
        sections = [
            (ExportKind.network, data["network"]),
            (ExportKind.logs, data["logs"]),
            (ExportKind.performance, data["performance"]),
        ]
        if kind is not None:
            sections = [s for s in sections if s[0] is kind]
    else:
        detected = kind or detect_kind(data)
        if detected is None:
            console.print(
                "[bold red]Error:[/bold red] Could not detect export kind; "
                "pass --kind network|logs|performance"
            )
            raise typer.Exit(code=1)
        sections = [(detected, data)]

    try:
        if as_json:
            _emit_json(sections)
            return
        for section_kind, section in sections:
            console.print(f"\n[bold cyan]== {section_kind.value} ==[/bold cyan]")
            if section_kind is ExportKind.network:
                _show_network(section, status, console)
            elif section_kind is ExportKind.logs:
                _show_logs(section, log_level, console)
            else:
                render_performance(PerformanceReport.model_validate(section), console)
    except ValidationError as exc:
        console.print(
            f"[bold red]Error:[/bold red] Export does not match the schema: {file}\n"
            f"{escape(str(exc))}"
        )
        raise typer.Exit(code=1)


def _emit_json(sections: list[tuple[ExportKind, Any]]) -> None:
    """Write validated sections as pure JSON to stdout."""
    output: dict[str, Any] = {}
    for section_kind, section in sections:
        if section_kind is ExportKind.network:
            output["network"] = _NETWORK_LIST.dump_python(
                _NETWORK_LIST.validate_python(section), mode="json"
            )
        elif section_kind is ExportKind.logs:
            output["logs"] = _LOG_LIST.dump_python(
                _LOG_LIST.validate_python(section), mode="json"
            )
        else:
            output["performance"] = PerformanceReport.model_validate(section).model_dump(
                mode="json"
            )
    sys.stdout.write(json.dumps(output, indent=2, ensure_ascii=False))
    sys.stdout.write("\n")
