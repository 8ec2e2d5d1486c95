"""Rich terminal output for exported recorder data.

Renders network calls, log events, and performance rollups as tables
and colored lines for the devscope CLI.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from devscope.logs.models import LogRecord
    from devscope.network.models import NetworkRecord
    from devscope.performance.models import PerformanceReport


# Log level -> Rich markup style
_LEVEL_STYLES: dict[str, str] = {
    "VERBOSE": "dim",
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "bold red",
}

# FPS status -> Rich markup style
_FPS_STYLES: dict[str, str] = {
    "good": "bold green",
    "ok": "bold yellow",
    "bad": "bold red",
}


def _status_style(record: NetworkRecord) -> str:
    if record.is_pending:
        return "yellow"
    if record.is_error:
        return "red"
    if record.is_success:
        return "green"
    return "white"


def render_network_summary(records: list[NetworkRecord], console: Console) -> None:
    """Render total/success/error/pending counts in a key-value table."""
    table = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    table.add_column("Key", style="bold")
    table.add_column("Value")

    table.add_row("Total", str(len(records)))
    table.add_row("Success", f"[green]{sum(r.is_success for r in records)}[/green]")
    table.add_row("Error", f"[red]{sum(r.is_error for r in records)}[/red]")
    table.add_row("Pending", f"[yellow]{sum(r.is_pending for r in records)}[/yellow]")

    console.print()
    console.print(table)


def render_network_table(records: list[NetworkRecord], console: Console) -> None:
    """Render one row per network call, in the order given."""
    table = Table(box=box.SIMPLE_HEAD)
    table.add_column("Time", no_wrap=True)
    table.add_column("Method", style="bold", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Host")
    table.add_column("Path")
    table.add_column("Duration", justify="right")
    table.add_column("Req", justify="right")
    table.add_column("Res", justify="right")

    for record in records:
        style = _status_style(record)
        duration = (
            f"{record.duration.total_seconds() * 1000:.0f}ms"
            if record.duration is not None
            else "-"
        )
        table.add_row(
            record.timestamp.strftime("%H:%M:%S"),
            record.method,
            f"[{style}]{record.status_text}[/{style}]",
            escape(record.host),
            escape(record.path),
            duration,
            record.formatted_request_size,
            record.formatted_response_size,
        )

    console.print(table)


def render_log_lines(records: list[LogRecord], console: Console) -> None:
    """Render each log event as a colored line, with error details indented."""
    for record in records:
        label = record.level.label
        style = _LEVEL_STYLES.get(label, "white")
        tag = f" [bold]\\[{escape(record.tag)}][/bold]" if record.tag else ""
        console.print(
            f"[dim]{record.formatted_time}[/dim] [{style}]{label:<7}[/{style}]"
            f"{tag} {escape(record.message)}"
        )
        if record.error is not None:
            console.print(f"    [red]Error:[/red] {escape(record.error)}")
        if record.stack_trace is not None:
            for line in record.stack_trace.rstrip().splitlines():
                console.print(f"    [dim]{escape(line)}[/dim]")


def render_performance(report: PerformanceReport, console: Console) -> None:
    """Render current aggregates followed by the snapshot history."""
    table = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    table.add_column("Key", style="bold")
    table.add_column("Value")

    style = _FPS_STYLES.get(report.fps_status.value, "white")
    table.add_row("FPS", f"[{style}]{report.current_fps:.1f} ({report.fps_status.value})[/{style}]")
    table.add_row(
        "Frame time",
        f"build={report.avg_build_time.total_seconds() * 1000:.2f}ms "
        f"raster={report.avg_raster_time.total_seconds() * 1000:.2f}ms",
    )
    table.add_row(
        "Jank",
        f"{report.jank_frame_count} frames ({report.jank_percentage:.1f}% of window)",
    )
    console.print()
    console.print(table)

    if not report.snapshots:
        return

    history = Table(box=box.SIMPLE_HEAD)
    history.add_column("Time")
    history.add_column("FPS", justify="right")
    history.add_column("Frames", justify="right")
    history.add_column("Build", justify="right")
    history.add_column("Raster", justify="right")
    history.add_column("Memory", justify="right")
    history.add_column("Rebuilds", justify="right")
    for snap in report.snapshots:
        history.add_row(
            snap.timestamp.strftime("%H:%M:%S"),
            f"{snap.fps:.1f}",
            str(snap.frame_count),
            f"{snap.avg_build_time.total_seconds() * 1000:.2f}ms",
            f"{snap.avg_raster_time.total_seconds() * 1000:.2f}ms",
            f"{snap.memory_usage_mb}MB",
            str(snap.rebuild_count),
        )
    console.print(history)
