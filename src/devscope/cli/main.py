"""DevScope CLI entry point."""

import typer

from devscope import __version__
from devscope.cli.config_cmd import config
from devscope.cli.show_cmd import show

app = typer.Typer(
    name="devscope",
    help="Inspect exported network, log, and performance captures",
    no_args_is_help=True,
)

# Register subcommands
app.command()(config)
app.command()(show)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"devscope {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Inspect exported network, log, and performance captures."""
