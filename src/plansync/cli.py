"""plansync CLI: change detection for agent-edited plan documents."""

import typer

from plansync import __version__

from .commands import cascade, detect, history_app, init, modifications, snapshot_app, sync
from .logging import configure_logging
from .output import OutputContext, set_output_context


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"plansync {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="plansync",
    help="Detect what changed when an agent rewrites a plan document",
    no_args_is_help=True,
)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v, -vv)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-error output",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format for automation",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
) -> None:
    """plansync - reconcile edited plan documents with stored plans."""
    console = configure_logging(
        verbosity=verbose,
        quiet=quiet,
        no_color=no_color,
    )
    set_output_context(OutputContext(console=console, json_mode=json_output))


app.command()(init)
app.command()(sync)
app.command()(modifications)
app.command()(detect)
app.command()(cascade)
app.add_typer(snapshot_app, name="snapshot")
app.add_typer(history_app, name="history")
