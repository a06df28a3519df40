"""Command-line entry point."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from kong_api_controller import __version__
from kong_api_controller.cli.commands import check, run
from kong_api_controller.logging.config import configure_logging

app = typer.Typer(
    name="kong-api-controller",
    help="Keep Kong API objects and plugins in sync with Kubernetes definitions.",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"kong-api-controller version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Print the installed version.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at INFO on the console."),
    debug: bool = typer.Option(False, "--debug", help="Log at DEBUG, with locals in tracebacks."),
    json_output: bool = typer.Option(False, "--json", help="Emit logs as JSON lines."),
    log_file: Path | None = typer.Option(
        None,
        "--log-file",
        help="Also write JSON logs to this rotating file.",
    ),
) -> None:
    """Reconcile Kong gateway routes and plugins from cluster definitions."""
    configure_logging(verbose=verbose, debug=debug, json_output=json_output, log_file=log_file)


app.command()(run.run)
app.command()(check.check)


if __name__ == "__main__":
    app()
