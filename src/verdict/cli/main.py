"""Main CLI entry point for Verdict."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from verdict import __version__
from verdict.cli import config, run, suite

console = Console()


def configure_logging(verbose: bool = False) -> None:
    """Route library and script console logs through rich.

    Script ``console`` output stays visible at INFO; ``--verbose`` adds the
    runner's DEBUG messages.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False, markup=False)],
    )
    logging.getLogger("verdict").setLevel(logging.DEBUG if verbose else logging.INFO)


app = typer.Typer(
    name="verdict",
    help="Run API and browser test suites and report their verdicts",
    add_completion=True,
    no_args_is_help=True,
)

app.add_typer(run.app, name="run", help="Test suite execution commands")
app.add_typer(suite.app, name="suite", help="Suite file commands")
app.add_typer(config.app, name="config", help="Configuration commands")


def version_callback(value: bool):
    if value:
        console.print(f"Verdict version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file to use instead of the nearest .verdict.yaml",
        exists=True,
        dir_okay=False,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """Verdict - script-driven API and browser test execution."""
    configure_logging(verbose)
    # Loaded lazily by the commands that need it (see cli.config.get_config)
    ctx.obj = {"config_file": config_file, "config": None}


if __name__ == "__main__":
    app()
