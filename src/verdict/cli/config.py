"""Configuration CLI commands."""

from __future__ import annotations

from pathlib import Path

import typer
import yaml
from rich.console import Console
from rich.syntax import Syntax

from verdict.config.loader import CONFIG_FILENAMES, find_config_file, load_config, save_config
from verdict.config.schema import VerdictConfig
from verdict.errors import ConfigError

console = Console()
app = typer.Typer(no_args_is_help=True)


def get_config(ctx: typer.Context) -> VerdictConfig:
    """Load the effective configuration once per invocation.

    Uses the file given with the root ``--config`` option, if any. A broken
    config file ends the command with exit code 1.
    """
    obj = ctx.ensure_object(dict)
    if obj.get("config") is None:
        try:
            obj["config"] = load_config(obj.get("config_file"))
        except ConfigError as e:
            console.print(f"[red]Configuration error:[/red] {e}")
            raise typer.Exit(1)
    return obj["config"]


@app.command("show")
def show_config(ctx: typer.Context):
    """Print the effective configuration and where it came from."""
    config = get_config(ctx)
    config_file = ctx.obj.get("config_file") or find_config_file()
    console.print(f"[dim]# project config: {config_file or 'defaults'}[/dim]")

    content = yaml.safe_dump(config.model_dump(), default_flow_style=False, sort_keys=False)
    console.print(Syntax(content, "yaml"))


@app.command("init")
def init_config(
    directory: Path = typer.Argument(Path("."), help="Project directory", file_okay=False),
    full: bool = typer.Option(False, "--full", help="Write every setting, not only the version"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
):
    """Create a project config file."""
    path = directory / CONFIG_FILENAMES[0]
    if path.exists() and not force:
        console.print(f"[red]Config file already exists:[/red] {path} (use --force to overwrite)")
        raise typer.Exit(1)

    if full:
        save_config(VerdictConfig.get_default(), path, include_defaults=True)
    else:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("version: 1\n", encoding="utf-8")
    console.print(f"[green]✓ Created[/green] {path}")
