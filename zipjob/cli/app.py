"""
Defines the command-line interface for the service using Typer.
"""

import logging
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from zipjob import __version__
from zipjob.exceptions import ZipJobError
from zipjob.storage.config_manager import ConfigManager

from .formatters import print_config, print_validation_table

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            markup=True,
        )
    ],
)

app = typer.Typer(
    name="zipjob",
    help=(
        "An HTTP service that downloads small batches of .pdf and .jpeg files"
        " and packages them into ZIP archives."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "zipjob"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the effective configuration."
    ),
    config_file: Path = typer.Option(  # noqa: B008
        CONFIG_FILE, "--config", "-c", help="Path to the INI configuration file."
    ),
):
    """zipjob service"""
    if version:
        console.print(f"[bold]zipjob[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    elif verbose == 1:
        # -v shows per-item job events without the rest of the debug output.
        logging.getLogger("zipjob.events").setLevel("DEBUG")
    logging.getLogger("zipjob").setLevel(log_level)

    ctx.obj = config_file

    if show_config:
        try:
            config = ConfigManager(config_file).load_config()
        except ZipJobError as e:
            console.print(f"[red]✗ Configuration is invalid: {e}[/red]")
            raise typer.Exit(code=1) from e
        print_config(config_file, config)
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    ctx: typer.Context,
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing config without asking."
    ),
):
    """Write a configuration file with default settings."""
    config_file: Path = ctx.obj
    if (
        config_file.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    ConfigManager(config_file).save_new_config()
    console.print(
        f"\n[bold green]✓ Configuration saved to '{config_file}'[/bold green]"
    )
    console.print("Start the service with: [cyan]zipjob serve[/cyan]")


@app.command()
def validate(ctx: typer.Context):
    """Validate the current configuration."""
    try:
        config = ConfigManager(ctx.obj).load_config()
        print_validation_table(config)
    except ZipJobError as e:
        console.print(f"[red]✗ Configuration is invalid: {e}[/red]")
        raise typer.Exit(code=1) from e


@app.command()
def serve(
    ctx: typer.Context,
    host: str | None = typer.Option(None, "--host", help="Interface to bind."),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to listen on."),
    parallel: int | None = typer.Option(
        None,
        "--parallel",
        "-j",
        help="Maximum number of jobs running at the same time.",
    ),
    output_dir: str | None = typer.Option(
        None, "--output-dir", help="Directory that receives finished archives."
    ),
    staging_dir: str | None = typer.Option(
        None, "--staging-dir", help="Scratch directory for in-flight downloads."
    ),
    json_log_dir: str | None = typer.Option(
        None, "--json-log-dir", help="Write job events as JSON lines to this directory."
    ),
):
    """Run the HTTP service."""
    from zipjob.web.server import run_server

    cli_options = {
        key: value
        for key, value in {
            "host": host,
            "port": port,
            "max_parallel": parallel,
            "output_dir": output_dir,
            "staging_dir": staging_dir,
            "json_log_dir": json_log_dir,
        }.items()
        if value is not None
    }

    try:
        config = ConfigManager(ctx.obj).load_config(cli_options)
    except ZipJobError as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1) from e

    run_server(config)
