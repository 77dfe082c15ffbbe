"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from zipjob.models.config import MAX_ITEMS, ServiceConfig
from zipjob.utils.formatting import format_size


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigurationError": [
            "• Check the values in your configuration file.",
            "• Run `zipjob init --force` to write a fresh default config.",
            "• Run `zipjob validate` to see which setting is rejected.",
        ],
        "PermissionError": [
            "• The staging or output directory is not writable.",
            "• Point `staging_dir` and `output_dir` at writable locations.",
        ],
        "OSError": [
            "• The port may already be in use. Try `--port`.",
            "• Check that the staging and output directories are accessible.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config: ServiceConfig):
    """Displays the current configuration."""
    console = Console()
    content = ""
    for key in sorted(ServiceConfig.get_ini_keys()):
        content += f"{key} = {getattr(config, key)}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_validation_table(config: ServiceConfig):
    """Displays a summary of the current settings."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Listen Address:", f"[green]{config.host}:{config.port}[/green]")
    table.add_row("Max Parallel Jobs:", str(config.max_parallel))
    table.add_row("Items Per Job:", str(MAX_ITEMS))
    table.add_row("Max File Size:", format_size(config.max_file_bytes))
    table.add_row("Fetch Timeout:", f"{config.fetch_timeout:g}s")
    table.add_row("Fetch Attempts:", str(config.fetch_attempts))
    table.add_row("Staging Directory:", f"[dim]{config.staging_dir}[/dim]")
    table.add_row("Output Directory:", f"[dim]{config.output_dir}[/dim]")
    table.add_row("Files Prefix:", f"[dim]{config.files_prefix}[/dim]")
    table.add_row(
        "JSON Event Log:",
        f"✓ {config.json_log_dir}" if config.json_log_dir else "✗ Disabled",
    )

    console.print(
        Panel(
            table,
            title="[bold green]✓ Validated Settings[/bold green]",
            border_style="green",
        )
    )
