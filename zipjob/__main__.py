"""
Main entry point for the zipjob service.
This module handles top-level setup, exception handling, and CLI invocation.
"""

import asyncio
import logging
import sys

import typer
from rich.console import Console

from zipjob.cli.app import app
from zipjob.cli.formatters import format_error_with_suggestions
from zipjob.exceptions import ZipJobError


def main() -> None:
    """Main entry point function."""
    log = logging.getLogger("zipjob")
    console = Console()

    try:
        app()
    except (typer.Exit, typer.Abort):
        pass
    except (KeyboardInterrupt, asyncio.CancelledError):
        console.print("\n[yellow]Service stopped.[/yellow]")
        sys.exit(0)
    except ZipJobError as e:
        console.print(f"\n{format_error_with_suggestions(e)}")
        sys.exit(1)
    except Exception as e:
        console.print(f"\n{format_error_with_suggestions(e, {'type': 'Unexpected'})}")
        log.debug("Full traceback:", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
