"""Global options shared by every subcommand."""

from pathlib import Path
from typing import Optional

import typer

from ..config import load_config
from ..exceptions import CovHistoryError
from ..logging_config import setup_logging
from . import app
from ._common import console


@app.callback(invoke_without_command=True, no_args_is_help=True)
def main(
    ctx: typer.Context,
    storage_path: Optional[Path] = typer.Option(
        None,
        "-s",
        "--storage-path",
        help="Directory holding history entries (default: .github/coverage/history)",
        file_okay=False,
        dir_okay=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only log errors",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
    ),
):
    """
    Record coverage snapshots and analyze how coverage moves over time.

    [bold cyan]Examples:[/bold cyan]

      covhistory record coverage.json --branch main --commit $GITHUB_SHA

      covhistory trend --days 30

      covhistory --storage-path .coverage-history stats --json
    """
    if version:
        from .. import __version__

        console.print(f"[bold cyan]covhistory[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit(0)

    setup_logging(verbose=verbose, quiet=quiet)

    try:
        resolved = load_config(
            config_file=config,
            storage_path=str(storage_path) if storage_path is not None else None,
        )
    except CovHistoryError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(2)

    ctx.ensure_object(dict)
    ctx.obj["config"] = resolved
