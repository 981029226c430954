"""Cleanup CLI command -- apply the retention policy."""

import typer

from ..exceptions import CovHistoryError
from . import app
from ._common import console, get_tracker


@app.command()
def cleanup(ctx: typer.Context):
    """
    Remove entries older than the retention period or beyond the entry limit.

    Does nothing when auto_cleanup is disabled in the configuration.
    """
    tracker = get_tracker(ctx)
    if not tracker.config.auto_cleanup:
        console.print("[yellow]auto_cleanup is disabled; nothing removed.[/yellow]")
        return

    try:
        removed = tracker.cleanup()
    except CovHistoryError as e:
        console.print(f"[red]Cleanup failed:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]History cleanup complete:[/green] {removed} entries removed")
