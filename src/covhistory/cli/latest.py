"""Latest CLI command -- show the newest entry on a branch."""

import json

import typer

from ..exceptions import CovHistoryError, NoEntriesFoundError
from . import app
from ._common import console, format_ts, get_tracker


@app.command()
def latest(
    ctx: typer.Context,
    branch: str = typer.Option("main", "--branch", "-b", help="Branch name"),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    Show the most recent coverage entry for a branch (last 7 days).
    """
    try:
        entry = get_tracker(ctx).get_latest_entry(branch)
    except NoEntriesFoundError:
        console.print(f"[yellow]No entries for branch[/yellow] {branch} in the last 7 days.")
        raise typer.Exit(1)
    except CovHistoryError as e:
        console.print(f"[red]Error reading history:[/red] {e}")
        raise typer.Exit(1)

    if json_output:
        print(json.dumps(entry.to_dict(), indent=2))
        return

    cov = entry.coverage
    console.print()
    console.print("[bold cyan]Latest coverage entry[/bold cyan]")
    console.print(f"  Branch:    {entry.branch}")
    console.print(f"  Commit:    {entry.commit_sha}")
    console.print(f"  Timestamp: {format_ts(entry.timestamp)}")
    console.print(
        f"  Coverage:  [bold]{cov.percentage:.2f}%[/bold] "
        f"({cov.covered_lines}/{cov.total_lines} lines)"
    )

    if entry.metadata:
        console.print()
        console.print("[bold]Metadata[/bold]")
        for key, value in sorted(entry.metadata.items()):
            console.print(f"  {key}: {value}")
    console.print()
