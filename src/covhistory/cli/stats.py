"""Stats CLI command -- summarize the whole history store."""

import json

import typer
from rich.table import Table

from ..exceptions import CovHistoryError
from . import app
from ._common import console, get_tracker


@app.command()
def stats(
    ctx: typer.Context,
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    Show entry counts per project and branch, date range and storage size.
    """
    try:
        statistics = get_tracker(ctx).get_statistics()
    except CovHistoryError as e:
        console.print(f"[red]Error reading history:[/red] {e}")
        raise typer.Exit(1)

    if json_output:
        print(json.dumps(statistics.to_dict(), indent=2))
        return

    console.print()
    console.print("[bold cyan]Coverage history statistics[/bold cyan]")
    console.print(f"  Total entries: {statistics.total_entries}")
    console.print(f"  Storage size:  {statistics.storage_size} bytes")
    if statistics.oldest_entry and statistics.newest_entry:
        console.print(
            f"  Date range:    {statistics.oldest_entry:%Y-%m-%d} to "
            f"{statistics.newest_entry:%Y-%m-%d}"
        )
    if statistics.skipped_files:
        console.print(f"  [yellow]Unreadable files: {statistics.skipped_files}[/yellow]")

    for title, counts in (
        ("Projects", statistics.unique_projects),
        ("Branches", statistics.unique_branches),
    ):
        if not counts:
            continue
        table = Table(title=title, show_lines=False, pad_edge=True)
        table.add_column("Name", style="cyan")
        table.add_column("Entries", justify="right")
        for name, count in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])):
            table.add_row(name, str(count))
        console.print()
        console.print(table)
    console.print()
