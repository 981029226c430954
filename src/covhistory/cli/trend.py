"""Trend CLI command -- show how coverage changed over time."""

import json

import typer
from rich.table import Table

from ..exceptions import CovHistoryError
from ..history.models import PeriodAnalysis
from . import app
from ._common import console, format_ts, get_tracker, trend_markup


def _sparkline(values: list) -> str:
    """Generate an ASCII sparkline from a list of numeric values."""
    if not values:
        return ""
    blocks = " ▁▂▃▄▅▆▇█"
    mn, mx = min(values), max(values)
    if mx == mn:
        return blocks[4] * len(values)
    return "".join(
        blocks[min(8, int((v - mn) / (mx - mn) * 8))] for v in values
    )


def _period_row(label: str, period: PeriodAnalysis) -> list:
    if period.data_points < 2:
        return [label, str(period.data_points), "-", "-", "-", "[dim]not enough data[/dim]"]
    color = "green" if period.change > 0 else "red" if period.change < 0 else "dim"
    return [
        label,
        str(period.data_points),
        f"{period.start_coverage:.2f}%",
        f"{period.end_coverage:.2f}%",
        f"[{color}]{period.change:+.2f}[/{color}]",
        trend_markup(period.direction),
    ]


@app.command()
def trend(
    ctx: typer.Context,
    branch: str = typer.Option("main", "--branch", "-b", help="Branch name"),
    days: int = typer.Option(
        30, "--days", "-d", help="Only include entries from the last N days", min=1
    ),
    max_points: int = typer.Option(
        100,
        "--max-points",
        "-n",
        help="Maximum number of recent entries to include",
        min=1,
        max=10000,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in machine-readable JSON format",
    ),
):
    """
    Show coverage trend, volatility, momentum and prediction for a branch.

    [bold cyan]Examples:[/bold cyan]

      covhistory trend

      covhistory trend --branch develop --days 90

      covhistory trend --json
    """
    try:
        data = get_tracker(ctx).get_trend(branch=branch, days=days, max_points=max_points)
    except CovHistoryError as e:
        console.print(f"[red]Error reading history:[/red] {e}")
        raise typer.Exit(1)

    # ── JSON output ───────────────────────────────────────────────────
    if json_output:
        print(json.dumps(data.to_dict(), indent=2))
        return

    if data.is_empty:
        console.print(
            f"[yellow]No coverage history for[/yellow] {branch} "
            f"[yellow]in the last {days} days.[/yellow]"
        )
        return

    # ── Rich output ───────────────────────────────────────────────────
    summary = data.summary
    analysis = data.analysis
    values = [e.percentage for e in reversed(data.entries)]

    console.print()
    console.print(
        f"[bold cyan]Coverage trend:[/bold cyan] {branch} "
        f"-- last {days} days ({summary.total_entries} entries)"
    )
    console.print(f"  {_sparkline(values)}")
    console.print()
    console.print(
        f"  Average {summary.average_percentage:.2f}%  "
        f"Min {summary.min_percentage:.2f}%  "
        f"Max {summary.max_percentage:.2f}%  "
        f"Trend {trend_markup(summary.current_trend)}"
    )
    console.print(
        f"  From {format_ts(summary.date_range.start)} to {format_ts(summary.date_range.end)}"
    )
    console.print(
        f"  Volatility {analysis.volatility:.2f}  Momentum {analysis.momentum:+.2f}"
    )
    console.print()

    table = Table(show_header=True, show_lines=False, pad_edge=True)
    table.add_column("Window")
    table.add_column("Points", justify="right")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("Direction")
    for label, period in (
        ("Short (7d)", analysis.short_term_trend),
        ("Medium (30d)", analysis.medium_term_trend),
        ("Long (90d)", analysis.long_term_trend),
    ):
        if period is not None:
            table.add_row(*_period_row(label, period))
    console.print(table)

    prediction = analysis.prediction
    if prediction is not None:
        console.print()
        console.print("[bold]Prediction[/bold]")
        for label, point in (("Next week", prediction.next_week), ("Next month", prediction.next_month)):
            if point is not None:
                console.print(
                    f"  {label}: {point.percentage:.2f}% "
                    f"({point.range.min:.2f}-{point.range.max:.2f})"
                )
        console.print(f"  Confidence: {prediction.confidence:.1f}%")
    console.print()
