"""Shared CLI helpers."""

from datetime import datetime
from typing import Optional

import typer
from rich.console import Console

from ..config import HistoryConfig
from ..history import Tracker

console = Console()


def get_tracker(ctx: typer.Context) -> Tracker:
    """Tracker built from the configuration resolved by the main callback."""
    config: HistoryConfig = ctx.obj["config"]
    return Tracker(config)


def format_ts(value: Optional[datetime]) -> str:
    """Short UTC timestamp for tables."""
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M:%S")


def trend_markup(direction: str) -> str:
    """Colored arrow for a trend direction."""
    if direction == "up":
        return "[green]↑ up[/green]"
    if direction == "down":
        return "[red]↓ down[/red]"
    if direction == "stable":
        return "[dim]→ stable[/dim]"
    return "-"
