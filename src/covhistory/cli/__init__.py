"""CLI entry point. Importing this package registers every subcommand."""

import typer

app = typer.Typer(
    name="covhistory",
    help="covhistory - Coverage history and trend analysis",
    add_completion=False,
    rich_markup_mode="rich",
)


# Import subcommands to register them
from .main import main as _main_callback  # noqa: F401, E402
from .record import record as _record  # noqa: F401, E402
from .latest import latest as _latest  # noqa: F401, E402
from .trend import trend as _trend  # noqa: F401, E402
from .stats import stats as _stats  # noqa: F401, E402
from .cleanup import cleanup as _cleanup  # noqa: F401, E402
