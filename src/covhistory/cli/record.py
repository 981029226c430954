"""Record CLI command -- append a coverage snapshot to history."""

import json
import platform
from pathlib import Path
from typing import Dict, List, Optional

import typer

from ..coverage.models import CoverageData
from ..exceptions import CovHistoryError
from ..history.models import BuildInfo
from . import app
from ._common import console, get_tracker


def _parse_metadata(pairs: List[str]) -> Dict[str, str]:
    metadata: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected KEY=VALUE, got '{pair}'", param_hint="--meta")
        metadata[key.strip()] = value.strip()
    return metadata


def _load_coverage(path: Path) -> CoverageData:
    try:
        return CoverageData.from_dict(json.loads(path.read_text(encoding="utf-8")))
    except (OSError, ValueError, TypeError) as e:
        console.print(f"[red]Cannot read coverage file {path}:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def record(
    ctx: typer.Context,
    coverage_file: Path = typer.Argument(
        ...,
        help="Coverage snapshot (JSON) produced by the coverage parser",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    branch: str = typer.Option(
        "main", "--branch", "-b", envvar="GITHUB_REF_NAME", help="Branch name"
    ),
    commit: str = typer.Option(
        "", "--commit", envvar="GITHUB_SHA", help="Commit SHA (auto-generated when empty)"
    ),
    commit_url: str = typer.Option("", "--commit-url", help="Link to the commit"),
    project: Optional[str] = typer.Option(
        None, "--project", envvar="GITHUB_REPOSITORY", help="Project identifier (owner/repo)"
    ),
    meta: Optional[List[str]] = typer.Option(
        None, "--meta", "-m", help="Extra metadata as KEY=VALUE (repeatable)"
    ),
    build_number: str = typer.Option("", "--build-number", envvar="GITHUB_RUN_NUMBER"),
    pull_request: str = typer.Option("", "--pull-request"),
    workflow_id: str = typer.Option("", "--workflow-id", envvar="GITHUB_RUN_ID"),
    json_output: bool = typer.Option(False, "--json", help="Print the stored entry as JSON"),
):
    """
    Append one coverage snapshot to the history store.

    [bold cyan]Examples:[/bold cyan]

      covhistory record coverage.json

      covhistory record coverage.json --branch develop --commit abc1234 --meta team=core
    """
    coverage = _load_coverage(coverage_file)
    metadata = _parse_metadata(meta or [])
    if project:
        metadata.setdefault("project", project)

    build_info = BuildInfo(
        platform=platform.system().lower(),
        architecture=platform.machine(),
        build_number=build_number,
        pull_request=pull_request,
        workflow_id=workflow_id,
    )

    try:
        entry = get_tracker(ctx).record(
            coverage,
            branch=branch,
            commit_sha=commit,
            commit_url=commit_url,
            metadata=metadata,
            build_info=build_info,
        )
    except CovHistoryError as e:
        console.print(f"[red]Failed to record coverage:[/red] {e}")
        raise typer.Exit(1)

    if json_output:
        print(json.dumps(entry.to_dict(), indent=2))
        return

    console.print("[green]Coverage recorded[/green]")
    console.print(f"  Branch:   {entry.branch}")
    console.print(f"  Commit:   {entry.commit_sha}")
    console.print(
        f"  Coverage: {coverage.percentage:.2f}% "
        f"({coverage.covered_lines}/{coverage.total_lines} lines)"
    )
