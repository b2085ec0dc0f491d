"""Show the resolved target matrix without running anything."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from miri_ci.cli.common import HOST_OPTION, MATRIX_OPTION, exit_on_error, load_config, load_table
from miri_ci.targets import plan_for
from miri_ci.utils.io import write_json


def plan(
    host: Optional[str] = HOST_OPTION,
    matrix: Optional[Path] = MATRIX_OPTION,
    json_path: Optional[Path] = typer.Option(
        None, "--json", help="Also write the plan to this JSON file."
    ),
) -> None:
    """Print the ordered list of targets the CI run would test."""

    with exit_on_error():
        config = load_config(host)
        runs = plan_for(config.host_target, load_table(matrix))

    typer.secho(f"Host {config.host_target}: {len(runs)} test runs", fg=typer.colors.GREEN)
    for index, planned in enumerate(runs, start=1):
        typer.echo(f"{index:>2}. {planned.describe()}")

    if json_path is not None:
        write_json(
            json_path,
            {"host": config.host_target, "runs": [planned.to_dict() for planned in runs]},
        )
        typer.echo(f"Plan written to {json_path}")


__all__ = ["plan"]
