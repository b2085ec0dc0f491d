"""Commands that actually invoke ``./miri``."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from miri_ci.cli.common import (
    HOST_OPTION,
    MATRIX_OPTION,
    WORKDIR_OPTION,
    exit_on_error,
    load_config,
    load_table,
)
from miri_ci.runner import MatrixRunner, prepared_config
from miri_ci.targets import plan_for
from miri_ci.utils.io import write_json


def run(
    host: Optional[str] = HOST_OPTION,
    matrix: Optional[Path] = MATRIX_OPTION,
    workdir: Optional[Path] = WORKDIR_OPTION,
    report: Optional[Path] = typer.Option(
        None, "--report", help="Write every executed step to this JSON file on success."
    ),
) -> None:
    """Build Miri, test the host, then every secondary target of the host."""

    runner = MatrixRunner()
    with exit_on_error():
        config = load_config(host, workdir=workdir)
        # Resolve the plan first so an unknown host never starts a build.
        runs = plan_for(config.host_target, load_table(matrix))
        history = runner.run_matrix(config, runs)

    if report is not None:
        write_json(report, {"host": config.host_target, "steps": [step.to_dict() for step in history]})
        typer.echo(f"Step report written to {report}")
    typer.secho(
        f"All {len(runs)} target runs passed ({len(history)} commands).", fg=typer.colors.GREEN
    )


def build(
    host: Optional[str] = HOST_OPTION,
    workdir: Optional[Path] = WORKDIR_OPTION,
) -> None:
    """Only run the build phase."""

    with exit_on_error():
        config = load_config(host, workdir=workdir)
        MatrixRunner().build(config)


def test(
    host: Optional[str] = HOST_OPTION,
    target: Optional[str] = typer.Option(
        None, "--target", help="Foreign target; defaults to $MIRI_TEST_TARGET, else the host."
    ),
    workdir: Optional[Path] = WORKDIR_OPTION,
) -> None:
    """Run the full test suite once, without building first."""

    with exit_on_error():
        config = load_config(host, target=target, workdir=workdir)
        MatrixRunner().run_full(prepared_config(config))


def minimal(
    tests: List[str] = typer.Argument(..., help="Test names to run."),
    host: Optional[str] = HOST_OPTION,
    target: Optional[str] = typer.Option(
        None, "--target", help="Foreign target; defaults to $MIRI_TEST_TARGET."
    ),
    workdir: Optional[Path] = WORKDIR_OPTION,
) -> None:
    """Run a reduced set of tests against a partially supported target."""

    with exit_on_error():
        config = load_config(host, target=target, workdir=workdir)
        MatrixRunner().run_minimal(prepared_config(config), config.test_target, tests)


__all__ = ["build", "minimal", "run", "test"]
