"""Root CLI entry point for miri-ci."""
from __future__ import annotations

import typer

from . import plan as plan_cli
from . import run as run_cli

app = typer.Typer(add_completion=False, help="Miri target-matrix CI driver")
app.command("run", help="Build and test the full target matrix")(run_cli.run)
app.command("build", help="Install, check and build Miri")(run_cli.build)
app.command("test", help="Run the full test suite for one target")(run_cli.test)
app.command("minimal", help="Run selected tests for a partially supported target")(run_cli.minimal)
app.command("plan", help="Show the targets a run would test")(plan_cli.plan)


def run() -> None:
    """Execute the root CLI."""

    app()


__all__ = ["app", "run"]
