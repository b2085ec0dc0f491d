"""Shared option handling and error reporting for CLI commands."""
from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple

import typer

from miri_ci.config import RunConfig
from miri_ci.errors import ConfigurationError, StepFailed
from miri_ci.targets import MATRIX, HostTarget, TargetEntry, load_matrix


@contextmanager
def exit_on_error() -> Iterator[None]:
    """Translate driver errors into a red message and the matching exit code."""

    try:
        yield
    except ConfigurationError as exc:
        typer.secho(f"[ERROR] {exc.message}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=exc.exit_code) from exc
    except StepFailed as exc:
        typer.secho(f"[ERROR] {exc.message}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=exc.exit_code) from exc


def load_config(
    host: Optional[str],
    target: Optional[str] = None,
    workdir: Optional[Path] = None,
) -> RunConfig:
    """Build the run configuration, rejecting hosts missing from the dispatch table."""

    config = RunConfig.from_env(host_target=host, test_target=target, workdir=workdir)
    HostTarget.parse(config.host_target)
    return config


def load_table(matrix: Optional[Path]) -> Dict[HostTarget, Tuple[TargetEntry, ...]]:
    if matrix is None:
        return dict(MATRIX)
    return load_matrix(matrix)


HOST_OPTION = typer.Option(
    None, "--host", help="Host triple; defaults to $HOST_TARGET or `rustc -vV`."
)
MATRIX_OPTION = typer.Option(
    None, "--matrix", help="YAML file overriding the secondary targets of one or more hosts."
)
WORKDIR_OPTION = typer.Option(
    None, "--workdir", help="Miri checkout to run in; defaults to the current directory."
)
