"""Sequential execution of external commands with fail-fast semantics."""
from __future__ import annotations

import shlex
import subprocess
import time
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import typer

from miri_ci.config import RunConfig
from miri_ci.errors import StepFailed

__all__ = ["CommandRunner", "StepRecord", "COMMAND_NOT_FOUND"]

# Exit status a shell reports for a missing or non-executable command.
COMMAND_NOT_FOUND = 127


@dataclass
class StepRecord:
    """Outcome of one external command."""

    phase: str
    target: Optional[str]
    argv: List[str]
    overrides: Dict[str, Optional[str]] = field(default_factory=dict)
    exit_code: int = 0
    duration_s: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class CommandRunner:
    """Spawn one process at a time and stop at the first non-zero exit."""

    def __init__(self, echo: Callable[[str], None] = typer.echo) -> None:
        self.echo = echo
        self.history: List[StepRecord] = []
        self._phase = ""

    @contextmanager
    def group(self, title: str) -> Iterator[None]:
        """Wrap a log section in GitHub Actions group markers."""

        previous, self._phase = self._phase, title
        self.echo(f"::group::{title}")
        try:
            yield
        finally:
            self.echo("::endgroup::")
            self._phase = previous

    def run(
        self,
        argv: Sequence[str],
        config: RunConfig,
        overrides: Optional[Mapping[str, Optional[str]]] = None,
    ) -> StepRecord:
        """Run ``argv`` in ``config.workdir`` or raise :class:`StepFailed`."""

        overrides = dict(overrides or {})
        self.echo(_trace(argv, overrides))
        started = time.monotonic()
        try:
            exit_code = self._spawn(list(argv), config.command_env(overrides), str(config.workdir))
        except OSError as exc:
            self.echo(f"{argv[0]}: {exc.strerror or exc}")
            exit_code = COMMAND_NOT_FOUND
        return self._record(argv, config, overrides, exit_code, started)

    def capture(self, argv: Sequence[str], config: RunConfig) -> str:
        """Run ``argv`` and return its stripped stdout."""

        self.echo(_trace(argv, {}))
        started = time.monotonic()
        try:
            exit_code, stdout = self._spawn_capture(
                list(argv), config.command_env(), str(config.workdir)
            )
        except OSError as exc:
            self.echo(f"{argv[0]}: {exc.strerror or exc}")
            exit_code, stdout = COMMAND_NOT_FOUND, ""
        self._record(argv, config, {}, exit_code, started)
        return stdout.strip()

    def _record(
        self,
        argv: Sequence[str],
        config: RunConfig,
        overrides: Dict[str, Optional[str]],
        exit_code: int,
        started: float,
    ) -> StepRecord:
        record = StepRecord(
            phase=self._phase,
            target=config.test_target,
            argv=list(argv),
            overrides=overrides,
            exit_code=exit_code,
            duration_s=round(time.monotonic() - started, 3),
        )
        self.history.append(record)
        if exit_code != 0:
            raise StepFailed(argv, exit_code)
        return record

    def _spawn(self, argv: List[str], env: Dict[str, str], cwd: str) -> int:
        return subprocess.run(argv, env=env, cwd=cwd, check=False).returncode

    def _spawn_capture(self, argv: List[str], env: Dict[str, str], cwd: str) -> Tuple[int, str]:
        completed = subprocess.run(
            argv, env=env, cwd=cwd, check=False, stdout=subprocess.PIPE, text=True
        )
        return completed.returncode, completed.stdout or ""


def _trace(argv: Sequence[str], overrides: Mapping[str, Optional[str]]) -> str:
    prefix = " ".join(
        f"{name}={shlex.quote(value)}" for name, value in overrides.items() if value is not None
    )
    command = shlex.join(argv)
    return f"+ {prefix} {command}" if prefix else f"+ {command}"
