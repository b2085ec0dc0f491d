"""Immutable run configuration threaded through every CI phase."""
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

from miri_ci.errors import ConfigurationError
from miri_ci.utils.env import detect_host_target

__all__ = ["RunConfig", "DEFAULT_SEEDS"]

DEFAULT_SEEDS = 64

# Environment variables read when building a configuration.
HOST_TARGET_VAR = "HOST_TARGET"
TEST_TARGET_VAR = "MIRI_TEST_TARGET"
SEEDS_VAR = "MIRI_SEEDS"
FLAGS_VAR = "MIRIFLAGS"
NO_STD_VAR = "MIRI_NO_STD"


@dataclass(frozen=True)
class RunConfig:
    """Everything an external invocation needs to know about the current run.

    ``environ`` is the inherited environment snapshot and ``env`` the overrides
    layered on top of it for every command. Neither is ever written back to
    :data:`os.environ`.
    """

    host_target: str
    test_target: Optional[str] = None
    seeds: int = DEFAULT_SEEDS
    miriflags: str = ""
    no_std: bool = False
    workdir: Path = field(default_factory=Path.cwd)
    environ: Mapping[str, str] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        *,
        host_target: Optional[str] = None,
        test_target: Optional[str] = None,
        workdir: Optional[Path | str] = None,
    ) -> "RunConfig":
        """Build a configuration from ``environ`` (defaults to :data:`os.environ`)."""

        source: Dict[str, str] = dict(os.environ if environ is None else environ)

        host = host_target or source.get(HOST_TARGET_VAR) or detect_host_target()
        if not host:
            raise ConfigurationError(
                f"{HOST_TARGET_VAR} is not set and the host triple could not be read from 'rustc -vV'"
            )

        seeds_raw = source.get(SEEDS_VAR, "").strip()
        try:
            seeds = int(seeds_raw) if seeds_raw else DEFAULT_SEEDS
        except ValueError as exc:
            raise ConfigurationError(f"{SEEDS_VAR} must be an integer, got {seeds_raw!r}") from exc
        if seeds < 1:
            raise ConfigurationError(f"{SEEDS_VAR} must be positive, got {seeds}")

        # Re-exported per command from the config fields instead.
        foreign = source.pop(TEST_TARGET_VAR, "").strip()
        miriflags = source.pop(FLAGS_VAR, "").strip()
        no_std = source.pop(NO_STD_VAR, "").strip() not in ("", "0")

        return cls(
            host_target=host,
            test_target=test_target or foreign or None,
            seeds=seeds,
            miriflags=miriflags,
            no_std=no_std,
            workdir=Path(workdir) if workdir else Path.cwd(),
            environ=source,
        )

    def with_env(self, **overrides: str) -> "RunConfig":
        """Return a copy whose command environment includes ``overrides``."""

        merged = dict(self.env)
        merged.update(overrides)
        return replace(self, env=merged)

    def for_target(self, target: Optional[str], *, no_std: Optional[bool] = None) -> "RunConfig":
        """Return a copy aimed at ``target``; ``no_std`` is kept unless given."""

        return replace(self, test_target=target, no_std=self.no_std if no_std is None else no_std)

    @property
    def is_host_run(self) -> bool:
        return self.test_target is None

    def command_env(self, overrides: Optional[Mapping[str, Optional[str]]] = None) -> Dict[str, str]:
        """Return the full environment for one external command.

        ``overrides`` mapping a name to ``None`` removes that variable.
        """

        merged = dict(self.environ)
        merged.update(self.env)
        if self.test_target:
            merged[TEST_TARGET_VAR] = self.test_target
        if self.miriflags:
            merged[FLAGS_VAR] = self.miriflags
        if self.no_std:
            merged[NO_STD_VAR] = "1"
        for name, value in (overrides or {}).items():
            if value is None:
                merged.pop(name, None)
            else:
                merged[name] = value
        return merged
