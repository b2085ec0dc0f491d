"""Static dispatch table mapping each supported host to its secondary targets."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from miri_ci.errors import ConfigurationError, UnknownHostTarget
from miri_ci.utils.validate import load_matrix_document

__all__ = [
    "HostTarget",
    "RunMode",
    "TargetEntry",
    "PlannedRun",
    "MATRIX",
    "plan_for",
    "load_matrix",
]


class HostTarget(str, Enum):
    """Host triples the CI matrix knows how to drive."""

    LINUX_X86_64 = "x86_64-unknown-linux-gnu"
    DARWIN_X86_64 = "x86_64-apple-darwin"
    WINDOWS_MSVC_I686 = "i686-pc-windows-msvc"

    @classmethod
    def parse(cls, value: str) -> "HostTarget":
        try:
            return cls(value)
        except ValueError as exc:
            raise UnknownHostTarget(value) from exc


class RunMode(str, Enum):
    FULL = "full"
    MINIMAL = "minimal"


@dataclass(frozen=True)
class TargetEntry:
    """A secondary target together with how it should be exercised."""

    target: str
    mode: RunMode = RunMode.FULL
    tests: Tuple[str, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.mode is RunMode.MINIMAL and not self.tests:
            raise ConfigurationError(f"Minimal entry for '{self.target}' needs at least one test name")
        if self.mode is RunMode.FULL and self.tests:
            raise ConfigurationError(f"Full entry for '{self.target}' cannot restrict test names")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target,
            "mode": self.mode.value,
            "tests": list(self.tests),
            "env": dict(self.env),
        }


@dataclass(frozen=True)
class PlannedRun:
    """One step of the resolved test phase; ``target`` is ``None`` for the host."""

    target: Optional[str]
    mode: RunMode = RunMode.FULL
    tests: Tuple[str, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_host(self) -> bool:
        return self.target is None

    def describe(self) -> str:
        name = self.target or "host"
        if self.mode is RunMode.MINIMAL:
            return f"{name} [minimal: {' '.join(self.tests)}]"
        return f"{name} [full]"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target,
            "mode": self.mode.value,
            "tests": list(self.tests),
            "env": dict(self.env),
        }


def _full(target: str) -> TargetEntry:
    return TargetEntry(target)


def _minimal(target: str, *tests: str, **env: str) -> TargetEntry:
    return TargetEntry(target, RunMode.MINIMAL, tuple(tests), dict(env))


# Targets with partial platform support only run a handful of tests.
_FREEBSD_TESTS = (
    "hello",
    "integer",
    "vec",
    "panic/panic",
    "concurrency/simple",
    "pthread-threadname",
    "libc-getentropy",
    "libc-getrandom",
    "libc-misc",
    "libc-fs",
    "atomic",
    "env",
    "align",
    "num_cpus",
)
_WASM_TESTS = ("no_std", "integer", "strings", "wasm")

MATRIX: Dict[HostTarget, Tuple[TargetEntry, ...]] = {
    # Fully cover all tier 1 targets.
    HostTarget.LINUX_X86_64: (
        _full("i686-unknown-linux-gnu"),
        _full("aarch64-unknown-linux-gnu"),
        _full("aarch64-apple-darwin"),
        _full("i686-pc-windows-gnu"),
        _full("x86_64-pc-windows-gnu"),
        _full("arm-unknown-linux-gnueabi"),
        _minimal("x86_64-unknown-freebsd", *_FREEBSD_TESTS),
        _minimal("i686-unknown-freebsd", *_FREEBSD_TESTS),
        _minimal("aarch64-linux-android", "hello", "integer", "vec", "panic/panic"),
        _minimal("wasm32-wasi", *_WASM_TESTS),
        _minimal("wasm32-unknown-unknown", *_WASM_TESTS),
        _minimal("thumbv7em-none-eabihf", "no_std"),
        # JSON target file
        _minimal("tests/avr.json", "no_std", MIRI_NO_STD="1"),
    ),
    HostTarget.DARWIN_X86_64: (
        _full("s390x-unknown-linux-gnu"),  # big-endian
        _full("x86_64-pc-windows-msvc"),
    ),
    HostTarget.WINDOWS_MSVC_I686: (
        _full("x86_64-unknown-linux-gnu"),
    ),
}


def plan_for(
    host: str | HostTarget,
    matrix: Optional[Mapping[HostTarget, Tuple[TargetEntry, ...]]] = None,
) -> List[PlannedRun]:
    """Return the ordered test plan for ``host``: the host itself, then its secondaries."""

    host_target = host if isinstance(host, HostTarget) else HostTarget.parse(host)
    table = MATRIX if matrix is None else matrix
    if host_target not in table:
        raise UnknownHostTarget(host_target.value)

    plan = [PlannedRun(target=None)]
    for entry in table[host_target]:
        plan.append(PlannedRun(entry.target, entry.mode, entry.tests, dict(entry.env)))
    return plan


def load_matrix(path: str | Path) -> Dict[HostTarget, Tuple[TargetEntry, ...]]:
    """Load a YAML override file on top of :data:`MATRIX`.

    Hosts listed in the file replace their built-in secondary list; other
    hosts keep the defaults.
    """

    document = load_matrix_document(path)
    table = dict(MATRIX)
    for host_name, entries in (document.get("hosts") or {}).items():
        host_target = HostTarget.parse(host_name)
        table[host_target] = tuple(_entry_from_dict(item) for item in entries or [])
    return table


def _entry_from_dict(item: Mapping[str, Any]) -> TargetEntry:
    mode = RunMode(item.get("mode", RunMode.FULL.value))
    tests = tuple(str(name) for name in item.get("tests", []) or [])
    env = {str(k): str(v) for k, v in dict(item.get("env", {}) or {}).items()}
    return TargetEntry(str(item["target"]), mode, tests, env)
