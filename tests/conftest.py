"""Pytest configuration for miri-ci tests."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from miri_ci.config import RunConfig  # noqa: E402

from helpers import RecordingCommandRunner, StubHost  # noqa: E402


@pytest.fixture
def recorder() -> RecordingCommandRunner:
    return RecordingCommandRunner()


@pytest.fixture
def stub_host() -> StubHost:
    return StubHost()


@pytest.fixture
def linux_config(tmp_path: Path) -> RunConfig:
    return RunConfig(
        host_target="x86_64-unknown-linux-gnu",
        workdir=tmp_path,
        environ={"PATH": "/usr/bin", "HOME": "/home/ci"},
    )


@pytest.fixture
def many_seeds_files(tmp_path: Path) -> list:
    seeds_dir = tmp_path / "tests" / "many-seeds"
    seeds_dir.mkdir(parents=True)
    files = []
    for name in ("weak_memory.rs", "reentrant_lock.rs"):
        path = seeds_dir / name
        path.write_text("fn main() {}\n", encoding="utf-8")
        files.append(path)
    return files
