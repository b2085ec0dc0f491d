from __future__ import annotations

from pathlib import Path

import pytest

from miri_ci import config as config_module
from miri_ci.config import DEFAULT_SEEDS, RunConfig
from miri_ci.errors import ConfigurationError


def test_from_env_reads_ci_variables(tmp_path: Path):
    environ = {
        "HOST_TARGET": "x86_64-apple-darwin",
        "MIRI_TEST_TARGET": "s390x-unknown-linux-gnu",
        "MIRI_SEEDS": "8",
        "MIRIFLAGS": " -Zmiri-strict-provenance ",
        "PATH": "/usr/bin",
    }

    config = RunConfig.from_env(environ, workdir=tmp_path)

    assert config.host_target == "x86_64-apple-darwin"
    assert config.test_target == "s390x-unknown-linux-gnu"
    assert config.seeds == 8
    assert config.miriflags == "-Zmiri-strict-provenance"
    assert config.workdir == tmp_path
    assert "MIRI_TEST_TARGET" not in config.environ
    assert "MIRIFLAGS" not in config.environ
    assert environ["MIRI_TEST_TARGET"] == "s390x-unknown-linux-gnu"


def test_from_env_defaults():
    config = RunConfig.from_env({"HOST_TARGET": "x86_64-unknown-linux-gnu"})

    assert config.seeds == DEFAULT_SEEDS == 64
    assert config.test_target is None
    assert config.is_host_run
    assert config.no_std is False


def test_explicit_arguments_win_over_environment():
    environ = {"HOST_TARGET": "x86_64-unknown-linux-gnu", "MIRI_TEST_TARGET": "wasm32-wasi"}

    config = RunConfig.from_env(
        environ, host_target="i686-pc-windows-msvc", test_target="x86_64-unknown-linux-gnu"
    )

    assert config.host_target == "i686-pc-windows-msvc"
    assert config.test_target == "x86_64-unknown-linux-gnu"


def test_missing_host_falls_back_to_rustc(monkeypatch):
    monkeypatch.setattr(config_module, "detect_host_target", lambda: "x86_64-apple-darwin")

    assert RunConfig.from_env({}).host_target == "x86_64-apple-darwin"


def test_missing_host_without_rustc_is_fatal(monkeypatch):
    monkeypatch.setattr(config_module, "detect_host_target", lambda: None)

    with pytest.raises(ConfigurationError, match="HOST_TARGET"):
        RunConfig.from_env({})


@pytest.mark.parametrize("raw", ["many", "0", "-3"])
def test_invalid_seed_count(raw):
    with pytest.raises(ConfigurationError, match="MIRI_SEEDS"):
        RunConfig.from_env({"HOST_TARGET": "x86_64-unknown-linux-gnu", "MIRI_SEEDS": raw})


def test_command_env_layers_overrides_without_mutating_config():
    config = RunConfig(
        host_target="x86_64-unknown-linux-gnu",
        test_target="wasm32-wasi",
        miriflags="-Zmiri-disable-isolation",
        no_std=True,
        environ={"PATH": "/usr/bin", "RUSTC": "/stale/rustc"},
    ).with_env(RUSTFLAGS="-D warnings")

    env = config.command_env({"RUSTC": None, "MIRI_SEEDS": "4"})

    assert env["PATH"] == "/usr/bin"
    assert env["RUSTFLAGS"] == "-D warnings"
    assert env["MIRI_TEST_TARGET"] == "wasm32-wasi"
    assert env["MIRIFLAGS"] == "-Zmiri-disable-isolation"
    assert env["MIRI_NO_STD"] == "1"
    assert env["MIRI_SEEDS"] == "4"
    assert "RUSTC" not in env
    assert "MIRI_SEEDS" not in config.command_env()
    assert config.environ["RUSTC"] == "/stale/rustc"


def test_with_env_returns_new_instance():
    base = RunConfig(host_target="x86_64-unknown-linux-gnu")
    updated = base.with_env(CARGO_INCREMENTAL="0")

    assert dict(base.env) == {}
    assert dict(updated.env) == {"CARGO_INCREMENTAL": "0"}


@pytest.mark.parametrize("raw, expected", [("1", True), ("yes", True), ("0", False), ("", False)])
def test_no_std_marker_parsing(raw, expected):
    config = RunConfig.from_env({"HOST_TARGET": "x86_64-apple-darwin", "MIRI_NO_STD": raw})

    assert config.no_std is expected
    assert "MIRI_NO_STD" not in config.environ


def test_for_target_keeps_no_std_unless_overridden():
    config = RunConfig(host_target="x86_64-apple-darwin", no_std=True)

    assert config.for_target("wasm32-wasi").no_std is True
    assert config.for_target(None).no_std is True
    assert config.for_target("wasm32-wasi", no_std=False).no_std is False
