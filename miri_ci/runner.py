"""Build phase followed by the per-target test phase."""
from __future__ import annotations

import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

from miri_ci.config import RunConfig
from miri_ci.errors import ConfigurationError
from miri_ci.hosts import HostAdapter, get_host_adapter
from miri_ci.process import CommandRunner, StepRecord
from miri_ci.targets import PlannedRun, RunMode

__all__ = ["MatrixRunner", "MIRI", "GLOBAL_ENV", "prepared_config"]

MIRI = "./miri"

GLOBAL_ENV: Dict[str, str] = {
    "RUSTFLAGS": "-D warnings",
    "CARGO_INCREMENTAL": "0",
    "CARGO_EXTRA_FLAGS": "--locked",
}

PROVENANCE_GC_FLAG = "-Zmiri-provenance-gc=1"
OPTIMIZED_FLAGS = "-O -Zmir-opt-level=4 -Cdebug-assertions=yes"
OPTIMIZED_SUITES = ("tests/pass", "tests/panic")
MANY_SEEDS_GLOB = "tests/many-seeds/*.rs"
CARGO_MIRI_TEST = "test-cargo-miri/run-test.py"
NO_STD_SMOKE_MANIFEST = "test-cargo-miri/no-std-smoke/Cargo.toml"
# Points cargo at a wrapper that does not exist; cargo-miri must not rely on it.
CARGO_CONFIG_CONTENTS = 'build.rustc-wrapper = "thisdoesnotexist"\n'


class MatrixRunner:
    """Drive ``./miri`` through the build phase and the target matrix.

    Every method takes the :class:`RunConfig` it should use and spawns
    commands strictly one after another; the first failing command raises
    :class:`~miri_ci.errors.StepFailed` and nothing after it runs.
    """

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        host: Optional[HostAdapter] = None,
    ) -> None:
        self.runner = runner or CommandRunner()
        self._host = host

    @property
    def history(self) -> List[StepRecord]:
        return self.runner.history

    def host_adapter(self, config: RunConfig) -> HostAdapter:
        if self._host is None:
            self._host = get_host_adapter(config.host_target)
        return self._host

    def build(self, config: RunConfig) -> RunConfig:
        """Install, check feature configurations and build the debug binary.

        Returns the configuration the test phase should use.
        """

        config = config.with_env(**GLOBAL_ENV)
        with self.runner.group("Building Miri"):
            self.runner.echo("Installing release version of Miri")
            self.runner.run([MIRI, "install"], config)

            self.runner.echo("Checking various feature flag configurations")
            self.runner.run([MIRI, "check", "--no-default-features"], config)
            self.runner.run([MIRI, "check"], config)

            # All features so the Stacked Borrows consistency check runs.
            self.runner.echo("Building debug version of Miri")
            extra = config.env["CARGO_EXTRA_FLAGS"]
            config = config.with_env(CARGO_EXTRA_FLAGS=f"{extra} --all-features")
            self.runner.run([MIRI, "build", "--all-targets"], config)
        return config

    def run_full(self, config: RunConfig, target: Optional[str] = None) -> None:
        """Run the complete test suite for the host or for ``target``."""

        if target is not None:
            config = config.for_target(target)
        title = (
            "Testing host architecture"
            if config.is_host_run
            else f"Testing foreign architecture {config.test_target}"
        )
        with self.runner.group(title):
            if config.is_host_run:
                self.runner.run(
                    [MIRI, "test"], config, {"MIRIFLAGS": _flags(config, PROVENANCE_GC_FLAG)}
                )
                self._host_only_tests(config)
            else:
                self.runner.run([MIRI, "test"], config)

            self._cargo_miri_test(config)

    def run_minimal(self, config: RunConfig, target: Optional[str], tests: Sequence[str]) -> None:
        """Run only ``tests`` for a partially supported ``target``."""

        target = target or config.test_target
        if not target:
            raise ConfigurationError("run_minimal requires MIRI_TEST_TARGET to be set")
        if not tests:
            raise ConfigurationError(f"No test names given for minimal run of {target}")

        config = config.for_target(target)
        title = f"Testing MINIMAL foreign architecture {target}: only testing {' '.join(tests)}"
        with self.runner.group(title):
            self.runner.run([MIRI, "test", "--", *tests], config)

            # Small smoke test that cargo-miri works.
            self.runner.run(
                [
                    "cargo",
                    "miri",
                    "run",
                    "--manifest-path",
                    NO_STD_SMOKE_MANIFEST,
                    "--target",
                    target,
                ],
                config,
            )

    def run_planned(self, config: RunConfig, planned: PlannedRun) -> None:
        """Execute one entry of a resolved plan."""

        entry_config = config.with_env(**planned.env) if planned.env else config
        if planned.mode is RunMode.MINIMAL:
            self.run_minimal(entry_config, planned.target, planned.tests)
        else:
            self.run_full(entry_config.for_target(planned.target), None)

    def run_matrix(self, config: RunConfig, plan: Sequence[PlannedRun]) -> List[StepRecord]:
        """Build once, then run every planned target in order."""

        if not plan or not plan[0].is_host:
            raise ConfigurationError("The test plan must start with the host target")
        test_config = self.build(config.for_target(None))
        for planned in plan:
            self.run_planned(test_config, planned)
        return self.history

    def _host_only_tests(self, config: RunConfig) -> None:
        # Optimizations change diagnostics and error locations, so skip UI
        # checks and the failing tests; debug assertions are re-enabled for
        # tests that expect them to fire.
        self.runner.run(
            [MIRI, "test", "--", *OPTIMIZED_SUITES],
            config,
            {"MIRIFLAGS": _flags(config, OPTIMIZED_FLAGS), "MIRI_SKIP_UI_CHECKS": "1"},
        )

        # 64 seeds take about a minute per test. Explicit `bash -c` for Windows.
        bash = self.host_adapter(config).bash(config)
        for path in sorted(Path(config.workdir).glob(MANY_SEEDS_GLOB)):
            relative = path.relative_to(config.workdir).as_posix()
            self.runner.run(
                [MIRI, "many-seeds", bash, "-c", f"{MIRI} run '{relative}'"],
                config,
                {"MIRI_SEEDS": str(config.seeds)},
            )

        # Benchmarks must build and run, without actually benchmarking.
        self.runner.run([MIRI, "bench"], config, {"HYPERFINE": f"'{bash}' -c"})

    def _cargo_miri_test(self, config: RunConfig) -> None:
        host = self.host_adapter(config)
        python = host.python(config)
        with self.cargo_miri_sandbox(config) as overrides:
            self.runner.run([python, CARGO_MIRI_TEST], config, overrides)

    @contextmanager
    def cargo_miri_sandbox(self, config: RunConfig) -> Iterator[Dict[str, Optional[str]]]:
        """Set up the environment that tries to confuse cargo-miri.

        Yields the env overrides for the integration test. The project-local
        ``.cargo`` directory is removed again on exit and the overrides are
        never stored on ``config``.
        """

        overrides = dict(self.host_adapter(config).cargo_miri_env(config, self.runner))
        cargo_dir = Path(config.workdir) / ".cargo"
        cargo_dir.mkdir(parents=True, exist_ok=True)
        (cargo_dir / "config.toml").write_text(CARGO_CONFIG_CONTENTS, encoding="utf-8")
        try:
            yield overrides
        finally:
            shutil.rmtree(cargo_dir, ignore_errors=True)


def prepared_config(config: RunConfig) -> RunConfig:
    """Return ``config`` with the environment a completed build phase leaves behind."""

    extra = f"{GLOBAL_ENV['CARGO_EXTRA_FLAGS']} --all-features"
    return config.with_env(**GLOBAL_ENV).with_env(CARGO_EXTRA_FLAGS=extra)


def _flags(config: RunConfig, extra: str) -> str:
    return f"{config.miriflags} {extra}".strip()
