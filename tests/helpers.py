from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from miri_ci.config import RunConfig
from miri_ci.hosts import HostAdapter
from miri_ci.process import CommandRunner


class RecordingCommandRunner(CommandRunner):
    """Command runner that records invocations instead of spawning them."""

    def __init__(
        self,
        fail_on: Optional[Callable[[Sequence[str]], bool]] = None,
        exit_code: int = 1,
        sysroot: str = "/opt/rust/miri-sysroot",
        capture_exit_code: int = 0,
    ) -> None:
        self.lines: List[str] = []
        super().__init__(echo=self.lines.append)
        self.fail_on = fail_on
        self.exit_code = exit_code
        self.sysroot = sysroot
        self.capture_exit_code = capture_exit_code
        self.calls: List[Tuple[List[str], Dict[str, str]]] = []
        self.captures: List[List[str]] = []
        self.cargo_config_present: List[bool] = []

    def _spawn(self, argv: List[str], env: Dict[str, str], cwd: str) -> int:
        self.calls.append((argv, env))
        self.cargo_config_present.append((Path(cwd) / ".cargo" / "config.toml").exists())
        if self.fail_on is not None and self.fail_on(argv):
            return self.exit_code
        return 0

    def _spawn_capture(self, argv: List[str], env: Dict[str, str], cwd: str) -> Tuple[int, str]:
        self.captures.append(argv)
        if self.capture_exit_code:
            return self.capture_exit_code, ""
        return 0, self.sysroot + "\n"

    @property
    def argvs(self) -> List[List[str]]:
        return [argv for argv, _ in self.calls]


class StubHost(HostAdapter):
    """Host adapter with fixed paths so tests never query the real machine."""

    name = "stub"

    def bash(self, config: RunConfig) -> str:
        return "/bin/bash"

    def python(self, config: RunConfig) -> str:
        return "python3"

    def cargo_miri_env(self, config: RunConfig, runner) -> Dict[str, Optional[str]]:
        return {"RUSTC": "/usr/bin/rustc", "MIRI": "/opt/rust/miri-sysroot/bin/miri"}


__all__ = ["RecordingCommandRunner", "StubHost"]
