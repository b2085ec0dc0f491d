"""Linux host quirks."""
from __future__ import annotations

import shutil
from typing import Dict, Optional

from miri_ci.config import RunConfig
from miri_ci.errors import ConfigurationError
from miri_ci.hosts.base import HostAdapter, register


@register
class LinuxHost(HostAdapter):
    """``x86_64-unknown-linux-gnu``.

    Points ``RUSTC`` and ``MIRI`` at explicit binaries to make sure cargo-miri
    copes with them being set. This misbehaves on Windows, so only Linux does it.
    """

    name = "x86_64-unknown-linux-gnu"

    def cargo_miri_env(self, config: RunConfig, runner) -> Dict[str, Optional[str]]:
        rustc = shutil.which("rustc", path=config.environ.get("PATH"))
        if not rustc:
            raise ConfigurationError("rustc not found on PATH")
        sysroot = runner.capture(["rustc", "+miri", "--print", "sysroot"], config)
        return {"RUSTC": rustc, "MIRI": f"{sysroot}/bin/miri"}
