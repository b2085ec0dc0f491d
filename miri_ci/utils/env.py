"""Toolchain probing helpers."""
from __future__ import annotations

import subprocess
from typing import List, Optional

__all__ = ["detect_host_target"]


def _run(cmd: List[str]) -> Optional[str]:
    """Run ``cmd`` returning stripped stdout or ``None`` on failure."""

    try:
        return subprocess.check_output(
            cmd, stderr=subprocess.DEVNULL, text=True, timeout=30
        ).strip()
    except (OSError, subprocess.SubprocessError):
        return None


def detect_host_target(rustc: str = "rustc") -> Optional[str]:
    """Return the host triple reported by ``rustc -vV`` or ``None``."""

    output = _run([rustc, "-vV"])
    if not output:
        return None
    for line in output.splitlines():
        key, _, value = line.partition(":")
        if key.strip() == "host" and value.strip():
            return value.strip()
    return None