"""Windows host quirks."""
from __future__ import annotations

from miri_ci.config import RunConfig
from miri_ci.hosts.base import HostAdapter, register

# $BASH resolves to /bin/bash on GitHub's Windows runners, which does not work.
GIT_BASH = "C:/Program Files/Git/usr/bin/bash"


@register
class WindowsMsvcHost(HostAdapter):
    name = "i686-pc-windows-msvc"

    def bash(self, config: RunConfig) -> str:
        return GIT_BASH
