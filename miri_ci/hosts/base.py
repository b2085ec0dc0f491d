"""Host adapter protocol and registry.

Platform quirks (interpreter paths, extra environment for the cargo-miri
integration test) live in adapters keyed by host triple. Hosts without a
registered adapter get :class:`HostAdapter` defaults.
"""
from __future__ import annotations

import shutil
from typing import TYPE_CHECKING, Callable, Dict, Optional, Type

from miri_ci.config import RunConfig

if TYPE_CHECKING:  # pragma: no cover - typing only
    from miri_ci.process import CommandRunner


class HostAdapter:
    """Default behaviour shared by every host."""

    name: str = ""

    def bash(self, config: RunConfig) -> str:
        return config.environ.get("BASH") or shutil.which("bash") or "/bin/bash"

    def python(self, config: RunConfig) -> str:
        # Windows only ships "python".
        return "python3" if shutil.which("python3") else "python"

    def cargo_miri_env(self, config: RunConfig, runner: "CommandRunner") -> Dict[str, Optional[str]]:
        """Extra variables set only for the cargo-miri integration test."""

        return {}


REGISTRY: Dict[str, Type[HostAdapter]] = {}


def register(adapter_cls: Type[HostAdapter]) -> Type[HostAdapter]:
    """Class decorator registering a host adapter implementation."""

    name = getattr(adapter_cls, "name", None)
    if not name:
        raise ValueError("Host adapters must define a 'name' attribute for registration")
    REGISTRY[name] = adapter_cls
    return adapter_cls


def get_host_adapter(host_target: str) -> HostAdapter:
    """Return the adapter registered for ``host_target`` or the defaults."""

    factory: Callable[[], HostAdapter] = REGISTRY.get(host_target, HostAdapter)
    return factory()
