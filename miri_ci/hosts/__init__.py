"""Host adapter implementations and registry exports."""
from .base import REGISTRY, HostAdapter, get_host_adapter, register
from .linux import LinuxHost
from .windows import WindowsMsvcHost

__all__ = [
    "HostAdapter",
    "REGISTRY",
    "get_host_adapter",
    "register",
    "LinuxHost",
    "WindowsMsvcHost",
]
