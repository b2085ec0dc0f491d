"""Target-matrix CI driver for the Miri interpreter."""

from .config import RunConfig
from .errors import ConfigurationError, MiriCIError, StepFailed, UnknownHostTarget
from .runner import MatrixRunner
from .targets import HostTarget, TargetEntry, RunMode, plan_for

__all__ = [
    "ConfigurationError",
    "HostTarget",
    "MatrixRunner",
    "MiriCIError",
    "RunConfig",
    "StepFailed",
    "TargetEntry",
    "RunMode",
    "UnknownHostTarget",
    "plan_for",
]
