"""Exception types raised by the CI driver."""
from __future__ import annotations

from typing import Sequence


class MiriCIError(RuntimeError):
    """Base class for every error the driver raises on purpose."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(MiriCIError):
    """Raised when the environment or matrix configuration is unusable."""

    exit_code = 1


class UnknownHostTarget(ConfigurationError):
    """Raised when the host triple has no entry in the dispatch table."""

    def __init__(self, host: str) -> None:
        super().__init__(f"FATAL: unknown OS: {host!r}")
        self.host = host


class MatrixValidationError(ConfigurationError):
    """Raised when a matrix override file fails JSON Schema validation."""


class StepFailed(MiriCIError):
    """Raised when an external command exits non-zero."""

    def __init__(self, argv: Sequence[str], exit_code: int) -> None:
        command = " ".join(argv)
        # A negative return code means the child died from that signal.
        if exit_code < 0:
            exit_code = 128 - exit_code
        super().__init__(f"Command failed with exit code {exit_code}: {command}")
        self.argv = list(argv)
        self.exit_code = exit_code


__all__ = [
    "ConfigurationError",
    "MatrixValidationError",
    "MiriCIError",
    "StepFailed",
    "UnknownHostTarget",
]
