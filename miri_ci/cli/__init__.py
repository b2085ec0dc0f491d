"""Command-line interfaces for miri-ci."""

from .main import app, run

__all__ = ["app", "run"]
