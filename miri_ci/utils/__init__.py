"""Utility helpers shared across the driver."""

from .env import detect_host_target
from .io import read_json, write_json

__all__ = ["detect_host_target", "read_json", "write_json"]
