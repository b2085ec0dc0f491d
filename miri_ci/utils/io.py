"""JSON IO helpers for plan and report artifacts."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

__all__ = ["read_json", "write_json", "ensure_parent_dir"]


def read_json(path: str | Path) -> Any:
    """Load a JSON file and return the decoded object."""

    file_path = Path(path)
    try:
        return json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in '{file_path}': {exc}") from exc


def ensure_parent_dir(path: str | Path) -> Path:
    """Ensure the parent directory for ``path`` exists and return the resolved ``Path``."""

    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    return file_path


def write_json(path: str | Path, obj: Any) -> None:
    """Persist ``obj`` to ``path`` with deterministic formatting."""

    file_path = ensure_parent_dir(path)
    serialized = json.dumps(obj, ensure_ascii=False, indent=2, sort_keys=True)
    file_path.write_text(serialized + "\n", encoding="utf-8")
