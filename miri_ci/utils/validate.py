"""Schema validation helpers for matrix override files."""
from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import jsonschema
import yaml

from miri_ci.errors import MatrixValidationError

SCHEMA_PATH = Path(__file__).resolve().parents[1] / "schema" / "matrix.schema.json"

__all__ = ["SCHEMA_PATH", "load_matrix_document", "validate_matrix_document"]


@lru_cache(maxsize=1)
def _load_schema() -> Dict[str, Any]:
    with SCHEMA_PATH.open("r", encoding="utf-8") as handle:
        return json.load(handle)


@lru_cache(maxsize=1)
def _build_validator() -> jsonschema.Draft7Validator:
    return jsonschema.Draft7Validator(_load_schema())


def validate_matrix_document(document: Any) -> None:
    """Validate ``document`` or raise :class:`MatrixValidationError`."""

    errors = sorted(
        _build_validator().iter_errors(document),
        key=lambda err: [str(x) for x in err.path],
    )
    if errors:
        raise MatrixValidationError("\n".join(_format_error(error) for error in errors))


def load_matrix_document(path: str | Path) -> Dict[str, Any]:
    """Read a YAML matrix override from ``path`` and validate it."""

    file_path = Path(path)
    if not file_path.exists():
        raise MatrixValidationError(f"Matrix file not found: {file_path}")

    try:
        with file_path.open("r", encoding="utf-8") as handle:
            document = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise MatrixValidationError(f"Invalid YAML in '{file_path}': {exc}") from exc

    validate_matrix_document(document)
    return document


def _format_error(error: jsonschema.ValidationError) -> str:
    location = "/".join(str(x) for x in error.path)
    return f"{location}: {error.message}" if location else error.message
