"""
Schema Validation Utilities

Validates JSON-like option payloads (as received from an HTTP handler)
against the bundled JSON schemas before they are turned into config
objects.

Type and range problems are reported here; cross-field geometry rules
(padding summing to >= 1 on an axis) are left to PaddingSpec so they
surface with the INVALID_PADDING kind.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema

from studio_compositor.errors import CompositingError, ErrorKind


# Load schemas lazily
_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(CompositingError):
    """Raised when an option payload fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message, ErrorKind.INVALID_OPTIONS, detail=path or None)
        self.path = path
        self.errors = errors or []


def _validate(data: Any, schema_name: str) -> None:
    if not isinstance(data, dict):
        raise ValidationError(f"Options must be an object, got {type(data).__name__}")

    schema = _load_schema(schema_name)
    validator = jsonschema.Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
    if errors:
        first = errors[0]
        raise ValidationError(
            f"Schema validation failed: {first.message}",
            path=".".join(str(p) for p in first.absolute_path),
            errors=[e.message for e in errors],
        )


def validate_compositing_options(data: dict[str, Any]) -> None:
    """
    Validate a compositing option payload.

    Args:
        data: Dict with camelCase keys (outputWidth, paddingLeft, ...)

    Raises:
        ValidationError: If data is invalid
    """
    _validate(data, "compositing_options")


def validate_watermark_options(data: dict[str, Any]) -> None:
    """
    Validate a watermark option payload.

    Args:
        data: Dict with camelCase keys (xPercent, sizePercent, ...)

    Raises:
        ValidationError: If data is invalid
    """
    _validate(data, "watermark_options")
