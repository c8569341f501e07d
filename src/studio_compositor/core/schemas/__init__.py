"""
Schemas Package

JSON schema definitions and validation for option payloads.
"""

from .validator import (
    validate_compositing_options,
    validate_watermark_options,
    ValidationError,
)

__all__ = [
    "validate_compositing_options",
    "validate_watermark_options",
    "ValidationError",
]
