"""
Module: errors

Purpose:
    Typed error taxonomy shared by every compositing stage. Errors are
    raised to the caller, never retried internally; retry policy belongs
    to the calling service.

Key Classes:
    - ErrorKind: Enumeration of failure (and warning) categories
    - CompositingError: Exception carrying an ErrorKind

Used By:
    - core.models: Construction-time validation
    - compositing.*: Pipeline stages
    - watermark.overlay
    - controller
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Category of a compositing failure."""

    INVALID_DIMENSIONS = "invalid_dimensions"
    INVALID_PADDING = "invalid_padding"
    INVALID_OPTIONS = "invalid_options"
    FETCH_FAILED = "fetch_failed"
    DECODE_FAILED = "decode_failed"
    ALLOCATION_FAILED = "allocation_failed"
    ENCODE_FAILED = "encode_failed"
    # Recoverable: reported as a warning, the pipeline keeps going.
    FULLY_TRANSPARENT_INPUT = "fully_transparent_input"


class CompositingError(Exception):
    """
    Error raised by a compositing stage.

    Attributes:
        kind: Failure category
        detail: Optional extra context (source description, sizes, ...)

    Example:
        >>> try:
        ...     PaddingSpec(left=0.6, right=0.5)
        ... except CompositingError as e:
        ...     e.kind
        <ErrorKind.INVALID_PADDING: 'invalid_padding'>
    """

    def __init__(self, message: str, kind: ErrorKind, detail: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.detail = detail

    def __str__(self) -> str:
        message = super().__str__()
        if self.detail:
            return f"[{self.kind.value}] {message} ({self.detail})"
        return f"[{self.kind.value}] {message}"
