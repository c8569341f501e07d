"""
Module: watermark.config

Purpose:
    Configuration for watermark/logo overlays. Offsets and size are
    percentages of the base image so one setting works for every photo
    resolution.

Key Classes:
    - WatermarkPosition: Corner presets
    - WatermarkOptions: Offset, size, opacity, format

Dependencies:
    - dataclasses (std)
    - core.schemas: Payload validation
    - compositing.config: Shared canvas size cap

Used By:
    - watermark.overlay
    - controller
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Optional

from studio_compositor.compositing.config import DEFAULT_MAX_CANVAS_DIMENSION
from studio_compositor.core.models import OutputFormat
from studio_compositor.core.schemas import validate_watermark_options
from studio_compositor.errors import CompositingError, ErrorKind

# Distance kept between a corner-preset logo and the image edge
CORNER_INSET_PX = 20


class WatermarkPosition(str, Enum):
    """Corner presets, resolved to percentages against the actual sizes."""

    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"


def _doc(text: str) -> dict:
    return {"doc": text}


@dataclass(frozen=True)
class WatermarkOptions:
    """
    Configuration for one watermark request (immutable).

    Attributes:
        x_percent: Left offset of the mark, percent of base width
        y_percent: Top offset of the mark, percent of base height
        size_percent: Mark width, percent of base width
        opacity: Multiplier on the mark's alpha, in [0, 1]
        position: Corner preset; overrides x/y percent when set
        output_format: Encoded output format (PNG keeps logo edges lossless)
        quality: Lossy encoder fidelity for JPEG/WEBP
        max_dimension: Largest accepted base width or height

    Example:
        >>> WatermarkOptions.from_dict({"sizePercent": 10}).opacity
        0.8
    """

    x_percent: float = field(default=20.0, metadata=_doc("Left offset of the mark, percent of base width"))
    y_percent: float = field(default=20.0, metadata=_doc("Top offset of the mark, percent of base height"))
    size_percent: float = field(default=15.0, metadata=_doc("Mark width, percent of base width; height follows its aspect"))
    opacity: float = field(default=0.8, metadata=_doc("Multiplier on the mark's alpha, 0 invisible to 1 as-is"))
    position: Optional[WatermarkPosition] = field(
        default=None,
        metadata=_doc("Corner preset with a 20px inset; overrides x/y percent"),
    )
    output_format: OutputFormat = field(default=OutputFormat.PNG, metadata=_doc("Encoded output format"))
    quality: float = field(default=1.0, metadata=_doc("Lossy encoder fidelity in (0, 1]; ignored for PNG"))
    max_dimension: int = field(
        default=DEFAULT_MAX_CANVAS_DIMENSION,
        metadata=_doc("Largest accepted base width or height; bigger images are rejected"),
    )

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if not 0.0 < self.size_percent <= 100.0:
            raise CompositingError(
                f"size_percent must be in (0, 100]: {self.size_percent}",
                ErrorKind.INVALID_DIMENSIONS,
            )
        if not 0.0 <= self.opacity <= 1.0:
            raise CompositingError(
                f"opacity must be in [0, 1]: {self.opacity}",
                ErrorKind.INVALID_OPTIONS,
            )
        if not 0.0 < self.quality <= 1.0:
            raise CompositingError(
                f"quality must be in (0, 1]: {self.quality}",
                ErrorKind.INVALID_OPTIONS,
            )
        if self.max_dimension < 1:
            raise CompositingError(
                f"max_dimension must be positive: {self.max_dimension}",
                ErrorKind.INVALID_OPTIONS,
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> WatermarkOptions:
        """
        Build options from a camelCase JSON payload; omitted keys keep defaults.

        Raises:
            ValidationError: Payload fails the schema
        """
        validate_watermark_options(data)
        changes: Dict[str, Any] = {}
        for key, value in data.items():
            name = _PAYLOAD_KEYS[key]
            if name == "position":
                value = WatermarkPosition(value)
            elif name == "output_format":
                value = OutputFormat(value)
            elif name == "max_dimension":
                value = int(value)
            else:
                value = float(value)
            changes[name] = value
        return replace(cls(), **changes)


_PAYLOAD_KEYS = {
    "xPercent": "x_percent",
    "yPercent": "y_percent",
    "sizePercent": "size_percent",
    "opacity": "opacity",
    "position": "position",
    "outputFormat": "output_format",
    "quality": "quality",
    "maxDimension": "max_dimension",
}


def describe_watermark_options() -> Dict[str, str]:
    """List every watermark option and what it does."""
    return {f.name: f.metadata["doc"] for f in fields(WatermarkOptions)}
