"""
Module: geometry

Purpose:
    Value types describing where a subject goes on an output canvas:
    padding fractions, placement policy, the output canvas itself and the
    resulting destination rectangle.

Key Classes:
    - PaddingSpec: Fraction of the canvas kept empty on each side
    - PlacementPolicy: FLOOR_ALIGNED or CENTERED
    - OutputFormat: Encoded output format (JPEG/PNG/WEBP)
    - CanvasSpec: Output size, encoder quality and format
    - Geometry: Destination rectangle (floating point)

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - compositing.placement
    - compositing.pipeline
    - compositing.config
    - watermark.overlay
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from studio_compositor.errors import CompositingError, ErrorKind


@dataclass(frozen=True, slots=True)
class PaddingSpec:
    """
    Empty margin reserved on each side of the canvas, as fractions.

    Attributes:
        left: Fraction of canvas width kept empty on the left
        right: Fraction of canvas width kept empty on the right
        top: Fraction of canvas height kept empty at the top
        bottom: Fraction of canvas height kept empty at the bottom

    Invariants:
        - every fraction in [0, 1)
        - left + right < 1
        - top + bottom < 1

    Example:
        >>> PaddingSpec(left=0.1, right=0.1, top=0.15, bottom=0.05).horizontal_fraction
        0.8
    """

    left: float = 0.0
    right: float = 0.0
    top: float = 0.0
    bottom: float = 0.0

    def __post_init__(self) -> None:
        """Reject fractions outside [0, 1) or axes with no room left."""
        for name in ("left", "right", "top", "bottom"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or math.isnan(value):
                raise CompositingError(
                    f"padding {name} must be a number: {value!r}",
                    ErrorKind.INVALID_PADDING,
                )
            if not 0.0 <= value < 1.0:
                raise CompositingError(
                    f"padding {name} must be in [0, 1): {value}",
                    ErrorKind.INVALID_PADDING,
                )
        if self.left + self.right >= 1.0:
            raise CompositingError(
                f"left + right padding must be < 1: {self.left} + {self.right}",
                ErrorKind.INVALID_PADDING,
            )
        if self.top + self.bottom >= 1.0:
            raise CompositingError(
                f"top + bottom padding must be < 1: {self.top} + {self.bottom}",
                ErrorKind.INVALID_PADDING,
            )

    @classmethod
    def none(cls) -> PaddingSpec:
        """No padding on any side."""
        return cls()

    @property
    def horizontal_fraction(self) -> float:
        """Fraction of canvas width available to the subject."""
        return 1.0 - self.left - self.right

    @property
    def vertical_fraction(self) -> float:
        """Fraction of canvas height available to the subject."""
        return 1.0 - self.top - self.bottom


class PlacementPolicy(str, Enum):
    """
    Vertical placement rule for the fitted subject.

    FLOOR_ALIGNED pins the subject's bottom edge to the bottom padding
    line, as if it stood on a floor. CENTERED centres it on the full
    canvas height.
    """

    FLOOR_ALIGNED = "floor_aligned"
    CENTERED = "centered"


class OutputFormat(str, Enum):
    """Encoded output format."""

    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"

    @property
    def pil_format(self) -> str:
        """Format name understood by PIL's Image.save."""
        return self.value.upper()

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @property
    def supports_alpha(self) -> bool:
        return self is not OutputFormat.JPEG


@dataclass(frozen=True, slots=True)
class CanvasSpec:
    """
    Output canvas (immutable).

    Attributes:
        output_width: Canvas width in pixels
        output_height: Canvas height in pixels
        quality: Lossy encoder fidelity in (0, 1]; ignored for PNG
        output_format: Encoded format of the result

    Example:
        >>> CanvasSpec(1920, 1440).quality
        0.85
    """

    output_width: int
    output_height: int
    quality: float = 0.85
    output_format: OutputFormat = OutputFormat.JPEG

    def __post_init__(self) -> None:
        """Validate canvas on construction."""
        if self.output_width < 1 or self.output_height < 1:
            raise CompositingError(
                f"Canvas must be at least 1x1: {self.output_width}x{self.output_height}",
                ErrorKind.INVALID_DIMENSIONS,
            )
        if not 0.0 < self.quality <= 1.0:
            raise CompositingError(
                f"quality must be in (0, 1]: {self.quality}",
                ErrorKind.INVALID_OPTIONS,
            )

    @property
    def size(self) -> Tuple[int, int]:
        return self.output_width, self.output_height


@dataclass(frozen=True, slots=True)
class Geometry:
    """
    Destination rectangle for drawing a subject, in canvas pixels.

    Coordinates are floats; rasterization rounds them with to_pixels().

    Attributes:
        x: Left edge
        y: Top edge
        width: Drawn width
        height: Drawn height
    """

    x: float
    y: float
    width: float
    height: float

    @property
    def aspect(self) -> float:
        return self.width / self.height

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def is_inside(self, canvas_width: float, canvas_height: float, tolerance: float = 1e-9) -> bool:
        """True if the rectangle lies within [0, canvas_width] x [0, canvas_height]."""
        return (
            self.x >= -tolerance
            and self.y >= -tolerance
            and self.right <= canvas_width + tolerance
            and self.bottom <= canvas_height + tolerance
        )

    def to_pixels(self) -> Tuple[int, int, int, int]:
        """
        Round to an integer (x, y, width, height) rectangle.

        Width and height are never rounded below one pixel.
        """
        x = int(round(self.x))
        y = int(round(self.y))
        width = max(1, int(round(self.width)))
        height = max(1, int(round(self.height)))
        return x, y, width, height

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}
