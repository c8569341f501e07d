"""
Module: bounds

Purpose:
    Provides the BoundingBox dataclass - the tight rectangle enclosing the
    non-transparent content of a RasterImage. A box only means something
    relative to the image it was detected in; treat it as a derived view.

Key Functions:
    - BoundingBox.full(width, height): Box covering a whole image
    - BoundingBox.fits(width, height): Check the box lies inside an image
    - BoundingBox.as_pil_box(): Convert to PIL's exclusive (l, t, r, b)
    - BoundingBox.to_dict() / from_dict(): JSON round trip

Dependencies:
    - dataclasses (std)

Used By:
    - compositing.detector
    - compositing.cropper
    - compositing.pipeline (diagnostics in CompositeOutput)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from studio_compositor.errors import CompositingError, ErrorKind


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """
    Inclusive pixel rectangle.

    Unlike PIL boxes, both max_x and max_y are inclusive: a single-pixel
    box has min_x == max_x and min_y == max_y.

    Attributes:
        min_x: Leftmost content column
        min_y: Topmost content row
        max_x: Rightmost content column (inclusive)
        max_y: Bottommost content row (inclusive)

    Invariants:
        - all coordinates >= 0
        - min_x <= max_x
        - min_y <= max_y

    Example:
        >>> box = BoundingBox(min_x=20, min_y=30, max_x=79, max_y=89)
        >>> box.size
        (60, 60)
    """

    min_x: int
    min_y: int
    max_x: int
    max_y: int

    def __post_init__(self) -> None:
        """Validate box on construction."""
        if self.min_x < 0 or self.min_y < 0:
            raise CompositingError(
                f"Box origin must be >= 0: ({self.min_x}, {self.min_y})",
                ErrorKind.INVALID_DIMENSIONS,
            )
        if self.max_x < self.min_x:
            raise CompositingError(
                f"max_x must be >= min_x: {self.max_x} < {self.min_x}",
                ErrorKind.INVALID_DIMENSIONS,
            )
        if self.max_y < self.min_y:
            raise CompositingError(
                f"max_y must be >= min_y: {self.max_y} < {self.min_y}",
                ErrorKind.INVALID_DIMENSIONS,
            )

    @classmethod
    def full(cls, width: int, height: int) -> BoundingBox:
        """Box covering an entire width x height image."""
        return cls(0, 0, width - 1, height - 1)

    # ─────────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def width(self) -> int:
        """Width in pixels (inclusive bounds, so +1)."""
        return self.max_x - self.min_x + 1

    @property
    def height(self) -> int:
        """Height in pixels (inclusive bounds, so +1)."""
        return self.max_y - self.min_y + 1

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    # ─────────────────────────────────────────────────────────────────────────
    # Query Methods
    # ─────────────────────────────────────────────────────────────────────────

    def contains(self, x: int, y: int) -> bool:
        """True if pixel (x, y) lies inside the box."""
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def fits(self, width: int, height: int) -> bool:
        """
        Check the box lies within a width x height image.

        Args:
            width: Image width
            height: Image height

        Returns:
            True if max_x < width and max_y < height
        """
        return self.max_x < width and self.max_y < height

    def is_full(self, width: int, height: int) -> bool:
        """True if the box covers the whole image."""
        return self == BoundingBox.full(width, height)

    def as_pil_box(self) -> Tuple[int, int, int, int]:
        """
        Get as (left, top, right, bottom) with exclusive right/bottom.

        Returns:
            Tuple suitable for PIL's Image.crop
        """
        return (self.min_x, self.min_y, self.max_x + 1, self.max_y + 1)

    # ─────────────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON output."""
        return {
            "min_x": self.min_x,
            "min_y": self.min_y,
            "max_x": self.max_x,
            "max_y": self.max_y,
        }

    @classmethod
    def from_dict(cls, data: dict) -> BoundingBox:
        """Deserialize from dictionary."""
        return cls(
            min_x=data["min_x"],
            min_y=data["min_y"],
            max_x=data["max_x"],
            max_y=data["max_y"],
        )

    def __repr__(self) -> str:
        """Concise representation for debugging."""
        return f"BoundingBox(({self.min_x}, {self.min_y}) -> ({self.max_x}, {self.max_y}))"
