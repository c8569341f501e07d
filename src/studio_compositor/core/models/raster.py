"""
Module: raster

Purpose:
    Provides the RasterImage value object - a decoded RGBA pixel buffer.
    Every pipeline stage consumes RasterImages and produces new ones;
    the underlying array is read-only so a stage can never mutate an
    image it was handed.

Key Functions:
    - RasterImage.from_pil(image): Wrap a PIL image (converted to RGBA)
    - RasterImage.blank(width, height, rgba): Uniformly filled image
    - RasterImage.to_pil(): Hand the pixels to Pillow for codec/resampling

Dependencies:
    - numpy: Pixel storage
    - PIL.Image: Conversion to/from Pillow

Used By:
    - compositing.* (every stage)
    - watermark.overlay
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np
from PIL import Image

from studio_compositor.errors import CompositingError, ErrorKind

CHANNELS = 4
ALPHA = 3


@dataclass(frozen=True, eq=False)
class RasterImage:
    """
    Immutable RGBA image.

    Pixels are stored as a read-only uint8 array of shape
    (height, width, 4). Row 0 is the top of the image.

    Attributes:
        pixels: Read-only RGBA array

    Invariants:
        - width >= 1 and height >= 1
        - exactly four channels

    Example:
        >>> img = RasterImage.blank(4, 2, (255, 0, 0, 255))
        >>> img.size
        (4, 2)
    """

    pixels: np.ndarray

    def __post_init__(self) -> None:
        """Validate shape and freeze the buffer."""
        arr = np.asarray(self.pixels)
        if arr.ndim != 3 or arr.shape[2] != CHANNELS:
            raise CompositingError(
                f"Expected (height, width, 4) RGBA array, got shape {arr.shape}",
                ErrorKind.INVALID_DIMENSIONS,
            )
        if arr.shape[0] < 1 or arr.shape[1] < 1:
            raise CompositingError(
                f"Image must be at least 1x1, got {arr.shape[1]}x{arr.shape[0]}",
                ErrorKind.INVALID_DIMENSIONS,
            )
        # Own a private copy so callers keeping a reference can't mutate us
        frozen = np.array(arr, dtype=np.uint8, copy=True)
        frozen.setflags(write=False)
        object.__setattr__(self, "pixels", frozen)

    # ─────────────────────────────────────────────────────────────────────────
    # Constructors
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def from_pil(cls, image: Image.Image) -> RasterImage:
        """Wrap a PIL image, converting it to RGBA first."""
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return cls(np.asarray(image))

    @classmethod
    def blank(
        cls,
        width: int,
        height: int,
        rgba: Tuple[int, int, int, int] = (0, 0, 0, 0),
    ) -> RasterImage:
        """
        Create an image filled with a single colour.

        Args:
            width: Width in pixels (>= 1)
            height: Height in pixels (>= 1)
            rgba: Fill colour, fully transparent black by default

        Returns:
            New RasterImage
        """
        if width < 1 or height < 1:
            raise CompositingError(
                f"Image must be at least 1x1, got {width}x{height}",
                ErrorKind.INVALID_DIMENSIONS,
            )
        return cls(np.full((height, width, CHANNELS), rgba, dtype=np.uint8))

    # ─────────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def width(self) -> int:
        """Width in pixels."""
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        """Height in pixels."""
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height), matching PIL's convention."""
        return self.width, self.height

    @property
    def alpha(self) -> np.ndarray:
        """Read-only view of the alpha channel, shape (height, width)."""
        return self.pixels[:, :, ALPHA]

    @property
    def nbytes(self) -> int:
        return self.width * self.height * CHANNELS

    # ─────────────────────────────────────────────────────────────────────────
    # Conversion
    # ─────────────────────────────────────────────────────────────────────────

    def to_pil(self) -> Image.Image:
        """Return a new RGBA PIL image with a copy of the pixels."""
        # (h, w, 4) uint8 arrays are interpreted as RGBA
        return Image.fromarray(np.ascontiguousarray(self.pixels).copy())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RasterImage):
            return NotImplemented
        return np.array_equal(self.pixels, other.pixels)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        """Concise representation for debugging."""
        return f"RasterImage({self.width}x{self.height})"
