"""
Module: compositing.blending

Purpose:
    Source-over alpha compositing on float scratch buffers.

    out.rgb = src.rgb * src.a + dst.rgb * (1 - src.a)
    out.a   = src.a + dst.a * (1 - src.a)

    No gamma handling: blending happens directly on the stored 8-bit
    values.

Key Classes:
    - Canvas: Mutable float accumulation buffer for one pipeline call

Key Functions:
    - check_canvas_limit(): Enforce the output size cap
    - resample(): Scale a RasterImage to an exact pixel size

Dependencies:
    - numpy: Pixel arithmetic
    - PIL.Image: High quality resampling (LANCZOS)

Used By:
    - compositing.pipeline
    - watermark.overlay
"""

from __future__ import annotations

import logging
from typing import Tuple

import numpy as np
from PIL import Image

from studio_compositor.core.models import RasterImage
from studio_compositor.errors import CompositingError, ErrorKind

logger = logging.getLogger(__name__)


def check_canvas_limit(width: int, height: int, max_dimension: int) -> None:
    """
    Reject an output buffer larger than the configured cap before allocating.

    Raises:
        CompositingError: ALLOCATION_FAILED if either side exceeds max_dimension
    """
    if width > max_dimension or height > max_dimension:
        raise CompositingError(
            f"Canvas {width}x{height} exceeds the {max_dimension}px limit",
            ErrorKind.ALLOCATION_FAILED,
        )


def resample(image: RasterImage, width: int, height: int) -> RasterImage:
    """
    Scale an image to exactly width x height (aspect not preserved).

    Pillow resizes RGBA in premultiplied space, so transparent pixels do
    not bleed dark fringes into the edges.
    """
    if (width, height) == image.size:
        return image
    resized = image.to_pil().resize((width, height), Image.Resampling.LANCZOS)
    return RasterImage.from_pil(resized)


class Canvas:
    """
    Mutable scratch buffer used while drawing one output image.

    Values are float32 in [0, 1], shape (height, width, 4). A Canvas is
    created, drawn on and frozen within a single call; it never escapes
    the public API.

    Example:
        >>> canvas = Canvas.filled(100, 50, (255, 255, 255, 255))
        >>> canvas.draw(logo, 10, 10, opacity=0.8)
        >>> result = canvas.freeze()
    """

    def __init__(self, buffer: np.ndarray) -> None:
        self._buffer = buffer

    @classmethod
    def filled(cls, width: int, height: int, rgba: Tuple[int, int, int, int]) -> Canvas:
        """
        Allocate a canvas filled with one colour.

        Raises:
            CompositingError: ALLOCATION_FAILED if memory runs out
        """
        try:
            buffer = np.empty((height, width, 4), dtype=np.float32)
        except MemoryError as e:
            raise CompositingError(
                f"Could not allocate {width}x{height} canvas",
                ErrorKind.ALLOCATION_FAILED,
            ) from e
        buffer[...] = np.asarray(rgba, dtype=np.float32) / 255.0
        return cls(buffer)

    @classmethod
    def from_image(cls, image: RasterImage) -> Canvas:
        """Start from an existing image."""
        try:
            buffer = image.pixels.astype(np.float32) / 255.0
        except MemoryError as e:
            raise CompositingError(
                f"Could not allocate canvas for {image!r}",
                ErrorKind.ALLOCATION_FAILED,
            ) from e
        return cls(buffer)

    @property
    def width(self) -> int:
        return int(self._buffer.shape[1])

    @property
    def height(self) -> int:
        return int(self._buffer.shape[0])

    def draw(self, source: RasterImage, x: int, y: int, *, opacity: float = 1.0) -> None:
        """
        Blend source over the canvas with its top-left corner at (x, y).

        Parts of the source outside the canvas are clipped.

        Args:
            source: Image to draw, already at its final size
            x: Destination left edge (may be negative)
            y: Destination top edge (may be negative)
            opacity: Multiplier applied to the source alpha, in [0, 1]
        """
        if not 0.0 <= opacity <= 1.0:
            raise CompositingError(
                f"opacity must be in [0, 1]: {opacity}", ErrorKind.INVALID_OPTIONS
            )

        # Intersect the source rectangle with the canvas
        left = max(x, 0)
        top = max(y, 0)
        right = min(x + source.width, self.width)
        bottom = min(y + source.height, self.height)
        if right <= left or bottom <= top:
            logger.debug(f"{source!r} at ({x}, {y}) lies outside the canvas")
            return

        src = source.pixels[top - y : bottom - y, left - x : right - x].astype(np.float32) / 255.0
        dst = self._buffer[top:bottom, left:right]

        src_a = src[:, :, 3:4] * opacity
        inv_a = 1.0 - src_a
        dst[:, :, :3] = src[:, :, :3] * src_a + dst[:, :, :3] * inv_a
        dst[:, :, 3:4] = src_a + dst[:, :, 3:4] * inv_a

    def freeze(self) -> RasterImage:
        """Quantise back to 8 bits and return an immutable image."""
        pixels = np.clip(np.rint(self._buffer * 255.0), 0, 255).astype(np.uint8)
        return RasterImage(pixels)
