"""
Module: watermark.overlay

Purpose:
    Apply a logo or licence-plate watermark to a base image. The mark is
    scaled uniformly to a percentage of the base width, offset by
    percentages of the base size and blended with a global opacity.

    No trimming happens here: callers supply an already trimmed logo.

Key Functions:
    - calculate_watermark_geometry(): Where the mark lands
    - position_to_percent(): Resolve a corner preset to x/y percent
    - apply_watermark(): Blend the mark onto the base
    - apply_watermark_with_options(): apply_watermark() driven by WatermarkOptions

Dependencies:
    - compositing.blending: Canvas, resample

Used By:
    - controller
"""

from __future__ import annotations

import logging
from typing import Tuple

from studio_compositor.compositing.blending import Canvas, check_canvas_limit, resample
from studio_compositor.compositing.config import DEFAULT_MAX_CANVAS_DIMENSION
from studio_compositor.core.models import Geometry, RasterImage
from studio_compositor.errors import CompositingError, ErrorKind

from .config import CORNER_INSET_PX, WatermarkOptions, WatermarkPosition

logger = logging.getLogger(__name__)


def calculate_watermark_geometry(
    base_size: Tuple[int, int],
    mark_size: Tuple[int, int],
    x_percent: float,
    y_percent: float,
    size_percent: float,
) -> Geometry:
    """
    Compute the mark's destination rectangle on the base image.

    Args:
        base_size: (width, height) of the base image
        mark_size: (width, height) of the mark
        x_percent: Left offset, percent of base width
        y_percent: Top offset, percent of base height
        size_percent: Mark width, percent of base width

    Returns:
        Geometry of the scaled mark (may extend past the base edges)

    Raises:
        CompositingError: INVALID_DIMENSIONS for empty sizes or size_percent <= 0

    Example:
        >>> calculate_watermark_geometry((2000, 1000), (200, 100), 2, 2, 15)
        Geometry(x=40.0, y=20.0, width=300.0, height=150.0)
    """
    base_width, base_height = base_size
    mark_width, mark_height = mark_size
    if min(base_width, base_height, mark_width, mark_height) <= 0:
        raise CompositingError(
            f"Images must have positive size: base {base_size}, mark {mark_size}",
            ErrorKind.INVALID_DIMENSIONS,
        )
    if size_percent <= 0:
        raise CompositingError(
            f"size_percent must be positive: {size_percent}",
            ErrorKind.INVALID_DIMENSIONS,
        )

    width = base_width * size_percent / 100
    scale = width / mark_width
    height = mark_height * scale

    return Geometry(
        x=base_width * x_percent / 100,
        y=base_height * y_percent / 100,
        width=width,
        height=height,
    )


def position_to_percent(
    position: WatermarkPosition,
    base_size: Tuple[int, int],
    mark_size: Tuple[int, int],
    size_percent: float,
    *,
    inset: int = CORNER_INSET_PX,
) -> Tuple[float, float]:
    """
    Resolve a corner preset to (x_percent, y_percent).

    The scaled mark is kept `inset` pixels away from both edges of the
    chosen corner.
    """
    base_width, base_height = base_size
    size = calculate_watermark_geometry(base_size, mark_size, 0, 0, size_percent)

    if position in (WatermarkPosition.TOP_RIGHT, WatermarkPosition.BOTTOM_RIGHT):
        x = base_width - size.width - inset
    else:
        x = inset
    if position in (WatermarkPosition.BOTTOM_LEFT, WatermarkPosition.BOTTOM_RIGHT):
        y = base_height - size.height - inset
    else:
        y = inset

    return x / base_width * 100, y / base_height * 100


def apply_watermark(
    base: RasterImage,
    mark: RasterImage,
    x_percent: float,
    y_percent: float,
    size_percent: float,
    opacity: float,
    *,
    max_dimension: int = DEFAULT_MAX_CANVAS_DIMENSION,
) -> RasterImage:
    """
    Blend a watermark onto a base image.

    Args:
        base: Image to watermark (not modified)
        mark: Logo/plate with transparency
        x_percent: Left offset, percent of base width
        y_percent: Top offset, percent of base height
        size_percent: Mark width, percent of base width
        opacity: Multiplier on the mark's alpha, in [0, 1]
        max_dimension: Cap on base width/height

    Returns:
        New image, same size as base

    Raises:
        CompositingError: ALLOCATION_FAILED for an over-cap base or scaled mark,
            INVALID_OPTIONS for opacity outside [0, 1]

    Example:
        >>> marked = apply_watermark(photo, logo, 2, 2, 15, 0.8)
        >>> marked.size == photo.size
        True
    """
    if not 0.0 <= opacity <= 1.0:
        raise CompositingError(f"opacity must be in [0, 1]: {opacity}", ErrorKind.INVALID_OPTIONS)
    check_canvas_limit(base.width, base.height, max_dimension)

    geometry = calculate_watermark_geometry(
        base.size, mark.size, x_percent, y_percent, size_percent
    )
    x, y, width, height = geometry.to_pixels()
    check_canvas_limit(width, height, max_dimension)

    canvas = Canvas.from_image(base)
    canvas.draw(resample(mark, width, height), x, y, opacity=opacity)

    logger.debug(
        f"Applied watermark {mark!r} at ({x}, {y}) size {width}x{height} "
        f"opacity {opacity} on {base!r}"
    )
    return canvas.freeze()


def apply_watermark_with_options(
    base: RasterImage,
    mark: RasterImage,
    options: WatermarkOptions,
) -> RasterImage:
    """apply_watermark() with settings (and corner preset) from WatermarkOptions."""
    x_percent, y_percent = options.x_percent, options.y_percent
    if options.position is not None:
        x_percent, y_percent = position_to_percent(
            options.position, base.size, mark.size, options.size_percent
        )
    return apply_watermark(
        base,
        mark,
        x_percent,
        y_percent,
        options.size_percent,
        options.opacity,
        max_dimension=options.max_dimension,
    )
