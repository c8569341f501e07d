"""
Module: compositing.cropper

Purpose:
    Crop RasterImages to a bounding box. Crops are byte-exact copies;
    nothing is resampled.

Key Functions:
    - crop_to_bounds(): Crop a single region
    - trim_transparent(): Detect content and crop to it, falling back to
      the original image when nothing is detected

Dependencies:
    - numpy: Array slicing
    - compositing.detector: Content detection

Used By:
    - compositing.pipeline
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from studio_compositor.core.models import BoundingBox, RasterImage
from studio_compositor.errors import CompositingError, ErrorKind

from .detector import DEFAULT_ALPHA_THRESHOLD, detect_content_bounds

logger = logging.getLogger(__name__)


def crop_to_bounds(image: RasterImage, box: BoundingBox) -> RasterImage:
    """
    Crop an image to a bounding box.

    Args:
        image: Source image
        box: Inclusive region to keep

    Returns:
        New image of size (box.width, box.height), pixels copied verbatim

    Raises:
        CompositingError: INVALID_DIMENSIONS if the box extends past the image

    Example:
        >>> cropped = crop_to_bounds(img, BoundingBox(20, 30, 79, 89))
        >>> cropped.size
        (60, 60)
    """
    if not box.fits(image.width, image.height):
        raise CompositingError(
            f"{box!r} exceeds image size {image.width}x{image.height}",
            ErrorKind.INVALID_DIMENSIONS,
        )
    region = image.pixels[box.min_y : box.max_y + 1, box.min_x : box.max_x + 1]
    return RasterImage(region)


def trim_transparent(
    image: RasterImage,
    alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD,
) -> Tuple[RasterImage, Optional[BoundingBox]]:
    """
    Crop away the transparent margin around an image's content.

    A fully transparent image is not an error: it is returned unchanged
    together with a None box so the caller can report it.

    Args:
        image: Source image
        alpha_threshold: Pixels with alpha strictly above this are content

    Returns:
        (trimmed image, detected box or None)
    """
    box = detect_content_bounds(image, alpha_threshold)
    if box is None:
        logger.warning(
            f"{image!r} has no pixels above alpha {alpha_threshold}; using it uncropped"
        )
        return image, None
    if box.is_full(image.width, image.height):
        return image, box
    return crop_to_bounds(image, box), box
