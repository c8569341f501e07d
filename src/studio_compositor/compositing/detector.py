"""
Module: compositing.detector

Purpose:
    Find the tight bounding box of non-transparent content in an RGBA
    image. Cut-outs from the segmentation service carry a wide
    transparent margin; trimming it is what makes placement repeatable.

Key Functions:
    - detect_content_bounds(): Bounding box of pixels with alpha > threshold
    - content_mask(): Boolean mask of those pixels

Dependencies:
    - numpy: Vectorised alpha scan

Used By:
    - compositing.cropper: trim_transparent()
    - compositing.pipeline
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from studio_compositor.core.models import BoundingBox, RasterImage
from studio_compositor.errors import CompositingError, ErrorKind

logger = logging.getLogger(__name__)

# Anti-aliased cut-out edges are rarely fully transparent; anything at or
# below this alpha counts as background.
DEFAULT_ALPHA_THRESHOLD = 10


def content_mask(image: RasterImage, alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD) -> np.ndarray:
    """
    Boolean (height, width) mask of content pixels.

    Args:
        image: Image to scan
        alpha_threshold: Pixels with alpha strictly above this are content

    Returns:
        Boolean array, True where alpha > alpha_threshold
    """
    if not 0 <= alpha_threshold <= 255:
        raise CompositingError(
            f"alpha_threshold must be in [0, 255]: {alpha_threshold}",
            ErrorKind.INVALID_OPTIONS,
        )
    return image.alpha > alpha_threshold


def detect_content_bounds(
    image: RasterImage,
    alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD,
) -> Optional[BoundingBox]:
    """
    Detect the tight bounding box of non-transparent content.

    Single pass over the alpha channel: rows and columns that hold at
    least one content pixel are collected, and the first/last of each
    give the box.

    Args:
        image: Image to scan
        alpha_threshold: Pixels with alpha strictly above this are content

    Returns:
        Inclusive BoundingBox, or None if the image is fully transparent.
        Callers should fall back to the uncropped image on None.

    Example:
        >>> box = detect_content_bounds(subject)
        >>> box.size
        (60, 60)
    """
    mask = content_mask(image, alpha_threshold)

    rows = np.flatnonzero(mask.any(axis=1))
    if rows.size == 0:
        logger.debug(f"No content above alpha {alpha_threshold} in {image!r}")
        return None
    cols = np.flatnonzero(mask.any(axis=0))

    box = BoundingBox(
        min_x=int(cols[0]),
        min_y=int(rows[0]),
        max_x=int(cols[-1]),
        max_y=int(rows[-1]),
    )
    logger.debug(f"Detected content {box!r} in {image!r}")
    return box
