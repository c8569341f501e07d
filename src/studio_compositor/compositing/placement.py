"""
Module: compositing.placement

Purpose:
    Aspect-preserving fit of a subject into the padded region of a canvas.

    The subject is scaled to fill one axis of the available region exactly
    and fit within the other. Horizontally it is always centred on the
    full canvas, so asymmetric left/right padding changes the size but
    never shifts the subject off-centre. Vertical position depends on the
    placement policy:

    - FLOOR_ALIGNED: bottom edge sits on the bottom padding line
    - CENTERED: centred on the full canvas height (top/bottom padding only
      affects sizing)

Key Functions:
    - place(): Compute destination Geometry

Used By:
    - compositing.pipeline
"""

from __future__ import annotations

import logging
import math

from studio_compositor.core.models import Geometry, PaddingSpec, PlacementPolicy
from studio_compositor.errors import CompositingError, ErrorKind

logger = logging.getLogger(__name__)


def _is_positive_size(width: float, height: float) -> bool:
    return all(math.isfinite(v) and v > 0 for v in (width, height))


def place(
    subject_width: float,
    subject_height: float,
    canvas_width: float,
    canvas_height: float,
    padding: PaddingSpec,
    policy: PlacementPolicy,
) -> Geometry:
    """
    Compute where to draw a subject on a canvas.

    Args:
        subject_width: Width of the (cropped) subject
        subject_height: Height of the (cropped) subject
        canvas_width: Output canvas width
        canvas_height: Output canvas height
        padding: Validated padding fractions
        policy: Vertical placement rule

    Returns:
        Geometry with width/height equal to the subject's aspect ratio and
        the rectangle fully inside the canvas

    Raises:
        CompositingError: INVALID_DIMENSIONS for non-positive, NaN or infinite sizes

    Example:
        >>> g = place(60, 40, 1000, 1000, PaddingSpec(0.1, 0.1, 0.1, 0.1),
        ...           PlacementPolicy.FLOOR_ALIGNED)
        >>> (g.x, g.width)
        (100.0, 800.0)
    """
    if not _is_positive_size(subject_width, subject_height):
        raise CompositingError(
            f"Subject must have finite positive size: {subject_width}x{subject_height}",
            ErrorKind.INVALID_DIMENSIONS,
        )
    if not _is_positive_size(canvas_width, canvas_height):
        raise CompositingError(
            f"Canvas must have finite positive size: {canvas_width}x{canvas_height}",
            ErrorKind.INVALID_DIMENSIONS,
        )

    available_width = canvas_width * padding.horizontal_fraction
    available_height = canvas_height * padding.vertical_fraction
    aspect = subject_width / subject_height

    # Fit to width first, fall back to height if that overflows
    width = available_width
    height = width / aspect
    if height > available_height:
        height = available_height
        width = height * aspect

    x = (canvas_width - width) / 2
    if policy is PlacementPolicy.FLOOR_ALIGNED:
        y = canvas_height * (1 - padding.bottom) - height
    elif policy is PlacementPolicy.CENTERED:
        y = (canvas_height - height) / 2
    else:
        raise CompositingError(f"Unknown placement policy: {policy!r}", ErrorKind.INVALID_OPTIONS)

    geometry = Geometry(x=x, y=y, width=width, height=height)
    logger.debug(
        f"Placed {subject_width}x{subject_height} on {canvas_width}x{canvas_height} "
        f"({policy.value}): {geometry}"
    )
    return geometry
