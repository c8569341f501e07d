"""
Module: compositing.pipeline

Purpose:
    Composite a background-removed subject onto a backdrop.
    Trim → Allocate → Paint backdrop → Place → Draw → Encode

    Backdrop decides the default placement: subjects on a photo stand on
    the floor line (FLOOR_ALIGNED), subjects on a solid colour float in
    the middle (CENTERED).

Key Functions:
    - render(): Produce the composite RasterImage
    - composite(): render() + encode to bytes
    - composite_with_options(): composite() driven by CompositingOptions
    - composite_on_background(): Studio preset
    - composite_on_solid_color(): Interior preset
    - composite_full_frame(): No trimming, no padding

Key Classes:
    - RenderResult: Rendered image plus placement diagnostics
    - CompositeOutput: Encoded bytes plus placement diagnostics

Dependencies:
    - compositing.cropper / placement / blending / codec

Used By:
    - controller
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from studio_compositor.core.models import (
    BackdropSpec,
    BackgroundImage,
    BoundingBox,
    CanvasSpec,
    Geometry,
    OutputFormat,
    PaddingSpec,
    PlacementPolicy,
    RasterImage,
    SolidColor,
)
from studio_compositor.errors import CompositingError, ErrorKind
from studio_compositor.timing import TimingLog, timed_phase

from .blending import Canvas, check_canvas_limit, resample
from .codec import encode_image
from .config import (
    DEFAULT_MAX_CANVAS_DIMENSION,
    FULL_FRAME_DEFAULTS,
    INTERIOR_DEFAULTS,
    STUDIO_DEFAULTS,
    CompositingOptions,
)
from .cropper import trim_transparent
from .detector import DEFAULT_ALPHA_THRESHOLD
from .placement import place

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderResult:
    """
    Rendered composite (immutable).

    Attributes:
        image: Composite at the canvas size
        geometry: Where the subject was drawn
        bounds: Detected subject content box (None if untrimmed or fully transparent)
        policy: Placement policy that was applied
        warnings: Recoverable problems, e.g. a fully transparent subject
    """
    image: RasterImage
    geometry: Geometry
    bounds: Optional[BoundingBox]
    policy: PlacementPolicy
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CompositeOutput:
    """
    Encoded composite (immutable).

    Attributes:
        data: Encoded image bytes
        output_format: Format of data
        size: (width, height) of the encoded image
        geometry: Where the subject was drawn
        bounds: Detected subject content box
        policy: Placement policy that was applied
        warnings: Recoverable problems
    """
    data: bytes
    output_format: OutputFormat
    size: Tuple[int, int]
    geometry: Geometry
    bounds: Optional[BoundingBox]
    policy: PlacementPolicy
    warnings: Tuple[str, ...] = ()


def default_policy(backdrop: BackdropSpec) -> PlacementPolicy:
    """FLOOR_ALIGNED on photos, CENTERED on solid colours."""
    if isinstance(backdrop, BackgroundImage):
        return PlacementPolicy.FLOOR_ALIGNED
    return PlacementPolicy.CENTERED


def check_canvas_size(canvas: CanvasSpec, max_dimension: int = DEFAULT_MAX_CANVAS_DIMENSION) -> None:
    """
    Reject canvases larger than the configured cap before allocating.

    Raises:
        CompositingError: ALLOCATION_FAILED if either side exceeds max_dimension
    """
    check_canvas_limit(canvas.output_width, canvas.output_height, max_dimension)


def paint_backdrop(backdrop: BackdropSpec, width: int, height: int) -> Canvas:
    """
    Allocate the scratch canvas and paint the backdrop on it.

    Backdrop images are stretched to exactly width x height, ignoring
    their own aspect ratio.
    """
    if isinstance(backdrop, SolidColor):
        return Canvas.filled(width, height, backdrop.rgba)
    if isinstance(backdrop, BackgroundImage):
        return Canvas.from_image(resample(backdrop.image, width, height))
    raise CompositingError(f"Unsupported backdrop: {backdrop!r}", ErrorKind.INVALID_OPTIONS)


def render(
    subject: RasterImage,
    backdrop: BackdropSpec,
    canvas: CanvasSpec,
    padding: PaddingSpec,
    *,
    policy: Optional[PlacementPolicy] = None,
    trim: bool = True,
    alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD,
    max_dimension: int = DEFAULT_MAX_CANVAS_DIMENSION,
) -> RenderResult:
    """
    Composite a subject onto a backdrop without encoding.

    Args:
        subject: RGBA subject, typically a cut-out with transparent margins
        backdrop: SolidColor or BackgroundImage
        canvas: Output size (quality/format unused here)
        padding: Empty margins around the subject
        policy: Placement policy; None derives it from the backdrop
        trim: Crop the subject's transparent margin first
        alpha_threshold: Content threshold for trimming
        max_dimension: Cap on canvas width/height

    Returns:
        RenderResult with the composite and placement details

    Raises:
        CompositingError: INVALID_DIMENSIONS / ALLOCATION_FAILED
    """
    check_canvas_size(canvas, max_dimension)
    warnings = []

    # 1-2. Trim the subject to its content
    bounds: Optional[BoundingBox] = None
    if trim:
        subject, bounds = trim_transparent(subject, alpha_threshold)
        if bounds is None:
            warnings.append(
                f"{ErrorKind.FULLY_TRANSPARENT_INPUT.value}: no subject pixels above "
                f"alpha {alpha_threshold}, composited uncropped"
            )

    # 3-4. Allocate and paint the backdrop
    scratch = paint_backdrop(backdrop, canvas.output_width, canvas.output_height)

    # 5. Place
    applied_policy = policy if policy is not None else default_policy(backdrop)
    geometry = place(
        subject.width,
        subject.height,
        canvas.output_width,
        canvas.output_height,
        padding,
        applied_policy,
    )

    # 6. Draw
    x, y, width, height = geometry.to_pixels()
    scratch.draw(resample(subject, width, height), x, y)

    logger.info(
        f"Rendered {subject!r} on {canvas.output_width}x{canvas.output_height} "
        f"({applied_policy.value}) at ({x}, {y}) size {width}x{height}"
    )
    return RenderResult(
        image=scratch.freeze(),
        geometry=geometry,
        bounds=bounds,
        policy=applied_policy,
        warnings=tuple(warnings),
    )


def composite(
    subject: RasterImage,
    backdrop: BackdropSpec,
    canvas: CanvasSpec,
    padding: PaddingSpec,
    *,
    policy: Optional[PlacementPolicy] = None,
    trim: bool = True,
    alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD,
    max_dimension: int = DEFAULT_MAX_CANVAS_DIMENSION,
    timings: Optional[TimingLog] = None,
) -> CompositeOutput:
    """
    Composite a subject onto a backdrop and encode the result.

    Same arguments as render(); the result is encoded in
    canvas.output_format at canvas.quality. When timings is given, the
    "render" and "encode" stages are recorded in it.

    Raises:
        CompositingError: INVALID_DIMENSIONS / ALLOCATION_FAILED / ENCODE_FAILED

    Example:
        >>> out = composite(car, SolidColor.parse("#c8cfdb"),
        ...                 CanvasSpec(1920, 1280), PaddingSpec(0.1, 0.1, 0.05, 0.15))
        >>> out.policy
        <PlacementPolicy.CENTERED: 'centered'>
    """
    with timed_phase(timings, "render"):
        rendered = render(
            subject,
            backdrop,
            canvas,
            padding,
            policy=policy,
            trim=trim,
            alpha_threshold=alpha_threshold,
            max_dimension=max_dimension,
        )
    with timed_phase(timings, "encode"):
        data = encode_image(rendered.image, canvas.output_format, canvas.quality)
    logger.info(f"Composite encoded as {canvas.output_format.value}: {len(data) / 1024:.0f}KB")
    return CompositeOutput(
        data=data,
        output_format=canvas.output_format,
        size=rendered.image.size,
        geometry=rendered.geometry,
        bounds=rendered.bounds,
        policy=rendered.policy,
        warnings=rendered.warnings,
    )


def composite_with_options(
    subject: RasterImage,
    backdrop: BackdropSpec,
    options: CompositingOptions,
    *,
    timings: Optional[TimingLog] = None,
) -> CompositeOutput:
    """composite() with every setting taken from a CompositingOptions."""
    return composite(
        subject,
        backdrop,
        options.canvas,
        options.padding,
        policy=options.placement,
        trim=options.trim,
        alpha_threshold=options.alpha_threshold,
        max_dimension=options.max_dimension,
        timings=timings,
    )


def composite_on_background(
    subject: RasterImage,
    background: RasterImage,
    options: CompositingOptions = STUDIO_DEFAULTS,
) -> CompositeOutput:
    """Place a cut-out car on a studio photo (floor aligned by default)."""
    return composite_with_options(subject, BackgroundImage(background), options)


def composite_on_solid_color(
    subject: RasterImage,
    color: Union[str, Tuple[int, int, int], SolidColor],
    options: CompositingOptions = INTERIOR_DEFAULTS,
) -> CompositeOutput:
    """Place a cut-out car on a solid colour (centred by default)."""
    backdrop = color if isinstance(color, SolidColor) else SolidColor.parse(color)
    return composite_with_options(subject, backdrop, options)


def composite_full_frame(
    subject: RasterImage,
    backdrop: BackdropSpec,
    options: CompositingOptions = FULL_FRAME_DEFAULTS,
) -> CompositeOutput:
    """
    Fit the whole subject image, margins included, to the full canvas.

    Used when the caller wants the cut-out exactly as delivered, with no
    trimming and no padding.
    """
    return composite_with_options(subject, backdrop, options)
