"""
Module: controller

Purpose:
    Request-level entry points used by the HTTP/job layer.
    Load (concurrently) → Trim → Place → Draw → Encode

    Each request is independent and holds no shared state, so any number
    of them may run on parallel threads. Errors are raised as
    CompositingError with a typed kind; nothing is retried here.

Key Functions:
    - build_composite(): Car on a studio photo or a solid colour
    - build_watermark(): Logo/plate overlay on a finished photo
    - build_composites(): Many independent composites on a thread pool

Key Classes:
    - CompositeJob: One queued composite request
    - CompositeResult: Encoded composite plus diagnostics
    - WatermarkResult: Encoded watermarked image plus diagnostics

Dependencies:
    - compositing: Loading, pipeline, options
    - watermark: Overlay, options
    - timing: Stage timings

Used By:
    - External service layer (out of this package)
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from studio_compositor.compositing.codec import encode_image
from studio_compositor.compositing.config import (
    INTERIOR_DEFAULTS,
    STUDIO_DEFAULTS,
    CompositingOptions,
)
from studio_compositor.compositing.loading import (
    DEFAULT_FETCH_TIMEOUT_S,
    ImageSource,
    describe_source,
    load_image,
    load_images,
)
from studio_compositor.compositing.pipeline import composite_with_options
from studio_compositor.core.models import (
    BackdropSpec,
    BackgroundImage,
    BoundingBox,
    Geometry,
    OutputFormat,
    PlacementPolicy,
    SolidColor,
)
from studio_compositor.errors import CompositingError, ErrorKind
from studio_compositor.timing import TimingLog, timed_phase
from studio_compositor.watermark.config import WatermarkOptions
from studio_compositor.watermark.overlay import apply_watermark_with_options

logger = logging.getLogger(__name__)

ColorValue = Union[str, Tuple[int, int, int], SolidColor]


@dataclass(frozen=True)
class CompositeResult:
    """
    Complete composite result (immutable).

    Attributes:
        data: Encoded image bytes
        output_format: Format of data
        size: (width, height) of the output
        geometry: Where the subject was drawn
        bounds: Detected subject content box (None if untrimmed/transparent)
        policy: Placement policy that was applied
        warnings: Recoverable problems encountered
        timings: Stage name -> seconds

    Example:
        >>> result = build_composite(car_url, background=studio_url)
        >>> result.output_format.mime_type
        'image/jpeg'
    """
    data: bytes
    output_format: OutputFormat
    size: Tuple[int, int]
    geometry: Geometry
    bounds: Optional[BoundingBox]
    policy: PlacementPolicy
    warnings: Tuple[str, ...]
    timings: Dict[str, float]


@dataclass(frozen=True)
class WatermarkResult:
    """
    Watermarked image (immutable).

    Attributes:
        data: Encoded image bytes
        output_format: Format of data
        size: (width, height), always the base image size
        timings: Stage name -> seconds
    """
    data: bytes
    output_format: OutputFormat
    size: Tuple[int, int]
    timings: Dict[str, float]


@dataclass(frozen=True)
class CompositeJob:
    """One composite request for build_composites()."""
    subject: ImageSource
    background: Optional[ImageSource] = None
    color: Optional[ColorValue] = None
    options: Union[CompositingOptions, Dict[str, Any], None] = None


def _resolve_options(
    options: Union[CompositingOptions, Dict[str, Any], None],
    preset: CompositingOptions,
) -> CompositingOptions:
    if options is None:
        return preset
    if isinstance(options, CompositingOptions):
        return options
    return CompositingOptions.from_dict(options, defaults=preset)


def build_composite(
    subject: ImageSource,
    *,
    background: Optional[ImageSource] = None,
    color: Optional[ColorValue] = None,
    options: Union[CompositingOptions, Dict[str, Any], None] = None,
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT_S,
) -> CompositeResult:
    """
    Composite a background-removed subject onto a photo or a colour.

    Exactly one of background/color must be given. Without explicit
    options the studio preset is used for photos and the interior preset
    for colours; a dict of options is applied on top of that preset.

    Args:
        subject: Cut-out subject (bytes, path, URL, data URL or RasterImage)
        background: Backdrop photo source
        color: Backdrop colour ("#c8cfdb", "white", (r, g, b) or SolidColor)
        options: CompositingOptions or camelCase payload dict
        fetch_timeout: HTTP timeout for URL sources, seconds

    Returns:
        CompositeResult with encoded bytes and diagnostics

    Raises:
        CompositingError: Any typed failure (fetch, decode, padding,
            dimensions, allocation, encode)

    Example:
        >>> result = build_composite(car_png, color="#c8cfdb",
        ...                          options={"outputWidth": 1920, "outputHeight": 1280})
        >>> result.policy
        <PlacementPolicy.CENTERED: 'centered'>
    """
    if (background is None) == (color is None):
        raise CompositingError(
            "Exactly one of background or color is required",
            ErrorKind.INVALID_OPTIONS,
        )

    timings = TimingLog()
    preset = STUDIO_DEFAULTS if background is not None else INTERIOR_DEFAULTS
    resolved = _resolve_options(options, preset)

    logger.info(
        f"Compositing {describe_source(subject)} onto "
        f"{describe_source(background) if background is not None else color} "
        f"at {resolved.output_width}x{resolved.output_height}"
    )

    backdrop: BackdropSpec
    with timed_phase(timings, "load"):
        if background is not None:
            subject_image, background_image = load_images(
                subject, background, timeout=fetch_timeout
            )
            backdrop = BackgroundImage(background_image)
        else:
            subject_image = load_image(subject, timeout=fetch_timeout)
            backdrop = color if isinstance(color, SolidColor) else SolidColor.parse(color)

    # Degenerate-subject warnings are logged where they arise (cropper)
    output = composite_with_options(subject_image, backdrop, resolved, timings=timings)
    logger.info(f"Composite done: {len(output.data) / 1024:.0f}KB, {timings.summary()}")

    return CompositeResult(
        data=output.data,
        output_format=output.output_format,
        size=output.size,
        geometry=output.geometry,
        bounds=output.bounds,
        policy=output.policy,
        warnings=output.warnings,
        timings=timings.to_dict(),
    )


def build_watermark(
    base: ImageSource,
    mark: ImageSource,
    options: Union[WatermarkOptions, Dict[str, Any], None] = None,
    *,
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT_S,
) -> WatermarkResult:
    """
    Overlay a logo or licence-plate graphic on a base image.

    Args:
        base: Photo to watermark
        mark: Logo/plate with transparency, already trimmed
        options: WatermarkOptions or camelCase payload dict
        fetch_timeout: HTTP timeout for URL sources, seconds

    Returns:
        WatermarkResult (PNG by default)

    Raises:
        CompositingError: Any typed failure
    """
    if options is None:
        resolved = WatermarkOptions()
    elif isinstance(options, WatermarkOptions):
        resolved = options
    else:
        resolved = WatermarkOptions.from_dict(options)

    timings = TimingLog()
    with timed_phase(timings, "load"):
        base_image, mark_image = load_images(base, mark, timeout=fetch_timeout)

    with timed_phase(timings, "render"):
        marked = apply_watermark_with_options(base_image, mark_image, resolved)

    with timed_phase(timings, "encode"):
        data = encode_image(marked, resolved.output_format, resolved.quality)

    logger.info(
        f"Watermarked {describe_source(base)}: {len(data) / 1024:.0f}KB, {timings.summary()}"
    )
    return WatermarkResult(
        data=data,
        output_format=resolved.output_format,
        size=marked.size,
        timings=timings.to_dict(),
    )


def build_composites(
    jobs: Sequence[CompositeJob],
    *,
    max_workers: int = 4,
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT_S,
) -> List[Union[CompositeResult, CompositingError]]:
    """
    Run independent composite jobs in parallel.

    A failing job does not stop the others: its CompositingError is
    returned in its slot instead of a result.

    Args:
        jobs: Requests to run
        max_workers: Thread pool size
        fetch_timeout: HTTP timeout for URL sources, seconds

    Returns:
        One CompositeResult or CompositingError per job, in job order
    """
    if not jobs:
        return []

    def run(job: CompositeJob) -> Union[CompositeResult, CompositingError]:
        try:
            return build_composite(
                job.subject,
                background=job.background,
                color=job.color,
                options=job.options,
                fetch_timeout=fetch_timeout,
            )
        except CompositingError as e:
            logger.error(f"Composite of {describe_source(job.subject)} failed: {e}")
            return e

    with ThreadPoolExecutor(max_workers=min(max_workers, len(jobs))) as pool:
        return list(pool.map(run, jobs))
