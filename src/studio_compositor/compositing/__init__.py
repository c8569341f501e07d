"""
Module: compositing

Purpose:
    Subject compositing pipeline: detect and trim the subject's content,
    fit it into the padded canvas region and draw it over a backdrop.

Key Functions:
    - detect_content_bounds(): Tight box of non-transparent pixels
    - crop_to_bounds() / trim_transparent(): Cropping
    - place(): Aspect-fit placement
    - composite(): Full pipeline to encoded bytes

Key Classes:
    - CompositingOptions: Per-request configuration
    - CompositeOutput: Encoded result with diagnostics
"""

from .detector import DEFAULT_ALPHA_THRESHOLD, detect_content_bounds
from .cropper import crop_to_bounds, trim_transparent
from .placement import place
from .codec import decode_image, encode_image
from .loading import load_image, load_images
from .config import (
    CompositingOptions,
    FULL_FRAME_DEFAULTS,
    INTERIOR_DEFAULTS,
    STUDIO_DEFAULTS,
    describe_options,
)
from .pipeline import (
    CompositeOutput,
    RenderResult,
    composite,
    composite_full_frame,
    composite_on_background,
    composite_on_solid_color,
    composite_with_options,
    render,
)

__all__ = [
    "DEFAULT_ALPHA_THRESHOLD",
    "detect_content_bounds",
    "crop_to_bounds",
    "trim_transparent",
    "place",
    "decode_image",
    "encode_image",
    "load_image",
    "load_images",
    "CompositingOptions",
    "FULL_FRAME_DEFAULTS",
    "INTERIOR_DEFAULTS",
    "STUDIO_DEFAULTS",
    "describe_options",
    "CompositeOutput",
    "RenderResult",
    "composite",
    "composite_full_frame",
    "composite_on_background",
    "composite_on_solid_color",
    "composite_with_options",
    "render",
]
