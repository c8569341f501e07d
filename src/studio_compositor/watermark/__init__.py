"""
Module: watermark

Purpose:
    Logo and licence-plate overlays on finished photos.

Key Functions:
    - apply_watermark(): Percentage-positioned overlay
    - apply_watermark_with_options(): Same, driven by WatermarkOptions

Key Classes:
    - WatermarkOptions: Per-request configuration
    - WatermarkPosition: Corner presets
"""

from .config import WatermarkOptions, WatermarkPosition, describe_watermark_options
from .overlay import (
    apply_watermark,
    apply_watermark_with_options,
    calculate_watermark_geometry,
    position_to_percent,
)

__all__ = [
    "WatermarkOptions",
    "WatermarkPosition",
    "describe_watermark_options",
    "apply_watermark",
    "apply_watermark_with_options",
    "calculate_watermark_geometry",
    "position_to_percent",
]
