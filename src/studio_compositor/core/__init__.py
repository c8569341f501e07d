"""
Studio Compositor Core Package

Shared data models and option validation for the compositing and
watermark pipelines.
"""

from .models import (
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

__all__ = [
    "BackdropSpec",
    "BackgroundImage",
    "BoundingBox",
    "CanvasSpec",
    "Geometry",
    "OutputFormat",
    "PaddingSpec",
    "PlacementPolicy",
    "RasterImage",
    "SolidColor",
]
