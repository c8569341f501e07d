"""
Core Models Package

Immutable, validated value types shared by every compositing stage.

All models are frozen dataclasses: stages build new values rather than
changing the ones they receive, so independent requests can run on
separate threads without coordination.
"""

from .raster import RasterImage
from .bounds import BoundingBox
from .geometry import CanvasSpec, Geometry, OutputFormat, PaddingSpec, PlacementPolicy
from .backdrop import BackdropSpec, BackgroundImage, SolidColor

__all__ = [
    "RasterImage",
    "BoundingBox",
    "CanvasSpec",
    "Geometry",
    "OutputFormat",
    "PaddingSpec",
    "PlacementPolicy",
    "BackdropSpec",
    "BackgroundImage",
    "SolidColor",
]
