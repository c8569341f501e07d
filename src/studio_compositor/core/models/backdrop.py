"""
Module: backdrop

Purpose:
    What a subject is composited onto: a solid colour or a backdrop image.

Key Classes:
    - SolidColor: Uniform RGB fill
    - BackgroundImage: Photo stretched to cover the whole canvas

Dependencies:
    - PIL.ImageColor: CSS colour parsing

Used By:
    - compositing.pipeline
    - controller
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

from PIL import ImageColor

from studio_compositor.errors import CompositingError, ErrorKind

from .raster import RasterImage

RGB = Tuple[int, int, int]


@dataclass(frozen=True, slots=True)
class SolidColor:
    """
    Uniform backdrop colour.

    Example:
        >>> SolidColor.parse("#c8cfdb").rgb
        (200, 207, 219)
    """

    rgb: RGB

    def __post_init__(self) -> None:
        if len(self.rgb) != 3 or any(not 0 <= c <= 255 for c in self.rgb):
            raise CompositingError(
                f"Colour must be three channels in [0, 255]: {self.rgb!r}",
                ErrorKind.INVALID_OPTIONS,
            )

    @classmethod
    def parse(cls, value: Union[str, RGB]) -> SolidColor:
        """
        Build from a CSS colour string ("#fff", "white", "rgb(...)") or RGB tuple.

        Raises:
            CompositingError: INVALID_OPTIONS if the colour can't be parsed
        """
        if isinstance(value, str):
            try:
                parsed = ImageColor.getrgb(value)
            except ValueError as e:
                raise CompositingError(
                    f"Unrecognised colour: {value!r}", ErrorKind.INVALID_OPTIONS
                ) from e
            return cls(tuple(parsed[:3]))
        return cls(tuple(int(c) for c in value))

    @property
    def rgba(self) -> Tuple[int, int, int, int]:
        return (*self.rgb, 255)


@dataclass(frozen=True)
class BackgroundImage:
    """Backdrop photo; always stretched to the canvas, never letterboxed."""

    image: RasterImage


BackdropSpec = Union[SolidColor, BackgroundImage]
