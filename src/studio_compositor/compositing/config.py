"""
Module: compositing.config

Purpose:
    Configuration for compositing requests. One explicit, immutable
    options object per call; every recognised option and its effect can
    be listed with describe_options().

Key Classes:
    - CompositingOptions: Output size, padding, quality, format, trimming

Key Functions:
    - describe_options(): Option name -> description
    - CompositingOptions.from_dict(): Build from a camelCase JSON payload

Key Constants:
    - STUDIO_DEFAULTS: Car on studio photo (floor aligned)
    - INTERIOR_DEFAULTS: Car on solid colour (centred)
    - DEFAULT_MAX_CANVAS_DIMENSION: Hard cap on output width/height

Dependencies:
    - dataclasses (std)
    - core.schemas: Payload validation

Used By:
    - compositing.pipeline
    - controller
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Optional

from studio_compositor.core.models import CanvasSpec, OutputFormat, PaddingSpec, PlacementPolicy
from studio_compositor.core.schemas import validate_compositing_options
from studio_compositor.errors import CompositingError, ErrorKind

from .detector import DEFAULT_ALPHA_THRESHOLD

# Peak memory per image is width * height * 4 bytes (16 MB at 2048x2048,
# 64 MB at 4096x4096); the float scratch canvas is four times that.
DEFAULT_MAX_CANVAS_DIMENSION = 4096


def _doc(text: str) -> dict:
    return {"doc": text}


@dataclass(frozen=True)
class CompositingOptions:
    """
    Configuration for one compositing request (immutable).

    Attributes:
        output_width: Output canvas width in pixels
        output_height: Output canvas height in pixels
        padding_left: Fraction of canvas reserved empty on the left
        padding_right: Fraction of canvas reserved empty on the right
        padding_top: Fraction of canvas reserved empty at the top
        padding_bottom: Fraction of canvas reserved empty at the bottom
        quality: Lossy encoder fidelity in (0, 1]
        output_format: Encoded output format
        alpha_threshold: Alpha above which a pixel counts as subject content
        trim: Whether to crop the subject's transparent margin first
        placement: Explicit placement policy; None picks it from the backdrop
        max_dimension: Largest accepted output width or height

    Example:
        >>> opts = CompositingOptions.from_dict({"outputWidth": 1000, "outputHeight": 1000})
        >>> opts.padding
        PaddingSpec(left=0.1, right=0.1, top=0.15, bottom=0.05)
    """

    output_width: int = field(default=1920, metadata=_doc("Output canvas width in pixels"))
    output_height: int = field(default=1440, metadata=_doc("Output canvas height in pixels"))
    padding_left: float = field(default=0.10, metadata=_doc("Fraction of canvas reserved empty on the left"))
    padding_right: float = field(default=0.10, metadata=_doc("Fraction of canvas reserved empty on the right"))
    padding_top: float = field(default=0.15, metadata=_doc("Fraction of canvas reserved empty at the top"))
    padding_bottom: float = field(
        default=0.05,
        metadata=_doc("Fraction of canvas reserved empty at the bottom; the floor line for floor-aligned placement"),
    )
    quality: float = field(default=0.85, metadata=_doc("Lossy encoder fidelity in (0, 1]; ignored for PNG"))
    output_format: OutputFormat = field(default=OutputFormat.JPEG, metadata=_doc("Encoded output format"))
    alpha_threshold: int = field(
        default=DEFAULT_ALPHA_THRESHOLD,
        metadata=_doc("Pixels with alpha above this count as subject content when trimming"),
    )
    trim: bool = field(default=True, metadata=_doc("Crop the subject's transparent margin before placing it"))
    placement: Optional[PlacementPolicy] = field(
        default=None,
        metadata=_doc("Vertical placement; default is floor aligned on photos, centred on solid colours"),
    )
    max_dimension: int = field(
        default=DEFAULT_MAX_CANVAS_DIMENSION,
        metadata=_doc("Largest accepted output width or height; bigger requests are rejected"),
    )

    def __post_init__(self) -> None:
        """Validate by building the derived specs."""
        _ = self.padding
        _ = self.canvas
        if self.max_dimension < 1:
            raise CompositingError(
                f"max_dimension must be positive: {self.max_dimension}",
                ErrorKind.INVALID_OPTIONS,
            )

    @property
    def padding(self) -> PaddingSpec:
        return PaddingSpec(
            left=self.padding_left,
            right=self.padding_right,
            top=self.padding_top,
            bottom=self.padding_bottom,
        )

    @property
    def canvas(self) -> CanvasSpec:
        return CanvasSpec(
            output_width=self.output_width,
            output_height=self.output_height,
            quality=self.quality,
            output_format=self.output_format,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def from_dict(
        cls,
        data: Dict[str, Any],
        defaults: Optional[CompositingOptions] = None,
    ) -> CompositingOptions:
        """
        Build options from a JSON payload; omitted keys keep their defaults.

        Args:
            data: camelCase payload, e.g. {"outputWidth": 1920, "paddingLeft": 0.1}
            defaults: Preset to start from (STUDIO_DEFAULTS if None)

        Raises:
            ValidationError: Payload fails the schema
            CompositingError: INVALID_PADDING / INVALID_DIMENSIONS from the
                derived specs
        """
        validate_compositing_options(data)
        base = defaults if defaults is not None else STUDIO_DEFAULTS

        changes: Dict[str, Any] = {}
        for key, value in data.items():
            name = _PAYLOAD_KEYS[key]
            if name in ("output_width", "output_height", "alpha_threshold", "max_dimension"):
                value = int(value)
            elif name == "trim":
                value = bool(value)
            elif name == "output_format":
                value = OutputFormat(value)
            elif name == "placement":
                value = PlacementPolicy(value)
            else:
                value = float(value)
            changes[name] = value
        return replace(base, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the user-facing options with camelCase keys."""
        result: Dict[str, Any] = {}
        for key, name in _PAYLOAD_KEYS.items():
            value = getattr(self, name)
            if value is None:
                continue
            result[key] = value.value if isinstance(value, (OutputFormat, PlacementPolicy)) else value
        return result


_PAYLOAD_KEYS = {
    "outputWidth": "output_width",
    "outputHeight": "output_height",
    "paddingLeft": "padding_left",
    "paddingRight": "padding_right",
    "paddingTop": "padding_top",
    "paddingBottom": "padding_bottom",
    "quality": "quality",
    "outputFormat": "output_format",
    "alphaThreshold": "alpha_threshold",
    "placement": "placement",
    "trim": "trim",
    "maxDimension": "max_dimension",
}


# Car on a studio photo: wide 4:3 frame, more headroom than floor margin.
STUDIO_DEFAULTS = CompositingOptions()

# Car on a solid colour: 3:2 frame at 4K width, higher quality.
INTERIOR_DEFAULTS = CompositingOptions(
    output_width=3840,
    output_height=2560,
    padding_top=0.05,
    padding_bottom=0.15,
    quality=0.92,
)

# Subject fitted to the whole frame, no trimming or padding.
FULL_FRAME_DEFAULTS = replace(
    INTERIOR_DEFAULTS,
    padding_left=0.0,
    padding_right=0.0,
    padding_top=0.0,
    padding_bottom=0.0,
    trim=False,
    placement=PlacementPolicy.CENTERED,
)


def describe_options() -> Dict[str, str]:
    """
    List every compositing option and what it does.

    Returns:
        Dict of field name -> description

    Example:
        >>> describe_options()["padding_left"]
        'Fraction of canvas reserved empty on the left'
    """
    return {f.name: f.metadata["doc"] for f in fields(CompositingOptions)}
