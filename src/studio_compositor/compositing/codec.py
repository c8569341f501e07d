"""
Module: compositing.codec

Purpose:
    Decode image bytes into RasterImages and encode RasterImages back to
    compressed bytes. The only place Pillow's codecs are touched.

Key Functions:
    - decode_image(): Bytes -> RasterImage
    - encode_image(): RasterImage -> bytes in the requested format

Dependencies:
    - PIL: Codecs

Used By:
    - compositing.loading
    - compositing.pipeline
    - controller
"""

from __future__ import annotations

import io
import logging

from PIL import Image, UnidentifiedImageError

from studio_compositor.core.models import OutputFormat, RasterImage
from studio_compositor.errors import CompositingError, ErrorKind

logger = logging.getLogger(__name__)

# JPEG has no alpha; whatever transparency remains is flattened onto this.
JPEG_MATTE = (255, 255, 255)


def decode_image(data: bytes, *, source: str = "<bytes>") -> RasterImage:
    """
    Decode PNG/JPEG/WEBP bytes to an RGBA RasterImage.

    Args:
        data: Encoded image bytes
        source: Description used in error messages

    Returns:
        Decoded image (opaque formats get alpha 255)

    Raises:
        CompositingError: DECODE_FAILED if the bytes aren't a readable image
    """
    if not data:
        raise CompositingError("Empty image data", ErrorKind.DECODE_FAILED, detail=source)
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            raster = RasterImage.from_pil(image)
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        raise CompositingError(
            f"Could not decode image: {e}", ErrorKind.DECODE_FAILED, detail=source
        ) from e
    except Image.DecompressionBombError as e:
        raise CompositingError(
            f"Image too large to decode: {e}", ErrorKind.DECODE_FAILED, detail=source
        ) from e
    logger.debug(f"Decoded {raster!r} from {source}")
    return raster


def encode_image(
    image: RasterImage,
    output_format: OutputFormat = OutputFormat.PNG,
    quality: float = 0.92,
) -> bytes:
    """
    Encode an image.

    Args:
        image: Image to encode
        output_format: Target format
        quality: Lossy fidelity in (0, 1]; mapped to Pillow's 1-100 scale
                 for JPEG/WEBP, ignored for PNG

    Returns:
        Encoded bytes

    Raises:
        CompositingError: ENCODE_FAILED if Pillow can't write the image
    """
    pil = image.to_pil()
    save_kwargs: dict = {}
    if output_format is OutputFormat.JPEG:
        pil = _flatten(pil)
        save_kwargs["quality"] = _pil_quality(quality)
        save_kwargs["optimize"] = True
    elif output_format is OutputFormat.WEBP:
        save_kwargs["quality"] = _pil_quality(quality)
    else:
        save_kwargs["optimize"] = True

    buffer = io.BytesIO()
    try:
        pil.save(buffer, format=output_format.pil_format, **save_kwargs)
    except (OSError, ValueError, KeyError) as e:
        raise CompositingError(
            f"Could not encode {image!r} as {output_format.value}: {e}",
            ErrorKind.ENCODE_FAILED,
        ) from e

    data = buffer.getvalue()
    logger.debug(f"Encoded {image!r} as {output_format.value}: {len(data) / 1024:.0f}KB")
    return data


def _pil_quality(quality: float) -> int:
    return max(1, min(100, int(round(quality * 100))))


def _flatten(image: Image.Image) -> Image.Image:
    """Composite an RGBA image onto the JPEG matte and drop alpha."""
    matte = Image.new("RGB", image.size, JPEG_MATTE)
    matte.paste(image, mask=image.getchannel("A"))
    return matte
