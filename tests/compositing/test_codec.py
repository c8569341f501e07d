"""
Tests for compositing.codec

Test Coverage:
- decode_image(): PNG/JPEG decode, garbage input
- encode_image(): formats, JPEG flattening, quality mapping
"""

import io

import pytest
from PIL import Image

from conftest import to_png_bytes
from studio_compositor.compositing.codec import decode_image, encode_image
from studio_compositor.core.models import OutputFormat, RasterImage
from studio_compositor.errors import CompositingError, ErrorKind


def test_decode_png_preserves_pixels(square_subject):
    decoded = decode_image(to_png_bytes(square_subject))
    assert decoded == square_subject


def test_decode_jpeg_is_opaque():
    data = to_png_bytes(Image.new("RGB", (20, 10), (0, 128, 255)), fmt="JPEG")
    decoded = decode_image(data)
    assert decoded.size == (20, 10)
    assert (decoded.alpha == 255).all()


def test_decode_garbage_raises_decode_failed():
    with pytest.raises(CompositingError) as exc:
        decode_image(b"definitely not an image", source="test")
    assert exc.value.kind is ErrorKind.DECODE_FAILED
    assert exc.value.detail == "test"


def test_decode_empty_raises_decode_failed():
    with pytest.raises(CompositingError) as exc:
        decode_image(b"")
    assert exc.value.kind is ErrorKind.DECODE_FAILED


def test_decode_truncated_png_raises_decode_failed(square_subject):
    data = to_png_bytes(square_subject)
    with pytest.raises(CompositingError) as exc:
        decode_image(data[: len(data) // 2])
    assert exc.value.kind is ErrorKind.DECODE_FAILED


def test_encode_png_is_lossless(square_subject):
    data = encode_image(square_subject, OutputFormat.PNG)
    assert data.startswith(b"\x89PNG")
    assert decode_image(data) == square_subject


def test_encode_jpeg_flattens_alpha(square_subject):
    # Act
    data = encode_image(square_subject, OutputFormat.JPEG, quality=0.85)

    # Assert
    assert data[:3] == b"\xff\xd8\xff"
    with Image.open(io.BytesIO(data)) as img:
        assert img.mode == "RGB"
        assert img.size == (100, 100)
        # transparent corner is flattened onto white
        assert all(c > 240 for c in img.getpixel((0, 0)))


def test_encode_jpeg_quality_affects_size():
    # Arrange - noisy image so quality matters
    import numpy as np

    rng = np.random.default_rng(3)
    pixels = rng.integers(0, 256, size=(64, 64, 4), dtype=np.uint8)
    pixels[:, :, 3] = 255
    img = RasterImage(pixels)

    # Act
    low = encode_image(img, OutputFormat.JPEG, quality=0.2)
    high = encode_image(img, OutputFormat.JPEG, quality=0.95)

    # Assert
    assert len(low) < len(high)


def test_encode_webp_keeps_alpha(square_subject):
    data = encode_image(square_subject, OutputFormat.WEBP, quality=1.0)
    with Image.open(io.BytesIO(data)) as img:
        assert img.format == "WEBP"
        assert "A" in img.getbands()
