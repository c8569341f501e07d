import io
import sys
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

# Add src to sys.path so we can import studio_compositor
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from studio_compositor.core.models import RasterImage  # noqa: E402


def make_subject(width, height, box, rgba=(200, 30, 30, 255)):
    """RGBA image, transparent except for an inclusive (x0, y0, x1, y1) block."""
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    x0, y0, x1, y1 = box
    pixels[y0 : y1 + 1, x0 : x1 + 1] = rgba
    return RasterImage(pixels)


def to_png_bytes(image, fmt="PNG"):
    """Encode a PIL image or RasterImage to bytes."""
    if isinstance(image, RasterImage):
        image = image.to_pil()
    if fmt == "JPEG":
        image = image.convert("RGB")
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


# Common test fixtures
@pytest.fixture
def square_subject():
    """100x100 image with content only in x 20..79, y 30..89."""
    return make_subject(100, 100, (20, 30, 79, 89))


@pytest.fixture
def transparent_image():
    """Fully transparent 50x40 image."""
    return RasterImage.blank(50, 40)


@pytest.fixture
def car_subject():
    """Cut-out style 300x200 image with a 60x40 opaque subject."""
    return make_subject(300, 200, (100, 80, 159, 119))


@pytest.fixture
def studio_background():
    """Opaque 160x120 backdrop: top half grey, bottom half dark."""
    img = Image.new("RGB", (160, 120), (180, 180, 180))
    img.paste((40, 40, 40), (0, 60, 160, 120))
    return RasterImage.from_pil(img)


@pytest.fixture
def sample_png(tmp_path: Path, square_subject):
    """square_subject written to disk as PNG."""
    path = tmp_path / "subject.png"
    path.write_bytes(to_png_bytes(square_subject))
    return path
