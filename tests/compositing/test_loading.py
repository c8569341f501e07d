"""
Tests for compositing.loading

Test Coverage:
- read_source(): bytes, paths, data URLs, http URLs (mocked)
- load_images(): concurrent loads, order, error propagation
"""

import base64
from unittest.mock import MagicMock, patch

import pytest
import requests

from conftest import to_png_bytes
from studio_compositor.compositing.loading import (
    describe_source,
    load_image,
    load_images,
    read_source,
)
from studio_compositor.core.models import RasterImage
from studio_compositor.errors import CompositingError, ErrorKind


def test_read_bytes_passthrough():
    assert read_source(b"abc") == b"abc"


def test_read_path(sample_png, square_subject):
    assert read_source(sample_png) == to_png_bytes(square_subject)
    assert read_source(str(sample_png)) == to_png_bytes(square_subject)


def test_read_missing_path_raises_fetch_failed(tmp_path):
    with pytest.raises(CompositingError) as exc:
        read_source(tmp_path / "missing.png")
    assert exc.value.kind is ErrorKind.FETCH_FAILED


def test_read_base64_data_url(square_subject):
    # Arrange
    data = to_png_bytes(square_subject)
    url = "data:image/png;base64," + base64.b64encode(data).decode("ascii")

    # Act & Assert
    assert read_source(url) == data


def test_read_malformed_data_url_raises():
    with pytest.raises(CompositingError) as exc:
        read_source("data:image/png;base64")
    assert exc.value.kind is ErrorKind.FETCH_FAILED


def test_read_bad_base64_raises():
    with pytest.raises(CompositingError) as exc:
        read_source("data:image/png;base64,@@@not-base64@@@")
    assert exc.value.kind is ErrorKind.FETCH_FAILED


def test_read_http_url_uses_requests(square_subject):
    # Arrange
    response = MagicMock()
    response.content = to_png_bytes(square_subject)
    response.raise_for_status.return_value = None

    # Act
    with patch("studio_compositor.compositing.loading.requests.get", return_value=response) as get:
        data = read_source("https://cdn.example.com/car.png", timeout=5)

    # Assert
    get.assert_called_once_with("https://cdn.example.com/car.png", timeout=5)
    assert data == response.content


def test_read_http_error_raises_fetch_failed():
    # Arrange
    response = MagicMock()
    response.raise_for_status.side_effect = requests.HTTPError("404 Not Found")

    # Act & Assert
    with patch("studio_compositor.compositing.loading.requests.get", return_value=response):
        with pytest.raises(CompositingError) as exc:
            read_source("https://cdn.example.com/missing.png")
    assert exc.value.kind is ErrorKind.FETCH_FAILED


def test_load_image_passes_raster_through(square_subject):
    assert load_image(square_subject) is square_subject


def test_load_image_decodes_path(sample_png, square_subject):
    assert load_image(sample_png) == square_subject


def test_load_image_garbage_raises_decode_failed():
    with pytest.raises(CompositingError) as exc:
        load_image(b"garbage")
    assert exc.value.kind is ErrorKind.DECODE_FAILED


def test_load_images_keeps_argument_order(sample_png, square_subject):
    # Arrange
    other = RasterImage.blank(3, 3, (1, 2, 3, 255))

    # Act
    first, second = load_images(sample_png, to_png_bytes(other))

    # Assert
    assert first == square_subject
    assert second == other


def test_load_images_propagates_failure(sample_png):
    with pytest.raises(CompositingError) as exc:
        load_images(sample_png, b"garbage")
    assert exc.value.kind is ErrorKind.DECODE_FAILED


def test_load_images_empty():
    assert load_images() == []


def test_describe_source_truncates_long_strings():
    url = "data:image/png;base64," + "A" * 500
    assert len(describe_source(url)) == 103
    assert describe_source(b"1234") == "<4 bytes>"
