"""
Module: compositing.loading

Purpose:
    Resolve image sources (raw bytes, paths, http(s) URLs, data URLs or
    already decoded RasterImages) and decode them. The two inputs of a
    request are fetched and decoded concurrently, then joined before any
    pixel work starts.

Key Functions:
    - read_source(): Fetch the raw bytes for one source
    - load_image(): Fetch + decode one source
    - load_images(): Fetch + decode several sources concurrently

Dependencies:
    - requests: HTTP fetch
    - concurrent.futures: Parallel loads

Used By:
    - controller
"""

from __future__ import annotations

import base64
import binascii
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Union
from urllib.parse import unquote_to_bytes

import requests

from studio_compositor.core.models import RasterImage
from studio_compositor.errors import CompositingError, ErrorKind

from .codec import decode_image

logger = logging.getLogger(__name__)

ImageSource = Union[RasterImage, bytes, bytearray, str, Path]

DEFAULT_FETCH_TIMEOUT_S = 30.0


def describe_source(source: ImageSource) -> str:
    """Short, log-safe description of a source."""
    if isinstance(source, RasterImage):
        return repr(source)
    if isinstance(source, (bytes, bytearray)):
        return f"<{len(source)} bytes>"
    text = str(source)
    return text if len(text) <= 100 else f"{text[:100]}..."


def read_source(source: ImageSource, *, timeout: float = DEFAULT_FETCH_TIMEOUT_S) -> bytes:
    """
    Fetch the encoded bytes behind a source.

    Args:
        source: bytes, filesystem path, http(s) URL or data URL
        timeout: HTTP timeout in seconds

    Returns:
        Encoded image bytes

    Raises:
        CompositingError: FETCH_FAILED if the source can't be read
    """
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)

    if isinstance(source, str) and source.startswith("data:"):
        return _read_data_url(source)

    if isinstance(source, str) and source.startswith(("http://", "https://")):
        try:
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise CompositingError(
                f"Failed to fetch image: {e}",
                ErrorKind.FETCH_FAILED,
                detail=describe_source(source),
            ) from e
        return response.content

    path = Path(source)
    try:
        return path.read_bytes()
    except OSError as e:
        raise CompositingError(
            f"Failed to read image file: {e}",
            ErrorKind.FETCH_FAILED,
            detail=str(path),
        ) from e


def _read_data_url(url: str) -> bytes:
    """Decode a data: URL (base64 or percent-encoded payload)."""
    header, sep, payload = url.partition(",")
    if not sep:
        raise CompositingError(
            "Malformed data URL", ErrorKind.FETCH_FAILED, detail=describe_source(url)
        )
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise CompositingError(
                f"Invalid base64 in data URL: {e}",
                ErrorKind.FETCH_FAILED,
                detail=describe_source(url),
            ) from e
    return unquote_to_bytes(payload)


def load_image(source: ImageSource, *, timeout: float = DEFAULT_FETCH_TIMEOUT_S) -> RasterImage:
    """
    Fetch and decode one source.

    Raises:
        CompositingError: FETCH_FAILED or DECODE_FAILED
    """
    if isinstance(source, RasterImage):
        return source
    data = read_source(source, timeout=timeout)
    return decode_image(data, source=describe_source(source))


def load_images(
    *sources: ImageSource,
    timeout: float = DEFAULT_FETCH_TIMEOUT_S,
) -> List[RasterImage]:
    """
    Fetch and decode several sources concurrently.

    Results come back in argument order. If any load fails, its error is
    raised after all loads have finished.

    Example:
        >>> subject, backdrop = load_images(car_url, studio_path)
    """
    if not sources:
        return []
    if len(sources) == 1:
        return [load_image(sources[0], timeout=timeout)]

    with ThreadPoolExecutor(max_workers=len(sources)) as pool:
        futures = [pool.submit(load_image, source, timeout=timeout) for source in sources]
        # result() re-raises the worker's CompositingError in this thread
        return [future.result() for future in futures]
