"""
Tests for compositing.blending

Test Coverage:
- Canvas.draw(): source-over rule, opacity, clipping
- Canvas.filled()/from_image()/freeze()
- resample()
"""

import numpy as np
import pytest

from studio_compositor.compositing.blending import Canvas, check_canvas_limit, resample
from studio_compositor.core.models import RasterImage
from studio_compositor.errors import CompositingError, ErrorKind

RED = (255, 0, 0, 255)
WHITE = (255, 255, 255, 255)


def test_filled_canvas_freezes_to_colour():
    img = Canvas.filled(4, 3, (10, 20, 30, 255)).freeze()
    assert img.size == (4, 3)
    assert tuple(img.pixels[1, 2]) == (10, 20, 30, 255)


def test_opaque_source_replaces_destination():
    # Arrange
    canvas = Canvas.filled(10, 10, WHITE)

    # Act
    canvas.draw(RasterImage.blank(2, 2, RED), 3, 4)
    result = canvas.freeze()

    # Assert
    assert tuple(result.pixels[4, 3]) == RED
    assert tuple(result.pixels[5, 4]) == RED
    assert tuple(result.pixels[6, 5]) == WHITE


def test_transparent_source_leaves_destination():
    canvas = Canvas.filled(5, 5, WHITE)
    canvas.draw(RasterImage.blank(5, 5, (255, 0, 0, 0)), 0, 0)
    assert (canvas.freeze().pixels == 255).all()


def test_half_opacity_blends_evenly():
    # Arrange
    canvas = Canvas.filled(1, 1, WHITE)

    # Act
    canvas.draw(RasterImage.blank(1, 1, RED), 0, 0, opacity=0.5)
    r, g, b, a = canvas.freeze().pixels[0, 0]

    # Assert
    assert r == 255
    assert abs(int(g) - 128) <= 1
    assert abs(int(b) - 128) <= 1
    assert a == 255


def test_alpha_accumulates_over_transparent_destination():
    """out.a = src.a + dst.a * (1 - src.a)."""
    # Arrange
    canvas = Canvas.filled(1, 1, (0, 0, 0, 0))

    # Act
    canvas.draw(RasterImage.blank(1, 1, (0, 0, 255, 255)), 0, 0, opacity=0.25)
    canvas.draw(RasterImage.blank(1, 1, (0, 0, 255, 255)), 0, 0, opacity=0.25)
    alpha = int(canvas.freeze().pixels[0, 0, 3])

    # Assert - 0.25 + 0.25 * 0.75 = 0.4375
    assert abs(alpha - round(0.4375 * 255)) <= 1


def test_draw_clips_partially_outside():
    # Arrange
    canvas = Canvas.filled(20, 20, WHITE)

    # Act
    canvas.draw(RasterImage.blank(10, 10, RED), -5, -5)
    result = canvas.freeze()

    # Assert
    red = (result.pixels[:, :, 1] == 0)
    assert red.sum() == 25
    assert red[:5, :5].all()


def test_draw_entirely_outside_is_noop():
    canvas = Canvas.filled(4, 4, WHITE)
    canvas.draw(RasterImage.blank(2, 2, RED), 10, 10)
    assert (canvas.freeze().pixels == 255).all()


def test_draw_rejects_bad_opacity():
    canvas = Canvas.filled(4, 4, WHITE)
    with pytest.raises(CompositingError) as exc:
        canvas.draw(RasterImage.blank(1, 1, RED), 0, 0, opacity=1.5)
    assert exc.value.kind is ErrorKind.INVALID_OPTIONS


def test_from_image_does_not_mutate_source():
    # Arrange
    base = RasterImage.blank(3, 3, WHITE)
    canvas = Canvas.from_image(base)

    # Act
    canvas.draw(RasterImage.blank(3, 3, RED), 0, 0)

    # Assert
    assert (base.pixels == 255).all()
    assert canvas.freeze() != base


def test_resample_changes_size():
    img = resample(RasterImage.blank(4, 2, RED), 40, 10)
    assert img.size == (40, 10)
    assert (img.pixels[:, :, 0] == 255).all()


def test_resample_same_size_returns_input():
    img = RasterImage.blank(4, 2, RED)
    assert resample(img, 4, 2) is img


def test_resample_keeps_transparent_edges_clean():
    """Premultiplied resampling: no dark fringe from transparent neighbours."""
    # Arrange
    pixels = np.zeros((10, 10, 4), dtype=np.uint8)
    pixels[:, 5:] = (255, 255, 255, 255)
    img = RasterImage(pixels)

    # Act
    up = resample(img, 40, 40)

    # Assert - wherever the result is mostly opaque it stays near white
    visible = up.alpha > 128
    assert (up.pixels[:, :, 0][visible] > 200).all()


@pytest.mark.parametrize("width,height", [(4097, 10), (10, 4097)])
def test_check_canvas_limit_when_either_side_over_cap_then_raises(width, height):
    with pytest.raises(CompositingError) as exc:
        check_canvas_limit(width, height, 4096)
    assert exc.value.kind is ErrorKind.ALLOCATION_FAILED


def test_check_canvas_limit_accepts_cap_exactly():
    check_canvas_limit(4096, 4096, 4096)
