"""
Tests for controller

Test Coverage:
- build_composite(): photo and colour backdrops, option handling, errors
- build_watermark(): defaults and payload options
- build_composites(): parallel jobs with per-job failures
"""

import io
import logging
from unittest.mock import patch

import pytest
from PIL import Image

from conftest import make_subject, to_png_bytes
from studio_compositor.compositing import pipeline
from studio_compositor.compositing.config import CompositingOptions
from studio_compositor.controller import (
    CompositeJob,
    CompositeResult,
    build_composite,
    build_composites,
    build_watermark,
)
from studio_compositor.core.models import BoundingBox, OutputFormat, PlacementPolicy, RasterImage
from studio_compositor.core.schemas import ValidationError
from studio_compositor.errors import CompositingError, ErrorKind

SMALL = {"outputWidth": 160, "outputHeight": 120}


@pytest.fixture
def car_png(car_subject):
    return to_png_bytes(car_subject)


class TestBuildComposite:

    def test_build_composite_on_background_then_floor_aligned(self, car_png, studio_background, tmp_path):
        # Arrange - subject as bytes, background as a file path
        background_path = tmp_path / "studio.jpg"
        background_path.write_bytes(to_png_bytes(studio_background, fmt="JPEG"))

        # Act
        result = build_composite(car_png, background=background_path, options=SMALL)

        # Assert
        assert isinstance(result, CompositeResult)
        assert result.policy is PlacementPolicy.FLOOR_ALIGNED
        assert result.output_format is OutputFormat.JPEG
        assert result.size == (160, 120)
        assert result.bounds == BoundingBox(100, 80, 159, 119)
        # Studio preset padding: bottom 5%
        assert result.geometry.bottom == pytest.approx(120 * 0.95)
        with Image.open(io.BytesIO(result.data)) as img:
            assert img.size == (160, 120)

    def test_build_composite_on_color_then_centered(self, car_subject):
        result = build_composite(car_subject, color="#c8cfdb", options=SMALL)
        assert result.policy is PlacementPolicy.CENTERED
        assert result.geometry.y == pytest.approx((120 - result.geometry.height) / 2)

    def test_build_composite_records_timings(self, car_subject):
        result = build_composite(car_subject, color=(255, 255, 255), options=SMALL)
        assert set(result.timings) == {"load", "render", "encode"}
        assert all(duration >= 0 for duration in result.timings.values())

    def test_build_composite_accepts_options_object(self, car_subject):
        options = CompositingOptions(output_width=64, output_height=48, output_format=OutputFormat.PNG)
        result = build_composite(car_subject, color="white", options=options)
        assert result.size == (64, 48)
        assert result.data.startswith(b"\x89PNG")

    def test_build_composite_when_transparent_subject_then_warns(self, transparent_image):
        result = build_composite(transparent_image, color="black", options=SMALL)
        assert result.bounds is None
        assert result.warnings
        assert ErrorKind.FULLY_TRANSPARENT_INPUT.value in result.warnings[0]

    def test_build_composite_when_transparent_subject_then_warning_logged_once(self, transparent_image, caplog):
        with caplog.at_level(logging.WARNING, logger="studio_compositor"):
            build_composite(transparent_image, color="black", options=SMALL)
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1

    def test_build_composite_goes_through_pipeline_options_entry_point(self, car_subject):
        with patch(
            "studio_compositor.controller.composite_with_options",
            wraps=pipeline.composite_with_options,
        ) as mock_composite:
            result = build_composite(car_subject, color="white", options=SMALL)

        mock_composite.assert_called_once()
        options = mock_composite.call_args.args[2]
        assert (options.output_width, options.output_height) == (160, 120)
        assert mock_composite.call_args.kwargs["timings"] is not None
        assert result.size == (160, 120)

    @pytest.mark.parametrize("backdrop", [{}, {"background": b"x", "color": "white"}])
    def test_build_composite_when_not_exactly_one_backdrop_then_raises(self, car_subject, backdrop):
        with pytest.raises(CompositingError) as exc:
            build_composite(car_subject, **backdrop)
        assert exc.value.kind is ErrorKind.INVALID_OPTIONS

    def test_build_composite_when_bad_padding_then_invalid_padding(self, car_subject):
        with pytest.raises(CompositingError) as exc:
            build_composite(car_subject, color="white", options={**SMALL, "paddingLeft": 0.6, "paddingRight": 0.5})
        assert exc.value.kind is ErrorKind.INVALID_PADDING

    def test_build_composite_when_unknown_option_then_validation_error(self, car_subject):
        with pytest.raises(ValidationError):
            build_composite(car_subject, color="white", options={"rotation": 90})

    def test_build_composite_when_undecodable_subject_then_decode_failed(self):
        with pytest.raises(CompositingError) as exc:
            build_composite(b"not an image", color="white", options=SMALL)
        assert exc.value.kind is ErrorKind.DECODE_FAILED

    def test_build_composite_when_missing_file_then_fetch_failed(self, tmp_path, car_subject):
        with pytest.raises(CompositingError) as exc:
            build_composite(car_subject, background=tmp_path / "missing.png", options=SMALL)
        assert exc.value.kind is ErrorKind.FETCH_FAILED


class TestBuildWatermark:

    def test_build_watermark_defaults_to_png_at_base_size(self, studio_background):
        logo = make_subject(40, 20, (0, 0, 39, 19), rgba=(255, 255, 255, 255))
        result = build_watermark(studio_background, logo)
        assert result.output_format is OutputFormat.PNG
        assert result.size == studio_background.size
        assert result.data.startswith(b"\x89PNG")
        assert set(result.timings) == {"load", "render", "encode"}

    def test_build_watermark_from_payload(self, studio_background):
        logo = RasterImage.blank(20, 20, (0, 0, 0, 255))
        result = build_watermark(
            to_png_bytes(studio_background),
            to_png_bytes(logo),
            {"xPercent": 0, "yPercent": 0, "sizePercent": 25, "opacity": 1},
        )
        with Image.open(io.BytesIO(result.data)) as img:
            decoded = img.convert("RGBA")
            assert decoded.getpixel((10, 10)) == (0, 0, 0, 255)
            assert decoded.getpixel((100, 10)) == (180, 180, 180, 255)


    def test_build_watermark_when_base_over_cap_then_allocation_failed(self):
        base = RasterImage.blank(6000, 20, (255, 255, 255, 255))
        logo = RasterImage.blank(10, 10, (0, 0, 0, 255))
        with pytest.raises(CompositingError) as exc:
            build_watermark(base, logo)
        assert exc.value.kind is ErrorKind.ALLOCATION_FAILED

    def test_build_watermark_cap_from_payload(self, studio_background):
        logo = RasterImage.blank(10, 10, (0, 0, 0, 255))
        with pytest.raises(CompositingError) as exc:
            build_watermark(studio_background, logo, {"maxDimension": 100})
        assert exc.value.kind is ErrorKind.ALLOCATION_FAILED


class TestBuildComposites:

    def test_build_composites_keeps_order_and_reports_failures(self, car_subject):
        # Arrange
        jobs = [
            CompositeJob(subject=car_subject, color="white", options=SMALL),
            CompositeJob(subject=b"garbage", color="white", options=SMALL),
            CompositeJob(subject=make_subject(50, 50, (10, 10, 19, 39)), color="black", options=SMALL),
        ]

        # Act
        results = build_composites(jobs, max_workers=2)

        # Assert
        assert len(results) == 3
        assert isinstance(results[0], CompositeResult)
        assert isinstance(results[1], CompositingError)
        assert results[1].kind is ErrorKind.DECODE_FAILED
        assert results[2].bounds == BoundingBox(10, 10, 19, 39)

    def test_build_composites_empty(self):
        assert build_composites([]) == []
