"""
Catalog Backend: Image Resizer Unit Tests
==========================================

What:  PillowResizer bounding-box behavior and the resizer registry.
"""

import base64

import pytest

from catalog.exceptions import UnprocessableImageError
from catalog.services.image_resizer import PillowResizer, RESIZERS, build_resizer


class TestPillowResizer:

    def setup_method(self):
        self.resizer = PillowResizer(jpeg_quality=85)

    def test_shrinks_preserving_aspect_ratio(self, wide_picture):
        result = self.resizer.resize(base64.b64decode(wide_picture), 3200, 3200)
        assert (result.width, result.height) == (3200, 800)
        assert result.data[:2] == b"\xff\xd8"

    def test_never_enlarges(self, small_picture):
        result = self.resizer.resize(base64.b64decode(small_picture), 3200, 3200)
        assert (result.width, result.height) == (64, 48)

    def test_tall_box(self, wide_picture):
        result = self.resizer.resize(base64.b64decode(wide_picture), 400, 3200)
        assert (result.width, result.height) == (400, 100)

    def test_rgba_converted(self, png_picture):
        result = self.resizer.resize(base64.b64decode(png_picture), 3200, 3200)
        assert (result.width, result.height) == (120, 90)
        assert result.data[:2] == b"\xff\xd8"

    def test_garbage_rejected(self):
        with pytest.raises(UnprocessableImageError) as exc_info:
            self.resizer.resize(b"\x00\x01garbage", 3200, 3200)
        assert exc_info.value.status_code == 422
        assert exc_info.value.context["resizer"] == "pillow"


class TestRegistry:

    def test_pillow_registered(self):
        assert RESIZERS["pillow"] is PillowResizer

    def test_build_resizer(self):
        resizer = build_resizer("pillow", jpeg_quality=70)
        assert isinstance(resizer, PillowResizer)
        assert resizer.jpeg_quality == 70

    def test_build_unknown_resizer(self):
        with pytest.raises(ValueError, match="Unknown image resizer"):
            build_resizer("graphicsmagick")


class TestPillowResizerBoundingBox:

    def test_small_image_not_enlarged_to_box(self, small_picture):
        result = PillowResizer().resize(base64.b64decode(small_picture), 640, 640)
        assert (result.width, result.height) == (64, 48)
