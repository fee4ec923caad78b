"""
Catalog Backend: Image Pipeline Unit Tests
===========================================

What:  Tests for decoding, storing and resizing uploaded pictures.
How:   Real Pillow images written into a temporary directory.

Test Strategy:
    ✅ base64 decoding (data: URL prefix, whitespace, bad alphabet, empty, size cap)
    ✅ Both files written, resized copy inside the bounding box
    ✅ Failure ordering: bad base64 writes nothing, bad image keeps the original
    ✅ Missing directory reported as a storage failure
    ✅ Stored file lookup refuses paths outside the directory
"""

import base64
from io import BytesIO

import pytest
from PIL import Image

from catalog.exceptions import (
    FileStorageError,
    ImageDecodeError,
    NotFoundError,
    UnprocessableImageError,
    ValidationError,
)
from catalog.services.image_pipeline import ImagePipeline
from catalog.services.image_resizer import PillowResizer


def make_pipeline(directory, **kwargs) -> ImagePipeline:
    return ImagePipeline(image_directory=str(directory), resizer=PillowResizer(), **kwargs)


class TestDecodePicture:

    def setup_method(self):
        self.pipeline = make_pipeline("/tmp", max_upload_bytes=1024)

    def test_plain_base64(self):
        assert self.pipeline.decode_picture(base64.b64encode(b"hello").decode()) == b"hello"

    def test_data_url_prefix_is_stripped(self):
        payload = "data:image/png;base64," + base64.b64encode(b"hello").decode()
        assert self.pipeline.decode_picture(payload) == b"hello"

    def test_line_wrapped_base64(self):
        encoded = base64.b64encode(b"x" * 120).decode()
        wrapped = "\n".join(encoded[i:i + 76] for i in range(0, len(encoded), 76))
        assert self.pipeline.decode_picture(wrapped) == b"x" * 120

    def test_url_safe_alphabet_accepted(self):
        raw = b"\xfb\xff\xbf" * 4
        assert base64.urlsafe_b64encode(raw).decode() == "-_-_" * 4
        assert self.pipeline.decode_picture(base64.urlsafe_b64encode(raw).decode()) == raw

    def test_invalid_characters_rejected(self):
        with pytest.raises(ImageDecodeError):
            self.pipeline.decode_picture("not*base64!")

    def test_bad_padding_rejected(self):
        with pytest.raises(ImageDecodeError):
            self.pipeline.decode_picture("aGVsbG8")

    def test_empty_payload_rejected(self):
        with pytest.raises(ImageDecodeError, match="empty"):
            self.pipeline.decode_picture("   ")

    def test_oversize_payload_rejected(self):
        payload = base64.b64encode(b"x" * 2000).decode()
        with pytest.raises(ImageDecodeError, match="maximum size"):
            self.pipeline.decode_picture(payload)

    def test_decode_error_is_a_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            self.pipeline.decode_picture("%%%")
        assert exc_info.value.status_code == 400
        assert exc_info.value.error_code == "invalid_image_payload"
        assert exc_info.value.context["field"] == "picture"


class TestIngest:

    @pytest.mark.asyncio
    async def test_writes_original_and_resized(self, image_dir, small_picture):
        pipeline = make_pipeline(image_dir)

        result = await pipeline.ingest(small_picture, 7)

        original = image_dir / "7_original.jpg"
        resized = image_dir / "7_resized.jpg"
        assert result.original_path.name == original.name
        assert result.resized_path.name == resized.name
        assert original.read_bytes() == base64.b64decode(small_picture)
        with Image.open(resized) as img:
            assert img.format == "JPEG"
            assert img.size == (64, 48)

    @pytest.mark.asyncio
    async def test_large_image_fits_bounding_box(self, image_dir, wide_picture):
        pipeline = make_pipeline(image_dir)

        result = await pipeline.ingest(wide_picture, 3)

        assert (result.width, result.height) == (3200, 800)
        with Image.open(image_dir / "3_resized.jpg") as img:
            assert img.size == (3200, 800)
        with Image.open(image_dir / "3_original.jpg") as img:
            assert img.size == (4000, 1000)

    @pytest.mark.asyncio
    async def test_custom_bounding_box(self, image_dir, small_picture):
        pipeline = make_pipeline(image_dir, max_width=32, max_height=32)

        result = await pipeline.ingest(small_picture, 1)

        assert result.width <= 32 and result.height <= 32
        assert result.width == 32

    @pytest.mark.asyncio
    async def test_reupload_overwrites(self, image_dir, small_picture, wide_picture):
        pipeline = make_pipeline(image_dir)

        await pipeline.ingest(wide_picture, 9)
        await pipeline.ingest(small_picture, 9)

        assert (image_dir / "9_original.jpg").read_bytes() == base64.b64decode(small_picture)
        with Image.open(image_dir / "9_resized.jpg") as img:
            assert img.size == (64, 48)

    @pytest.mark.asyncio
    async def test_malformed_base64_writes_nothing(self, image_dir):
        pipeline = make_pipeline(image_dir)

        with pytest.raises(ImageDecodeError):
            await pipeline.ingest("###", 5)

        assert list(image_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_unreadable_image_keeps_original(self, image_dir):
        pipeline = make_pipeline(image_dir)
        payload = base64.b64encode(b"definitely not an image").decode()

        with pytest.raises(UnprocessableImageError):
            await pipeline.ingest(payload, 5)

        assert (image_dir / "5_original.jpg").read_bytes() == b"definitely not an image"
        assert not (image_dir / "5_resized.jpg").exists()

    @pytest.mark.asyncio
    async def test_missing_directory_is_storage_error(self, tmp_path, small_picture):
        pipeline = make_pipeline(tmp_path / "does-not-exist")

        with pytest.raises(FileStorageError):
            await pipeline.ingest(small_picture, 1)

    @pytest.mark.asyncio
    async def test_png_input_stored_as_jpeg(self, image_dir, png_picture):
        pipeline = make_pipeline(image_dir)

        await pipeline.ingest(png_picture, 2)

        with Image.open(BytesIO((image_dir / "2_resized.jpg").read_bytes())) as img:
            assert img.format == "JPEG"
            assert img.mode == "RGB"


class TestStoredFiles:

    def test_ensure_directory_creates_nested_path(self, tmp_path):
        pipeline = make_pipeline(tmp_path / "a" / "b")
        pipeline.ensure_directory()
        assert (tmp_path / "a" / "b").is_dir()

    def test_file_names(self):
        assert ImagePipeline.original_name(42) == "42_original.jpg"
        assert ImagePipeline.resized_name(42) == "42_resized.jpg"

    def test_resolve_existing_file(self, image_dir):
        (image_dir / "1_resized.jpg").write_bytes(b"jpeg")
        pipeline = make_pipeline(image_dir)
        assert pipeline.resolve_stored_file("1_resized.jpg") == (image_dir / "1_resized.jpg").resolve()

    def test_resolve_missing_file(self, image_dir):
        with pytest.raises(NotFoundError):
            make_pipeline(image_dir).resolve_stored_file("404_resized.jpg")

    def test_resolve_rejects_traversal(self, image_dir):
        (image_dir.parent / "secret.jpg").write_bytes(b"x")
        with pytest.raises(ValidationError):
            make_pipeline(image_dir).resolve_stored_file("../secret.jpg")

    def test_resolve_rejects_nul_byte(self, image_dir):
        with pytest.raises(ValidationError, match="Invalid file path"):
            make_pipeline(image_dir).resolve_stored_file("a\x00b.jpg")

    def test_resolve_rejects_overlong_name(self, image_dir):
        with pytest.raises(ValidationError, match="Invalid file path"):
            make_pipeline(image_dir).resolve_stored_file("x" * 600)
