"""
Catalog Backend: Image Ingestion Pipeline
==========================================

What:  Accepts a base64 picture and a target id, stores the original bytes,
       produces a resized derivative and stores it too.
How:   decode → write original → resize (threadpool) → write resized.
       Every step is awaited in order; the two writes never overlap.
Who:   POST /upload, and CategoryService for inline pictures on create.

Storage Layout:
    <IMAGE_DIRECTORY>/
    ├── 42_original.jpg     ← bytes exactly as uploaded
    └── 42_resized.jpg      ← JPEG fitting RESIZE_MAX_WIDTH × RESIZE_MAX_HEIGHT

    File names derive only from the integer id, so no client text reaches
    the file system. Re-uploading for the same id overwrites both files
    (last writer wins, also under concurrent uploads).

Failure Modes:
    bad base64 / empty / too large   → ImageDecodeError        (400), nothing written
    bytes are not a readable image   → UnprocessableImageError (422), original stays
    write fails (missing dir, perms) → FileStorageError        (500)

    No rollback: when the resize or the second write fails, the original
    written in step 2 remains on disk.
"""

import base64
import binascii
import logging
import re
from dataclasses import dataclass
from pathlib import Path

import aiofiles
from starlette.concurrency import run_in_threadpool

from catalog.exceptions import (
    FileStorageError,
    ImageDecodeError,
    NotFoundError,
    ValidationError,
)
from catalog.services.image_resizer import ImageResizer

logger = logging.getLogger(__name__)

# "data:image/png;base64," as produced by browsers' FileReader.readAsDataURL
DATA_URL_PREFIX = re.compile(r"^data:[\w.+-]+/[\w.+-]+;base64,", re.IGNORECASE)

# NAME_MAX on Linux and macOS
MAX_FILENAME_BYTES = 255


@dataclass(frozen=True)
class IngestResult:
    original_path: Path
    resized_path: Path
    width: int
    height: int


class ImagePipeline:
    """
    Decode/store/resize/store workflow over one fixed directory.

    One instance per application, built by `create_app` with the configured
    resizer. It keeps no per-request state.
    """

    def __init__(
        self,
        image_directory: str,
        resizer: ImageResizer,
        max_width: int = 3200,
        max_height: int = 3200,
        max_upload_bytes: int = 26_214_400,
    ):
        self.image_directory = Path(image_directory).resolve()
        self.resizer = resizer
        self.max_width = max_width
        self.max_height = max_height
        self.max_upload_bytes = max_upload_bytes

    def ensure_directory(self) -> None:
        """Create the image directory (application startup)."""
        self.image_directory.mkdir(parents=True, exist_ok=True)
        logger.info("Image directory: %s", self.image_directory)

    # ── Paths ─────────────────────────────────────────────────────────────

    @staticmethod
    def original_name(target_id: int) -> str:
        return f"{target_id}_original.jpg"

    @staticmethod
    def resized_name(target_id: int) -> str:
        return f"{target_id}_resized.jpg"

    def original_path(self, target_id: int) -> Path:
        return self.image_directory / self.original_name(target_id)

    def resized_path(self, target_id: int) -> Path:
        return self.image_directory / self.resized_name(target_id)

    # ── Steps ─────────────────────────────────────────────────────────────

    def decode_picture(self, picture: str) -> bytes:
        """
        Decode a base64 picture into raw bytes.

        Accepts an optional data-URL prefix and ignores embedded whitespace
        (line-wrapped base64). Both the standard and the URL-safe (`-`, `_`)
        alphabets are accepted. Otherwise decoding is strict: any other
        character or wrong padding is rejected.

        Raises:
            ImageDecodeError: empty payload, malformed base64, or decoded size
                above max_upload_bytes.
        """
        payload = DATA_URL_PREFIX.sub("", picture.strip(), count=1)
        payload = "".join(payload.split())
        if not payload:
            raise ImageDecodeError(message="The picture payload is empty")

        # Reject before decoding when the encoded length already exceeds the cap
        if len(payload) // 4 * 3 > self.max_upload_bytes + 2:
            raise ImageDecodeError(
                message=f"The picture exceeds the maximum size of {self.max_upload_bytes} bytes",
                context={"max_upload_bytes": self.max_upload_bytes},
            )

        try:
            data = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            try:
                data = base64.b64decode(payload, altchars=b"-_", validate=True)
            except (binascii.Error, ValueError):
                raise ImageDecodeError(context={"error": str(e)}) from e

        if not data:
            raise ImageDecodeError(message="The picture payload is empty")
        if len(data) > self.max_upload_bytes:
            raise ImageDecodeError(
                message=f"The picture exceeds the maximum size of {self.max_upload_bytes} bytes",
                context={"max_upload_bytes": self.max_upload_bytes, "actual_size": len(data)},
            )
        return data

    async def write_file(self, path: Path, content: bytes) -> None:
        """
        Write bytes to `path`, replacing any previous file.

        The directory is not created here; a missing directory is a storage
        failure.

        Raises:
            FileStorageError: any OS-level error while opening or writing.
        """
        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to write image at %s: %s", path, str(e))
            raise FileStorageError(
                message="Failed to save the image. Please try again.",
                context={"path": str(path), "os_error": str(e)},
            ) from e
        logger.info("Image stored: %s (%d bytes)", path.name, len(content))

    async def ingest(self, picture: str, target_id: int) -> IngestResult:
        """
        Run the full pipeline for one picture.

        Args:
            picture: base64 payload (optionally a data: URL)
            target_id: id of the owning record; names both files

        Returns:
            IngestResult with both paths and the resized dimensions.
        """
        data = self.decode_picture(picture)

        original_path = self.original_path(target_id)
        await self.write_file(original_path, data)

        resized = await run_in_threadpool(
            self.resizer.resize, data, self.max_width, self.max_height
        )

        resized_path = self.resized_path(target_id)
        await self.write_file(resized_path, resized.data)

        logger.info(
            "Ingested picture for id=%d: %d bytes -> %dx%d via %s",
            target_id, len(data), resized.width, resized.height, self.resizer.name,
        )
        return IngestResult(
            original_path=original_path,
            resized_path=resized_path,
            width=resized.width,
            height=resized.height,
        )

    # ── Lookup ────────────────────────────────────────────────────────────

    def resolve_stored_file(self, filename: str) -> Path:
        """
        Map a file name to a stored image path.

        Raises:
            ValidationError: the name points outside the image directory,
                contains a NUL byte or is longer than a file name can be.
            NotFoundError: no such file.
        """
        if "\x00" in filename or len(filename.encode("utf-8")) > MAX_FILENAME_BYTES:
            raise ValidationError(message="Invalid file path", field="filename")

        try:
            full_path = (self.image_directory / filename).resolve()
            if full_path.parent != self.image_directory:
                raise ValidationError(message="Invalid file path", field="filename")
            exists = full_path.is_file()
        except (OSError, ValueError) as e:
            raise ValidationError(
                message="Invalid file path",
                field="filename",
                context={"error_type": type(e).__name__},
            ) from e

        if not exists:
            raise NotFoundError(resource="image", resource_id=filename)
        return full_path
