"""
Catalog Backend: Image Resizer Interface
=========================================

What:  Abstract contract for turning image bytes into a resized JPEG that fits
       a bounding box, plus the Pillow implementation and a small registry.
How:   The pipeline only talks to `ImageResizer`; `build_resizer()` picks the
       concrete class named by the IMAGE_RESIZER setting.
Who:   ImagePipeline (catalog.services.image_pipeline).

Contract:
    - Input:  raw bytes as uploaded, max width and max height
    - Output: `ResizedImage` with JPEG bytes and final dimensions
    - Aspect ratio is preserved; the result is never larger than the box
    - Anything the library cannot decode becomes UnprocessableImageError
    - Implementations are synchronous; callers move them off the event loop
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from io import BytesIO
from typing import Dict, Type

from PIL import Image, UnidentifiedImageError

from catalog.exceptions import UnprocessableImageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResizedImage:
    data: bytes
    width: int
    height: int


class ImageResizer(ABC):
    """
    Abstract interface for bounding-box image resizing.

    Implementations:
        - PillowResizer: Pillow's thumbnail() (default)
    """

    name: str = ""

    @abstractmethod
    def resize(self, data: bytes, max_width: int, max_height: int) -> ResizedImage:
        """
        Fit the image in `data` inside max_width × max_height.

        Returns:
            ResizedImage holding JPEG bytes and the resulting size.

        Raises:
            UnprocessableImageError: data is not an image this resizer can read.
        """
        ...


class PillowResizer(ImageResizer):
    """
    Resizer backed by Pillow.

    `Image.thumbnail` keeps the aspect ratio and only ever shrinks, so an
    image already inside the box is re-encoded at its original size. Small
    images are not enlarged to fill the box (GraphicsMagick `resize` would).
    Palette, alpha and CMYK images are converted to RGB before JPEG encoding.
    """

    name = "pillow"

    def __init__(self, jpeg_quality: int = 90):
        self.jpeg_quality = jpeg_quality

    def resize(self, data: bytes, max_width: int, max_height: int) -> ResizedImage:
        try:
            with Image.open(BytesIO(data)) as image:
                image.load()
                original_size = image.size

                image.thumbnail((max_width, max_height), Image.Resampling.LANCZOS)
                if image.mode not in ("RGB", "L"):
                    image = image.convert("RGB")

                output = BytesIO()
                image.save(output, format="JPEG", quality=self.jpeg_quality)
                width, height = image.size
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            logger.warning("Pillow could not process image (%d bytes): %s", len(data), str(e))
            raise UnprocessableImageError(
                context={"resizer": self.name, "error": str(e), "error_type": type(e).__name__},
            ) from e

        logger.debug(
            "Resized image %dx%d -> %dx%d (box %dx%d)",
            original_size[0], original_size[1], width, height, max_width, max_height,
        )
        return ResizedImage(data=output.getvalue(), width=width, height=height)


# ── Registry ──────────────────────────────────────────────────────────────
# Keys are the accepted values of the IMAGE_RESIZER setting
RESIZERS: Dict[str, Type[ImageResizer]] = {
    PillowResizer.name: PillowResizer,
}


def build_resizer(name: str, jpeg_quality: int = 90) -> ImageResizer:
    """Instantiate the resizer registered under `name`."""
    try:
        resizer_cls = RESIZERS[name]
    except KeyError:
        raise ValueError(f"Unknown image resizer '{name}'. Available: {sorted(RESIZERS)}")
    return resizer_cls(jpeg_quality=jpeg_quality)
