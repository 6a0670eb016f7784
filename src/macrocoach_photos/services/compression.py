"""Compression stage that normalizes captured images before storage."""

import asyncio
import io
import logging
from dataclasses import dataclass, field

from PIL import Image, ImageOps

from macrocoach_photos.domain.photos import PhotoCategory
from macrocoach_photos.domain.storage import (
    DEFAULT_PROFILES,
    CompressedImage,
    CompressionProfile,
)
from macrocoach_photos.errors import CompressionFailure

_logger = logging.getLogger(__name__)


@dataclass
class CompressionService:
    """Resize and re-encode images according to per-category profiles."""

    profiles: dict[PhotoCategory, CompressionProfile] = field(
        default_factory=lambda: dict(DEFAULT_PROFILES)
    )

    def profile_for(self, category: PhotoCategory) -> CompressionProfile:
        """Return the compression profile for a category."""
        return self.profiles.get(category, DEFAULT_PROFILES[PhotoCategory.PROGRESS])

    async def compress(
        self, image_bytes: bytes, category: PhotoCategory
    ) -> CompressedImage:
        """Compress an image, falling back to the original bytes on failure."""
        profile = self.profile_for(category)
        try:
            return await asyncio.to_thread(_encode_jpeg, image_bytes, profile)
        except CompressionFailure as exc:
            _logger.warning(
                "Compression failed for %s photo, storing original: %s",
                category.value,
                exc,
            )
        except Exception:
            _logger.exception(
                "Unexpected compression error for %s photo, storing original",
                category.value,
            )
        return CompressedImage(
            data=image_bytes,
            content_type=detect_mime_type(image_bytes),
            compressed=False,
        )


def _encode_jpeg(image_bytes: bytes, profile: CompressionProfile) -> CompressedImage:
    """Fit the image inside the profile box and encode it as JPEG."""
    try:
        with Image.open(io.BytesIO(image_bytes)) as source:
            image = ImageOps.exif_transpose(source)
            if image.mode != "RGB":
                image = image.convert("RGB")
            image.thumbnail(
                (profile.max_width, profile.max_height), Image.Resampling.LANCZOS
            )
            buffer = io.BytesIO()
            image.save(
                buffer, format="JPEG", quality=profile.jpeg_quality, optimize=True
            )
            width, height = image.size
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise CompressionFailure(str(exc)) from exc
    return CompressedImage(
        data=buffer.getvalue(),
        content_type="image/jpeg",
        compressed=True,
        width=width,
        height=height,
    )


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
