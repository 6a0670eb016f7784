"""Value objects shared by the storage tiers."""

from dataclasses import dataclass
from datetime import datetime

from macrocoach_photos.domain.photos import PhotoCategory


@dataclass(frozen=True)
class CompressionProfile:
    """Bounding box and JPEG quality applied to a category of photos."""

    max_width: int
    max_height: int
    quality: float

    @property
    def jpeg_quality(self) -> int:
        """Quality scaled to the 1-95 range Pillow expects."""
        return max(1, min(95, round(self.quality * 100)))


DEFAULT_PROFILES: dict[PhotoCategory, CompressionProfile] = {
    PhotoCategory.PROFILE: CompressionProfile(
        max_width=400, max_height=400, quality=0.7
    ),
    PhotoCategory.PROGRESS: CompressionProfile(
        max_width=400, max_height=400, quality=0.7
    ),
    # Weight checks favor file size over fidelity.
    PhotoCategory.WEIGHT_CHECK: CompressionProfile(
        max_width=300, max_height=300, quality=0.5
    ),
}


@dataclass(frozen=True)
class CompressedImage:
    """Encoded image bytes produced by the compression stage."""

    data: bytes
    content_type: str
    compressed: bool
    width: int | None = None
    height: int | None = None


@dataclass(frozen=True)
class UploadResult:
    """Outcome of a single backend upload attempt."""

    backend: str
    url: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Return True when the backend stored the image."""
        return self.url is not None and self.error is None

    @classmethod
    def success(cls, backend: str, url: str) -> "UploadResult":
        """Build a successful result."""
        return cls(backend=backend, url=url)

    @classmethod
    def failure(cls, backend: str, error: str) -> "UploadResult":
        """Build a failed result."""
        return cls(backend=backend, error=error)


@dataclass(frozen=True)
class UploadIntent:
    """A remote object whose ledger entry may not have been written yet."""

    identity: str
    backend: str
    remote_url: str
    created_at: datetime


@dataclass(frozen=True)
class SweepReport:
    """Summary of one orphan reconciliation pass."""

    checked: int = 0
    cleared: int = 0
    deleted: int = 0
    failed: int = 0
