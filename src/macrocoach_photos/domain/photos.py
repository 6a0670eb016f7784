"""Domain models for stored photos."""

import re
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class PhotoCategory(StrEnum):
    """Kind of photo a coach stores for a client."""

    PROFILE = "profile"
    PROGRESS = "progress"
    WEIGHT_CHECK = "weight-check"


@dataclass(frozen=True)
class PhotoRecord:
    """Ledger entry mapping a photo identity to its storage locations."""

    identity: str
    owner_entity_id: str
    category: PhotoCategory
    capture_date: datetime
    notes: str | None
    created_at: datetime
    local_path: str | None
    remote_url: str | None
    remote_backend: str | None
    uploading_device_id: str

    @property
    def has_location(self) -> bool:
        """Return True when at least one storage tier holds the photo."""
        return bool(self.local_path or self.remote_url)


@dataclass(frozen=True)
class ResolvedPhoto:
    """A photo record paired with the reference a client should render."""

    record: PhotoRecord
    reference: str | None


_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9_-]+")


def photo_file_name(
    owner_entity_id: str, category: PhotoCategory, timestamp_ms: int
) -> str:
    """Return the `{owner}_{category}_{timestamp}.jpg` name for a photo."""
    owner = _UNSAFE_NAME_CHARS.sub("-", owner_entity_id).strip("-") or "unknown"
    return f"{owner}_{category.value}_{timestamp_ms}.jpg"
