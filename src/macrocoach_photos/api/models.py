"""Request and response models for the photo API."""

import base64
import binascii
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from macrocoach_photos.domain.photos import PhotoCategory, ResolvedPhoto


class PhotoUploadRequest(BaseModel):
    """JSON envelope carrying a captured image."""

    image_base64: str = Field(min_length=1)
    owner_entity_id: str = Field(min_length=1)
    category: PhotoCategory
    notes: str | None = None
    capture_date: datetime | None = None

    @field_validator("image_base64")
    @classmethod
    def strip_data_url_prefix(cls, value: str) -> str:
        if value.startswith("data:") and "," in value:
            return value.split(",", 1)[1]
        return value

    def image_bytes(self) -> bytes:
        """Decode the base64 payload."""
        try:
            return base64.b64decode(self.image_base64, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("image_base64 is not valid base64") from exc


class PhotoUploadResponse(BaseModel):
    """Identity assigned to a stored photo."""

    identity: str


class PhotoReferenceResponse(BaseModel):
    """Resolved display reference for a photo."""

    identity: str
    reference: str


class PhotoSummary(BaseModel):
    """Photo metadata with its display reference."""

    identity: str
    owner_entity_id: str
    category: PhotoCategory
    capture_date: datetime
    notes: str | None
    created_at: datetime
    remote_url: str | None
    reference: str | None

    @classmethod
    def from_resolved(cls, resolved: ResolvedPhoto) -> "PhotoSummary":
        """Build a summary from a resolved record."""
        record = resolved.record
        return cls(
            identity=record.identity,
            owner_entity_id=record.owner_entity_id,
            category=record.category,
            capture_date=record.capture_date,
            notes=record.notes,
            created_at=record.created_at,
            remote_url=record.remote_url,
            reference=resolved.reference,
        )
