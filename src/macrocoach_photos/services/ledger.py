"""Metadata ledger interface for photo records."""

from typing import Protocol

from macrocoach_photos.domain.photos import PhotoCategory, PhotoRecord

UNSET = object()


class PhotoLedger(Protocol):
    """Durable store mapping photo identities to storage locations."""

    def create_record(self, record: PhotoRecord) -> None:
        """Persist a new photo record."""

    def get_record(self, identity: str) -> PhotoRecord | None:
        """Return a live photo record by identity, if present."""

    def list_by_owner(
        self, owner_entity_id: str, category: PhotoCategory | None = None
    ) -> list[PhotoRecord]:
        """Return live records for an owner, newest first."""

    def patch_locations(
        self,
        identity: str,
        *,
        local_path: str | None | object = UNSET,
        remote_url: str | None | object = UNSET,
        remote_backend: str | None | object = UNSET,
    ) -> PhotoRecord | None:
        """Update storage locations only and return the updated record."""

    def soft_delete(self, identity: str) -> None:
        """Hide a record from reads without erasing it."""
