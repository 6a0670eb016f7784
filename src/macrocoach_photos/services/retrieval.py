"""Resolve the cheapest available copy of a stored photo."""

import logging
from dataclasses import dataclass

from macrocoach_photos.domain.photos import PhotoCategory, PhotoRecord, ResolvedPhoto
from macrocoach_photos.services.backends import BackendAdapter, find_backend
from macrocoach_photos.services.device_identity import DeviceIdentityProvider
from macrocoach_photos.services.ledger import PhotoLedger
from macrocoach_photos.services.local_cache import LocalCacheStore

_logger = logging.getLogger(__name__)


@dataclass
class PhotoRetrievalService:
    """Prefers the on-device copy on the uploading device, else the remote URL."""

    ledger: PhotoLedger
    cache: LocalCacheStore
    device_identity: DeviceIdentityProvider
    backends: list[BackendAdapter]

    async def get_photo(self, identity: str) -> str | None:
        """Return a local path or remote URL for a photo, or None if unavailable."""
        record = self._lookup(identity)
        if record is None:
            return None
        return await self.resolve(record)

    async def resolve(self, record: PhotoRecord) -> str | None:
        """Pick the display reference for an already loaded record."""
        if await self._has_local_copy(record):
            return record.local_path
        return record.remote_url

    async def list_client_photos(
        self, owner_entity_id: str, category: PhotoCategory | None = None
    ) -> list[ResolvedPhoto]:
        """Return an owner's photos, newest first, with display references."""
        records = self.ledger.list_by_owner(owner_entity_id, category)
        return [
            ResolvedPhoto(record=record, reference=await self.resolve(record))
            for record in records
        ]

    async def load_photo_bytes(self, identity: str) -> bytes | None:
        """Return image bytes from the local copy or the hosting backend."""
        record = self._lookup(identity)
        if record is None:
            return None
        if await self._has_local_copy(record):
            try:
                return await self.cache.read(record.local_path)
            except OSError as exc:
                _logger.warning("Local read of %s failed: %s", identity, exc)
        if not record.remote_url:
            return None
        backend = find_backend(self.backends, record.remote_backend, record.remote_url)
        if backend is None:
            _logger.warning("No backend can fetch %s", record.remote_url)
            return None
        try:
            return await backend.fetch(record.remote_url)
        except Exception:
            _logger.exception("Fetching %s from %s failed", identity, backend.name)
            return None

    def _lookup(self, identity: str) -> PhotoRecord | None:
        try:
            return self.ledger.get_record(identity)
        except Exception:
            _logger.exception("Ledger lookup failed for photo %s", identity)
            return None

    async def _has_local_copy(self, record: PhotoRecord) -> bool:
        if not record.local_path:
            return False
        if record.uploading_device_id != self.device_identity.get_device_id():
            return False
        try:
            return await self.cache.exists(record.local_path)
        except Exception as exc:
            _logger.warning("Local check for %s failed: %s", record.identity, exc)
            return False
