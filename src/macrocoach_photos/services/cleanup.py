"""Photo deletion, including the cascade hook for deleted owners."""

import logging
from dataclasses import dataclass

from macrocoach_photos.domain.photos import PhotoRecord
from macrocoach_photos.errors import DeleteFailure
from macrocoach_photos.services.backends import BackendAdapter, find_backend
from macrocoach_photos.services.device_identity import DeviceIdentityProvider
from macrocoach_photos.services.ledger import PhotoLedger
from macrocoach_photos.services.local_cache import LocalCacheStore

_logger = logging.getLogger(__name__)


@dataclass
class PhotoCleanupService:
    """Removes photos from every tier; only the ledger step can fail."""

    ledger: PhotoLedger
    cache: LocalCacheStore
    device_identity: DeviceIdentityProvider
    backends: list[BackendAdapter]

    async def delete_photo(self, identity: str) -> bool:
        """Delete a single photo; return False if it does not exist."""
        record = self.ledger.get_record(identity)
        if record is None:
            return False
        await self._delete_record(record)
        return True

    async def delete_owner_photos(self, owner_entity_id: str) -> int:
        """Delete every photo of an owner and return how many were removed."""
        records = self.ledger.list_by_owner(owner_entity_id)
        for record in records:
            await self._delete_record(record)
        if records:
            _logger.info("Deleted %s photos of %s", len(records), owner_entity_id)
        return len(records)

    async def _delete_record(self, record: PhotoRecord) -> None:
        try:
            await self._delete_remote(record)
        except DeleteFailure as exc:
            _logger.warning("Remote delete for %s failed: %s", record.identity, exc)
        try:
            await self._delete_local(record)
        except DeleteFailure as exc:
            _logger.warning("Local delete for %s failed: %s", record.identity, exc)
        self.ledger.soft_delete(record.identity)

    async def _delete_remote(self, record: PhotoRecord) -> None:
        if not record.remote_url:
            return
        backend = find_backend(self.backends, record.remote_backend, record.remote_url)
        if backend is None:
            raise DeleteFailure(f"no backend handles {record.remote_url}")
        try:
            deleted = await backend.delete(record.remote_url)
        except Exception as exc:
            raise DeleteFailure(f"{backend.name} raised: {exc}") from exc
        if not deleted:
            raise DeleteFailure(f"{backend.name} did not delete {record.remote_url}")

    async def _delete_local(self, record: PhotoRecord) -> None:
        if not record.local_path:
            return
        if record.uploading_device_id != self.device_identity.get_device_id():
            return
        try:
            await self.cache.delete(record.local_path)
        except OSError as exc:
            raise DeleteFailure(str(exc)) from exc
