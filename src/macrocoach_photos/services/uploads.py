"""Upload orchestration across the local cache and remote backends."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4

from macrocoach_photos.domain.photos import PhotoCategory, PhotoRecord
from macrocoach_photos.domain.storage import UploadIntent, UploadResult
from macrocoach_photos.errors import (
    AllTiersFailure,
    BackendUploadFailure,
    DeviceIdentityFailure,
    LedgerWriteFailure,
    LocalPersistFailure,
)
from macrocoach_photos.services.backends import BackendAdapter
from macrocoach_photos.services.compression import CompressionService
from macrocoach_photos.services.device_identity import DeviceIdentityProvider
from macrocoach_photos.services.ledger import PhotoLedger
from macrocoach_photos.services.local_cache import LocalCacheStore
from macrocoach_photos.services.reconciliation import UploadJournal

_logger = logging.getLogger(__name__)


@dataclass
class PhotoUploadService:
    """Stores a photo locally, replicates it remotely and records its metadata.

    Backends are tried strictly in order and the first success wins, so at
    most one remote copy is created per upload. The ledger write happens after
    the remote upload without a spanning transaction; the journal keeps enough
    information for the reconciliation sweep to remove the remote copy if the
    ledger write never lands.
    """

    compression: CompressionService
    cache: LocalCacheStore
    backends: list[BackendAdapter]
    ledger: PhotoLedger
    device_identity: DeviceIdentityProvider
    journal: UploadJournal | None = None
    backend_timeout_seconds: float | None = 20.0

    async def upload_photo(  # noqa: PLR0913
        self,
        image_bytes: bytes,
        owner_entity_id: str,
        category: PhotoCategory,
        notes: str | None = None,
        capture_date: datetime | None = None,
    ) -> str:
        """Store a photo and return its identity.

        Raises DeviceIdentityFailure before anything is stored when the device
        id cannot be read, AllTiersFailure when neither the cache nor any
        backend stored the image, and LedgerWriteFailure when the metadata
        write fails.
        """
        device_id = self._device_id()
        compressed = await self.compression.compress(image_bytes, category)
        local_path = await self._persist_locally(
            compressed.data, owner_entity_id, category
        )
        remote, failures = await self._run_chain(
            compressed.data, owner_entity_id, category
        )
        if local_path is None and remote is None:
            _logger.error(
                "All storage tiers failed for %s photo of %s",
                category.value,
                owner_entity_id,
            )
            raise AllTiersFailure(failures)

        now = datetime.now(tz=UTC)
        record = PhotoRecord(
            identity=str(uuid4()),
            owner_entity_id=owner_entity_id,
            category=category,
            capture_date=capture_date or now,
            notes=notes,
            created_at=now,
            local_path=local_path,
            remote_url=remote.url if remote else None,
            remote_backend=remote.backend if remote else None,
            uploading_device_id=device_id,
        )
        if remote is not None:
            self._record_intent(record.identity, remote, now)
        try:
            self.ledger.create_record(record)
        except Exception as exc:
            _logger.exception(
                "Ledger write failed for photo %s, remote copy %s is orphaned",
                record.identity,
                record.remote_url,
            )
            if local_path is not None:
                await self._discard_local(local_path)
            raise LedgerWriteFailure(
                f"Could not record photo {record.identity}: {exc}"
            ) from exc
        self._clear_intent(record.identity)
        _logger.info(
            "Stored photo %s (local=%s, remote=%s)",
            record.identity,
            local_path is not None,
            record.remote_backend,
        )
        return record.identity

    async def replicate_photo(self, identity: str) -> PhotoRecord | None:
        """Retry the backend chain for a photo that only exists locally."""
        record = self.ledger.get_record(identity)
        if record is None or record.remote_url or not record.local_path:
            return None
        if record.uploading_device_id != self._device_id():
            return None
        try:
            data = await self.cache.read(record.local_path)
        except OSError as exc:
            _logger.warning("Cached copy of %s is unreadable: %s", identity, exc)
            return None
        remote, _ = await self._run_chain(data, record.owner_entity_id, record.category)
        if remote is None:
            return None
        self._record_intent(identity, remote, datetime.now(tz=UTC))
        patched = self.ledger.patch_locations(
            identity, remote_url=remote.url, remote_backend=remote.backend
        )
        if patched is None:
            # Record vanished mid-replication; the sweep removes the copy.
            _logger.warning(
                "Photo %s was deleted during replication, %s is orphaned",
                identity,
                remote.url,
            )
            return None
        self._clear_intent(identity)
        return patched

    async def replicate_owner_photos(self, owner_entity_id: str) -> int:
        """Replicate every local-only photo of an owner; return how many moved."""
        replicated = 0
        for record in self.ledger.list_by_owner(owner_entity_id):
            if record.remote_url:
                continue
            if await self.replicate_photo(record.identity) is not None:
                replicated += 1
        return replicated

    def _device_id(self) -> str:
        try:
            return self.device_identity.get_device_id()
        except OSError as exc:
            _logger.error("Device id unavailable, refusing upload: %s", exc)
            raise DeviceIdentityFailure(f"Device id unavailable: {exc}") from exc

    async def _persist_locally(
        self, data: bytes, owner_entity_id: str, category: PhotoCategory
    ) -> str | None:
        try:
            return await self.cache.save(data, owner_entity_id, category)
        except LocalPersistFailure as exc:
            _logger.warning("Local cache failed, continuing remote-only: %s", exc)
            return None

    async def _run_chain(
        self, data: bytes, owner_entity_id: str, category: PhotoCategory
    ) -> tuple[UploadResult | None, list[BackendUploadFailure]]:
        failures: list[BackendUploadFailure] = []
        for backend in self.backends:
            result = await self._attempt(backend, data, owner_entity_id, category)
            if result.ok:
                return result, failures
            failure = BackendUploadFailure(backend.name, result.error or "no URL")
            _logger.warning("Backend %s failed: %s", backend.name, failure.reason)
            failures.append(failure)
        return None, failures

    async def _attempt(
        self,
        backend: BackendAdapter,
        data: bytes,
        owner_entity_id: str,
        category: PhotoCategory,
    ) -> UploadResult:
        try:
            return await asyncio.wait_for(
                backend.upload(data, owner_entity_id, category),
                timeout=self.backend_timeout_seconds,
            )
        except TimeoutError:
            return UploadResult.failure(
                backend.name, f"timed out after {self.backend_timeout_seconds}s"
            )
        except Exception as exc:
            _logger.exception("Backend %s raised during upload", backend.name)
            return UploadResult.failure(backend.name, str(exc) or type(exc).__name__)

    async def _discard_local(self, path: str) -> None:
        try:
            await self.cache.delete(path)
        except OSError as exc:
            _logger.warning("Could not remove unrecorded cache file %s: %s", path, exc)

    def _record_intent(
        self, identity: str, remote: UploadResult, created_at: datetime
    ) -> None:
        if self.journal is None or remote.url is None:
            return
        try:
            self.journal.record_intent(
                UploadIntent(
                    identity=identity,
                    backend=remote.backend,
                    remote_url=remote.url,
                    created_at=created_at,
                )
            )
        except OSError as exc:
            _logger.warning("Could not journal upload %s: %s", identity, exc)

    def _clear_intent(self, identity: str) -> None:
        if self.journal is None:
            return
        try:
            self.journal.clear(identity)
        except OSError as exc:
            _logger.warning("Could not clear upload intent %s: %s", identity, exc)
