"""Local cache interface for on-device photo copies."""

from datetime import timedelta
from typing import Protocol

from macrocoach_photos.domain.photos import PhotoCategory


class LocalCacheStore(Protocol):
    """Persistence interface for photo bytes kept on this device."""

    async def save(
        self, data: bytes, owner_entity_id: str, category: PhotoCategory
    ) -> str:
        """Store bytes and return the local path."""

    async def exists(self, path: str) -> bool:
        """Return True if the cached file is present."""

    async def read(self, path: str) -> bytes:
        """Return the bytes of a cached file."""

    async def delete(self, path: str) -> bool:
        """Remove a cached file, returning True if it was removed."""

    async def purge_older_than(self, max_age: timedelta) -> int:
        """Remove cached files older than max_age and return how many."""
