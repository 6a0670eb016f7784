"""Filesystem-backed local photo cache."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path

from macrocoach_photos.domain.photos import PhotoCategory, photo_file_name
from macrocoach_photos.errors import LocalPersistFailure
from macrocoach_photos.services.local_cache import LocalCacheStore

_logger = logging.getLogger(__name__)

_MAX_NAME_ATTEMPTS = 5


@dataclass
class FilesystemCacheStore(LocalCacheStore):
    """Stores photo bytes in an app-private directory on this device."""

    directory: Path
    _initialized: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        self.directory = Path(self.directory)
        self.initialize()

    def initialize(self) -> bool:
        """Create the cache directory once; later calls are no-ops."""
        if self._initialized:
            return True
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            _logger.warning("Could not create photo cache %s: %s", self.directory, exc)
            return False
        self._initialized = True
        return True

    async def save(
        self, data: bytes, owner_entity_id: str, category: PhotoCategory
    ) -> str:
        """Write bytes to a new file and return its path."""
        if not self.initialize():
            raise LocalPersistFailure(f"Cache directory unavailable: {self.directory}")
        try:
            path = await asyncio.to_thread(
                self._write_new, data, owner_entity_id, category
            )
        except OSError as exc:
            raise LocalPersistFailure(str(exc)) from exc
        return str(path)

    async def exists(self, path: str) -> bool:
        """Return True if the cached file is present."""
        return await asyncio.to_thread(Path(path).is_file)

    async def read(self, path: str) -> bytes:
        """Return the bytes of a cached file."""
        return await asyncio.to_thread(Path(path).read_bytes)

    async def delete(self, path: str) -> bool:
        """Remove a cached file inside the cache directory."""
        target = Path(path)
        if not target.resolve().is_relative_to(self.directory.resolve()):
            _logger.warning("Refusing to delete file outside the cache: %s", path)
            return False
        try:
            await asyncio.to_thread(target.unlink)
        except FileNotFoundError:
            return False
        return True

    async def purge_older_than(self, max_age: timedelta) -> int:
        """Remove cached photos whose modification time is older than max_age."""
        return await asyncio.to_thread(self._purge, max_age.total_seconds())

    def _write_new(
        self, data: bytes, owner_entity_id: str, category: PhotoCategory
    ) -> Path:
        timestamp = time.time_ns() // 1_000_000
        for attempt in range(_MAX_NAME_ATTEMPTS):
            path = self.directory / photo_file_name(
                owner_entity_id, category, timestamp + attempt
            )
            try:
                with path.open("xb") as handle:
                    handle.write(data)
            except FileExistsError:
                continue
            return path
        raise FileExistsError(f"No free cache file name for {owner_entity_id}")

    def _purge(self, max_age_seconds: float) -> int:
        cutoff = time.time() - max_age_seconds
        removed = 0
        for path in self.directory.glob("*.jpg"):
            try:
                if path.stat().st_mtime < cutoff:
                    path.unlink()
                    removed += 1
            except FileNotFoundError:
                continue
        return removed
