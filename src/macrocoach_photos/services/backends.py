"""Remote image-hosting backend interface."""

from typing import Protocol

from macrocoach_photos.domain.photos import PhotoCategory
from macrocoach_photos.domain.storage import UploadResult


class BackendAdapter(Protocol):
    """Capability set every remote image host implements."""

    name: str

    async def upload(
        self, data: bytes, owner_entity_id: str, category: PhotoCategory
    ) -> UploadResult:
        """Store bytes remotely and return a typed result."""

    async def fetch(self, url: str) -> bytes:
        """Download the bytes behind a hosted URL."""

    async def delete(self, url: str) -> bool:
        """Best-effort removal of a hosted image."""

    def handles(self, url: str) -> bool:
        """Return True if the URL was issued by this backend."""


def find_backend(
    backends: list[BackendAdapter], name: str | None, url: str | None
) -> BackendAdapter | None:
    """Pick the backend that owns a stored URL, preferring its recorded name."""
    if name:
        for backend in backends:
            if backend.name == name:
                return backend
    if url:
        for backend in backends:
            if backend.handles(url):
                return backend
    return None
